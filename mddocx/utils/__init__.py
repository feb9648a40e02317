"""File helpers."""

from .file_utils import (
    DOCX_EXTENSIONS,
    LARGE_FILE_SIZE,
    MARKDOWN_EXTENSIONS,
    FileValidation,
    ensure_directory,
    format_bytes,
    read_bytes,
    read_text,
    validate_file,
    write_output,
)

__all__ = [
    'DOCX_EXTENSIONS',
    'LARGE_FILE_SIZE',
    'MARKDOWN_EXTENSIONS',
    'FileValidation',
    'ensure_directory',
    'format_bytes',
    'read_bytes',
    'read_text',
    'validate_file',
    'write_output',
]
