"""File helpers shared by the converters, the facade and the CLI.

Reads validate existence, type and extension first; writes go through a
temporary file in the target directory and are moved into place, so a failed
write never leaves a truncated output behind.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Iterable, List, Union

from ..errors import DocumentNotFoundError, FilesystemError, InvalidFileError

logger = logging.getLogger(__name__)

LARGE_FILE_SIZE = 50 * 1024 * 1024  # 50 MB in bytes

MARKDOWN_EXTENSIONS = ('.md', '.markdown')
DOCX_EXTENSIONS = ('.docx',)


@dataclass
class FileValidation:
    """Outcome of validate_file.

    Attributes:
        path: Validated path
        size: File size in bytes
        warnings: Non-fatal findings (e.g. LARGE_FILE_SIZE)
    """
    path: str
    size: int
    warnings: List[str] = field(default_factory=list)


def get_extension(file_path: str) -> str:
    return os.path.splitext(file_path)[1].lower()


def format_bytes(size: float) -> str:
    """Human readable size, e.g. ``format_bytes(1536) == '1.50 KB'``."""
    units = ['B', 'KB', 'MB', 'GB', 'TB']
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f} {units[index]}"


def validate_file(file_path: str, extensions: Iterable[str]) -> FileValidation:
    """Check that a file exists, is a regular file and has an allowed extension.

    Args:
        file_path: Path to check
        extensions: Allowed extensions including the dot (case-insensitive)

    Returns:
        FileValidation with size and warnings

    Raises:
        DocumentNotFoundError: If the path does not exist
        InvalidFileError: If the path is not a file or has the wrong extension
    """
    if not os.path.exists(file_path):
        raise DocumentNotFoundError(file_path)
    if not os.path.isfile(file_path):
        raise InvalidFileError(file_path, "path is not a file")

    allowed = [ext.lower() for ext in extensions]
    extension = get_extension(file_path)
    if allowed and extension not in allowed:
        raise InvalidFileError(
            file_path,
            f"invalid file type '{extension or '(none)'}'. Allowed types: {', '.join(allowed)}",
        )

    size = os.path.getsize(file_path)
    validation = FileValidation(path=file_path, size=size)
    if size > LARGE_FILE_SIZE:
        message = f"LARGE_FILE_SIZE: Large file detected ({format_bytes(size)}). Processing may be slow."
        logger.warning(f"{file_path}: {message}")
        validation.warnings.append(message)
    return validation


def read_text(file_path: str) -> str:
    """Read a UTF-8 text file.

    Raises:
        DocumentNotFoundError: If the file does not exist
        FilesystemError: If the file cannot be read or decoded
    """
    if not os.path.exists(file_path):
        raise DocumentNotFoundError(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(file_path, 'read', str(e)) from e


def read_bytes(file_path: str) -> bytes:
    """Read a binary file.

    Raises:
        DocumentNotFoundError: If the file does not exist
        FilesystemError: If the file cannot be read
    """
    if not os.path.exists(file_path):
        raise DocumentNotFoundError(file_path)
    try:
        with open(file_path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise FilesystemError(file_path, 'read', str(e)) from e


def write_output(file_path: str, content: Union[str, bytes]) -> None:
    """Write text (UTF-8) or bytes, creating parent directories.

    Raises:
        FilesystemError: If the directory cannot be created or the write fails
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise FilesystemError(directory, 'create_directory', str(e)) from e

    data = content.encode('utf-8') if isinstance(content, str) else content
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix='.mddocx-', suffix='.tmp')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(temp_path, file_path)
    except OSError as e:
        try:
            os.remove(temp_path)
        except OSError:
            logger.warning(f"Failed to remove temp file {temp_path}")
        raise FilesystemError(file_path, 'write', str(e)) from e

    logger.debug(f"Wrote {format_bytes(len(data))} to {file_path}")


def ensure_directory(directory: str) -> None:
    """Create ``directory`` (and parents) if missing.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise FilesystemError(directory, 'create_directory', str(e)) from e
