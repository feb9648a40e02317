"""Typed exception hierarchy for conversion errors.

This module defines all custom exceptions raised inside the conversion
engine. All exceptions inherit from MdDocxError and carry a machine-readable
ErrorCode so that converters can turn them into failed ConversionResults and
the CLI can map them onto exit codes.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable codes carried by errors, failed results and warnings."""
    EMPTY_INPUT = "EmptyInput"
    EXTRACTION_FAILED = "ExtractionFailed"
    TRANSCODE_FAILED = "TranscodeFailed"
    DIAGRAM_RENDER_FAILED = "DiagramRenderFailed"
    DIAGRAM_TIMEOUT = "DiagramTimeout"
    UNSUPPORTED_TOKEN = "UnsupportedToken"
    INVALID_FILE = "InvalidFile"
    NOT_FOUND = "NotFound"
    CONVERSION_FAILED = "ConversionFailed"
    FILE_CONVERSION_FAILED = "FileConversionFailed"
    CONFIG_ERROR = "ConfigError"
    BROKEN_LINK = "BrokenLink"
    FILESYSTEM_ERROR = "FilesystemError"
    EXTRACTOR_MESSAGE = "ExtractorMessage"
    IMAGES_EXTRACTED = "ImagesExtracted"
    LARGE_FILE = "LargeFileSize"


class MdDocxError(Exception):
    """Base exception for all markdown-docx-converter errors.

    Use this to catch any application-level error from the converter.

    Attributes:
        code: ErrorCode identifying the failure category
        details: Optional structured context for diagnostics
    """

    code = ErrorCode.CONVERSION_FAILED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptyInputError(MdDocxError):
    """Raised when the input document is empty or whitespace only."""

    code = ErrorCode.EMPTY_INPUT

    def __init__(self, kind: str = "Markdown"):
        super().__init__(f"{kind} content cannot be empty")
        self.kind = kind


class ExtractionError(MdDocxError):
    """Raised when the DOCX body cannot be extracted as HTML or raw text."""

    code = ErrorCode.EXTRACTION_FAILED

    def __init__(self, reason: str):
        super().__init__(f"DOCX extraction failed: {reason}")
        self.reason = reason


class TranscodeError(MdDocxError):
    """Raised when cleaned HTML cannot be transcoded to Markdown."""

    code = ErrorCode.TRANSCODE_FAILED

    def __init__(self, reason: str):
        super().__init__(f"HTML to Markdown transcoding failed: {reason}")
        self.reason = reason


class DiagramRenderError(MdDocxError):
    """Raised when a single diagram cannot be rendered."""

    code = ErrorCode.DIAGRAM_RENDER_FAILED

    def __init__(self, diagram_id: str, reason: str):
        super().__init__(f"Failed to render diagram {diagram_id}: {reason}")
        self.diagram_id = diagram_id
        self.reason = reason


class DiagramTimeoutError(MdDocxError):
    """Raised when diagram rendering exceeds the caller's time budget."""

    code = ErrorCode.DIAGRAM_TIMEOUT

    def __init__(self, timeout_s: float, rendered: int = 0):
        super().__init__(
            f"Diagram rendering exceeded {timeout_s:g}s "
            f"({rendered} diagram(s) rendered before timeout)"
        )
        self.timeout_s = timeout_s
        self.rendered = rendered


class UnsupportedTokenError(MdDocxError):
    """Raised by a builder for a token kind it cannot map."""

    code = ErrorCode.UNSUPPORTED_TOKEN

    def __init__(self, kind: str):
        super().__init__(f"Unsupported token type: {kind}")
        self.kind = kind


class InvalidFileError(MdDocxError):
    """Raised when a file has the wrong extension or is not a regular file."""

    code = ErrorCode.INVALID_FILE

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Invalid file {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


class DocumentNotFoundError(MdDocxError):
    """Raised when an input file does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, file_path: str):
        super().__init__(f"File not found: {file_path}")
        self.file_path = file_path


class FilesystemError(MdDocxError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    code = ErrorCode.FILESYSTEM_ERROR

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(MdDocxError):
    """Raised when configuration is invalid or malformed."""

    code = ErrorCode.CONFIG_ERROR

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message
