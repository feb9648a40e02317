"""Conversion result data model."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..errors import ErrorCode, MdDocxError


@dataclass
class ConversionWarning:
    """Non-fatal problem encountered during a conversion.

    Attributes:
        code: ErrorCode of the degraded step
        message: Human-readable description
        detail: Optional extra context (token kind, diagram id, ...)
    """
    code: ErrorCode
    message: str
    detail: Optional[str] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ConversionFailure:
    """Reason a conversion produced no output.

    Attributes:
        code: ErrorCode identifying the failure category
        message: Human-readable description
        details: Structured context for diagnostics
    """
    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: MdDocxError) -> "ConversionFailure":
        """Build a failure from a typed error."""
        return cls(code=error.code, message=error.message, details=dict(error.details))


@dataclass
class ConversionMetadata:
    """Measurements of a conversion call.

    Attributes:
        input_size: Input size in bytes
        output_size: Output size in bytes
        processing_time_ms: Wall-clock duration of the call
        diagram_count: Diagrams rendered and embedded
        internal_link_count: Links to in-document anchors
        external_link_count: Links to external URLs
        image_count: Images embedded or extracted
    """
    input_size: int = 0
    output_size: int = 0
    processing_time_ms: float = 0.0
    diagram_count: int = 0
    internal_link_count: int = 0
    external_link_count: int = 0
    image_count: int = 0


@dataclass
class ConversionResult:
    """Result of a Markdown to DOCX or DOCX to Markdown conversion.

    Contains the converted output along with metadata and warnings about
    degraded features encountered during conversion. Failed conversions have
    no output and carry a ConversionFailure instead.

    Attributes:
        success: Whether output was produced
        output: DOCX bytes or Markdown text
        metadata: Measurements of the call
        warnings: Warning messages in the order they were raised
        warning_records: Structured form of ``warnings``
        error: Failure details when ``success`` is False
    """
    success: bool
    output: Optional[Union[bytes, str]] = None
    metadata: ConversionMetadata = field(default_factory=ConversionMetadata)
    warnings: List[str] = field(default_factory=list)
    warning_records: List[ConversionWarning] = field(default_factory=list)
    error: Optional[ConversionFailure] = None

    @classmethod
    def ok(
        cls,
        output: Union[bytes, str],
        metadata: ConversionMetadata,
        warnings: Optional[List[ConversionWarning]] = None,
    ) -> "ConversionResult":
        """Build a successful result."""
        records = list(warnings or [])
        return cls(
            success=True,
            output=output,
            metadata=metadata,
            warnings=[str(w) for w in records],
            warning_records=records,
        )

    @classmethod
    def failed(
        cls,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        metadata: Optional[ConversionMetadata] = None,
        warnings: Optional[List[ConversionWarning]] = None,
    ) -> "ConversionResult":
        """Build a failed result with no output."""
        records = list(warnings or [])
        return cls(
            success=False,
            output=None,
            metadata=metadata or ConversionMetadata(),
            warnings=[str(w) for w in records],
            warning_records=records,
            error=ConversionFailure(code=code, message=message, details=details or {}),
        )

    @classmethod
    def from_error(
        cls,
        error: MdDocxError,
        metadata: Optional[ConversionMetadata] = None,
        warnings: Optional[List[ConversionWarning]] = None,
    ) -> "ConversionResult":
        """Build a failed result from a typed error."""
        return cls.failed(error.code, error.message, error.details, metadata, warnings)
