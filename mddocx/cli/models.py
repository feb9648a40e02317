"""Data models for CLI operations."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Unexpected error or invalid configuration
    - CONVERSION_FAILED (2): At least one conversion produced no output
    - INPUT_ERROR (3): Input file or directory missing or of the wrong type

    Example:
        >>> raise typer.Exit(ExitCode.INPUT_ERROR)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONVERSION_FAILED = 2
    INPUT_ERROR = 3


@dataclass
class CliConfig:
    """Defaults loaded from a ``--config`` YAML file.

    Attributes:
        markdown_to_docx: Overrides for MarkdownToDocxOptions fields
        docx_to_markdown: Overrides for DocxToMarkdownOptions fields
        output_dir: Default output directory for ``batch``
    """
    markdown_to_docx: Dict[str, Any] = field(default_factory=dict)
    docx_to_markdown: Dict[str, Any] = field(default_factory=dict)
    output_dir: str = './output'


@dataclass
class BatchSummary:
    """Outcome counts of a batch run."""
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
