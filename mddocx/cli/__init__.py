"""Command-line interface for Markdown and DOCX conversion.

This package provides the `md-docx` CLI tool: single-file conversion in both
directions, batch conversion of a directory, Markdown validation and
statistics, with YAML config defaults and Rich terminal output.
"""

from .config import ConfigLoader
from .models import BatchSummary, CliConfig, ExitCode
from .output import OutputHandler

__all__ = [
    'ConfigLoader',
    'BatchSummary',
    'CliConfig',
    'ExitCode',
    'OutputHandler',
]
