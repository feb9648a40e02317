"""Bidirectional Markdown and DOCX conversion.

Markdown is converted to DOCX with styled headings, bookmarks, numbered
lists, tables and rendered Mermaid diagrams; DOCX is converted back to
Markdown with list and table structure reconstructed from the extracted HTML.
"""

from .converter import MarkdownDocxConverter
from .docx_to_markdown import DocxToMarkdownConverter
from .errors import ErrorCode, MdDocxError
from .markdown_to_docx import MarkdownToDocxConverter
from .models import (
    ConversionFailure,
    ConversionMetadata,
    ConversionResult,
    ConversionWarning,
    DocxToMarkdownOptions,
    MarkdownToDocxOptions,
)
from .validation import MarkdownStats, ValidationReport, markdown_stats, validate_markdown

__version__ = "0.1.0"

__all__ = [
    'MarkdownDocxConverter',
    'DocxToMarkdownConverter',
    'MarkdownToDocxConverter',
    'ErrorCode',
    'MdDocxError',
    'ConversionFailure',
    'ConversionMetadata',
    'ConversionResult',
    'ConversionWarning',
    'DocxToMarkdownOptions',
    'MarkdownToDocxOptions',
    'MarkdownStats',
    'ValidationReport',
    'markdown_stats',
    'validate_markdown',
]
