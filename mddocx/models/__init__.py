"""Shared data models for both conversion directions."""

from .conversion_result import (
    ConversionFailure,
    ConversionMetadata,
    ConversionResult,
    ConversionWarning,
)
from .diagram import DiagramProcessingResult, DiagramRecord, RenderedDiagram
from .html_node import HtmlNode
from .options import DocxToMarkdownOptions, MarkdownToDocxOptions

__all__ = [
    'ConversionFailure',
    'ConversionMetadata',
    'ConversionResult',
    'ConversionWarning',
    'DiagramProcessingResult',
    'DiagramRecord',
    'RenderedDiagram',
    'HtmlNode',
    'DocxToMarkdownOptions',
    'MarkdownToDocxOptions',
]
