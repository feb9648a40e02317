"""Markdown to DOCX conversion."""

from .blocks import BlockBuilder
from .converter import MarkdownToDocxConverter, default_renderer_factory
from .frontmatter import FrontMatterHandler
from .inlines import InlineBuilder
from .session import ConversionSession, HeadingEntry
from .tokenizer import MarkdownTokenizer, normalize_nested_links
from .writer import DocxWriter

__all__ = [
    'BlockBuilder',
    'MarkdownToDocxConverter',
    'default_renderer_factory',
    'FrontMatterHandler',
    'InlineBuilder',
    'ConversionSession',
    'HeadingEntry',
    'MarkdownTokenizer',
    'normalize_nested_links',
    'DocxWriter',
]
