"""DOCX to Markdown conversion."""

from .converter import DocxToMarkdownConverter
from .extractor import DocxExtractor, ExtractedImage, ExtractionResult
from .html_cleaner import HtmlCleaner
from .list_reconstructor import ListReconstructor
from .postprocessor import MarkdownPostProcessor
from .transcoder import HtmlTranscoder

__all__ = [
    'DocxToMarkdownConverter',
    'DocxExtractor',
    'ExtractedImage',
    'ExtractionResult',
    'HtmlCleaner',
    'ListReconstructor',
    'MarkdownPostProcessor',
    'HtmlTranscoder',
]
