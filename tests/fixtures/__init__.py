"""Test fixtures for conversion tests.

This module provides test fixtures for:
- Sample Markdown documents
- A diagram renderer that draws PNGs with Pillow instead of a browser
"""

from .sample_markdown import (
    SAMPLE_MARKDOWN_SIMPLE,
    SAMPLE_MARKDOWN_WITH_TABLES,
    SAMPLE_MARKDOWN_WITH_CODE_BLOCKS,
    SAMPLE_MARKDOWN_WITH_LINKS,
    SAMPLE_MARKDOWN_WITH_FRONT_MATTER,
    SAMPLE_MARKDOWN_WITH_DIAGRAMS,
    SAMPLE_MARKDOWN_WITH_LISTS,
)
from .renderers import CrashingDiagramRenderer, FakeDiagramRenderer, fake_renderer_factory, make_png

__all__ = [
    "SAMPLE_MARKDOWN_SIMPLE",
    "SAMPLE_MARKDOWN_WITH_TABLES",
    "SAMPLE_MARKDOWN_WITH_CODE_BLOCKS",
    "SAMPLE_MARKDOWN_WITH_LINKS",
    "SAMPLE_MARKDOWN_WITH_FRONT_MATTER",
    "SAMPLE_MARKDOWN_WITH_DIAGRAMS",
    "SAMPLE_MARKDOWN_WITH_LISTS",
    "CrashingDiagramRenderer",
    "FakeDiagramRenderer",
    "fake_renderer_factory",
    "make_png",
]
