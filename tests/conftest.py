"""Root pytest configuration for all tests.

Provides shared fixtures: a fake diagram renderer, a converter wired to it,
and DOCX bytes produced by the Markdown to DOCX path.
"""

import logging

import pytest

from mddocx.markdown_to_docx.converter import MarkdownToDocxConverter
from tests.fixtures import SAMPLE_MARKDOWN_SIMPLE, FakeDiagramRenderer, fake_renderer_factory

# Conversion warnings are expected in many tests; keep test output readable.
logging.getLogger("mddocx").setLevel(logging.ERROR)


@pytest.fixture
def fake_renderer():
    """Diagram renderer that draws PNGs with Pillow."""
    return FakeDiagramRenderer()


@pytest.fixture
def md_converter(fake_renderer):
    """MarkdownToDocxConverter that never launches a browser."""
    return MarkdownToDocxConverter(renderer_factory=fake_renderer_factory(fake_renderer))


@pytest.fixture
def simple_docx(md_converter):
    """DOCX bytes for SAMPLE_MARKDOWN_SIMPLE."""
    result = md_converter.convert(SAMPLE_MARKDOWN_SIMPLE)
    assert result.success
    return result.output
