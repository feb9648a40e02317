"""Unit tests for docx_to_markdown.converter module.

Round-trip cases feed DOCX produced by MarkdownToDocxConverter back through
the real pipeline; other cases use a mocked extractor.
"""

import os
from unittest.mock import Mock, patch

import pytest

from mddocx.docx_to_markdown.converter import RAW_TEXT_WARNING, DocxToMarkdownConverter
from mddocx.docx_to_markdown.extractor import (
    DocxExtractor,
    ExtractedImage,
    ExtractionResult,
    ExtractorMessage,
)
from mddocx.errors import ErrorCode, TranscodeError
from mddocx.models.options import DocxToMarkdownOptions
from tests.fixtures import SAMPLE_MARKDOWN_WITH_LINKS, SAMPLE_MARKDOWN_WITH_TABLES, make_png


def _converter(extraction):
    extractor = Mock(spec=DocxExtractor)
    extractor.extract.return_value = extraction
    return DocxToMarkdownConverter(extractor=extractor)


class TestRoundTrip:
    """Test cases converting DOCX written by the Markdown path."""

    def test_simple_document(self, simple_docx):
        """Headings and lists survive the round trip."""
        result = DocxToMarkdownConverter().convert(simple_docx)

        assert result.success
        assert "# Test Page" in result.output
        assert "- Item 1" in result.output
        assert "1. First" in result.output
        assert result.metadata.input_size == len(simple_docx)
        assert result.metadata.output_size == len(result.output.encode('utf-8'))

    def test_inline_anchors(self, simple_docx):
        """The inline anchor style puts an anchor before each heading."""
        options = DocxToMarkdownOptions(heading_anchor_style='inline')
        result = DocxToMarkdownConverter().convert(simple_docx, options)

        assert result.output.startswith('<a id="test-page"></a>\n# Test Page')

    def test_internal_links(self, md_converter):
        """Internal links point at slugs of their text."""
        docx = md_converter.convert(SAMPLE_MARKDOWN_WITH_LINKS).output
        result = DocxToMarkdownConverter().convert(docx)

        assert "[Setup](#setup)" in result.output
        assert "[Setup again](#setup-again)" in result.output
        assert "[the site](https://example.com)" in result.output
        assert result.metadata.external_link_count == 1

    def test_table(self, md_converter):
        """Tables come back as pipe tables."""
        docx = md_converter.convert(SAMPLE_MARKDOWN_WITH_TABLES).output
        result = DocxToMarkdownConverter().convert(docx)

        assert "| Name | Role | Team |" in result.output
        assert "Alice" in result.output
        assert "| --- | --- | --- |" in result.output

    def test_single_column_table_shape(self, md_converter):
        """A 3x1 table comes back with four rows and one column."""
        docx = md_converter.convert("| Name |\n|---|\n| a |\n| b |\n| c |\n").output
        result = DocxToMarkdownConverter().convert(docx)
        rows = [line for line in result.output.splitlines() if line.startswith("|")]

        assert rows == ["| Name |", "| --- |", "| a |", "| b |", "| c |"]


class TestFailures:
    """Test cases for failed conversions."""

    def test_empty_input(self):
        result = DocxToMarkdownConverter().convert(b"")

        assert not result.success
        assert result.output is None
        assert result.error.code == ErrorCode.EMPTY_INPUT

    def test_garbage_input(self):
        """Bytes that are not a DOCX package fail with ExtractionFailed."""
        result = DocxToMarkdownConverter().convert(b"not a zip file")

        assert not result.success
        assert result.error.code == ErrorCode.EXTRACTION_FAILED

    def test_transcode_failure(self):
        """Transcoder failures surface as TranscodeFailed."""
        converter = _converter(ExtractionResult(content="<p>x</p>"))
        with patch('mddocx.docx_to_markdown.converter.HtmlTranscoder') as transcoder:
            transcoder.return_value.transcode.side_effect = TranscodeError("boom")
            result = converter.convert(b"docx")

        assert not result.success
        assert result.error.code == ErrorCode.TRANSCODE_FAILED

    def test_unexpected_error(self):
        """Unexpected exceptions become ConversionFailed."""
        extractor = Mock(spec=DocxExtractor)
        extractor.extract.side_effect = RuntimeError("surprise")
        result = DocxToMarkdownConverter(extractor=extractor).convert(b"docx")

        assert result.error.code == ErrorCode.CONVERSION_FAILED
        assert "surprise" in result.error.message


class TestDegradedExtraction:
    """Test cases for warnings from extraction."""

    def test_raw_text_fallback(self):
        """Raw text is returned with a fallback warning."""
        converter = _converter(ExtractionResult(content="Plain words", is_raw_text=True))
        result = converter.convert(b"docx")

        assert result.success
        assert result.output == "Plain words"
        assert result.warnings == [RAW_TEXT_WARNING]
        assert result.warning_records[0].code == ErrorCode.EXTRACTION_FAILED

    def test_message_summaries(self):
        """Extractor messages are summarized per type."""
        messages = [
            ExtractorMessage("warning", "Unrecognised style A"),
            ExtractorMessage("warning", "Unrecognised style B"),
            ExtractorMessage("error", "Broken image"),
        ]
        result = _converter(ExtractionResult(content="<p>x</p>", messages=messages)).convert(b"docx")

        assert result.warnings == [
            "2 formatting warnings during conversion",
            "1 errors during conversion",
        ]

    def test_detailed_messages(self):
        """detailed_warnings lists each message under its summary."""
        messages = [ExtractorMessage("warning", "Unrecognised style A")]
        options = DocxToMarkdownOptions(detailed_warnings=True)
        result = _converter(ExtractionResult(content="<p>x</p>", messages=messages)).convert(b"docx", options)

        assert result.warnings == [
            "1 formatting warnings during conversion",
            "  1. Unrecognised style A",
        ]


class TestNestedLists:
    """Test cases for lists rebuilt from flat indented paragraphs."""

    @pytest.mark.parametrize("child,grandchild", [
        ('<p style="margin-left: 18pt">• Child</p>', '<p style="margin-left: 36pt">• Grandchild</p>'),
        ("<p>\u00a0\u00a0• Child</p>", "<p>\u00a0\u00a0\u00a0\u00a0• Grandchild</p>"),
    ])
    def test_three_levels(self, child, grandchild):
        """Parent, child and grandchild keep their order and indentation."""
        html = f"<p>• Parent</p>{child}{grandchild}<p>• Sibling</p>"
        result = _converter(ExtractionResult(content=html)).convert(b"docx")
        lines = [line for line in result.output.splitlines() if line.strip()]

        assert lines == ["- Parent", "  - Child", "    - Grandchild", "- Sibling"]
        indents = [len(line) - len(line.lstrip(" ")) for line in lines[:3]]
        assert indents == sorted(indents)


class TestImages:
    """Test cases for image extraction."""

    def test_images_saved_and_linked(self, tmp_path):
        """Extracted images are written under image_output_dir and referenced."""
        png = make_png()
        extraction = ExtractionResult(
            content='<p><img src="image_1.png" alt="Chart"/></p>',
            images=[ExtractedImage("image_1.png", png)],
        )
        options = DocxToMarkdownOptions(extract_images=True, image_output_dir="assets")
        result = _converter(extraction).convert(b"docx", options, image_base_dir=str(tmp_path))

        assert result.success
        assert "![Chart](./assets/image_1.png)" in result.output
        assert (tmp_path / "assets" / "image_1.png").read_bytes() == png
        assert result.metadata.image_count == 1
        assert "1 images extracted" in result.warnings

    def test_save_failure_is_warning(self, tmp_path):
        """Failing to save images is reported without failing the call."""
        blocker = tmp_path / "assets"
        blocker.write_text("not a directory")
        extraction = ExtractionResult(
            content='<p><img src="image_1.png" alt="Chart"/></p>',
            images=[ExtractedImage("image_1.png", b"data")],
        )
        options = DocxToMarkdownOptions(extract_images=True, image_output_dir="assets")
        result = _converter(extraction).convert(b"docx", options, image_base_dir=str(tmp_path))

        assert result.success
        assert any(w.code == ErrorCode.FILESYSTEM_ERROR for w in result.warning_records)


class TestConvertFile:
    """Test cases for DocxToMarkdownConverter.convert_file."""

    def test_missing_file(self, tmp_path):
        result = DocxToMarkdownConverter().convert_file(str(tmp_path / "missing.docx"))

        assert not result.success
        assert result.error.code == ErrorCode.NOT_FOUND

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = DocxToMarkdownConverter().convert_file(str(path))

        assert result.error.code == ErrorCode.INVALID_FILE

    def test_converts_file(self, tmp_path, simple_docx):
        path = tmp_path / "doc.docx"
        path.write_bytes(simple_docx)
        result = DocxToMarkdownConverter().convert_file(str(path))

        assert result.success
        assert "# Test Page" in result.output
        assert os.path.exists(path)
