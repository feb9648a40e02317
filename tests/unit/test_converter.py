"""Unit tests for the MarkdownDocxConverter facade."""

import io
from unittest.mock import patch

import pytest
from docx import Document

from mddocx.converter import MarkdownDocxConverter
from mddocx.errors import DocumentNotFoundError, ErrorCode
from mddocx.models.options import DocxToMarkdownOptions, MarkdownToDocxOptions
from tests.fixtures import (
    SAMPLE_MARKDOWN_SIMPLE,
    SAMPLE_MARKDOWN_WITH_DIAGRAMS,
    FakeDiagramRenderer,
    fake_renderer_factory,
)


@pytest.fixture
def converter():
    return MarkdownDocxConverter(renderer_factory=fake_renderer_factory(FakeDiagramRenderer()))


class TestOptions:
    """Test cases for option merging."""

    def test_dict_overrides_defaults(self):
        """Dict options are merged over constructor defaults."""
        converter = MarkdownDocxConverter(
            markdown_defaults=MarkdownToDocxOptions(template='modern', author="Team"),
        )
        merged = converter._md_options({'generate_toc': True, 'author': None})

        assert merged.template == 'modern'
        assert merged.generate_toc
        assert merged.author == "Team"

    def test_instance_used_as_given(self):
        converter = MarkdownDocxConverter(markdown_defaults=MarkdownToDocxOptions(template='modern'))
        options = MarkdownToDocxOptions()
        assert converter._md_options(options) is options

    def test_docx_defaults(self):
        converter = MarkdownDocxConverter(docx_defaults=DocxToMarkdownOptions(heading_anchor_style='inline'))
        assert converter._docx_options(None).heading_anchor_style == 'inline'


class TestInMemory:
    """Test cases for in-memory conversions."""

    def test_round_trip(self, converter):
        """Markdown to DOCX and back keeps the document title."""
        docx = converter.markdown_to_docx(SAMPLE_MARKDOWN_SIMPLE)
        markdown = converter.docx_to_markdown(docx.output)

        assert docx.success and markdown.success
        assert "# Test Page" in markdown.output

    def test_defaults_applied(self, converter):
        converter.markdown_defaults = MarkdownToDocxOptions(title="Default Title")
        result = converter.markdown_to_docx("# A")
        assert Document(io.BytesIO(result.output)).core_properties.title == "Default Title"

    def test_empty_input(self, converter):
        assert converter.markdown_to_docx("").error.code == ErrorCode.EMPTY_INPUT
        assert converter.docx_to_markdown(b"").error.code == ErrorCode.EMPTY_INPUT


class TestFiles:
    """Test cases for file conversions."""

    def test_markdown_file(self, converter, tmp_path):
        """The DOCX is written to the output path, creating directories."""
        source = tmp_path / "doc.md"
        source.write_text(SAMPLE_MARKDOWN_SIMPLE)
        target = tmp_path / "out" / "doc.docx"

        result = converter.markdown_file_to_docx(str(source), str(target))

        assert result.success
        assert target.read_bytes() == result.output

    def test_missing_markdown_file(self, converter, tmp_path):
        """File problems become FileConversionFailed with the cause in details."""
        result = converter.markdown_file_to_docx(str(tmp_path / "missing.md"), str(tmp_path / "x.docx"))

        assert result.error.code == ErrorCode.FILE_CONVERSION_FAILED
        assert result.error.details['cause'] == ErrorCode.NOT_FOUND.value
        assert result.error.details['input'].endswith("missing.md")
        assert not (tmp_path / "x.docx").exists()

    def test_wrong_extension(self, converter, tmp_path):
        source = tmp_path / "doc.txt"
        source.write_text("# x")
        result = converter.markdown_file_to_docx(str(source), str(tmp_path / "x.docx"))

        assert result.error.details['cause'] == ErrorCode.INVALID_FILE.value

    def test_conversion_failure_passed_through(self, converter, tmp_path):
        """Content failures keep their own code and write nothing."""
        source = tmp_path / "empty.md"
        source.write_text("   ")
        target = tmp_path / "empty.docx"

        result = converter.markdown_file_to_docx(str(source), str(target))

        assert result.error.code == ErrorCode.EMPTY_INPUT
        assert not target.exists()

    def test_large_file_warning_prepended(self, converter, tmp_path):
        source = tmp_path / "doc.md"
        source.write_text(SAMPLE_MARKDOWN_WITH_DIAGRAMS)
        with patch('mddocx.utils.file_utils.LARGE_FILE_SIZE', 0):
            result = converter.markdown_file_to_docx(str(source), str(tmp_path / "doc.docx"))

        assert result.warnings[0].startswith("LARGE_FILE_SIZE")
        assert result.warning_records[0].code == ErrorCode.LARGE_FILE
        assert len(result.warnings) > 1

    def test_docx_file(self, converter, tmp_path, simple_docx):
        source = tmp_path / "doc.docx"
        source.write_bytes(simple_docx)
        target = tmp_path / "doc.md"

        result = converter.docx_file_to_markdown(str(source), str(target))

        assert result.success
        assert target.read_text(encoding='utf-8') == result.output

    def test_missing_docx_file(self, converter, tmp_path):
        result = converter.docx_file_to_markdown(str(tmp_path / "missing.docx"), str(tmp_path / "x.md"))

        assert result.error.code == ErrorCode.FILE_CONVERSION_FAILED
        assert result.error.details['cause'] == ErrorCode.NOT_FOUND.value
        assert result.error.details['output'].endswith("x.md")


class TestBatch:
    """Test cases for batch conversions."""

    def test_batch_markdown(self, converter, tmp_path):
        """Each input gets <stem>.docx; failures do not stop the batch."""
        good = tmp_path / "good.md"
        good.write_text("# Good")
        missing = tmp_path / "missing.md"
        out_dir = tmp_path / "out"

        results = converter.batch_markdown_to_docx([str(good), str(missing)], str(out_dir))

        assert [r[2].success for r in results] == [True, False]
        assert results[0][1] == str(out_dir / "good.docx")
        assert (out_dir / "good.docx").exists()

    def test_batch_docx(self, converter, tmp_path, simple_docx):
        source = tmp_path / "doc.docx"
        source.write_bytes(simple_docx)

        results = converter.batch_docx_to_markdown([str(source)], str(tmp_path / "md"))

        assert results[0][2].success
        assert (tmp_path / "md" / "doc.md").exists()

    def test_output_dir_failure(self, converter, tmp_path):
        """An unusable output directory fails every file."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        results = converter.batch_markdown_to_docx(["a.md", "b.md"], str(blocker))

        assert len(results) == 2
        assert all(r[2].error.details['cause'] == ErrorCode.FILESYSTEM_ERROR.value for r in results)


class TestHelpers:
    """Test cases for validation and listing helpers."""

    def test_validate_and_diagrams(self):
        assert MarkdownDocxConverter.validate_markdown("# T").is_valid
        assert MarkdownDocxConverter.has_diagrams(SAMPLE_MARKDOWN_WITH_DIAGRAMS)
        assert not MarkdownDocxConverter.has_diagrams(SAMPLE_MARKDOWN_SIMPLE)

    def test_stats(self, tmp_path):
        path = tmp_path / "doc.md"
        path.write_text("# Hello world")
        stats = MarkdownDocxConverter.get_conversion_stats(str(path))

        assert stats.word_count == 3
        assert stats.file_size == "13.00 B"

    def test_stats_missing_file(self, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            MarkdownDocxConverter.get_conversion_stats(str(tmp_path / "nope.md"))

    def test_listings(self):
        assert 'simple' in MarkdownDocxConverter.available_templates()
        assert MarkdownDocxConverter.available_diagram_themes()[0] == 'default'
