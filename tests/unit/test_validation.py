"""Unit tests for the validation module."""

from mddocx.validation import markdown_stats, validate_markdown
from tests.fixtures import (
    SAMPLE_MARKDOWN_SIMPLE,
    SAMPLE_MARKDOWN_WITH_DIAGRAMS,
    SAMPLE_MARKDOWN_WITH_LINKS,
    SAMPLE_MARKDOWN_WITH_TABLES,
)


class TestValidateMarkdown:
    """Test cases for validate_markdown."""

    def test_clean_document(self):
        """A document with headings and no problems is valid."""
        report = validate_markdown(SAMPLE_MARKDOWN_SIMPLE)

        assert report.is_valid
        assert report.warnings == []

    def test_no_headings(self):
        report = validate_markdown("Just a paragraph.")

        assert not report.is_valid
        assert report.warnings == ["No headings found - consider adding section headers"]

    def test_malformed_url(self):
        report = validate_markdown("# T\n\n[bad](http:/example.com)")
        assert "Potentially malformed URL: http:/example.com" in report.warnings

    def test_missing_heading_link(self):
        """Links to headings that do not exist are reported."""
        report = validate_markdown(SAMPLE_MARKDOWN_WITH_LINKS)

        assert report.warnings == ["Link to missing heading: #does-not-exist"]
        assert not report.is_valid

    def test_duplicate_heading_links_resolve(self):
        """'#setup-1' points at the second 'Setup' heading."""
        report = validate_markdown(SAMPLE_MARKDOWN_WITH_LINKS)
        assert not any("#setup-1" in w for w in report.warnings)

    def test_diagram_suggestion(self):
        report = validate_markdown(SAMPLE_MARKDOWN_WITH_DIAGRAMS)
        assert "Found 2 Mermaid diagram(s) - will be converted to images" in report.suggestions

    def test_table_suggestion(self):
        """Each pipe row is counted, delimiter row included."""
        report = validate_markdown(SAMPLE_MARKDOWN_WITH_TABLES)
        assert "Found 4 table row(s) - formatting will be preserved" in report.suggestions

    def test_empty(self):
        assert not validate_markdown("").is_valid


class TestMarkdownStats:
    """Test cases for markdown_stats."""

    def test_counts(self):
        """Images are not counted as links."""
        content = "# Title\n\nSome words here.\n\n![pic](a.png) and [link](https://x.io)"
        stats = markdown_stats(content)

        assert stats.word_count == 8
        assert stats.line_count == 5
        assert stats.image_count == 1
        assert stats.link_count == 1
        assert stats.reading_time == 1
        assert stats.file_size == f"{len(content.encode('utf-8'))}.00 B"

    def test_explicit_size(self):
        assert markdown_stats("x", size=1536).file_size == "1.50 KB"

    def test_reading_time_rounds_up(self):
        assert markdown_stats("word " * 201).reading_time == 2

    def test_empty(self):
        stats = markdown_stats("")

        assert stats.word_count == 0
        assert stats.reading_time == 0
        assert stats.line_count == 1
