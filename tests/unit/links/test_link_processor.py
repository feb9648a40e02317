"""Unit tests for links.link_processor module."""

from mddocx.links.link_processor import (
    LinkProcessor,
    LinkType,
    ProcessedLink,
    is_external_url,
    is_valid_url,
    iter_markdown_headings,
    strip_code,
)
from tests.fixtures import SAMPLE_MARKDOWN_WITH_LINKS


class TestUrlHelpers:
    """Test cases for URL classification helpers."""

    def test_is_external_url(self):
        """http, https, mailto and ftp count as external."""
        assert is_external_url("https://example.com")
        assert is_external_url("mailto:team@example.com")
        assert is_external_url("ftp://files.example.com")
        assert not is_external_url("#intro")
        assert not is_external_url("docs/guide.md")

    def test_is_valid_url(self):
        """External URLs need a host (or an address for mailto)."""
        assert is_valid_url("https://example.com/path")
        assert is_valid_url("mailto:team@example.com")
        assert not is_valid_url("https://")
        assert not is_valid_url("mailto:nobody")
        assert not is_valid_url("docs/guide.md")


class TestHeadingScan:
    """Test cases for heading discovery."""

    def test_headings_outside_code_only(self):
        """Lines inside fenced code are not headings."""
        markdown = "# Title\n\n```\n# not a heading\n```\n\n## Sub *bold*"
        assert list(iter_markdown_headings(markdown)) == [(1, "Title"), (2, "Sub bold")]

    def test_heading_links_reduced_to_text(self):
        """Links inside headings contribute their text only."""
        assert list(iter_markdown_headings("# See [docs](https://x.io)")) == [(1, "See docs")]

    def test_strip_code_blanks_code(self):
        """Fenced blocks and code spans are blanked out."""
        stripped = strip_code("a `[x](#y)` b\n```\n[z](#w)\n```")
        assert "[x](#y)" not in stripped
        assert "[z](#w)" not in stripped
        assert stripped.startswith("a ")


class TestProcessMarkdownLinks:
    """Test cases for LinkProcessor.process_markdown_links."""

    def test_classifies_links(self):
        """Anchor, external, internal and image links are separated."""
        markdown = (
            "# Intro\n\n"
            "[a](#intro) [b](https://example.com) [c](other.md) ![d](pic.png)"
        )
        result = LinkProcessor().process_markdown_links(markdown)

        types = [link.link_type for link in result.links]
        assert types == [LinkType.ANCHOR, LinkType.EXTERNAL, LinkType.INTERNAL, LinkType.IMAGE]
        assert result.internal_count == 1
        assert result.external_count == 1

    def test_duplicate_heading_anchors_resolve(self):
        """Links to '-1' suffixed duplicates are valid."""
        result = LinkProcessor().process_markdown_links(SAMPLE_MARKDOWN_WITH_LINKS)
        anchors = {link.url: link for link in result.links if link.link_type == LinkType.ANCHOR}

        assert anchors["#setup"].is_valid
        assert anchors["#setup-1"].is_valid
        assert anchors["#setup-1"].processed_url == "setup-1"

    def test_broken_anchor_reported(self):
        """Anchors without a heading are listed as broken."""
        result = LinkProcessor().process_markdown_links(SAMPLE_MARKDOWN_WITH_LINKS)
        assert [link.url for link in result.broken_anchors] == ["#does-not-exist"]

    def test_links_in_code_ignored(self):
        """Links inside code are not counted."""
        result = LinkProcessor().process_markdown_links("`[x](#y)`\n\n```\n[a](https://b.c)\n```")
        assert result.links == []

    def test_reference_links_rewritten_inline(self):
        """Defined reference links become inline links in the content."""
        markdown = "See [the docs][docs] and [Docs][].\n\n[docs]: https://example.com/docs \"Docs\""
        result = LinkProcessor().process_markdown_links(markdown)

        assert '[the docs](https://example.com/docs "Docs")' in result.content
        assert '[Docs](https://example.com/docs "Docs")' in result.content
        assert result.external_count == 2

    def test_undefined_reference_left_alone(self):
        """References without a definition are not rewritten."""
        processor = LinkProcessor()
        markdown = "[x][missing]\n\n[other]: https://example.com"
        assert processor.resolve_reference_links(markdown) == markdown


class TestTableOfContents:
    """Test cases for generate_table_of_contents."""

    def test_toc_lines_and_entries(self):
        """Entries are indented by level and use unique anchors."""
        toc, entries = LinkProcessor().generate_table_of_contents("# A\n## B\n## B")

        assert toc.split('\n') == [
            "# Table of Contents",
            "",
            "- [A](#a)",
            "  - [B](#b)",
            "  - [B](#b-1)",
        ]
        assert [e.anchor for e in entries] == ["a", "b", "b-1"]


class TestLinkUtilities:
    """Test cases for update, validation, Word mapping and statistics."""

    def test_update_internal_links(self):
        """Renamed anchors are rewritten in fragment links."""
        content = "[Intro](#old) and [Other](#keep)"
        updated = LinkProcessor.update_internal_links(content, {"old": "new"})
        assert updated == "[Intro](#new) and [Other](#keep)"

    def test_validate_links_against_current_anchors(self):
        """Validation rechecks anchors and URLs."""
        processor = LinkProcessor()
        processor.build_anchor_map("# Intro")
        links = [
            ProcessedLink("a", "#intro", LinkType.ANCHOR, is_valid=False),
            ProcessedLink("b", "https://", LinkType.EXTERNAL),
        ]
        validated = processor.validate_links(links)

        assert validated[0].is_valid
        assert validated[0].processed_url == "intro"
        assert not validated[1].is_valid

    def test_to_word_links(self):
        """Anchors map to bookmarks, URLs to hyperlinks, images are dropped."""
        processor = LinkProcessor()
        result = processor.process_markdown_links(
            "# Getting Started\n[go](#getting-started) [web](https://x.io) ![i](p.png)"
        )
        word_links = processor.to_word_links(result.links)

        assert [(w.kind, w.target) for w in word_links] == [
            ("bookmark", "getting_started"),
            ("hyperlink", "https://x.io"),
        ]

    def test_get_link_statistics(self):
        """Statistics count by type and validity."""
        result = LinkProcessor().process_markdown_links(SAMPLE_MARKDOWN_WITH_LINKS)
        stats = LinkProcessor.get_link_statistics(result.links)

        assert stats.total == 4
        assert stats.by_type == {"anchor": 3, "external": 1}
        assert stats.valid == 3
        assert stats.invalid == 1
