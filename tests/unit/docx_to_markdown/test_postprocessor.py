"""Unit tests for docx_to_markdown.postprocessor module."""

from mddocx.docx_to_markdown.postprocessor import (
    MarkdownPostProcessor,
    apply_heading_anchors,
    collapse_blank_lines,
    fence_code_runs,
    fix_markers,
    normalize_nested_lists,
    normalize_whitespace,
    unescape_heading_dots,
)


class TestWhitespace:
    """Test cases for whitespace steps."""

    def test_trailing_spaces(self):
        """Trailing spaces go and CRLF becomes LF."""
        assert normalize_whitespace("a \r\nb c\t") == "a\nb c"

    def test_hard_break_kept(self):
        """Two trailing spaces on a content line are a hard break."""
        assert normalize_whitespace("line   \nnext") == "line  \nnext"

    def test_blank_lines_collapsed(self):
        """Runs of blank lines collapse to one."""
        assert collapse_blank_lines("a\n\n\n\nb") == "a\n\nb"


class TestMarkers:
    """Test cases for fix_markers."""

    def test_heading_spacing(self):
        assert fix_markers("#   Title  ") == "# Title"

    def test_bullets_unified(self):
        """* and + bullets become dashes."""
        assert fix_markers("* a\n+ b\n  * c") == "- a\n- b\n  - c"

    def test_numbers_and_quotes(self):
        assert fix_markers("1.   one\n>quote") == "1. one\n> quote"

    def test_task_glyphs(self):
        """Checkbox glyphs become task list markers."""
        assert fix_markers("☐ open\n- ☒ done") == "- [ ] open\n- [x] done"

    def test_code_untouched(self):
        """Lines inside fences are not rewritten."""
        markdown = "```\n* not a bullet\n#   nor a heading\n```"
        assert fix_markers(markdown) == markdown


class TestHeadings:
    """Test cases for heading dot unescaping and anchors."""

    def test_heading_dots_unescaped(self):
        """Escaped dots are restored in headings only."""
        assert unescape_heading_dots("# 1\\. Intro\n1\\. body") == "# 1. Intro\n1\\. body"

    def test_inline_anchor(self):
        """Inline anchors precede the heading."""
        assert apply_heading_anchors("## Getting Started", "inline") == (
            '<a id="getting-started"></a>\n## Getting Started'
        )

    def test_attribute_anchor(self):
        assert apply_heading_anchors("# Intro", "attribute") == "# Intro {#intro}"

    def test_no_anchor_styles(self):
        """'none' and unknown styles leave headings alone."""
        assert apply_heading_anchors("# Intro", "none") == "# Intro"
        assert apply_heading_anchors("# Intro", "bogus") == "# Intro"

    def test_headings_in_code_skipped(self):
        markdown = "```\n# comment\n```"
        assert apply_heading_anchors(markdown, "inline") == markdown


class TestCodeRuns:
    """Test cases for fence_code_runs."""

    def test_code_run_fenced(self):
        """Two or more code-looking lines are fenced."""
        markdown = "Intro\n\nlet x = 1;\nconsole.log(x);\n\nOutro"
        assert fence_code_runs(markdown) == "Intro\n\n```\nlet x = 1;\nconsole.log(x);\n```\n\nOutro"

    def test_single_line_not_fenced(self):
        assert fence_code_runs("x = 1") == "x = 1"

    def test_runs_with_links_not_fenced(self):
        """Prose that mentions links is never fenced."""
        markdown = "see [a](#a); x = 1\nreturn [b](#b)"
        assert fence_code_runs(markdown) == markdown

    def test_existing_fences_kept(self):
        markdown = "```\nx = 1\ny = 2\n```"
        assert fence_code_runs(markdown) == markdown


class TestNestedLists:
    """Test cases for normalize_nested_lists."""

    def test_odd_indent_rounded_up(self):
        """Nested items use two-space steps."""
        assert normalize_nested_lists("- a\n - b\n   - c") == "- a\n  - b\n    - c"

    def test_numbers_kept(self):
        assert normalize_nested_lists("1. a\n 2. b") == "1. a\n  2. b"


class TestProcess:
    """Test cases for MarkdownPostProcessor.process."""

    def test_full_pipeline(self):
        """All steps run and the result is trimmed."""
        markdown = "\n\n#   Title\n\n\n\n* item one\n+ item two\n\n"
        assert MarkdownPostProcessor().process(markdown) == "# Title\n\n- item one\n- item two"

    def test_anchor_style_passed(self):
        result = MarkdownPostProcessor().process("# Title", heading_anchor_style='attribute')
        assert result == "# Title {#title}"

    def test_empty(self):
        assert MarkdownPostProcessor().process("") == ""
