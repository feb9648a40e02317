"""Unit tests for markdown_to_docx.tokenizer module."""

from mddocx.markdown_to_docx.tokenizer import MarkdownTokenizer, normalize_nested_links
from mddocx.models.tokens import (
    BlockQuoteToken,
    CodeBlockToken,
    CodeSpanToken,
    EmphasisToken,
    HeadingToken,
    ImageToken,
    InlineHtmlToken,
    LineBreakToken,
    LinkToken,
    ListToken,
    ParagraphToken,
    StrikethroughToken,
    StrongToken,
    TableToken,
    TextToken,
    ThematicBreakToken,
)


class TestNormalizeNestedLinks:
    """Test cases for normalize_nested_links."""

    def test_nested_link_collapsed(self):
        """[A]([B](URL)) becomes [A](URL)."""
        assert normalize_nested_links("[Docs]([https://x.io](https://x.io))") == "[Docs](https://x.io)"

    def test_plain_link_untouched(self):
        """Regular links are not modified."""
        assert normalize_nested_links("[Docs](https://x.io)") == "[Docs](https://x.io)"


class TestBlocks:
    """Test cases for block tokens."""

    def setup_method(self):
        self.tokenizer = MarkdownTokenizer()

    def test_heading(self):
        """Headings keep depth, plain text and inline children."""
        tokens = self.tokenizer.tokenize("## Hello *World*")

        assert len(tokens) == 1
        heading = tokens[0]
        assert isinstance(heading, HeadingToken)
        assert heading.depth == 2
        assert heading.text == "Hello World"
        assert isinstance(heading.children[1], EmphasisToken)

    def test_paragraph_and_blank_lines(self):
        """Blank lines produce no tokens."""
        tokens = self.tokenizer.tokenize("One\n\n\nTwo")
        assert [type(t) for t in tokens] == [ParagraphToken, ParagraphToken]

    def test_code_block_language(self):
        """Fenced code keeps its raw text and language."""
        tokens = self.tokenizer.tokenize("```python\nprint('*x*')\n```")

        assert tokens == [CodeBlockToken(text="print('*x*')", language="python")]

    def test_code_block_without_language(self):
        """Fences without info have no language."""
        tokens = self.tokenizer.tokenize("```\nplain\n```")
        assert tokens[0].language is None

    def test_ordered_list_start(self):
        """Ordered lists keep their start number."""
        tokens = self.tokenizer.tokenize("3. three\n4. four")

        assert isinstance(tokens[0], ListToken)
        assert tokens[0].ordered is True
        assert tokens[0].start == 3
        assert len(tokens[0].items) == 2

    def test_nested_list(self):
        """Nested lists are attached to their parent item."""
        tokens = self.tokenizer.tokenize("- a\n  - b\n  - c\n- d")
        outer = tokens[0]

        assert len(outer.items) == 2
        assert outer.items[0].children == (TextToken("a"),)
        assert len(outer.items[0].sublists) == 1
        assert len(outer.items[0].sublists[0].items) == 2

    def test_task_list(self):
        """Task items carry their checked state."""
        tokens = self.tokenizer.tokenize("- [ ] open\n- [x] done\n- plain")
        items = tokens[0].items

        assert items[0].checked is False
        assert items[1].checked is True
        assert items[2].checked is None
        assert not items[2].is_task

    def test_table(self):
        """Tables keep header, rows and alignment."""
        tokens = self.tokenizer.tokenize("| A | B |\n|:--|--:|\n| 1 | 2 |\n| 3 | 4 |")
        table = tokens[0]

        assert isinstance(table, TableToken)
        assert table.column_count == 2
        assert [cell.align for cell in table.header] == ['left', 'right']
        assert len(table.rows) == 2
        assert table.rows[1][0].children == (TextToken("3"),)

    def test_blockquote(self):
        """Quotes hold nested block tokens."""
        tokens = self.tokenizer.tokenize("> # Quoted\n> text")

        assert isinstance(tokens[0], BlockQuoteToken)
        assert isinstance(tokens[0].children[0], HeadingToken)

    def test_standalone_image(self):
        """An image alone in a paragraph becomes an ImageToken."""
        tokens = self.tokenizer.tokenize("![Alt text](pic.png)")
        assert tokens == [ImageToken(href="pic.png", alt="Alt text")]

    def test_thematic_break(self):
        """Horizontal rules are tokens of their own."""
        tokens = self.tokenizer.tokenize("a\n\n---\n\nb")
        assert isinstance(tokens[1], ThematicBreakToken)


class TestInlines:
    """Test cases for inline tokens."""

    def setup_method(self):
        self.tokenizer = MarkdownTokenizer()

    def _inlines(self, markdown):
        return self.tokenizer.tokenize(markdown)[0].children

    def test_emphasis_and_strong(self):
        """Nested emphasis is kept as a tree."""
        inlines = self._inlines("**bold *both***")

        assert isinstance(inlines[0], StrongToken)
        assert isinstance(inlines[0].children[1], EmphasisToken)

    def test_strikethrough(self):
        """~~text~~ is struck through."""
        assert isinstance(self._inlines("~~gone~~")[0], StrikethroughToken)

    def test_code_span_is_raw(self):
        """Code spans keep Markdown characters literally."""
        assert self._inlines("`*not em*`") == (CodeSpanToken("*not em*"),)

    def test_link(self):
        """Links keep href, title and children."""
        link = self._inlines('[Docs](https://x.io "Title")')[0]

        assert isinstance(link, LinkToken)
        assert link.href == "https://x.io"
        assert link.title == "Title"
        assert link.children == (TextToken("Docs"),)
        assert not link.is_internal

    def test_internal_link(self):
        """Fragment links are internal."""
        link = self._inlines("[Up](#top)")[0]
        assert link.is_internal

    def test_bare_url_linked(self):
        """Bare URLs become links."""
        inlines = self._inlines("Visit https://example.com today")
        assert any(isinstance(t, LinkToken) and t.href == "https://example.com" for t in inlines)

    def test_hard_line_break(self):
        """Two trailing spaces make a hard break."""
        inlines = self._inlines("one  \ntwo")
        assert LineBreakToken() in inlines

    def test_soft_break_merged_into_text(self):
        """Soft breaks become spaces inside one text run."""
        assert self._inlines("one\ntwo") == (TextToken("one two"),)

    def test_inline_html(self):
        """Inline HTML tags are kept as raw tokens."""
        inlines = self._inlines("<u>under</u>")
        assert inlines[0] == InlineHtmlToken("<u>")
        assert inlines[-1] == InlineHtmlToken("</u>")

    def test_entities_unescaped(self):
        """HTML entities in text are decoded."""
        assert self._inlines("A &amp; B") == (TextToken("A & B"),)
