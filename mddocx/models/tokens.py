"""Markup token tree produced by the Markdown tokenizer.

Tokens form a closed set of immutable dataclasses, one per kind. Block tokens
describe the document structure, inline tokens describe runs of text inside a
block. Containers hold their children as tuples so a built tree can never be
mutated by a later pipeline stage.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


# Inline tokens

@dataclass(frozen=True)
class TextToken:
    """Plain text run."""
    text: str


@dataclass(frozen=True)
class StrongToken:
    """Bold span."""
    children: Tuple["InlineToken", ...] = ()


@dataclass(frozen=True)
class EmphasisToken:
    """Italic span."""
    children: Tuple["InlineToken", ...] = ()


@dataclass(frozen=True)
class StrikethroughToken:
    """Struck-through span."""
    children: Tuple["InlineToken", ...] = ()


@dataclass(frozen=True)
class CodeSpanToken:
    """Inline code; always raw text, never children."""
    text: str


@dataclass(frozen=True)
class LinkToken:
    """Hyperlink with inline children as the visible text.

    Attributes:
        href: Link target as written (fragment, URL or relative path)
        children: Inline tokens forming the link text
        title: Optional link title
    """
    href: str
    children: Tuple["InlineToken", ...] = ()
    title: Optional[str] = None

    @property
    def is_internal(self) -> bool:
        """Check if this link points at an in-document fragment."""
        return self.href.startswith('#')


@dataclass(frozen=True)
class InlineImageToken:
    """Image that appears inside running text."""
    href: str
    alt: str = ""


@dataclass(frozen=True)
class LineBreakToken:
    """Hard line break."""


@dataclass(frozen=True)
class InlineHtmlToken:
    """Raw inline HTML fragment such as ``<u>`` or ``</u>``."""
    text: str


InlineToken = Union[
    TextToken,
    StrongToken,
    EmphasisToken,
    StrikethroughToken,
    CodeSpanToken,
    LinkToken,
    InlineImageToken,
    LineBreakToken,
    InlineHtmlToken,
]


# Block tokens

@dataclass(frozen=True)
class HeadingToken:
    """Heading of depth 1-6.

    Attributes:
        depth: Heading level (1-6)
        text: Plain text of the heading, used for anchors and the TOC
        children: Inline tokens rendered inside the heading
    """
    depth: int
    text: str
    children: Tuple[InlineToken, ...] = ()


@dataclass(frozen=True)
class ParagraphToken:
    """Paragraph of inline content."""
    children: Tuple[InlineToken, ...] = ()


@dataclass(frozen=True)
class ListItemToken:
    """Single list item.

    Attributes:
        children: Inline tokens of the item's own text
        sublists: Nested lists, in document order
        checked: None for plain items, True/False for task items
    """
    children: Tuple[InlineToken, ...] = ()
    sublists: Tuple["ListToken", ...] = ()
    checked: Optional[bool] = None

    @property
    def is_task(self) -> bool:
        """Check if the item is a task list entry."""
        return self.checked is not None


@dataclass(frozen=True)
class ListToken:
    """Ordered or unordered list occurrence."""
    ordered: bool
    items: Tuple[ListItemToken, ...] = ()
    start: int = 1


@dataclass(frozen=True)
class TableCellToken:
    """Table cell holding inline content and its column alignment."""
    children: Tuple[InlineToken, ...] = ()
    align: Optional[str] = None


@dataclass(frozen=True)
class TableToken:
    """Pipe table with one header row and zero or more body rows."""
    header: Tuple[TableCellToken, ...] = ()
    rows: Tuple[Tuple[TableCellToken, ...], ...] = ()

    @property
    def column_count(self) -> int:
        """Widest row in the table, header included."""
        widths = [len(self.header)] + [len(row) for row in self.rows]
        return max(widths) if widths else 0


@dataclass(frozen=True)
class CodeBlockToken:
    """Fenced or indented code block."""
    text: str
    language: Optional[str] = None


@dataclass(frozen=True)
class BlockQuoteToken:
    """Block quote holding nested block tokens."""
    children: Tuple["BlockToken", ...] = ()


@dataclass(frozen=True)
class ImageToken:
    """Image standing alone in its own paragraph."""
    href: str
    alt: str = ""


@dataclass(frozen=True)
class RawHtmlToken:
    """Block-level raw HTML."""
    text: str


@dataclass(frozen=True)
class ThematicBreakToken:
    """Horizontal rule."""


@dataclass(frozen=True)
class UnknownToken:
    """Token kind the tokenizer does not model; builders skip it with a warning."""
    kind: str


BlockToken = Union[
    HeadingToken,
    ParagraphToken,
    ListToken,
    TableToken,
    CodeBlockToken,
    BlockQuoteToken,
    ImageToken,
    RawHtmlToken,
    ThematicBreakToken,
    UnknownToken,
]


def plain_text(tokens) -> str:
    """Flatten inline tokens to their visible text.

    Args:
        tokens: Iterable of inline tokens

    Returns:
        Concatenated visible text
    """
    parts = []
    for token in tokens:
        if isinstance(token, (TextToken, CodeSpanToken)):
            parts.append(token.text)
        elif isinstance(token, InlineImageToken):
            parts.append(token.alt)
        elif isinstance(token, LineBreakToken):
            parts.append(' ')
        elif hasattr(token, 'children'):
            parts.append(plain_text(token.children))
    return ''.join(parts)
