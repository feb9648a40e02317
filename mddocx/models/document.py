"""Document element tree handed to the DOCX writer.

Builders translate markup tokens into these plain dataclasses; the writer is
the only component that knows about python-docx. Measurements follow Word's
units: indentation and spacing in twips (1/20 pt), font sizes in points.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class RunStyle:
    """Character formatting for a run.

    Attributes:
        bold: Bold text
        italic: Italic text
        strike: Strike-through text
        underline: Single underline
        font: Font family override
        color: Hex RGB colour (e.g. '0000FF')
        size: Font size in points
        superscript: Raised text
        subscript: Lowered text
    """
    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: bool = False
    font: Optional[str] = None
    color: Optional[str] = None
    size: Optional[float] = None
    superscript: bool = False
    subscript: bool = False

    def merge(self, **overrides) -> "RunStyle":
        """Return a copy with the given attributes overridden."""
        return replace(self, **overrides)


@dataclass
class RunElement:
    """Text run with character formatting."""
    text: str
    style: RunStyle = field(default_factory=RunStyle)


@dataclass
class LineBreakElement:
    """Line break inside a paragraph."""


@dataclass
class BookmarkStartElement:
    """Start of a named bookmark."""
    id: int
    name: str


@dataclass
class BookmarkEndElement:
    """End of the bookmark with the same id."""
    id: int


@dataclass
class InternalRefElement:
    """Hyperlink to a bookmark in the same document."""
    anchor: str
    runs: List[RunElement] = field(default_factory=list)


@dataclass
class ExternalRefElement:
    """Hyperlink to an external URL."""
    url: str
    runs: List[RunElement] = field(default_factory=list)


@dataclass
class ImageElement:
    """Inline picture.

    Attributes:
        data: Encoded image bytes (PNG)
        width: Display width in pixels
        height: Display height in pixels
        description: Alternative text
    """
    data: bytes
    width: int
    height: int
    description: str = ""


InlineElement = Union[
    RunElement,
    LineBreakElement,
    BookmarkStartElement,
    BookmarkEndElement,
    InternalRefElement,
    ExternalRefElement,
    ImageElement,
]


@dataclass
class NumberingDefinition:
    """Numbering instance for one list occurrence.

    Every list gets its own definition so each ordered list restarts at 1,
    whatever number its first Markdown item carried.

    Attributes:
        ref: Session-unique reference number
        ordered: Decimal numbering when True, bullets otherwise
        level: Nesting level the list was opened at
    """
    ref: int
    ordered: bool
    level: int = 0


@dataclass
class NumberingReference:
    """Links a paragraph to a numbering definition at a given level."""
    definition: NumberingDefinition
    level: int = 0


@dataclass
class ParagraphSpacing:
    """Space before/after a paragraph, in twips."""
    before: Optional[int] = None
    after: Optional[int] = None


@dataclass
class ParagraphElement:
    """Paragraph of inline elements.

    Attributes:
        runs: Inline elements in order
        style: Named paragraph style (e.g. 'Heading 2', 'Code', 'Quote')
        spacing: Space before/after
        indent: Left indentation in twips
        numbering: List numbering, if the paragraph is a list item
        alignment: 'left', 'center', 'right' or None
        shading: Hex fill colour
        borders: Sides carrying a single-line border ('top', 'left', ...)
        border_color: Hex colour for borders
    """
    runs: List[InlineElement] = field(default_factory=list)
    style: Optional[str] = None
    spacing: ParagraphSpacing = field(default_factory=ParagraphSpacing)
    indent: Optional[int] = None
    numbering: Optional[NumberingReference] = None
    alignment: Optional[str] = None
    shading: Optional[str] = None
    borders: Tuple[str, ...] = ()
    border_color: str = "auto"

    @property
    def text(self) -> str:
        """Visible text of the paragraph."""
        parts = []
        for element in self.runs:
            if isinstance(element, RunElement):
                parts.append(element.text)
            elif isinstance(element, (InternalRefElement, ExternalRefElement)):
                parts.extend(run.text for run in element.runs)
            elif isinstance(element, LineBreakElement):
                parts.append('\n')
        return ''.join(parts)


@dataclass
class TableCellElement:
    """Table cell made of paragraphs."""
    paragraphs: List[ParagraphElement] = field(default_factory=list)
    shading: Optional[str] = None


@dataclass
class TableElement:
    """Table; the first row is the header when ``header_row`` is set."""
    rows: List[List[TableCellElement]] = field(default_factory=list)
    header_row: bool = True

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


BlockElement = Union[ParagraphElement, TableElement]


@dataclass
class DocumentProperties:
    """Core properties written into the DOCX package."""
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
