"""Block token to document element mapping.

BlockBuilder walks the token tree top-down and dispatches on token type.
A failure while building one block is recorded as a warning and the block
is skipped; the rest of the document still converts.
"""

import html
import logging
import re
from typing import Callable, Dict, List, Type

from ..errors import ErrorCode, UnsupportedTokenError
from ..models.document import (
    BlockElement,
    BookmarkEndElement,
    BookmarkStartElement,
    InternalRefElement,
    NumberingReference,
    ParagraphElement,
    ParagraphSpacing,
    RunElement,
    RunStyle,
    TableCellElement,
    TableElement,
)
from ..models.tokens import (
    BlockQuoteToken,
    BlockToken,
    CodeBlockToken,
    HeadingToken,
    ImageToken,
    ListToken,
    ParagraphToken,
    RawHtmlToken,
    TableCellToken,
    TableToken,
    ThematicBreakToken,
    UnknownToken,
)
from .inlines import InlineBuilder
from .session import ConversionSession

logger = logging.getLogger(__name__)

LIST_INDENT_TWIPS = 720
QUOTE_INDENT_TWIPS = 720
TOC_INDENT_TWIPS = 360
TOC_TITLE = "Table of Contents"

CODE_COLOR = "333333"
CODE_FILL = "F8F8F8"
CODE_BORDER_COLOR = "DDDDDD"
RULE_COLOR = "CCCCCC"
QUOTE_BORDER_COLOR = "CCCCCC"

TASK_CHECKED = "☒"
TASK_UNCHECKED = "☐"

HTML_TAG = re.compile(r'<[^>]+>')
HTML_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)


class BlockBuilder:
    """Builds document elements for one conversion session.

    Example:
        >>> session = ConversionSession()
        >>> elements = BlockBuilder(session).build_document(tokens)
    """

    def __init__(self, session: ConversionSession):
        self.session = session
        self.inlines = InlineBuilder(session)
        self._handlers: Dict[Type, Callable[..., List[BlockElement]]] = {
            HeadingToken: self.build_heading,
            ParagraphToken: self.build_paragraph,
            ListToken: self.build_list,
            TableToken: self.build_table,
            CodeBlockToken: self.build_code_block,
            BlockQuoteToken: self.build_blockquote,
            ImageToken: self.build_image,
            RawHtmlToken: self.build_raw_html,
            ThematicBreakToken: self.build_thematic_break,
        }

    def build_document(self, blocks: List[BlockToken]) -> List[BlockElement]:
        """Build elements for all blocks, TOC first when requested.

        Args:
            blocks: Top-level block tokens

        Returns:
            Document elements in input order
        """
        elements: List[BlockElement] = []
        if self.session.options.generate_toc and self.session.headings:
            elements.extend(self.build_toc())
        for block in blocks:
            elements.extend(self.build_block(block))
        return elements

    def build_block(self, token: BlockToken) -> List[BlockElement]:
        """Build one block, converting failures into warnings."""
        kind = type(token).__name__
        try:
            handler = self._handlers.get(type(token))
            if handler is None:
                name = token.kind if isinstance(token, UnknownToken) else kind
                raise UnsupportedTokenError(name)
            return handler(token)
        except UnsupportedTokenError as e:
            self.session.warn(ErrorCode.UNSUPPORTED_TOKEN, str(e), detail=e.kind)
        except Exception as e:
            logger.exception(f"Failed to build {kind}")
            self.session.warn(ErrorCode.CONVERSION_FAILED, f"Skipped {kind}: {e}", detail=kind)
        return []

    def build_heading(self, token: HeadingToken) -> List[BlockElement]:
        """Heading paragraph wrapped in a bookmark for internal links."""
        entry = self.session.heading_entry(token)
        if entry is None:
            # Headings built outside register_headings (e.g. by callers)
            slug = self.session.anchors.register(token.text)
            bookmark = self.session.anchors.bookmark_for(slug)
        else:
            bookmark = entry.bookmark

        bookmark_id = self.session.next_bookmark_id()
        style = self.session.template.heading(token.depth)
        runs = [BookmarkStartElement(id=bookmark_id, name=bookmark)]
        runs.extend(self.inlines.build(token.children))
        runs.append(BookmarkEndElement(id=bookmark_id))

        return [ParagraphElement(
            runs=runs,
            style=f"Heading {min(max(token.depth, 1), 6)}",
            spacing=ParagraphSpacing(before=style.space_before, after=style.space_after),
        )]

    def build_paragraph(self, token: ParagraphToken) -> List[BlockElement]:
        runs = self.inlines.build(token.children)
        if not runs:
            return []
        return [ParagraphElement(runs=runs, spacing=ParagraphSpacing(after=120))]

    def build_list(self, token: ListToken, level: int = 0) -> List[BlockElement]:
        """List paragraphs with a fresh numbering definition per occurrence.

        Nested lists get their own definition too, so every ordered list
        restarts at 1 regardless of depth or source numbering.
        """
        definition = self.session.new_numbering(token.ordered, level=level)
        indent = LIST_INDENT_TWIPS * (level + 1)
        elements: List[BlockElement] = []

        for item in token.items:
            runs = self.inlines.build(item.children)
            if item.is_task:
                glyph = TASK_CHECKED if item.checked else TASK_UNCHECKED
                runs.insert(0, RunElement(f"{glyph} "))
                paragraph = ParagraphElement(runs=runs, indent=indent, spacing=ParagraphSpacing(after=60))
            else:
                paragraph = ParagraphElement(
                    runs=runs,
                    indent=indent,
                    numbering=NumberingReference(definition=definition, level=level),
                    spacing=ParagraphSpacing(after=60),
                )
            elements.append(paragraph)
            for sublist in item.sublists:
                elements.extend(self.build_list(sublist, level + 1))

        return elements

    def build_table(self, token: TableToken) -> List[BlockElement]:
        """Table with a bold, shaded header row."""
        columns = token.column_count
        if columns == 0:
            return []

        template = self.session.template
        rows: List[List[TableCellElement]] = []
        if token.header:
            rows.append(self._table_row(token.header, columns, header=True, fill=template.table_header_fill))
        for row in token.rows:
            rows.append(self._table_row(row, columns))

        return [TableElement(rows=rows, header_row=bool(token.header))]

    def _table_row(self, cells, columns: int, header: bool = False, fill: str = None) -> List[TableCellElement]:
        style = RunStyle(bold=True) if header else RunStyle()
        padded = list(cells) + [TableCellToken()] * (columns - len(cells))
        row = []
        for cell in padded:
            paragraph = ParagraphElement(
                runs=self.inlines.build(cell.children, style),
                alignment=cell.align,
            )
            row.append(TableCellElement(paragraphs=[paragraph], shading=fill if header else None))
        return row

    def build_code_block(self, token: CodeBlockToken) -> List[BlockElement]:
        """One shaded, bordered monospace paragraph per source line."""
        template = self.session.template
        style = RunStyle(font=template.code_font, size=template.code_size, color=CODE_COLOR)
        return [
            ParagraphElement(
                runs=[RunElement(line, style)] if line else [],
                style="Code",
                spacing=ParagraphSpacing(before=0, after=0),
                shading=CODE_FILL,
                borders=('top', 'left', 'bottom', 'right'),
                border_color=CODE_BORDER_COLOR,
            )
            for line in token.text.split('\n')
        ]

    def build_blockquote(self, token: BlockQuoteToken) -> List[BlockElement]:
        """Quoted blocks indented with a left border."""
        elements: List[BlockElement] = []
        for child in token.children:
            for element in self.build_block(child):
                if isinstance(element, ParagraphElement):
                    element.indent = (element.indent or 0) + QUOTE_INDENT_TWIPS
                    element.borders = tuple(element.borders) + ('left',)
                    element.border_color = QUOTE_BORDER_COLOR
                    if element.style is None and element.numbering is None:
                        element.style = "Quote"
                elements.append(element)
        return elements

    def build_image(self, token: ImageToken) -> List[BlockElement]:
        element = self.inlines.build_image(token.href, token.alt)
        alignment = 'center' if not isinstance(element, RunElement) else None
        return [ParagraphElement(runs=[element], alignment=alignment, spacing=ParagraphSpacing(before=120, after=120))]

    def build_raw_html(self, token: RawHtmlToken) -> List[BlockElement]:
        """Raw HTML reduced to its text content."""
        text = HTML_COMMENT.sub('', token.text)
        text = html.unescape(HTML_TAG.sub('', text)).strip()
        if not text:
            return []
        return [ParagraphElement(runs=[RunElement(text)])]

    def build_thematic_break(self, token: ThematicBreakToken) -> List[BlockElement]:
        return [ParagraphElement(
            borders=('bottom',),
            border_color=RULE_COLOR,
            spacing=ParagraphSpacing(before=240, after=240),
        )]

    def build_toc(self) -> List[BlockElement]:
        """Table of contents linking each heading's bookmark."""
        link_style = self.inlines.link_style
        elements: List[BlockElement] = [ParagraphElement(
            runs=[RunElement(TOC_TITLE, RunStyle(bold=True, size=16))],
            spacing=ParagraphSpacing(before=240, after=240),
        )]
        for entry in self.session.headings:
            elements.append(ParagraphElement(
                runs=[InternalRefElement(anchor=entry.bookmark, runs=[RunElement(entry.text, link_style)])],
                indent=(entry.level - 1) * TOC_INDENT_TWIPS,
                spacing=ParagraphSpacing(after=60),
            ))
        return elements
