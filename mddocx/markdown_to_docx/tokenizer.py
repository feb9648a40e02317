"""Markdown tokenizer producing the immutable MarkupToken tree.

mistune's AST renderer does the parsing; this module maps its dictionaries
onto token dataclasses, resolving once whether a container holds inline
children or raw text.
"""

import html
import logging
import re
from typing import Any, Dict, List, Tuple
from urllib.parse import unquote

import mistune

from ..models.tokens import (
    BlockQuoteToken,
    BlockToken,
    CodeBlockToken,
    CodeSpanToken,
    EmphasisToken,
    HeadingToken,
    ImageToken,
    InlineHtmlToken,
    InlineImageToken,
    InlineToken,
    LineBreakToken,
    LinkToken,
    ListItemToken,
    ListToken,
    ParagraphToken,
    RawHtmlToken,
    StrikethroughToken,
    StrongToken,
    TableCellToken,
    TableToken,
    TextToken,
    ThematicBreakToken,
    UnknownToken,
    plain_text,
)

logger = logging.getLogger(__name__)

MISTUNE_PLUGINS = ['table', 'strikethrough', 'url', 'task_lists']

# [A]([B](URL)) produced by tools that linkify already-linked text
NESTED_LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(\s*\[[^\]]*\]\(([^)\s]+)\)\s*\)')

# Block types that carry no content
_SKIPPED_BLOCKS = {'blank_line'}


def normalize_nested_links(markdown: str) -> str:
    """Collapse malformed nested links ``[A]([B](URL))`` into ``[A](URL)``."""
    return NESTED_LINK_PATTERN.sub(r'[\1](\2)', markdown)


class MarkdownTokenizer:
    """Parses Markdown into block tokens.

    Example:
        >>> tokens = MarkdownTokenizer().tokenize("# Title\\n\\nHello *world*")
        >>> tokens[0].text
        'Title'
    """

    def __init__(self):
        self._markdown = mistune.create_markdown(renderer='ast', plugins=MISTUNE_PLUGINS)

    def tokenize(self, markdown: str) -> List[BlockToken]:
        """Parse Markdown into a list of block tokens.

        Args:
            markdown: Markdown source without front matter

        Returns:
            Block tokens in document order
        """
        ast = self._markdown(markdown)
        return self._parse_blocks(ast)

    def _parse_blocks(self, nodes: List[Dict[str, Any]]) -> List[BlockToken]:
        blocks = []
        for node in nodes:
            node_type = node.get('type', 'unknown')
            if node_type in _SKIPPED_BLOCKS:
                continue
            blocks.append(self._parse_block(node))
        return blocks

    def _parse_block(self, node: Dict[str, Any]) -> BlockToken:
        """Parse a single mistune block node.

        Args:
            node: mistune AST dictionary

        Returns:
            Block token; UnknownToken for unmodelled types
        """
        node_type = node.get('type', 'unknown')
        attrs = node.get('attrs') or {}
        children = node.get('children') or []

        if node_type == 'heading':
            inlines = self._parse_inlines(children)
            return HeadingToken(
                depth=int(attrs.get('level', 1)),
                text=plain_text(inlines).strip(),
                children=tuple(inlines),
            )

        if node_type in ('paragraph', 'block_text'):
            inlines = self._parse_inlines(children)
            if len(inlines) == 1 and isinstance(inlines[0], InlineImageToken):
                return ImageToken(href=inlines[0].href, alt=inlines[0].alt)
            return ParagraphToken(children=tuple(inlines))

        if node_type == 'list':
            return self._parse_list(node)

        if node_type == 'block_code':
            info = (attrs.get('info') or '').strip()
            language = info.split()[0] if info else None
            return CodeBlockToken(text=node.get('raw', '').rstrip('\n'), language=language)

        if node_type == 'block_quote':
            return BlockQuoteToken(children=tuple(self._parse_blocks(children)))

        if node_type == 'table':
            return self._parse_table(node)

        if node_type == 'thematic_break':
            return ThematicBreakToken()

        if node_type == 'block_html':
            return RawHtmlToken(text=node.get('raw', ''))

        logger.debug(f"Unmodelled block type: {node_type}")
        return UnknownToken(kind=node_type)

    def _parse_list(self, node: Dict[str, Any]) -> ListToken:
        attrs = node.get('attrs') or {}
        items = [self._parse_list_item(child) for child in node.get('children') or []]
        return ListToken(
            ordered=bool(attrs.get('ordered', False)),
            items=tuple(items),
            start=int(attrs.get('start', 1) or 1),
        )

    def _parse_list_item(self, node: Dict[str, Any]) -> ListItemToken:
        """Parse a list item, separating its own text from nested lists.

        Additional paragraphs are joined with line breaks; code blocks inside
        an item become code spans on their own line.
        """
        inlines: List[InlineToken] = []
        sublists: List[ListToken] = []

        for child in node.get('children') or []:
            child_type = child.get('type')
            if child_type == 'list':
                sublists.append(self._parse_list(child))
                continue
            if child_type in ('paragraph', 'block_text'):
                parsed = self._parse_inlines(child.get('children') or [])
            elif child_type == 'block_code':
                parsed = [CodeSpanToken(text=child.get('raw', '').rstrip('\n'))]
            elif child_type in _SKIPPED_BLOCKS:
                continue
            else:
                parsed = [TextToken(text=plain_text(self._parse_inlines(child.get('children') or [])))]
            if inlines and parsed:
                inlines.append(LineBreakToken())
            inlines.extend(parsed)

        checked = None
        if node.get('type') == 'task_list_item':
            checked = bool((node.get('attrs') or {}).get('checked', False))

        return ListItemToken(children=tuple(inlines), sublists=tuple(sublists), checked=checked)

    def _parse_table(self, node: Dict[str, Any]) -> TableToken:
        header: Tuple[TableCellToken, ...] = ()
        rows: List[Tuple[TableCellToken, ...]] = []
        for section in node.get('children') or []:
            section_type = section.get('type')
            if section_type == 'table_head':
                header = tuple(self._parse_cell(cell) for cell in section.get('children') or [])
            elif section_type == 'table_body':
                for row in section.get('children') or []:
                    rows.append(tuple(self._parse_cell(cell) for cell in row.get('children') or []))
        return TableToken(header=header, rows=tuple(rows))

    def _parse_cell(self, node: Dict[str, Any]) -> TableCellToken:
        attrs = node.get('attrs') or {}
        return TableCellToken(
            children=tuple(self._parse_inlines(node.get('children') or [])),
            align=attrs.get('align'),
        )

    def _parse_inlines(self, nodes: List[Dict[str, Any]]) -> List[InlineToken]:
        """Parse mistune inline nodes, merging adjacent text runs."""
        tokens: List[InlineToken] = []
        for node in nodes:
            token = self._parse_inline(node)
            if token is None:
                continue
            if isinstance(token, TextToken) and tokens and isinstance(tokens[-1], TextToken):
                tokens[-1] = TextToken(text=tokens[-1].text + token.text)
            else:
                tokens.append(token)
        return tokens

    def _parse_inline(self, node: Dict[str, Any]):
        node_type = node.get('type', 'unknown')
        attrs = node.get('attrs') or {}
        children = node.get('children')

        if node_type == 'text':
            return TextToken(text=html.unescape(node.get('raw', '')))
        if node_type == 'softbreak':
            return TextToken(text=' ')
        if node_type == 'linebreak':
            return LineBreakToken()
        if node_type == 'codespan':
            return CodeSpanToken(text=node.get('raw', ''))
        if node_type == 'strong':
            return StrongToken(children=tuple(self._parse_inlines(children or [])))
        if node_type == 'emphasis':
            return EmphasisToken(children=tuple(self._parse_inlines(children or [])))
        if node_type == 'strikethrough':
            return StrikethroughToken(children=tuple(self._parse_inlines(children or [])))
        if node_type == 'link':
            return LinkToken(
                href=unquote(attrs.get('url', '')),
                children=tuple(self._parse_inlines(children or [])),
                title=attrs.get('title'),
            )
        if node_type == 'image':
            alt = plain_text(self._parse_inlines(children or []))
            return InlineImageToken(href=unquote(attrs.get('url', '')), alt=alt)
        if node_type == 'inline_html':
            return InlineHtmlToken(text=node.get('raw', ''))

        # Unmodelled inline types keep their text
        if children:
            return TextToken(text=plain_text(self._parse_inlines(children)))
        raw = node.get('raw')
        return TextToken(text=raw) if raw else None
