"""Rebuild nested lists from list-looking paragraphs.

Some documents store lists as plain paragraphs that start with a bullet glyph
or a numbering prefix, indented with a left margin or leading non-breaking
spaces. ``ListReconstructor`` turns runs of such paragraphs back into nested
``ul``/``ol`` elements. It works on ``HtmlNode`` trees so it does not depend on
any particular HTML parser.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.html_node import HtmlNode

logger = logging.getLogger(__name__)

NBSP = '\u00a0'

BULLET_PATTERN = re.compile(r'^([•◦▪\-*☐☒])\s+')
NUMBER_PATTERN = re.compile(r'^((?:\d+|[ivxlcdm]+|[a-z])[.)])\s+', re.IGNORECASE)
MARGIN_PATTERN = re.compile(r'margin-left\s*:\s*(-?\d+(?:\.\d+)?)\s*(pt|px|in|cm|mm)', re.IGNORECASE)
LEADING_SPACE_PATTERN = re.compile(r'^\s+')

# Points per unit of a CSS length
UNIT_TO_PT = {
    'pt': 1.0,
    'px': 0.75,
    'in': 72.0,
    'cm': 72.0 / 2.54,
    'mm': 72.0 / 25.4,
}

TASK_GLYPHS = {'☐': '[ ] ', '☒': '[x] '}
MIN_RUN_LENGTH = 2

# Elements whose paragraphs are left alone
OPAQUE_TAGS = ('li', 'pre', 'code', 'table')


@dataclass
class ListParagraph:
    """A paragraph recognized as a list item.

    Attributes:
        kind: 'ul' or 'ol'
        level: Nesting level, 0 for top level
        children: Paragraph content with the marker removed
    """
    kind: str
    level: int
    children: List[HtmlNode] = field(default_factory=list)


@dataclass
class _OpenList:
    level: int
    kind: str
    node: HtmlNode


def margin_to_pt(style: str) -> Optional[float]:
    """Left margin of an inline style in points, None when absent."""
    match = MARGIN_PATTERN.search(style or '')
    if not match:
        return None
    return float(match.group(1)) * UNIT_TO_PT[match.group(2).lower()]


class ListReconstructor:
    """Rebuilds nested lists from runs of list-like paragraphs.

    Args:
        indent_unit_pt: Left margin (in points) that makes one nesting level
        nbsp_per_level: Leading non-breaking spaces that make one level

    Example:
        >>> nodes = [
        ...     HtmlNode.element('p', HtmlNode.text_node('• One')),
        ...     HtmlNode.element('p', HtmlNode.text_node('• Two')),
        ... ]
        >>> ListReconstructor().reconstruct(nodes)[0].tag
        'ul'
    """

    def __init__(self, indent_unit_pt: float = 18.0, nbsp_per_level: int = 2):
        self.indent_unit_pt = indent_unit_pt if indent_unit_pt > 0 else 18.0
        self.nbsp_per_level = max(1, nbsp_per_level)

    def reconstruct(self, nodes: List[HtmlNode]) -> List[HtmlNode]:
        """Return ``nodes`` with list-like paragraph runs replaced by lists.

        Runs shorter than two paragraphs are left unchanged. Paragraphs
        inside list items are never touched.
        """
        for node in nodes:
            if not node.is_text and node.tag not in OPAQUE_TAGS and node.children:
                node.children = self.reconstruct(node.children)

        output: List[HtmlNode] = []
        run: List[ListParagraph] = []
        run_nodes: List[HtmlNode] = []

        def flush():
            if len(run) >= MIN_RUN_LENGTH:
                logger.debug(f"Reconstructed list from {len(run)} paragraph(s)")
                output.extend(self.build_lists(run))
            else:
                output.extend(run_nodes)
            run.clear()
            run_nodes.clear()

        for node in nodes:
            if node.is_text and not node.text.strip() and run:
                continue
            item = self.parse_paragraph(node)
            if item is None:
                flush()
                output.append(node)
            else:
                run.append(item)
                run_nodes.append(node)
        flush()
        return output

    def parse_paragraph(self, node: HtmlNode) -> Optional[ListParagraph]:
        """Recognize a list-like paragraph.

        Args:
            node: Candidate node

        Returns:
            ListParagraph, or None when the node is not a list-like ``p``
        """
        if node.is_text or node.tag != 'p':
            return None

        text = node.get_text()
        leading = LEADING_SPACE_PATTERN.match(text)
        leading_text = leading.group(0) if leading else ''
        body = text[len(leading_text):]

        bullet = BULLET_PATTERN.match(body)
        number = None if bullet else NUMBER_PATTERN.match(body)
        if not bullet and not number:
            return None

        kind = 'ul' if bullet else 'ol'
        marker = bullet or number
        level = self._level(node.attrs.get('style', ''), leading_text)

        children = [self._copy(child) for child in node.children]
        self._strip_prefix(children, len(leading_text) + marker.end())
        if bullet and bullet.group(1) in TASK_GLYPHS:
            children.insert(0, HtmlNode.text_node(TASK_GLYPHS[bullet.group(1)]))
        return ListParagraph(kind=kind, level=level, children=children)

    def build_lists(self, items: List[ListParagraph]) -> List[HtmlNode]:
        """Nest list paragraphs using a level/type stack.

        Deeper items open a nested list inside the previous item, items at
        the same level and type continue the current list, and shallower or
        type-changing items close levels until one matches.
        """
        roots: List[HtmlNode] = []
        stack: List[_OpenList] = []

        for item in items:
            li = HtmlNode.element('li', *item.children)
            while stack and (
                stack[-1].level > item.level
                or (stack[-1].level == item.level and stack[-1].kind != item.kind)
            ):
                stack.pop()

            if stack and stack[-1].level == item.level:
                stack[-1].node.children.append(li)
                continue

            new_list = HtmlNode.element(item.kind, li)
            if stack:
                stack[-1].node.children[-1].children.append(new_list)
            else:
                roots.append(new_list)
            stack.append(_OpenList(level=item.level, kind=item.kind, node=new_list))

        return roots

    def _level(self, style: str, leading: str) -> int:
        margin = margin_to_pt(style)
        if margin is not None:
            return max(0, int(math.floor(margin / self.indent_unit_pt)))
        if leading:
            width = sum(1 for ch in leading if ch in (NBSP, ' ')) + 2 * leading.count('\t')
            return width // self.nbsp_per_level
        return 0

    @staticmethod
    def _copy(node: HtmlNode) -> HtmlNode:
        return HtmlNode(
            tag=node.tag,
            attrs=dict(node.attrs),
            children=[ListReconstructor._copy(child) for child in node.children],
            text=node.text,
        )

    @staticmethod
    def _strip_prefix(nodes: List[HtmlNode], count: int) -> int:
        """Remove the first ``count`` text characters from ``nodes`` in place.

        Returns:
            Characters still to remove after walking ``nodes``
        """
        for node in nodes:
            if count <= 0:
                break
            if node.is_text:
                removed = min(count, len(node.text))
                node.text = node.text[removed:]
                count -= removed
            else:
                count = ListReconstructor._strip_prefix(node.children, count)
        return count
