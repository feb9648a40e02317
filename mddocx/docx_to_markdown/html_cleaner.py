"""HTML cleanup between extraction and transcoding.

Removes Word vendor markup, normalizes whitespace, turns style-based
formatting spans into semantic tags and repairs table structure. The cleaned
markup can also be exported as an ``HtmlNode`` tree for list reconstruction.
"""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..models.html_node import HtmlNode

logger = logging.getLogger(__name__)

VENDOR_PREFIXES = ('o:', 'w:', 'v:')
EMPTY_DROPPABLE = ('p', 'div')
PRESERVE_WHITESPACE = ('pre', 'code')
BLOCK_CONTAINERS = frozenset({
    '[document]', 'html', 'body', 'div', 'blockquote', 'ul', 'ol',
    'table', 'thead', 'tbody', 'tfoot', 'tr',
})
CELL_TAGS = ('td', 'th')

# (style pattern, replacement tag); first match wins
STYLE_TAGS = [
    (re.compile(r'text-decoration\s*:\s*[^;]*underline', re.I), 'u'),
    (re.compile(r'vertical-align\s*:\s*super', re.I), 'sup'),
    (re.compile(r'vertical-align\s*:\s*sub', re.I), 'sub'),
    (re.compile(r'text-decoration\s*:\s*[^;]*line-through', re.I), 'del'),
]


def _is_vendor_attribute(name: str) -> bool:
    return name.startswith('xmlns') or name.startswith(VENDOR_PREFIXES)


class HtmlCleaner:
    """Cleans extractor HTML before it is transcoded to Markdown."""

    def __init__(self):
        """Initialize HtmlCleaner with lxml parser."""
        self.parser = "lxml"

    def clean(self, html: str) -> str:
        """Clean an HTML fragment.

        Args:
            html: HTML produced by the extractor

        Returns:
            Cleaned HTML fragment (body content only)
        """
        body = self.clean_soup(html)
        return body.decode_contents()

    def clean_soup(self, html: str) -> Tag:
        """Parse and clean, returning the body element."""
        soup = BeautifulSoup(html or '', self.parser)
        body = soup.find("body") or soup

        for comment in body.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        self._strip_vendor_markup(body)
        self._rewrite_styled_spans(body, soup)
        self._repair_tables(body, soup)
        self._drop_empty_blocks(body)
        self._strip_inter_tag_whitespace(body)
        return body

    def to_nodes(self, html: str) -> List[HtmlNode]:
        """Clean ``html`` and convert the body children to HtmlNodes."""
        body = self.clean_soup(html)
        return [node for node in (self._to_node(child) for child in body.children) if node is not None]

    def _to_node(self, element) -> Optional[HtmlNode]:
        if isinstance(element, Comment):
            return None
        if isinstance(element, NavigableString):
            return HtmlNode.text_node(str(element))
        attrs = {}
        for name, value in element.attrs.items():
            attrs[name] = ' '.join(value) if isinstance(value, list) else value
        children = [node for node in (self._to_node(child) for child in element.children) if node is not None]
        return HtmlNode(tag=element.name, attrs=attrs, children=children)

    def _strip_vendor_markup(self, body: Tag) -> None:
        for tag in list(body.find_all(True)):
            for name in [n for n in tag.attrs if _is_vendor_attribute(n)]:
                del tag.attrs[name]
            if tag.name and tag.name.startswith(VENDOR_PREFIXES):
                tag.unwrap()

    def _rewrite_styled_spans(self, body: Tag, soup: BeautifulSoup) -> None:
        for span in list(body.find_all('span')):
            style = span.get('style', '')
            for pattern, tag_name in STYLE_TAGS:
                if pattern.search(style):
                    replacement = soup.new_tag(tag_name)
                    for child in list(span.contents):
                        replacement.append(child.extract())
                    span.replace_with(replacement)
                    break

    def _repair_tables(self, body: Tag, soup: BeautifulSoup) -> None:
        """Wrap orphaned cells and rows, merge bodies, unwrap cell paragraphs."""
        for table in body.find_all('table'):
            self._wrap_runs(table, CELL_TAGS, 'tr', soup)
            self._wrap_runs(table, ('tr',), 'tbody', soup)

            bodies = table.find_all('tbody', recursive=False)
            for extra in bodies[1:]:
                for row in list(extra.children):
                    bodies[0].append(row.extract())
                extra.decompose()

        for cell in body.find_all(CELL_TAGS):
            blocks = [c for c in cell.children if isinstance(c, Tag)]
            texts = [c for c in cell.children if isinstance(c, NavigableString) and c.strip()]
            if len(blocks) == 1 and blocks[0].name == 'p' and not texts:
                blocks[0].unwrap()

    @staticmethod
    def _wrap_runs(parent: Tag, child_names, wrapper_name: str, soup: BeautifulSoup) -> None:
        """Wrap consecutive direct children named ``child_names`` in a new element."""
        run: List[Tag] = []

        def flush():
            if run:
                wrapper = soup.new_tag(wrapper_name)
                run[0].insert_before(wrapper)
                for item in run:
                    wrapper.append(item.extract())
                run.clear()

        for child in list(parent.children):
            if isinstance(child, Tag) and child.name in child_names:
                run.append(child)
            elif isinstance(child, NavigableString) and not child.strip():
                continue
            else:
                flush()
        flush()

    def _drop_empty_blocks(self, body: Tag) -> None:
        for tag in list(body.find_all(EMPTY_DROPPABLE)):
            if tag.decomposed:
                continue
            if tag.find(['img', 'br', 'a', 'table']) is not None:
                continue
            if not tag.get_text().strip():
                tag.decompose()

    def _strip_inter_tag_whitespace(self, body: Tag) -> None:
        for text in list(body.find_all(string=True)):
            if text.strip() or not isinstance(text, NavigableString):
                continue
            if text.parent is None or text.parent.name not in BLOCK_CONTAINERS:
                continue
            if text.find_parent(PRESERVE_WHITESPACE) is not None:
                continue
            previous = text.previous_sibling
            following = text.next_sibling
            if (previous is None or isinstance(previous, Tag)) and (following is None or isinstance(following, Tag)):
                text.extract()
