"""DOM-library independent HTML node.

List reconstruction works on this loose tree rather than on a parser's own
node type, so the heuristics can be tested from plain Python structures.
"""

from dataclasses import dataclass, field
from html import escape
from typing import Dict, Iterator, List, Optional

VOID_TAGS = frozenset({'br', 'hr', 'img', 'input', 'meta', 'link', 'col', 'area', 'source', 'wbr'})


@dataclass
class HtmlNode:
    """Element or text node.

    Text nodes have ``tag`` set to None and carry their content in ``text``.

    Attributes:
        tag: Lower-case tag name, None for text nodes
        attrs: Attribute mapping
        children: Child nodes in order
        text: Text content of a text node
    """
    tag: Optional[str] = None
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["HtmlNode"] = field(default_factory=list)
    text: str = ""

    @classmethod
    def element(cls, tag: str, *children: "HtmlNode", **attrs: str) -> "HtmlNode":
        """Build an element node."""
        return cls(tag=tag, attrs=dict(attrs), children=list(children))

    @classmethod
    def text_node(cls, text: str) -> "HtmlNode":
        """Build a text node."""
        return cls(tag=None, text=text)

    @property
    def is_text(self) -> bool:
        return self.tag is None

    def get_text(self) -> str:
        """Concatenated text of this node and its descendants."""
        if self.is_text:
            return self.text
        return ''.join(child.get_text() for child in self.children)

    def iter_elements(self) -> Iterator["HtmlNode"]:
        """Depth-first iteration over element descendants, self included."""
        if self.is_text:
            return
        yield self
        for child in self.children:
            yield from child.iter_elements()

    def find_all(self, tag: str) -> List["HtmlNode"]:
        """All element descendants (self included) with the given tag."""
        return [node for node in self.iter_elements() if node.tag == tag]

    def to_html(self) -> str:
        """Serialize the node back to an HTML string."""
        if self.is_text:
            return escape(self.text, quote=False)

        attrs = ''.join(
            f' {name}="{escape(str(value), quote=True)}"'
            for name, value in self.attrs.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        inner = ''.join(child.to_html() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


def nodes_to_html(nodes: List[HtmlNode]) -> str:
    """Serialize a list of sibling nodes."""
    return ''.join(node.to_html() for node in nodes)
