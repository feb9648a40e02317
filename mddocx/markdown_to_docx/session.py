"""Per-call conversion state.

A ConversionSession is created at the start of every Markdown to DOCX call
and threaded through the builders. Bookmark ids, numbering references,
headings, diagrams and warnings all live here, so nothing carries over
between calls on the same converter instance.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import ErrorCode
from ..links.slugger import AnchorMap
from ..models.conversion_result import ConversionWarning
from ..models.diagram import DiagramRecord
from ..models.document import NumberingDefinition
from ..models.options import MarkdownToDocxOptions
from ..models.tokens import BlockQuoteToken, BlockToken, HeadingToken
from ..styles.templates import DocumentTemplate, get_template

logger = logging.getLogger(__name__)


@dataclass
class HeadingEntry:
    """Heading registered before building.

    Attributes:
        level: Heading depth
        text: Visible heading text
        slug: Unique anchor slug
        bookmark: Word bookmark name for the slug
    """
    level: int
    text: str
    slug: str
    bookmark: str


@dataclass
class ConversionSession:
    """Mutable state owned by one conversion call."""
    options: MarkdownToDocxOptions = field(default_factory=MarkdownToDocxOptions)
    anchors: AnchorMap = field(default_factory=AnchorMap)
    diagrams: Dict[str, DiagramRecord] = field(default_factory=dict)
    headings: List[HeadingEntry] = field(default_factory=list)
    numbering: List[NumberingDefinition] = field(default_factory=list)
    warnings: List[ConversionWarning] = field(default_factory=list)
    blocks: List[BlockToken] = field(default_factory=list)
    image_count: int = 0
    internal_link_count: int = 0
    external_link_count: int = 0
    _bookmark_counter: int = 0
    _heading_index: Dict[int, HeadingEntry] = field(default_factory=dict)

    @property
    def template(self) -> DocumentTemplate:
        return get_template(self.options.template)

    def register_headings(self, blocks: List[BlockToken]) -> None:
        """Register every heading (including those inside quotes) in document order."""
        for block in blocks:
            if isinstance(block, HeadingToken):
                slug = self.anchors.register(block.text)
                entry = HeadingEntry(
                    level=block.depth,
                    text=block.text,
                    slug=slug,
                    bookmark=self.anchors.bookmark_for(slug),
                )
                self.headings.append(entry)
                self._heading_index[id(block)] = entry
            elif isinstance(block, BlockQuoteToken):
                self.register_headings(list(block.children))
        logger.debug(f"Registered {len(self.headings)} heading anchor(s)")

    def heading_entry(self, token: HeadingToken) -> Optional[HeadingEntry]:
        """Entry registered for a heading token."""
        return self._heading_index.get(id(token))

    def resolve_internal(self, fragment: str) -> Optional[str]:
        """Bookmark name for a ``#fragment`` link, None when dangling."""
        slug = self.anchors.resolve(fragment)
        return self.anchors.bookmark_for(slug) if slug else None

    def next_bookmark_id(self) -> int:
        bookmark_id = self._bookmark_counter
        self._bookmark_counter += 1
        return bookmark_id

    def new_numbering(self, ordered: bool, level: int = 0) -> NumberingDefinition:
        """Allocate a fresh numbering definition for one list occurrence."""
        definition = NumberingDefinition(
            ref=len(self.numbering) + 1,
            ordered=ordered,
            level=level,
        )
        self.numbering.append(definition)
        return definition

    def add_diagrams(self, records: List[DiagramRecord]) -> None:
        for record in records:
            self.diagrams[record.id] = record

    def warn(self, code: ErrorCode, message: str, detail: Optional[str] = None) -> None:
        """Record a non-fatal warning."""
        logger.warning(message)
        self.warnings.append(ConversionWarning(code=code, message=message, detail=detail))
