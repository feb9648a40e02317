"""Link discovery, validation and table-of-contents generation for Markdown.

LinkProcessor scans Markdown source (outside code) for inline, reference and
image links, classifies them, checks fragment links against the document's
AnchorMap and produces the statistics reported in conversion metadata.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from .slugger import AnchorMap, bookmark_name

logger = logging.getLogger(__name__)

EXTERNAL_SCHEMES = ('http', 'https', 'mailto', 'ftp')

HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.+?)\s*#*\s*$')
FENCE_PATTERN = re.compile(r'^\s*(```|~~~)')
INLINE_CODE_PATTERN = re.compile(r'(`+)(?:(?!\1).)+?\1')
INLINE_LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\(\s*<?([^)\s>]+)>?(?:\s+"([^"]*)")?\s*\)')
IMAGE_LINK_PATTERN = re.compile(r'!\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+"[^"]*")?\s*\)')
REFERENCE_LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\[([^\]]*)\]')
REFERENCE_DEFINITION_PATTERN = re.compile(r'^\s{0,3}\[([^\]]+)\]:\s*<?(\S+?)>?(?:\s+"([^"]*)")?\s*$', re.MULTILINE)
MARKUP_IN_HEADING = re.compile(r'[*_~`]')
LINK_IN_HEADING = re.compile(r'!?\[([^\]]*)\]\([^)]*\)')


class LinkType(Enum):
    """Kinds of links found in Markdown."""
    ANCHOR = "anchor"
    EXTERNAL = "external"
    INTERNAL = "internal"
    IMAGE = "image"


@dataclass
class ProcessedLink:
    """Link found in Markdown.

    Attributes:
        text: Visible link text (alt text for images)
        url: Target as written
        link_type: Classification of the target
        is_valid: False for dangling anchors and malformed URLs
        processed_url: Resolved slug (anchors) or the URL itself
        title: Optional link title
    """
    text: str
    url: str
    link_type: LinkType
    is_valid: bool = True
    processed_url: Optional[str] = None
    title: Optional[str] = None


@dataclass
class ProcessedLinks:
    """Output of ``LinkProcessor.process_markdown_links``.

    Attributes:
        content: Markdown with reference-style links rewritten inline
        links: Every link found, in discovery order
    """
    content: str
    links: List[ProcessedLink] = field(default_factory=list)

    def count(self, link_type: LinkType) -> int:
        return sum(1 for link in self.links if link.link_type == link_type)

    @property
    def internal_count(self) -> int:
        return self.count(LinkType.ANCHOR)

    @property
    def external_count(self) -> int:
        return self.count(LinkType.EXTERNAL)

    @property
    def broken_anchors(self) -> List[ProcessedLink]:
        return [l for l in self.links if l.link_type == LinkType.ANCHOR and not l.is_valid]


@dataclass
class TocEntry:
    """Table of contents entry."""
    title: str
    level: int
    anchor: str


@dataclass
class WordLink:
    """Link target expressed in Word terms: a URL hyperlink or a bookmark."""
    text: str
    target: str
    kind: str


@dataclass
class LinkStatistics:
    """Counts of links by type and validity."""
    total: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    valid: int = 0
    invalid: int = 0


def is_external_url(url: str) -> bool:
    """Check if a URL uses one of the external schemes."""
    parsed = urlparse(url)
    return parsed.scheme.lower() in EXTERNAL_SCHEMES


def is_valid_url(url: str) -> bool:
    """Check if an external URL is well formed."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    scheme = parsed.scheme.lower()
    if scheme in ('http', 'https', 'ftp'):
        return bool(parsed.netloc) and ' ' not in url
    if scheme == 'mailto':
        return '@' in parsed.path
    return False


def heading_plain_text(raw: str) -> str:
    """Strip inline Markdown from a heading line's text."""
    text = LINK_IN_HEADING.sub(r'\1', raw)
    return MARKUP_IN_HEADING.sub('', text).strip()


def iter_markdown_headings(markdown: str) -> Iterator[Tuple[int, str]]:
    """Yield (level, plain text) for ATX headings outside fenced code."""
    in_fence = False
    for line in markdown.splitlines():
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = HEADING_PATTERN.match(line)
        if match:
            yield len(match.group(1)), heading_plain_text(match.group(2))


def strip_code(markdown: str) -> str:
    """Blank out fenced code blocks and code spans so links inside them are ignored."""
    lines = []
    in_fence = False
    for line in markdown.splitlines():
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            lines.append('')
            continue
        lines.append('' if in_fence else INLINE_CODE_PATTERN.sub('', line))
    return '\n'.join(lines)


class LinkProcessor:
    """Processes links in Markdown content.

    An instance holds the AnchorMap of the last processed document; create a
    fresh instance per conversion.

    Example:
        >>> processor = LinkProcessor()
        >>> result = processor.process_markdown_links("# Intro\\n[see](#intro)")
        >>> result.internal_count
        1
    """

    def __init__(self):
        self.anchors = AnchorMap()

    def build_anchor_map(self, markdown: str) -> AnchorMap:
        """Register every heading of the document in a new AnchorMap.

        Args:
            markdown: Markdown source

        Returns:
            The AnchorMap, also kept on the instance
        """
        self.anchors = AnchorMap()
        for _, text in iter_markdown_headings(markdown):
            self.anchors.register(text)
        logger.debug(f"Built anchor map with {len(self.anchors)} entries")
        return self.anchors

    def process_markdown_links(self, markdown: str) -> ProcessedLinks:
        """Find, classify and validate all links of a Markdown document.

        Reference-style links whose definition exists are rewritten as inline
        links in the returned content.

        Args:
            markdown: Markdown source

        Returns:
            ProcessedLinks with rewritten content and discovered links
        """
        self.build_anchor_map(markdown)
        content = self.resolve_reference_links(markdown)
        scan = strip_code(content)
        links: List[ProcessedLink] = []

        for match in INLINE_LINK_PATTERN.finditer(scan):
            text, url, title = match.group(1).strip(), match.group(2).strip(), match.group(3)
            links.append(self._classify(text, url, title))

        for match in IMAGE_LINK_PATTERN.finditer(scan):
            links.append(ProcessedLink(
                text=match.group(1) or 'Image',
                url=match.group(2).strip(),
                link_type=LinkType.IMAGE,
            ))

        logger.info(
            f"Processed {len(links)} links "
            f"(anchor: {sum(1 for l in links if l.link_type == LinkType.ANCHOR)}, "
            f"external: {sum(1 for l in links if l.link_type == LinkType.EXTERNAL)})"
        )
        return ProcessedLinks(content=content, links=links)

    def _classify(self, text: str, url: str, title: Optional[str] = None) -> ProcessedLink:
        if url.startswith('#'):
            slug = self.anchors.resolve(url)
            return ProcessedLink(
                text=text,
                url=url,
                link_type=LinkType.ANCHOR,
                is_valid=slug is not None,
                processed_url=slug,
                title=title,
            )
        if is_external_url(url):
            return ProcessedLink(
                text=text,
                url=url,
                link_type=LinkType.EXTERNAL,
                is_valid=is_valid_url(url),
                processed_url=url,
                title=title,
            )
        return ProcessedLink(text=text, url=url, link_type=LinkType.INTERNAL, processed_url=url, title=title)

    @staticmethod
    def extract_reference_definitions(markdown: str) -> Dict[str, Tuple[str, Optional[str]]]:
        """Map lower-cased reference labels to (url, title)."""
        definitions = {}
        for match in REFERENCE_DEFINITION_PATTERN.finditer(markdown):
            label, url, title = match.groups()
            definitions.setdefault(label.strip().lower(), (url.strip(), title))
        return definitions

    def resolve_reference_links(self, markdown: str) -> str:
        """Rewrite ``[text][ref]`` and ``[text][]`` as inline links.

        Undefined references are left untouched.
        """
        definitions = self.extract_reference_definitions(markdown)
        if not definitions:
            return markdown

        def replace(match: re.Match) -> str:
            text, label = match.group(1), match.group(2)
            key = (label or text).strip().lower()
            if key not in definitions:
                return match.group(0)
            url, title = definitions[key]
            if title:
                return f'[{text}]({url} "{title}")'
            return f'[{text}]({url})'

        return REFERENCE_LINK_PATTERN.sub(replace, markdown)

    def validate_links(self, links: List[ProcessedLink]) -> List[ProcessedLink]:
        """Re-check links against the current anchor map and URL grammar."""
        validated = []
        for link in links:
            if link.link_type == LinkType.ANCHOR:
                slug = self.anchors.resolve(link.url)
                validated.append(ProcessedLink(
                    link.text, link.url, link.link_type, slug is not None, slug or link.url, link.title
                ))
            elif link.link_type == LinkType.EXTERNAL:
                validated.append(ProcessedLink(
                    link.text, link.url, link.link_type, is_valid_url(link.url), link.url, link.title
                ))
            else:
                validated.append(link)
        return validated

    def to_word_links(self, links: List[ProcessedLink]) -> List[WordLink]:
        """Express links as Word hyperlinks or bookmark references."""
        word_links = []
        for link in links:
            if link.link_type == LinkType.ANCHOR:
                slug = self.anchors.resolve(link.url)
                target = self.anchors.bookmark_for(slug) if slug else bookmark_name(link.url)
                word_links.append(WordLink(link.text, target, 'bookmark'))
            elif link.link_type != LinkType.IMAGE:
                word_links.append(WordLink(link.text, link.url, 'hyperlink'))
        return word_links

    def generate_table_of_contents(self, markdown: str) -> Tuple[str, List[TocEntry]]:
        """Build a Markdown TOC from the document's headings.

        Args:
            markdown: Markdown source

        Returns:
            Tuple of (TOC Markdown, entries)
        """
        anchors = AnchorMap()
        entries = [
            TocEntry(title=text, level=level, anchor=anchors.register(text))
            for level, text in iter_markdown_headings(markdown)
        ]
        lines = ['# Table of Contents', '']
        for entry in entries:
            indent = '  ' * (entry.level - 1)
            lines.append(f"{indent}- [{entry.title}](#{entry.anchor})")
        return '\n'.join(lines), entries

    @staticmethod
    def update_internal_links(content: str, heading_map: Dict[str, str]) -> str:
        """Point fragment links at new anchors after headings were renamed.

        Args:
            content: Markdown source
            heading_map: Old anchor to new anchor

        Returns:
            Markdown with updated fragment links
        """
        for old_anchor, new_anchor in heading_map.items():
            pattern = re.compile(r'\[([^\]]+)\]\(#' + re.escape(old_anchor) + r'\)')
            content = pattern.sub(lambda m: f"[{m.group(1)}](#{new_anchor})", content)
        return content

    @staticmethod
    def get_link_statistics(links: List[ProcessedLink]) -> LinkStatistics:
        """Count links by type and validity."""
        stats = LinkStatistics(total=len(links))
        for link in links:
            key = link.link_type.value
            stats.by_type[key] = stats.by_type.get(key, 0) + 1
            if link.is_valid:
                stats.valid += 1
            else:
                stats.invalid += 1
        return stats
