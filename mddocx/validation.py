"""Markdown validation and document statistics."""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .diagrams.processor import MERMAID_BLOCK_PATTERN
from .links.link_processor import LinkProcessor, LinkType, iter_markdown_headings
from .utils.file_utils import format_bytes

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200

IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\([^)]*\)')
LINK_PATTERN = re.compile(r'\[[^\]]*\]\([^)]*\)')
TABLE_ROW_PATTERN = re.compile(r'^\s*\|.*\|\s*$', re.MULTILINE)


@dataclass
class ValidationReport:
    """Findings of validate_markdown.

    Attributes:
        is_valid: True when there are no warnings
        warnings: Problems worth fixing before conversion
        suggestions: Informational notes about the content
    """
    is_valid: bool = True
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


@dataclass
class MarkdownStats:
    """Size and content counts of a Markdown document."""
    file_size: str
    word_count: int
    reading_time: int
    line_count: int
    image_count: int
    link_count: int


def validate_markdown(content: str) -> ValidationReport:
    """Check Markdown for common conversion problems.

    Warns about missing headings, malformed URLs and links to headings
    that do not exist; notes diagram and table counts.

    Args:
        content: Markdown text

    Returns:
        ValidationReport
    """
    report = ValidationReport()
    content = content or ''

    if not any(True for _ in iter_markdown_headings(content)):
        report.warnings.append("No headings found - consider adding section headers")

    processor = LinkProcessor()
    links = processor.process_markdown_links(content).links
    for link in links:
        url = link.url
        if url.startswith('http') and '://' not in url:
            report.warnings.append(f"Potentially malformed URL: {url}")
        elif link.link_type == LinkType.ANCHOR and not link.is_valid:
            report.warnings.append(f"Link to missing heading: {url}")

    diagrams = len(MERMAID_BLOCK_PATTERN.findall(content))
    if diagrams:
        report.suggestions.append(f"Found {diagrams} Mermaid diagram(s) - will be converted to images")

    table_rows = len(TABLE_ROW_PATTERN.findall(content))
    if table_rows:
        report.suggestions.append(f"Found {table_rows} table row(s) - formatting will be preserved")

    report.is_valid = not report.warnings
    logger.debug(f"Validated Markdown: {len(report.warnings)} warning(s)")
    return report


def markdown_stats(content: str, size: Optional[int] = None) -> MarkdownStats:
    """Word, line, image and link counts plus reading time at 200 wpm.

    Links exclude images. ``size`` defaults to the UTF-8 length of ``content``.
    """
    content = content or ''
    if size is None:
        size = len(content.encode('utf-8'))
    words = len(content.split())
    images = len(IMAGE_PATTERN.findall(content))
    links = sum(
        1 for match in LINK_PATTERN.finditer(content)
        if match.start() == 0 or content[match.start() - 1] != '!'
    )
    return MarkdownStats(
        file_size=format_bytes(size),
        word_count=words,
        reading_time=math.ceil(words / WORDS_PER_MINUTE),
        line_count=len(content.split('\n')),
        image_count=images,
        link_count=links,
    )
