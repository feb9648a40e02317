"""Extraction of Mermaid fenced blocks and their replacement by image placeholders."""

import hashlib
import logging
import re
import time
from typing import Dict, List, Optional

from ..errors import DiagramTimeoutError
from ..models.diagram import DiagramProcessingResult, DiagramRecord, RenderedDiagram
from .renderer import DiagramRenderer

logger = logging.getLogger(__name__)

MERMAID_BLOCK_PATTERN = re.compile(r'```mermaid[ \t]*\n(?P<source>[\s\S]*?)\n?```')
PLACEHOLDER_PATTERN = re.compile(r'^diagram-(?P<id>[0-9a-f]+-\d+)\.png$')


def diagram_id(source: str, occurrence: int) -> str:
    """Content-derived diagram id: sha1 prefix of the source plus occurrence."""
    digest = hashlib.sha1(source.encode('utf-8')).hexdigest()[:12]
    return f"{digest}-{occurrence}"


def parse_placeholder(href: str) -> Optional[str]:
    """Return the diagram id referenced by a placeholder image href."""
    match = PLACEHOLDER_PATTERN.match(href)
    return match.group('id') if match else None


class DiagramProcessor:
    """Replaces Mermaid blocks in Markdown with rendered diagram placeholders.

    Each block is rendered in document order. Successful renders are
    replaced by ``![Diagram <id>](diagram-<id>.png)``; failed ones stay in
    the text as fenced code and produce one warning each.
    """

    def __init__(self, renderer: DiagramRenderer, timeout_s: Optional[float] = None):
        """Initialize processor.

        Args:
            renderer: Renderer used for every block
            timeout_s: Total budget for all diagrams; None for no limit
        """
        self.renderer = renderer
        self.timeout_s = timeout_s

    @staticmethod
    def has_diagrams(content: str) -> bool:
        return MERMAID_BLOCK_PATTERN.search(content) is not None

    def _remaining_ms(self, started: float) -> Optional[int]:
        if self.timeout_s is None:
            return None
        return max(1, int((self.timeout_s - (time.monotonic() - started)) * 1000))

    def _render(self, source: str, started: float) -> Optional[RenderedDiagram]:
        try:
            return self.renderer.render(source, timeout_ms=self._remaining_ms(started))
        except Exception as e:
            logger.warning(f"Diagram renderer raised {type(e).__name__}: {e}")
            return None

    def process(self, content: str) -> DiagramProcessingResult:
        """Render all Mermaid blocks of a Markdown document.

        Args:
            content: Markdown source

        Returns:
            DiagramProcessingResult with rewritten content, records and warnings

        Raises:
            DiagramTimeoutError: If the rendering budget is exhausted
        """
        matches = list(MERMAID_BLOCK_PATTERN.finditer(content))
        if not matches:
            return DiagramProcessingResult(content=content)

        logger.info(f"Found {len(matches)} Mermaid diagram(s)")
        started = time.monotonic()
        records: List[DiagramRecord] = []
        warnings: List[str] = []
        replacements: Dict[int, str] = {}
        occurrences: Dict[str, int] = {}

        for index, match in enumerate(matches):
            if self.timeout_s is not None and time.monotonic() - started > self.timeout_s:
                raise DiagramTimeoutError(self.timeout_s, rendered=len(records))

            source = match.group('source').strip()
            key = hashlib.sha1(source.encode('utf-8')).hexdigest()
            occurrences[key] = occurrences.get(key, 0) + 1
            record = DiagramRecord(id=diagram_id(source, occurrences[key]), source_code=source)

            rendered = self._render(source, started) if source else None
            if rendered is None:
                warnings.append(f"Failed to render Mermaid diagram {index + 1}; kept as code block")
                logger.warning(f"Mermaid diagram {record.id} could not be rendered")
                continue

            record.rendered_bytes = rendered.data
            record.width = rendered.width
            record.height = rendered.height
            records.append(record)
            replacements[index] = record.placeholder
            logger.debug(f"Rendered diagram {record.id} ({rendered.width}x{rendered.height})")

        if self.timeout_s is not None and time.monotonic() - started > self.timeout_s:
            raise DiagramTimeoutError(self.timeout_s, rendered=len(records))

        parts = []
        last = 0
        for index, match in enumerate(matches):
            if index in replacements:
                parts.append(content[last:match.start()])
                parts.append(replacements[index])
                last = match.end()
        parts.append(content[last:])

        return DiagramProcessingResult(content=''.join(parts), records=records, warnings=warnings)
