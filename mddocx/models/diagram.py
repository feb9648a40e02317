"""Diagram data models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RenderedDiagram:
    """PNG produced by a diagram renderer.

    Attributes:
        data: PNG bytes
        width: Pixel width of the PNG
        height: Pixel height of the PNG
    """
    data: bytes
    width: int
    height: int


@dataclass
class DiagramRecord:
    """Diagram registered during one conversion call.

    Attributes:
        id: Content-derived identifier (source hash prefix plus occurrence)
        source_code: Diagram source as written in the fenced block
        rendered_bytes: PNG bytes, None until rendered
        width: Pixel width of the rendered PNG
        height: Pixel height of the rendered PNG
    """
    id: str
    source_code: str
    rendered_bytes: Optional[bytes] = None
    width: int = 0
    height: int = 0

    @property
    def is_rendered(self) -> bool:
        return self.rendered_bytes is not None

    @property
    def placeholder(self) -> str:
        """Markdown image reference that replaces the fenced block."""
        return f"![Diagram {self.id}](diagram-{self.id}.png)"


@dataclass
class DiagramProcessingResult:
    """Output of diagram extraction and rendering.

    Attributes:
        content: Markdown with rendered blocks replaced by placeholders
        records: Successfully rendered diagrams, in document order
        warnings: One message per diagram that failed to render
    """
    content: str
    records: List[DiagramRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
