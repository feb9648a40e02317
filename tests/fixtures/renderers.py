"""Diagram renderer test doubles.

FakeDiagramRenderer produces real PNG bytes with Pillow so the DOCX writer can
embed them, without launching a browser.
"""

import io
import time
from typing import List, Optional

from PIL import Image

from mddocx.diagrams.renderer import fit_within
from mddocx.models.diagram import RenderedDiagram


def make_png(width: int = 120, height: int = 80, color: str = 'white') -> bytes:
    """Encode a solid-colour PNG."""
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buffer, format='PNG')
    return buffer.getvalue()


class FakeDiagramRenderer:
    """Renders every source to a fixed-size PNG.

    Sources containing "invalid" fail like a Mermaid syntax error would.

    Attributes:
        rendered: Sources passed to render, in call order
        timeouts: timeout_ms values passed to render, in call order
        closed: Number of close() calls
    """

    def __init__(self, width: int = 120, height: int = 80, delay_s: float = 0.0):
        self.width = width
        self.height = height
        self.delay_s = delay_s
        self.rendered: List[str] = []
        self.timeouts: List[Optional[int]] = []
        self.closed = 0

    def render(self, source: str, timeout_ms: Optional[int] = None) -> Optional[RenderedDiagram]:
        self.rendered.append(source)
        self.timeouts.append(timeout_ms)
        if self.delay_s:
            time.sleep(self.delay_s)
        if 'invalid' in source:
            return None
        return fit_within(make_png(self.width, self.height))

    def close(self) -> None:
        self.closed += 1


def fake_renderer_factory(renderer: FakeDiagramRenderer):
    """Renderer factory that always hands out ``renderer``."""

    def factory(options):
        return renderer

    return factory


class CrashingDiagramRenderer(FakeDiagramRenderer):
    """Renderer whose every render raises, like a browser that cannot launch."""

    def render(self, source: str, timeout_ms: Optional[int] = None) -> Optional[RenderedDiagram]:
        self.rendered.append(source)
        raise RuntimeError("Executable doesn't exist")
