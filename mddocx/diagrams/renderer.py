"""Mermaid diagram rendering through headless Chromium.

The renderer sits behind the narrow ``DiagramRenderer`` protocol so converters
can be driven by a fake in tests. ``PlaywrightDiagramRenderer`` launches the
browser lazily on the first render and owns it until ``close()``; one
renderer instance belongs to exactly one conversion call.
"""

import html
import io
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from PIL import Image
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..models.diagram import RenderedDiagram

logger = logging.getLogger(__name__)

MERMAID_JS_ENV = "MDDOCX_MERMAID_JS"
MERMAID_CDN_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"

MAX_DIAGRAM_WIDTH = 800
MAX_DIAGRAM_HEIGHT = 600
DEFAULT_RENDER_TIMEOUT_MS = 10_000
VIEWPORT = {"width": 1200, "height": 800}

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  body {{ margin: 0; padding: 20px; font-family: Arial, sans-serif; background: white; }}
  .mermaid {{ text-align: center; }}
</style>
</head>
<body>
<div class="mermaid">
{source}
</div>
</body>
</html>"""

_RUN_MERMAID = """theme => {
  mermaid.initialize({
    startOnLoad: false,
    theme: theme,
    securityLevel: 'strict',
    flowchart: { htmlLabels: true, curve: 'basis' }
  });
  return mermaid.run({ querySelector: '.mermaid' });
}"""


class DiagramRenderer(Protocol):
    """Renders diagram source to a PNG."""

    def render(self, source: str, timeout_ms: Optional[int] = None) -> Optional[RenderedDiagram]:
        """Render one diagram; None when the source cannot be rendered.

        ``timeout_ms`` caps the time spent on this diagram when given.
        """
        ...

    def close(self) -> None:
        """Release rendering resources; safe to call repeatedly."""
        ...


def fit_within(png: bytes, max_width: int = MAX_DIAGRAM_WIDTH,
               max_height: int = MAX_DIAGRAM_HEIGHT) -> RenderedDiagram:
    """Downscale a PNG to fit inside a box, never enlarging it.

    Args:
        png: Source PNG bytes
        max_width: Maximum width in pixels
        max_height: Maximum height in pixels

    Returns:
        RenderedDiagram with re-encoded PNG bytes and final dimensions
    """
    with Image.open(io.BytesIO(png)) as img:
        if img.mode not in ('RGB', 'RGBA'):
            img = img.convert('RGBA')
        img.thumbnail((max_width, max_height), Image.LANCZOS)
        out = io.BytesIO()
        img.save(out, format='PNG', optimize=True)
        return RenderedDiagram(data=out.getvalue(), width=img.width, height=img.height)


class PlaywrightDiagramRenderer:
    """Renders Mermaid diagrams to PNG with a headless Chromium.

    The mermaid bundle comes from ``mermaid_js_path``, the MDDOCX_MERMAID_JS
    environment variable, or the jsDelivr CDN, in that order. With a local
    bundle the browser context runs offline.

    Example:
        >>> with PlaywrightDiagramRenderer(theme="forest") as renderer:
        ...     diagram = renderer.render("graph TD; A-->B")
    """

    def __init__(
        self,
        theme: str = "default",
        mermaid_js_path: Optional[str] = None,
        timeout_ms: int = DEFAULT_RENDER_TIMEOUT_MS,
    ):
        """Initialize renderer without starting a browser.

        Args:
            theme: Mermaid theme name
            mermaid_js_path: Local mermaid.min.js for offline rendering
            timeout_ms: Per-diagram wait for the SVG to appear
        """
        self.theme = theme
        self.timeout_ms = timeout_ms
        script = mermaid_js_path or os.environ.get(MERMAID_JS_ENV)
        self.mermaid_js_path: Optional[Path] = Path(script) if script else None
        self._playwright = None
        self._browser = None
        self._context = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    def _ensure_browser(self) -> None:
        if self._browser is not None:
            return
        logger.debug("Launching headless Chromium for diagram rendering")
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=True,
                args=['--disable-dev-shm-usage', '--disable-gpu', '--no-sandbox'],
            )
            self._context = self._browser.new_context(
                viewport=VIEWPORT,
                offline=self.mermaid_js_path is not None,
            )
        except PlaywrightError:
            self.close()
            raise

    def render(self, source: str, timeout_ms: Optional[int] = None) -> Optional[RenderedDiagram]:
        """Render Mermaid source to a PNG scaled to fit 800x600.

        Browser launch failures, Playwright errors and unreadable screenshots
        are logged and reported as a failed render.

        Args:
            source: Mermaid diagram definition
            timeout_ms: Upper bound for this diagram; lowers ``self.timeout_ms``

        Returns:
            RenderedDiagram, or None if the diagram failed to render
        """
        if not source.strip():
            return None

        budget_ms = self.timeout_ms if timeout_ms is None else max(1, min(self.timeout_ms, timeout_ms))
        page = None
        try:
            self._ensure_browser()
            page = self._context.new_page()
            page.set_default_timeout(budget_ms)
            page.set_content(_PAGE_TEMPLATE.format(source=html.escape(source)))
            if self.mermaid_js_path is not None:
                page.add_script_tag(path=str(self.mermaid_js_path))
            else:
                page.add_script_tag(url=MERMAID_CDN_URL)
            page.evaluate(_RUN_MERMAID, self.theme)
            page.wait_for_selector('.mermaid svg', timeout=budget_ms)

            svg = page.query_selector('.mermaid svg')
            if svg is None:
                logger.warning("Mermaid produced no SVG element")
                return None
            screenshot = svg.screenshot(type='png', omit_background=False)
            return fit_within(screenshot)
        except PlaywrightTimeoutError:
            logger.warning(f"Timed out after {budget_ms}ms waiting for diagram SVG")
            return None
        except PlaywrightError as e:
            logger.warning(f"Diagram rendering failed: {e}")
            return None
        except OSError as e:
            logger.warning(f"Diagram screenshot could not be re-encoded: {e}")
            return None
        finally:
            if page is not None:
                page.close()

    def close(self) -> None:
        """Close the browser and stop Playwright; idempotent."""
        context, browser, pw = self._context, self._browser, self._playwright
        self._context = None
        self._browser = None
        self._playwright = None

        try:
            if context is not None:
                context.close()
            if browser is not None:
                browser.close()
        except PlaywrightError as e:
            logger.debug(f"Error closing browser: {e}")
        finally:
            if pw is not None:
                pw.stop()
                logger.debug("Diagram renderer closed")

    def __enter__(self) -> "PlaywrightDiagramRenderer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
