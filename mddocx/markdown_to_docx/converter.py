"""Markdown to DOCX conversion pipeline.

Pipeline: front matter -> Mermaid diagrams -> nested-link cleanup ->
tokenize -> anchors -> build elements -> write DOCX. Every call creates its
own ConversionSession and diagram renderer; the renderer is always closed.
"""

import logging
import time
from typing import Callable, List, Optional

from ..diagrams.processor import DiagramProcessor
from ..diagrams.renderer import DiagramRenderer, PlaywrightDiagramRenderer
from ..errors import DiagramTimeoutError, EmptyInputError, ErrorCode, MdDocxError
from ..links.link_processor import LinkProcessor
from ..models.conversion_result import ConversionMetadata, ConversionResult
from ..models.document import BlockElement, DocumentProperties
from ..models.options import MarkdownToDocxOptions
from .blocks import BlockBuilder
from .frontmatter import FrontMatterHandler
from .session import ConversionSession
from .tokenizer import MarkdownTokenizer, normalize_nested_links
from .writer import DocxWriter

logger = logging.getLogger(__name__)

RendererFactory = Callable[[MarkdownToDocxOptions], DiagramRenderer]


def default_renderer_factory(options: MarkdownToDocxOptions) -> DiagramRenderer:
    """Create the headless-browser renderer for one call."""
    return PlaywrightDiagramRenderer(theme=options.diagram_theme, mermaid_js_path=options.mermaid_js_path)


class MarkdownToDocxConverter:
    """Converts Markdown text to DOCX bytes.

    Example:
        >>> converter = MarkdownToDocxConverter()
        >>> result = converter.convert("# Title\\n\\nBody", MarkdownToDocxOptions(template="modern"))
        >>> result.success
        True
    """

    def __init__(self, renderer_factory: Optional[RendererFactory] = None):
        """Initialize converter.

        Args:
            renderer_factory: Builds a diagram renderer per call; defaults to
                the Playwright renderer
        """
        self.renderer_factory = renderer_factory or default_renderer_factory
        self.tokenizer = MarkdownTokenizer()

    def convert(self, markdown: str, options: Optional[MarkdownToDocxOptions] = None) -> ConversionResult:
        """Convert Markdown to DOCX.

        Args:
            markdown: Markdown source, optionally with front matter
            options: Conversion options

        Returns:
            ConversionResult with DOCX bytes, or a failed result
        """
        started = time.perf_counter()
        options = options or MarkdownToDocxOptions()
        input_size = len(markdown.encode('utf-8')) if markdown else 0
        metadata = ConversionMetadata(input_size=input_size)
        session: Optional[ConversionSession] = None

        try:
            session = self._prepare(markdown, options)
            elements = self._build(session)
            output = DocxWriter(session.template, session.options.page_orientation).write(
                elements,
                DocumentProperties(
                    title=session.options.title,
                    author=session.options.author,
                    subject=session.options.subject,
                    description=session.options.description,
                ),
                session.numbering,
            )
        except MdDocxError as e:
            logger.error(f"Markdown to DOCX conversion failed: {e}")
            metadata.processing_time_ms = (time.perf_counter() - started) * 1000
            return ConversionResult.from_error(e, metadata, session.warnings if session else None)
        except Exception as e:
            logger.exception("Unexpected error during Markdown to DOCX conversion")
            metadata.processing_time_ms = (time.perf_counter() - started) * 1000
            return ConversionResult.failed(
                ErrorCode.CONVERSION_FAILED,
                f"Markdown to DOCX conversion failed: {e}",
                metadata=metadata,
                warnings=session.warnings if session else None,
            )

        metadata.output_size = len(output)
        metadata.diagram_count = len(session.diagrams)
        metadata.image_count = session.image_count
        metadata.processing_time_ms = (time.perf_counter() - started) * 1000
        metadata.internal_link_count = session.internal_link_count
        metadata.external_link_count = session.external_link_count
        logger.info(
            f"Converted Markdown to DOCX ({metadata.output_size} bytes, "
            f"{metadata.diagram_count} diagram(s), {len(session.warnings)} warning(s))"
        )
        return ConversionResult.ok(output, metadata, session.warnings)

    def convert_to_elements(self, markdown: str,
                            options: Optional[MarkdownToDocxOptions] = None) -> List[BlockElement]:
        """Build the element tree without serializing it.

        Raises:
            MdDocxError: On empty input or diagram timeout
        """
        session = self._prepare(markdown, options or MarkdownToDocxOptions())
        return self._build(session)

    def _prepare(self, markdown: str, options: MarkdownToDocxOptions) -> ConversionSession:
        """Run the text-level stages and return a session ready for building."""
        if not markdown or not markdown.strip():
            raise EmptyInputError("Markdown")

        meta, body = FrontMatterHandler.split(markdown)
        session = ConversionSession(options=FrontMatterHandler.apply(meta, options))

        if DiagramProcessor.has_diagrams(body):
            body = self._render_diagrams(body, session)

        body = normalize_nested_links(body)

        links = LinkProcessor().process_markdown_links(body)
        session.internal_link_count = links.internal_count
        session.external_link_count = links.external_count
        for link in links.broken_anchors:
            session.warn(ErrorCode.BROKEN_LINK, f"Broken internal link: {link.url}", detail=link.url)

        session.blocks = self.tokenizer.tokenize(body)
        session.register_headings(session.blocks)
        return session

    def _render_diagrams(self, body: str, session: ConversionSession) -> str:
        renderer = self.renderer_factory(session.options)
        try:
            processor = DiagramProcessor(renderer, timeout_s=session.options.diagram_timeout_s)
            result = processor.process(body)
        except DiagramTimeoutError:
            logger.error("Diagram rendering timed out; aborting conversion")
            raise
        finally:
            renderer.close()

        session.add_diagrams(result.records)
        for message in result.warnings:
            session.warn(ErrorCode.DIAGRAM_RENDER_FAILED, message)
        return result.content

    @staticmethod
    def _build(session: ConversionSession) -> List[BlockElement]:
        return BlockBuilder(session).build_document(session.blocks)
