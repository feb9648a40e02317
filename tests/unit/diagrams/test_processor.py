"""Unit tests for diagrams.processor module."""

import pytest

from mddocx.diagrams.processor import DiagramProcessor, diagram_id, parse_placeholder
from mddocx.errors import DiagramTimeoutError
from tests.fixtures import SAMPLE_MARKDOWN_WITH_DIAGRAMS, CrashingDiagramRenderer, FakeDiagramRenderer


class TestDiagramIds:
    """Test cases for diagram ids and placeholders."""

    def test_id_is_content_derived(self):
        """Same source and occurrence give the same id."""
        assert diagram_id("graph TD; A-->B", 1) == diagram_id("graph TD; A-->B", 1)
        assert diagram_id("graph TD; A-->B", 1) != diagram_id("graph TD; A-->B", 2)
        assert diagram_id("graph TD; A-->B", 1) != diagram_id("graph TD; B-->C", 1)

    def test_parse_placeholder(self):
        """Placeholder hrefs yield the diagram id."""
        assert parse_placeholder("diagram-abc123def456-1.png") == "abc123def456-1"
        assert parse_placeholder("picture.png") is None


class TestDiagramProcessor:
    """Test cases for DiagramProcessor.process."""

    def test_has_diagrams(self):
        """Only mermaid fences count as diagrams."""
        assert DiagramProcessor.has_diagrams("```mermaid\ngraph TD; A-->B\n```")
        assert not DiagramProcessor.has_diagrams("```python\nprint(1)\n```")

    def test_no_diagrams_returns_content(self):
        """Documents without diagrams pass through untouched."""
        renderer = FakeDiagramRenderer()
        result = DiagramProcessor(renderer).process("# Title\n\nText")

        assert result.content == "# Title\n\nText"
        assert result.records == []
        assert renderer.rendered == []

    def test_rendered_blocks_replaced_failed_kept(self):
        """Rendered diagrams become placeholders; failed ones stay as code."""
        renderer = FakeDiagramRenderer()
        result = DiagramProcessor(renderer).process(SAMPLE_MARKDOWN_WITH_DIAGRAMS)

        assert len(result.records) == 1
        record = result.records[0]
        assert record.is_rendered
        assert record.source_code == "graph TD; A-->B"
        assert record.placeholder in result.content
        assert "```mermaid\ninvalid syntax here\n```" in result.content
        assert result.warnings == ["Failed to render Mermaid diagram 2; kept as code block"]

    def test_renders_in_document_order(self):
        """Each block is rendered once, in order."""
        renderer = FakeDiagramRenderer()
        DiagramProcessor(renderer).process(SAMPLE_MARKDOWN_WITH_DIAGRAMS)
        assert renderer.rendered == ["graph TD; A-->B", "invalid syntax here"]

    def test_repeated_source_gets_distinct_ids(self):
        """The same diagram twice yields two records with different ids."""
        markdown = "```mermaid\ngraph TD; A-->B\n```\n\n```mermaid\ngraph TD; A-->B\n```"
        result = DiagramProcessor(FakeDiagramRenderer()).process(markdown)

        ids = [record.id for record in result.records]
        assert len(ids) == 2
        assert ids[0] != ids[1]
        assert ids[0].endswith("-1")
        assert ids[1].endswith("-2")

    def test_dimensions_recorded(self):
        """Record dimensions come from the rendered PNG."""
        result = DiagramProcessor(FakeDiagramRenderer(width=200, height=100)).process(
            "```mermaid\ngraph TD; A-->B\n```"
        )
        assert (result.records[0].width, result.records[0].height) == (200, 100)

    def test_timeout_raises(self):
        """Exceeding the budget aborts with DiagramTimeoutError."""
        renderer = FakeDiagramRenderer(delay_s=0.05)
        markdown = "```mermaid\ngraph TD; A-->B\n```\n\n```mermaid\ngraph TD; B-->C\n```"

        with pytest.raises(DiagramTimeoutError) as exc_info:
            DiagramProcessor(renderer, timeout_s=0.01).process(markdown)
        assert exc_info.value.timeout_s == 0.01

    def test_renderer_exception_keeps_block(self):
        """A renderer that raises is treated as a failed render."""
        renderer = CrashingDiagramRenderer()
        result = DiagramProcessor(renderer).process(SAMPLE_MARKDOWN_WITH_DIAGRAMS)

        assert result.records == []
        assert result.content == SAMPLE_MARKDOWN_WITH_DIAGRAMS
        assert result.warnings == [
            "Failed to render Mermaid diagram 1; kept as code block",
            "Failed to render Mermaid diagram 2; kept as code block",
        ]

    def test_remaining_budget_passed_to_renderer(self):
        """Each render gets at most the time left in the budget."""
        renderer = FakeDiagramRenderer()
        DiagramProcessor(renderer, timeout_s=30).process(SAMPLE_MARKDOWN_WITH_DIAGRAMS)

        assert len(renderer.timeouts) == 2
        assert all(0 < t <= 30_000 for t in renderer.timeouts)
        assert renderer.timeouts[1] <= renderer.timeouts[0]

    def test_no_budget_passes_none(self):
        renderer = FakeDiagramRenderer()
        DiagramProcessor(renderer).process(SAMPLE_MARKDOWN_WITH_DIAGRAMS)
        assert renderer.timeouts == [None, None]
