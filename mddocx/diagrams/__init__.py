"""Mermaid diagram extraction and rendering."""

from .processor import DiagramProcessor, diagram_id, parse_placeholder
from .renderer import DiagramRenderer, PlaywrightDiagramRenderer, fit_within

__all__ = [
    'DiagramProcessor',
    'diagram_id',
    'parse_placeholder',
    'DiagramRenderer',
    'PlaywrightDiagramRenderer',
    'fit_within',
]
