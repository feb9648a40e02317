"""Conversion option models.

Both option sets are plain dataclasses. ``merged_with`` overlays the fields a
caller set explicitly on top of converter-level defaults.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

HEADING_ANCHOR_STYLES = ('none', 'inline', 'attribute')
PAGE_ORIENTATIONS = ('portrait', 'landscape')
DIAGRAM_THEMES = ('default', 'forest', 'dark', 'neutral', 'base')


class _OptionsMixin:
    """Shared helpers for option dataclasses."""

    def merged_with(self, overrides: Optional[Dict[str, Any]] = None, **kwargs):
        """Return a copy with non-None overrides applied.

        Args:
            overrides: Mapping of field name to value
            **kwargs: Additional field overrides

        Returns:
            New options instance; unknown keys are ignored
        """
        values = dict(overrides or {})
        values.update(kwargs)
        known = {f.name for f in fields(self)}
        applied = {k: v for k, v in values.items() if k in known and v is not None}
        return replace(self, **applied)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class MarkdownToDocxOptions(_OptionsMixin):
    """Options for Markdown to DOCX conversion.

    Attributes:
        template: Style preset name
        diagram_theme: Mermaid theme
        title: Document title (front matter fills it when unset)
        author: Document author
        subject: Document subject (defaults to description)
        description: Document description
        generate_toc: Insert a table of contents before the body
        preserve_links: Emit hyperlinks; plain text when False
        page_orientation: 'portrait' or 'landscape'
        diagram_timeout_s: Budget for rendering all diagrams of one call
        mermaid_js_path: Local mermaid bundle for offline rendering
        detailed_warnings: Keep per-item warnings instead of summaries
    """
    template: str = 'simple'
    diagram_theme: str = 'default'
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    generate_toc: bool = False
    preserve_links: bool = True
    page_orientation: str = 'portrait'
    diagram_timeout_s: float = 30.0
    mermaid_js_path: Optional[str] = None
    detailed_warnings: bool = True


@dataclass
class DocxToMarkdownOptions(_OptionsMixin):
    """Options for DOCX to Markdown conversion.

    Attributes:
        extract_images: Collect embedded images and reference them by file name
        image_output_dir: Directory (relative to the Markdown) for extracted images
        heading_anchor_style: 'none', 'inline' or 'attribute'
        preserve_formatting: Keep single line breaks inside paragraphs
        detailed_warnings: Report every extractor message instead of counts
        indent_unit_pt: Indentation step used to infer list levels
        nbsp_per_level: Leading non-breaking spaces per list level
    """
    extract_images: bool = False
    image_output_dir: str = 'images'
    heading_anchor_style: str = 'none'
    preserve_formatting: bool = True
    detailed_warnings: bool = False
    indent_unit_pt: float = 18.0
    nbsp_per_level: int = 2
