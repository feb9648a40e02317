"""Inline token to run mapping.

Styles are inherited top-down: a strong span inside an emphasis span yields
bold italic runs. Raw inline HTML tags (``<u>``, ``<sup>``, ...) toggle the
same style attributes for the sibling tokens between the opening and the
closing tag.
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from ..diagrams.processor import parse_placeholder
from ..links.link_processor import is_external_url
from ..links.slugger import bookmark_name
from ..models.document import (
    ExternalRefElement,
    ImageElement,
    InlineElement,
    InternalRefElement,
    LineBreakElement,
    RunElement,
    RunStyle,
)
from ..models.tokens import (
    CodeSpanToken,
    EmphasisToken,
    InlineHtmlToken,
    InlineImageToken,
    InlineToken,
    LineBreakToken,
    LinkToken,
    StrikethroughToken,
    StrongToken,
    TextToken,
    plain_text,
)
from .session import ConversionSession

logger = logging.getLogger(__name__)

HTML_TAG_PATTERN = re.compile(r'^<\s*(/)?\s*([A-Za-z][A-Za-z0-9]*)\b[^>]*?(/)?\s*>$')

# Inline HTML tags and the style attributes they switch on
HTML_STYLE_TAGS = {
    'u': {'underline': True},
    'ins': {'underline': True},
    'b': {'bold': True},
    'strong': {'bold': True},
    'i': {'italic': True},
    'em': {'italic': True},
    's': {'strike': True},
    'del': {'strike': True},
    'strike': {'strike': True},
    'sup': {'superscript': True},
    'sub': {'subscript': True},
}

PAGE_WIDTH_IN = {'portrait': 8.5, 'landscape': 11.0}
SCREEN_DPI = 96


def usable_width_px(session: ConversionSession) -> int:
    """Width between the page margins, in pixels at 96 DPI."""
    template = session.template
    page_width = PAGE_WIDTH_IN.get(session.options.page_orientation, PAGE_WIDTH_IN['portrait'])
    _, right, _, left = template.margins
    return int((page_width - left - right) * SCREEN_DPI)


def fit_to_width(width: int, height: int, max_width: int) -> Tuple[int, int]:
    """Scale (width, height) down to ``max_width`` keeping the aspect ratio."""
    if width <= max_width or width <= 0:
        return width, height
    ratio = max_width / width
    return max_width, max(1, int(round(height * ratio)))


class InlineBuilder:
    """Builds inline elements for one conversion session."""

    def __init__(self, session: ConversionSession):
        self.session = session

    @property
    def link_style(self) -> RunStyle:
        return RunStyle(color=self.session.template.link_color, underline=True)

    def build(self, tokens: Iterable[InlineToken], style: Optional[RunStyle] = None) -> List[InlineElement]:
        """Map inline tokens to inline elements.

        Args:
            tokens: Sibling inline tokens
            style: Style inherited from the enclosing container

        Returns:
            Inline elements in order
        """
        base = style or RunStyle()
        open_tags: List[Tuple[str, dict]] = []
        elements: List[InlineElement] = []

        for token in tokens:
            if isinstance(token, InlineHtmlToken):
                self._apply_html_tag(token.text, open_tags, elements)
                continue
            current = base
            for _, overrides in open_tags:
                current = current.merge(**overrides)
            self._build_token(token, current, elements)

        return elements

    def _apply_html_tag(self, raw: str, open_tags: List[Tuple[str, dict]],
                        elements: List[InlineElement]) -> None:
        match = HTML_TAG_PATTERN.match(raw.strip())
        if not match:
            logger.debug(f"Ignoring inline HTML: {raw!r}")
            return
        closing, tag, _ = match.groups()
        tag = tag.lower()

        if tag == 'br':
            elements.append(LineBreakElement())
            return
        if tag not in HTML_STYLE_TAGS:
            return
        if closing:
            for index in range(len(open_tags) - 1, -1, -1):
                if open_tags[index][0] == tag:
                    del open_tags[index]
                    break
        else:
            open_tags.append((tag, HTML_STYLE_TAGS[tag]))

    def _build_token(self, token: InlineToken, style: RunStyle, out: List[InlineElement]) -> None:
        if isinstance(token, TextToken):
            if token.text:
                out.append(RunElement(token.text, style))
        elif isinstance(token, StrongToken):
            out.extend(self.build(token.children, style.merge(bold=True)))
        elif isinstance(token, EmphasisToken):
            out.extend(self.build(token.children, style.merge(italic=True)))
        elif isinstance(token, StrikethroughToken):
            out.extend(self.build(token.children, style.merge(strike=True)))
        elif isinstance(token, CodeSpanToken):
            template = self.session.template
            out.append(RunElement(token.text, style.merge(font=template.code_font)))
        elif isinstance(token, LineBreakToken):
            out.append(LineBreakElement())
        elif isinstance(token, LinkToken):
            if self._is_hyperlink(token):
                out.append(self.build_link(token, style))
            else:
                out.extend(self._link_text(token, style))
        elif isinstance(token, InlineImageToken):
            out.append(self.build_image(token.href, token.alt, style))
        else:
            logger.debug(f"Skipping inline token {type(token).__name__}")

    def _is_hyperlink(self, token: LinkToken) -> bool:
        if not self.session.options.preserve_links:
            return False
        return token.is_internal or is_external_url(token.href)

    def _link_text(self, token: LinkToken, style: RunStyle) -> List[InlineElement]:
        if token.children:
            return self.build(token.children, style)
        return [RunElement(token.href, style)]

    def _link_runs(self, token: LinkToken, style: RunStyle) -> List[RunElement]:
        link_style = style.merge(color=self.link_style.color, underline=True)
        runs = [e for e in self._link_text(token, link_style) if isinstance(e, RunElement)]
        return runs or [RunElement(plain_text(token.children) or token.href, link_style)]

    def build_link(self, token: LinkToken, style: RunStyle) -> InlineElement:
        """Map a link to an internal or external reference element.

        Internal fragments resolve to the bookmark allocated for the target
        heading; unknown fragments fall back to their sanitized form.
        """
        runs = self._link_runs(token, style)
        if token.is_internal:
            anchor = self.session.resolve_internal(token.href) or bookmark_name(token.href)
            return InternalRefElement(anchor=anchor, runs=runs)
        return ExternalRefElement(url=token.href, runs=runs)

    def build_image(self, href: str, alt: str, style: Optional[RunStyle] = None) -> InlineElement:
        """Embed a rendered diagram or emit an italic placeholder.

        Args:
            href: Image target; diagram placeholders look like ``diagram-<id>.png``
            alt: Alternative text
            style: Inherited run style

        Returns:
            ImageElement for rendered diagrams, otherwise a RunElement
        """
        diagram_id = parse_placeholder(href)
        record = self.session.diagrams.get(diagram_id) if diagram_id else None
        if record is not None and record.is_rendered:
            width, height = fit_to_width(record.width, record.height, usable_width_px(self.session))
            self.session.image_count += 1
            return ImageElement(data=record.rendered_bytes, width=width, height=height, description=alt)

        label = alt or href
        return RunElement(f"[Image: {label}]", (style or RunStyle()).merge(italic=True))
