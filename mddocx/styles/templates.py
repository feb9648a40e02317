"""Named style presets for generated DOCX documents.

A preset fixes the body and heading typography, code font, link colour,
table header fill and page margins. The DOCX writer applies it to the
document's built-in styles; unknown preset names fall back to 'simple'.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = 'simple'


@dataclass(frozen=True)
class HeadingStyle:
    """Typography for one heading level."""
    font: str
    size: float
    color: str
    bold: bool = True
    space_before: int = 240
    space_after: int = 120


@dataclass(frozen=True)
class DocumentTemplate:
    """Style preset.

    Attributes:
        name: Preset identifier
        description: One-line summary shown by the CLI
        body_font: Normal paragraph font
        body_size: Normal font size in points
        body_color: Normal text colour (hex RGB)
        headings: Styles for heading levels 1..n; deeper levels reuse the last
        code_font: Monospace font for code blocks and code spans
        code_size: Code font size in points
        link_color: Hyperlink colour
        table_header_fill: Shading of table header cells
        margins: (top, right, bottom, left) in inches
    """
    name: str
    description: str
    body_font: str
    body_size: float
    body_color: str
    headings: Tuple[HeadingStyle, ...]
    code_font: str = 'Courier New'
    code_size: float = 9
    link_color: str = '0000FF'
    table_header_fill: str = 'E6E6E6'
    margins: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)

    def heading(self, level: int) -> HeadingStyle:
        """Style for a heading level (1-based)."""
        index = min(max(level, 1), len(self.headings)) - 1
        return self.headings[index]


def _smaller(style: HeadingStyle, size: float) -> HeadingStyle:
    return HeadingStyle(style.font, size, style.color, style.bold, 120, 60)


_PROFESSIONAL_H2 = HeadingStyle('Calibri', 14, '2F5597', space_before=180, space_after=60)
_TECHNICAL_H3 = HeadingStyle('Source Sans Pro', 13, '424242', space_before=180, space_after=60)
_BUSINESS_H2 = HeadingStyle('Georgia', 16, '8B4513', space_before=200, space_after=80)
_ACADEMIC_H = HeadingStyle('Times New Roman', 12, '000000', space_before=240, space_after=120)
_MODERN_H2 = HeadingStyle('Segoe UI', 16, '323130', space_before=200, space_after=80)
_CLASSIC_H2 = HeadingStyle('Book Antiqua', 14, '800000', space_before=200, space_after=80)
_SIMPLE_H2 = HeadingStyle('Arial', 14, '000000', space_before=200, space_after=100)

TEMPLATES: Dict[str, DocumentTemplate] = {
    'professional-report': DocumentTemplate(
        name='professional-report',
        description='Calibri body, blue accent headings, for business reports',
        body_font='Calibri',
        body_size=12,
        body_color='333333',
        headings=(
            HeadingStyle('Calibri Light', 16, '2F5597'),
            _PROFESSIONAL_H2,
            HeadingStyle('Calibri', 13, '333333', space_before=160, space_after=60),
            _smaller(_PROFESSIONAL_H2, 12),
        ),
        code_font='Consolas',
        code_size=10,
        link_color='0563C1',
    ),
    'technical-documentation': DocumentTemplate(
        name='technical-documentation',
        description='Source Sans Pro with JetBrains Mono code, for technical docs',
        body_font='Source Sans Pro',
        body_size=11,
        body_color='333333',
        headings=(
            HeadingStyle('Source Sans Pro', 18, '1E88E5'),
            HeadingStyle('Source Sans Pro', 15, '1976D2', space_before=200, space_after=80),
            _TECHNICAL_H3,
            _smaller(_TECHNICAL_H3, 12),
        ),
        code_font='JetBrains Mono',
        code_size=9,
        link_color='1E88E5',
        table_header_fill='E3F2FD',
        margins=(1.0, 0.75, 1.0, 0.75),
    ),
    'business-proposal': DocumentTemplate(
        name='business-proposal',
        description='Georgia serif with brown accents, for proposals',
        body_font='Georgia',
        body_size=12,
        body_color='333333',
        headings=(
            HeadingStyle('Georgia', 20, '8B4513'),
            _BUSINESS_H2,
            _smaller(_BUSINESS_H2, 13),
        ),
        link_color='8B4513',
        table_header_fill='F5DEB3',
        margins=(1.25, 1.0, 1.25, 1.0),
    ),
    'academic-paper': DocumentTemplate(
        name='academic-paper',
        description='Times New Roman 12pt throughout, for papers',
        body_font='Times New Roman',
        body_size=12,
        body_color='000000',
        headings=(_ACADEMIC_H, _ACADEMIC_H, _smaller(_ACADEMIC_H, 12)),
        link_color='000000',
        table_header_fill='FFFFFF',
    ),
    'modern': DocumentTemplate(
        name='modern',
        description='Segoe UI with blue title headings and narrow margins',
        body_font='Segoe UI',
        body_size=11,
        body_color='333333',
        headings=(
            HeadingStyle('Segoe UI Light', 24, '0078D4'),
            _MODERN_H2,
            _smaller(_MODERN_H2, 13),
        ),
        code_font='Consolas',
        link_color='0078D4',
        table_header_fill='EDEBE9',
        margins=(0.5, 0.5, 0.5, 0.5),
    ),
    'classic': DocumentTemplate(
        name='classic',
        description='Book Antiqua with maroon headings',
        body_font='Book Antiqua',
        body_size=12,
        body_color='000000',
        headings=(
            HeadingStyle('Book Antiqua', 18, '800000'),
            _CLASSIC_H2,
            _smaller(_CLASSIC_H2, 12),
        ),
        link_color='800000',
        margins=(1.25, 1.0, 1.25, 1.0),
    ),
    'simple': DocumentTemplate(
        name='simple',
        description='Arial black-on-white, the default',
        body_font='Arial',
        body_size=12,
        body_color='000000',
        headings=(
            HeadingStyle('Arial', 16, '000000'),
            _SIMPLE_H2,
            _smaller(_SIMPLE_H2, 13),
            _smaller(_SIMPLE_H2, 12),
        ),
    ),
}


def get_template(name: str) -> DocumentTemplate:
    """Look up a preset by name.

    Args:
        name: Preset identifier

    Returns:
        The matching preset, or 'simple' for unknown names
    """
    template = TEMPLATES.get(name)
    if template is None:
        logger.warning(f"Unknown template '{name}', using '{DEFAULT_TEMPLATE}'")
        return TEMPLATES[DEFAULT_TEMPLATE]
    return template


def available_templates() -> List[str]:
    """Names of all presets."""
    return list(TEMPLATES)
