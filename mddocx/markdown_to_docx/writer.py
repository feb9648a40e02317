"""Serialization of the document element tree with python-docx.

python-docx covers paragraphs, runs, tables, pictures and core properties.
Bookmarks, hyperlinks, paragraph borders/shading and list numbering have no
high-level API and are written as WordprocessingML elements directly.
"""

import io
import logging
from typing import Dict, List, Optional, Union

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.parts.numbering import NumberingPart
from docx.shared import Inches, Pt, RGBColor, Twips

from ..models.document import (
    BlockElement,
    BookmarkEndElement,
    BookmarkStartElement,
    DocumentProperties,
    ExternalRefElement,
    ImageElement,
    InlineElement,
    InternalRefElement,
    LineBreakElement,
    NumberingDefinition,
    ParagraphElement,
    RunElement,
    TableCellElement,
    TableElement,
)
from ..styles.templates import DocumentTemplate, get_template

logger = logging.getLogger(__name__)

SCREEN_DPI = 96
LIST_INDENT_TWIPS = 720
LIST_HANGING_TWIPS = 360
MAX_LIST_LEVELS = 9

ALIGNMENTS = {
    'left': WD_ALIGN_PARAGRAPH.LEFT,
    'center': WD_ALIGN_PARAGRAPH.CENTER,
    'right': WD_ALIGN_PARAGRAPH.RIGHT,
    'justify': WD_ALIGN_PARAGRAPH.JUSTIFY,
}

# Child order of w:pPr required by the WordprocessingML schema
PPR_SEQUENCE = (
    'w:pStyle', 'w:keepNext', 'w:keepLines', 'w:pageBreakBefore', 'w:framePr',
    'w:widowControl', 'w:numPr', 'w:suppressLineNumbers', 'w:pBdr', 'w:shd',
    'w:tabs', 'w:suppressAutoHyphens', 'w:kinsoku', 'w:wordWrap',
    'w:overflowPunct', 'w:topLinePunct', 'w:autoSpaceDE', 'w:autoSpaceDN',
    'w:bidi', 'w:adjustRightInd', 'w:snapToGrid', 'w:spacing', 'w:ind',
    'w:contextualSpacing', 'w:mirrorIndents', 'w:suppressOverlap', 'w:jc',
    'w:textDirection', 'w:textAlignment', 'w:textboxTightWrap',
    'w:outlineLvl', 'w:divId', 'w:cnfStyle', 'w:rPr', 'w:sectPr', 'w:pPrChange',
)
BORDER_SIDES = ('top', 'left', 'bottom', 'right')

ORDERED_FORMATS = ('decimal', 'lowerLetter', 'lowerRoman')
BULLET_GLYPHS = ('•', '◦', '▪')

THEME_FONT_ATTRIBUTES = ('w:asciiTheme', 'w:hAnsiTheme', 'w:eastAsiaTheme', 'w:cstheme')


def _successors(tag: str) -> tuple:
    return PPR_SEQUENCE[PPR_SEQUENCE.index(tag) + 1:]


def _abstract_num_xml(abstract_id: int, ordered: bool) -> str:
    levels = []
    for ilvl in range(MAX_LIST_LEVELS):
        if ordered:
            fmt = ORDERED_FORMATS[ilvl % len(ORDERED_FORMATS)]
            text = f"%{ilvl + 1}."
        else:
            fmt = 'bullet'
            text = BULLET_GLYPHS[ilvl % len(BULLET_GLYPHS)]
        left = LIST_INDENT_TWIPS * (ilvl + 1)
        levels.append(
            f'<w:lvl w:ilvl="{ilvl}">'
            f'<w:start w:val="1"/>'
            f'<w:numFmt w:val="{fmt}"/>'
            f'<w:lvlText w:val="{text}"/>'
            f'<w:lvlJc w:val="left"/>'
            f'<w:pPr><w:ind w:left="{left}" w:hanging="{LIST_HANGING_TWIPS}"/></w:pPr>'
            f'</w:lvl>'
        )
    return (
        f'<w:abstractNum {nsdecls("w")} w:abstractNumId="{abstract_id}">'
        f'<w:multiLevelType w:val="hybridMultilevel"/>'
        f'{"".join(levels)}'
        f'</w:abstractNum>'
    )


class DocxWriter:
    """Writes document elements to DOCX bytes.

    Example:
        >>> writer = DocxWriter(get_template("modern"))
        >>> data = writer.write(elements, DocumentProperties(title="Report"))
    """

    def __init__(self, template: Optional[DocumentTemplate] = None, orientation: str = 'portrait'):
        """Initialize writer.

        Args:
            template: Style preset (defaults to 'simple')
            orientation: 'portrait' or 'landscape'
        """
        self.template = template or get_template('simple')
        self.orientation = orientation

    def write(
        self,
        elements: List[BlockElement],
        properties: Optional[DocumentProperties] = None,
        numbering: Optional[List[NumberingDefinition]] = None,
    ) -> bytes:
        """Serialize elements to a DOCX package.

        Args:
            elements: Block elements in document order
            properties: Core document properties
            numbering: Numbering definitions referenced by list paragraphs

        Returns:
            DOCX file contents
        """
        document = Document()
        self._apply_page_setup(document)
        self._apply_styles(document)
        self._apply_properties(document, properties or DocumentProperties())
        num_ids = self._write_numbering(document, numbering or [])

        for element in elements:
            if isinstance(element, TableElement):
                self._write_table(document, element, num_ids)
            else:
                self._fill_paragraph(document.add_paragraph(), element, num_ids)

        buffer = io.BytesIO()
        document.save(buffer)
        logger.debug(f"Wrote DOCX with {len(elements)} block(s), {len(num_ids)} numbering instance(s)")
        return buffer.getvalue()

    # Document-level setup

    def _apply_page_setup(self, document) -> None:
        section = document.sections[0]
        if self.orientation == 'landscape':
            width, height = section.page_width, section.page_height
            section.orientation = WD_ORIENT.LANDSCAPE
            section.page_width, section.page_height = max(width, height), min(width, height)
        top, right, bottom, left = self.template.margins
        section.top_margin = Inches(top)
        section.right_margin = Inches(right)
        section.bottom_margin = Inches(bottom)
        section.left_margin = Inches(left)

    @staticmethod
    def _set_font(style, name: str) -> None:
        style.font.name = name
        rfonts = style.element.rPr.rFonts if style.element.rPr is not None else None
        if rfonts is not None:
            for attribute in THEME_FONT_ATTRIBUTES:
                rfonts.attrib.pop(qn(attribute), None)

    @staticmethod
    def _paragraph_style(document, name: str):
        try:
            return document.styles[name]
        except KeyError:
            style = document.styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)
            style.base_style = document.styles['Normal']
            return style

    def _apply_styles(self, document) -> None:
        template = self.template
        normal = document.styles['Normal']
        self._set_font(normal, template.body_font)
        normal.font.size = Pt(template.body_size)
        normal.font.color.rgb = RGBColor.from_string(template.body_color)

        for level in range(1, 7):
            heading = template.heading(level)
            style = self._paragraph_style(document, f"Heading {level}")
            self._set_font(style, heading.font)
            style.font.size = Pt(heading.size)
            style.font.bold = heading.bold
            style.font.color.rgb = RGBColor.from_string(heading.color)
            style.paragraph_format.space_before = Twips(heading.space_before)
            style.paragraph_format.space_after = Twips(heading.space_after)

        code = self._paragraph_style(document, "Code")
        self._set_font(code, template.code_font)
        code.font.size = Pt(template.code_size)
        code.paragraph_format.space_before = Twips(0)
        code.paragraph_format.space_after = Twips(0)

        quote = self._paragraph_style(document, "Quote")
        quote.font.italic = True

    @staticmethod
    def _apply_properties(document, properties: DocumentProperties) -> None:
        core = document.core_properties
        if properties.title:
            core.title = properties.title
        if properties.author:
            core.author = properties.author
        if properties.subject:
            core.subject = properties.subject
        if properties.description:
            core.comments = properties.description

    # Numbering

    @staticmethod
    def _numbering_element(document):
        try:
            return document.part.numbering_part.element
        except NotImplementedError:
            # Template without a numbering part
            part = NumberingPart(
                PackURI('/word/numbering.xml'),
                CT.WML_NUMBERING,
                parse_xml(f'<w:numbering {nsdecls("w")}/>'),
                document.part.package,
            )
            document.part.relate_to(part, RT.NUMBERING)
            return part.element

    def _write_numbering(self, document, definitions: List[NumberingDefinition]) -> Dict[int, int]:
        """Add one w:num per definition, restarting every ordered list.

        Returns:
            Mapping of definition ref to numId
        """
        if not definitions:
            return {}

        numbering = self._numbering_element(document)
        abstract_ids = [int(el.get(qn('w:abstractNumId'))) for el in numbering.findall(qn('w:abstractNum'))]
        num_ids = [int(el.get(qn('w:numId'))) for el in numbering.findall(qn('w:num'))]
        next_abstract = max(abstract_ids, default=-1) + 1
        next_num = max(num_ids, default=0) + 1

        abstract_for = {}
        first_num = numbering.find(qn('w:num'))
        for ordered in (False, True):
            abstract = parse_xml(_abstract_num_xml(next_abstract, ordered))
            if first_num is not None:
                first_num.addprevious(abstract)
            else:
                numbering.append(abstract)
            abstract_for[ordered] = next_abstract
            next_abstract += 1

        mapping = {}
        for definition in definitions:
            overrides = ''
            if definition.ordered:
                overrides = ''.join(
                    f'<w:lvlOverride w:ilvl="{ilvl}"><w:startOverride w:val="1"/></w:lvlOverride>'
                    for ilvl in range(MAX_LIST_LEVELS)
                )
            num = parse_xml(
                f'<w:num {nsdecls("w")} w:numId="{next_num}">'
                f'<w:abstractNumId w:val="{abstract_for[definition.ordered]}"/>'
                f'{overrides}</w:num>'
            )
            numbering.append(num)
            mapping[definition.ref] = next_num
            next_num += 1
        return mapping

    # Blocks

    def _write_table(self, document, element: TableElement, num_ids: Dict[int, int]) -> None:
        columns = element.column_count
        if columns == 0:
            return
        table = document.add_table(rows=len(element.rows), cols=columns)
        try:
            table.style = document.styles['Table Grid']
        except KeyError:
            logger.debug("Template has no 'Table Grid' style")

        tbl_width = table._tbl.tblPr.find(qn('w:tblW'))
        if tbl_width is not None:
            tbl_width.set(qn('w:type'), 'pct')
            tbl_width.set(qn('w:w'), '5000')

        for r, row in enumerate(element.rows):
            for c, cell_element in enumerate(row[:columns]):
                self._write_cell(table.cell(r, c), cell_element, num_ids)

        if element.header_row and element.rows:
            tr_pr = table.rows[0]._tr.get_or_add_trPr()
            tr_pr.append(OxmlElement('w:tblHeader'))

    def _write_cell(self, cell, element: TableCellElement, num_ids: Dict[int, int]) -> None:
        for index, paragraph_element in enumerate(element.paragraphs):
            paragraph = cell.paragraphs[0] if index == 0 else cell.add_paragraph()
            self._fill_paragraph(paragraph, paragraph_element, num_ids)
        if element.shading:
            tc_pr = cell._tc.get_or_add_tcPr()
            tc_pr.append(self._shading(element.shading))

    @staticmethod
    def _shading(fill: str):
        shd = OxmlElement('w:shd')
        shd.set(qn('w:val'), 'clear')
        shd.set(qn('w:color'), 'auto')
        shd.set(qn('w:fill'), fill)
        return shd

    def _fill_paragraph(self, paragraph, element: ParagraphElement, num_ids: Dict[int, int]) -> None:
        """Apply paragraph properties and write its inline elements."""
        if element.style:
            paragraph.style = self._paragraph_style(paragraph.part.document, element.style)

        fmt = paragraph.paragraph_format
        if element.spacing.before is not None:
            fmt.space_before = Twips(element.spacing.before)
        if element.spacing.after is not None:
            fmt.space_after = Twips(element.spacing.after)
        if element.indent:
            fmt.left_indent = Twips(element.indent)
        if element.alignment in ALIGNMENTS:
            fmt.alignment = ALIGNMENTS[element.alignment]

        p_pr = paragraph._p.get_or_add_pPr()
        if element.numbering is not None and element.numbering.definition.ref in num_ids:
            num_pr = p_pr.get_or_add_numPr()
            num_pr.get_or_add_ilvl().val = element.numbering.level
            num_pr.get_or_add_numId().val = num_ids[element.numbering.definition.ref]
        if element.borders:
            p_pr.insert_element_before(self._borders(element), *_successors('w:pBdr'))
        if element.shading:
            p_pr.insert_element_before(self._shading(element.shading), *_successors('w:shd'))

        for inline in element.runs:
            self._write_inline(paragraph, inline)

    @staticmethod
    def _borders(element: ParagraphElement):
        p_bdr = OxmlElement('w:pBdr')
        for side in BORDER_SIDES:
            if side in element.borders:
                border = OxmlElement(f'w:{side}')
                border.set(qn('w:val'), 'single')
                border.set(qn('w:sz'), '6')
                border.set(qn('w:space'), '4')
                border.set(qn('w:color'), element.border_color)
                p_bdr.append(border)
        return p_bdr

    # Inline content

    def _write_inline(self, paragraph, element: InlineElement) -> None:
        if isinstance(element, RunElement):
            self._add_run(paragraph, element)
        elif isinstance(element, LineBreakElement):
            paragraph.add_run().add_break()
        elif isinstance(element, BookmarkStartElement):
            start = OxmlElement('w:bookmarkStart')
            start.set(qn('w:id'), str(element.id))
            start.set(qn('w:name'), element.name)
            paragraph._p.append(start)
        elif isinstance(element, BookmarkEndElement):
            end = OxmlElement('w:bookmarkEnd')
            end.set(qn('w:id'), str(element.id))
            paragraph._p.append(end)
        elif isinstance(element, (InternalRefElement, ExternalRefElement)):
            self._add_hyperlink(paragraph, element)
        elif isinstance(element, ImageElement):
            run = paragraph.add_run()
            run.add_picture(
                io.BytesIO(element.data),
                width=Inches(element.width / SCREEN_DPI),
                height=Inches(element.height / SCREEN_DPI),
            )
        else:
            logger.debug(f"Skipping unknown inline element {type(element).__name__}")

    @staticmethod
    def _add_run(paragraph, element: RunElement):
        run = paragraph.add_run(element.text)
        style = element.style
        if style.bold:
            run.bold = True
        if style.italic:
            run.italic = True
        if style.underline:
            run.underline = True
        if style.strike:
            run.font.strike = True
        if style.superscript:
            run.font.superscript = True
        if style.subscript:
            run.font.subscript = True
        if style.font:
            run.font.name = style.font
        if style.size:
            run.font.size = Pt(style.size)
        if style.color:
            run.font.color.rgb = RGBColor.from_string(style.color)
        return run

    def _add_hyperlink(self, paragraph, element: Union[InternalRefElement, ExternalRefElement]) -> None:
        hyperlink = OxmlElement('w:hyperlink')
        if isinstance(element, InternalRefElement):
            hyperlink.set(qn('w:anchor'), element.anchor)
        else:
            r_id = paragraph.part.relate_to(element.url, RT.HYPERLINK, is_external=True)
            hyperlink.set(qn('r:id'), r_id)
        hyperlink.set(qn('w:history'), '1')
        paragraph._p.append(hyperlink)

        for run_element in element.runs:
            run = self._add_run(paragraph, run_element)
            hyperlink.append(run._r)
