"""HTML to Markdown transcoding with markdownify.

The custom converter adds the rules the DOCX round trip needs: fenced code
with a sniffed language, backtick-safe inline code, ``~~strike~~``, tables
laid out on a span-aware grid, local image paths and internal links whose
anchors are re-derived from the link text.
"""

import copy
import logging
import re
from typing import Iterable, List, Optional

from markdownify import MarkdownConverter as BaseMarkdownConverter

from ..errors import TranscodeError
from ..links.slugger import slugify
from .table_grid import GridCell, build_grid, parse_span, reflow_single_column, to_pipe_table

logger = logging.getLogger(__name__)

BACKTICK_RUN = re.compile(r'`+')
MARKDOWN_ESCAPE = re.compile(r'\\([\\`*_{}\[\]()#+\-.!|~])')
BLANK_LINES = re.compile(r'\n\s*\n')
WHITESPACE = re.compile(r'\s+')
URL_SCHEME = re.compile(r'^[a-z][a-z0-9+.-]*:', re.IGNORECASE)


def detect_code_language(code: str) -> str:
    """Guess a fence language from code content ('' when unknown)."""
    if 'function' in code and '{' in code:
        return 'javascript'
    if 'def ' in code and ':' in code:
        return 'python'
    if re.search(r'^\s*#include', code, re.MULTILINE):
        return 'c'
    if 'public class' in code:
        return 'java'
    return ''


def internal_anchor(href: str, link_text: str) -> str:
    """Re-derive an internal link target from its text.

    Extractor bookmark ids (``_Toc123``, ``_8._Remarks``) are not trusted;
    the anchor is the slug of the visible link text, or of the cleaned
    fragment when the link has no text.

    Args:
        href: Original ``#fragment`` target
        link_text: Visible link text (Markdown, possibly escaped)

    Returns:
        ``#slug`` target
    """
    text = MARKDOWN_ESCAPE.sub(r'\1', link_text or '').strip()
    if text:
        return f"#{slugify(text)}"
    fragment = href.lstrip('#').lstrip('_')
    fragment = WHITESPACE.sub(' ', re.sub(r'[._]+', ' ', fragment)).strip()
    return f"#{slugify(fragment)}"


def _chomp(text: str):
    """Split ``text`` into leading whitespace, body and trailing whitespace."""
    body = text.strip()
    if not body:
        return '', '', ''
    start = text.index(body)
    return text[:start], body, text[start + len(body):]


def _fence(text: str, minimum: int = 3) -> str:
    longest = max((len(run) for run in BACKTICK_RUN.findall(text)), default=0)
    return '`' * max(minimum, longest + 1)


class _CustomMarkdownConverter(BaseMarkdownConverter):
    """markdownify converter tuned for mammoth output."""

    def __init__(self, image_dir: str = 'images', extracted_images: Iterable[str] = (),
                 preserve_line_breaks: bool = True, **options):
        options.setdefault('heading_style', 'atx')
        options.setdefault('bullets', '-')
        options.setdefault('strong_em_symbol', '*')
        super().__init__(**options)
        self.image_dir = image_dir.replace('\\', '/').strip('/') or 'images'
        self.extracted_images = set(extracted_images)
        self.preserve_line_breaks = preserve_line_breaks

    def _is_in_table_cell(self, parent_tags):
        return 'td' in parent_tags or 'th' in parent_tags

    def convert_pre(self, el, text, parent_tags):
        """Fenced code block with a sniffed language."""
        code = el.get_text().replace('\r\n', '\n').replace('\r', '\n').strip('\n')
        if not code.strip():
            return ''
        fence = _fence(code)
        return f"\n\n{fence}{detect_code_language(code)}\n{code}\n{fence}\n\n"

    def convert_code(self, el, text, parent_tags):
        """Inline code, with a longer fence when the code holds backticks."""
        if 'pre' in parent_tags:
            return text
        code = el.get_text()
        if not code:
            return ''
        fence = _fence(code, minimum=1)
        if code.startswith('`') or code.endswith('`'):
            code = f" {code} "
        return f"{fence}{code}{fence}"

    def convert_del(self, el, text, parent_tags):
        leading, body, trailing = _chomp(text)
        if '_noformat' in parent_tags or not body:
            return text
        return f"{leading}~~{body}~~{trailing}"

    convert_s = convert_del
    convert_strike = convert_del

    def _keep_html(self, tag: str, text: str, parent_tags) -> str:
        if '_noformat' in parent_tags or not text:
            return text
        return f"<{tag}>{text}</{tag}>"

    def convert_u(self, el, text, parent_tags):
        return self._keep_html('u', text, parent_tags)

    def convert_sup(self, el, text, parent_tags):
        return self._keep_html('sup', text, parent_tags)

    def convert_sub(self, el, text, parent_tags):
        return self._keep_html('sub', text, parent_tags)

    def convert_blockquote(self, el, text, parent_tags):
        """Prefix every line with '> ' (bare '>' on blank lines)."""
        if '_inline' in parent_tags:
            return text
        text = text.strip('\n')
        if not text.strip():
            return ''
        lines = [f"> {line}" if line.strip() else '>' for line in text.split('\n')]
        return '\n\n' + '\n'.join(lines) + '\n\n'

    def convert_hr(self, el, text, parent_tags):
        return '\n\n---\n\n'

    def convert_br(self, el, text, parent_tags):
        """Hard line break; literal <br> inside table cells."""
        if self._is_in_table_cell(parent_tags):
            return '<br>'
        if '_inline' in parent_tags or not self.preserve_line_breaks:
            return ' '
        return '  \n'

    def convert_img(self, el, text, parent_tags):
        """Image pointing at the extracted file, or a placeholder for inline data."""
        alt = (el.get('alt') or 'Image').replace('\n', ' ')
        src = (el.get('src') or '').replace('\\', '/')
        if src in self.extracted_images:
            return f"![{alt}](./{self.image_dir}/{src})"
        if src.startswith('data:') or not src:
            return f"*[Image: {alt}]*"
        if URL_SCHEME.match(src):
            return f"![{alt}]({src})"
        relative = re.sub(r'^\./', '', src)
        return f"![{alt}](./{relative})"

    def convert_a(self, el, text, parent_tags):
        """Links; internal fragments are re-slugged from the link text."""
        if '_noformat' in parent_tags:
            return text
        href = el.get('href')
        if not href:
            return text
        if href.startswith('#'):
            leading, label, trailing = _chomp(text)
            if not label:
                return text
            return f"{leading}[{label}]({internal_anchor(href, label)}){trailing}"
        return super().convert_a(el, text, parent_tags)

    def convert_table(self, el, text, parent_tags):
        """Pipe table from a span-aware grid."""
        rows: List[List[GridCell]] = []
        for tr in el.find_all('tr'):
            if tr.find_parent('table') is not el:
                continue
            cells = [
                GridCell(
                    text=self._cell_text(cell),
                    colspan=parse_span(cell.get('colspan')),
                    rowspan=parse_span(cell.get('rowspan')),
                    header=cell.name == 'th',
                )
                for cell in tr.find_all(['td', 'th'], recursive=False)
            ]
            rows.append(cells)

        grid = reflow_single_column(build_grid(rows))
        table = to_pipe_table(grid)
        return f"\n\n{table}\n\n" if table else ''

    def _cell_text(self, cell) -> str:
        if cell.name == 'th':
            cell = copy.copy(cell)
            for bold in cell.find_all(['strong', 'b']):
                bold.unwrap()
        markdown = self.convert(cell.decode_contents())
        paragraphs = [WHITESPACE.sub(' ', part).strip() for part in BLANK_LINES.split(markdown)]
        return '<br>'.join(p for p in paragraphs if p).replace('|', r'\|')


class HtmlTranscoder:
    """Transcodes cleaned HTML to Markdown.

    Args:
        image_dir: Directory extracted images are referenced from
        extracted_images: File names of images collected by the extractor
        preserve_line_breaks: Keep ``<br>`` as hard line breaks
    """

    def __init__(self, image_dir: str = 'images', extracted_images: Optional[Iterable[str]] = None,
                 preserve_line_breaks: bool = True):
        self.image_dir = image_dir
        self.extracted_images = list(extracted_images or [])
        self.preserve_line_breaks = preserve_line_breaks

    def transcode(self, html: str) -> str:
        """Convert HTML to Markdown.

        Args:
            html: Cleaned HTML fragment

        Returns:
            Markdown text (not yet post-processed)

        Raises:
            TranscodeError: If markdownify fails on the input
        """
        if not html:
            return ""

        try:
            converter = _CustomMarkdownConverter(
                image_dir=self.image_dir,
                extracted_images=self.extracted_images,
                preserve_line_breaks=self.preserve_line_breaks,
            )
            return converter.convert(html)
        except Exception as e:
            logger.error(f"HTML to Markdown transcoding failed: {e}")
            raise TranscodeError(str(e)) from e
