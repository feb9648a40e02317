"""Markdown post-processing after transcoding.

Each step is a small line-oriented rewrite; ``MarkdownPostProcessor.process``
runs them in a fixed order.
"""

import logging
import re
from typing import List

from ..links.slugger import slugify
from ..models.options import HEADING_ANCHOR_STYLES

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*)$')
FENCE_PATTERN = re.compile(r'^\s*(```|~~~)')
BULLET_PATTERN = re.compile(r'^(\s*)([-*+])\s+')
NUMBER_PATTERN = re.compile(r'^(\s*)(\d+)\.\s+')
TASK_GLYPH_PATTERN = re.compile(r'^(\s*)(?:[-*+]\s+)?([☐☒])\s+')
MARKER_PATTERN = re.compile(r'^(#{1,6}\s|\s*[-*+]\s|\s*\d+\.\s|>\s?|\||<a id=)')
MARKDOWN_LINK = re.compile(r'!?\[[^\]]+\]\([^)]+\)')
CODE_HINT = re.compile(
    r'[{;}=]|\b(def|function|class|console\.|import|return|let\s|const\s|var\s|#include)\b'
)
INDENTED_CODE = re.compile(r'^(\s{4,}|\t)')
MIN_CODE_RUN = 2


def _code_mask(lines: List[str]) -> List[bool]:
    """True for every line that is a fence or sits inside a fenced block."""
    mask = []
    in_fence = False
    for line in lines:
        if FENCE_PATTERN.match(line):
            mask.append(True)
            in_fence = not in_fence
        else:
            mask.append(in_fence)
    return mask


def normalize_whitespace(markdown: str) -> str:
    """Unify line endings, expand NBSP and drop trailing spaces (except hard breaks)."""
    text = markdown.replace('\r\n', '\n').replace('\r', '\n').replace('\u00a0', ' ')
    lines = []
    for line in text.split('\n'):
        if line.endswith('  ') and line.strip():
            lines.append(line.rstrip() + '  ')
        else:
            lines.append(line.rstrip())
    return '\n'.join(lines)


def fix_markers(markdown: str) -> str:
    """Normalize heading, list, task and blockquote markers."""
    source = markdown.split('\n')
    lines = []
    for line, in_code in zip(source, _code_mask(source)):
        if in_code:
            lines.append(line)
            continue
        heading = HEADING_PATTERN.match(line)
        if heading:
            line = f"{heading.group(1)} {heading.group(2).strip()}"
        else:
            task = TASK_GLYPH_PATTERN.match(line)
            if task:
                box = '[x]' if task.group(2) == '☒' else '[ ]'
                line = f"{task.group(1)}- {box} {line[task.end():]}"
            else:
                line = BULLET_PATTERN.sub(r'\1- ', line)
                line = NUMBER_PATTERN.sub(r'\1\2. ', line)
                line = re.sub(r'^>[ \t]*(?=\S)', '> ', line)
        lines.append(line)
    return '\n'.join(lines)


def collapse_blank_lines(markdown: str) -> str:
    return re.sub(r'\n{3,}', '\n\n', markdown)


def unescape_heading_dots(markdown: str) -> str:
    """'# 1\\. Intro' -> '# 1. Intro'."""
    lines = markdown.split('\n')
    mask = _code_mask(lines)
    for i, line in enumerate(lines):
        if not mask[i] and HEADING_PATTERN.match(line):
            lines[i] = line.replace('\\.', '.')
    return '\n'.join(lines)


def apply_heading_anchors(markdown: str, style: str = 'none') -> str:
    """Add explicit anchors to headings.

    Args:
        markdown: Markdown text
        style: 'none', 'inline' (``<a id="slug"></a>`` line before the
            heading) or 'attribute' (``{#slug}`` suffix)

    Returns:
        Markdown with anchors; unchanged for 'none' or unknown styles
    """
    if style not in HEADING_ANCHOR_STYLES or style == 'none':
        return markdown

    out: List[str] = []
    lines = markdown.split('\n')
    for line, in_code in zip(lines, _code_mask(lines)):
        heading = None if in_code else HEADING_PATTERN.match(line)
        if not heading:
            out.append(line)
            continue
        slug = slugify(heading.group(2))
        if style == 'inline':
            out.append(f'<a id="{slug}"></a>')
            out.append(line)
        else:
            out.append(f"{line} {{#{slug}}}")
    return '\n'.join(out)


def _looks_like_code(line: str) -> bool:
    if MARKDOWN_LINK.search(line):
        return False
    return bool(CODE_HINT.search(line) or INDENTED_CODE.match(line))


def fence_code_runs(markdown: str) -> str:
    """Fence unfenced runs of two or more code-looking lines.

    Runs that contain Markdown links are treated as prose. Heading, list,
    quote, table and anchor lines end a run.
    """
    lines = markdown.split('\n')
    out: List[str] = []
    i = 0
    while i < len(lines):
        if FENCE_PATTERN.match(lines[i]):
            out.append(lines[i])
            i += 1
            while i < len(lines) and not FENCE_PATTERN.match(lines[i]):
                out.append(lines[i])
                i += 1
            if i < len(lines):
                out.append(lines[i])
                i += 1
            continue

        if not MARKER_PATTERN.match(lines[i]) and _looks_like_code(lines[i]):
            block: List[str] = []
            j = i
            while (j < len(lines) and lines[j].strip()
                   and not FENCE_PATTERN.match(lines[j]) and not MARKER_PATTERN.match(lines[j])):
                block.append(lines[j])
                j += 1
            if len(block) >= MIN_CODE_RUN and not any(MARKDOWN_LINK.search(b) for b in block):
                logger.debug(f"Fenced {len(block)} code-looking line(s)")
                out.append('```')
                out.extend(block)
                out.append('```')
                i = j
                continue

        out.append(lines[i])
        i += 1
    return '\n'.join(out)


def normalize_nested_lists(markdown: str) -> str:
    """Indent nested bullets and numbers in consistent 2-space steps."""
    lines = markdown.split('\n')
    last_indent = 0
    last_was_list = False
    mask = _code_mask(lines)
    for i, line in enumerate(lines):
        if mask[i]:
            last_was_list = False
            continue
        bullet = BULLET_PATTERN.match(line)
        number = None if bullet else NUMBER_PATTERN.match(line)
        if bullet or number:
            match = bullet or number
            spaces = len(match.group(1).replace('\t', '  '))
            if last_was_list and last_indent < spaces < last_indent + 2:
                spaces = last_indent + 2
            if spaces % 2:
                spaces += 1
            marker = '- ' if bullet else f"{number.group(2)}. "
            lines[i] = ' ' * spaces + marker + line[match.end():]
            last_indent = spaces
            last_was_list = True
        elif not line.strip():
            last_indent = 0
            last_was_list = False
        else:
            last_was_list = False
    return '\n'.join(lines)


class MarkdownPostProcessor:
    """Cleans transcoded Markdown produced from DOCX."""

    def process(self, markdown: str, heading_anchor_style: str = 'none') -> str:
        """Run all post-processing steps.

        Args:
            markdown: Transcoded Markdown
            heading_anchor_style: 'none', 'inline' or 'attribute'

        Returns:
            Final Markdown, trimmed
        """
        processed = normalize_whitespace(markdown or '')
        processed = fix_markers(processed)
        processed = collapse_blank_lines(processed)
        processed = unescape_heading_dots(processed)
        processed = apply_heading_anchors(processed, heading_anchor_style)
        processed = fence_code_runs(processed)
        processed = normalize_nested_lists(processed)
        return processed.strip()
