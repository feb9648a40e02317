"""YAML front matter parsing for Markdown input.

A Markdown document may start with a ``---`` delimited block. Its title,
author, description and subject fields fill in document properties that the
caller left unset.
"""

import logging
import re
from typing import Any, Dict, Tuple

import yaml

from ..models.options import MarkdownToDocxOptions

logger = logging.getLogger(__name__)


class FrontMatterHandler:
    """Splits and interprets front matter blocks.

    Blocks that are not valid YAML are read as simple ``key: value`` lines so
    that loosely written metadata still reaches the document properties.
    """

    # Regex pattern to match front matter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'\A\ufeff?---\s*\n(.*?)\n---\s*(?:\n|\Z)',
        re.DOTALL
    )

    SIMPLE_LINE_PATTERN = re.compile(r'^\s*([A-Za-z0-9_-]+)\s*:\s*(.*?)\s*$')

    # Front matter keys that map onto document properties
    METADATA_FIELDS = ('title', 'author', 'description', 'subject')

    # Maximum allowed depth for YAML structures
    MAX_YAML_DEPTH = 10

    @classmethod
    def _depth(cls, obj: Any, current: int = 0) -> int:
        if isinstance(obj, dict):
            return max((cls._depth(v, current + 1) for v in obj.values()), default=current + 1)
        if isinstance(obj, list):
            return max((cls._depth(v, current + 1) for v in obj), default=current + 1)
        return current

    @classmethod
    def _parse_simple(cls, block: str) -> Dict[str, str]:
        meta = {}
        for line in block.splitlines():
            match = cls.SIMPLE_LINE_PATTERN.match(line)
            if match:
                value = match.group(2).strip().strip('"').strip("'")
                meta[match.group(1)] = value
        return meta

    @classmethod
    def split(cls, content: str) -> Tuple[Dict[str, Any], str]:
        """Separate front matter from the Markdown body.

        Args:
            content: Full Markdown document

        Returns:
            Tuple of (metadata dict, body). Documents without front matter
            return an empty dict and the content unchanged.
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        block = match.group(1)
        body = content[match.end():]
        try:
            meta = yaml.safe_load(block)
        except yaml.YAMLError as e:
            logger.debug(f"Front matter is not valid YAML, reading key/value lines: {e}")
            meta = cls._parse_simple(block)

        if meta is None:
            meta = {}
        if not isinstance(meta, dict) or cls._depth(meta) > cls.MAX_YAML_DEPTH:
            logger.debug("Front matter is not a flat mapping, reading key/value lines")
            meta = cls._parse_simple(block)

        return meta, body

    @classmethod
    def apply(cls, meta: Dict[str, Any], options: MarkdownToDocxOptions) -> MarkdownToDocxOptions:
        """Fill unset document properties from front matter.

        Explicit options always win. Subject falls back to the description.

        Args:
            meta: Parsed front matter
            options: Caller options

        Returns:
            Options with document properties merged
        """
        values = {}
        for key in cls.METADATA_FIELDS:
            value = meta.get(key)
            if value is not None and getattr(options, key) is None:
                values[key] = str(value)

        merged = options.merged_with(values)
        if merged.subject is None and merged.description is not None:
            merged = merged.merged_with(subject=merged.description)
        return merged
