"""Heading slugs, Word bookmark names and the per-document anchor map.

The same ``slugify`` function is used by both conversion directions so that
an internal link written in Markdown survives a DOCX round trip.
"""

import re
import unicodedata
from typing import Dict, Iterator, List, Optional, Tuple

MAX_BOOKMARK_LENGTH = 40

# Characters NFKD does not decompose into an ASCII base letter
_TRANSLITERATIONS = {
    'ß': 'ss',
    'æ': 'ae',
    'ø': 'o',
    'đ': 'd',
    'ł': 'l',
    'œ': 'oe',
    'þ': 'th',
}

# Punctuation that separates words rather than disappearing
_SEPARATORS = re.compile(r"[/_,:;·]")
_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_SLUG_RUNS = re.compile(r"[\s_-]+")
_INVALID_BOOKMARK_CHARS = re.compile(r"[^A-Za-z0-9_]")


def _fold_accents(text: str) -> str:
    """Reduce accented letters to their ASCII base letter."""
    text = ''.join(_TRANSLITERATIONS.get(ch, ch) for ch in text)
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str) -> str:
    """Convert heading text to a GitHub-style anchor slug.

    Pure and idempotent: ``slugify(slugify(x)) == slugify(x)``.

    Args:
        text: Heading or link text

    Returns:
        Lower-case slug of ``[a-z0-9-]`` without leading/trailing hyphens
        (may be empty when the text has no usable characters)

    Example:
        >>> slugify("Café au lait & Co.")
        'cafe-au-lait-and-co'
    """
    slug = _fold_accents(text.lower())
    slug = _SEPARATORS.sub('-', slug)
    slug = slug.replace('&amp;', 'and').replace('&', 'and')
    slug = slug.replace('.', '')
    slug = _INVALID_SLUG_CHARS.sub('', slug)
    slug = _SLUG_RUNS.sub('-', slug.strip())
    return slug.strip('-')


def bookmark_name(anchor: str) -> str:
    """Sanitize an anchor to Word's bookmark-name grammar.

    Bookmark names are limited to letters, digits and underscores, at most
    40 characters, must not start with a digit, and names starting with an
    underscore are hidden by Word.

    Args:
        anchor: Slug or fragment, with or without a leading '#'

    Returns:
        Valid bookmark name ('heading' when nothing usable remains)
    """
    name = anchor.lstrip('#')
    name = _INVALID_BOOKMARK_CHARS.sub('_', _fold_accents(name))
    name = re.sub(r'_+', '_', name).strip('_')
    if not name:
        name = 'heading'
    if name[0].isdigit():
        name = 'h' + name
    return name[:MAX_BOOKMARK_LENGTH].rstrip('_')


class AnchorMap:
    """Slug registry for one document.

    Headings are registered in document order. The first heading with a
    given slug keeps it; later duplicates get ``-1``, ``-2``, ... suffixes.
    Each slug also owns a unique bookmark name, disambiguated the same way
    when truncation to 40 characters makes two names collide.

    Example:
        >>> anchors = AnchorMap()
        >>> anchors.register("Setup")
        'setup'
        >>> anchors.register("Setup")
        'setup-1'
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self._bookmarks: Dict[str, str] = {}
        self._used_bookmarks: set = set()

    def register(self, text: str) -> str:
        """Register heading text and return its unique slug.

        Args:
            text: Visible heading text

        Returns:
            Unique slug for the heading
        """
        base = slugify(text) or 'section'
        slug = base
        suffix = 0
        while slug in self._entries:
            suffix += 1
            slug = f"{base}-{suffix}"
        self._entries[slug] = text
        self._bookmarks[slug] = self._allocate_bookmark(slug)
        return slug

    def _allocate_bookmark(self, slug: str) -> str:
        name = bookmark_name(slug)
        candidate = name
        suffix = 0
        while candidate in self._used_bookmarks:
            suffix += 1
            tail = f"_{suffix}"
            candidate = name[:MAX_BOOKMARK_LENGTH - len(tail)] + tail
        self._used_bookmarks.add(candidate)
        return candidate

    def resolve(self, fragment: str) -> Optional[str]:
        """Find the registered slug a link fragment points at.

        Tries the fragment verbatim first, then its slugified form, so that
        ``#Getting Started`` and ``#getting-started`` both resolve.

        Args:
            fragment: Link target with or without the leading '#'

        Returns:
            Registered slug, or None for a dangling reference
        """
        target = fragment.lstrip('#')
        if target in self._entries:
            return target
        slug = slugify(target)
        if slug in self._entries:
            return slug
        return None

    def bookmark_for(self, slug: str) -> Optional[str]:
        """Bookmark name allocated to a registered slug."""
        return self._bookmarks.get(slug)

    def text_for(self, slug: str) -> Optional[str]:
        """Heading text registered under a slug."""
        return self._entries.get(slug)

    def items(self) -> List[Tuple[str, str]]:
        """(slug, text) pairs in registration order."""
        return list(self._entries.items())

    def __contains__(self, slug: str) -> bool:
        return slug in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
