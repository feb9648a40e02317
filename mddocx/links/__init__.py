"""Anchor slugs, bookmark names and Markdown link processing."""

from .slugger import AnchorMap, bookmark_name, slugify
from .link_processor import (
    LinkProcessor,
    LinkStatistics,
    LinkType,
    ProcessedLink,
    ProcessedLinks,
    TocEntry,
)

__all__ = [
    'AnchorMap',
    'bookmark_name',
    'slugify',
    'LinkProcessor',
    'LinkStatistics',
    'LinkType',
    'ProcessedLink',
    'ProcessedLinks',
    'TocEntry',
]
