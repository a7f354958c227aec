"""
Internet Explorer Bookmarks Extractor.

Parses bookmark URLs from .url shortcut files in Favorites folders.
"""

from .extractor import IEBookmarksExtractor

# Registry expects IeLegacyBookmarksExtractor (family_artifact pattern)
IeLegacyBookmarksExtractor = IEBookmarksExtractor

__all__ = ["IEBookmarksExtractor", "IeLegacyBookmarksExtractor"]
