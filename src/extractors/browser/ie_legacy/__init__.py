"""
Internet Explorer extractors ("Internet Explorer" module).

Routines, in run order:
- IEBookmarksExtractor: Favorites/*.url shortcut files -> web bookmarks
- IECookiesExtractor: Cookies/*.txt files -> web cookies
- IEHistoryExtractor: index.dat containers, parsed by pasco2 -> web history
  plus one OS account per distinct user

Usage:
    from extractors.browser.ie_legacy import (
        IEBookmarksExtractor,
        IECookiesExtractor,
        IEHistoryExtractor,
    )
"""

from ._patterns import MODULE_NAME
from .bookmarks.extractor import IEBookmarksExtractor
from .cookies.extractor import IECookiesExtractor
from .history.extractor import IEHistoryExtractor

__all__ = [
    'MODULE_NAME',
    'IEBookmarksExtractor',
    'IECookiesExtractor',
    'IEHistoryExtractor',
]
