"""
Internet Explorer file patterns.

Patterns use the locator's LIKE syntax: ``%`` matches any run of
characters in the file name, and the path pattern must appear somewhere in
the file's parent directory path.

Covers IE 4-9 per-user artifacts:
- Favorites/**/*.url (bookmarks, INI-style shortcut files)
- Cookies/*.txt (one cookie per file)
- index.dat (history containers, parsed with pasco2)

Usage:
    from extractors.browser.ie_legacy._patterns import IE_ARTIFACTS

    name_pattern, path_pattern = IE_ARTIFACTS["bookmarks"]
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

MODULE_NAME = "Internet Explorer"

BOOKMARK_NAME_PATTERN = "%.url"
BOOKMARK_PATH_PATTERN = "Favorites"

COOKIE_NAME_PATTERN = "%.txt"
COOKIE_PATH_PATTERN = "Cookies"

HISTORY_FILE_NAME = "index.dat"

# Sub-directory of the data source temp dir holding staged index.dat files
# and pasco2 output
TEMP_SUBDIR = "IE"

IE_ARTIFACTS: Dict[str, Tuple[str, Optional[str]]] = {
    "bookmarks": (BOOKMARK_NAME_PATTERN, BOOKMARK_PATH_PATTERN),
    "cookies": (COOKIE_NAME_PATTERN, COOKIE_PATH_PATTERN),
    "history": (HISTORY_FILE_NAME, None),
}
