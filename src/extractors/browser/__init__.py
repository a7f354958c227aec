"""
Browser extractors organized by browser family.

Structure:
    browser/
    └── ie_legacy/   # Internet Explorer 4-9 (.url favorites, cookie .txt, index.dat)

Usage:
    from extractors.browser import ie_legacy

    # Or directly:
    from extractors.browser.ie_legacy import IEHistoryExtractor
"""

from . import ie_legacy

__all__ = ['ie_legacy']
