"""
Internet Explorer Cookies Extractor.

Parses cookie name, value and URL from per-cookie .txt files.
"""

from .extractor import IECookiesExtractor

# Registry expects IeLegacyCookiesExtractor (family_artifact pattern)
IeLegacyCookiesExtractor = IECookiesExtractor

__all__ = ["IECookiesExtractor", "IeLegacyCookiesExtractor"]
