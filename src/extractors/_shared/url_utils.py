"""
URL helpers shared by the browser routines.

Domain derivation is a pure string function: no DNS, no network. tldextract
runs from its bundled public-suffix snapshot so results do not depend on
connectivity at analysis time.
"""

from __future__ import annotations

import ipaddress
from functools import lru_cache
from typing import Iterable
from urllib.parse import urlparse

import tldextract

_EXTRACT = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


def _host_from_url(url: str) -> str:
    text = url.strip()
    if "://" not in text:
        # Bare hosts ("www.example.com/path") parse as a path otherwise
        text = f"http://{text}"
    try:
        host = urlparse(text).hostname or ""
    except ValueError:
        return ""
    return host.rstrip(".")


@lru_cache(maxsize=4096)
def extract_domain(url: str) -> str:
    """
    Return the registered domain for ``url``.

    Examples:
        http://www.example.com/a -> example.com
        https://accounts.google.co.uk -> google.co.uk
        http://10.0.0.1:8080/ -> 10.0.0.1
        "" or "not a url" -> ""
    """
    if not url or not url.strip():
        return ""

    host = _host_from_url(url)
    if not host or any(ch.isspace() for ch in host):
        return ""

    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass

    extracted = _EXTRACT(host)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}"
    if "." in host:
        return host
    # Single-label names ("localhost") carry no public suffix
    return host if extracted.domain else ""


def is_ignored_url(url: str, prefixes: Iterable[str]) -> bool:
    """True when ``url`` is blank or starts with an ignorable scheme prefix."""
    if not url or not url.strip():
        return True
    lowered = url.strip().lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)
