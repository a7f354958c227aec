"""
pasco2 history output parser.

pasco2 writes one tab-separated line per index.dat record:

    URL<TAB>Visited: Joe@http://example.com/<TAB><modified><TAB><accessed><TAB>...

Lines that do not start with the record marker are headers or other record
kinds and are skipped. The second field is either a bare URL or
"annotation@url"; the annotation carries the Windows user name wrapped in
IE container boilerplate (``Visited:``, ``:Host:``, ``:2011010120110108:``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from core.logging import get_logger
from core.timestamps import parse_utc_seconds
from ...._shared.url_utils import extract_domain

LOGGER = get_logger("extractors.browser.ie_legacy.history.parser")

RECORD_MARKER = "URL"
FIELD_DELIMITER = "\t"
MIN_FIELDS = 4
USER_URL_FIELD = 1
ACCESSED_FIELD = 3
PASCO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_LITERAL_MARKERS = ("Visited:", ":Host:")
# ":<token>:" containers such as ":2011010120110108:"; never spans "://"
_CONTAINER_MARKER = re.compile(r":[^:/\s]*:")
# URL segments: only marker runs at either end are removed
_LEADING_CONTAINERS = re.compile(r"^(?::[A-Za-z0-9]*:\s*)+")
_TRAILING_CONTAINERS = re.compile(r"(?::[A-Za-z0-9]*)+:$")


@dataclass(frozen=True, slots=True)
class Record:
    """One history visit read from pasco2 output."""

    user: str
    url: str
    domain: str
    timestamp: int


def strip_boilerplate(text: str) -> str:
    """Remove IE container markers from the user segment."""
    for marker in _LITERAL_MARKERS:
        text = text.replace(marker, "")
    text = _CONTAINER_MARKER.sub("", text)
    return text.strip().rstrip(":").strip()


def strip_url_boilerplate(text: str) -> str:
    """
    Remove IE container markers framing a URL segment.

    Colons inside the URL path are left alone:
        ":Host: www.example.com" -> "www.example.com"
        "http://example.com/wiki/File:Foo.png:thumb" -> unchanged
    """
    text = text.strip()
    if text.startswith("Visited:"):
        text = text[len("Visited:"):].strip()
    text = _LEADING_CONTAINERS.sub("", text)
    text = _TRAILING_CONTAINERS.sub("", text.rstrip())
    return text.strip()


def split_user_url(field: str) -> tuple[str, str]:
    """
    Split the user/URL field.

    Examples:
        "Visited: alice@http://example.com:Host::" -> ("alice", "http://example.com")
        "http://example.com" -> ("", "http://example.com")
    """
    if "@" in field:
        user_part, url_part = field.split("@", 1)
        return strip_boilerplate(user_part), strip_url_boilerplate(url_part)
    return "", field.strip()


class PascoOutputParser:
    """
    Single forward pass over one pasco2 output file.

    Counters are kept for diagnostics:
        skipped_lines: lines without the marker or with too few fields
        unrecognized_lines: marker lines with too few fields (subset of skipped)
        timestamp_failures: records whose access time could not be parsed
    """

    def __init__(self, source_name: str = ""):
        self.source_name = source_name
        self.skipped_lines = 0
        self.unrecognized_lines = 0
        self.timestamp_failures = 0

    def parse(self, output_path: Path) -> Iterator[Record]:
        """
        Yield records in file order.

        A missing or zero-length file yields nothing.

        Raises:
            OSError: If the file exists but cannot be opened or read
        """
        if not output_path.exists() or output_path.stat().st_size == 0:
            LOGGER.debug("No pasco2 output at %s", output_path)
            return

        with open(output_path, "r", encoding="utf-8", errors="replace") as handle:
            for line in handle:
                record = self.parse_line(line.rstrip("\r\n"))
                if record is not None:
                    yield record

        if self.skipped_lines:
            LOGGER.info(
                "Skipped %d line(s) in %s (%d unrecognized)",
                self.skipped_lines, output_path.name, self.unrecognized_lines,
            )

    def parse_line(self, line: str) -> Optional[Record]:
        if not line.startswith(RECORD_MARKER):
            self.skipped_lines += 1
            return None

        fields = line.split(FIELD_DELIMITER)
        while fields and fields[-1] == "":
            fields.pop()
        if len(fields) < MIN_FIELDS:
            self.skipped_lines += 1
            self.unrecognized_lines += 1
            LOGGER.info("Found unrecognized IE history format in %s", self.source_name or "pasco2 output")
            return None

        user, url = split_user_url(fields[USER_URL_FIELD])
        return Record(
            user=user,
            url=url,
            domain=extract_domain(url),
            timestamp=self._parse_time(fields[ACCESSED_FIELD]),
        )

    def _parse_time(self, value: str) -> int:
        if not value.strip():
            return 0
        try:
            return parse_utc_seconds(value, PASCO_DATE_FORMAT)
        except ValueError as exc:
            self.timestamp_failures += 1
            LOGGER.warning(
                "Error parsing pasco2 time %r in %s, may have partial processing of corrupt file: %s",
                value, self.source_name or "pasco2 output", exc,
            )
            return 0
