"""
Timestamp conversion utilities.

Artifacts store timestamps as integer Unix seconds (UTC). These helpers
convert tool output strings into that form and format run durations for
logs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union


def parse_utc_seconds(value: str, fmt: str) -> int:
    """
    Parse a UTC date-time string with a fixed ``strptime`` format.

    Sub-second precision is truncated.

    Args:
        value: Date-time text, e.g. "2011-03-04T10:11:12.345Z"
        fmt: strptime format, e.g. "%Y-%m-%dT%H:%M:%S.%fZ"

    Returns:
        Unix seconds

    Raises:
        ValueError: If the text does not match the format
    """
    dt = datetime.strptime(value.strip(), fmt).replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string.

    Example:
        >>> format_duration(3661)
        '1h 1m 1s'
    """
    if seconds < 0:
        return "0s"

    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
