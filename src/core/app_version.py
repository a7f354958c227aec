"""Version string for run logs and routine metadata."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "recentactivity"
UNKNOWN_VERSION = "0.0.0"


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """
    Return the installed distribution version.

    Falls back to ``pyproject.toml`` for source checkouts that were never
    installed.
    """
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        content = pyproject_path.read_text(encoding="utf-8")
    except OSError:
        return UNKNOWN_VERSION

    match = re.search(r'^\s*version\s*=\s*"([^"]+)"\s*$', content, flags=re.MULTILINE)
    return match.group(1) if match else UNKNOWN_VERSION
