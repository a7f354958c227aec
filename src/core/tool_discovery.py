from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .logging import get_logger

LOGGER = get_logger("core.tool_discovery")

# Executables looked up on PATH
TOOL_CANDIDATES: Dict[str, Iterable[str]] = {
    "java": ("java",),
}

# Tools shipped as a directory of jars: tool id -> marker file inside the directory
TOOL_DIRECTORIES: Dict[str, str] = {
    "pasco2": "pasco2.jar",
}

DEFAULT_TOOL_SEARCH_DIRS: tuple[Path, ...] = (
    Path("/usr/local/share"),
    Path("/usr/share"),
    Path("/opt"),
)


@dataclass(slots=True)
class ToolInfo:
    """Description of an external tool present on the system."""

    name: str
    path: Optional[Path]
    version: Optional[str]

    @property
    def available(self) -> bool:
        return self.path is not None


def discover_tools(
    overrides: Optional[Mapping[str, Path]] = None,
    search_dirs: Iterable[Path] = DEFAULT_TOOL_SEARCH_DIRS,
) -> Dict[str, ToolInfo]:
    """Discover supported external tools, optionally using user-provided overrides."""
    search_dirs = list(search_dirs)
    tools: Dict[str, ToolInfo] = {}
    for name in list(TOOL_CANDIDATES) + list(TOOL_DIRECTORIES):
        path = locate_tool(name, overrides, search_dirs)
        version = None
        if path and name in TOOL_CANDIDATES:
            version = get_tool_version([str(path)])
        tools[name] = ToolInfo(name=name, path=path, version=version)
    return tools


def locate_tool(
    tool_id: str,
    overrides: Optional[Mapping[str, Path]] = None,
    search_dirs: Iterable[Path] = DEFAULT_TOOL_SEARCH_DIRS,
) -> Optional[Path]:
    """
    Resolve a tool id to a path, or None when it cannot be found.

    Overrides win when they point at something that exists. Executables are
    then looked up on PATH; directory tools are searched for under
    ``search_dirs`` by their marker file.
    """
    override = (overrides or {}).get(tool_id)
    if override is not None:
        override = Path(override)
        if _is_valid(tool_id, override):
            LOGGER.debug("Using override for tool %s: %s", tool_id, override)
            return override
        LOGGER.warning("Ignoring override for tool %s: %s is not usable", tool_id, override)

    if tool_id in TOOL_CANDIDATES:
        return _which(TOOL_CANDIDATES[tool_id])

    if tool_id in TOOL_DIRECTORIES:
        for base in search_dirs:
            candidate = Path(base) / tool_id
            if _is_valid(tool_id, candidate):
                return candidate
        return None

    LOGGER.warning("Unknown tool requested: %s", tool_id)
    return None


def get_tool_version(cmd: List[str]) -> Optional[str]:
    """Attempt to retrieve the version string for an external tool."""
    try:
        process = subprocess.run(
            cmd + ["-version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        LOGGER.warning("Unable to determine version for %s: %s", cmd, exc)
        return None

    output = (process.stdout or "").strip()
    if not output:
        return None
    first_line = output.splitlines()[0]
    LOGGER.debug("Detected tool version for %s: %s", cmd[0], first_line)
    return first_line


def _is_valid(tool_id: str, path: Path) -> bool:
    marker = TOOL_DIRECTORIES.get(tool_id)
    if marker is not None:
        return path.is_dir() and (path / marker).is_file()
    return path.exists()


def _which(candidates: Iterable[str]) -> Optional[Path]:
    for candidate in candidates:
        found = shutil.which(candidate)
        if found:
            return Path(found)
    return None
