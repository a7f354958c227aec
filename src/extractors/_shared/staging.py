"""
Copy evidence files into a local staging directory.

External tools need a real path on disk; the locator may be backed by an
image, so file content is streamed out chunk by chunk.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Optional

from core.evidence_fs import FileHandle, FileLocator
from core.logging import get_logger
from ..exceptions import StagingError

LOGGER = get_logger("extractors._shared.staging")


def stage_file(
    locator: FileLocator,
    handle: FileHandle,
    dest: Path,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> Optional[Path]:
    """
    Write ``handle``'s content to ``dest``.

    Returns:
        ``dest`` on success, or None if cancelled part-way (the partial file
        is removed)

    Raises:
        StagingError: If the source cannot be read or ``dest`` cannot be written
    """
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        with open(dest, "wb") as out:
            for chunk in locator.iter_chunks(handle):
                if is_cancelled is not None and is_cancelled():
                    break
                out.write(chunk)
            else:
                LOGGER.debug("Staged %s -> %s", handle.path, dest)
                return dest
    except (OSError, ValueError) as exc:
        remove_quietly(dest)
        raise StagingError(f"Unable to stage {handle.path} to {dest}: {exc}") from exc

    remove_quietly(dest)
    return None


def remove_quietly(path: Path) -> None:
    """Delete a file or directory tree, logging rather than raising."""
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to remove %s: %s", path, exc)
