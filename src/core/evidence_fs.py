from __future__ import annotations

import io
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from .logging import get_logger

LOGGER = get_logger("core.evidence_fs")


class StoreAccessError(Exception):
    """Raised when the data source cannot be enumerated (case/image unavailable)."""


@dataclass(frozen=True)
class FileHandle:
    """
    Read-only reference to one file inside a data source.

    Timestamps are integer Unix seconds; 0 when the filesystem does not
    record them.
    """
    id: int
    name: str
    path: str        # Normalized, forward slashes, leading "/"
    size: int
    crtime: int = 0  # Creation time (NTFS $SI Create, st_birthtime)
    atime: int = 0   # Access time

    @property
    def parent_path(self) -> str:
        return self.path.rsplit("/", 1)[0] + "/"


@lru_cache(maxsize=128)
def like_to_regex(pattern: str) -> re.Pattern:
    """
    Compile a SQL LIKE pattern ("%" any run, "_" one char) into a
    case-insensitive full-match regex.

    Example:
        >>> like_to_regex("%.url").fullmatch("Google.URL") is not None
        True
    """
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def matches_file(name: str, parent_path: str, name_pattern: str, path_pattern: Optional[str]) -> bool:
    """
    Apply the locator matching rule.

    The name must match ``name_pattern`` exactly (LIKE semantics); the parent
    path must contain ``path_pattern`` anywhere, case-insensitively.
    """
    if not like_to_regex(name_pattern).fullmatch(name):
        return False
    if path_pattern:
        return like_to_regex(f"%{path_pattern}%").fullmatch(parent_path) is not None
    return True


def find_ewf_segments(first_segment: Path) -> List[Path]:
    """
    Given the first segment of an EWF image (e.g., image.E01 or image.e01),
    discover all related segments in the same directory.

    Returns a sorted list of all found segments.
    """
    if not first_segment.exists():
        raise FileNotFoundError(f"E01 segment not found: {first_segment}")

    if not re.fullmatch(r"\.[eE]\d{2}", first_segment.suffix):
        LOGGER.warning("Unexpected EWF extension: %s", first_segment.suffix)
        return [first_segment]

    stem = first_segment.stem
    parent = first_segment.parent
    letter = first_segment.suffix[1]

    segments = [first_segment]
    for i in range(2, 100):
        next_path = parent / f"{stem}.{letter}{i:02d}"
        if not next_path.exists():
            break
        segments.append(next_path)

    LOGGER.info("Discovered %d EWF segment(s) for %s", len(segments), first_segment.name)
    return segments


class FileLocator(ABC):
    """Read-only file enumeration over one data source."""

    @abstractmethod
    def find_files(self, name_pattern: str, path_pattern: Optional[str] = None) -> List[FileHandle]:
        """
        Return files whose name matches ``name_pattern`` and whose parent
        path contains ``path_pattern``, in a stable order.

        Raises:
            StoreAccessError: If the data source cannot be enumerated
        """

    @abstractmethod
    def open_for_read(self, handle: FileHandle) -> BinaryIO:
        """Return a binary file-like object for the given file."""

    def iter_chunks(self, handle: FileHandle, chunk_size: int = 65536) -> Iterator[bytes]:
        """Yield file content in chunks without full buffering."""
        with self.open_for_read(handle) as stream:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def read_bytes(self, handle: FileHandle) -> bytes:
        return b"".join(self.iter_chunks(handle))


class MountedFileLocator(FileLocator):
    """Locator over a locally mounted or exported directory tree."""

    def __init__(self, mount_point: Path) -> None:
        if not mount_point.exists():
            raise FileNotFoundError(f"Mount point {mount_point} does not exist.")
        self.mount_point = mount_point
        self._ids: Dict[str, int] = {}
        LOGGER.info("MountedFileLocator bound to %s", mount_point)

    def find_files(self, name_pattern: str, path_pattern: Optional[str] = None) -> List[FileHandle]:
        if not self.mount_point.is_dir():
            raise StoreAccessError(f"Data source root {self.mount_point} is not available")

        results: List[FileHandle] = []
        try:
            for root, dirs, files in os.walk(self.mount_point):
                dirs.sort()
                rel_root = os.path.relpath(root, self.mount_point).replace(os.sep, "/")
                parent = "/" if rel_root == "." else f"/{rel_root}/"
                for name in sorted(files):
                    if not matches_file(name, parent, name_pattern, path_pattern):
                        continue
                    try:
                        handle = self._handle_for(parent + name, Path(root) / name)
                    except OSError as exc:
                        LOGGER.warning("Skipping unreadable entry %s%s: %s", parent, name, exc)
                        continue
                    results.append(handle)
        except OSError as exc:
            raise StoreAccessError(f"Unable to enumerate {self.mount_point}: {exc}") from exc

        LOGGER.debug("Found %d file(s) for %s in %s", len(results), name_pattern, path_pattern)
        return results

    def open_for_read(self, handle: FileHandle) -> BinaryIO:
        resolved = self._resolve_under_mount(handle.path)
        if not resolved.is_file():
            raise FileNotFoundError(f"Path {handle.path} not found under mount {self.mount_point}.")
        return resolved.open("rb")

    def _handle_for(self, rel_path: str, full_path: Path) -> FileHandle:
        file_id = self._ids.setdefault(rel_path, len(self._ids) + 1)
        st = os.stat(full_path)
        # crtime (birth time) only available on some platforms
        crtime = getattr(st, "st_birthtime", 0) or 0
        return FileHandle(
            id=file_id,
            name=full_path.name,
            path=rel_path,
            size=st.st_size,
            crtime=int(crtime),
            atime=int(st.st_atime),
        )

    def _resolve_under_mount(self, path: str) -> Path:
        """Resolve a data-source path and enforce mount root confinement."""
        base = self.mount_point.resolve()
        resolved = (self.mount_point / path.lstrip("/")).resolve()
        try:
            resolved.relative_to(base)
        except ValueError as exc:
            raise ValueError(
                f"Path traversal attempt: {path!r} resolves outside mount {self.mount_point}"
            ) from exc
        return resolved


class EwfFileLocator(FileLocator):
    """Locator over the first readable filesystem of an EWF (E01) image."""

    def __init__(self, ewf_paths: List[Path]) -> None:
        if not ewf_paths:
            raise ValueError("At least one EWF segment must be provided.")
        try:
            import pyewf  # type: ignore
            import pytsk3  # type: ignore
        except ModuleNotFoundError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError(
                "EwfFileLocator requires pyewf and pytsk3 to be installed."
            ) from exc

        self.ewf_paths = ewf_paths
        self._pytsk3 = pytsk3
        self._handle = pyewf.handle()
        self._handle.open([str(path) for path in ewf_paths])
        self._img_info = _PyEwfImgInfo(self._handle, pytsk3)
        self._fs = self._open_filesystem()
        self._paths: Dict[int, str] = {}
        LOGGER.debug("Initialized EwfFileLocator with %s segment(s)", len(ewf_paths))

    @classmethod
    def from_first_segment(cls, first_segment: Path) -> "EwfFileLocator":
        return cls(find_ewf_segments(first_segment))

    def _open_filesystem(self):
        try:
            return self._pytsk3.FS_Info(self._img_info)
        except OSError as direct_exc:
            LOGGER.debug("Direct filesystem access failed: %s", direct_exc)

        try:
            volume = self._pytsk3.Volume_Info(self._img_info)
        except OSError as exc:
            raise StoreAccessError(f"Unable to open E01 image: {exc}") from exc

        block_size = volume.info.block_size
        for part in volume:
            if part.flags != self._pytsk3.TSK_VS_PART_FLAG_ALLOC:
                continue
            try:
                return self._pytsk3.FS_Info(self._img_info, offset=part.start * block_size)
            except OSError as exc:
                LOGGER.debug("Partition %d filesystem not readable: %s", part.addr, exc)
        raise StoreAccessError("No readable filesystem found in the E01 image")

    def find_files(self, name_pattern: str, path_pattern: Optional[str] = None) -> List[FileHandle]:
        results: List[FileHandle] = []
        for full_path, meta in self._walk_entries("/"):
            if meta is None or meta.type != self._pytsk3.TSK_FS_META_TYPE_REG:
                continue
            parent, _, name = full_path.rpartition("/")
            if not matches_file(name, parent + "/", name_pattern, path_pattern):
                continue
            file_id = int(meta.addr)
            self._paths[file_id] = full_path
            results.append(FileHandle(
                id=file_id,
                name=name,
                path=full_path,
                size=int(meta.size or 0),
                crtime=int(meta.crtime or 0),
                atime=int(meta.atime or 0),
            ))
        results.sort(key=lambda h: h.path)
        return results

    def open_for_read(self, handle: FileHandle) -> BinaryIO:
        return io.BytesIO(b"".join(self.iter_chunks(handle)))

    def iter_chunks(self, handle: FileHandle, chunk_size: int = 65536) -> Iterator[bytes]:
        path = self._paths.get(handle.id, handle.path)
        try:
            file_obj = self._fs.open(path=path)
        except IOError as exc:
            raise FileNotFoundError(f"Cannot open {path}: {exc}") from exc

        size = handle.size
        offset = 0
        while offset < size:
            chunk = file_obj.read_random(offset, min(chunk_size, size - offset))
            if not chunk:
                break
            yield chunk
            offset += len(chunk)

    def _walk_entries(self, path: str) -> Iterator[tuple[str, Optional[Any]]]:
        """
        Walk the filesystem yielding (path, meta) for each entry.

        Tracks visited directory inodes so NTFS junctions cannot loop.
        """
        visited_inodes: set[int] = set()
        queue = [path]

        while queue:
            current = queue.pop()
            try:
                directory = self._fs.open_dir(path=current)
            except IOError:
                continue

            for entry in directory:
                name = getattr(entry.info.name, "name", b"").decode("utf-8", "ignore")
                if name in {".", ".."}:
                    continue
                full_path = f"{current.rstrip('/')}/{name}"
                meta = entry.info.meta

                if meta and meta.type == self._pytsk3.TSK_FS_META_TYPE_DIR:
                    inode = getattr(meta, "addr", None)
                    if inode in visited_inodes:
                        continue
                    if inode is not None:
                        visited_inodes.add(inode)
                    queue.append(full_path)

                yield full_path, meta

    def close(self) -> None:
        self._handle.close()


class _PyEwfImgInfo:
    def __new__(cls, ewf_handle, pytsk3_module):  # type: ignore[override]
        class ImgInfo(pytsk3_module.Img_Info):  # type: ignore
            def __init__(self, handle):
                self._ewf_handle = handle
                super().__init__(url="", type=pytsk3_module.TSK_IMG_TYPE_EXTERNAL)

            def close(self):  # pragma: no cover - cleanup
                self._ewf_handle.close()

            def read(self, offset: int, size: int) -> bytes:
                self._ewf_handle.seek(offset)
                return self._ewf_handle.read(size)

            def get_size(self) -> int:
                return self._ewf_handle.get_media_size()

        return ImgInfo(ewf_handle)
