"""Evidence, store and callback fixtures for extraction tests."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from core.blackboard import Artifact, BlackboardError, InMemoryBlackboard
from core.enums import ArtifactType
from core.evidence_fs import FileHandle, MountedFileLocator
from extractors._shared.tool_runner import ToolRunResult
from extractors.base import ExtractionContext
from extractors.exceptions import ToolLaunchError


class RecordingCallbacks:
    """ExtractorCallbacks that keep everything they are told."""

    def __init__(self, cancel_when: Optional[Callable[["RecordingCallbacks"], bool]] = None):
        self.progress: List[tuple[int, int, str]] = []
        self.logs: List[tuple[str, str]] = []
        self.errors: List[tuple[str, str]] = []
        self.steps: List[str] = []
        self.cancel_when = cancel_when
        self.cancelled = False

    def on_progress(self, current: int, total: int, message: str = "") -> None:
        self.progress.append((current, total, message))

    def on_log(self, message: str, level: str = "info") -> None:
        self.logs.append((message, level))

    def on_error(self, error: str, details: str = "") -> None:
        self.errors.append((error, details))

    def on_step(self, step_name: str) -> None:
        self.steps.append(step_name)

    def is_cancelled(self) -> bool:
        if not self.cancelled and self.cancel_when is not None and self.cancel_when(self):
            self.cancelled = True
        return self.cancelled

    def cancel(self) -> None:
        self.cancelled = True


class FlakyBlackboard(InMemoryBlackboard):
    """In-memory store that rejects selected operations."""

    def __init__(
        self,
        fail_new_kinds: Sequence[ArtifactType] = (),
        fail_post_kinds: Sequence[ArtifactType] = (),
    ):
        super().__init__()
        self.fail_new_kinds = set(fail_new_kinds)
        self.fail_post_kinds = set(fail_post_kinds)

    def new_artifact(self, kind: ArtifactType, source_file_id: int) -> Artifact:
        if kind in self.fail_new_kinds:
            raise BlackboardError(f"refusing {kind}")
        return super().new_artifact(kind, source_file_id)

    def post_artifacts(self, artifacts: Sequence[Artifact], module_name: str) -> None:
        if any(artifact.kind in self.fail_post_kinds for artifact in artifacts):
            raise BlackboardError("post rejected")
        super().post_artifacts(artifacts, module_name)


class ScriptedRunner:
    """
    Stand-in for ToolRunner that writes canned output instead of running pasco2.

    ``outputs`` is consumed one entry per run; None means "write nothing".
    ``before_run`` is called with the run index before anything is written.
    """

    def __init__(
        self,
        outputs: Sequence[Optional[str]] = (),
        exit_code: int = 0,
        launch_error: bool = False,
        before_run: Optional[Callable[[int], None]] = None,
    ):
        self.outputs = list(outputs)
        self.exit_code = exit_code
        self.launch_error = launch_error
        self.before_run = before_run
        self.calls: List[Path] = []

    def run(self, input_path: Path, output_path: Path, err_path: Path, is_cancelled) -> ToolRunResult:
        index = len(self.calls)
        self.calls.append(input_path)
        if self.before_run is not None:
            self.before_run(index)
        if self.launch_error:
            raise ToolLaunchError("java: not found")
        if is_cancelled():
            return ToolRunResult(exit_code=None, cancelled=True)

        text = self.outputs[index] if index < len(self.outputs) else None
        if text is not None:
            output_path.write_text(text, encoding="utf-8")
            err_path.write_text("", encoding="utf-8")
        return ToolRunResult(exit_code=self.exit_code)


def pasco_line(user_url: str, accessed: str = "2011-03-04T10:11:12.345Z", modified: str = "") -> str:
    """One pasco2 history line: marker, user/url, modified, accessed, filename."""
    return "\t".join(["URL", user_url, modified, accessed, "", "HTTP/1.1 200 OK"])


@pytest.fixture()
def evidence_root(tmp_path: Path) -> Path:
    root = tmp_path / "evidence"
    root.mkdir()
    return root


@pytest.fixture()
def write_evidence(evidence_root: Path) -> Callable[[str, bytes | str], Path]:
    """Create a file under the evidence root from a forward-slash path."""

    def _write(rel_path: str, content: bytes | str = b"") -> Path:
        target = evidence_root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        target.write_bytes(content)
        return target

    return _write


@pytest.fixture()
def blackboard() -> InMemoryBlackboard:
    return InMemoryBlackboard()


@pytest.fixture()
def callbacks() -> RecordingCallbacks:
    return RecordingCallbacks()


@pytest.fixture()
def make_context(evidence_root: Path, tmp_path: Path, blackboard: InMemoryBlackboard):
    """Build an ExtractionContext over the evidence root; call after writing files."""

    def _make(**overrides) -> ExtractionContext:
        values = dict(
            data_source_id=1,
            locator=MountedFileLocator(evidence_root),
            blackboard=blackboard,
            temp_dir=tmp_path / "temp" / "ds_1",
        )
        values.update(overrides)
        return ExtractionContext(**values)

    return _make


@pytest.fixture()
def make_handle() -> Callable[..., FileHandle]:
    def _make(file_id: int = 1, name: str = "index.dat", path: Optional[str] = None, size: int = 10,
              crtime: int = 0) -> FileHandle:
        return FileHandle(id=file_id, name=name, path=path or f"/{name}", size=size, crtime=crtime)

    return _make
