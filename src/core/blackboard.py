"""
Evidence store ("blackboard") contract.

Artifacts are created against a source file, filled with attributes and
become visible to readers only once posted. Posting is batched: one call
per batch, all-or-nothing from the caller's point of view.

Two implementations share this contract:
- InMemoryBlackboard (here): snapshot store for tests and hosts without a case
- SqliteBlackboard (core.database): case-database backed store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from .enums import ArtifactType, AttributeType
from .logging import get_logger

LOGGER = get_logger("core.blackboard")


class BlackboardError(Exception):
    """Raised when the evidence store rejects an artifact, attribute or post."""


@dataclass(frozen=True, slots=True)
class Attribute:
    """One typed value on an artifact, tagged with the module that produced it."""

    type: AttributeType
    value: Any
    source: str = ""


@dataclass(slots=True)
class Artifact:
    """Reference to an artifact held by the evidence store."""

    id: int
    kind: ArtifactType
    source_file_id: int
    attributes: List[Attribute] = field(default_factory=list)

    def get_attribute(self, attr_type: AttributeType) -> Optional[Attribute]:
        """Return the first attribute of ``attr_type`` or None."""
        for attribute in self.attributes:
            if attribute.type == attr_type:
                return attribute
        return None

    def get_value(self, attr_type: AttributeType, default: Any = None) -> Any:
        attribute = self.get_attribute(attr_type)
        return attribute.value if attribute is not None else default


class Blackboard(Protocol):
    """Evidence store operations used by extraction routines."""

    def new_artifact(self, kind: ArtifactType, source_file_id: int) -> Artifact:
        ...

    def add_attributes(self, artifact: Artifact, attributes: Iterable[Attribute]) -> None:
        ...

    def post_artifacts(self, artifacts: Sequence[Artifact], module_name: str) -> None:
        ...

    def get_artifacts(self, kinds: Optional[Iterable[ArtifactType]] = None) -> List[Artifact]:
        ...


class InMemoryBlackboard:
    """
    Process-local evidence store.

    Artifacts are numbered in creation order. Unposted artifacts are kept
    separately and never returned by get_artifacts().
    """

    def __init__(self) -> None:
        self._ids = count(1)
        self._pending: dict[int, Artifact] = {}
        self._posted: dict[int, Artifact] = {}
        self.posts: List[tuple[str, List[int]]] = []

    def new_artifact(self, kind: ArtifactType, source_file_id: int) -> Artifact:
        artifact = Artifact(id=next(self._ids), kind=ArtifactType(kind), source_file_id=source_file_id)
        self._pending[artifact.id] = artifact
        return artifact

    def add_attributes(self, artifact: Artifact, attributes: Iterable[Attribute]) -> None:
        if artifact.id not in self._pending and artifact.id not in self._posted:
            raise BlackboardError(f"Unknown artifact id {artifact.id}")
        artifact.attributes.extend(attributes)

    def post_artifacts(self, artifacts: Sequence[Artifact], module_name: str) -> None:
        unknown = [a.id for a in artifacts if a.id not in self._pending and a.id not in self._posted]
        if unknown:
            raise BlackboardError(f"Cannot post unknown artifacts: {unknown}")
        for artifact in artifacts:
            self._pending.pop(artifact.id, None)
            self._posted[artifact.id] = artifact
        self.posts.append((module_name, [a.id for a in artifacts]))
        LOGGER.debug("Posted %d artifact(s) for %s", len(artifacts), module_name)

    def get_artifacts(self, kinds: Optional[Iterable[ArtifactType]] = None) -> List[Artifact]:
        wanted = {ArtifactType(k) for k in kinds} if kinds is not None else None
        return [
            artifact
            for artifact in self._posted.values()
            if wanted is None or artifact.kind in wanted
        ]
