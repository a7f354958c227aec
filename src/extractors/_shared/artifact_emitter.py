"""
Stage artifacts for a routine and post them in batches.

Routines describe what they found as ``ArtifactBundle`` values; the emitter
turns each bundle into a store artifact, keeps a primary and a secondary
batch, and posts both when flushed. Store failures never propagate: they
become entries in the routine's error list and the remaining records carry on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, MutableSequence, Optional, Set

from core.blackboard import Artifact, Attribute, Blackboard, BlackboardError
from core.config import DEFAULT_IGNORED_URL_PREFIXES
from core.enums import ArtifactType, AttributeType
from core.evidence_fs import FileHandle
from core.logging import get_logger
from core.messages import format_message
from .url_utils import extract_domain, is_ignored_url

LOGGER = get_logger("extractors._shared.artifact_emitter")


@dataclass(slots=True)
class ArtifactBundle:
    """An artifact kind, its source file and ordered (type, value) pairs."""

    kind: ArtifactType
    source: FileHandle
    attributes: List[tuple[AttributeType, object]] = field(default_factory=list)

    def add(self, attr_type: AttributeType, value: object) -> "ArtifactBundle":
        self.attributes.append((attr_type, value))
        return self


class ArtifactEmitter:
    """
    Collects artifacts for one routine run.

    Args:
        blackboard: Evidence store
        module_name: Module the artifacts are posted under; also used as the
            attribute source and program name
        errors: Sink receiving user-facing error messages
        ignored_url_prefixes: URL prefixes that get no domain attribute
        routine_name: Routine named in post failure messages
    """

    def __init__(
        self,
        blackboard: Blackboard,
        module_name: str,
        errors: MutableSequence[str],
        ignored_url_prefixes: Iterable[str] = DEFAULT_IGNORED_URL_PREFIXES,
        routine_name: str = "",
    ):
        self.blackboard = blackboard
        self.module_name = module_name
        self.errors = errors
        self.ignored_url_prefixes = tuple(ignored_url_prefixes)
        self.routine_name = routine_name or module_name
        self.primary: List[Artifact] = []
        self.secondary: List[Artifact] = []
        # source file names per batch, in first-seen order
        self._sources: Dict[str, Dict[str, None]] = {"primary": {}, "secondary": {}}
        self.posted_count = 0
        self._reported_users: Set[str] = set()

    def domain_attributes(self, url: str) -> List[tuple[AttributeType, object]]:
        """Domain pair for ``url``, or nothing for blank and ignorable URLs."""
        if is_ignored_url(url, self.ignored_url_prefixes):
            return []
        return [(AttributeType.DOMAIN, extract_domain(url))]

    def add(self, bundle: ArtifactBundle, secondary: bool = False, error_key: str = "history.record_failed") -> Optional[Artifact]:
        """
        Create ``bundle`` in the store and queue it for the next flush.

        Returns:
            The created artifact, or None if the store rejected it (an error
            keyed by the source file name is recorded)
        """
        try:
            artifact = self.blackboard.new_artifact(bundle.kind, bundle.source.id)
            self.blackboard.add_attributes(
                artifact,
                [Attribute(t, v, self.module_name) for t, v in bundle.attributes],
            )
        except BlackboardError as exc:
            LOGGER.error("Error creating %s artifact for %s: %s", bundle.kind, bundle.source.name, exc)
            self.errors.append(format_message(error_key, module=self.module_name, file=bundle.source.name))
            return None

        (self.secondary if secondary else self.primary).append(artifact)
        self._sources["secondary" if secondary else "primary"].setdefault(bundle.source.name)
        return artifact

    def emit_visit(self, user: str, url: str, timestamp: int, source: FileHandle) -> List[ArtifactBundle]:
        """
        Stage a history visit plus, the first time ``user`` is seen in this
        run, an account artifact for that user.

        Returns:
            The bundles that were stored successfully
        """
        visit = ArtifactBundle(ArtifactType.WEB_HISTORY, source)
        visit.add(AttributeType.URL, url)
        visit.add(AttributeType.DATETIME_ACCESSED, timestamp)
        visit.add(AttributeType.REFERRER, "")
        visit.add(AttributeType.PROG_NAME, self.module_name)
        visit.add(AttributeType.USER_NAME, user)
        visit.attributes.extend(self.domain_attributes(url))

        emitted: List[ArtifactBundle] = []
        if self.add(visit) is not None:
            emitted.append(visit)

        if user not in self._reported_users:
            account = ArtifactBundle(ArtifactType.OS_ACCOUNT, source).add(AttributeType.USER_NAME, user)
            if self.add(account, secondary=True) is not None:
                self._reported_users.add(user)
                emitted.append(account)

        return emitted

    def flush(self) -> int:
        """
        Post the primary batch, then the secondary batch.

        Each batch is one store call; a failed post adds one error and does
        not stop the other batch. Both queues are cleared either way.

        Returns:
            Number of artifacts posted
        """
        posted = 0
        for label, batch in (("primary", self.primary), ("secondary", self.secondary)):
            if not batch:
                continue
            try:
                self.blackboard.post_artifacts(list(batch), self.module_name)
                posted += len(batch)
            except BlackboardError as exc:
                LOGGER.error("Error posting %s batch of %d artifact(s): %s", label, len(batch), exc)
                self.errors.append(format_message(
                    "module.post_failed",
                    module=self.module_name,
                    routine=self.routine_name,
                    file=", ".join(self._sources[label]),
                ))

        self.primary = []
        self.secondary = []
        self._sources = {"primary": {}, "secondary": {}}
        self.posted_count += posted
        return posted
