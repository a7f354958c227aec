"""
Thread correlation for communication artifacts.

Emails, messages and call logs are grouped into threads so a viewer can show
one row per conversation. Each thread is represented by its earliest member:

- emails/messages use their thread id attribute, or ``UNTHREADED_ID`` when
  they have none, so all unthreaded items collapse into one group
- call logs always use ``CALL_LOG_ID``; any thread id they carry is ignored

A later member replaces the representative only when both carry the
comparison timestamp and the newcomer's is strictly earlier. A group whose
first member has no timestamp therefore keeps that member.

Usage:
    from core.matching.threads import group_representatives, sorted_representatives

    groups = group_representatives(blackboard.get_artifacts(CORRELATED_TYPES))
    rows = sorted_representatives(groups)
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from ..blackboard import Artifact
from ..enums import ArtifactType, AttributeType
from ..logging import get_logger

__all__ = [
    "UNTHREADED_ID",
    "CALL_LOG_ID",
    "CORRELATED_TYPES",
    "thread_key",
    "group_representatives",
    "group_by_type",
    "sorted_representatives",
]

LOGGER = get_logger("core.matching.threads")

UNTHREADED_ID = "unthreaded"
CALL_LOG_ID = "call-log thread"
CORRELATED_TYPES = frozenset(ArtifactType.communication_types())

KeyFn = Callable[[Artifact], str]


def thread_key(artifact: Artifact) -> str:
    """Correlation key for one communication artifact."""
    if artifact.kind == ArtifactType.CALLLOG:
        return CALL_LOG_ID
    thread_id = artifact.get_attribute(AttributeType.THREAD_ID)
    if thread_id is None:
        return UNTHREADED_ID
    return str(thread_id.value)


def _timestamp(artifact: Artifact, timestamp_type: AttributeType) -> Optional[int]:
    attribute = artifact.get_attribute(timestamp_type)
    if attribute is None or attribute.value is None:
        return None
    try:
        return int(attribute.value)
    except (TypeError, ValueError):
        LOGGER.debug("Artifact %d has non-numeric %s: %r", artifact.id, timestamp_type, attribute.value)
        return None


def _offer(
    groups: Dict[str, Artifact],
    key: str,
    artifact: Artifact,
    timestamp_type: AttributeType,
) -> None:
    current = groups.get(key)
    if current is None:
        groups[key] = artifact
        return

    current_ts = _timestamp(current, timestamp_type)
    new_ts = _timestamp(artifact, timestamp_type)
    if current_ts is not None and new_ts is not None and new_ts < current_ts:
        groups[key] = artifact


def group_representatives(
    artifacts: Iterable[Artifact],
    key_fn: KeyFn = thread_key,
    timestamp_type: AttributeType = AttributeType.DATETIME_SENT,
) -> Dict[str, Artifact]:
    """
    Pick one representative per correlation key in a single pass.

    Artifacts whose kind is not a communication type are ignored. Keys from
    different kinds share one namespace: an email and a message with the
    same thread id land in the same group.

    Returns:
        key -> representative artifact, in first-seen key order
    """
    groups: Dict[str, Artifact] = {}
    skipped = 0
    for artifact in artifacts:
        if artifact.kind not in CORRELATED_TYPES:
            skipped += 1
            continue
        _offer(groups, key_fn(artifact), artifact, timestamp_type)

    if skipped:
        LOGGER.debug("Ignored %d non-communication artifact(s)", skipped)
    return groups


def group_by_type(
    artifacts: Iterable[Artifact],
    key_fn: KeyFn = thread_key,
    timestamp_type: AttributeType = AttributeType.DATETIME_SENT,
) -> Dict[ArtifactType, Dict[str, Artifact]]:
    """
    Two-level grouping: kind -> (key -> representative).

    Same tie-break as group_representatives, but keys never merge across
    kinds. Kinds appear in first-seen order.
    """
    by_type: Dict[ArtifactType, Dict[str, Artifact]] = {}
    for artifact in artifacts:
        if artifact.kind not in CORRELATED_TYPES:
            continue
        groups = by_type.setdefault(artifact.kind, {})
        _offer(groups, key_fn(artifact), artifact, timestamp_type)
    return by_type


def sorted_representatives(
    groups: Dict[str, Artifact],
    timestamp_type: AttributeType = AttributeType.DATETIME_SENT,
) -> List[Artifact]:
    """
    Representatives ordered by timestamp, then artifact id.

    Representatives without a timestamp sort first.
    """
    def sort_key(artifact: Artifact) -> tuple[int, int]:
        ts = _timestamp(artifact, timestamp_type)
        return (ts if ts is not None else -1, artifact.id)

    return sorted(groups.values(), key=sort_key)
