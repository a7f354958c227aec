"""Thread correlation of communication artifacts."""
from __future__ import annotations

from itertools import count
from typing import Optional

from core.blackboard import Artifact, Attribute
from core.enums import ArtifactType, AttributeType
from core.matching import (
    CALL_LOG_ID,
    UNTHREADED_ID,
    group_by_type,
    group_representatives,
    sorted_representatives,
    thread_key,
)

_ids = count(1)


def _artifact(
    kind: ArtifactType = ArtifactType.EMAIL_MSG,
    thread: Optional[str] = None,
    sent: Optional[int] = None,
) -> Artifact:
    attributes = []
    if thread is not None:
        attributes.append(Attribute(AttributeType.THREAD_ID, thread))
    if sent is not None:
        attributes.append(Attribute(AttributeType.DATETIME_SENT, sent))
    return Artifact(id=next(_ids), kind=kind, source_file_id=1, attributes=attributes)


def test_earliest_timestamp_wins():
    first = _artifact(thread="T1", sent=50)
    earliest = _artifact(thread="T1", sent=10)
    last = _artifact(thread="T1", sent=30)

    groups = group_representatives([first, earliest, last])

    assert groups == {"T1": earliest}


def test_first_arrival_kept_without_timestamps():
    first = _artifact(thread="T2")
    later = [_artifact(thread="T2"), _artifact(thread="T2")]

    groups = group_representatives([first, *later])

    assert groups["T2"] is first


def test_first_without_timestamp_is_not_replaced():
    first = _artifact(thread="T3")
    timed = _artifact(thread="T3", sent=1)

    assert group_representatives([first, timed])["T3"] is first


def test_equal_timestamps_keep_first():
    first = _artifact(thread="T4", sent=5)
    second = _artifact(thread="T4", sent=5)

    assert group_representatives([first, second])["T4"] is first


def test_call_logs_share_sentinel_key():
    one = _artifact(ArtifactType.CALLLOG, thread="abc", sent=20)
    two = _artifact(ArtifactType.CALLLOG, thread="xyz", sent=10)

    assert thread_key(one) == CALL_LOG_ID
    assert thread_key(two) == CALL_LOG_ID
    assert group_representatives([one, two]) == {CALL_LOG_ID: two}


def test_unthreaded_messages_collapse():
    a = _artifact(ArtifactType.MESSAGE)
    b = _artifact(ArtifactType.EMAIL_MSG)

    assert thread_key(a) == UNTHREADED_ID
    assert list(group_representatives([a, b])) == [UNTHREADED_ID]


def test_non_communication_kinds_ignored():
    history = _artifact(ArtifactType.WEB_HISTORY, thread="T1", sent=1)
    email = _artifact(thread="T1", sent=100)

    assert group_representatives([history, email]) == {"T1": email}


def test_group_by_type_keeps_kinds_apart():
    email = _artifact(ArtifactType.EMAIL_MSG, thread="T1", sent=30)
    message = _artifact(ArtifactType.MESSAGE, thread="T1", sent=10)
    call = _artifact(ArtifactType.CALLLOG, sent=5)

    by_type = group_by_type([email, message, call])

    assert list(by_type) == [ArtifactType.EMAIL_MSG, ArtifactType.MESSAGE, ArtifactType.CALLLOG]
    assert by_type[ArtifactType.EMAIL_MSG] == {"T1": email}
    assert by_type[ArtifactType.MESSAGE] == {"T1": message}
    assert by_type[ArtifactType.CALLLOG] == {CALL_LOG_ID: call}


def test_custom_key_function():
    a = _artifact(thread="x", sent=2)
    b = _artifact(thread="y", sent=1)

    groups = group_representatives([a, b], key_fn=lambda artifact: "all")

    assert groups == {"all": b}


def test_sorted_representatives_by_timestamp_then_id():
    late = _artifact(thread="A", sent=300)
    untimed = _artifact(thread="B")
    early = _artifact(thread="C", sent=100)

    groups = group_representatives([late, untimed, early])

    assert sorted_representatives(groups) == [untimed, early, late]
