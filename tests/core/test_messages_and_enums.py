from __future__ import annotations

import re

import pytest

from core.enums import ArtifactType, AttributeType, RoutineStatus
from core.messages import MESSAGES, format_message


def test_format_message_fills_placeholders():
    text = format_message("history.output_missing", module="Internet Explorer", file="pasco2Result.4.txt")
    assert text == "Internet Explorer: History parser output pasco2Result.4.txt was not found."


def test_format_message_unknown_key():
    with pytest.raises(KeyError):
        format_message("history.nope")


@pytest.mark.parametrize("key", sorted(MESSAGES))
def test_every_template_formats_with_known_fields(key):
    fields = set(re.findall(r"{(\w+)}", MESSAGES[key]))
    assert fields <= {"module", "file", "what", "tool", "routine", "error"}
    format_message(key, **{name: "x" for name in fields})


def test_communication_types():
    assert ArtifactType.communication_types() == (
        ArtifactType.EMAIL_MSG, ArtifactType.MESSAGE, ArtifactType.CALLLOG,
    )
    assert ArtifactType("call_log") is ArtifactType.CALLLOG


def test_timestamp_attributes():
    assert AttributeType.DATETIME_SENT.is_timestamp
    assert AttributeType.DATETIME.is_timestamp
    assert not AttributeType.USER_NAME.is_timestamp


def test_routine_status_terminal_states():
    assert [s for s in RoutineStatus if s.is_terminal] == [
        RoutineStatus.COMPLETED, RoutineStatus.CANCELLED, RoutineStatus.FAILED,
    ]
