import pytest

from core.timestamps import format_duration, parse_utc_seconds

PASCO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def test_parse_utc_seconds_truncates_fraction():
    assert parse_utc_seconds("2011-03-04T10:11:12.999Z", PASCO_FORMAT) == 1299233472


def test_parse_utc_seconds_epoch_and_whitespace():
    assert parse_utc_seconds(" 1970-01-01T00:00:00.000Z ", PASCO_FORMAT) == 0


@pytest.mark.parametrize("value", ["", "yesterday", "2011-03-04 10:11:12"])
def test_parse_utc_seconds_rejects_other_formats(value):
    with pytest.raises(ValueError):
        parse_utc_seconds(value, PASCO_FORMAT)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0s"), (59.9, "59s"), (61, "1m 1s"), (3600, "1h"), (3661, "1h 1m 1s"), (-5, "0s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
