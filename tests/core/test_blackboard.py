"""Tests for the in-memory and SQLite evidence stores."""
from __future__ import annotations

import pytest

from core.blackboard import Attribute, BlackboardError, InMemoryBlackboard
from core.database import SqliteBlackboard, init_db
from core.enums import ArtifactType, AttributeType


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryBlackboard()
        return
    conn = init_db(tmp_path / "case.sqlite")
    yield SqliteBlackboard(conn)
    conn.close()


def test_unposted_artifacts_are_invisible(store):
    artifact = store.new_artifact(ArtifactType.WEB_HISTORY, 3)
    store.add_attributes(artifact, [Attribute(AttributeType.URL, "http://example.com", "IE")])

    assert store.get_artifacts() == []

    store.post_artifacts([artifact], "Internet Explorer")

    [posted] = store.get_artifacts()
    assert posted.id == artifact.id
    assert posted.kind == ArtifactType.WEB_HISTORY
    assert posted.source_file_id == 3
    assert posted.get_value(AttributeType.URL) == "http://example.com"


def test_attribute_values_and_order_round_trip(store):
    artifact = store.new_artifact(ArtifactType.WEB_BOOKMARK, 1)
    store.add_attributes(artifact, [
        Attribute(AttributeType.URL, "http://a.example", "IE"),
        Attribute(AttributeType.DATETIME_CREATED, 1299233472, "IE"),
        Attribute(AttributeType.TITLE, "a.url", "IE"),
    ])
    store.post_artifacts([artifact], "Internet Explorer")

    [posted] = store.get_artifacts([ArtifactType.WEB_BOOKMARK])
    assert [a.type for a in posted.attributes] == [
        AttributeType.URL, AttributeType.DATETIME_CREATED, AttributeType.TITLE,
    ]
    assert posted.get_value(AttributeType.DATETIME_CREATED) == 1299233472
    assert posted.get_attribute(AttributeType.NAME) is None


def test_get_artifacts_filters_by_kind(store):
    history = store.new_artifact(ArtifactType.WEB_HISTORY, 1)
    account = store.new_artifact(ArtifactType.OS_ACCOUNT, 1)
    store.post_artifacts([history, account], "Internet Explorer")

    kinds = [a.kind for a in store.get_artifacts([ArtifactType.OS_ACCOUNT])]
    assert kinds == [ArtifactType.OS_ACCOUNT]
    assert len(store.get_artifacts()) == 2
    assert store.get_artifacts([]) == []


def test_in_memory_rejects_unknown_artifacts():
    store = InMemoryBlackboard()
    stranger = InMemoryBlackboard().new_artifact(ArtifactType.WEB_COOKIE, 1)
    stranger.id = 99

    with pytest.raises(BlackboardError):
        store.add_attributes(stranger, [])
    with pytest.raises(BlackboardError):
        store.post_artifacts([stranger], "Internet Explorer")
    assert store.posts == []


def test_sqlite_post_is_all_or_nothing(sqlite_blackboard):
    good = sqlite_blackboard.new_artifact(ArtifactType.WEB_HISTORY, 1)
    ghost = sqlite_blackboard.new_artifact(ArtifactType.WEB_HISTORY, 1)
    ghost.id = 10_000

    with pytest.raises(BlackboardError):
        sqlite_blackboard.post_artifacts([good, ghost], "Internet Explorer")

    assert sqlite_blackboard.get_artifacts() == []


def test_sqlite_records_module_name(sqlite_blackboard, case_conn):
    artifact = sqlite_blackboard.new_artifact(ArtifactType.WEB_COOKIE, 2)
    sqlite_blackboard.post_artifacts([artifact], "Internet Explorer")

    row = case_conn.execute(
        "SELECT posted, module_name FROM artifacts WHERE id = ?", (artifact.id,)
    ).fetchone()
    assert row["posted"] == 1
    assert row["module_name"] == "Internet Explorer"


def test_migrations_are_idempotent(case_db_path):
    conn = init_db(case_db_path)
    try:
        versions = [row[0] for row in conn.execute("SELECT version FROM schema_version")]
        assert versions == [1]
    finally:
        conn.close()
