"""Tests for ArtifactEmitter batching, account dedup and store failures."""
from __future__ import annotations

from core.blackboard import InMemoryBlackboard
from core.enums import ArtifactType, AttributeType
from extractors._shared.artifact_emitter import ArtifactBundle, ArtifactEmitter
from tests.fixtures.evidence import FlakyBlackboard

MODULE = "Internet Explorer"
ROUTINE = "IE History"


def _emitter(blackboard, errors=None):
    return ArtifactEmitter(blackboard, MODULE, errors if errors is not None else [], routine_name=ROUTINE)


def test_one_account_per_distinct_user(make_handle):
    blackboard = InMemoryBlackboard()
    emitter = _emitter(blackboard)
    source = make_handle()

    for user in ["alice", "", "alice", "", "alice"]:
        emitter.emit_visit(user, "http://example.com/", 100, source)
    emitter.flush()

    accounts = blackboard.get_artifacts([ArtifactType.OS_ACCOUNT])
    assert sorted(a.get_value(AttributeType.USER_NAME) for a in accounts) == ["", "alice"]
    assert len(blackboard.get_artifacts([ArtifactType.WEB_HISTORY])) == 5


def test_history_attribute_layout(make_handle):
    blackboard = InMemoryBlackboard()
    emitter = _emitter(blackboard)

    emitter.emit_visit("bob", "http://www.example.co.uk/x", 1299233472, make_handle(file_id=4))
    emitter.flush()

    [visit] = blackboard.get_artifacts([ArtifactType.WEB_HISTORY])
    assert visit.source_file_id == 4
    assert [(a.type, a.value) for a in visit.attributes] == [
        (AttributeType.URL, "http://www.example.co.uk/x"),
        (AttributeType.DATETIME_ACCESSED, 1299233472),
        (AttributeType.REFERRER, ""),
        (AttributeType.PROG_NAME, MODULE),
        (AttributeType.USER_NAME, "bob"),
        (AttributeType.DOMAIN, "example.co.uk"),
    ]
    assert {a.source for a in visit.attributes} == {MODULE}


def test_primary_posted_before_secondary(make_handle):
    blackboard = InMemoryBlackboard()
    emitter = _emitter(blackboard)

    emitter.emit_visit("alice", "http://a.example/", 1, make_handle())
    posted = emitter.flush()

    assert posted == 2
    [visit] = blackboard.get_artifacts([ArtifactType.WEB_HISTORY])
    [account] = blackboard.get_artifacts([ArtifactType.OS_ACCOUNT])
    assert blackboard.posts == [(MODULE, [visit.id]), (MODULE, [account.id])]
    assert emitter.primary == [] and emitter.secondary == []


def test_ignored_urls_get_no_domain(make_handle):
    blackboard = InMemoryBlackboard()
    emitter = _emitter(blackboard)

    assert emitter.domain_attributes("res://ieframe.dll/navcancl.htm") == []
    assert emitter.domain_attributes("RES://shdoclc.dll") == []
    assert emitter.domain_attributes("") == []
    assert emitter.domain_attributes("http://a.example/") == [(AttributeType.DOMAIN, "a.example")]

    emitter.emit_visit("", "res://ieframe.dll/", 0, make_handle())
    emitter.flush()
    [visit] = blackboard.get_artifacts([ArtifactType.WEB_HISTORY])
    assert visit.get_attribute(AttributeType.DOMAIN) is None


def test_failed_primary_post_is_one_error(make_handle):
    errors = []
    blackboard = FlakyBlackboard(fail_post_kinds=[ArtifactType.WEB_HISTORY])
    emitter = _emitter(blackboard, errors)

    for user in ["alice", "bob", "alice"]:
        emitter.emit_visit(user, "http://a.example/", 1, make_handle())
    posted = emitter.flush()

    assert errors == [f"{MODULE}: Error posting {ROUTINE} artifacts from index.dat to the blackboard."]
    assert posted == 2
    assert len(blackboard.get_artifacts([ArtifactType.OS_ACCOUNT])) == 2
    assert blackboard.get_artifacts([ArtifactType.WEB_HISTORY]) == []


def test_failed_secondary_post_is_one_error(make_handle):
    errors = []
    blackboard = FlakyBlackboard(fail_post_kinds=[ArtifactType.OS_ACCOUNT])
    emitter = _emitter(blackboard, errors)

    emitter.emit_visit("alice", "http://a.example/", 1, make_handle())
    emitter.emit_visit("bob", "http://b.example/", 2, make_handle())
    emitter.flush()

    assert len(errors) == 1
    assert len(blackboard.get_artifacts([ArtifactType.WEB_HISTORY])) == 2


def test_rejected_artifact_is_recorded_and_skipped(make_handle):
    errors = []
    blackboard = FlakyBlackboard(fail_new_kinds=[ArtifactType.WEB_COOKIE])
    emitter = _emitter(blackboard, errors)
    handle = make_handle(name="alice@example[1].txt")

    bundle = ArtifactBundle(ArtifactType.WEB_COOKIE, handle).add(AttributeType.NAME, "id")
    assert emitter.add(bundle, error_key="cookie.artifact_failed") is None
    assert emitter.flush() == 0

    assert errors == [f"{MODULE}: Error creating cookie artifact for alice@example[1].txt."]


def test_account_retried_after_store_rejection(make_handle):
    errors = []
    blackboard = FlakyBlackboard(fail_new_kinds=[ArtifactType.OS_ACCOUNT])
    emitter = _emitter(blackboard, errors)

    emitter.emit_visit("alice", "http://a.example/", 1, make_handle())
    blackboard.fail_new_kinds.clear()
    emitter.emit_visit("alice", "http://a.example/", 2, make_handle())
    emitter.flush()

    assert len(errors) == 1
    assert len(blackboard.get_artifacts([ArtifactType.OS_ACCOUNT])) == 1


def test_post_failure_names_routine_and_source_files(make_handle):
    errors = []
    blackboard = FlakyBlackboard(fail_post_kinds=[ArtifactType.WEB_COOKIE])
    emitter = ArtifactEmitter(blackboard, MODULE, errors, routine_name="IE Cookies")

    for name in ["alice@a[1].txt", "alice@b[1].txt", "alice@a[1].txt"]:
        emitter.add(ArtifactBundle(ArtifactType.WEB_COOKIE, make_handle(name=name)), error_key="cookie.artifact_failed")
    emitter.flush()

    assert errors == [
        f"{MODULE}: Error posting IE Cookies artifacts from alice@a[1].txt, alice@b[1].txt to the blackboard."
    ]


def test_routine_name_defaults_to_module(make_handle):
    errors = []
    emitter = ArtifactEmitter(FlakyBlackboard(fail_post_kinds=[ArtifactType.WEB_HISTORY]), MODULE, errors)

    emitter.emit_visit("alice", "http://a.example/", 1, make_handle())
    emitter.flush()

    assert errors == [f"{MODULE}: Error posting {MODULE} artifacts from index.dat to the blackboard."]
