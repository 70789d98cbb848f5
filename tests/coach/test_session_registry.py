"""
Session registry: one session per connection, replace/reject policy, idle reaping.
"""

import pytest

from coach_service.models.errors import SessionAlreadyActive
from coach_service.models.exercises import BicepCurlProcessor, ProcessResult, SquatProcessor
from coach_service.models.session_registry import SessionRegistry


def test_create_get_remove():
    registry = SessionRegistry()
    session = registry.create("conn-1", "Squat", SquatProcessor(), "user-1")

    assert registry.get("conn-1") is session
    assert registry.session_count == 1
    assert session.rep_count == 0

    assert registry.remove("conn-1") is session
    assert registry.get("conn-1") is None
    assert registry.remove("conn-1") is None


def test_second_start_replaces_by_default():
    registry = SessionRegistry(replace_on_restart=True)
    first = registry.create("conn-1", "Squat", SquatProcessor(), "user-1")
    second = registry.create("conn-1", "Bicep Curl", BicepCurlProcessor(), "user-1")

    assert first is not second
    assert registry.get("conn-1") is second
    assert registry.session_count == 1
    assert registry.get_stats()["replaced_sessions"] == 1


def test_second_start_rejected_when_replacing_disabled():
    registry = SessionRegistry(replace_on_restart=False)
    first = registry.create("conn-1", "Squat", SquatProcessor(), "user-1")

    with pytest.raises(SessionAlreadyActive) as exc_info:
        registry.create("conn-1", "Bicep Curl", BicepCurlProcessor(), "user-1")

    assert "Squat" in exc_info.value.message
    assert registry.get("conn-1") is first


def test_sessions_are_independent_per_connection():
    registry = SessionRegistry()
    a = registry.create("conn-a", "Squat", SquatProcessor(), "user-1")
    b = registry.create("conn-b", "Squat", SquatProcessor(), "user-2")

    assert a.processor is not b.processor
    assert {s.session_id for s in registry.list_sessions()} == {"conn-a", "conn-b"}


def test_reap_idle_sessions():
    registry = SessionRegistry()
    stale = registry.create("conn-stale", "Squat", SquatProcessor(), "user-1")
    fresh = registry.create("conn-fresh", "Squat", SquatProcessor(), "user-2")
    stale.last_activity = 1000.0
    fresh.last_activity = 1250.0

    reaped = registry.reap_idle(max_idle_seconds=300, now=1400.0)

    assert reaped == [stale]
    assert registry.get("conn-stale") is None
    assert registry.get("conn-fresh") is fresh
    assert registry.get_stats()["reaped_sessions"] == 1


def test_rep_history_appends_once_per_rep():
    registry = SessionRegistry()
    session = registry.create("conn-1", "Squat", SquatProcessor(), "user-1")

    session.record_result(ProcessResult(0, "Start your squat.", "up", 10), now=1.0)
    session.record_result(ProcessResult(1, "Great rep!", "up", 50), now=2.0)
    session.record_result(ProcessResult(1, "Great rep!", "up", 55), now=3.0)
    session.record_result(ProcessResult(2, "Great rep!", "up", 60), now=4.0)

    assert [(r.rep, r.timestamp) for r in session.rep_history] == [(1, 2.0), (2, 4.0)]
    assert session.frames_processed == 4
    assert session.last_activity == 4.0


def test_session_dict_has_no_processor_internals():
    registry = SessionRegistry()
    session = registry.create("conn-1", "Squat", SquatProcessor(), "user-1")
    data = session.to_dict()

    assert data["exercise"] == "Squat"
    assert data["stage"] == "up"
    assert "processor" not in data
    assert "lock" not in data
