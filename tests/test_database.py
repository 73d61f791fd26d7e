"""Tests for the SQLite event store."""

from datetime import datetime, timedelta, timezone

import pytest

from data_output_agent.database import EventStore

from conftest import BASE_TIME


def test_requires_connection(tmp_db_path):
    with pytest.raises(RuntimeError, match="not connected"):
        EventStore(tmp_db_path).fetch_recent(10)


def test_add_event_assigns_ids(store):
    first = store.add_event({"title": "one"}, created_at=BASE_TIME)
    second = store.add_event({"title": "two"}, created_at=BASE_TIME)
    assert second.id > first.id
    assert first.payload == {"title": "one"}


def test_fetch_recent_is_most_recent_first(store):
    for n in range(5):
        store.add_event({"n": n}, created_at=BASE_TIME + timedelta(minutes=n))
    events = store.fetch_recent(3)
    assert [event.payload["n"] for event in events] == [4, 3, 2]


def test_round_trips_nested_payload_and_time(store):
    payload = {"title": "x", "tags": ["a", "b"], "meta": {"n": 1.5, "ok": True, "none": None}}
    saved = store.add_event(payload, created_at=BASE_TIME)
    loaded = store.get_event(saved.id)
    assert loaded.payload == payload
    assert loaded.created_at == BASE_TIME


def test_naive_timestamps_are_stored_as_utc(store):
    saved = store.add_event({}, created_at=datetime(2026, 1, 1, 8, 30))
    assert store.get_event(saved.id).created_at == datetime(2026, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_default_created_at_is_now(store):
    before = datetime.now(timezone.utc)
    event = store.add_event({})
    assert store.get_event(event.id).created_at >= before


def test_duplicate_dedup_key_is_skipped(store):
    assert store.add_event({"n": 1}, dedup_key="feed#1") is not None
    assert store.add_event({"n": 1}, dedup_key="feed#1") is None
    assert store.add_event({"n": 2}, dedup_key="feed#2") is not None
    assert store.count_events() == 2


def test_events_without_dedup_key_are_never_duplicates(store):
    store.add_event({"n": 1})
    store.add_event({"n": 1})
    assert store.count_events() == 2


def test_last_received_at(store):
    assert store.last_received_at() is None
    store.add_event({}, created_at=BASE_TIME - timedelta(days=1))
    store.add_event({}, created_at=BASE_TIME)
    assert store.last_received_at() == BASE_TIME


def test_get_missing_event(store):
    assert store.get_event(12345) is None
