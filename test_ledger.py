"""
ClockEventLedger persistence: ordering, isolation per worker, round trips.
"""

import logging
from datetime import timedelta

from conftest import T0, make_event
from models.clock_event import ClockEvent, ClockEventType, new_event_id
from services.ledger import ClockEventLedger, recent_events, worker_ids


def test_empty_ledger(ledger):
    assert ledger.read_all() == ()
    assert ledger.last_event() is None


def test_append_keeps_insertion_order(ledger):
    ledger.append(make_event("t1", "in", 0))
    ledger.append(make_event("t2", "out", 30))
    ledger.append(make_event("t3", "in", 60))

    assert [e.id for e in ledger.read_all()] == ["t1", "t2", "t3"]
    assert ledger.last_event().id == "t3"


def test_read_all_is_restartable(ledger):
    ledger.append(make_event("t1", "in", 0))
    assert [e.id for e in ledger.read_all()] == [e.id for e in ledger.read_all()]


def test_append_stamps_owning_worker(session, ledger):
    ledger.append(make_event("t1", "in", 0, worker_id="someone-else"))
    assert ledger.read_all()[0].worker_id == ledger.worker_id
    assert ClockEventLedger(session, "someone-else").read_all() == ()


def test_ledgers_are_per_worker(session):
    alice = ClockEventLedger(session, "alice")
    bob = ClockEventLedger(session, "bob")
    alice.append(make_event("a1", "in", 0))
    bob.append(make_event("b1", "in", 1))
    alice.append(make_event("a2", "out", 2))

    assert [e.id for e in alice.read_all()] == ["a1", "a2"]
    assert [e.id for e in bob.read_all()] == ["b1"]
    assert worker_ids(session) == ["alice", "bob"]
    assert [e.id for e in recent_events(session, limit=2)] == ["a2", "b1"]


def test_round_trip_preserves_time_and_coordinates(engine, ledger):
    from sqlmodel import Session

    event = ClockEvent(
        id="precise",
        event_type=ClockEventType.IN,
        timestamp=T0 + timedelta(microseconds=123456),
        latitude=37.77491234,
        longitude=-122.41945678,
        note="Starting shift",
    )
    ledger.append(event)

    with Session(engine) as fresh:
        stored = ClockEventLedger(fresh, ledger.worker_id).read_all()[0]

    assert stored.timestamp == T0 + timedelta(microseconds=123456)
    assert stored.timestamp.tzinfo is not None
    assert abs(stored.latitude - 37.77491234) < 1e-6
    assert abs(stored.longitude + 122.41945678) < 1e-6
    assert stored.note == "Starting shift"


def test_out_of_order_append_is_logged_not_reordered(ledger, caplog):
    ledger.append(make_event("t1", "in", 60))
    with caplog.at_level(logging.WARNING, logger="services.ledger"):
        ledger.append(make_event("t2", "out", 0))

    assert "precedes last event" in caplog.text
    assert [e.id for e in ledger.read_all()] == ["t1", "t2"]


def test_event_ids_are_unique_within_an_instant():
    ids = {new_event_id() for _ in range(1000)}
    assert len(ids) == 1000
