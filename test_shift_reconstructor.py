"""
Folding clock events into shifts, including the dangling-in and
orphan-out cases, plus duration math and formatting.
"""

from datetime import timedelta

from conftest import T0, make_event
from services.shift_reconstructor import Shift, ShiftReconstructor, format_duration


def pairs(shifts):
    return [(s.clock_in.id, s.clock_out.id if s.clock_out else None) for s in shifts]


def test_no_events_no_shifts():
    assert ShiftReconstructor.reconstruct([]) == []


def test_single_clock_in_is_open_shift():
    shifts = ShiftReconstructor.reconstruct([make_event("t1", "in", 0)])
    assert pairs(shifts) == [("t1", None)]
    assert shifts[0].is_open


def test_in_then_out_is_closed_shift():
    events = [make_event("t1", "in", 0), make_event("t2", "out", 95)]
    shifts = ShiftReconstructor.reconstruct(events)

    assert pairs(shifts) == [("t1", "t2")]
    assert ShiftReconstructor.duration(shifts[0], T0 + timedelta(days=1)) == timedelta(minutes=95)


def test_dangling_in_closes_prior_shift_without_out():
    events = [
        make_event("t1", "in", 0),
        make_event("t2", "in", 60),
        make_event("t3", "out", 120),
    ]
    assert pairs(ShiftReconstructor.reconstruct(events)) == [("t2", "t3"), ("t1", None)]


def test_orphan_out_is_dropped():
    assert ShiftReconstructor.reconstruct([make_event("t1", "out", 0)]) == []


def test_orphan_out_after_closed_shift_is_dropped():
    events = [
        make_event("t1", "in", 0),
        make_event("t2", "out", 30),
        make_event("t3", "out", 40),
        make_event("t4", "in", 60),
    ]
    assert pairs(ShiftReconstructor.reconstruct(events)) == [("t4", None), ("t1", "t2")]


def test_every_clock_in_lands_in_exactly_one_shift():
    events = [
        make_event("a", "out", 0),
        make_event("b", "in", 10),
        make_event("c", "in", 20),
        make_event("d", "in", 30),
        make_event("e", "out", 40),
        make_event("f", "out", 50),
        make_event("g", "in", 60),
    ]
    shifts = ShiftReconstructor.reconstruct(events)

    ins = [s.clock_in.id for s in shifts]
    outs = [s.clock_out.id for s in shifts if s.clock_out]
    assert sorted(ins) == ["b", "c", "d", "g"]
    assert outs == ["e"]


def test_events_are_read_once():
    events = iter([make_event("t1", "in", 0), make_event("t2", "out", 5)])
    assert pairs(ShiftReconstructor.reconstruct(events)) == [("t1", "t2")]


def test_open_shift_runs_until_now():
    shift = Shift(clock_in=make_event("t1", "in", 0))
    assert ShiftReconstructor.duration(shift, T0 + timedelta(hours=3, seconds=7)) == timedelta(hours=3, seconds=7)


def test_clock_skew_clamps_to_zero():
    shift = Shift(clock_in=make_event("t1", "in", 10))
    assert ShiftReconstructor.duration(shift, T0) == timedelta(0)


def test_open_shift_lookup():
    closed = [make_event("t1", "in", 0), make_event("t2", "out", 5)]
    assert ShiftReconstructor.open_shift(closed) is None

    reopened = closed + [make_event("t3", "in", 10)]
    assert ShiftReconstructor.open_shift(reopened).clock_in.id == "t3"


def test_format_duration_truncates():
    delta = timedelta(hours=2, minutes=5, seconds=59, milliseconds=900)
    assert format_duration(delta) == "2h 5m"
    assert format_duration(delta, with_seconds=True) == "2h 5m 59s"


def test_format_duration_past_a_day():
    assert format_duration(timedelta(days=1, minutes=1)) == "24h 1m"
    assert format_duration(timedelta(0), with_seconds=True) == "0h 0m 0s"
