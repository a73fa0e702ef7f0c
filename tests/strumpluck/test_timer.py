import math
from threading import Event
from typing import List

import pytest

from strumpluck.timer import ManualClock, TimerQueue


def make_queue() -> tuple[ManualClock, TimerQueue]:
    clock = ManualClock()
    return clock, TimerQueue(clock)


def test_fires_in_due_order() -> None:
    clock, timers = make_queue()
    fired: List[str] = []
    timers.schedule(300, lambda: fired.append("c"))
    timers.schedule(100, lambda: fired.append("a"))
    timers.schedule(200, lambda: fired.append("b"))
    assert timers.pending_count == 3
    assert timers.run_due() == 0
    clock.advance(0.25)
    assert timers.run_due() == 2
    assert fired == ["a", "b"]
    timers.run_until_idle()
    assert fired == ["a", "b", "c"]
    assert clock.now() == 0.3
    assert timers.pending_count == 0


def test_equal_due_times_keep_insertion_order() -> None:
    _, timers = make_queue()
    fired: List[int] = []
    for i in range(5):
        timers.schedule(50, lambda i=i: fired.append(i))
    timers.run_until_idle()
    assert fired == [0, 1, 2, 3, 4]


def test_canceled_handle_never_fires() -> None:
    clock, timers = make_queue()
    fired: List[str] = []
    keep = timers.schedule(100, lambda: fired.append("keep"))
    drop = timers.schedule(50, lambda: fired.append("drop"))
    drop.cancel()
    assert not drop.pending
    assert keep.pending
    assert timers.next_due() == 0.1
    timers.run_until_idle()
    assert fired == ["keep"]
    assert keep.fired
    assert not drop.fired


def test_cancel_after_fire_is_noop() -> None:
    _, timers = make_queue()
    handle = timers.schedule(0, lambda: None)
    timers.run_due()
    handle.cancel()
    assert handle.fired
    assert not handle.canceled


def test_cancel_all_counts_pending() -> None:
    _, timers = make_queue()
    done = timers.schedule(0, lambda: None)
    timers.run_due()
    later = [timers.schedule(100 * i, lambda: None) for i in range(1, 4)]
    assert timers.cancel_all(later + [done]) == 3
    assert timers.pending_count == 0
    assert timers.next_due() is None


def test_negative_and_nan_delays_run_immediately() -> None:
    clock, timers = make_queue()
    clock.advance(1.0)
    fired: List[str] = []
    timers.schedule(-20, lambda: fired.append("neg"))
    timers.schedule(math.nan, lambda: fired.append("nan"))
    assert timers.run_due() == 2
    assert fired == ["neg", "nan"]


def test_callbacks_may_schedule_more() -> None:
    clock, timers = make_queue()
    fired: List[float] = []

    def chain() -> None:
        fired.append(clock.now())
        if len(fired) < 3:
            timers.schedule(100, chain)

    timers.schedule(100, chain)
    timers.run_until_idle()
    assert fired == pytest.approx([0.1, 0.2, 0.3])


def test_run_until_stops_at_deadline() -> None:
    clock, timers = make_queue()
    fired: List[str] = []
    timers.schedule(100, lambda: fired.append("a"))
    timers.schedule(500, lambda: fired.append("b"))
    timers.run_until(0.3)
    assert fired == ["a"]
    assert clock.now() == 0.3
    assert timers.pending_count == 1


def test_halt_stops_loop() -> None:
    _, timers = make_queue()
    halt = Event()
    fired: List[str] = []

    def first() -> None:
        fired.append("first")
        halt.set()

    timers.schedule(10, first)
    timers.schedule(20, lambda: fired.append("second"))
    timers.run_until_idle(halt)
    assert fired == ["first"]
    assert timers.pending_count == 1


def test_close_cancels_everything() -> None:
    _, timers = make_queue()
    handles = [timers.schedule(10, lambda: None) for _ in range(3)]
    timers.close()
    assert all(handle.canceled for handle in handles)
    assert timers.pending_count == 0
