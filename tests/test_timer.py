import threading
import time

import pytest

from musical_statues.services.games.timer import RoundTimer


class ManualClock:
    """Clock whose sleep() just advances time, for deterministic runs."""

    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


def _inline(target, *args):
    target(*args)


def test_progress_strictly_increases_to_one():
    clock = ManualClock()
    ticks, completions = [], []
    timer = RoundTimer(interval_ms=16, clock=clock, sleep=clock.sleep, spawn=_inline)
    timer.start(100, ticks.append, lambda: completions.append(True))

    assert ticks[0] == 0.0
    assert ticks[-1] == 1.0
    assert all(a < b for a, b in zip(ticks, ticks[1:]))
    assert completions == [True]
    assert timer.finished
    assert timer.remaining_ms == 0.0


def test_zero_duration_completes_immediately():
    clock = ManualClock()
    ticks, completions = [], []
    RoundTimer(clock=clock, sleep=clock.sleep, spawn=_inline).start(0, ticks.append, lambda: completions.append(True))
    assert ticks == [1.0]
    assert completions == [True]


def test_timer_can_only_start_once():
    clock = ManualClock()
    timer = RoundTimer(clock=clock, sleep=clock.sleep, spawn=_inline)
    timer.start(10, lambda p: None, lambda: None)
    with pytest.raises(RuntimeError):
        timer.start(10, lambda p: None, lambda: None)


def test_cancel_from_tick_prevents_completion():
    clock = ManualClock()
    completions = []
    timer = RoundTimer(clock=clock, sleep=clock.sleep, spawn=_inline)

    def on_tick(progress):
        if progress >= 0.5:
            timer.cancel()

    timer.start(100, on_tick, lambda: completions.append(True))
    assert timer.cancelled
    assert completions == []


def test_threaded_timer_completes_once():
    ticks, completions = [], []
    done = threading.Event()

    def on_complete():
        completions.append(True)
        done.set()

    RoundTimer(interval_ms=5).start(60, ticks.append, on_complete)
    assert done.wait(2.0)
    time.sleep(0.1)
    assert completions == [True]
    assert ticks[-1] == 1.0
    assert all(a < b for a, b in zip(ticks, ticks[1:]))


def test_cancelled_timer_never_fires_again():
    ticks, completions = [], []
    timer = RoundTimer(interval_ms=5)
    timer.start(100, ticks.append, lambda: completions.append(True))
    time.sleep(0.03)
    timer.cancel()
    seen = len(ticks)
    # Wait well past the 100ms duration
    time.sleep(0.25)
    assert len(ticks) == seen
    assert completions == []


def test_progress_before_start_is_zero():
    timer = RoundTimer()
    assert timer.progress == 0.0
    assert timer.elapsed_ms == 0.0
    assert timer.remaining_ms == 0.0
