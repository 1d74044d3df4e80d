# src/game/timers.py
"""
Wall-clock one-shot timers polled from the game loop.

The loop is single-threaded, so callbacks run inside `Scheduler.poll()` on the
same thread that ticks the game. Each `call_later` returns a handle; cancelling
it guarantees the callback never runs, even if its deadline already passed.
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Callable, List


@dataclass
class TimerHandle:
    deadline: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._timers: List[TimerHandle] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(deadline=self.clock() + delay_s, callback=callback)
        self._timers.append(handle)
        return handle

    def poll(self) -> int:
        """Run every due, uncancelled timer. Returns how many fired."""
        now = self.clock()
        due = [t for t in self._timers if t.active and t.deadline <= now]
        self._timers = [t for t in self._timers if t.active and t.deadline > now]
        for t in due:
            if t.cancelled:  # a sibling callback may cancel it
                continue
            t.fired = True
            t.callback()
        return sum(1 for t in due if t.fired)

    def cancel_all(self):
        for t in self._timers:
            t.cancel()
        self._timers = []

    def __len__(self) -> int:
        return sum(1 for t in self._timers if t.active)


class ManualClock:
    """Clock advanced by hand. Used for headless/deterministic runs."""
    def __init__(self, start: float = 0.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds
