"""One-shot scheduler driven by an injected clock."""
from src.game.timers import ManualClock, Scheduler


def test_fires_once_at_deadline():
    clock = ManualClock()
    s = Scheduler(clock)
    hits = []
    h = s.call_later(1.0, lambda: hits.append("tick"))
    assert s.poll() == 0
    clock.advance(0.999)
    assert s.poll() == 0
    clock.advance(0.001)
    assert s.poll() == 1
    assert s.poll() == 0
    assert hits == ["tick"]
    assert h.fired and not h.active
    assert len(s) == 0


def test_cancelled_timer_never_fires():
    clock = ManualClock()
    s = Scheduler(clock)
    hits = []
    h = s.call_later(0.5, lambda: hits.append(1))
    clock.advance(2.0)
    h.cancel()           # deadline already passed but not yet polled
    assert s.poll() == 0
    assert hits == []


def test_callback_can_cancel_sibling():
    clock = ManualClock()
    s = Scheduler(clock)
    hits = []
    second = None

    def first():
        hits.append("first")
        second.cancel()

    s.call_later(1.0, first)
    second = s.call_later(1.0, lambda: hits.append("second"))
    clock.advance(1.0)
    assert s.poll() == 1
    assert hits == ["first"]


def test_cancel_all_and_len():
    clock = ManualClock(start=100.0)
    s = Scheduler(clock)
    handles = [s.call_later(d, lambda: None) for d in (1, 2, 3)]
    assert len(s) == 3
    handles[0].cancel()
    assert len(s) == 2
    s.cancel_all()
    assert len(s) == 0
    clock.advance(10)
    assert s.poll() == 0
    assert all(h.cancelled for h in handles)
