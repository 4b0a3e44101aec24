from __future__ import annotations

import pytest

from unicornhub.engine.scheduler import Scheduler


def test_call_later_fires_once_when_due() -> None:
    sched = Scheduler()
    hits: list[float] = []
    sched.call_later(0.5, lambda: hits.append(sched.now))

    assert sched.advance(0.4) == 0
    assert hits == []
    assert sched.advance(0.1) == 1
    assert hits == [pytest.approx(0.5)]
    sched.advance(5.0)
    assert len(hits) == 1
    assert sched.pending() == 0


def test_calls_run_in_due_order_within_one_advance() -> None:
    sched = Scheduler()
    order: list[str] = []
    sched.call_later(0.3, lambda: order.append("c"))
    sched.call_later(0.1, lambda: order.append("a"))
    sched.call_later(0.2, lambda: order.append("b"))
    sched.advance(1.0)
    assert order == ["a", "b", "c"]
    assert sched.now == pytest.approx(1.0)


def test_call_every_repeats_until_cancelled() -> None:
    sched = Scheduler()
    count = [0]

    def bump() -> None:
        count[0] += 1

    handle = sched.call_every(1.0, bump)
    assert sched.advance(3.0) == 3
    handle.cancel()
    assert not handle.active
    sched.advance(3.0)
    assert count[0] == 3
    assert sched.pending() == 0


def test_cancelled_one_shot_never_fires() -> None:
    sched = Scheduler()
    hits: list[int] = []
    handle = sched.call_later(0.1, lambda: hits.append(1))
    handle.cancel()
    sched.advance(1.0)
    assert hits == []


def test_callback_can_schedule_more_work() -> None:
    sched = Scheduler()
    seen: list[float] = []

    def first() -> None:
        seen.append(sched.now)
        sched.call_later(0.2, lambda: seen.append(sched.now))

    sched.call_later(0.1, first)
    sched.advance(1.0)
    assert seen == [pytest.approx(0.1), pytest.approx(0.3)]


def test_small_frame_steps_accumulate() -> None:
    sched = Scheduler()
    count = [0]

    def bump() -> None:
        count[0] += 1

    sched.call_every(0.03, bump)
    for _ in range(10):
        sched.advance(0.016)
    # 0.16 s of frames covers five 30 ms ticks
    assert count[0] == 5


def test_invalid_arguments_raise() -> None:
    sched = Scheduler()
    with pytest.raises(ValueError):
        sched.call_later(-1.0, lambda: None)
    with pytest.raises(ValueError):
        sched.call_every(0.0, lambda: None)
    with pytest.raises(ValueError):
        sched.advance(-0.1)
