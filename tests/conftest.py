from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

import pytest

from pytrafficlight.models.signal import NormalizedSignal


class _ManualTimer:
    def __init__(self, when: float, seq: int, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def when(self) -> float:
        return self._when


class ManualClockLoop:
    """Just enough of an event loop for timer tests; time only moves on advance()."""

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._timers: list[_ManualTimer] = []

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _ManualTimer:
        timer = _ManualTimer(self._now + delay, next(self._seq), callback, args)
        self._timers.append(timer)
        return timer

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> _ManualTimer:
        return self.call_later(0.0, callback, *args)

    call_soon_threadsafe = call_soon

    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled())

    def run_ready(self) -> None:
        self.advance(0.0)

    def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled() and t.when() <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when(), t.seq))
            self._timers.remove(timer)
            self._now = max(self._now, timer.when())
            timer.callback(*timer.args)
        self._timers = [t for t in self._timers if not t.cancelled()]
        self._now = target


class RecordingSink:
    def __init__(self, loop: ManualClockLoop) -> None:
        self._loop = loop
        self.calls: list[tuple[float, NormalizedSignal | None]] = []

    def __call__(self, signal: NormalizedSignal | None) -> None:
        self.calls.append((self._loop.time(), signal))

    @property
    def signals(self) -> list[NormalizedSignal]:
        return [s for _, s in self.calls if s is not None]

    @property
    def clear_times(self) -> list[float]:
        return [t for t, s in self.calls if s is None]


@pytest.fixture
def manual_loop() -> ManualClockLoop:
    return ManualClockLoop()


@pytest.fixture
def sink(manual_loop: ManualClockLoop) -> RecordingSink:
    return RecordingSink(manual_loop)
