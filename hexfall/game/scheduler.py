from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

TimerCallback = Callable[[], None]


class Scheduler(Protocol):
    def now_ms(self) -> float:
        ...

    def call_later(self, delay_ms: int, callback: TimerCallback) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


@dataclass(order=True)
class _PendingCall:
    due_ms: float
    sequence: int
    callback: TimerCallback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualScheduler:
    """
    Deterministic virtual clock.

    Nothing runs until ``advance`` is called; due callbacks then fire in
    (due time, scheduling order) and may schedule further calls, which fire
    within the same ``advance`` if they fall inside the window.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._pending: list[_PendingCall] = []
        self._sequence = itertools.count()

    def now_ms(self) -> float:
        return self._now_ms

    def call_later(self, delay_ms: int, callback: TimerCallback) -> _PendingCall:
        call = _PendingCall(
            due_ms=self._now_ms + max(0, int(delay_ms)),
            sequence=next(self._sequence),
            callback=callback,
        )
        heapq.heappush(self._pending, call)
        return call

    def cancel(self, handle: Any) -> None:
        if isinstance(handle, _PendingCall):
            handle.cancelled = True

    def pending_count(self) -> int:
        return sum(1 for call in self._pending if not call.cancelled)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing due callbacks; returns how many fired."""
        target = self._now_ms + max(0.0, float(delta_ms))
        fired = 0
        while self._pending and self._pending[0].due_ms <= target:
            call = heapq.heappop(self._pending)
            if call.cancelled:
                continue
            self._now_ms = max(self._now_ms, call.due_ms)
            call.callback()
            fired += 1
        self._now_ms = target
        return fired

    def run_until_idle(self, *, max_calls: int = 100_000) -> int:
        fired = 0
        while fired < max_calls:
            live = [call for call in self._pending if not call.cancelled]
            if not live:
                break
            next_due = min(call.due_ms for call in live)
            fired += self.advance(next_due - self._now_ms)
        return fired


class TkScheduler:
    """Adapter over a tkinter widget's ``after``/``after_cancel`` event loop."""

    def __init__(self, widget: Any) -> None:
        self._widget = widget

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def call_later(self, delay_ms: int, callback: TimerCallback) -> Any:
        return self._widget.after(max(0, int(delay_ms)), callback)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            self._widget.after_cancel(handle)
