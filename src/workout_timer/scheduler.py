"""Polled periodic tick scheduler with explicit arm/disarm handles."""

from __future__ import annotations

import itertools
import logging
import time
from typing import Callable, Optional

TickCallback = Callable[[], None]


class TimerHandle:
    """Opaque handle returned by `TickScheduler.arm`."""

    __slots__ = ("handle_id", "interval_seconds", "next_due", "_on_tick", "_armed")

    def __init__(
        self,
        handle_id: int,
        interval_seconds: float,
        next_due: float,
        on_tick: TickCallback,
    ):
        self.handle_id = handle_id
        self.interval_seconds = interval_seconds
        self.next_due = next_due
        self._on_tick = on_tick
        self._armed = True

    @property
    def armed(self) -> bool:
        return self._armed

    def __repr__(self) -> str:
        state = "armed" if self._armed else "disarmed"
        return f"TimerHandle(id={self.handle_id}, {state})"


class TickScheduler:
    """Delivers one tick per elapsed interval for each armed handle.

    The scheduler has no thread of its own: the owner calls `poll()` from its
    loop and tick callbacks run synchronously inside that call, one at a time,
    in due-time order. A callback that disarms its own (or another) handle
    prevents any further delivery for that handle, including catch-up ticks
    already due in the same poll.
    """

    def __init__(
        self,
        *,
        monotonic_now: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._now = monotonic_now or time.monotonic
        self._logger = logger or logging.getLogger("scheduler")
        self._handles: dict[int, TimerHandle] = {}
        self._ids = itertools.count(1)

    @property
    def armed_count(self) -> int:
        return len(self._handles)

    def arm(self, interval_ms: int, on_tick: TickCallback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be greater than zero")

        interval_seconds = interval_ms / 1000.0
        handle = TimerHandle(
            handle_id=next(self._ids),
            interval_seconds=interval_seconds,
            next_due=self._now() + interval_seconds,
            on_tick=on_tick,
        )
        self._handles[handle.handle_id] = handle
        self._logger.debug("Armed %r every %dms", handle, interval_ms)
        return handle

    def disarm(self, handle: Optional[TimerHandle]) -> None:
        if handle is None or not handle.armed:
            return
        handle._armed = False
        self._handles.pop(handle.handle_id, None)
        self._logger.debug("Disarmed %r", handle)

    def poll(self, now: Optional[float] = None) -> int:
        """Fire every tick that is due at `now` and return how many fired."""
        current = self._now() if now is None else now
        delivered = 0
        while True:
            handle = self._next_due_handle(current)
            if handle is None:
                return delivered
            handle.next_due += handle.interval_seconds
            handle._on_tick()
            delivered += 1

    def seconds_until_next_tick(self, now: Optional[float] = None) -> Optional[float]:
        if not self._handles:
            return None
        current = self._now() if now is None else now
        next_due = min(handle.next_due for handle in self._handles.values())
        return max(0.0, next_due - current)

    def _next_due_handle(self, now: float) -> Optional[TimerHandle]:
        due = [
            handle
            for handle in self._handles.values()
            if handle.armed and handle.next_due <= now
        ]
        if not due:
            return None
        return min(due, key=lambda handle: (handle.next_due, handle.handle_id))
