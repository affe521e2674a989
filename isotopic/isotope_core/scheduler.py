"""
Scheduler
=========

Deterministic single-threaded timers driven by explicit time advances.

All callbacks run to completion on the caller's stack, in due-time order
(ties broken by creation order), so nothing a callback touches can be
observed half-updated by another timer.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional

Callback = Callable[[], None]


@dataclass(eq=False)
class Timer:
    """A scheduled callback. Periodic timers re-arm themselves after firing."""
    name: str
    interval: float
    callback: Callback
    periodic: bool
    due: float
    seq: int
    active: bool = field(default=True)


class Scheduler:
    """
    Timer set owned by one game session.

    Time only moves when `advance` is called; nothing here reads a clock.
    """

    def __init__(self):
        self._now: float = 0.0
        self._timers: List[Timer] = []
        self._seq = itertools.count()
        self._closed: bool = False

    @property
    def now(self) -> float:
        """Scheduler time in seconds since creation."""
        return self._now

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timers(self) -> List[Timer]:
        """Active timers (read-only view)."""
        return [t for t in self._timers if t.active]

    def every(self, interval: float, callback: Callback, name: str = "") -> Timer:
        """Schedule a periodic callback, first firing `interval` from now."""
        return self._add(interval, callback, name, periodic=True)

    def after(self, delay: float, callback: Callback, name: str = "") -> Timer:
        """Schedule a one-shot callback."""
        return self._add(delay, callback, name, periodic=False)

    def _add(self, interval: float, callback: Callback, name: str, periodic: bool) -> Timer:
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        timer = Timer(
            name=name,
            interval=interval,
            callback=callback,
            periodic=periodic,
            due=self._now + interval,
            seq=next(self._seq)
        )
        if not self._closed:
            self._timers.append(timer)
        else:
            timer.active = False
        return timer

    def restart(self, timer: Timer, interval: Optional[float] = None) -> None:
        """Re-arm a timer from the current time, optionally with a new interval."""
        if self._closed:
            return
        if interval is not None:
            if interval <= 0:
                raise ValueError(f"Timer interval must be positive, got {interval}")
            timer.interval = interval
        timer.due = self._now + timer.interval
        if not timer.active:
            timer.active = True
            self._timers.append(timer)

    def cancel(self, timer: Optional[Timer]) -> None:
        if timer is None or not timer.active:
            return
        timer.active = False
        self._timers.remove(timer)

    def cancel_all(self) -> None:
        for timer in self._timers:
            timer.active = False
        self._timers.clear()

    def close(self) -> None:
        """Cancel everything; later advances and schedules are ignored."""
        self.cancel_all()
        self._closed = True

    def _next_due(self, limit: float) -> Optional[Timer]:
        due = [t for t in self._timers if t.active and t.due <= limit]
        if not due:
            return None
        return min(due, key=lambda t: (t.due, t.seq))

    def advance(self, seconds: float) -> int:
        """
        Move time forward, firing every timer that comes due.

        Args:
            seconds: Time to advance. Negative values are treated as zero.

        Returns:
            Number of callbacks fired.
        """
        if self._closed:
            return 0

        target = self._now + max(0.0, seconds)
        fired = 0
        while not self._closed:
            timer = self._next_due(target)
            if timer is None:
                break
            self._now = max(self._now, timer.due)
            if timer.periodic:
                timer.due += timer.interval
            else:
                self.cancel(timer)
            timer.callback()
            fired += 1

        if not self._closed:
            self._now = target
        return fired
