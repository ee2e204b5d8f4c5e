from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from .clock import Clock, to_ms

logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class TimerHandle:
    """Cancellation handle for one scheduled callback."""

    timer_id: int
    deadline_ms: int
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler(Protocol):
    """One-shot timers; the only way game engines touch time."""

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...

    def cancel(self, handle: TimerHandle | None) -> None: ...

    def now_ms(self) -> int: ...


class TimerQueue:
    """Cooperative, single-threaded timer queue driven by a Clock.

    Nothing fires on its own: the owner calls ``pump()`` (once per frame in
    the UI, after advancing a fake clock in tests) and every due timer runs
    in (deadline, insertion) order.

    While a callback runs, ``now_ms()`` reports that timer's deadline rather
    than the wall clock. Timers chained from inside callbacks therefore form
    an exact timeline no matter how late the pump happens, and a single pump
    after a large fast-forward replays the whole chain.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[tuple[int, int, TimerHandle]] = []
        self._ids = itertools.count(1)
        self._dispatch_ms: int | None = None

    def now_ms(self) -> int:
        if self._dispatch_ms is not None:
            return self._dispatch_ms
        return to_ms(self._clock.now())

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        delay = int(delay_ms)
        if delay < 0:
            raise ValueError("delay_ms must be >= 0")
        timer_id = next(self._ids)
        handle = TimerHandle(timer_id=timer_id, deadline_ms=self.now_ms() + delay, callback=callback)
        heapq.heappush(self._heap, (handle.deadline_ms, timer_id, handle))
        return handle

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is None or not handle.pending:
            return
        handle.cancelled = True
        logger.debug("timer %d cancelled (deadline %d ms)", handle.timer_id, handle.deadline_ms)

    def pending_count(self) -> int:
        return sum(1 for _, _, h in self._heap if h.pending)

    def pump(self, *, max_fire: int | None = None) -> int:
        """Fire timers whose deadline has passed. Returns the number fired.

        With ``max_fire`` set, at most that many callbacks run; the rest stay
        queued at their original deadlines for the next pump.
        """

        if max_fire is not None and max_fire < 1:
            raise ValueError("max_fire must be >= 1")
        now = to_ms(self._clock.now())
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            if max_fire is not None and fired >= max_fire:
                break
            deadline, _, handle = heapq.heappop(self._heap)
            if not handle.pending:
                continue
            handle.fired = True
            self._dispatch_ms = deadline
            try:
                handle.callback()
            finally:
                self._dispatch_ms = None
            fired += 1
        return fired

    def clear(self) -> None:
        for _, _, handle in self._heap:
            handle.cancelled = True
        self._heap.clear()
