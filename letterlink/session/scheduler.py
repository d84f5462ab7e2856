"""Cooperative timer scheduling for the session countdown.

The :class:`Scheduler` protocol matches tkinter's ``after``/``after_cancel``
so a Tk root can drive a session directly. :class:`ManualScheduler` keeps a
virtual clock that callers advance explicitly (tests, text front-ends).
"""

from __future__ import annotations

import heapq
import itertools
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from ..core.constants import TICK_INTERVAL_MS
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


class Scheduler(Protocol):
    def after(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        ...

    def after_cancel(self, job: Any) -> None:
        ...


class ManualScheduler:
    """Virtual-time scheduler; nothing fires until :meth:`advance` is called."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: List[Tuple[int, int, str]] = []
        self._callbacks: Dict[str, Callable[[], None]] = {}
        self._counter = itertools.count()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> str:
        order = next(self._counter)
        job = f"after#{order}"
        self._callbacks[job] = callback
        heapq.heappush(self._queue, (self.now_ms + max(0, int(delay_ms)), order, job))
        return job

    def after_cancel(self, job: str) -> None:
        self._callbacks.pop(job, None)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns how many fired."""

        target = self.now_ms + int(round(seconds * 1000))
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, job = heapq.heappop(self._queue)
            callback = self._callbacks.pop(job, None)
            if callback is None:
                continue
            self.now_ms = due
            callback()
            fired += 1
        self.now_ms = target
        return fired


class Countdown:
    """One-second ticker that stays cancellable across restarts.

    Every :meth:`start` bumps a generation token; a tick carrying an older
    token is dropped, so nothing fires after :meth:`stop` even if the
    scheduler already dequeued the job.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callable[[], None],
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self._lock = threading.Lock()
        self._generation = 0
        self._job: Optional[Any] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            self._cancel_job()
            self._generation += 1
            self._running = True
            self._schedule(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._cancel_job()
            self._generation += 1
            self._running = False

    def _schedule(self, generation: int) -> None:
        self._job = self.scheduler.after(self.interval_ms, lambda: self._fire(generation))

    def _cancel_job(self) -> None:
        if self._job is not None:
            self.scheduler.after_cancel(self._job)
            self._job = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                LOGGER.debug("Dropping stale countdown tick")
                return
            self._job = None
        self.on_tick()
        with self._lock:
            if self._running and generation == self._generation:
                self._schedule(generation)
