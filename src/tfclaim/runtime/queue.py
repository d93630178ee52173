"""Work queue handing claim keys to controller workers.

Keys are deduplicated while waiting, and a key that is currently being
processed is never handed to a second worker: adding it again only marks it
dirty, and it is queued once ``done`` is called.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections import deque
from collections.abc import Callable, Hashable
from datetime import timedelta

from tfclaim.runtime.ratelimit import ExponentialBackoffLimiter

type Clock = Callable[[], float]


class RateLimitingQueue[TKey: Hashable]:
    def __init__(
        self,
        rate_limiter: ExponentialBackoffLimiter[TKey] | None = None,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self.rate_limiter: ExponentialBackoffLimiter[TKey] = (
            rate_limiter or ExponentialBackoffLimiter()
        )
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: deque[TKey] = deque()
        self._dirty: set[TKey] = set()
        self._processing: set[TKey] = set()
        self._waiting: list[tuple[float, int, TKey]] = []
        self._ready_at: dict[TKey, float] = {}
        self._sequence = itertools.count()
        self._shutting_down = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    def add(self, key: TKey) -> None:
        with self._cond:
            self._add_locked(key)
            self._cond.notify()

    def add_after(self, key: TKey, delay: timedelta) -> None:
        if delay <= timedelta(0):
            self.add(key)
            return
        with self._cond:
            if self._shutting_down:
                return
            ready_at = self._clock() + delay.total_seconds()
            known = self._ready_at.get(key)
            if known is not None and known <= ready_at:
                return
            self._ready_at[key] = ready_at
            heapq.heappush(self._waiting, (ready_at, next(self._sequence), key))
            self._cond.notify()

    def add_rate_limited(self, key: TKey) -> None:
        self.add_after(key, self.rate_limiter.when(key))

    def forget(self, key: TKey) -> None:
        self.rate_limiter.forget(key)

    def num_requeues(self, key: TKey) -> int:
        return self.rate_limiter.num_requeues(key)

    def get(self, timeout: float | None = None) -> TKey | None:
        """Return the next ready key, or ``None`` on timeout or shutdown.

        ``timeout`` is measured in wall-clock seconds independent of the
        injected clock, which only schedules delayed keys.
        """

        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                self._promote_ready_locked()
                if self._queue:
                    key = self._queue.popleft()
                    self._processing.add(key)
                    self._dirty.discard(key)
                    return key
                if self._shutting_down:
                    return None
                wait = self._next_ready_in_locked()
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    wait = remaining if wait is None else min(wait, remaining)
                self._cond.wait(wait)

    def done(self, key: TKey) -> None:
        with self._cond:
            self._processing.discard(key)
            if key in self._dirty:
                self._queue.append(key)
                self._cond.notify()

    def shutdown(self) -> None:
        with self._cond:
            self._shutting_down = True
            self._cond.notify_all()

    def _add_locked(self, key: TKey) -> None:
        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        if key in self._processing:
            return
        self._queue.append(key)

    def _promote_ready_locked(self) -> None:
        now = self._clock()
        while self._waiting and self._waiting[0][0] <= now:
            ready_at, _, key = heapq.heappop(self._waiting)
            if self._ready_at.get(key) != ready_at:
                continue
            del self._ready_at[key]
            self._add_locked(key)

    def _next_ready_in_locked(self) -> float | None:
        if not self._waiting:
            return None
        return max(self._waiting[0][0] - self._clock(), 0.0)
