"""Per-key exponential backoff for failed reconcile passes."""

from __future__ import annotations

import threading
from collections.abc import Hashable
from datetime import timedelta
from typing import Final

DEFAULT_BASE_DELAY: Final[timedelta] = timedelta(milliseconds=5)
DEFAULT_MAX_DELAY: Final[timedelta] = timedelta(seconds=1000)


class ExponentialBackoffLimiter[TKey: Hashable]:
    """Delay grows as ``base * 2**failures`` for a key until ``forget`` is called."""

    def __init__(
        self,
        base_delay: timedelta = DEFAULT_BASE_DELAY,
        max_delay: timedelta = DEFAULT_MAX_DELAY,
    ) -> None:
        if base_delay <= timedelta(0):
            raise ValueError("Base delay must be positive")
        if max_delay < base_delay:
            raise ValueError("Max delay must not be below the base delay")
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._failures: dict[TKey, int] = {}
        self._lock = threading.Lock()

    def when(self, key: TKey) -> timedelta:
        with self._lock:
            exponent = self._failures.get(key, 0)
            self._failures[key] = exponent + 1
        # compare the ratio first; the product itself can overflow timedelta
        if 2**exponent >= self.max_delay / self.base_delay:
            return self.max_delay
        return self.base_delay * (2**exponent)

    def forget(self, key: TKey) -> None:
        with self._lock:
            self._failures.pop(key, None)

    def num_requeues(self, key: TKey) -> int:
        with self._lock:
            return self._failures.get(key, 0)
