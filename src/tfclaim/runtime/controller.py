"""Threaded controller loop feeding claim keys to the reconciler."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import TYPE_CHECKING

from tfclaim.config.controller import ControllerConfig
from tfclaim.domain.reconcile.context import ReconcileContext
from tfclaim.domain.reconcile.errors import TfClaimError
from tfclaim.domain.reconcile.outcome import ReconcileOutcome
from tfclaim.runtime.queue import RateLimitingQueue
from tfclaim.runtime.ratelimit import ExponentialBackoffLimiter
from tfclaim.runtime.watch import Subscription

if TYPE_CHECKING:
    from tfclaim.domain.model import NamespacedName
    from tfclaim.domain.ports.store import ClaimStore
    from tfclaim.domain.ports.watch import WatchEvent
    from tfclaim.domain.reconcile.reconciler import ClaimReconciler
    from tfclaim.runtime.cache import ObjectCache

log = logging.getLogger(__name__)

WORKER_POLL_SECONDS = 1.0


class Controller:
    """Run reconcile passes for queued claim keys on a pool of worker threads.

    The queue guarantees one in-flight pass per key. The outcome of each pass
    decides what happens next: errors back off per key, an explicit delay
    schedules the next visit, anything else forgets the key until the next
    change notification or resync.
    """

    def __init__(
        self,
        reconciler: ClaimReconciler,
        store: ClaimStore,
        *,
        subscription: Subscription | None = None,
        config: ControllerConfig | None = None,
        queue: RateLimitingQueue[NamespacedName] | None = None,
        object_cache: ObjectCache | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.store = store
        self.object_cache = object_cache
        self.config = config or ControllerConfig()
        self.subscription = subscription or Subscription(owns=frozenset(self.config.owned_kinds))
        if queue is None:
            queue = RateLimitingQueue(
                ExponentialBackoffLimiter(
                    base_delay=timedelta(seconds=self.config.backoff_base_seconds),
                    max_delay=timedelta(seconds=self.config.backoff_max_seconds),
                )
            )
        self.queue: RateLimitingQueue[NamespacedName] = queue
        self.stop_event = threading.Event()
        if object_cache is not None:
            object_cache.subscribe(self.enqueue)

    def enqueue(self, event: WatchEvent) -> None:
        for key in self.subscription.map_event(event):
            log.debug("%s %s/%s -> %s", event.type, event.kind, event.name, key)
            self.queue.add(key)

    def resync(self) -> None:
        try:
            keys = self.store.list_keys()
        except TfClaimError as exc:
            log.warning("Resync failed: %s", exc)
            return
        for key in keys:
            self.queue.add(key)
        log.debug("Resync queued %d claims", len(keys))

    def process_next(self, timeout: float | None = None) -> bool:
        """Process one key from the queue; return whether a key was processed."""

        key = self.queue.get(timeout=timeout)
        if key is None:
            return False
        try:
            self._process(key)
        finally:
            self.queue.done(key)
        return True

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Block until ``stop_event`` is set, reconciling claims meanwhile."""

        if stop_event is not None:
            self.stop_event = stop_event
        log.info(
            "Starting controller for %s (owns %s) with %d workers",
            self.subscription.for_kind,
            ", ".join(sorted(self.subscription.owns)) or "nothing",
            self.config.workers,
        )
        threads = [
            threading.Thread(target=self._worker, name=f"reconcile-{index}", daemon=True)
            for index in range(self.config.workers)
        ]
        if self.config.resync_seconds > 0:
            threads.append(threading.Thread(target=self._resync_loop, name="resync", daemon=True))
        else:
            self.resync()
        for thread in threads:
            thread.start()

        self.stop_event.wait()
        log.info("Stopping controller")
        self.queue.shutdown()
        for thread in threads:
            thread.join()

    def _worker(self) -> None:
        while not self.queue.shutting_down:
            self.process_next(timeout=WORKER_POLL_SECONDS)

    def _resync_loop(self) -> None:
        while not self.stop_event.is_set():
            self.resync()
            self.stop_event.wait(self.config.resync_seconds)

    def _process(self, key: NamespacedName) -> None:
        context = ReconcileContext(key=key, cancelled=self.stop_event, objects=self.object_cache)
        try:
            outcome = self.reconciler.reconcile(key, context)
        except Exception as exc:
            log.exception("Reconciler raised for %s", key)
            outcome = ReconcileOutcome(error=exc)
        try:
            self._requeue(key, outcome)
        except Exception:
            log.exception("Failed to requeue %s; it waits for the next event or resync", key)

    def _requeue(self, key: NamespacedName, outcome: ReconcileOutcome) -> None:
        if outcome.error is not None:
            log.error("Reconcile of %s failed: %s", key, outcome.error)
            self.queue.add_rate_limited(key)
            return
        self.queue.forget(key)
        if outcome.requeue:
            log.debug("Requeue %s after %s", key, outcome.requeue_after)
            self.queue.add_after(key, outcome.requeue_after)
