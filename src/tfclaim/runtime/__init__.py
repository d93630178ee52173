"""Caller side of the reconcile contract: queue, watches, cache and workers."""

from __future__ import annotations

from .cache import (
    POD_KIND,
    POD_PHASE_FIELD,
    IndexerError,
    ObjectCache,
    default_object_cache,
    pod_phase,
)
from .controller import Controller
from .queue import RateLimitingQueue
from .ratelimit import ExponentialBackoffLimiter
from .watch import Subscription

__all__ = [
    "POD_KIND",
    "POD_PHASE_FIELD",
    "Controller",
    "ExponentialBackoffLimiter",
    "IndexerError",
    "ObjectCache",
    "RateLimitingQueue",
    "Subscription",
    "default_object_cache",
    "pod_phase",
]
