"""Domain port definitions for adapters."""

from __future__ import annotations

from .objects import ObjectIndex
from .store import ClaimStore, PatchHandle
from .watch import WatchEvent, WatchHandler

__all__ = [
    "ClaimStore",
    "ObjectIndex",
    "PatchHandle",
    "WatchEvent",
    "WatchHandler",
]
