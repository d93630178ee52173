"""Cache of dependent objects with derived-field indexes.

Phase operations look up the runtime objects behind a claim (runner pods,
deployments) by computed values such as a pod's lifecycle phase. Indexers are
registered before ``start`` and the indexes are built once, then maintained
incrementally as objects change.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

from tfclaim.domain.model import WatchEventType
from tfclaim.domain.ports.watch import WatchEvent

if TYPE_CHECKING:
    from tfclaim.domain.model import DependentObject
    from tfclaim.domain.ports.watch import WatchHandler

log = logging.getLogger(__name__)

type ObjectKey = tuple[str, str, str]
type IndexFunc = Callable[[DependentObject], Sequence[str]]

POD_KIND = "Pod"
POD_PHASE_FIELD = "status.phase"


class IndexerError(RuntimeError):
    """Raised on late or duplicate indexer registration and unknown index lookups."""


class ObjectCache:
    def __init__(self) -> None:
        self._objects: dict[ObjectKey, DependentObject] = {}
        self._indexers: dict[str, dict[str, IndexFunc]] = {}
        self._indices: dict[tuple[str, str], dict[str, set[ObjectKey]]] = {}
        self._started = False
        self._lock = threading.RLock()
        self._handlers: list[WatchHandler] = []

    @property
    def started(self) -> bool:
        return self._started

    def subscribe(self, handler: WatchHandler) -> None:
        self._handlers.append(handler)

    def index_field(self, kind: str, field: str, extractor: IndexFunc) -> None:
        with self._lock:
            if self._started:
                raise IndexerError(f"Cannot add index {kind}/{field} after the cache started")
            fields = self._indexers.setdefault(kind, {})
            if field in fields:
                raise IndexerError(f"Index {kind}/{field} already registered")
            fields[field] = extractor

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            for index_key in self._index_keys():
                self._indices[index_key] = {}
            for key, obj in self._objects.items():
                self._index_locked(key, obj)
            self._started = True
        log.debug("Object cache started with indexes %s", sorted(self._indices))

    def upsert(self, obj: DependentObject) -> None:
        stored = copy.deepcopy(obj)
        key = stored.object_key
        with self._lock:
            previous = self._objects.get(key)
            if previous is not None and self._started:
                self._unindex_locked(key, previous)
            self._objects[key] = stored
            if self._started:
                self._index_locked(key, stored)
        event_type = WatchEventType.ADDED if previous is None else WatchEventType.MODIFIED
        self._notify(event_type, stored)

    def remove(self, kind: str, namespace: str, name: str) -> None:
        key = (kind, namespace, name)
        with self._lock:
            previous = self._objects.pop(key, None)
            if previous is None:
                return
            if self._started:
                self._unindex_locked(key, previous)
        self._notify(WatchEventType.DELETED, previous)

    def get(self, kind: str, namespace: str, name: str) -> DependentObject | None:
        with self._lock:
            obj = self._objects.get((kind, namespace, name))
            return copy.deepcopy(obj) if obj is not None else None

    def list(
        self,
        kind: str,
        *,
        namespace: str | None = None,
        matching_fields: Mapping[str, str] | None = None,
    ) -> Sequence[DependentObject]:
        """Return objects of ``kind``, optionally filtered by indexed field values."""

        with self._lock:
            candidates: set[ObjectKey] | None = None
            for field, value in (matching_fields or {}).items():
                if not self._started:
                    raise IndexerError("Object cache has not been started")
                index = self._indices.get((kind, field))
                if index is None:
                    raise IndexerError(f"No index registered for {kind}/{field}")
                matched = index.get(value, set())
                candidates = set(matched) if candidates is None else candidates & matched
            keys = (
                candidates
                if candidates is not None
                else {key for key in self._objects if key[0] == kind}
            )
            return [
                copy.deepcopy(self._objects[key])
                for key in sorted(keys)
                if namespace is None or key[1] == namespace
            ]

    def _index_keys(self) -> Sequence[tuple[str, str]]:
        return [(kind, field) for kind, fields in self._indexers.items() for field in fields]

    def _index_locked(self, key: ObjectKey, obj: DependentObject) -> None:
        for field, extractor in self._indexers.get(obj.kind, {}).items():
            index = self._indices[(obj.kind, field)]
            for value in extractor(obj):
                index.setdefault(value, set()).add(key)

    def _unindex_locked(self, key: ObjectKey, obj: DependentObject) -> None:
        for field, extractor in self._indexers.get(obj.kind, {}).items():
            index = self._indices[(obj.kind, field)]
            for value in extractor(obj):
                bucket = index.get(value)
                if bucket is None:
                    continue
                bucket.discard(key)
                if not bucket:
                    del index[value]

    def _notify(self, event_type: WatchEventType, obj: DependentObject) -> None:
        event = WatchEvent(
            type=event_type,
            kind=obj.kind,
            namespace=obj.namespace,
            name=obj.name,
            owner_references=obj.owner_references,
        )
        for handler in tuple(self._handlers):
            try:
                handler(event)
            except Exception:
                log.exception("Watch handler failed for %s %s", event_type, obj.object_key)


def pod_phase(obj: DependentObject) -> list[str]:
    phase = obj.status.get("phase")
    return [str(phase)] if phase else [""]


def default_object_cache() -> ObjectCache:
    cache = ObjectCache()
    cache.index_field(POD_KIND, POD_PHASE_FIELD, pod_phase)
    return cache
