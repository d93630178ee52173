"""In-memory claim store with change notifications."""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from tfclaim.adapters.manifest import claim_to_document, parse_claim_document
from tfclaim.adapters.patch import MergePatchHandle, merge_into_stored
from tfclaim.domain.model import CLAIM_KIND, WatchEventType
from tfclaim.domain.ports.watch import WatchEvent
from tfclaim.domain.reconcile.errors import AlreadyExistsError, NotFoundError, TransientError

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource, NamespacedName
    from tfclaim.domain.ports.watch import WatchHandler

log = logging.getLogger(__name__)


class InMemoryClaimStore:
    """Thread-safe claim store keeping JSON documents in a dict."""

    def __init__(self) -> None:
        self._documents: dict[NamespacedName, dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._handlers: list[WatchHandler] = []

    def subscribe(self, handler: WatchHandler) -> None:
        self._handlers.append(handler)

    def get(self, key: NamespacedName) -> ClaimResource:
        with self._lock:
            document = self._documents.get(key)
            if document is None:
                raise NotFoundError(key)
            snapshot = copy.deepcopy(document)
        try:
            return parse_claim_document(snapshot)
        except ValidationError as exc:
            raise TransientError(f"Stored claim {key} is not a valid document: {exc}") from exc

    def document(self, key: NamespacedName) -> dict[str, Any]:
        """Return a copy of the raw stored document."""

        with self._lock:
            document = self._documents.get(key)
            if document is None:
                raise NotFoundError(key)
            return copy.deepcopy(document)

    def begin_patch(self, resource: ClaimResource) -> MergePatchHandle:
        return MergePatchHandle(resource.key, claim_to_document(resource), self.patch)

    def create(self, resource: ClaimResource) -> ClaimResource:
        created = resource.deep_copy()
        created.metadata.uid = created.metadata.uid or str(uuid.uuid4())
        created.metadata.resource_version = 1
        created.metadata.creation_timestamp = (
            created.metadata.creation_timestamp or datetime.now(tz=UTC)
        )
        with self._lock:
            if created.key in self._documents:
                raise AlreadyExistsError(created.key)
            self._documents[created.key] = claim_to_document(created)
        self._notify(WatchEventType.ADDED, created.key)
        return created

    def patch(self, key: NamespacedName, patch: dict[str, Any]) -> ClaimResource:
        with self._lock:
            current = self._documents.get(key)
            if current is None:
                raise NotFoundError(key)
            merged = merge_into_stored(current, patch)
            try:
                resource = parse_claim_document(merged)
            except ValidationError as exc:
                raise TransientError(f"Patch produced an invalid claim {key}: {exc}") from exc
            self._documents[key] = merged
        self._notify(WatchEventType.MODIFIED, key)
        return resource

    def delete(self, key: NamespacedName) -> None:
        with self._lock:
            if self._documents.pop(key, None) is None:
                raise NotFoundError(key)
        self._notify(WatchEventType.DELETED, key)

    def list_keys(self) -> list[NamespacedName]:
        with self._lock:
            return sorted(self._documents)

    def _notify(self, event_type: WatchEventType, key: NamespacedName) -> None:
        event = WatchEvent(
            type=event_type,
            kind=CLAIM_KIND,
            namespace=key.namespace,
            name=key.name,
        )
        for handler in tuple(self._handlers):
            try:
                handler(event)
            except Exception:
                log.exception("Watch handler failed for %s %s", event_type, key)
