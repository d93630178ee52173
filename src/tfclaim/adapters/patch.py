"""Merge-patch handle shared by the claim store adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tfclaim.adapters.manifest import claim_to_document
from tfclaim.common.merge_patch import apply_merge_patch, create_merge_patch

if TYPE_CHECKING:
    from collections.abc import Callable

    from tfclaim.domain.model import ClaimResource, NamespacedName
    from tfclaim.domain.reconcile.context import ReconcileContext

log = logging.getLogger(__name__)

_IMMUTABLE_METADATA = ("namespace", "name", "uid", "resourceVersion", "creationTimestamp")


def strip_immutable(patch: dict[str, Any]) -> dict[str, Any]:
    """Drop identity and bookkeeping keys a merge patch must never touch."""

    cleaned = {key: value for key, value in patch.items() if key not in {"kind", "apiVersion"}}
    metadata = cleaned.get("metadata")
    if isinstance(metadata, dict):
        trimmed = {
            key: value
            for key, value in metadata.items()  # pyright: ignore[reportUnknownVariableType]
            if key not in _IMMUTABLE_METADATA
        }
        if trimmed:
            cleaned["metadata"] = trimmed
        else:
            del cleaned["metadata"]
    return cleaned


def merge_into_stored(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Apply ``patch`` onto the stored document and bump its resource version."""

    merged = apply_merge_patch(current, strip_immutable(patch))
    metadata = dict(current.get("metadata", {}))
    merged_metadata = merged.setdefault("metadata", {})
    for key in _IMMUTABLE_METADATA:
        if key in metadata:
            merged_metadata[key] = metadata[key]
    merged_metadata["resourceVersion"] = int(metadata.get("resourceVersion", 0)) + 1
    return merged


class MergePatchHandle:
    """Diff base captured when a pass starts.

    ``commit`` sends only the fields the pass changed, so concurrent writes to
    other fields of the stored claim survive.
    """

    def __init__(
        self,
        key: NamespacedName,
        base: dict[str, Any],
        apply: Callable[[NamespacedName, dict[str, Any]], object],
    ) -> None:
        self.key = key
        self._base = base
        self._apply = apply

    def commit(self, context: ReconcileContext, resource: ClaimResource) -> None:
        modified = claim_to_document(resource)
        patch = strip_immutable(create_merge_patch(self._base, modified))
        if not patch:
            context.log.debug("Nothing to persist")
            return
        context.log.debug("Persisting merge patch with keys %s", sorted(patch))
        self._apply(self.key, patch)
        self._base = modified
