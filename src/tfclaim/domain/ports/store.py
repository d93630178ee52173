"""Persistence contract for claim resources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource, NamespacedName
    from tfclaim.domain.reconcile.context import ReconcileContext


@runtime_checkable
class PatchHandle(Protocol):
    """Diff base captured at pass start."""

    def commit(self, context: ReconcileContext, resource: ClaimResource) -> None:
        """Merge the changes made to ``resource`` into the stored claim.

        Does nothing when ``resource`` still matches the diff base. Raises
        ``TransientError`` or ``NotFoundError`` on failure.
        """
        ...


@runtime_checkable
class ClaimStore(Protocol):
    def get(self, key: NamespacedName) -> ClaimResource: ...

    def begin_patch(self, resource: ClaimResource) -> PatchHandle: ...

    def patch(self, key: NamespacedName, patch: dict[str, Any]) -> ClaimResource: ...

    def create(self, resource: ClaimResource) -> ClaimResource: ...

    def delete(self, key: NamespacedName) -> None: ...

    def list_keys(self) -> list[NamespacedName]: ...
