"""Read/write access to the dependent objects behind a claim."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tfclaim.domain.model import DependentObject


@runtime_checkable
class ObjectIndex(Protocol):
    """What phase operations see of the dependent-object cache.

    ``matching_fields`` only accepts fields registered as indexes for ``kind``.
    Writes are published as watch events, so an owned object changed here
    triggers a pass for its controlling claim.
    """

    def list(
        self,
        kind: str,
        *,
        namespace: str | None = None,
        matching_fields: Mapping[str, str] | None = None,
    ) -> Sequence[DependentObject]: ...

    def get(self, kind: str, namespace: str, name: str) -> DependentObject | None: ...

    def upsert(self, obj: DependentObject) -> None: ...

    def remove(self, kind: str, namespace: str, name: str) -> None: ...
