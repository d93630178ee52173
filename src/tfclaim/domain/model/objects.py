"""Dependent infrastructure objects owned by claims."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class OwnerReference:
    kind: str
    name: str
    uid: str | None = None
    controller: bool = False


@dataclass(slots=True, kw_only=True)
class DependentObject:
    """Runner deployments, pods and config maps created on behalf of a claim."""

    kind: str
    namespace: str
    name: str
    owner_references: tuple[OwnerReference, ...] = ()
    labels: dict[str, str] = field(default_factory=dict[str, str])
    status: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def object_key(self) -> tuple[str, str, str]:
        return (self.kind, self.namespace, self.name)

    def controller_owner(self) -> OwnerReference | None:
        """Return the owner reference flagged as managing controller, if any."""

        for reference in self.owner_references:
            if reference.controller:
                return reference
        return None
