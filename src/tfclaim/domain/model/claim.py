"""Claim resource aggregate."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tfclaim.domain.model.enums import CLAIM_KIND, ClaimAction

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, order=True)
class NamespacedName:
    """Immutable claim key."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> NamespacedName:
        """Parse ``namespace/name``; a bare name lands in the ``default`` namespace."""

        text = value.strip()
        if not text:
            raise ValueError("Empty claim key")
        namespace, sep, name = text.partition("/")
        if not sep:
            return cls(namespace="default", name=namespace)
        if not namespace or not name or "/" in name:
            raise ValueError(f"Invalid claim key: {value!r}")
        return cls(namespace=namespace, name=name)


@dataclass(slots=True, kw_only=True)
class ClaimMetadata:
    namespace: str
    name: str
    uid: str | None = None
    resource_version: int = 0
    generation: int = 1
    labels: dict[str, str] = field(default_factory=dict[str, str])
    annotations: dict[str, str] = field(default_factory=dict[str, str])
    creation_timestamp: datetime | None = None


@dataclass(slots=True, kw_only=True)
class ClaimSpec:
    """Desired state. ``fields`` carries everything besides ``destroy``."""

    destroy: bool = False
    fields: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(slots=True, kw_only=True)
class ClaimStatus:
    """Observed state written by phase operations.

    ``action`` is kept as the raw string so unknown commands survive a
    round-trip through the store; compare it against ``ClaimAction`` members.
    """

    action: str = ClaimAction.NONE
    phase: str | None = None
    reason: str | None = None
    fields: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(slots=True, kw_only=True)
class ClaimResource:
    """Declarative request for a provisioning action plus its progress."""

    metadata: ClaimMetadata
    spec: ClaimSpec = field(default_factory=ClaimSpec)
    status: ClaimStatus = field(default_factory=ClaimStatus)
    kind: str = CLAIM_KIND

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(namespace=self.metadata.namespace, name=self.metadata.name)

    @property
    def action(self) -> str:
        return self.status.action

    def deep_copy(self) -> ClaimResource:
        return copy.deepcopy(self)
