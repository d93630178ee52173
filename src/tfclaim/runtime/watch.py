"""Map change notifications to the claim keys that must be reconciled."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tfclaim.domain.model import CLAIM_KIND, NamespacedName

if TYPE_CHECKING:
    from tfclaim.domain.ports.watch import WatchEvent


@dataclass(frozen=True, slots=True)
class Subscription:
    """Which kinds trigger a pass: the claim itself and the kinds it owns."""

    for_kind: str = CLAIM_KIND
    owns: frozenset[str] = field(default_factory=lambda: frozenset({"Deployment"}))

    def watches(self, kind: str) -> bool:
        return kind == self.for_kind or kind in self.owns

    def map_event(self, event: WatchEvent) -> list[NamespacedName]:
        """Return the claim keys affected by ``event``.

        Owned objects map back through controller owner references of the
        claim kind; owners live in the object's namespace.
        """

        if event.kind == self.for_kind:
            return [NamespacedName(namespace=event.namespace, name=event.name)]
        if event.kind not in self.owns:
            return []
        return [
            NamespacedName(namespace=event.namespace, name=reference.name)
            for reference in event.owner_references
            if reference.controller and reference.kind == self.for_kind
        ]
