"""Change notifications delivered to the subscription layer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from tfclaim.domain.model import WatchEventType
from tfclaim.domain.model.objects import OwnerReference


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A change to a claim or to an object a claim may own."""

    type: WatchEventType
    kind: str
    namespace: str
    name: str
    owner_references: tuple[OwnerReference, ...] = ()


type WatchHandler = Callable[[WatchEvent], None]
