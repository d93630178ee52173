"""Per-pass context threaded through every phase call."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from tfclaim.domain.model import NamespacedName
    from tfclaim.domain.ports.objects import ObjectIndex

_pass_log = logging.getLogger("tfclaim.reconcile")


class ClaimLoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        return f"[{extra.get('claim')}] {msg}", kwargs


@dataclass(slots=True)
class ReconcileContext:
    """Cancellation signal, logger and object lookups scoped to one reconcile pass.

    ``objects`` is the dependent-object cache when the pass runs under a
    controller, and ``None`` for one-off passes without one.
    """

    key: NamespacedName
    cancelled: threading.Event = field(default_factory=threading.Event)
    objects: ObjectIndex | None = None
    log: logging.LoggerAdapter[logging.Logger] = field(init=False)

    def __post_init__(self) -> None:
        self.log = ClaimLoggerAdapter(_pass_log, {"claim": str(self.key)})

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def cancel(self) -> None:
        self.cancelled.set()
