"""Phase operation contract and the closed set of phase kinds."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource
    from tfclaim.domain.reconcile.context import ReconcileContext

NO_DELAY = timedelta(0)


class PhaseKind(StrEnum):
    READY = "Ready"
    APPROVE = "Approve"
    PLAN = "Plan"
    APPLY = "Apply"
    DESTROY = "Destroy"


@dataclass(frozen=True, slots=True)
class PhaseResult:
    """Retry hint and error reported by a single phase run.

    A zero ``requeue_after`` means the phase has no preference about when the
    claim is visited again.
    """

    requeue_after: timedelta = NO_DELAY
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class PhaseOperation(Protocol):
    """Contract implemented by each phase.

    Implementations mutate ``resource`` in place and may create or update
    dependent objects. They must tolerate terminal resources, must not block
    indefinitely, and report failures through ``PhaseResult.error``.
    """

    def run(self, context: ReconcileContext, resource: ClaimResource) -> PhaseResult: ...


type PhaseTable = Mapping[PhaseKind, PhaseOperation]


def missing_phases(table: PhaseTable) -> tuple[PhaseKind, ...]:
    return tuple(kind for kind in PhaseKind if kind not in table)
