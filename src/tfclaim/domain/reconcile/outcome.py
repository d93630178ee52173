"""Outcome of a reconcile pass and the helpers that fold phase results into it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tfclaim.domain.reconcile.errors import PhaseErrorGroup
from tfclaim.domain.reconcile.phases import NO_DELAY

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import timedelta

    from tfclaim.domain.reconcile.errors import PhaseError


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """What the scheduler needs to decide whether and when to revisit a claim."""

    requeue_after: timedelta = NO_DELAY
    error: BaseException | None = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after > NO_DELAY

    @property
    def succeeded(self) -> bool:
        return self.error is None


def lowest_non_zero(current: timedelta, candidate: timedelta) -> timedelta:
    """Merge two requeue delays, treating zero as "no preference"."""

    if current <= NO_DELAY:
        return candidate if candidate > NO_DELAY else NO_DELAY
    if candidate <= NO_DELAY:
        return current
    return min(current, candidate)


def aggregate_errors(errors: Sequence[PhaseError]) -> PhaseErrorGroup | None:
    if not errors:
        return None
    noun = "phase" if len(errors) == 1 else "phases"
    return PhaseErrorGroup(f"{len(errors)} {noun} failed", list(errors))
