"""Level-triggered reconcile core for claim resources.

One pass loads a claim, selects its phases from ``status.action`` and
``spec.destroy``, runs them in order without short-circuiting, folds their
requeue hints and errors into a ``ReconcileOutcome`` and commits the mutated
claim back to the store exactly once.
"""

from __future__ import annotations

from .context import ReconcileContext
from .errors import (
    AlreadyExistsError,
    NotFoundError,
    PersistError,
    PhaseError,
    PhaseErrorGroup,
    TfClaimError,
    TransientError,
)
from .orchestrator import run_phases
from .outcome import ReconcileOutcome, aggregate_errors, lowest_non_zero
from .phases import NO_DELAY, PhaseKind, PhaseOperation, PhaseResult, PhaseTable
from .reconciler import ClaimReconciler
from .selector import select_phases

__all__ = [
    "NO_DELAY",
    "AlreadyExistsError",
    "ClaimReconciler",
    "NotFoundError",
    "PersistError",
    "PhaseError",
    "PhaseErrorGroup",
    "PhaseKind",
    "PhaseOperation",
    "PhaseResult",
    "PhaseTable",
    "ReconcileContext",
    "ReconcileOutcome",
    "TfClaimError",
    "TransientError",
    "aggregate_errors",
    "lowest_non_zero",
    "run_phases",
    "select_phases",
]
