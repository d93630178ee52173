"""Execute the selected phases of one pass and fold their results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tfclaim.domain.reconcile.errors import PhaseError
from tfclaim.domain.reconcile.outcome import ReconcileOutcome, aggregate_errors, lowest_non_zero
from tfclaim.domain.reconcile.phases import NO_DELAY, PhaseResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tfclaim.domain.model import ClaimResource
    from tfclaim.domain.reconcile.context import ReconcileContext
    from tfclaim.domain.reconcile.phases import PhaseKind, PhaseTable


def run_phases(
    context: ReconcileContext,
    resource: ClaimResource,
    kinds: Sequence[PhaseKind],
    table: PhaseTable,
) -> ReconcileOutcome:
    """Run every phase in ``kinds`` against ``resource`` in order.

    Phases are never short-circuited: a failure is recorded and the remaining
    phases still run. Requeue hints are only folded in while no phase has
    failed yet, so once an error is recorded the delay is frozen at whatever
    the earlier phases asked for.
    """

    delay = NO_DELAY
    errors: list[PhaseError] = []
    for kind in kinds:
        result = _invoke(context, resource, kind, table)
        if result.error is not None:
            context.log.warning("%s phase failed: %s", kind, result.error)
            errors.append(_as_phase_error(kind, result.error))
        if errors:
            continue
        delay = lowest_non_zero(delay, result.requeue_after)
        context.log.debug("%s phase done (requeue_after=%s)", kind, result.requeue_after)

    return ReconcileOutcome(requeue_after=delay, error=aggregate_errors(errors))


def _invoke(
    context: ReconcileContext,
    resource: ClaimResource,
    kind: PhaseKind,
    table: PhaseTable,
) -> PhaseResult:
    operation = table[kind]
    try:
        return operation.run(context, resource)
    except Exception as exc:
        context.log.exception("%s phase raised instead of reporting an error", kind)
        return PhaseResult(error=exc)


def _as_phase_error(kind: PhaseKind, error: BaseException) -> PhaseError:
    if isinstance(error, PhaseError):
        return error
    wrapped = PhaseError(kind, str(error) or type(error).__name__)
    wrapped.__cause__ = error
    return wrapped
