"""Pure mapping from a claim snapshot to the phases of one pass."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tfclaim.domain.model import ClaimAction
from tfclaim.domain.reconcile.phases import PhaseKind

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource

_ACTION_PHASES: tuple[tuple[frozenset[str], PhaseKind], ...] = (
    (frozenset({ClaimAction.APPROVE, ClaimAction.REJECT}), PhaseKind.APPROVE),
    (frozenset({ClaimAction.PLAN}), PhaseKind.PLAN),
    (frozenset({ClaimAction.APPLY}), PhaseKind.APPLY),
)


def select_phases(resource: ClaimResource) -> tuple[PhaseKind, ...]:
    """Return the ordered phases to run for ``resource``.

    ``READY`` always runs first. At most one more phase follows, chosen by the
    first match of: approve/reject action, plan action, apply action, then
    ``spec.destroy``.
    """

    action = resource.status.action
    for actions, kind in _ACTION_PHASES:
        if action in actions:
            return (PhaseKind.READY, kind)
    if resource.spec.destroy is True:
        return (PhaseKind.READY, PhaseKind.DESTROY)
    return (PhaseKind.READY,)
