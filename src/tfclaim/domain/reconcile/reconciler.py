"""Persist-on-exit wrapper around one reconcile pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tfclaim.config.errors import ConfigurationError
from tfclaim.domain.reconcile.context import ReconcileContext
from tfclaim.domain.reconcile.errors import NotFoundError, PersistError, TfClaimError
from tfclaim.domain.reconcile.orchestrator import run_phases
from tfclaim.domain.reconcile.outcome import ReconcileOutcome
from tfclaim.domain.reconcile.phases import missing_phases
from tfclaim.domain.reconcile.selector import select_phases

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource, NamespacedName
    from tfclaim.domain.ports.store import ClaimStore, PatchHandle
    from tfclaim.domain.reconcile.phases import PhaseTable

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ClaimReconciler:
    """Drive one claim toward the state implied by its spec and status.

    Every pass that manages to load the claim ends with exactly one commit of
    the in-memory copy, whatever happened while the phases ran. A failed
    commit replaces the returned error but keeps the requeue delay.
    """

    store: ClaimStore
    phases: PhaseTable
    _phases: PhaseTable = field(init=False, repr=False)

    def __post_init__(self) -> None:
        missing = missing_phases(self.phases)
        if missing:
            names = ", ".join(missing)
            raise ConfigurationError(f"No phase operation registered for: {names}")
        self._phases = dict(self.phases)

    def reconcile(
        self, key: NamespacedName, context: ReconcileContext | None = None
    ) -> ReconcileOutcome:
        active = context or ReconcileContext(key=key)
        try:
            resource = self.store.get(key)
        except NotFoundError:
            active.log.info("Claim not found, ignoring since it must have been deleted")
            return ReconcileOutcome()
        except TfClaimError as exc:
            active.log.error("Failed to get claim: %s", exc)
            return ReconcileOutcome(error=exc)

        handle = self.store.begin_patch(resource)
        outcome = ReconcileOutcome()
        try:
            outcome = self._reconcile(active, resource)
        finally:
            outcome = self._persist(active, handle, resource, outcome)
        return outcome

    def _reconcile(self, context: ReconcileContext, resource: ClaimResource) -> ReconcileOutcome:
        kinds = select_phases(resource)
        context.log.debug("Selected phases: %s", ", ".join(kinds))
        return run_phases(context, resource, kinds, self._phases)

    def _persist(
        self,
        context: ReconcileContext,
        handle: PatchHandle,
        resource: ClaimResource,
        outcome: ReconcileOutcome,
    ) -> ReconcileOutcome:
        try:
            handle.commit(context, resource)
        except TfClaimError as exc:
            context.log.error("Failed to persist claim: %s", exc)
            error = PersistError(resource.key, str(exc))
            error.__cause__ = exc
            return ReconcileOutcome(requeue_after=outcome.requeue_after, error=error)
        return outcome
