from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from tfclaim.config.errors import ConfigurationError
from tfclaim.domain.model import NamespacedName
from tfclaim.domain.reconcile import (
    ClaimReconciler,
    PersistError,
    PhaseError,
    PhaseErrorGroup,
    PhaseKind,
    ReconcileContext,
    TransientError,
)

from tests.helpers.claims import ScriptedPhase, make_claim, phase_table

if TYPE_CHECKING:
    from tfclaim.domain.model import ClaimResource

    from tests.helpers.claims import CountingClaimStore


def _set_phase(value: str):  # noqa: ANN202
    def _mutate(resource: ClaimResource) -> None:
        resource.status.phase = value

    return _mutate


def test_missing_claim_is_a_silent_success(
    store: CountingClaimStore, phases: dict[PhaseKind, ScriptedPhase], calls: list[PhaseKind]
) -> None:
    reconciler = ClaimReconciler(store=store, phases=phases)

    outcome = reconciler.reconcile(NamespacedName("default", "gone"))

    assert outcome.succeeded
    assert not outcome.requeue
    assert calls == []
    assert store.patch_calls == 0


def test_plan_action_runs_ready_then_plan_and_persists(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim("infra", action="Plan"))
    phases = phase_table(
        calls,
        ready=ScriptedPhase(PhaseKind.READY, calls, mutate=_set_phase("Ready")),
        plan=ScriptedPhase(
            PhaseKind.PLAN,
            calls,
            requeue_after=timedelta(seconds=10),
            mutate=_set_phase("Planning"),
        ),
    )

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert calls == [PhaseKind.READY, PhaseKind.PLAN]
    assert outcome.succeeded
    assert outcome.requeue_after == timedelta(seconds=10)
    assert store.patch_calls == 1
    stored = store.get(claim.key)
    assert stored.status.phase == "Planning"
    assert stored.metadata.resource_version == 2


def test_unchanged_claim_is_not_written(
    store: CountingClaimStore, phases: dict[PhaseKind, ScriptedPhase]
) -> None:
    claim = store.create(make_claim())

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert outcome.succeeded
    assert store.patch_calls == 0
    assert store.get(claim.key).metadata.resource_version == 1


def test_phase_failure_still_persists_mutations(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim(action="Apply"))
    phases = phase_table(
        calls,
        ready=ScriptedPhase(
            PhaseKind.READY, calls, error=RuntimeError("git unreachable"), mutate=_set_phase("Error")
        ),
        apply=ScriptedPhase(PhaseKind.APPLY, calls, requeue_after=timedelta(seconds=3)),
    )

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert calls == [PhaseKind.READY, PhaseKind.APPLY]
    assert isinstance(outcome.error, PhaseErrorGroup)
    assert not outcome.requeue
    assert store.get(claim.key).status.phase == "Error"


def test_commit_failure_overrides_error_but_keeps_delay(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim(action="Plan"))
    phases = phase_table(
        calls,
        plan=ScriptedPhase(
            PhaseKind.PLAN,
            calls,
            requeue_after=timedelta(seconds=5),
            mutate=_set_phase("Planning"),
        ),
    )
    cause = TransientError("database is locked")
    store.fail_patch = cause

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert isinstance(outcome.error, PersistError)
    assert outcome.error.__cause__ is cause
    assert outcome.requeue_after == timedelta(seconds=5)


def test_commit_failure_replaces_phase_errors(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim())
    phases = phase_table(
        calls,
        ready=ScriptedPhase(
            PhaseKind.READY, calls, error=RuntimeError("boom"), mutate=_set_phase("Error")
        ),
    )
    store.fail_patch = TransientError("database is locked")

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert isinstance(outcome.error, PersistError)


def test_fetch_failure_is_returned_without_running_phases(
    store: CountingClaimStore, phases: dict[PhaseKind, ScriptedPhase], calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim())
    failure = TransientError("connection reset")
    store.fail_get = failure

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert outcome.error is failure
    assert calls == []
    assert store.patch_calls == 0


def test_action_change_during_pass_does_not_change_selected_phases(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim(action="Plan"))

    def _switch_to_apply(resource: ClaimResource) -> None:
        resource.status.action = "Apply"

    phases = phase_table(
        calls, ready=ScriptedPhase(PhaseKind.READY, calls, mutate=_switch_to_apply)
    )

    ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert calls == [PhaseKind.READY, PhaseKind.PLAN]
    assert store.get(claim.key).status.action == "Apply"


def test_cancelled_context_still_persists(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim())
    ready = ScriptedPhase(PhaseKind.READY, calls, mutate=_set_phase("Ready"))
    phases = phase_table(calls, ready=ready)
    context = ReconcileContext(key=claim.key)
    context.cancel()

    ClaimReconciler(store=store, phases=phases).reconcile(claim.key, context)

    assert ready.contexts == [context]
    assert ready.contexts[0].is_cancelled
    assert store.get(claim.key).status.phase == "Ready"


class _InterruptedPhase:
    def run(self, context: ReconcileContext, resource: ClaimResource) -> None:
        _ = context
        resource.status.phase = "Interrupted"
        raise KeyboardInterrupt


def test_interrupt_is_propagated_after_commit(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim())
    phases = {**phase_table(calls), PhaseKind.READY: _InterruptedPhase()}

    with pytest.raises(KeyboardInterrupt):
        ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert store.patch_calls == 1
    assert store.get(claim.key).status.phase == "Interrupted"


def test_incomplete_phase_table_is_rejected(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    phases = phase_table(calls)
    del phases[PhaseKind.DESTROY]

    with pytest.raises(ConfigurationError, match="Destroy"):
        ClaimReconciler(store=store, phases=phases)


def test_concurrent_update_to_other_fields_survives_commit(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim())

    def _concurrent_label_then_status(resource: ClaimResource) -> None:
        store.patch(resource.key, {"metadata": {"labels": {"team": "platform"}}})
        resource.status.phase = "Ready"

    phases = phase_table(
        calls, ready=ScriptedPhase(PhaseKind.READY, calls, mutate=_concurrent_label_then_status)
    )

    ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    stored = store.get(claim.key)
    assert stored.metadata.labels == {"team": "platform"}
    assert stored.status.phase == "Ready"
    assert stored.metadata.resource_version == 3


def test_failed_plan_keeps_status_written_by_ready_and_plan(
    store: CountingClaimStore, calls: list[PhaseKind]
) -> None:
    claim = store.create(make_claim("infra", action="Plan"))
    failure = PhaseError(PhaseKind.PLAN, "plan pod exited with 1")

    def _ready(resource: ClaimResource) -> None:
        resource.status.phase = "Ready"
        resource.status.fields["ready"] = True

    def _plan(resource: ClaimResource) -> None:
        resource.status.reason = "plan pod failed"
        resource.status.fields["planPod"] = "infra-plan-1"

    phases = phase_table(
        calls,
        ready=ScriptedPhase(PhaseKind.READY, calls, mutate=_ready),
        plan=ScriptedPhase(PhaseKind.PLAN, calls, error=failure, mutate=_plan),
    )

    outcome = ClaimReconciler(store=store, phases=phases).reconcile(claim.key)

    assert not outcome.requeue
    assert isinstance(outcome.error, PhaseErrorGroup)
    assert list(outcome.error.exceptions) == [failure]
    stored = store.get(claim.key)
    assert stored.status.phase == "Ready"
    assert stored.status.reason == "plan pod failed"
    assert stored.status.fields == {"ready": True, "planPod": "infra-plan-1"}
    assert store.patch_calls == 1
