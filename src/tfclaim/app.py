"""Application orchestration entry points."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from tfclaim.adapters.manifest import claim_to_document, parse_claim_document
from tfclaim.adapters.plugins import load_phase_table
from tfclaim.adapters.sqlalchemy import SqlAlchemyClaimStore, is_started, startup
from tfclaim.config import get_controller_config
from tfclaim.domain.model import ClaimAction
from tfclaim.domain.reconcile import ClaimReconciler, ReconcileContext
from tfclaim.runtime import Controller, default_object_cache

if TYPE_CHECKING:
    import threading
    from pathlib import Path

    from tfclaim.config import ControllerConfig
    from tfclaim.domain.model import ClaimResource, NamespacedName
    from tfclaim.domain.ports.store import ClaimStore
    from tfclaim.domain.reconcile import PhaseTable, ReconcileOutcome
    from tfclaim.runtime import ObjectCache

log = getLogger(__name__)


def build_store(*, database_uri: str | None = None) -> SqlAlchemyClaimStore:
    """Return the SQL-backed claim store, initialising the engine on first use."""

    if not is_started():
        startup(database_uri=database_uri)
    return SqlAlchemyClaimStore()


def build_reconciler(
    store: ClaimStore,
    *,
    phases: PhaseTable | None = None,
) -> ClaimReconciler:
    return ClaimReconciler(store=store, phases=phases or load_phase_table())


def apply_manifest(path: Path, *, store: ClaimStore | None = None) -> ClaimResource:
    """Create the claim described by the JSON manifest at ``path``."""

    with path.open(encoding="utf-8") as handle:
        document: Any = json.load(handle)
    if not isinstance(document, dict):
        raise ValueError(f"Manifest {path} must contain a JSON object")
    resource = parse_claim_document(document)
    created = (store or build_store()).create(resource)
    log.info("Created claim %s (uid=%s)", created.key, created.metadata.uid)
    return created


def get_claim_document(key: NamespacedName, *, store: ClaimStore | None = None) -> dict[str, Any]:
    return claim_to_document((store or build_store()).get(key))


def set_claim_action(
    key: NamespacedName,
    action: str,
    *,
    store: ClaimStore | None = None,
) -> ClaimResource:
    """Write an operator command into ``status.action``."""

    try:
        command = ClaimAction(action)
    except ValueError as exc:
        choices = ", ".join(repr(member.value) for member in ClaimAction)
        raise ValueError(f"Unknown action {action!r}; expected one of {choices}") from exc
    updated = (store or build_store()).patch(key, {"status": {"action": command.value}})
    log.info("Set action of %s to %r", key, command.value)
    return updated


def delete_claim(key: NamespacedName, *, store: ClaimStore | None = None) -> None:
    (store or build_store()).delete(key)


def reconcile_claim(
    key: NamespacedName,
    *,
    store: ClaimStore | None = None,
    phases: PhaseTable | None = None,
) -> ReconcileOutcome:
    """Run a single reconcile pass for ``key``."""

    reconciler = build_reconciler(store or build_store(), phases=phases)
    outcome = reconciler.reconcile(key, ReconcileContext(key=key))
    log.info(
        "Reconciled %s: requeue_after=%s, error=%s",
        key,
        outcome.requeue_after,
        outcome.error,
    )
    return outcome


def run_controller(
    stop_event: threading.Event,
    *,
    store: ClaimStore | None = None,
    phases: PhaseTable | None = None,
    config: ControllerConfig | None = None,
    object_cache: ObjectCache | None = None,
) -> Controller:
    """Run the controller loop until ``stop_event`` is set.

    Phases reach ``object_cache`` through ``ReconcileContext.objects``. Owned
    objects they write there are mapped back to their claim and queued.
    """

    effective_store = store or build_store()
    effective_config = config or get_controller_config()
    cache = object_cache if object_cache is not None else default_object_cache()
    controller = Controller(
        build_reconciler(effective_store, phases=phases),
        effective_store,
        config=effective_config,
        object_cache=cache,
    )
    cache.start()
    subscribe = getattr(effective_store, "subscribe", None)
    if callable(subscribe):
        subscribe(controller.enqueue)
    controller.run(stop_event)
    return controller
