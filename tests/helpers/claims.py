"""Reusable fakes and helpers for claim reconcile tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tfclaim.adapters.memory import InMemoryClaimStore
from tfclaim.domain.model import ClaimMetadata, ClaimResource, ClaimSpec, ClaimStatus
from tfclaim.domain.reconcile import NO_DELAY, PhaseKind, PhaseResult

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from tfclaim.domain.model import NamespacedName
    from tfclaim.domain.reconcile import ReconcileContext


def make_claim(
    name: str = "example",
    *,
    namespace: str = "default",
    action: str = "",
    destroy: bool = False,
    spec_fields: dict[str, Any] | None = None,
) -> ClaimResource:
    """Create a claim with minimal metadata."""

    return ClaimResource(
        metadata=ClaimMetadata(namespace=namespace, name=name),
        spec=ClaimSpec(
            destroy=destroy,
            fields=spec_fields or {"url": "https://git.example.com/infra.git", "branch": "main"},
        ),
        status=ClaimStatus(action=action),
    )


@dataclass(slots=True)
class ScriptedPhase:
    """Phase that records its invocation and returns a canned result."""

    kind: PhaseKind
    calls: list[PhaseKind]
    requeue_after: timedelta = NO_DELAY
    error: BaseException | None = None
    mutate: Callable[[ClaimResource], None] | None = None
    contexts: list[ReconcileContext] = field(default_factory=list)

    def run(self, context: ReconcileContext, resource: ClaimResource) -> PhaseResult:
        self.calls.append(self.kind)
        self.contexts.append(context)
        if self.mutate is not None:
            self.mutate(resource)
        return PhaseResult(requeue_after=self.requeue_after, error=self.error)


def phase_table(
    calls: list[PhaseKind],
    **overrides: ScriptedPhase,
) -> dict[PhaseKind, ScriptedPhase]:
    """Build a full phase table; ``overrides`` are keyed by lower-case kind name."""

    table = {kind: ScriptedPhase(kind=kind, calls=calls) for kind in PhaseKind}
    for name, phase in overrides.items():
        table[PhaseKind[name.upper()]] = phase
    return table


class NoopPhase:
    """Zero-argument phase factory used by entry-point tests."""

    def run(self, context: ReconcileContext, resource: ClaimResource) -> PhaseResult:
        _ = (context, resource)
        return PhaseResult()


class CountingClaimStore(InMemoryClaimStore):
    """In-memory store that counts writes and can inject failures."""

    def __init__(self) -> None:
        super().__init__()
        self.patch_calls = 0
        self.fail_get: BaseException | None = None
        self.fail_patch: BaseException | None = None

    def get(self, key: NamespacedName) -> ClaimResource:
        if self.fail_get is not None:
            raise self.fail_get
        return super().get(key)

    def patch(self, key: NamespacedName, patch: dict[str, Any]) -> ClaimResource:
        self.patch_calls += 1
        if self.fail_patch is not None:
            raise self.fail_patch
        return super().patch(key, patch)
