"""Error taxonomy for reconcile passes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tfclaim.errors import TfClaimError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tfclaim.domain.model import NamespacedName
    from tfclaim.domain.reconcile.phases import PhaseKind


class NotFoundError(TfClaimError):
    """The claim vanished between trigger and fetch."""

    def __init__(self, key: NamespacedName) -> None:
        super().__init__(f"Claim {key} not found")
        self.key = key


class AlreadyExistsError(TfClaimError):
    def __init__(self, key: NamespacedName) -> None:
        super().__init__(f"Claim {key} already exists")
        self.key = key


class TransientError(TfClaimError):
    """Store failure surfaced to the caller for its own retry policy."""


class PhaseError(TfClaimError):
    """A named phase operation failed during a pass."""

    def __init__(self, kind: PhaseKind, message: str) -> None:
        super().__init__(f"{kind} phase failed: {message}")
        self.kind = kind


class PersistError(TfClaimError):
    """The final state commit of a pass failed."""

    def __init__(self, key: NamespacedName, message: str) -> None:
        super().__init__(f"Failed to persist claim {key}: {message}")
        self.key = key


class PhaseErrorGroup(ExceptionGroup[PhaseError]):
    """All phase errors collected during one pass."""

    def derive(self, excs: Sequence[PhaseError]) -> PhaseErrorGroup:
        return PhaseErrorGroup(self.message, excs)
