"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum

CLAIM_KIND = "TFApplyClaim"
CLAIM_API_VERSION = "claim.tmax.io/v1alpha1"


class ClaimAction(StrEnum):
    """Commands an operator writes into ``status.action``."""

    NONE = ""
    APPROVE = "Approve"
    REJECT = "Reject"
    PLAN = "Plan"
    APPLY = "Apply"


class WatchEventType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
