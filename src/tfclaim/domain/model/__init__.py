"""Claim domain model."""

from __future__ import annotations

from .claim import ClaimMetadata, ClaimResource, ClaimSpec, ClaimStatus, NamespacedName
from .enums import CLAIM_API_VERSION, CLAIM_KIND, ClaimAction, WatchEventType
from .objects import DependentObject, OwnerReference

__all__ = [
    "CLAIM_API_VERSION",
    "CLAIM_KIND",
    "ClaimAction",
    "ClaimMetadata",
    "ClaimResource",
    "ClaimSpec",
    "ClaimStatus",
    "DependentObject",
    "NamespacedName",
    "OwnerReference",
    "WatchEventType",
]
