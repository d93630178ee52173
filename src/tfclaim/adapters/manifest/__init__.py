"""Claim manifest adapter package."""

from __future__ import annotations

from .schema import ClaimManifest, ManifestMetadata, ManifestSpec, ManifestStatus
from .translator import claim_to_document, parse_claim_document, translate_manifest

__all__ = [
    "ClaimManifest",
    "ManifestMetadata",
    "ManifestSpec",
    "ManifestStatus",
    "claim_to_document",
    "parse_claim_document",
    "translate_manifest",
]
