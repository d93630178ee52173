"""Translate claim documents into domain resources and back."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tfclaim.domain.model import ClaimMetadata, ClaimResource, ClaimSpec, ClaimStatus

from .schema import ClaimManifest, ManifestMetadata, ManifestSpec, ManifestStatus

if TYPE_CHECKING:
    from collections.abc import Mapping


def parse_claim_document(document: Mapping[str, Any]) -> ClaimResource:
    """Validate ``document`` and build the domain resource from it."""

    return translate_manifest(ClaimManifest.model_validate(document))


def translate_manifest(manifest: ClaimManifest) -> ClaimResource:
    spec_fields, status_fields = manifest.extras()
    metadata = manifest.metadata
    return ClaimResource(
        kind=manifest.kind,
        metadata=ClaimMetadata(
            namespace=metadata.namespace,
            name=metadata.name,
            uid=metadata.uid,
            resource_version=metadata.resource_version,
            generation=metadata.generation,
            labels=dict(metadata.labels),
            annotations=dict(metadata.annotations),
            creation_timestamp=metadata.creation_timestamp,
        ),
        spec=ClaimSpec(destroy=manifest.spec.destroy, fields=spec_fields),
        status=ClaimStatus(
            action=manifest.status.action,
            phase=manifest.status.phase,
            reason=manifest.status.reason,
            fields=status_fields,
        ),
    )


def claim_to_document(resource: ClaimResource) -> dict[str, Any]:
    """Serialise ``resource`` into its JSON-compatible document.

    ``None`` values are dropped so the document stays stable under merge
    patches, where ``null`` means "remove".
    """

    spec_fields = {key: value for key, value in resource.spec.fields.items() if key != "destroy"}
    status_fields = {
        key: value
        for key, value in resource.status.fields.items()
        if key not in {"action", "phase", "reason"}
    }
    manifest = ClaimManifest(
        kind=resource.kind,
        metadata=ManifestMetadata(
            namespace=resource.metadata.namespace,
            name=resource.metadata.name,
            uid=resource.metadata.uid,
            resource_version=resource.metadata.resource_version,
            generation=resource.metadata.generation,
            labels=dict(resource.metadata.labels),
            annotations=dict(resource.metadata.annotations),
            creation_timestamp=resource.metadata.creation_timestamp,
        ),
        spec=ManifestSpec(destroy=resource.spec.destroy, **spec_fields),
        status=ManifestStatus(
            action=resource.status.action,
            phase=resource.status.phase,
            reason=resource.status.reason,
            **status_fields,
        ),
    )
    return manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
