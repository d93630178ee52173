"""Pydantic models describing claim documents."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tfclaim.domain.model import CLAIM_API_VERSION, CLAIM_KIND


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ManifestMetadata(ManifestBaseModel):
    namespace: str = "default"
    name: str = Field(min_length=1)
    uid: str | None = None
    resource_version: int = Field(default=0, alias="resourceVersion", ge=0)
    generation: int = Field(default=1, ge=0)
    labels: dict[str, str] = Field(default_factory=dict[str, str])
    annotations: dict[str, str] = Field(default_factory=dict[str, str])
    creation_timestamp: datetime | None = Field(default=None, alias="creationTimestamp")

    @field_validator("namespace", mode="before")
    @classmethod
    def _default_namespace(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "default"
        return value


class ManifestSpec(ManifestBaseModel):
    """Desired state; anything besides ``destroy`` is kept as an extra field."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    destroy: bool = False


class ManifestStatus(ManifestBaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    action: str = ""
    phase: str | None = None
    reason: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _blank_action(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value


class ClaimManifest(ManifestBaseModel):
    api_version: str = Field(default=CLAIM_API_VERSION, alias="apiVersion")
    kind: str = CLAIM_KIND
    metadata: ManifestMetadata
    spec: ManifestSpec = Field(default_factory=ManifestSpec)
    status: ManifestStatus = Field(default_factory=ManifestStatus)

    @field_validator("kind")
    @classmethod
    def _check_kind(cls, value: str) -> str:
        if value != CLAIM_KIND:
            raise ValueError(f"Expected kind {CLAIM_KIND}, got {value}")
        return value

    def extras(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return the free-form spec and status fields."""

        return dict(self.spec.model_extra or {}), dict(self.status.model_extra or {})
