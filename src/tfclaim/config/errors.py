"""Configuration error definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tfclaim.errors import TfClaimError

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(TfClaimError):
    """Invalid settings, plugin registrations or phase tables."""


class MissingConfigurationError(ConfigurationError):
    """Required environment variables are absent or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
