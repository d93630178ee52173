"""Controller loop configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_float, env_int, env_list
from .errors import ConfigurationError

DEFAULT_WORKERS: Final[int] = 2
DEFAULT_RESYNC_SECONDS: Final[float] = 300.0
DEFAULT_BACKOFF_BASE_SECONDS: Final[float] = 0.005
DEFAULT_BACKOFF_MAX_SECONDS: Final[float] = 1000.0
DEFAULT_OWNED_KINDS: Final[tuple[str, ...]] = ("Deployment",)


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    workers: int = DEFAULT_WORKERS
    resync_seconds: float = DEFAULT_RESYNC_SECONDS
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS
    backoff_max_seconds: float = DEFAULT_BACKOFF_MAX_SECONDS
    owned_kinds: tuple[str, ...] = DEFAULT_OWNED_KINDS

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ConfigurationError("Controller needs at least one worker")
        if self.resync_seconds < 0:
            raise ConfigurationError("Resync interval must be non-negative")
        if self.backoff_base_seconds <= 0:
            raise ConfigurationError("Backoff base delay must be positive")
        if self.backoff_max_seconds < self.backoff_base_seconds:
            raise ConfigurationError("Backoff max delay must not be below the base delay")


def get_controller_config() -> ControllerConfig:
    return ControllerConfig(
        workers=env_int("TFCLAIM_WORKERS", DEFAULT_WORKERS),
        resync_seconds=env_float("TFCLAIM_RESYNC_SECONDS", DEFAULT_RESYNC_SECONDS),
        backoff_base_seconds=env_float(
            "TFCLAIM_BACKOFF_BASE_SECONDS", DEFAULT_BACKOFF_BASE_SECONDS
        ),
        backoff_max_seconds=env_float("TFCLAIM_BACKOFF_MAX_SECONDS", DEFAULT_BACKOFF_MAX_SECONDS),
        owned_kinds=env_list("TFCLAIM_OWNED_KINDS", DEFAULT_OWNED_KINDS),
    )
