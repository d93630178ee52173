"""Shared logging helpers for tfclaim."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(threadName)s %(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def get_log_level(default: int = logging.INFO) -> int:
    """Resolve ``TFCLAIM_LOG_LEVEL`` (a level name or number)."""

    value = os.getenv("TFCLAIM_LOG_LEVEL")
    if value is None or not value.strip():
        return default
    text = value.strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelNamesMapping().get(text.upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level: {value!r}")
    return level
