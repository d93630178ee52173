"""Load phase operations registered as package entry points."""

from __future__ import annotations

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import TYPE_CHECKING

from tfclaim.config.errors import ConfigurationError
from tfclaim.domain.reconcile.phases import PhaseKind, missing_phases

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tfclaim.domain.reconcile.phases import PhaseOperation, PhaseTable

log = logging.getLogger(__name__)

PHASE_ENTRY_POINT_GROUP = "tfclaim.phases"


def load_phase_table(
    group: str = PHASE_ENTRY_POINT_GROUP,
    *,
    discovered: Iterable[EntryPoint] | None = None,
) -> PhaseTable:
    """Build the phase table from entry points named after ``PhaseKind`` values.

    Each entry point must resolve to a zero-argument factory returning a
    ``PhaseOperation``. Unknown names, duplicates and missing kinds are
    configuration errors.
    """

    table: dict[PhaseKind, PhaseOperation] = {}
    for entry_point in discovered if discovered is not None else entry_points(group=group):
        try:
            kind = PhaseKind(entry_point.name)
        except ValueError as exc:
            raise ConfigurationError(
                f"Entry point {entry_point.name!r} in {group} is not a phase kind"
            ) from exc
        if kind in table:
            raise ConfigurationError(f"Phase {kind} registered more than once in {group}")
        factory = entry_point.load()
        table[kind] = factory()
        log.debug("Loaded %s phase from %s", kind, entry_point.value)

    missing = missing_phases(table)
    if missing:
        names = ", ".join(missing)
        raise ConfigurationError(f"No phase operation registered in {group} for: {names}")
    return table
