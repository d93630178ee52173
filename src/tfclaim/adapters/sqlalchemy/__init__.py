"""SQLAlchemy adapter package for tfclaim."""

from __future__ import annotations

from .engine import StartupError, configured_engine, is_started, shutdown, startup
from .mappings import claim_table, create_all_tables, metadata
from .store import SqlAlchemyClaimStore

__all__ = [
    "SqlAlchemyClaimStore",
    "StartupError",
    "claim_table",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
