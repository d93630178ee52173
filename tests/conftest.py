from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from tfclaim.adapters.sqlalchemy import SqlAlchemyClaimStore, shutdown, startup
from tfclaim.domain.reconcile import PhaseKind

from tests.helpers.claims import CountingClaimStore, ScriptedPhase, phase_table

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture
def store() -> CountingClaimStore:
    return CountingClaimStore()


@pytest.fixture
def calls() -> list[PhaseKind]:
    return []


@pytest.fixture
def phases(calls: list[PhaseKind]) -> dict[PhaseKind, ScriptedPhase]:
    return phase_table(calls)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyClaimStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyClaimStore()
    finally:
        shutdown()
