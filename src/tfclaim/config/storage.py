"""Location and options of the claim database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool

DEFAULT_DB_FILENAME: Final[str] = "tfclaim.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def claims_data_dir() -> Path:
    """``$TFCLAIM_DATA_DIR``, else ``$XDG_DATA_HOME/tfclaim`` (``~/.local/share/tfclaim``)."""

    explicit = os.getenv("TFCLAIM_DATA_DIR")
    if explicit:
        return Path(explicit).expanduser().resolve()
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / "tfclaim").expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the claims data dir, created on demand."""

    echo = env_bool("TFCLAIM_DB_ECHO", default=False)
    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri, echo=echo)
    data_dir = claims_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir / DEFAULT_DB_FILENAME}", echo=echo)
