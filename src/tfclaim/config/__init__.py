"""Application configuration helpers."""

from __future__ import annotations

from .controller import ControllerConfig, get_controller_config
from .env import env_bool, env_float, env_int, env_list, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, get_log_level
from .storage import DatabaseConfig, claims_data_dir, get_database_config

__all__ = [
    "ConfigurationError",
    "ControllerConfig",
    "DatabaseConfig",
    "MissingConfigurationError",
    "claims_data_dir",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "get_controller_config",
    "get_database_config",
    "get_log_level",
    "require_env_var",
    "require_env_vars",
]
