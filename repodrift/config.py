"""Configuration loading for repodrift.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined in RepoDriftConfig)
    2. Project config (./repodrift.toml)
    3. Explicit config file (--config)
    4. Environment variables (REPODRIFT_* prefix)
    5. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(log_level="DEBUG")
    >>> config.log_level
    'DEBUG'
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from repodrift.exceptions import ConfigurationError

DEFAULT_DB_PATH = ".repodrift/repodrift.db"
PROJECT_CONFIG_NAME = "repodrift.toml"
ENV_PREFIX = "REPODRIFT_"


@dataclass(frozen=True)
class RepoDriftConfig:
    """
    Runtime settings.

    Attributes:
        db_path: SQLite file holding snapshots and drift records
        log_level: Name of the logging level for the CLI
        extra_ignore_patterns: gitignore-style patterns added to the fixed
            ignore policy (they can only exclude more entries)
    """

    db_path: str = DEFAULT_DB_PATH
    log_level: str = "WARNING"
    extra_ignore_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        object.__setattr__(self, "log_level", level)
        object.__setattr__(self, "extra_ignore_patterns", tuple(self.extra_ignore_patterns))


def _load_toml_file(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    # Accept either a bare table or a [repodrift] section
    return dict(data.get("repodrift", data))


def _load_env_vars() -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in fields(RepoDriftConfig):
        value = os.environ.get(ENV_PREFIX + f.name.upper())
        if value is None:
            continue
        if f.name == "extra_ignore_patterns":
            result[f.name] = tuple(p.strip() for p in value.split(",") if p.strip())
        else:
            result[f.name] = value
    return result


def load_config(config_file: Optional[Path] = None, **overrides) -> RepoDriftConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); None values
            are ignored so unset flags do not mask file settings

    Returns:
        Validated RepoDriftConfig instance

    Raises:
        ConfigurationError: If a config file is invalid, missing, or holds
            unknown keys
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(RepoDriftConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(
            "Unknown configuration keys", {"keys": ", ".join(unknown)}
        )

    if "extra_ignore_patterns" in merged:
        merged["extra_ignore_patterns"] = tuple(merged["extra_ignore_patterns"])
    if "db_path" in merged:
        merged["db_path"] = str(merged["db_path"])

    return RepoDriftConfig(**merged)
