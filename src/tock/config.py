#!/usr/bin/env python3
"""
Load tock settings from a TOML file and environment overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib

from .errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_TOPIC = "default"
DATABASE_FILENAME = "tock.db"


@dataclass(frozen=True)
class TockConfig:
    """
    Resolved tock settings.

    Attributes
    ----------
    database_path : Path
        SQLite database holding the sessions table.
    timezone : Optional[str]
        IANA timezone name, or None for the system local zone.
    default_topic : str
        Topic used by ``tock start`` when none is given.
    export_dir : Optional[Path]
        Directory for CSV exports, or None for the working directory.
    """

    database_path: Path
    timezone: Optional[str] = None
    default_topic: str = DEFAULT_TOPIC
    export_dir: Optional[Path] = None


def _expand(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))


def get_config_path() -> Path:
    """
    Return the configuration file path.

    Returns
    -------
    Path
        Configuration TOML path.

    Examples
    --------
    >>> isinstance(get_config_path(), Path)
    True
    """
    override = os.environ.get("TOCK_CONFIG_PATH", "").strip()
    if override:
        return _expand(override)
    return Path.home() / ".config" / "tock" / "config.toml"


def get_default_database_path() -> Path:
    """
    Return the default database path in the user data directory.

    Returns
    -------
    Path
        ``$XDG_DATA_HOME/tock/tock.db`` or ``~/.local/share/tock/tock.db``.
    """
    base = os.environ.get("XDG_DATA_HOME", "").strip()
    data_dir = _expand(base) if base else Path.home() / ".local" / "share"
    return data_dir / "tock" / DATABASE_FILENAME


def _optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Config value '{key}' must be a string.")
    value = value.strip()
    return value or None


def parse_config(raw: Dict[str, Any]) -> TockConfig:
    """
    Build settings from parsed TOML data and the environment.

    Parameters
    ----------
    raw : Dict[str, Any]
        Parsed TOML mapping.

    Returns
    -------
    TockConfig
        Resolved settings.

    Examples
    --------
    >>> config = parse_config({"default_topic": "work", "database": "/tmp/t.db"})
    >>> config.default_topic
    'work'
    """
    database = _optional_str(raw, "database")
    env_database = os.environ.get("TOCK_DB_PATH", "").strip()
    if env_database:
        database_path = _expand(env_database)
    elif database:
        database_path = _expand(database)
    else:
        database_path = get_default_database_path()
    export_dir = _optional_str(raw, "export_dir")
    return TockConfig(
        database_path=database_path,
        timezone=_optional_str(raw, "timezone"),
        default_topic=_optional_str(raw, "default_topic") or DEFAULT_TOPIC,
        export_dir=_expand(export_dir) if export_dir else None,
    )


def load_config(path: Optional[Path] = None) -> TockConfig:
    """
    Load settings from disk.

    Parameters
    ----------
    path : Optional[Path], optional
        Path to the configuration file (defaults to standard path).

    Returns
    -------
    TockConfig
        Resolved settings; defaults when the file is missing.

    Raises
    ------
    ConfigError
        If the file cannot be read or is not valid TOML.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        log.debug("No config file at %s, using defaults", config_path)
        return parse_config({})
    try:
        raw_text = config_path.read_text(encoding="utf-8")
        parsed = tomllib.loads(raw_text)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config file {config_path}: {exc}") from exc
    log.debug("Loaded config from %s", config_path)
    return parse_config(parsed)
