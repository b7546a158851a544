# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FinBoard.

This module is responsible for:
- loading the application configuration from a TOML file,
- describing the configured entities and their data sources,
- exposing typed dataclasses used by the rest of the application.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

from .db import DatabaseConfig

DEFAULT_CONFIG_FILE = "finboard_config.toml"


@dataclass(frozen=True)
class EntityConfig:
    """
    A financial entity and its data-source binding.

    Attributes
    ----------
    id :
        Stable identifier used on the command line and in the warehouse.
    name :
        Display name.
    provider :
        Adapter name ("quickbooks", "csv").
    source_config :
        Provider-specific settings (catalogId, path, ...).
    credentials_env :
        Credential name -> environment variable holding its value. Secrets
        are never stored in the configuration file itself.
    """

    id: str
    name: str
    provider: str
    source_config: dict[str, str] = field(default_factory=dict)
    credentials_env: dict[str, str] = field(default_factory=dict)

    def resolve_credentials(self) -> dict[str, str]:
        """Read credential values from the environment (missing ones are '')."""
        return {
            key: os.environ.get(var, "") for key, var in self.credentials_env.items()
        }


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for FinBoard.

    This aggregates:
    - the warehouse database configuration,
    - the warehouse time-to-live used when fetching entities,
    - the configured entities,
    - logging options,
    - display options for tables and CSV exports.
    """

    database: DatabaseConfig
    cache_ttl_hours: float
    entities: list[EntityConfig]
    log_level: str
    log_file: Optional[Path]
    display_mode: str
    decimals: int

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)

    def get_entity(self, entity_id: str) -> Optional[EntityConfig]:
        return next((e for e in self.entities if e.id == entity_id), None)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a sub-table, or an empty mapping if missing or malformed."""
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _str_mapping(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def _parse_entities(raw: Mapping[str, Any], base_dir: Path) -> list[EntityConfig]:
    """
    Parse the [[entities]] array of tables.

    Relative ``source_config.path`` values are resolved against the
    configuration file directory.

    Raises:
        ValueError: on a missing id/provider or duplicate ids.
    """
    entries = raw.get("entities") or []
    if not isinstance(entries, list):
        raise ValueError("'entities' must be an array of tables ([[entities]]).")

    entities: list[EntityConfig] = []
    seen: set[str] = set()

    for item in entries:
        if not isinstance(item, Mapping):
            raise ValueError("Each [[entities]] entry must be a table.")

        entity_id = str(item.get("id") or "").strip()
        provider = str(item.get("provider") or "").strip()
        if not entity_id or not provider:
            raise ValueError("Each [[entities]] entry requires 'id' and 'provider'.")
        if entity_id in seen:
            raise ValueError(f"Duplicate entity id '{entity_id}' in configuration.")
        seen.add(entity_id)

        source_config = _str_mapping(item.get("source_config"))
        if "path" in source_config:
            source_config["path"] = str((base_dir / source_config["path"]).resolve())

        entities.append(
            EntityConfig(
                id=entity_id,
                name=str(item.get("name") or entity_id),
                provider=provider,
                source_config=source_config,
                credentials_env=_str_mapping(item.get("credentials_env")),
            )
        )

    return entities


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the FinBoard application configuration from a TOML file.

    Expected sections in the TOML file
    ----------------------------------
    [database]
        engine ("sqlite") and path of the warehouse database.

    [cache]
        ttl_hours: age after which stored entity data is refetched
        (default 24).

    [logging]
        level (default "INFO") and optional file.

    [display]
        mode ("table", "csv" or "both") and decimals for rounded output.

    [[entities]]
        id, name, provider, source_config table, credentials_env table.

    All file paths are resolved relative to the directory of the TOML file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or "data/db/finboard.sqlite"
    database_config = DatabaseConfig(
        engine=db_engine, path=(base_dir / str(db_path_raw)).resolve()
    )

    # 2) Cache section
    cache_section = _section(raw, "cache")
    try:
        cache_ttl_hours = float(cache_section.get("ttl_hours", 24))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'cache.ttl_hours' in the configuration. "
            "Expected a number."
        ) from exc
    if cache_ttl_hours < 0:
        raise ValueError("'cache.ttl_hours' cannot be negative.")

    # 3) Entities
    entities = _parse_entities(raw, base_dir)

    # 4) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or "INFO").upper()
    log_file_raw = logging_section.get("file")
    log_file = (base_dir / str(log_file_raw)).resolve() if log_file_raw else None

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in {"table", "csv", "both"}:
        raise ValueError(
            f"Invalid display.mode {display_mode!r}; expected table, csv or both."
        )
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    return AppConfig(
        database=database_config,
        cache_ttl_hours=cache_ttl_hours,
        entities=entities,
        log_level=log_level,
        log_file=log_file,
        display_mode=display_mode,
        decimals=decimals,
    )
