from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_EXPORT_ENTITIES,
    DEFAULT_EXPORT_FILE,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_ROW_CAP,
    DEFAULT_TARGET_OBJECT,
    ColumnConfig,
    DatabaseConfig,
    ExportConfig,
    ExportEntityConfig,
    ImportConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default: config/import.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for every missing key
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "parse_config",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _export_config(raw: dict[str, Any]) -> ExportConfig:
    entities_raw = raw.get("entities")
    if not entities_raw:
        entities = DEFAULT_EXPORT_ENTITIES
    else:
        entities = tuple(
            ExportEntityConfig(
                kind=e["kind"],
                sheet_name=e["sheet"],
                table=e["table"],
                columns=tuple(ColumnConfig(label=c["label"], field=c["field"]) for c in e["columns"]),
            )
            for e in entities_raw
        )
    kinds = [e.kind for e in entities]
    if len(set(kinds)) != len(kinds):
        raise ConfigError(f"duplicate export entity kinds: {kinds}")
    return ExportConfig(
        output_file=raw.get("output_file", DEFAULT_EXPORT_FILE),
        entities=entities,
    )


def parse_config(data: dict[str, Any]) -> ImportConfig:
    """Validate a config mapping and build ImportConfig with defaults applied."""
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImportConfig(
        row_cap=data.get("row_cap", DEFAULT_ROW_CAP),
        max_file_bytes=data.get("max_file_bytes", DEFAULT_MAX_FILE_BYTES),
        target_object=data.get("target_object", DEFAULT_TARGET_OBJECT),
        submit_timeout_seconds=data.get("submit_timeout_seconds"),
        database=db,
        export=_export_config(data.get("export") or {}),
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return parse_config(data)
