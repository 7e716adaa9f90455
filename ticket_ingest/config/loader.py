from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..models.config_models import IngestConfig
from ..normalize.rules import LOCATION_MAP, priority_rules_from_config
from ..services.pipeline import alias_table_from_config
from ..services.sla import DEFAULT_SLA_HOURS, SLA_THRESHOLDS_HOURS

"""Config loader.

Responsibilities:
- Load the YAML config (default ``config/ingest.yml``)
- Validate it against the bundled JSON schema
- Apply defaults (timezone=UTC, progress_stride=100, built-in SLA table)
- Resolve the config path and timezone override from the environment /
  ``.env`` (TICKET_INGEST_CONFIG, TICKET_INGEST_TZ)
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "load_config_from_env",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/ingest.yml")

ENV_CONFIG = "TICKET_INGEST_CONFIG"
ENV_TIMEZONE = "TICKET_INGEST_TZ"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or data violates it
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


def load_config(path: Path) -> IngestConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    sla = data.get("sla", {})
    thresholds = {**SLA_THRESHOLDS_HOURS, **sla["thresholds"]} if sla.get("thresholds") else None
    aliases = {
        kind: {name: tuple(values) for name, values in fields.items()}
        for kind, fields in data.get("aliases", {}).items()
    }
    rules = priority_rules_from_config(data["priority_rules"]) if data.get("priority_rules") else None
    location_map = {**LOCATION_MAP, **data["location_map"]} if data.get("location_map") else None

    cfg = IngestConfig(
        timezone=data.get("timezone", "UTC"),
        progress_stride=data.get("progress_stride", 100),
        sla_thresholds=thresholds,
        default_sla_hours=sla.get("default_hours", DEFAULT_SLA_HOURS),
        alias_overrides=aliases,
        priority_rules=rules,
        location_map=location_map,
    )
    _check_aliases(cfg)
    return cfg


def _check_aliases(cfg: IngestConfig) -> None:
    # 上書き後の表で重複がないことを読み込み時に検証
    for kind in cfg.alias_overrides:
        try:
            alias_table_from_config(kind, cfg)
        except ValueError as e:
            raise ConfigError(f"invalid aliases for '{kind}': {e}") from e


def load_config_from_env(env_file: Path = Path(".env")) -> IngestConfig:
    """Load the config named by the environment, or defaults when none exists.

    ``.env`` is read first (without overriding variables already set).
    TICKET_INGEST_CONFIG names the YAML file (default config/ingest.yml; a
    missing default file means "use defaults", a missing explicit file is an
    error). TICKET_INGEST_TZ overrides the configured timezone.
    """
    if env_file.exists():
        load_dotenv(dotenv_path=env_file, override=False)

    explicit = os.getenv(ENV_CONFIG)
    path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH
    if path.exists() or explicit:
        cfg = load_config(path)
    else:
        cfg = IngestConfig()

    tz = os.getenv(ENV_TIMEZONE)
    if tz:
        cfg = replace(cfg, timezone=tz)
    return cfg
