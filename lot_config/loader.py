"""
Configuration loader (``lot_config.loader``).

Responsibility
--------------
Loads the YAML configuration file, applies environment overrides, and
parses the result into the frozen dataclasses of ``lot_config.schema``.
Runtime callers use ``lot_config.get_active_config()`` instead of calling
this module directly.

Invariants enforced
-------------------
* Required keys (``database.url``) raise ``KeyError`` when missing; no
  silent defaults for them.
* Bad values (unknown log level, negative tolerance, empty stage list)
  raise ``ValueError``.
* ``compute_checksum`` is a deterministic SHA-256 over the effective
  configuration, so two processes can confirm they run the same settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import copy
import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping

import yaml

from lot_config.schema import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    ProductionConfig,
)

ENV_CONFIG_FILE = "LOT_CONFIG_FILE"
ENV_DATABASE_URL = "LOT_DATABASE_URL"
ENV_PASSCODE = "COMPANY_PASSCODE"
ENV_LOG_LEVEL = "LOT_LOG_LEVEL"

# (environment variable, section, key)
_ENV_OVERRIDES = (
    (ENV_DATABASE_URL, "database", "url"),
    (ENV_PASSCODE, "auth", "passcode"),
    (ENV_LOG_LEVEL, "logging", "level"),
)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    merged = copy.deepcopy(dict(data))
    for variable, section, key in _ENV_OVERRIDES:
        value = environ.get(variable)
        if value:
            merged.setdefault(section, {})
            if merged[section] is None:
                merged[section] = {}
            merged[section][key] = value
    return merged


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=str(data["url"]),
        echo=bool(data.get("echo", False)),
    )


def parse_auth(data: dict[str, Any]) -> AuthConfig:
    passcode = data.get("passcode")
    return AuthConfig(
        passcode=str(passcode) if passcode else None,
        passcode_header=str(data.get("passcode_header", "X-COMPANY-PASSCODE")),
    )


def parse_production(data: dict[str, Any]) -> ProductionConfig:
    defaults = ProductionConfig()
    stages = tuple(str(stage) for stage in data.get("stages", defaults.stages))
    if not stages:
        raise ValueError("production.stages must list at least one stage")
    if len(set(stages)) != len(stages):
        raise ValueError(f"production.stages contains duplicates: {stages}")

    raw_tolerance = data.get("percent_tolerance", defaults.percent_tolerance)
    try:
        tolerance = Decimal(str(raw_tolerance))
    except InvalidOperation as exc:
        raise ValueError(
            f"production.percent_tolerance is not a number: {raw_tolerance!r}"
        ) from exc
    if not tolerance.is_finite() or tolerance < 0:
        raise ValueError(
            f"production.percent_tolerance must be a non-negative number: {raw_tolerance!r}"
        )

    return ProductionConfig(
        stages=stages,
        unknown_stage=str(data.get("unknown_stage", defaults.unknown_stage)),
        not_available=str(data.get("not_available", defaults.not_available)),
        percent_tolerance=tolerance,
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {sorted(_LOG_LEVELS)}: {level!r}")
    return LoggingConfig(level=level)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> AppConfig:
    """
    Parse an effective configuration mapping into ``AppConfig``.

    Raises:
        KeyError: if the ``database`` section or ``database.url`` is missing.
        ValueError: if a value is out of range.
    """
    return AppConfig(
        database=parse_database(data["database"]),
        auth=parse_auth(data.get("auth") or {}),
        production=parse_production(data.get("production") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def load_config(
    path: Path,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load ``path``, apply overrides from ``environ`` and parse it."""
    data = load_yaml_file(path)
    return parse_config(apply_env_overrides(data, environ or {}))
