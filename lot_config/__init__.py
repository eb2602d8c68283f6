"""
lot_config -- single public entrypoint for lot tracker configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits above ``lot_kernel`` and below ``lot_api`` and
    the operator scripts.  The kernel never imports from ``lot_config``;
    callers pass the relevant values (stages, tolerance, ...) in.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Deterministic: the same file and environment always yield the same
      ``AppConfig.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- configured file does not exist.
    - ``KeyError`` / ``ValueError`` -- schema violations.

Audit relevance:
    Every successful call emits a ``lot_config_loaded`` log entry with
    the source file and checksum.  The passcode is never logged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from lot_config.loader import ENV_CONFIG_FILE, compute_checksum, load_config
from lot_config.schema import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    ProductionConfig,
)

_logger = logging.getLogger("lot_kernel.config")

DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults.yaml"


def get_active_config(
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """The ONLY public configuration entrypoint.

    Resolution order for the file: ``config_file`` argument, then
    ``LOT_CONFIG_FILE``, then the packaged ``defaults.yaml``.  Environment
    overrides (``LOT_DATABASE_URL``, ``COMPANY_PASSCODE``,
    ``LOT_LOG_LEVEL``) are applied on top.

    Args:
        config_file: Explicit YAML file.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        Frozen ``AppConfig``.
    """
    env = os.environ if environ is None else environ
    path = Path(config_file or env.get(ENV_CONFIG_FILE) or DEFAULT_CONFIG_FILE)

    config = load_config(path, env)

    _logger.info(
        "lot_config_loaded",
        extra={
            "config_file": str(path),
            "checksum": config.checksum,
            "stage_count": len(config.production.stages),
            "passcode_configured": config.auth.passcode is not None,
        },
    )
    return config


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "DEFAULT_CONFIG_FILE",
    "LoggingConfig",
    "ProductionConfig",
    "compute_checksum",
    "get_active_config",
]
