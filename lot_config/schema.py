"""
Lot tracker configuration schema.

Frozen dataclasses produced by ``lot_config.loader`` from YAML.  Defaults
here mirror ``defaults.yaml``; the YAML file is the reviewed source.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from lot_kernel.domain.stages import PRODUCTION_STAGES, UNKNOWN_STAGE
from lot_kernel.domain.values import NOT_AVAILABLE

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    echo: bool = False


@dataclass(frozen=True)
class AuthConfig:
    """Shared static passcode guarding every mutating and reading route."""

    passcode: str | None = None
    passcode_header: str = "X-COMPANY-PASSCODE"


@dataclass(frozen=True)
class ProductionConfig:
    stages: tuple[str, ...] = PRODUCTION_STAGES
    unknown_stage: str = UNKNOWN_STAGE
    not_available: str = NOT_AVAILABLE
    percent_tolerance: Decimal = Decimal("0.1")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    auth: AuthConfig
    production: ProductionConfig
    logging: LoggingConfig
    checksum: str = ""
