"""
Sourcing configuration schema.

Frozen dataclasses populated by the loader from YAML.  Field defaults mirror
``defaults.yaml`` so a schema object can be built directly in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings handed to ``init_engine_from_url``."""

    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


# ---------------------------------------------------------------------------
# Procurement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcurementConfig:
    """
    Purchase-order settings.

    ``foreign_currency`` is what suppliers invoice in (china_price);
    ``local_currency`` is what landed costs and stock values are kept in.
    """

    order_number_prefix: str = "PO"
    expected_lead_days: int = 21
    foreign_currency: str = "CNY"
    local_currency: str = "BDT"
    report_decimal_places: int = 2


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class SourcingConfig:
    """The complete runtime configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    procurement: ProcurementConfig = field(default_factory=ProcurementConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
