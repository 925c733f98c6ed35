"""
Configuration Loader (``sourcing_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the frozen dataclasses of
``sourcing_config.schema``.  The single public entry point for runtime
configuration is ``sourcing_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Unknown keys and out-of-range values raise ``ConfigurationError``; no
  silent defaults for values that were supplied.
* Currency codes are validated against ISO 4217.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from sourcing_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    ProcurementConfig,
    SourcingConfig,
)
from sourcing_kernel.db.types import InvalidCurrencyError, validate_currency
from sourcing_kernel.exceptions import ConfigurationError

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping()) - {"NOTSET"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict[str, Any], name: str, cls: type) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(name, "must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ConfigurationError(name, f"unknown keys {unknown}")
    return section


def _positive_int(key: str, value: Any, *, allow_zero: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(key, f"must be an integer, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(key, f"must be positive, got {value}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    section = _section(data, "database", DatabaseConfig)
    config = DatabaseConfig(**section)
    if not config.url:
        raise ConfigurationError("database.url", "must not be empty")
    for name in ("pool_size", "pool_timeout", "pool_recycle"):
        _positive_int(f"database.{name}", getattr(config, name))
    _positive_int("database.max_overflow", config.max_overflow, allow_zero=True)
    return config


def parse_procurement(data: dict[str, Any]) -> ProcurementConfig:
    section = _section(data, "procurement", ProcurementConfig)
    config = ProcurementConfig(**section)

    prefix = config.order_number_prefix
    if not isinstance(prefix, str) or not prefix.strip() or "-" in prefix:
        raise ConfigurationError(
            "procurement.order_number_prefix",
            f"must be a non-empty string without '-', got {prefix!r}",
        )
    _positive_int("procurement.expected_lead_days", config.expected_lead_days, allow_zero=True)
    _positive_int(
        "procurement.report_decimal_places", config.report_decimal_places, allow_zero=True
    )

    try:
        foreign = validate_currency(config.foreign_currency)
        local = validate_currency(config.local_currency)
    except InvalidCurrencyError as exc:
        raise ConfigurationError("procurement.currency", str(exc)) from exc

    return ProcurementConfig(
        order_number_prefix=prefix.strip(),
        expected_lead_days=config.expected_lead_days,
        foreign_currency=foreign,
        local_currency=local,
        report_decimal_places=config.report_decimal_places,
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    section = _section(data, "logging", LoggingConfig)
    level = str(section.get("level", LoggingConfig.level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError("logging.level", f"unknown level {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any]) -> SourcingConfig:
    """
    Parse a merged configuration dict into a ``SourcingConfig``.

    Raises:
        ConfigurationError: on unknown sections, unknown keys or bad values.
    """
    unknown = sorted(set(data) - {"database", "procurement", "logging"})
    if unknown:
        raise ConfigurationError("<root>", f"unknown sections {unknown}")

    return SourcingConfig(
        database=parse_database(data),
        procurement=parse_procurement(data),
        logging=parse_logging(data),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
