"""
sourcing_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the only way services and scripts obtain
    configuration.  It layers the packaged ``defaults.yaml``, an optional
    override file and the ``SOURCING_DATABASE_URL`` environment variable,
    then validates the result into frozen dataclasses.

Architecture position:
    Configuration -- sits above ``sourcing_kernel`` and beside
    ``sourcing_modules``.  The kernel MUST NEVER import from this package.

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ConfigurationError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful call emits a ``SOURCING_CONFIG_TRACE`` log entry with
    the checksum of the merged configuration (the database URL is never
    logged).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from sourcing_config.loader import load_yaml_file, merge_dicts, parse_config
from sourcing_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    ProcurementConfig,
    SourcingConfig,
)

_logger = logging.getLogger("sourcing_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
DATABASE_URL_ENV = "SOURCING_DATABASE_URL"


def get_active_config(config_path: Path | str | None = None) -> SourcingConfig:
    """Load, merge and validate the active configuration.

    Args:
        config_path: Optional YAML file whose sections override the
            packaged defaults key by key.

    Returns:
        SourcingConfig -- frozen, validated.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)

    if config_path is not None:
        data = merge_dicts(data, load_yaml_file(Path(config_path)))
        source = str(config_path)

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        data = merge_dicts(data, {"database": {"url": env_url}})

    config = parse_config(data)

    _logger.info(
        "SOURCING_CONFIG_TRACE",
        extra={
            "trace_type": "SOURCING_CONFIG_TRACE",
            "source": source,
            "checksum": config.checksum,
            "database_url_from_env": bool(env_url),
            "order_number_prefix": config.procurement.order_number_prefix,
            "foreign_currency": config.procurement.foreign_currency,
            "local_currency": config.procurement.local_currency,
        },
    )

    return config


__all__ = [
    "get_active_config",
    "SourcingConfig",
    "DatabaseConfig",
    "ProcurementConfig",
    "LoggingConfig",
    "DEFAULTS_PATH",
    "DATABASE_URL_ENV",
]
