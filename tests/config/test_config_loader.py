"""
Tests for sourcing_config.

Validates:
- Packaged defaults load into frozen dataclasses
- Override files merge key by key
- SOURCING_DATABASE_URL overrides the database URL
- Invalid values and unknown keys raise ConfigurationError
- SOURCING_CONFIG_TRACE is logged with the checksum
"""

from dataclasses import FrozenInstanceError

import pytest
import yaml

from sourcing_config import DATABASE_URL_ENV, get_active_config
from sourcing_config.loader import merge_dicts, parse_config
from sourcing_kernel.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _no_env_url(monkeypatch):
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)


def _write(tmp_path, data, name="override.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:

    def test_defaults_load(self):
        config = get_active_config()

        assert config.database.url == "sqlite://"
        assert config.procurement.order_number_prefix == "PO"
        assert config.procurement.expected_lead_days == 21
        assert config.procurement.foreign_currency == "CNY"
        assert config.procurement.local_currency == "BDT"
        assert config.logging.level == "INFO"
        assert len(config.checksum) == 64

    def test_config_is_frozen(self):
        config = get_active_config()
        with pytest.raises(FrozenInstanceError):
            config.procurement.expected_lead_days = 30

    def test_checksum_stable(self):
        assert get_active_config().checksum == get_active_config().checksum

    def test_trace_logged(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "SOURCING_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["checksum"] == config.checksum
        assert "url" not in traces[-1]


class TestOverrides:

    def test_override_file_merges(self, tmp_path):
        path = _write(tmp_path, {"procurement": {"expected_lead_days": 30}})
        config = get_active_config(path)

        assert config.procurement.expected_lead_days == 30
        # untouched keys keep their defaults
        assert config.procurement.order_number_prefix == "PO"
        assert config.database.pool_size == 20

    def test_override_changes_checksum(self, tmp_path):
        path = _write(tmp_path, {"procurement": {"order_number_prefix": "IMP"}})
        assert get_active_config(path).checksum != get_active_config().checksum

    def test_env_database_url(self, monkeypatch):
        monkeypatch.setenv(DATABASE_URL_ENV, "postgresql://u:p@localhost/sourcing")
        config = get_active_config()
        assert config.database.url == "postgresql://u:p@localhost/sourcing"

    def test_currency_codes_normalized(self, tmp_path):
        path = _write(tmp_path, {"procurement": {"foreign_currency": "usd"}})
        assert get_active_config(path).procurement.foreign_currency == "USD"

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_merge_dicts_is_recursive_and_pure(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = merge_dicts(base, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1}
        assert base["a"]["y"] == 2


class TestValidation:

    @pytest.mark.parametrize(
        "data,key",
        [
            ({"procurement": {"foreign_currency": "XXZ"}}, "procurement.currency"),
            ({"procurement": {"order_number_prefix": ""}}, "procurement.order_number_prefix"),
            ({"procurement": {"order_number_prefix": "P-O"}}, "procurement.order_number_prefix"),
            ({"procurement": {"expected_lead_days": -1}}, "procurement.expected_lead_days"),
            ({"database": {"pool_size": 0}}, "database.pool_size"),
            ({"database": {"url": ""}}, "database.url"),
            ({"logging": {"level": "CHATTY"}}, "logging.level"),
        ],
    )
    def test_invalid_values(self, data, key):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config(data)
        assert exc_info.value.key == key
        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="unknown keys"):
            parse_config({"procurement": {"lead_days": 3}})

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError, match="unknown sections"):
            parse_config({"ledger": {}})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            get_active_config(path)
