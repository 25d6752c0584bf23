"""
Tests for forecast configuration loading.

Covers:
- Shipped configuration sets
- YAML parsing, defaults and checksum identity
- Strict validation of keys and values
- Config -> engine parameter bridge
"""

import logging
from pathlib import Path

import pytest
import yaml

from forecast_config import get_active_config
from forecast_config.bridges import build_forecast_parameters
from forecast_config.loader import compute_checksum, load_config_file, parse_config
from forecast_config.schema import ForecastConfig
from forecast_engines.parameters import ForecastParameters
from forecast_kernel.exceptions import ConfigNotFoundError, ForecastConfigError


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text)
    return path


class TestShippedSets:
    """The configuration sets bundled with the package load cleanly."""

    def test_default(self):
        config = get_active_config()
        assert config.name == "default"
        assert config.horizons == (1, 3, 6, 12)
        assert config.include_invoice_only_clients is True
        assert config.ytd_recurring_only is False
        assert len(config.checksum) == 64

    def test_dashboard(self):
        config = get_active_config("dashboard")
        assert config.include_invoice_only_clients is False
        assert config.ytd_recurring_only is True
        assert set(config.excluded_clients) == {"SaaS", "CKB"}
        assert config.client_aliases["INDXA"] == "IND"
        assert "activo" in config.active_contract_statuses

    def test_default_matches_engine_defaults(self):
        params = build_forecast_parameters(get_active_config())
        assert params == ForecastParameters()


class TestGetActiveConfig:
    """Lookup by name in a configuration directory."""

    def test_yml_suffix(self, tmp_path):
        _write(tmp_path, "custom.yml", "horizons: [2, 4]\n")
        config = get_active_config("custom", config_dir=tmp_path)
        assert config.name == "custom"
        assert config.horizons == (2, 4)

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            get_active_config("absent", config_dir=tmp_path)
        assert exc_info.value.config_name == "absent"
        assert exc_info.value.code == "CONFIG_NOT_FOUND"

    def test_emits_config_trace(self, tmp_path, caplog):
        _write(tmp_path, "traced.yaml", "name: traced\nversion: 3\n")
        with caplog.at_level(logging.INFO, logger="revenue_forecast"):
            config = get_active_config("traced", config_dir=tmp_path)

        traces = [r for r in caplog.records if r.getMessage() == "FORECAST_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0].config_name == "traced"
        assert traces[0].config_version == 3
        assert traces[0].checksum == config.checksum

    def test_malformed_yaml(self, tmp_path):
        _write(tmp_path, "broken.yaml", "horizons: [1, 3\n")
        with pytest.raises(yaml.YAMLError):
            get_active_config("broken", config_dir=tmp_path)


class TestParseConfig:
    """Parsing and validation of configuration mappings."""

    def test_empty_mapping_uses_defaults(self):
        config = parse_config({}, default_name="empty")
        assert config == ForecastConfig(name="empty", checksum=compute_checksum({}))

    def test_empty_file(self, tmp_path):
        config = load_config_file(_write(tmp_path, "blank.yaml", ""))
        assert config.name == "blank"

    def test_checksum_tracks_content(self):
        a = parse_config({"horizons": [1, 3]})
        b = parse_config({"horizons": [1, 3]})
        c = parse_config({"horizons": [1, 6]})
        assert a.checksum == b.checksum
        assert a.checksum != c.checksum

    def test_unknown_top_level_key(self):
        with pytest.raises(ForecastConfigError) as exc_info:
            parse_config({"horizon": [1]})
        assert exc_info.value.field == "<root>"

    def test_unknown_section_key(self):
        with pytest.raises(ForecastConfigError) as exc_info:
            parse_config({"clients": {"exclude": ["X"]}})
        assert exc_info.value.field == "clients"

    @pytest.mark.parametrize(
        "data,field",
        [
            ({"fiscal_year": {"start_month": 13}}, "fiscal_year.start_month"),
            ({"fiscal_year": {"start_month": "4"}}, "fiscal_year.start_month"),
            ({"horizons": []}, "horizons"),
            ({"horizons": [0]}, "horizons"),
            ({"horizons": "12"}, "horizons"),
            ({"contracts": {"active_statuses": []}}, "contracts.active_statuses"),
            ({"invoices": {"ytd_recurring_only": "yes"}}, "invoices.ytd_recurring_only"),
            ({"clients": {"excluded": "SaaS"}}, "clients.excluded"),
            ({"clients": {"aliases": ["INDXA"]}}, "clients.aliases"),
            ({"contracts": ["active"]}, "contracts"),
            ({"version": "v2"}, "version"),
            ({"version": 1.5}, "version"),
            ({"version": 0}, "version"),
        ],
    )
    def test_invalid_values(self, data, field):
        with pytest.raises(ForecastConfigError) as exc_info:
            parse_config(data)
        assert exc_info.value.field == field
        assert exc_info.value.code == "FORECAST_CONFIG_INVALID"

    def test_root_must_be_mapping(self):
        with pytest.raises(ForecastConfigError):
            parse_config(["not", "a", "mapping"])


class TestBridge:
    """ForecastConfig -> ForecastParameters."""

    def test_build_parameters(self):
        config = parse_config({
            "fiscal_year": {"start_month": 4},
            "horizons": [12, 1],
            "contracts": {"active_statuses": ["Active", "activo"]},
            "invoices": {"ytd_recurring_only": True},
            "clients": {
                "include_invoice_only": False,
                "excluded": ["SaaS"],
                "aliases": {"INDXA": "IND"},
            },
        })
        params = build_forecast_parameters(config)

        assert params.fiscal_year_start_month == 4
        assert params.horizons == (1, 12)
        assert params.active_contract_statuses == frozenset({"active", "activo"})
        assert params.ytd_recurring_only is True
        assert params.include_invoice_only_clients is False
        assert params.excluded_clients == frozenset({"SaaS"})
        assert params.client_key("INDXA") == "IND"
