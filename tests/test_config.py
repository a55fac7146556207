"""
Tests for configuration loading and validation.
"""

from datetime import date
from decimal import Decimal

import pytest
import yaml

from dip_shift.config import (
    apply_overrides,
    create_default_config,
    load_simulation_config,
    parse_date,
    parse_simulation_config,
    validate_simulation_config,
    write_config,
)
from dip_shift.errors import ValidationError
from dip_shift.models import RunSettings, SimulationConfig


class TestParseSimulationConfig:
    """Tests for parse_simulation_config."""

    def test_defaults(self):
        config = parse_simulation_config({})

        assert config.initial_capital == Decimal("100")
        assert config.monthly_contribution == Decimal("0")
        assert config.dip_multiplier == Decimal("1.0")
        assert config.start_date is None
        assert config.end_date is None

    def test_full_config(self):
        config = parse_simulation_config({
            "initial_capital": "10000",
            "monthly_contribution": 250,
            "dip_multiplier": 1.5,
            "start_date": "2015-01-02",
            "end_date": date(2020, 12, 31),
        })

        assert config.initial_capital == Decimal("10000")
        assert config.monthly_contribution == Decimal("250")
        assert config.dip_multiplier == Decimal("1.5")
        assert config.start_date == date(2015, 1, 2)
        assert config.end_date == date(2020, 12, 31)

    def test_empty_date_strings_are_absent(self):
        config = parse_simulation_config({"start_date": "", "end_date": "  "})
        assert config.start_date is None
        assert config.end_date is None

    @pytest.mark.parametrize("field,value", [
        ("initial_capital", "0"),
        ("initial_capital", "-5"),
        ("monthly_contribution", "-1"),
        ("dip_multiplier", "-0.5"),
        ("initial_capital", "abc"),
        ("dip_multiplier", "nan"),
        ("monthly_contribution", True),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            parse_simulation_config({field: value})

    def test_start_after_end(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_simulation_config({"start_date": "2021-01-01", "end_date": "2020-01-01"})

        assert "after" in str(exc_info.value)

    def test_start_equal_end_is_valid(self):
        config = parse_simulation_config({"start_date": "2021-01-01", "end_date": "2021-01-01"})
        assert config.start_date == config.end_date

    def test_invalid_date(self):
        with pytest.raises(ValidationError):
            parse_simulation_config({"start_date": "01/02/2015x"})


class TestValidateSimulationConfig:
    def test_valid_defaults(self):
        validate_simulation_config(SimulationConfig())

    def test_zero_multiplier_allowed(self):
        validate_simulation_config(SimulationConfig(dip_multiplier=Decimal("0")))

    def test_negative_capital(self):
        with pytest.raises(ValidationError):
            validate_simulation_config(SimulationConfig(initial_capital=Decimal("-1")))

    def test_bounds_reversed(self):
        with pytest.raises(ValidationError):
            validate_simulation_config(
                SimulationConfig(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
            )

    @pytest.mark.parametrize("field", ["initial_capital", "monthly_contribution", "dip_multiplier"])
    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_amounts(self, field, value):
        config = SimulationConfig(**{field: Decimal(value)})

        with pytest.raises(ValidationError) as exc_info:
            validate_simulation_config(config)

        assert field in str(exc_info.value)

    def test_non_finite_capital_rejected_by_backtest(self, sp500_series, upro_series):
        from dip_shift.simulation import run_backtest

        for value in ("NaN", "Infinity"):
            with pytest.raises(ValidationError):
                run_backtest(
                    sp500_series, upro_series,
                    config=SimulationConfig(initial_capital=Decimal(value)),
                )


class TestLoadSimulationConfig:
    """Tests for YAML config files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "initial_capital": "5000",
            "dip_multiplier": "2",
            "start_date": "2016-01-04",
            "benchmark_symbol": "SPY",
            "leveraged_symbol": "SSO",
            "output_dir": "runs",
        }))

        config, settings = load_simulation_config(path)

        assert config.initial_capital == Decimal("5000")
        assert config.dip_multiplier == Decimal("2")
        assert config.start_date == date(2016, 1, 4)
        assert settings == RunSettings(benchmark_symbol="SPY", leveraged_symbol="SSO", output_dir="runs")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config, settings = load_simulation_config(path)

        assert config == SimulationConfig()
        assert settings == RunSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError):
            load_simulation_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("initial_capital: [unclosed\n")

        with pytest.raises(ValidationError):
            load_simulation_config(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValidationError):
            load_simulation_config(path)

    def test_write_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        original = SimulationConfig(
            initial_capital=Decimal("1234.5"),
            monthly_contribution=Decimal("100"),
            dip_multiplier=Decimal("1.25"),
            start_date=date(2018, 3, 1),
        )

        write_config(original, path)
        loaded, _ = load_simulation_config(path)

        assert loaded == original


class TestOverridesAndDefaults:
    def test_apply_overrides_ignores_none(self):
        base = SimulationConfig(initial_capital=Decimal("500"))

        updated = apply_overrides(base, {"initial_capital": None, "dip_multiplier": "2"})

        assert updated.initial_capital == Decimal("500")
        assert updated.dip_multiplier == Decimal("2")
        assert base.dip_multiplier == Decimal("1.0")

    def test_apply_overrides_validates(self):
        base = SimulationConfig(start_date=date(2020, 1, 1))

        with pytest.raises(ValidationError):
            apply_overrides(base, {"end_date": "2019-01-01"})

    def test_apply_overrides_unknown_key(self):
        with pytest.raises(ValidationError):
            apply_overrides(SimulationConfig(), {"leverage": "3"})

    def test_create_default_config_writes_file(self, tmp_path):
        path = tmp_path / "default.yaml"

        config = create_default_config(path, monthly_contribution=Decimal("10"))

        assert config.monthly_contribution == Decimal("10")
        assert path.exists()

    def test_parse_date_formats(self):
        assert parse_date("2024-01-05", "d") == date(2024, 1, 5)
        assert parse_date("2024-01-05T16:00:00", "d") == date(2024, 1, 5)
        with pytest.raises(ValidationError):
            parse_date(20240105, "d")
