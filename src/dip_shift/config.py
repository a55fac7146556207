"""
Configuration loading and validation for the dip-shift simulator.

This module handles loading simulation configurations from YAML files,
parsing user-entered values and validating SimulationConfig invariants.
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

import yaml

from dip_shift.errors import ValidationError
from dip_shift.models import RunSettings, SimulationConfig


def load_simulation_config(
    config_path: str | Path,
) -> tuple[SimulationConfig, RunSettings]:
    """
    Load simulation configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Tuple of (validated SimulationConfig, RunSettings)

    Raises:
        ValidationError: If the file cannot be loaded or is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ValidationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValidationError(
            f"Configuration file must contain a mapping, got {type(raw_config).__name__}"
        )

    return parse_simulation_config(raw_config), parse_run_settings(raw_config)


def parse_simulation_config(raw: dict[str, Any]) -> SimulationConfig:
    """
    Parse and validate a raw configuration dictionary into SimulationConfig.

    Missing keys fall back to the SimulationConfig defaults.

    Args:
        raw: Dictionary loaded from YAML (or assembled from CLI options)

    Returns:
        Validated SimulationConfig

    Raises:
        ValidationError: If any value is invalid
    """
    defaults = SimulationConfig()

    initial_capital = _parse_decimal(
        raw.get("initial_capital", defaults.initial_capital),
        "initial_capital",
    )
    monthly_contribution = _parse_decimal(
        raw.get("monthly_contribution", defaults.monthly_contribution),
        "monthly_contribution",
        min_val=Decimal("0"),
    )
    dip_multiplier = _parse_decimal(
        raw.get("dip_multiplier", defaults.dip_multiplier),
        "dip_multiplier",
        min_val=Decimal("0"),
    )

    start_date = _parse_optional_date(raw.get("start_date"), "start_date")
    end_date = _parse_optional_date(raw.get("end_date"), "end_date")

    config = SimulationConfig(
        initial_capital=initial_capital,
        monthly_contribution=monthly_contribution,
        dip_multiplier=dip_multiplier,
        start_date=start_date,
        end_date=end_date,
    )
    validate_simulation_config(config)
    return config


def parse_run_settings(raw: dict[str, Any]) -> RunSettings:
    """
    Parse the non-numeric run settings from a raw configuration dictionary.

    Args:
        raw: Dictionary loaded from YAML

    Returns:
        RunSettings with defaults for missing keys
    """
    defaults = RunSettings()
    return RunSettings(
        benchmark_symbol=str(raw.get("benchmark_symbol", defaults.benchmark_symbol)),
        leveraged_symbol=str(raw.get("leveraged_symbol", defaults.leveraged_symbol)),
        output_dir=str(raw.get("output_dir", defaults.output_dir)),
    )


def validate_simulation_config(config: SimulationConfig) -> None:
    """
    Check SimulationConfig invariants.

    Args:
        config: Configuration to validate

    Raises:
        ValidationError: If capital is not positive, contribution or
            multiplier is negative, an amount is not finite, or start_date
            is after end_date
    """
    for field_name in ("initial_capital", "monthly_contribution", "dip_multiplier"):
        value = getattr(config, field_name)
        if not value.is_finite():
            raise ValidationError(f"{field_name} must be a finite number, got {value}")

    if config.initial_capital <= 0:
        raise ValidationError(
            f"initial_capital must be positive, got {config.initial_capital}"
        )

    if config.monthly_contribution < 0:
        raise ValidationError(
            f"monthly_contribution must be >= 0, got {config.monthly_contribution}"
        )

    if config.dip_multiplier < 0:
        raise ValidationError(
            f"dip_multiplier must be >= 0, got {config.dip_multiplier}"
        )

    if (
        config.start_date is not None
        and config.end_date is not None
        and config.start_date > config.end_date
    ):
        raise ValidationError(
            f"start_date {config.start_date} is after end_date {config.end_date}"
        )


def apply_overrides(
    config: SimulationConfig,
    overrides: dict[str, Any],
) -> SimulationConfig:
    """
    Return a copy of config with non-None override values applied.

    Override values are parsed the same way as file values, so strings
    and floats from a command line are accepted.

    Args:
        config: Base configuration
        overrides: Mapping of field name to raw value (None = keep base)

    Returns:
        New validated SimulationConfig
    """
    raw = {
        "initial_capital": config.initial_capital,
        "monthly_contribution": config.monthly_contribution,
        "dip_multiplier": config.dip_multiplier,
        "start_date": config.start_date,
        "end_date": config.end_date,
    }
    for key, value in overrides.items():
        if key not in raw:
            raise ValidationError(f"Unknown configuration option: {key}")
        if value is not None:
            raw[key] = value

    return parse_simulation_config(raw)


def parse_date(value: Any, field_name: str) -> date:
    """
    Parse a date value from various formats.

    Args:
        value: The value to parse (string, date or datetime)
        field_name: Name of the field for error messages

    Returns:
        Parsed date object

    Raises:
        ValidationError: If the date cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            pass

        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            pass

    raise ValidationError(
        f"Invalid date format for {field_name}: {value}. Expected YYYY-MM-DD"
    )


def _parse_optional_date(value: Any, field_name: str) -> Optional[date]:
    """Parse a date, treating None and empty strings as absent."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return parse_date(value, field_name)


def _parse_decimal(
    value: Any,
    field_name: str,
    min_val: Decimal | None = None,
    max_val: Decimal | None = None,
) -> Decimal:
    """
    Parse a decimal value with optional range validation.

    Args:
        value: The value to parse
        field_name: Name of the field for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive)

    Returns:
        Parsed Decimal

    Raises:
        ValidationError: If the value is invalid or out of range
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid decimal value for {field_name}: {value}")

    try:
        decimal_value = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid decimal value for {field_name}: {value}")

    if not decimal_value.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value}")

    if min_val is not None and decimal_value < min_val:
        raise ValidationError(
            f"{field_name} must be >= {min_val}, got {decimal_value}"
        )

    if max_val is not None and decimal_value > max_val:
        raise ValidationError(
            f"{field_name} must be <= {max_val}, got {decimal_value}"
        )

    return decimal_value


def create_default_config(
    output_path: str | Path | None = None,
    **overrides: Any,
) -> SimulationConfig:
    """
    Create a simulation config with default parameters.

    Useful for programmatic configuration without a YAML file.

    Args:
        output_path: Optional path to write config YAML
        **overrides: Field values replacing the defaults

    Returns:
        Validated SimulationConfig
    """
    config = replace(SimulationConfig(), **overrides)
    validate_simulation_config(config)

    if output_path:
        write_config(config, output_path)

    return config


def write_config(
    config: SimulationConfig,
    output_path: str | Path,
    settings: RunSettings | None = None,
) -> None:
    """
    Write a SimulationConfig (and optional RunSettings) to a YAML file.

    Args:
        config: The configuration to write
        output_path: Path to write the YAML file
        settings: Run settings to include (defaults if None)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if settings is None:
        settings = RunSettings()

    config_dict = {
        "initial_capital": str(config.initial_capital),
        "monthly_contribution": str(config.monthly_contribution),
        "dip_multiplier": str(config.dip_multiplier),
        "start_date": config.start_date.isoformat() if config.start_date else None,
        "end_date": config.end_date.isoformat() if config.end_date else None,
        "benchmark_symbol": settings.benchmark_symbol,
        "leveraged_symbol": settings.leveraged_symbol,
        "output_dir": settings.output_dir,
    }

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
