"""
Core data models for the dip-shift simulator.

This module defines the fundamental data structures used throughout the system,
including price records, matched price pairs, simulation configuration and the
simulation result. Configuration and logged monetary values use Decimal;
the running simulation state uses float.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

import pandas as pd


class ActionType(Enum):
    """Types of logged actions for the run log."""
    CONFIG_LOADED = "CONFIG_LOADED"
    SERIES_LOADED = "SERIES_LOADED"
    SERIES_MATCHED = "SERIES_MATCHED"
    RANGE_FILTERED = "RANGE_FILTERED"
    SIMULATION_COMPLETED = "SIMULATION_COMPLETED"


@dataclass(frozen=True)
class PriceRecord:
    """
    Daily closing price of one instrument.

    Attributes:
        date: Trading date
        close: Closing price (positive)
    """
    date: date
    close: Decimal


@dataclass(frozen=True)
class MatchedRecord:
    """
    A trading day present in both the benchmark and the leveraged series.

    Attributes:
        date: Trading date
        benchmark_close: Benchmark closing price
        leveraged_close: Leveraged instrument closing price
    """
    date: date
    benchmark_close: Decimal
    leveraged_close: Decimal


@dataclass(frozen=True)
class SimulationConfig:
    """
    Configuration for a simulation run.

    Attributes:
        initial_capital: Starting amount, fully held in the benchmark
        monthly_contribution: Amount added to the benchmark on the first
            trading day of each new month (0 disables contributions)
        dip_multiplier: Scale applied to the benchmark's daily loss when
            shifting dollars into the leveraged instrument
        start_date: Inclusive first date of the window (None = unbounded)
        end_date: Inclusive last date of the window (None = unbounded)
    """
    initial_capital: Decimal = Decimal("100")
    monthly_contribution: Decimal = Decimal("0")
    dip_multiplier: Decimal = Decimal("1.0")
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class RunSettings:
    """
    Non-numeric settings for a run, loaded alongside SimulationConfig.

    Attributes:
        benchmark_symbol: Label of the benchmark series
        leveraged_symbol: Label of the leveraged series
        output_dir: Directory for report files
    """
    benchmark_symbol: str = "SPX"
    leveraged_symbol: str = "UPRO"
    output_dir: str = "output"


@dataclass(frozen=True)
class DailyLogEntry:
    """
    End-of-day portfolio values, rounded to cents for presentation.

    Attributes:
        date: Trading date
        benchmark_value: Value held in the benchmark
        leveraged_value: Value held in the leveraged instrument
        total: benchmark_value + leveraged_value
        shift_amount: Dollars moved from benchmark to leveraged that day
        contribution: New money added that day
    """
    date: date
    benchmark_value: Decimal
    leveraged_value: Decimal
    total: Decimal
    shift_amount: Decimal = Decimal("0.00")
    contribution: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class SimulationResult:
    """
    Terminal state of a simulation plus its day-by-day log.

    Final values keep full float precision; only the log is rounded.
    The log excludes the anchor day.
    """
    final_benchmark_value: float
    final_leveraged_value: float
    final_total: float
    daily_log: tuple[DailyLogEntry, ...] = field(default_factory=tuple)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the daily log to a DataFrame."""
        records = []
        for entry in self.daily_log:
            records.append({
                "date": entry.date,
                "benchmark_value": float(entry.benchmark_value),
                "leveraged_value": float(entry.leveraged_value),
                "total": float(entry.total),
                "shift_amount": float(entry.shift_amount),
                "contribution": float(entry.contribution),
            })
        return pd.DataFrame(
            records,
            columns=[
                "date",
                "benchmark_value",
                "leveraged_value",
                "total",
                "shift_amount",
                "contribution",
            ],
        )

    def save_outputs(self, output_dir: str | Path) -> dict[str, Path]:
        """
        Save the daily log to a CSV file.

        Args:
            output_dir: Directory to save outputs

        Returns:
            Dictionary mapping output type to file path
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        daily_path = output_dir / "daily_log.csv"
        self.to_dataframe().to_csv(daily_path, index=False)

        return {"daily_log": daily_path}


@dataclass
class RunLogEntry:
    """
    Entry for the append-only run log.

    Attributes:
        timestamp: When the action occurred
        action_type: Type of action
        run_id: Run involved (if applicable)
        details: JSON-serializable details dictionary
    """
    timestamp: datetime
    action_type: ActionType
    run_id: Optional[str]
    details: dict

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        run_id: Optional[str],
        details: dict,
    ) -> "RunLogEntry":
        """Factory method with auto-generated timestamp."""
        return cls(
            timestamp=datetime.now(),
            action_type=action_type,
            run_id=run_id,
            details=details,
        )
