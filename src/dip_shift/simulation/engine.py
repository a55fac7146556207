"""
Core simulation engine for the dip-shift strategy.

The simulation is a single forward pass over matched daily records. The
portfolio starts fully in the benchmark on the anchor day. On every later
day, in this order:

1. Growth: each holding is re-valued by its own instrument's price ratio.
2. Dip-shift: if the benchmark closed lower, the benchmark holding's
   fractional loss (times dip_multiplier) is moved into the leveraged
   holding. The amount is clamped to the benchmark holding.
3. Contribution: on the first record of a new calendar month, the monthly
   contribution is added to the benchmark holding.
4. Log: values are recorded rounded to cents. The running state keeps
   full float precision.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from dip_shift.config import validate_simulation_config
from dip_shift.errors import DataError
from dip_shift.models import (
    DailyLogEntry,
    MatchedRecord,
    SimulationConfig,
    SimulationResult,
)
from dip_shift.simulation.matching import MIN_RECORDS
from dip_shift.simulation.results import aggregate_result

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_cents(value: float) -> Decimal:
    """Round a float amount to cents, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class SimulationState:
    """Running state of a simulation pass."""
    benchmark_value: float
    leveraged_value: float
    last_month: tuple[int, int]  # (year, month) of the previous record

    @property
    def total_value(self) -> float:
        return self.benchmark_value + self.leveraged_value


@dataclass(frozen=True)
class DayOutcome:
    """Amounts moved by the rebalancing steps of one day."""
    shift_amount: float = 0.0
    contribution: float = 0.0


class RebalancingSimulator:
    """
    Dip-shift rebalancing simulator.

    Stateless between runs; each call to run() owns its SimulationState.
    """

    def __init__(
        self,
        config: SimulationConfig,
        benchmark_symbol: str = "benchmark",
        leveraged_symbol: str = "leveraged",
    ):
        """
        Initialize the simulator.

        Args:
            config: Simulation configuration
            benchmark_symbol: Benchmark series identifier for error messages
            leveraged_symbol: Leveraged series identifier for error messages

        Raises:
            ValidationError: If the configuration is invalid
        """
        validate_simulation_config(config)

        self.config = config
        self.benchmark_symbol = benchmark_symbol
        self.leveraged_symbol = leveraged_symbol

        self._initial_capital = float(config.initial_capital)
        self._monthly_contribution = float(config.monthly_contribution)
        self._dip_multiplier = float(config.dip_multiplier)

    def run(self, records: Sequence[MatchedRecord]) -> SimulationResult:
        """
        Simulate the strategy over a matched (and optionally filtered) sequence.

        Args:
            records: Matched records sorted ascending by date, at least 2

        Returns:
            SimulationResult with len(records) - 1 daily log entries

        Raises:
            DataError: If fewer than 2 records are given or a close is not positive
        """
        if len(records) < MIN_RECORDS:
            raise DataError(
                f"Simulation needs at least {MIN_RECORDS} records, got {len(records)}"
            )

        state = self.initialize(records[0])
        daily_log: list[DailyLogEntry] = []

        for previous, current in zip(records, records[1:]):
            outcome = self.step(state, previous, current)
            daily_log.append(self.record(state, current.date, outcome))

        logger.debug(
            "Simulated %d days from %s to %s, final total %.2f",
            len(daily_log), records[0].date, records[-1].date, state.total_value,
        )

        return aggregate_result(state, daily_log, num_records=len(records))

    def initialize(self, anchor: MatchedRecord) -> SimulationState:
        """
        Create the anchor-day state: everything in the benchmark.

        Args:
            anchor: First record of the sequence

        Returns:
            Initial SimulationState
        """
        return SimulationState(
            benchmark_value=self._initial_capital,
            leveraged_value=0.0,
            last_month=_month_key(anchor.date),
        )

    def step(
        self,
        state: SimulationState,
        previous: MatchedRecord,
        current: MatchedRecord,
    ) -> DayOutcome:
        """
        Advance the state by one trading day.

        Args:
            state: Running state, updated in place
            previous: Record of the prior trading day
            current: Record of the day being simulated

        Returns:
            DayOutcome with the amounts shifted and contributed
        """
        prev_benchmark = self._checked_close(
            previous.benchmark_close, self.benchmark_symbol, previous.date
        )
        curr_benchmark = self._checked_close(
            current.benchmark_close, self.benchmark_symbol, current.date
        )
        prev_leveraged = self._checked_close(
            previous.leveraged_close, self.leveraged_symbol, previous.date
        )
        curr_leveraged = self._checked_close(
            current.leveraged_close, self.leveraged_symbol, current.date
        )

        self.apply_growth(
            state,
            curr_benchmark / prev_benchmark,
            curr_leveraged / prev_leveraged,
        )

        daily_change = (curr_benchmark - prev_benchmark) / prev_benchmark
        shift_amount = self.apply_dip_shift(state, daily_change)

        contribution = self.apply_contribution(state, current.date)

        return DayOutcome(shift_amount=shift_amount, contribution=contribution)

    def apply_growth(
        self,
        state: SimulationState,
        benchmark_ratio: float,
        leveraged_ratio: float,
    ) -> None:
        """Scale each holding by its own instrument's day-over-day ratio."""
        state.benchmark_value *= benchmark_ratio
        state.leveraged_value *= leveraged_ratio

    def apply_dip_shift(self, state: SimulationState, daily_change: float) -> float:
        """
        Move the benchmark's dollar loss into the leveraged holding.

        With dip_multiplier > 1 the raw amount can exceed the benchmark
        holding; it is clamped so the benchmark holding never goes negative.

        Args:
            state: Running state, updated in place
            daily_change: Benchmark fractional change for the day

        Returns:
            Amount shifted (0.0 on non-negative days)
        """
        if daily_change >= 0:
            return 0.0

        shift_amount = state.benchmark_value * abs(daily_change) * self._dip_multiplier
        shift_amount = min(shift_amount, state.benchmark_value)

        state.benchmark_value -= shift_amount
        state.leveraged_value += shift_amount
        return shift_amount

    def apply_contribution(self, state: SimulationState, current_date: date) -> float:
        """
        Add the monthly contribution on the first record of a new month.

        The month is compared with the previous record's month, so a
        month whose first trading days are holidays still contributes once.

        Args:
            state: Running state, updated in place
            current_date: Date of the day being simulated

        Returns:
            Amount contributed (0.0 if none)
        """
        month = _month_key(current_date)
        is_new_month = month != state.last_month
        state.last_month = month

        if self._monthly_contribution <= 0 or not is_new_month:
            return 0.0

        state.benchmark_value += self._monthly_contribution
        return self._monthly_contribution

    def record(
        self,
        state: SimulationState,
        current_date: date,
        outcome: DayOutcome,
    ) -> DailyLogEntry:
        """Build the cent-rounded log entry for a day."""
        return DailyLogEntry(
            date=current_date,
            benchmark_value=to_cents(state.benchmark_value),
            leveraged_value=to_cents(state.leveraged_value),
            total=to_cents(state.total_value),
            shift_amount=to_cents(outcome.shift_amount),
            contribution=to_cents(outcome.contribution),
        )

    @staticmethod
    def _checked_close(close: Decimal, series: str, day: date) -> float:
        if close <= 0:
            raise DataError(
                f"Non-positive close {close} in {series} series on {day}",
                series=series,
                date=day,
            )
        return float(close)


def run_simulation(
    records: Sequence[MatchedRecord],
    config: SimulationConfig,
) -> SimulationResult:
    """
    Convenience function to simulate a matched sequence.

    Args:
        records: Matched records sorted ascending by date
        config: Simulation configuration

    Returns:
        SimulationResult

    Raises:
        ValidationError: If the configuration is invalid
        DataError: If the records are insufficient or invalid
    """
    return RebalancingSimulator(config).run(records)


def _month_key(day: date) -> tuple[int, int]:
    return (day.year, day.month)
