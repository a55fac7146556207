"""
Backtest orchestration for the dip-shift strategy.

Runs the full pipeline for one configuration: validate the configuration,
match the two price series by date, restrict to the date window, simulate,
and package the outcome with the inputs needed for reporting.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional, Sequence

from dip_shift.config import validate_simulation_config
from dip_shift.data.loaders import load_series_pair
from dip_shift.data.providers.base import PriceSeriesProvider
from dip_shift.logging import RunLogger
from dip_shift.models import (
    DailyLogEntry,
    MatchedRecord,
    PriceRecord,
    SimulationConfig,
    SimulationResult,
)
from dip_shift.simulation.engine import RebalancingSimulator
from dip_shift.simulation.matching import count_unmatched, filter_by_date, match_series

logger = logging.getLogger(__name__)


class BacktestResult:
    """Container for backtest results."""

    def __init__(
        self,
        run_id: str,
        config: SimulationConfig,
        records: tuple[MatchedRecord, ...],
        result: SimulationResult,
        benchmark_symbol: str = "benchmark",
        leveraged_symbol: str = "leveraged",
        benchmark_dropped: int = 0,
        leveraged_dropped: int = 0,
    ):
        self.run_id = run_id
        self.config = config
        self.records = records
        self.result = result
        self.benchmark_symbol = benchmark_symbol
        self.leveraged_symbol = leveraged_symbol
        self.benchmark_dropped = benchmark_dropped
        self.leveraged_dropped = leveraged_dropped

    @property
    def daily_log(self) -> tuple[DailyLogEntry, ...]:
        return self.result.daily_log

    @property
    def start_date(self) -> date:
        """Anchor day of the simulated window."""
        return self.records[0].date

    @property
    def end_date(self) -> date:
        return self.records[-1].date

    @property
    def initial_value(self) -> Decimal:
        return self.config.initial_capital

    @property
    def final_value(self) -> float:
        return self.result.final_total

    @property
    def total_contributions(self) -> Decimal:
        return sum((e.contribution for e in self.daily_log), Decimal("0"))

    @property
    def total_invested(self) -> Decimal:
        return self.config.initial_capital + self.total_contributions

    def save_outputs(self, output_dir: str | Path) -> dict[str, Path]:
        """
        Save backtest outputs to files.

        Args:
            output_dir: Directory to save outputs

        Returns:
            Dictionary mapping output type to file path
        """
        return self.result.save_outputs(output_dir)


def run_backtest(
    benchmark: Sequence[PriceRecord],
    leveraged: Sequence[PriceRecord],
    config: Optional[SimulationConfig] = None,
    benchmark_symbol: str = "benchmark",
    leveraged_symbol: str = "leveraged",
    run_logger: Optional[RunLogger] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
    run_id: Optional[str] = None,
) -> BacktestResult:
    """
    Run a complete dip-shift backtest on two in-memory price series.

    Args:
        benchmark: Benchmark price records, any order
        leveraged: Leveraged instrument price records, any order
        config: Simulation configuration (uses defaults if None)
        benchmark_symbol: Benchmark series identifier
        leveraged_symbol: Leveraged series identifier
        run_logger: Optional JSONL run logger
        progress_callback: Optional callback for progress updates
        run_id: Identifier for log entries (generated if None)

    Returns:
        BacktestResult containing the simulation result and its inputs

    Raises:
        ValidationError: If the configuration is invalid
        DataError: If the price data is insufficient or invalid
    """
    if config is None:
        config = SimulationConfig()

    validate_simulation_config(config)

    run_id = run_id or new_run_id()
    if run_logger:
        run_logger.log_config_loaded(run_id, config)

    if progress_callback:
        progress_callback("Matching price series by date...")

    matched = match_series(benchmark, leveraged)
    benchmark_dropped, leveraged_dropped = count_unmatched(benchmark, leveraged, matched)

    if benchmark_dropped or leveraged_dropped:
        logger.info(
            "Dropped unmatched dates: %d from %s, %d from %s",
            benchmark_dropped, benchmark_symbol, leveraged_dropped, leveraged_symbol,
        )
    if run_logger:
        run_logger.log_series_matched(run_id, matched, benchmark_dropped, leveraged_dropped)

    records = filter_by_date(matched, config.start_date, config.end_date)
    if run_logger:
        run_logger.log_range_filtered(run_id, records, config.start_date, config.end_date)

    if progress_callback:
        progress_callback(
            f"Simulating {len(records) - 1} trading days "
            f"({records[0].date} to {records[-1].date})..."
        )

    simulator = RebalancingSimulator(
        config,
        benchmark_symbol=benchmark_symbol,
        leveraged_symbol=leveraged_symbol,
    )
    result = simulator.run(records)

    logger.info(
        "Backtest %s complete: final total %.2f over %d days",
        run_id, result.final_total, len(result.daily_log),
    )
    if run_logger:
        run_logger.log_simulation_completed(run_id, result)

    if progress_callback:
        progress_callback("Backtest complete!")

    return BacktestResult(
        run_id=run_id,
        config=config,
        records=records,
        result=result,
        benchmark_symbol=benchmark_symbol,
        leveraged_symbol=leveraged_symbol,
        benchmark_dropped=benchmark_dropped,
        leveraged_dropped=leveraged_dropped,
    )


async def run_backtest_from_files(
    benchmark_path: str | Path,
    leveraged_path: str | Path,
    config: Optional[SimulationConfig] = None,
    benchmark_symbol: str = "benchmark",
    leveraged_symbol: str = "leveraged",
    run_logger: Optional[RunLogger] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> BacktestResult:
    """
    Load both price files concurrently, then run the backtest.

    Args:
        benchmark_path: Path to the benchmark price file
        leveraged_path: Path to the leveraged instrument price file
        config: Simulation configuration (uses defaults if None)
        benchmark_symbol: Benchmark series identifier
        leveraged_symbol: Leveraged series identifier
        run_logger: Optional JSONL run logger
        progress_callback: Optional callback for progress updates

    Returns:
        BacktestResult
    """
    if progress_callback:
        progress_callback("Loading price files...")

    run_id = new_run_id()
    benchmark, leveraged = await load_series_pair(benchmark_path, leveraged_path)

    if run_logger:
        run_logger.log_series_loaded(run_id, benchmark_symbol, len(benchmark), str(benchmark_path))
        run_logger.log_series_loaded(run_id, leveraged_symbol, len(leveraged), str(leveraged_path))

    return run_backtest(
        benchmark,
        leveraged,
        config=config,
        benchmark_symbol=benchmark_symbol,
        leveraged_symbol=leveraged_symbol,
        run_logger=run_logger,
        progress_callback=progress_callback,
        run_id=run_id,
    )


def run_backtest_with_provider(
    provider: PriceSeriesProvider,
    benchmark_symbol: str,
    leveraged_symbol: str,
    config: Optional[SimulationConfig] = None,
    run_logger: Optional[RunLogger] = None,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> BacktestResult:
    """
    Fetch both series from a provider, then run the backtest.

    The provider is asked for the configured date window only.

    Args:
        provider: Price series provider
        benchmark_symbol: Benchmark symbol to fetch
        leveraged_symbol: Leveraged instrument symbol to fetch
        config: Simulation configuration (uses defaults if None)
        run_logger: Optional JSONL run logger
        progress_callback: Optional callback for progress updates

    Returns:
        BacktestResult
    """
    if config is None:
        config = SimulationConfig()
    validate_simulation_config(config)
    run_id = new_run_id()

    if progress_callback:
        progress_callback(f"Fetching {benchmark_symbol} and {leveraged_symbol} from {provider.name}...")

    benchmark = provider.get_series(benchmark_symbol, config.start_date, config.end_date)
    leveraged = provider.get_series(leveraged_symbol, config.start_date, config.end_date)

    if run_logger:
        run_logger.log_series_loaded(run_id, benchmark_symbol, len(benchmark), provider.name)
        run_logger.log_series_loaded(run_id, leveraged_symbol, len(leveraged), provider.name)

    return run_backtest(
        benchmark,
        leveraged,
        config=config,
        benchmark_symbol=benchmark_symbol,
        leveraged_symbol=leveraged_symbol,
        run_logger=run_logger,
        progress_callback=progress_callback,
        run_id=run_id,
    )


def new_run_id() -> str:
    """Generate a short unique run identifier."""
    return f"backtest_{uuid.uuid4().hex[:8]}"
