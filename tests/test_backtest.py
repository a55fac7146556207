"""
Tests for backtest orchestration and run logging.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from dip_shift.data.providers import CsvPriceProvider
from dip_shift.errors import DataError, ValidationError
from dip_shift.logging import RunLogger
from dip_shift.models import ActionType, SimulationConfig
from dip_shift.simulation import (
    BacktestResult,
    run_backtest,
    run_backtest_from_files,
    run_backtest_with_provider,
)
from dip_shift.simulation.backtest import new_run_id


class TestRunBacktest:
    """Tests for run_backtest on in-memory series."""

    def test_mismatched_dates_are_dropped(self, sp500_series, upro_series):
        backtest = run_backtest(sp500_series, upro_series)

        assert isinstance(backtest, BacktestResult)
        assert [r.date for r in backtest.records] == [
            date(2024, 1, 2),
            date(2024, 1, 3),
            date(2024, 1, 5),
            date(2024, 1, 8),
            date(2024, 1, 9),
        ]
        assert backtest.benchmark_dropped == 1
        assert backtest.leveraged_dropped == 1
        assert len(backtest.daily_log) == 4

    def test_date_window(self, sp500_series, upro_series):
        config = SimulationConfig(start_date=date(2024, 1, 3), end_date=date(2024, 1, 8))

        backtest = run_backtest(sp500_series, upro_series, config=config)

        assert backtest.start_date == date(2024, 1, 3)
        assert backtest.end_date == date(2024, 1, 8)
        assert len(backtest.daily_log) == 2

    def test_window_too_narrow(self, sp500_series, upro_series):
        config = SimulationConfig(start_date=date(2024, 1, 9), end_date=date(2024, 1, 31))

        with pytest.raises(DataError):
            run_backtest(sp500_series, upro_series, config=config)

    def test_invalid_config_rejected_before_matching(self):
        """Configuration errors win even when there is no data at all."""
        config = SimulationConfig(initial_capital=Decimal("0"))

        with pytest.raises(ValidationError):
            run_backtest([], [], config=config)

    def test_no_overlap(self, sp500_series):
        with pytest.raises(DataError):
            run_backtest(sp500_series, [])

    def test_properties(self, sp500_series, upro_series):
        config = SimulationConfig(initial_capital=Decimal("1000"), monthly_contribution=Decimal("50"))

        backtest = run_backtest(sp500_series, upro_series, config=config)

        # All dates fall in January, so no contribution is ever made
        assert backtest.total_contributions == Decimal("0")
        assert backtest.total_invested == Decimal("1000")
        assert backtest.initial_value == Decimal("1000")
        assert backtest.final_value == backtest.result.final_total

    def test_progress_callback(self, sp500_series, upro_series):
        messages = []

        run_backtest(sp500_series, upro_series, progress_callback=messages.append)

        assert messages[0].startswith("Matching")
        assert messages[-1] == "Backtest complete!"

    def test_same_inputs_same_result(self, sp500_series, upro_series):
        first = run_backtest(sp500_series, upro_series)
        second = run_backtest(sp500_series, upro_series)

        assert first.result == second.result
        assert first.run_id != second.run_id


class TestRunLogging:
    """Tests for the JSONL run log written during a backtest."""

    def test_steps_logged_in_order(self, sp500_series, upro_series, tmp_path):
        run_logger = RunLogger(tmp_path / "logs" / "run_log.jsonl")

        backtest = run_backtest(sp500_series, upro_series, run_logger=run_logger, run_id="test_run")

        entries = run_logger.read_log()
        assert backtest.run_id == "test_run"
        assert [e.action_type for e in entries] == [
            ActionType.CONFIG_LOADED,
            ActionType.SERIES_MATCHED,
            ActionType.RANGE_FILTERED,
            ActionType.SIMULATION_COMPLETED,
        ]
        assert all(e.run_id == "test_run" for e in entries)

    def test_matched_details(self, sp500_series, upro_series, tmp_path):
        run_logger = RunLogger(tmp_path / "run_log.jsonl")

        run_backtest(sp500_series, upro_series, run_logger=run_logger)

        matched = run_logger.filter_by_action_type(ActionType.SERIES_MATCHED)[0]
        assert matched.details["matched_count"] == 5
        assert matched.details["benchmark_dropped"] == 1
        assert matched.details["leveraged_dropped"] == 1
        assert matched.details["first_date"] == "2024-01-02"

    def test_decimals_serialized_as_strings(self, sp500_series, upro_series, tmp_path):
        run_logger = RunLogger(tmp_path / "run_log.jsonl")

        run_backtest(sp500_series, upro_series, run_logger=run_logger)

        config_entry = run_logger.filter_by_action_type(ActionType.CONFIG_LOADED)[0]
        assert config_entry.details["initial_capital"] == "100"
        assert config_entry.details["start_date"] is None

    def test_filter_by_run(self, sp500_series, upro_series, tmp_path):
        run_logger = RunLogger(tmp_path / "run_log.jsonl")

        run_backtest(sp500_series, upro_series, run_logger=run_logger, run_id="first")
        run_backtest(sp500_series, upro_series, run_logger=run_logger, run_id="second")

        assert len(run_logger.read_log()) == 8
        assert len(run_logger.filter_by_run("second")) == 4

    def test_read_missing_log(self, tmp_path):
        assert RunLogger(tmp_path / "none.jsonl").read_log() == []

    def test_new_run_id(self):
        run_id = new_run_id()
        assert run_id.startswith("backtest_")
        assert len(run_id) == len("backtest_") + 8


class TestRunBacktestFromFiles:
    """Tests for the file-based entry point."""

    def test_loads_and_simulates(self, price_files, tmp_path):
        benchmark_path, leveraged_path = price_files
        run_logger = RunLogger(tmp_path / "run_log.jsonl")
        config = SimulationConfig(monthly_contribution=Decimal("100"))

        backtest = asyncio.run(
            run_backtest_from_files(
                benchmark_path,
                leveraged_path,
                config=config,
                benchmark_symbol="SPX",
                leveraged_symbol="UPRO",
                run_logger=run_logger,
            )
        )

        assert len(backtest.daily_log) == 4
        # Feb 1 is the first record of a new month
        feb_first = backtest.daily_log[2]
        assert feb_first.date == date(2024, 2, 1)
        assert feb_first.contribution == Decimal("100.00")
        assert backtest.total_contributions == Decimal("100.00")

        loaded = run_logger.filter_by_action_type(ActionType.SERIES_LOADED)
        assert [e.details["symbol"] for e in loaded] == ["SPX", "UPRO"]
        assert loaded[0].details["num_records"] == 5
        assert {e.run_id for e in run_logger.read_log()} == {backtest.run_id}

    def test_missing_file(self, price_files, tmp_path):
        benchmark_path, _ = price_files

        with pytest.raises(FileNotFoundError):
            asyncio.run(run_backtest_from_files(benchmark_path, tmp_path / "missing.csv"))


class TestRunBacktestWithProvider:
    """Tests for the provider-based entry point."""

    def test_csv_provider(self, price_files):
        benchmark_path, leveraged_path = price_files
        provider = CsvPriceProvider({"spx": benchmark_path, "upro": leveraged_path})
        config = SimulationConfig(end_date=date(2024, 1, 31))

        backtest = run_backtest_with_provider(provider, "SPX", "UPRO", config=config)

        assert backtest.benchmark_symbol == "SPX"
        assert backtest.end_date == date(2024, 1, 31)
        assert len(backtest.daily_log) == 2

    def test_invalid_config(self, price_files):
        benchmark_path, leveraged_path = price_files
        provider = CsvPriceProvider({"SPX": benchmark_path, "UPRO": leveraged_path})

        with pytest.raises(ValidationError):
            run_backtest_with_provider(
                provider, "SPX", "UPRO",
                config=SimulationConfig(dip_multiplier=Decimal("-1")),
            )
