"""
Simulation module for the dip-shift simulator.

Provides date matching, the rebalancing engine, backtest orchestration,
performance metrics and reports.
"""

from dip_shift.simulation.matching import match_series, filter_by_date
from dip_shift.simulation.engine import RebalancingSimulator, SimulationState, run_simulation
from dip_shift.simulation.results import aggregate_result
from dip_shift.simulation.backtest import (
    BacktestResult,
    run_backtest,
    run_backtest_from_files,
    run_backtest_with_provider,
)
from dip_shift.simulation.metrics import calculate_metrics, SimulationMetrics
from dip_shift.simulation.report import generate_report, generate_quick_summary

__all__ = [
    "match_series",
    "filter_by_date",
    "RebalancingSimulator",
    "SimulationState",
    "run_simulation",
    "aggregate_result",
    "BacktestResult",
    "run_backtest",
    "run_backtest_from_files",
    "run_backtest_with_provider",
    "calculate_metrics",
    "SimulationMetrics",
    "generate_report",
    "generate_quick_summary",
]
