"""
Performance metrics calculation for simulation results.

Calculates standard portfolio performance metrics including:
- Time-weighted total return and CAGR
- Volatility (annualized)
- Maximum Drawdown
- Dip-shift activity (days, dollars shifted)
- Comparison against holding the benchmark only

Daily returns are measured net of contributions, so new money does not
count as performance.
"""

import json
import math
from dataclasses import asdict, dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from dip_shift.models import DailyLogEntry, SimulationConfig
from dip_shift.simulation.backtest import BacktestResult
from dip_shift.simulation.engine import RebalancingSimulator

TRADING_DAYS_PER_YEAR = 252


@dataclass
class SimulationMetrics:
    """Container for simulation performance metrics."""

    # Time period
    start_date: str
    end_date: str
    trading_days: int

    # Money in
    initial_capital: float
    total_contributions: float
    contribution_count: int
    total_invested: float

    # Final state
    final_benchmark_value: float
    final_leveraged_value: float
    final_total: float
    leveraged_share: float
    net_gain: float

    # Returns
    total_return: float
    cagr: float
    annualized_volatility: float

    # Risk
    max_drawdown: float
    max_drawdown_date: str

    # Strategy activity
    dip_days: int
    total_shifted: float

    # Benchmark-only comparison (same contributions, no shifting)
    buy_and_hold_final: Optional[float] = None
    buy_and_hold_return: Optional[float] = None
    excess_return: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_json(self, path: Path) -> None:
        """Save metrics to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_json(cls, path: Path) -> "SimulationMetrics":
        """Load metrics from JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        return cls(**data)


def calculate_metrics(
    backtest: BacktestResult,
    include_buy_and_hold: bool = True,
) -> SimulationMetrics:
    """
    Calculate performance metrics from a backtest result.

    Args:
        backtest: Completed backtest
        include_buy_and_hold: Also simulate the benchmark-only portfolio

    Returns:
        SimulationMetrics with all calculated values
    """
    daily_log = backtest.daily_log
    if not daily_log:
        raise ValueError("No daily log entries provided for metrics calculation")

    initial_capital = float(backtest.config.initial_capital)
    returns = daily_returns(daily_log, initial_capital)

    total_return = float(np.prod(1.0 + returns.to_numpy()) - 1.0)
    years = (backtest.end_date - backtest.start_date).days / 365.25
    cagr = _annualize(total_return, years)

    if len(returns) > 1:
        annualized_volatility = float(returns.std(ddof=1) * math.sqrt(TRADING_DAYS_PER_YEAR))
    else:
        annualized_volatility = 0.0

    max_drawdown, max_drawdown_date = _max_drawdown(returns)

    total_contributions = float(sum(e.contribution for e in daily_log))
    total_invested = initial_capital + total_contributions
    result = backtest.result

    metrics = SimulationMetrics(
        start_date=backtest.start_date.isoformat(),
        end_date=backtest.end_date.isoformat(),
        trading_days=len(daily_log),
        initial_capital=initial_capital,
        total_contributions=total_contributions,
        contribution_count=sum(1 for e in daily_log if e.contribution > 0),
        total_invested=total_invested,
        final_benchmark_value=result.final_benchmark_value,
        final_leveraged_value=result.final_leveraged_value,
        final_total=result.final_total,
        leveraged_share=(
            result.final_leveraged_value / result.final_total
            if result.final_total > 0 else 0.0
        ),
        net_gain=result.final_total - total_invested,
        total_return=total_return,
        cagr=cagr,
        annualized_volatility=annualized_volatility,
        max_drawdown=max_drawdown,
        max_drawdown_date=max_drawdown_date,
        dip_days=sum(1 for e in daily_log if e.shift_amount > 0),
        total_shifted=float(sum(e.shift_amount for e in daily_log)),
    )

    if include_buy_and_hold:
        hold_final, hold_return = buy_and_hold(backtest)
        metrics.buy_and_hold_final = hold_final
        metrics.buy_and_hold_return = hold_return
        metrics.excess_return = total_return - hold_return

    return metrics


def daily_returns(
    daily_log: tuple[DailyLogEntry, ...] | list[DailyLogEntry],
    initial_capital: float,
) -> pd.Series:
    """
    Compute daily portfolio returns net of contributions.

    Args:
        daily_log: Daily log entries (anchor day excluded)
        initial_capital: Portfolio value on the anchor day

    Returns:
        Series of daily returns indexed by date
    """
    totals = np.array([float(e.total) for e in daily_log])
    contributions = np.array([float(e.contribution) for e in daily_log])
    previous = np.concatenate(([initial_capital], totals[:-1]))

    with np.errstate(divide="ignore", invalid="ignore"):
        returns = np.where(previous > 0, (totals - contributions) / previous - 1.0, 0.0)

    return pd.Series(returns, index=[e.date for e in daily_log], name="daily_return")


def buy_and_hold(backtest: BacktestResult) -> tuple[float, float]:
    """
    Simulate holding only the benchmark over the same window.

    Uses the same capital and contributions with dip_multiplier = 0,
    so nothing is ever shifted into the leveraged instrument.

    Args:
        backtest: Completed backtest

    Returns:
        Tuple of (final value, time-weighted total return)
    """
    hold_config: SimulationConfig = replace(backtest.config, dip_multiplier=Decimal("0"))
    hold_result = RebalancingSimulator(hold_config).run(backtest.records)

    returns = daily_returns(hold_result.daily_log, float(hold_config.initial_capital))
    hold_return = float(np.prod(1.0 + returns.to_numpy()) - 1.0)
    return hold_result.final_total, hold_return


def _annualize(total_return: float, years: float) -> float:
    if years <= 0 or total_return <= -1.0:
        return 0.0
    return (1.0 + total_return) ** (1.0 / years) - 1.0


def _max_drawdown(returns: pd.Series) -> tuple[float, str]:
    """Maximum peak-to-trough decline of the growth-of-one curve."""
    wealth = (1.0 + returns).cumprod()
    running_peak = np.maximum(wealth.cummax(), 1.0)
    drawdowns = wealth / running_peak - 1.0

    if drawdowns.empty or drawdowns.min() >= 0:
        return 0.0, ""

    trough = drawdowns.idxmin()
    return float(drawdowns.min()), trough.isoformat()
