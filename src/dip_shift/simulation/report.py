"""
Report generation for simulation results.

Generates human-readable markdown reports, JSON metric files and a daily
CSV summarizing a dip-shift backtest.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from dip_shift.simulation.backtest import BacktestResult
from dip_shift.simulation.metrics import SimulationMetrics, calculate_metrics


def generate_report(
    backtest: BacktestResult,
    output_dir: str | Path,
    metrics: Optional[SimulationMetrics] = None,
    include_daily_details: bool = False,
) -> dict[str, Path]:
    """
    Generate complete simulation report.

    Creates:
    - run_report.md: Human-readable markdown summary
    - metrics.json: Machine-readable metrics
    - daily_log.csv: Daily portfolio values

    Args:
        backtest: Completed backtest
        output_dir: Directory to save outputs
        metrics: Precomputed metrics (calculated if None)
        include_daily_details: Include the full daily table in markdown

    Returns:
        Dictionary mapping output type to file path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}

    if metrics is None:
        metrics = calculate_metrics(backtest)

    metrics_path = output_dir / "metrics.json"
    metrics.to_json(metrics_path)
    paths["metrics"] = metrics_path

    paths.update(backtest.save_outputs(output_dir))

    report_path = output_dir / "run_report.md"
    markdown = _generate_markdown_report(backtest, metrics, include_daily_details)
    with open(report_path, "w") as f:
        f.write(markdown)
    paths["report"] = report_path

    return paths


def _generate_markdown_report(
    backtest: BacktestResult,
    metrics: SimulationMetrics,
    include_daily_details: bool,
) -> str:
    """Generate markdown report content."""
    config = backtest.config

    lines = [
        "# Dip-Shift Backtest Report",
        "",
        f"**Run ID:** `{backtest.run_id}`",
        f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "---",
        "",
        "## Configuration",
        "",
        "| Setting | Value |",
        "|---------|-------|",
        f"| Benchmark | {backtest.benchmark_symbol} |",
        f"| Leveraged Instrument | {backtest.leveraged_symbol} |",
        f"| Initial Capital | ${config.initial_capital:,.2f} |",
        f"| Monthly Contribution | ${config.monthly_contribution:,.2f} |",
        f"| Dip Multiplier | {config.dip_multiplier} |",
        f"| Requested Window | {config.start_date or 'start'} to {config.end_date or 'end'} |",
        "",
        "## Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Start Date | {metrics.start_date} |",
        f"| End Date | {metrics.end_date} |",
        f"| Trading Days | {metrics.trading_days} |",
        f"| Total Invested | ${metrics.total_invested:,.2f} |",
        f"| Final {backtest.benchmark_symbol} Value | ${metrics.final_benchmark_value:,.2f} |",
        f"| Final {backtest.leveraged_symbol} Value | ${metrics.final_leveraged_value:,.2f} |",
        f"| Final Total | ${metrics.final_total:,.2f} |",
        f"| Net Gain | ${metrics.net_gain:,.2f} |",
        f"| Total Return | {metrics.total_return:.2%} |",
        f"| CAGR | {metrics.cagr:.2%} |",
        "",
    ]

    if metrics.buy_and_hold_final is not None:
        lines.extend([
            f"## Comparison vs {backtest.benchmark_symbol} Only",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Buy-and-Hold Final Value | ${metrics.buy_and_hold_final:,.2f} |",
            f"| Buy-and-Hold Return | {metrics.buy_and_hold_return:.2%} |",
            f"| Strategy Return | {metrics.total_return:.2%} |",
            f"| Excess Return | {metrics.excess_return:+.2%} |",
            "",
        ])

    lines.extend([
        "## Risk",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Annualized Volatility | {metrics.annualized_volatility:.2%} |",
        f"| Max Drawdown | {metrics.max_drawdown:.2%} |",
        f"| Max Drawdown Date | {metrics.max_drawdown_date or '-'} |",
        "",
        "## Strategy Activity",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Dip Days | {metrics.dip_days} |",
        f"| Total Shifted | ${metrics.total_shifted:,.2f} |",
        f"| Contributions | {metrics.contribution_count} (${metrics.total_contributions:,.2f}) |",
        f"| Final {backtest.leveraged_symbol} Share | {metrics.leveraged_share:.2%} |",
        f"| Unmatched Dates Dropped | {backtest.benchmark_dropped} {backtest.benchmark_symbol}, "
        f"{backtest.leveraged_dropped} {backtest.leveraged_symbol} |",
        "",
    ])

    if include_daily_details:
        lines.extend([
            "## Daily Values",
            "",
            f"| Date | {backtest.benchmark_symbol} | {backtest.leveraged_symbol} | Total | Shifted | Contributed |",
            "|------|------|------|-------|---------|-------------|",
        ])
        for entry in backtest.daily_log:
            lines.append(
                f"| {entry.date} | {entry.benchmark_value:,.2f} | {entry.leveraged_value:,.2f} "
                f"| {entry.total:,.2f} | {entry.shift_amount:,.2f} | {entry.contribution:,.2f} |"
            )
        lines.append("")

    lines.extend([
        "---",
        "",
        "*Paper simulation only. Transaction costs, taxes and slippage are not modeled.*",
        "",
    ])

    return "\n".join(lines)


def generate_quick_summary(
    backtest: BacktestResult,
    metrics: Optional[SimulationMetrics] = None,
) -> str:
    """
    Generate a short console summary of a backtest.

    Args:
        backtest: Completed backtest
        metrics: Precomputed metrics (calculated if None)

    Returns:
        Multi-line summary string
    """
    if metrics is None:
        metrics = calculate_metrics(backtest)

    lines = [
        "",
        "=" * 60,
        "  BACKTEST RESULTS",
        "=" * 60,
        f"  Period:              {metrics.start_date} to {metrics.end_date}",
        f"  Trading Days:        {metrics.trading_days}",
        f"  Total Invested:      ${metrics.total_invested:,.2f}",
        f"  Final {backtest.benchmark_symbol + ':':<14}${metrics.final_benchmark_value:,.2f}",
        f"  Final {backtest.leveraged_symbol + ':':<14}${metrics.final_leveraged_value:,.2f}",
        f"  Final Total:         ${metrics.final_total:,.2f}",
        f"  Total Return:        {metrics.total_return:.2%}",
        f"  Max Drawdown:        {metrics.max_drawdown:.2%}",
        f"  Dip Days:            {metrics.dip_days}",
    ]
    if metrics.buy_and_hold_final is not None:
        lines.append(f"  Buy-and-Hold Final:  ${metrics.buy_and_hold_final:,.2f}")
        lines.append(f"  Excess Return:       {metrics.excess_return:+.2%}")
    lines.extend(["=" * 60, ""])

    return "\n".join(lines)
