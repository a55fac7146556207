"""
Command-line interface for the dip-shift simulator.

Provides commands for:
- run: Backtest the strategy on two price files
- fetch: Download a daily price series from Yahoo Finance
- init-config: Write a default configuration file
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from dip_shift import __version__
from dip_shift.config import (
    apply_overrides,
    load_simulation_config,
    parse_date,
    write_config,
)
from dip_shift.errors import DipShiftError, ValidationError
from dip_shift.logging import RunLogger
from dip_shift.models import RunSettings, SimulationConfig


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="dip-shift")
def main():
    """
    Dip-Shift Rebalancing Simulator.

    Backtests holding a benchmark index and moving each day's dollar
    loss into a leveraged fund that tracks it. Paper simulation only.
    """
    pass


@main.command()
@click.option(
    "--benchmark", "-b",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to benchmark price CSV file (date, close)",
)
@click.option(
    "--leveraged", "-l",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to leveraged instrument price CSV file (date, close)",
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to simulation configuration YAML file",
)
@click.option(
    "--initial-capital",
    type=str,
    default=None,
    help="Initial capital (default: 100)",
)
@click.option(
    "--monthly-contribution",
    type=str,
    default=None,
    help="Amount added on the first trading day of each month (default: 0)",
)
@click.option(
    "--dip-multiplier",
    type=str,
    default=None,
    help="Multiplier applied to each day's loss when shifting (default: 1.0)",
)
@click.option(
    "--start-date",
    type=str,
    default=None,
    help="First date of the window, inclusive (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=str,
    default=None,
    help="Last date of the window, inclusive (YYYY-MM-DD)",
)
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Output directory. Defaults to config output_dir.",
)
@click.option(
    "--show-daily",
    is_flag=True,
    help="Print the daily values table",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable debug logging",
)
def run(
    benchmark: str,
    leveraged: str,
    config: Optional[str],
    initial_capital: Optional[str],
    monthly_contribution: Optional[str],
    dip_multiplier: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    output_dir: Optional[str],
    show_daily: bool,
    verbose: bool,
):
    """
    Run a dip-shift backtest.

    Starts with all capital in the benchmark. Each day the benchmark
    closes lower, the dollar loss (times the dip multiplier) moves into
    the leveraged instrument.

    Example:
        dip-shift run -b sp500.csv -l upro.csv --monthly-contribution 100
    """
    from dip_shift.simulation import (
        calculate_metrics,
        generate_quick_summary,
        generate_report,
        run_backtest_from_files,
    )

    _configure_logging(verbose)

    sim_config = SimulationConfig()
    settings = RunSettings()
    if config:
        try:
            sim_config, settings = load_simulation_config(config)
        except ValidationError as e:
            click.echo(f"Error loading config: {e}", err=True)
            sys.exit(1)

    try:
        sim_config = apply_overrides(sim_config, {
            "initial_capital": initial_capital,
            "monthly_contribution": monthly_contribution,
            "dip_multiplier": dip_multiplier,
            "start_date": start_date,
            "end_date": end_date,
        })
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    out_dir = Path(output_dir or settings.output_dir)
    run_logger = RunLogger(out_dir / "run_log.jsonl")

    click.echo(f"\n{'='*60}")
    click.echo("  Dip-Shift Backtest Simulation")
    click.echo(f"{'='*60}")
    click.echo(f"  Benchmark:            {settings.benchmark_symbol} ({benchmark})")
    click.echo(f"  Leveraged:            {settings.leveraged_symbol} ({leveraged})")
    click.echo(f"  Initial Capital:      ${sim_config.initial_capital:,.2f}")
    click.echo(f"  Monthly Contribution: ${sim_config.monthly_contribution:,.2f}")
    click.echo(f"  Dip Multiplier:       {sim_config.dip_multiplier}")
    click.echo(f"{'='*60}\n")

    def progress(msg: str):
        click.echo(f"  {msg}")

    try:
        result = asyncio.run(
            run_backtest_from_files(
                benchmark,
                leveraged,
                config=sim_config,
                benchmark_symbol=settings.benchmark_symbol,
                leveraged_symbol=settings.leveraged_symbol,
                run_logger=run_logger,
                progress_callback=progress,
            )
        )
    except (DipShiftError, OSError) as e:
        click.echo(f"\nError running backtest: {e}", err=True)
        sys.exit(1)

    metrics = calculate_metrics(result)

    run_dir = out_dir / result.run_id
    try:
        paths = generate_report(result, run_dir, metrics=metrics, include_daily_details=show_daily)
    except OSError as e:
        click.echo(f"\nError generating report: {e}", err=True)
        sys.exit(1)

    if show_daily:
        click.echo()
        click.echo(f"  {'Date':<12}{settings.benchmark_symbol:>14}{settings.leveraged_symbol:>14}{'Total':>14}")
        for entry in result.daily_log:
            click.echo(
                f"  {entry.date.isoformat():<12}{entry.benchmark_value:>14,.2f}"
                f"{entry.leveraged_value:>14,.2f}{entry.total:>14,.2f}"
            )

    click.echo(generate_quick_summary(result, metrics))

    click.echo(f"Outputs saved to: {run_dir}")
    for name, path in paths.items():
        click.echo(f"  - {name}: {path.name}")


@main.command()
@click.argument("symbol")
@click.option(
    "--start-date",
    type=str,
    default=None,
    help="Start date (YYYY-MM-DD). Defaults to earliest available.",
)
@click.option(
    "--end-date",
    type=str,
    default=None,
    help="End date (YYYY-MM-DD). Defaults to today.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output CSV path. Defaults to data/<symbol>.csv",
)
def fetch(symbol: str, start_date: Optional[str], end_date: Optional[str], output: Optional[str]):
    """
    Download daily closes for SYMBOL from Yahoo Finance.

    Example:
        dip-shift fetch ^GSPC --start-date 2015-01-01 -o sp500.csv
    """
    from dip_shift.data.loaders import save_price_series
    from dip_shift.data.providers import DataProviderError, YFinanceProvider

    try:
        start = parse_date(start_date, "start_date") if start_date else None
        end = parse_date(end_date, "end_date") if end_date else None
    except ValidationError as e:
        click.echo(f"{e}", err=True)
        sys.exit(1)

    safe_name = symbol.replace("^", "").replace("/", "_").lower()
    output_path = Path(output) if output else Path("data") / f"{safe_name}.csv"

    click.echo(f"Fetching {symbol} from Yahoo Finance...")
    try:
        provider = YFinanceProvider()
        records = provider.get_series(symbol, start, end)
    except DataProviderError as e:
        click.echo(f"Error fetching prices: {e}", err=True)
        sys.exit(1)

    save_price_series(records, output_path)
    click.echo(f"  {len(records)} closes ({records[0].date} to {records[-1].date})")
    click.echo(f"  Saved: {output_path}")


@main.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite an existing file",
)
def init_config(path: str, force: bool):
    """
    Write a configuration file with default settings to PATH.
    """
    config_path = Path(path)
    if config_path.exists() and not force:
        click.echo(f"{config_path} already exists. Use --force to overwrite.", err=True)
        sys.exit(1)

    write_config(SimulationConfig(), config_path)
    click.echo(f"Configuration written to {config_path}")


if __name__ == "__main__":
    main()
