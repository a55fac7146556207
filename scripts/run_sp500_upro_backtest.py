"""
Compare dip multipliers on the S&P 500 and UPRO.

Downloads daily closes for ^GSPC and UPRO from Yahoo Finance, runs the
dip-shift backtest once per multiplier and prints a comparison table.
A full report is saved for every run under outputs/.

Usage:
    python scripts/run_sp500_upro_backtest.py
    python scripts/run_sp500_upro_backtest.py 2015-01-02 2024-12-31 0.5 1 2
"""

import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from dip_shift.config import parse_date
from dip_shift.data.providers import CsvPriceProvider, DataProviderError, YFinanceProvider
from dip_shift.data.loaders import save_price_series
from dip_shift.errors import DipShiftError
from dip_shift.logging import RunLogger
from dip_shift.models import SimulationConfig
from dip_shift.simulation import calculate_metrics, generate_report, run_backtest_with_provider

ROOT = Path(__file__).parent.parent

log_dir = ROOT / "logs"
log_dir.mkdir(exist_ok=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(log_dir / "backtests.log"),
        logging.StreamHandler(),
    ],
)
logger = logging.getLogger(__name__)

BENCHMARK = "^GSPC"
LEVERAGED = "UPRO"
# UPRO started trading in June 2009
DEFAULT_START = date(2009, 6, 26)
DEFAULT_MULTIPLIERS = [Decimal("0"), Decimal("0.5"), Decimal("1"), Decimal("2")]


def download_prices(start_date: date, end_date: date) -> CsvPriceProvider:
    """Download both series once and serve them from local files."""
    data_dir = ROOT / "data"
    provider = YFinanceProvider()
    paths = {}
    for symbol in (BENCHMARK, LEVERAGED):
        records = provider.get_series(symbol, start_date, end_date)
        path = data_dir / f"{symbol.replace('^', '').lower()}.csv"
        save_price_series(records, path)
        logger.info(f"Saved {len(records)} closes for {symbol} to {path}")
        paths[symbol] = path
    return CsvPriceProvider(paths)


def main(argv: list[str]) -> int:
    start_date = parse_date(argv[0], "start_date") if argv else DEFAULT_START
    end_date = parse_date(argv[1], "end_date") if len(argv) > 1 else date.today()
    multipliers = [Decimal(m) for m in argv[2:]] or DEFAULT_MULTIPLIERS

    print("=" * 60)
    print(f"DIP-SHIFT BACKTEST - {BENCHMARK} / {LEVERAGED}")
    print(f"{start_date} to {end_date}")
    print("=" * 60)

    try:
        provider = download_prices(start_date, end_date)
    except DataProviderError as e:
        logger.error(f"Download failed: {e}")
        return 1

    output_dir = ROOT / "outputs"
    run_logger = RunLogger(output_dir / "run_log.jsonl")

    rows = []
    for multiplier in multipliers:
        config = SimulationConfig(
            initial_capital=Decimal("10000"),
            monthly_contribution=Decimal("500"),
            dip_multiplier=multiplier,
            start_date=start_date,
            end_date=end_date,
        )
        try:
            backtest = run_backtest_with_provider(
                provider, BENCHMARK, LEVERAGED, config=config, run_logger=run_logger
            )
        except DipShiftError as e:
            logger.error(f"Backtest with multiplier {multiplier} failed: {e}")
            return 1

        metrics = calculate_metrics(backtest, include_buy_and_hold=False)
        generate_report(backtest, output_dir / backtest.run_id, metrics=metrics)
        rows.append((multiplier, metrics))
        logger.info(f"Multiplier {multiplier}: final total ${metrics.final_total:,.2f}")

    print()
    print(f"{'Multiplier':>10}{'Final Total':>16}{'Return':>10}{'CAGR':>9}{'Max DD':>9}")
    for multiplier, metrics in rows:
        print(
            f"{str(multiplier):>10}{metrics.final_total:>16,.2f}"
            f"{metrics.total_return:>10.2%}{metrics.cagr:>9.2%}{metrics.max_drawdown:>9.2%}"
        )
    print("=" * 60)
    print(f"\nReports saved under: {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
