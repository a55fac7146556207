"""
Pytest fixtures for the dip-shift simulator tests.

Provides common price series, configurations and file helpers used
across test modules.
"""

from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from dip_shift.models import MatchedRecord, PriceRecord, SimulationConfig


def _build_matched(
    benchmark_closes: list,
    leveraged_closes: list,
    start: date = date(2024, 1, 2),
) -> tuple[MatchedRecord, ...]:
    """Build consecutive-day matched records from two close lists."""
    return tuple(
        MatchedRecord(
            date=start + timedelta(days=i),
            benchmark_close=Decimal(str(a)),
            leveraged_close=Decimal(str(b)),
        )
        for i, (a, b) in enumerate(zip(benchmark_closes, leveraged_closes))
    )


def _build_series(closes_by_date: dict[date, str]) -> list[PriceRecord]:
    """Build price records in the given (insertion) order."""
    return [PriceRecord(date=d, close=Decimal(c)) for d, c in closes_by_date.items()]


@pytest.fixture
def default_config() -> SimulationConfig:
    """Configuration with all defaults (100 capital, no contributions, 1.0x)."""
    return SimulationConfig()


@pytest.fixture
def basic_dip_records() -> tuple[MatchedRecord, ...]:
    """Three days: benchmark dips 1% then recovers, leveraged rises."""
    return _build_matched([100, 99, 100], [50, 49.5, 52])


@pytest.fixture
def rising_records() -> tuple[MatchedRecord, ...]:
    """Benchmark rises every day."""
    return _build_matched([100, 101, 103, 104, 110], [20, 20.6, 21.8, 22.4, 26])


@pytest.fixture
def flat_two_month_boundaries() -> tuple[MatchedRecord, ...]:
    """Flat prices on weekdays from Jan 29 to Mar 4 2024 (two month boundaries)."""
    day = date(2024, 1, 29)
    records = []
    while day <= date(2024, 3, 4):
        if day.weekday() < 5:
            records.append(
                MatchedRecord(date=day, benchmark_close=Decimal("100"), leveraged_close=Decimal("40"))
            )
        day += timedelta(days=1)
    return tuple(records)


@pytest.fixture
def sp500_series() -> list[PriceRecord]:
    """Benchmark closes for the first trading days of 2024."""
    return _build_series({
        date(2024, 1, 2): "4742.83",
        date(2024, 1, 3): "4704.81",
        date(2024, 1, 4): "4688.68",
        date(2024, 1, 5): "4697.24",
        date(2024, 1, 8): "4763.54",
        date(2024, 1, 9): "4756.50",
    })


@pytest.fixture
def upro_series() -> list[PriceRecord]:
    """Leveraged closes; missing Jan 4 and with an extra Jan 10."""
    return _build_series({
        date(2024, 1, 9): "57.10",
        date(2024, 1, 2): "55.28",
        date(2024, 1, 3): "53.95",
        date(2024, 1, 5): "53.70",
        date(2024, 1, 8): "55.93",
        date(2024, 1, 10): "57.60",
    })


def _write_csv(path: Path, rows: list[tuple[str, str]], header: str = "Date,Close") -> Path:
    """Write a two-column price CSV."""
    lines = [header] + [f"{d},{c}" for d, c in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def price_files(tmp_path: Path) -> tuple[Path, Path]:
    """Benchmark and leveraged CSV files spanning a month boundary."""
    benchmark = _write_csv(tmp_path / "sp500.csv", [
        ("2024-01-29", "4927.93"),
        ("2024-01-30", "4924.97"),
        ("2024-01-31", "4845.65"),
        ("2024-02-01", "4906.19"),
        ("2024-02-02", "4958.61"),
    ])
    leveraged = _write_csv(tmp_path / "upro.csv", [
        ("2024-02-02", "63.80"),
        ("2024-02-01", "61.85"),
        ("2024-01-31", "59.70"),
        ("2024-01-30", "62.55"),
        ("2024-01-29", "62.70"),
    ])
    return benchmark, leveraged


@pytest.fixture
def make_matched():
    """Factory for consecutive-day matched records."""
    return _build_matched


@pytest.fixture
def make_series():
    """Factory for price records in insertion order."""
    return _build_series


@pytest.fixture
def write_csv():
    """Writer for two-column price CSV files."""
    return _write_csv
