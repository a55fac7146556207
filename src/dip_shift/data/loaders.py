"""
Data loading and saving functions for price series files.

Handles ingestion of daily closing prices from CSV/Parquet files into
PriceRecord lists, both synchronously and as coroutines so that the two
series of a run can be read concurrently.
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd

from dip_shift.data.schemas import FileSchema, PRICE_SERIES_SCHEMA
from dip_shift.errors import ParseError
from dip_shift.models import PriceRecord

logger = logging.getLogger(__name__)


class DataLoadError(OSError):
    """Raised when a price file exists but cannot be read."""
    pass


def load_price_series(file_path: str | Path) -> list[PriceRecord]:
    """
    Load a daily price series from a CSV or Parquet file.

    Rows are returned in file order; no sorting or de-duplication happens
    here. Closes may contain thousands separators ("2,058.20").

    Args:
        file_path: Path to a file with a date column and a close column

    Returns:
        List of PriceRecord objects in source order

    Raises:
        FileNotFoundError: If the file does not exist
        DataLoadError: If the file cannot be read
        ParseError: If columns are missing or a row is malformed
    """
    file_path = Path(file_path)
    df = _load_table(file_path, PRICE_SERIES_SCHEMA)
    columns, _ = PRICE_SERIES_SCHEMA.resolve_columns(df.columns.tolist())

    dates = pd.to_datetime(
        df[columns["date"]].astype(str).str.strip(),
        errors="coerce",
        format="mixed",
    )

    records = []
    for position, (raw_date, parsed_date, raw_close) in enumerate(
        zip(df[columns["date"]], dates, df[columns["close"]])
    ):
        # +2: header line plus 1-based numbering
        row_number = position + 2
        if pd.isna(parsed_date):
            raise ParseError(
                f"{file_path}: invalid date {raw_date!r} on row {row_number}"
            )
        close = _parse_close(raw_close, file_path, row_number)
        records.append(PriceRecord(date=parsed_date.date(), close=close))

    logger.debug("Loaded %d price records from %s", len(records), file_path)
    return records


async def read_price_series(file_path: str | Path) -> list[PriceRecord]:
    """
    Load a price series without blocking the event loop.

    Args:
        file_path: Path to the price file

    Returns:
        List of PriceRecord objects in source order
    """
    return await asyncio.to_thread(load_price_series, file_path)


async def load_series_pair(
    benchmark_path: str | Path,
    leveraged_path: str | Path,
) -> tuple[list[PriceRecord], list[PriceRecord]]:
    """
    Read the benchmark and leveraged series concurrently.

    Both reads must finish before the result is returned; the first
    failure is raised.

    Args:
        benchmark_path: Path to the benchmark price file
        leveraged_path: Path to the leveraged instrument price file

    Returns:
        Tuple of (benchmark records, leveraged records)
    """
    benchmark, leveraged = await asyncio.gather(
        read_price_series(benchmark_path),
        read_price_series(leveraged_path),
    )
    return benchmark, leveraged


def save_price_series(
    records: list[PriceRecord],
    output_path: str | Path,
) -> Path:
    """
    Save a price series to a CSV file readable by load_price_series.

    Args:
        records: List of PriceRecord objects
        output_path: Path for output CSV file

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [{"date": r.date.isoformat(), "close": str(r.close)} for r in records],
        columns=["date", "close"],
    )
    df.to_csv(output_path, index=False)

    return output_path


def _parse_close(raw: object, file_path: Path, row_number: int) -> Decimal:
    """Parse a closing price, rejecting blanks and non-positive values."""
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        raise ParseError(f"{file_path}: missing close on row {row_number}")

    text = str(raw).strip().replace(",", "")
    try:
        close = Decimal(text)
    except InvalidOperation:
        raise ParseError(
            f"{file_path}: invalid close {raw!r} on row {row_number}"
        )

    if not close.is_finite() or close <= 0:
        raise ParseError(
            f"{file_path}: close must be positive, got {raw!r} on row {row_number}"
        )

    return close


def _load_table(file_path: Path, schema: FileSchema) -> pd.DataFrame:
    """
    Load a CSV or Parquet file and validate against schema.

    CSV values are read as strings so closes keep their exact decimal text.

    Args:
        file_path: Path to the file
        schema: Expected file schema

    Returns:
        Loaded DataFrame

    Raises:
        FileNotFoundError: If the file does not exist
        DataLoadError: If the file cannot be read
        ParseError: If required columns are missing
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Price file not found: {file_path}")

    if file_path.suffix.lower() == ".parquet":
        try:
            df = pd.read_parquet(file_path)
        except Exception as e:
            raise DataLoadError(f"Failed to load parquet file {file_path}: {e}")
    else:
        try:
            df = pd.read_csv(file_path, dtype=str, skipinitialspace=True)
        except pd.errors.EmptyDataError:
            raise ParseError(f"Price file is empty: {file_path}")
        except pd.errors.ParserError as e:
            raise ParseError(f"Malformed CSV file {file_path}: {e}")
        except Exception as e:
            raise DataLoadError(f"Failed to load CSV file {file_path}: {e}")

    is_valid, missing = schema.validate_columns(df.columns.tolist())
    if not is_valid:
        raise ParseError(
            f"File {file_path} is missing required columns: {missing}"
        )

    return df
