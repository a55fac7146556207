"""
Data ingestion module for the dip-shift simulator.

Provides functionality for loading and saving daily price series
from CSV/Parquet files.
"""

from dip_shift.data.loaders import (
    DataLoadError,
    load_price_series,
    read_price_series,
    load_series_pair,
    save_price_series,
)
from dip_shift.data.schemas import (
    PRICE_SERIES_SCHEMA,
    DAILY_LOG_SCHEMA,
)

__all__ = [
    "DataLoadError",
    "load_price_series",
    "read_price_series",
    "load_series_pair",
    "save_price_series",
    "PRICE_SERIES_SCHEMA",
    "DAILY_LOG_SCHEMA",
]
