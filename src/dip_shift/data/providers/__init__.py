"""
Data providers for daily price series.

Provides a pluggable interface for fetching the benchmark and leveraged
instrument series from local files or Yahoo Finance.
"""

from dip_shift.data.providers.base import DataProviderError, PriceSeriesProvider
from dip_shift.data.providers.csv_provider import CsvPriceProvider
from dip_shift.data.providers.yfinance_provider import YFinanceProvider

__all__ = [
    "DataProviderError",
    "PriceSeriesProvider",
    "CsvPriceProvider",
    "YFinanceProvider",
]
