"""
Price series provider backed by local CSV/Parquet files.
"""

from datetime import date
from pathlib import Path
from typing import Optional

from dip_shift.data.loaders import load_price_series
from dip_shift.data.providers.base import DataProviderError, PriceSeriesProvider
from dip_shift.models import PriceRecord


class CsvPriceProvider(PriceSeriesProvider):
    """Serves each symbol from its own price file."""

    def __init__(self, paths: dict[str, str | Path]):
        """
        Initialize the provider.

        Args:
            paths: Mapping of symbol to price file path
        """
        self._paths = {symbol.upper().strip(): Path(p) for symbol, p in paths.items()}

    @property
    def name(self) -> str:
        return "CSV"

    def get_series(
        self,
        symbol: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PriceRecord]:
        key = symbol.upper().strip()
        if key not in self._paths:
            raise DataProviderError(f"No price file configured for symbol {symbol}")

        records = load_price_series(self._paths[key])
        return [
            r for r in records
            if (start_date is None or r.date >= start_date)
            and (end_date is None or r.date <= end_date)
        ]
