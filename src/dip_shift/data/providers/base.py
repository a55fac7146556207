"""
Abstract base class for price series providers.

Defines the interface that all providers must implement, so a run can take
its two series from local files or from a market data service.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from dip_shift.models import PriceRecord


class DataProviderError(Exception):
    """Raised when a data provider encounters an error."""
    pass


class PriceSeriesProvider(ABC):
    """
    Abstract base class for daily price series providers.

    Implementations return one instrument's closes per call. Series are
    not required to be sorted or to share dates with other series.
    """

    @abstractmethod
    def get_series(
        self,
        symbol: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PriceRecord]:
        """
        Fetch daily closing prices for one symbol.

        Args:
            symbol: Ticker symbol or series identifier
            start_date: Start date (inclusive, None = earliest available)
            end_date: End date (inclusive, None = latest available)

        Returns:
            List of PriceRecord objects

        Raises:
            DataProviderError: If data cannot be fetched
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this data provider."""
        pass
