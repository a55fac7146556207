"""
Yahoo Finance price series provider.

Uses the yfinance library to download daily adjusted closes for a single
symbol (e.g. "^GSPC" for the S&P 500 and "UPRO" for its 3x fund).
"""

import logging
import time
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

import pandas as pd

from dip_shift.data.providers.base import DataProviderError, PriceSeriesProvider
from dip_shift.models import PriceRecord

logger = logging.getLogger(__name__)

# Yahoo history for most US listings does not start earlier than this
DEFAULT_START_DATE = date(1970, 1, 1)


class YFinanceProvider(PriceSeriesProvider):
    """
    Price series provider using Yahoo Finance.

    Features:
    - Fetches adjusted close prices (handles splits/dividends)
    - Retries failed downloads with linear backoff
    """

    def __init__(self, max_retries: int = 3, retry_delay: float = 2.0):
        """
        Initialize Yahoo Finance provider.

        Args:
            max_retries: Maximum attempts for a download
            retry_delay: Base delay between retries (seconds)
        """
        self._max_retries = max_retries
        self._retry_delay = retry_delay

        # Imported here so the rest of the package works without yfinance
        try:
            import yfinance as yf
            self._yf = yf
        except ImportError:
            raise DataProviderError(
                "yfinance is required for YFinanceProvider. "
                "Install with: pip install dip-shift[yfinance]"
            )

    @property
    def name(self) -> str:
        return "YahooFinance"

    def get_series(
        self,
        symbol: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PriceRecord]:
        """
        Fetch daily adjusted closes for one symbol.

        Args:
            symbol: Yahoo ticker symbol
            start_date: Start date (inclusive)
            end_date: End date (inclusive, defaults to today)

        Returns:
            List of PriceRecord objects sorted by date

        Raises:
            DataProviderError: If the download fails or returns no data
        """
        symbol = symbol.upper().strip()
        start_date = start_date or DEFAULT_START_DATE
        end_date = end_date or date.today()

        if end_date < start_date:
            raise DataProviderError(
                f"end_date {end_date} is before start_date {start_date}"
            )

        last_error: Optional[Exception] = None
        for attempt in range(self._max_retries):
            try:
                # yfinance expects end_date to be exclusive, so add 1 day
                df = self._yf.download(
                    tickers=symbol,
                    start=start_date.isoformat(),
                    end=(end_date + timedelta(days=1)).isoformat(),
                    progress=False,
                    auto_adjust=True,
                )
                closes = self._extract_closes(df, symbol)
                break
            except Exception as e:
                last_error = e
                logger.warning(
                    "Download of %s failed (attempt %d/%d): %s",
                    symbol, attempt + 1, self._max_retries, e,
                )
                if attempt < self._max_retries - 1:
                    time.sleep(self._retry_delay * (attempt + 1))
        else:
            raise DataProviderError(
                f"Failed to fetch prices for {symbol} after "
                f"{self._max_retries} attempts: {last_error}"
            )

        records = []
        for idx, close in closes.items():
            if pd.isna(close) or close <= 0:
                continue
            records.append(
                PriceRecord(
                    date=idx.date() if hasattr(idx, "date") else idx,
                    close=Decimal(str(close)),
                )
            )

        if not records:
            raise DataProviderError(
                f"No price data for {symbol} between {start_date} and {end_date}"
            )

        logger.info("Fetched %d closes for %s", len(records), symbol)
        return records

    @staticmethod
    def _extract_closes(df: pd.DataFrame, symbol: str) -> pd.Series:
        """Pull the close column out of a yfinance frame."""
        if df is None or df.empty:
            return pd.Series(dtype="float64")

        # Newer yfinance returns (field, ticker) MultiIndex columns even for one symbol
        if isinstance(df.columns, pd.MultiIndex):
            if ("Close", symbol) in df.columns:
                return df[("Close", symbol)]
            if "Close" in df.columns.get_level_values(0):
                return df["Close"].iloc[:, 0]
        elif "Close" in df.columns:
            return df["Close"]

        raise DataProviderError(f"Downloaded data for {symbol} has no Close column")
