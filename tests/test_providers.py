"""
Tests for price series providers.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from dip_shift.data.providers import (
    CsvPriceProvider,
    DataProviderError,
    YFinanceProvider,
)


@pytest.fixture
def yf_provider():
    """YFinanceProvider with the yfinance module replaced by a mock."""
    with patch.dict("sys.modules", {"yfinance": MagicMock()}):
        provider = YFinanceProvider(max_retries=2, retry_delay=0)
    return provider


def _download_frame(closes: list[float], start: str = "2024-01-02") -> pd.DataFrame:
    index = pd.bdate_range(start, periods=len(closes), name="Date")
    return pd.DataFrame({"Close": closes, "Volume": [1000] * len(closes)}, index=index)


class TestCsvPriceProvider:
    def test_get_series(self, price_files):
        benchmark_path, leveraged_path = price_files
        provider = CsvPriceProvider({"SPX": benchmark_path, "UPRO": leveraged_path})

        records = provider.get_series("spx")

        assert provider.name == "CSV"
        assert len(records) == 5

    def test_date_window(self, price_files):
        benchmark_path, _ = price_files
        provider = CsvPriceProvider({"SPX": benchmark_path})

        records = provider.get_series("SPX", date(2024, 1, 30), date(2024, 2, 1))

        assert [r.date for r in records] == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
        ]

    def test_unknown_symbol(self, price_files):
        benchmark_path, _ = price_files
        provider = CsvPriceProvider({"SPX": benchmark_path})

        with pytest.raises(DataProviderError):
            provider.get_series("UPRO")


class TestYFinanceProvider:
    def test_get_series(self, yf_provider):
        yf_provider._yf.download.return_value = _download_frame([4742.83, 4704.81, 4688.68])

        records = yf_provider.get_series("^gspc", date(2024, 1, 2), date(2024, 1, 4))

        assert yf_provider.name == "YahooFinance"
        assert records[0].date == date(2024, 1, 2)
        assert records[0].close == Decimal("4742.83")
        assert len(records) == 3

        kwargs = yf_provider._yf.download.call_args.kwargs
        assert kwargs["tickers"] == "^GSPC"
        assert kwargs["start"] == "2024-01-02"
        assert kwargs["end"] == "2024-01-05"

    def test_multiindex_columns(self, yf_provider):
        frame = _download_frame([55.28, 53.95])
        frame.columns = pd.MultiIndex.from_tuples([("Close", "UPRO"), ("Volume", "UPRO")])
        yf_provider._yf.download.return_value = frame

        records = yf_provider.get_series("UPRO", date(2024, 1, 2), date(2024, 1, 3))

        assert [r.close for r in records] == [Decimal("55.28"), Decimal("53.95")]

    def test_skips_missing_closes(self, yf_provider):
        yf_provider._yf.download.return_value = _download_frame([55.28, float("nan"), 53.70])

        records = yf_provider.get_series("UPRO", date(2024, 1, 2), date(2024, 1, 4))

        assert len(records) == 2

    def test_retries_then_succeeds(self, yf_provider):
        yf_provider._yf.download.side_effect = [
            ConnectionError("rate limited"),
            _download_frame([55.28]),
        ]

        records = yf_provider.get_series("UPRO", date(2024, 1, 2), date(2024, 1, 2))

        assert len(records) == 1
        assert yf_provider._yf.download.call_count == 2

    def test_all_attempts_fail(self, yf_provider):
        yf_provider._yf.download.side_effect = ConnectionError("offline")

        with pytest.raises(DataProviderError) as exc_info:
            yf_provider.get_series("UPRO", date(2024, 1, 2), date(2024, 1, 3))

        assert "after 2 attempts" in str(exc_info.value)

    def test_empty_download(self, yf_provider):
        yf_provider._yf.download.return_value = pd.DataFrame()

        with pytest.raises(DataProviderError):
            yf_provider.get_series("NOPE", date(2024, 1, 2), date(2024, 1, 3))

    def test_end_before_start(self, yf_provider):
        with pytest.raises(DataProviderError):
            yf_provider.get_series("UPRO", date(2024, 2, 1), date(2024, 1, 1))

    def test_missing_library(self):
        with patch.dict("sys.modules", {"yfinance": None}):
            with pytest.raises(DataProviderError):
                YFinanceProvider()
