"""
Date alignment of the benchmark and leveraged price series.

The two series come from independent sources and need not share dates or
ordering. Matching keeps only the trading days present in both; filtering
then narrows the matched sequence to an inclusive date window.
"""

import logging
from datetime import date
from typing import Optional, Sequence

from dip_shift.errors import DataError
from dip_shift.models import MatchedRecord, PriceRecord

logger = logging.getLogger(__name__)

MIN_RECORDS = 2


def match_series(
    benchmark: Sequence[PriceRecord],
    leveraged: Sequence[PriceRecord],
) -> tuple[MatchedRecord, ...]:
    """
    Pair the two series by date.

    If a date repeats within one series, the later occurrence in source
    order wins. Dates missing from either series are dropped; the number
    dropped is derivable from the input and output lengths.

    Args:
        benchmark: Benchmark price records, any order
        leveraged: Leveraged instrument price records, any order

    Returns:
        Matched records sorted ascending by date, one per common date

    Raises:
        DataError: If fewer than 2 dates are common to both series
    """
    benchmark_by_date = {record.date: record.close for record in benchmark}
    leveraged_by_date = {record.date: record.close for record in leveraged}

    common_dates = sorted(benchmark_by_date.keys() & leveraged_by_date.keys())

    matched = tuple(
        MatchedRecord(
            date=day,
            benchmark_close=benchmark_by_date[day],
            leveraged_close=leveraged_by_date[day],
        )
        for day in common_dates
    )

    logger.debug(
        "Matched %d dates (benchmark %d unique, leveraged %d unique)",
        len(matched), len(benchmark_by_date), len(leveraged_by_date),
    )

    if len(matched) < MIN_RECORDS:
        raise DataError(
            f"Too few matching dates between series: {len(matched)} "
            f"(need at least {MIN_RECORDS})"
        )

    return matched


def filter_by_date(
    records: Sequence[MatchedRecord],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[MatchedRecord, ...]:
    """
    Restrict a matched sequence to an inclusive date window.

    Bound ordering is not checked here; callers validate the
    configuration first.

    Args:
        records: Matched records sorted ascending by date
        start_date: First date to keep (None = unbounded)
        end_date: Last date to keep (None = unbounded)

    Returns:
        Contiguous sub-sequence in the original order

    Raises:
        DataError: If fewer than 2 records fall inside the window
    """
    filtered = tuple(
        record for record in records
        if (start_date is None or record.date >= start_date)
        and (end_date is None or record.date <= end_date)
    )

    if len(filtered) < MIN_RECORDS:
        raise DataError(
            f"Not enough data in the selected period "
            f"({start_date or 'start'} to {end_date or 'end'}): "
            f"{len(filtered)} records (need at least {MIN_RECORDS})"
        )

    return filtered


def count_unmatched(
    benchmark: Sequence[PriceRecord],
    leveraged: Sequence[PriceRecord],
    matched: Sequence[MatchedRecord],
) -> tuple[int, int]:
    """
    Count the unique dates of each series that did not survive matching.

    Args:
        benchmark: Benchmark records passed to match_series
        leveraged: Leveraged records passed to match_series
        matched: Output of match_series

    Returns:
        Tuple of (benchmark dates dropped, leveraged dates dropped)
    """
    matched_count = len(matched)
    return (
        len({r.date for r in benchmark}) - matched_count,
        len({r.date for r in leveraged}) - matched_count,
    )
