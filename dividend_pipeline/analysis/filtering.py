"""User-selectable record filters.

Filters are applied to a copy of the cleaned records; aggregates and
forecasts are then recomputed from the filtered list.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dividend_pipeline.config import RecordSortField
from dividend_pipeline.data.companies import display_name, short_name_for
from dividend_pipeline.data.dates import parse_date
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)


@dataclass
class FilterOptions:
    """Record filter settings. None disables a bound.

    Attributes:
        search_term: Case-insensitive substring of instrument name, ticker,
            or ISIN.
        instruments: Long names to keep (empty keeps all).
        start_date: Earliest payment date, inclusive.
        end_date: Latest payment date, inclusive.
        min_amount: Minimum net USD amount, inclusive.
        max_amount: Maximum net USD amount, inclusive.
        sort_by: Result order. None keeps the input order.
        descending: Reverse the result order.
    """

    search_term: str = ""
    instruments: list[str] = field(default_factory=list)
    start_date: date | None = None
    end_date: date | None = None
    min_amount: float | None = None
    max_amount: float | None = None
    sort_by: RecordSortField | None = RecordSortField.DATE
    descending: bool = True


def apply_filters(
    records: Sequence[DividendRecord],
    options: FilterOptions,
    today: date | None = None,
) -> list[DividendRecord]:
    """Apply search, instrument, date, and amount filters, then sort.

    Args:
        records: Cleaned dividend records.
        options: Filter settings.
        today: Clock used for unparseable dates.

    Returns:
        New list of matching records.
    """
    result = list(records)

    if options.search_term:
        needle = options.search_term.lower()
        result = [r for r in result if _matches_search(r, needle)]

    if options.instruments:
        selected = set(options.instruments)
        result = [r for r in result if r.instrument_name in selected]

    if options.start_date is not None or options.end_date is not None:
        result = [
            r for r in result
            if _in_range(parse_date(r.payment_date, today), options.start_date, options.end_date)
        ]

    if options.min_amount is not None or options.max_amount is not None:
        result = [
            r for r in result
            if _in_range(r.amount_net_usd, options.min_amount, options.max_amount)
        ]

    if options.sort_by is not None:
        result.sort(key=_record_sort_key(options.sort_by, today), reverse=options.descending)

    logger.debug("Filters kept %d of %d records", len(result), len(records))
    return result


def available_instruments(records: Sequence[DividendRecord]) -> list[tuple[str, str]]:
    """Distinct instruments as (display label, long name), sorted by long name."""
    names = sorted({r.instrument_name for r in records})
    return [(display_name(name), name) for name in names]


def amount_bounds(records: Sequence[DividendRecord]) -> tuple[int, int]:
    """Floor of the smallest and ceiling of the largest USD amount."""
    if not records:
        return 0, 0
    amounts = [r.amount_net_usd for r in records]
    return math.floor(min(amounts)), math.ceil(max(amounts))


def _matches_search(record: DividendRecord, needle: str) -> bool:
    ticker = short_name_for(record.instrument_name) or ""
    return (
        needle in record.instrument_name.lower()
        or needle in ticker.lower()
        or needle in record.isin.lower()
    )


def _record_sort_key(
    sort_by: RecordSortField, today: date | None
) -> Callable[[DividendRecord], Any]:
    if sort_by is RecordSortField.DATE:
        return lambda r: parse_date(r.payment_date, today)
    if sort_by is RecordSortField.AMOUNT:
        return lambda r: r.amount_net_usd
    return lambda r: display_name(r.instrument_name)


def _in_range(
    value: float | date, lower: float | date | None, upper: float | date | None
) -> bool:
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True
