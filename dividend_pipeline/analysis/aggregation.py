"""Grouping and cumulative totals by payment date and by instrument.

Both aggregations are recomputed from the full record list on every call.
Groups key on the raw payment date text: two spellings of the same day
("01/02/2024" and "1/2/2024") stay separate groups.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

from dividend_pipeline.config import DateSortField, InstrumentSortField
from dividend_pipeline.data.companies import display_name
from dividend_pipeline.data.dates import parse_date
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateAggregate:
    """Totals for one payment date string.

    Attributes:
        date: Payment date text shared by the grouped records.
        parsed_date: Canonical date of ``date``.
        total_usd: Sum of net USD amounts on this date.
        total_eur: Sum of net EUR amounts on this date.
        cumulative_usd: Running USD total up to and including this date,
            in chronological order.
        cumulative_eur: Running EUR total, likewise.
    """

    date: str
    parsed_date: date
    total_usd: float
    total_eur: float
    cumulative_usd: float = 0.0
    cumulative_eur: float = 0.0


@dataclass(frozen=True)
class InstrumentAggregate:
    """Totals for one instrument on one payment date."""

    instrument_name: str
    payment_date: str
    parsed_date: date
    amount_usd: float
    amount_eur: float


def by_date(
    records: Sequence[DividendRecord],
    sort_by: DateSortField | None = None,
    descending: bool = False,
    today: date | None = None,
) -> list[DateAggregate]:
    """Group records by payment date and accumulate totals.

    Cumulative values are always computed in ascending date order. The
    optional sort only changes the order of the returned list.

    Args:
        records: Cleaned dividend records.
        sort_by: Presentation sort field. None keeps chronological order.
        descending: Reverse the presentation sort.
        today: Clock used for unparseable dates.

    Returns:
        One DateAggregate per distinct payment date string.
    """
    groups: dict[str, DateAggregate] = {}
    for record in records:
        key = record.payment_date
        current = groups.get(key)
        if current is None:
            groups[key] = DateAggregate(
                date=key,
                parsed_date=parse_date(key, today),
                total_usd=record.amount_net_usd,
                total_eur=record.amount_net_eur,
            )
        else:
            groups[key] = replace(
                current,
                total_usd=current.total_usd + record.amount_net_usd,
                total_eur=current.total_eur + record.amount_net_eur,
            )

    # Stable: same-day groups keep first-appearance order
    chronological = sorted(groups.values(), key=lambda g: g.parsed_date)

    cumulative_usd = 0.0
    cumulative_eur = 0.0
    result: list[DateAggregate] = []
    for group in chronological:
        cumulative_usd += group.total_usd
        cumulative_eur += group.total_eur
        result.append(
            replace(group, cumulative_usd=cumulative_usd, cumulative_eur=cumulative_eur)
        )

    logger.debug("%d records grouped into %d dates", len(records), len(result))

    if sort_by is None:
        return list(reversed(result)) if descending else result
    return sorted(result, key=_date_sort_key(sort_by), reverse=descending)


def by_instrument_and_date(
    records: Sequence[DividendRecord],
    sort_by: InstrumentSortField | None = None,
    descending: bool = False,
    short_names: bool = False,
    today: date | None = None,
) -> list[InstrumentAggregate]:
    """Group records by (instrument name, payment date) and sum amounts.

    Args:
        records: Cleaned dividend records.
        sort_by: Presentation sort field. None keeps first-appearance order.
        descending: Reverse the presentation sort.
        short_names: Sort NAME by ticker where one is known.
        today: Clock used for unparseable dates.

    Returns:
        One InstrumentAggregate per distinct (name, date) pair.
    """
    groups: dict[tuple[str, str], InstrumentAggregate] = {}
    for record in records:
        key = (record.instrument_name, record.payment_date)
        current = groups.get(key)
        if current is None:
            groups[key] = InstrumentAggregate(
                instrument_name=record.instrument_name,
                payment_date=record.payment_date,
                parsed_date=parse_date(record.payment_date, today),
                amount_usd=record.amount_net_usd,
                amount_eur=record.amount_net_eur,
            )
        else:
            groups[key] = replace(
                current,
                amount_usd=current.amount_usd + record.amount_net_usd,
                amount_eur=current.amount_eur + record.amount_net_eur,
            )

    result = list(groups.values())
    if sort_by is None:
        return list(reversed(result)) if descending else result
    return sorted(
        result, key=_instrument_sort_key(sort_by, short_names), reverse=descending
    )


def totals(
    aggregates: Sequence[DateAggregate] | Sequence[InstrumentAggregate],
) -> tuple[float, float]:
    """Column totals (USD, EUR) of a list of aggregates."""
    usd = 0.0
    eur = 0.0
    for agg in aggregates:
        if isinstance(agg, DateAggregate):
            usd += agg.total_usd
            eur += agg.total_eur
        else:
            usd += agg.amount_usd
            eur += agg.amount_eur
    return usd, eur


def _date_sort_key(field: DateSortField) -> Callable[[DateAggregate], Any]:
    if field is DateSortField.DATE:
        return lambda g: g.parsed_date
    if field is DateSortField.TOTAL_USD:
        return lambda g: g.total_usd
    if field is DateSortField.TOTAL_EUR:
        return lambda g: g.total_eur
    if field is DateSortField.CUMULATIVE_USD:
        return lambda g: g.cumulative_usd
    return lambda g: g.cumulative_eur


def _instrument_sort_key(
    field: InstrumentSortField, short_names: bool
) -> Callable[[InstrumentAggregate], Any]:
    if field is InstrumentSortField.NAME:
        if short_names:
            return lambda a: display_name(a.instrument_name)
        return lambda a: a.instrument_name
    if field is InstrumentSortField.DATE:
        return lambda a: a.parsed_date
    if field is InstrumentSortField.AMOUNT_USD:
        return lambda a: a.amount_usd
    return lambda a: a.amount_eur
