"""Headline dividend metrics: totals, best month and instrument, activity."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

from dividend_pipeline.config import ActivityTrend
from dividend_pipeline.data.dates import parse_date
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)

# Average month length used to convert a date span into months.
DAYS_PER_MONTH: float = 30.0

# Months treated as "recent" activity.
RECENT_MONTHS: int = 3

# Relative band inside which recent activity counts as stable.
ACTIVITY_BAND: float = 0.10


@dataclass
class SummaryMetrics:
    """Portfolio-level dividend summary.

    Attributes:
        total_usd: Sum of net USD amounts.
        total_eur: Sum of net EUR amounts.
        total_transactions: Number of records.
        unique_instruments: Number of distinct instrument names.
        average_per_transaction: ``total_usd / total_transactions``.
        best_month: ``YYYY-MM`` of the highest USD month ("" if none).
        best_month_amount: USD total of ``best_month``.
        best_instrument: Instrument with the highest USD total ("" if none).
        best_instrument_amount: USD total of ``best_instrument``.
        first_payment: Earliest payment date.
        last_payment: Latest payment date.
        monthly_average: ``total_usd`` over the payment span in months
            (at least 1).
        activity_trend: Recent 3 months vs earlier payments.
    """

    total_usd: float
    total_eur: float
    total_transactions: int
    unique_instruments: int
    average_per_transaction: float
    best_month: str
    best_month_amount: float
    best_instrument: str
    best_instrument_amount: float
    first_payment: date
    last_payment: date
    monthly_average: float
    activity_trend: ActivityTrend


def compute_summary(
    records: Sequence[DividendRecord], as_of: date | None = None
) -> SummaryMetrics:
    """Compute headline metrics for the record list.

    Args:
        records: Cleaned dividend records.
        as_of: Reference date for "recent" activity and for unparseable
            dates. Defaults to the current date.

    Returns:
        SummaryMetrics. All zero, with both dates at ``as_of``, for no
        records.
    """
    today = as_of if as_of is not None else date.today()

    if not records:
        return SummaryMetrics(
            total_usd=0.0,
            total_eur=0.0,
            total_transactions=0,
            unique_instruments=0,
            average_per_transaction=0.0,
            best_month="",
            best_month_amount=0.0,
            best_instrument="",
            best_instrument_amount=0.0,
            first_payment=today,
            last_payment=today,
            monthly_average=0.0,
            activity_trend=ActivityTrend.STABLE,
        )

    dated = [(parse_date(r.payment_date, today), r) for r in records]

    total_usd = sum(r.amount_net_usd for r in records)
    total_eur = sum(r.amount_net_eur for r in records)
    n = len(records)

    payment_dates = sorted(d for d, _ in dated)
    first_payment = payment_dates[0]
    last_payment = payment_dates[-1]

    by_month: dict[str, float] = {}
    for paid, record in dated:
        key = f"{paid.year:04d}-{paid.month:02d}"
        by_month[key] = by_month.get(key, 0.0) + record.amount_net_usd
    best_month, best_month_amount = _best(by_month)

    by_instrument: dict[str, float] = {}
    for record in records:
        by_instrument[record.instrument_name] = (
            by_instrument.get(record.instrument_name, 0.0) + record.amount_net_usd
        )
    best_instrument, best_instrument_amount = _best(by_instrument)

    months_span = max(1.0, (last_payment - first_payment).days / DAYS_PER_MONTH)
    monthly_average = total_usd / months_span

    cutoff = today - relativedelta(months=RECENT_MONTHS)
    recent = [r.amount_net_usd for d, r in dated if d >= cutoff]
    older = [r.amount_net_usd for d, r in dated if d < cutoff]
    recent_avg = sum(recent) / RECENT_MONTHS if recent else 0.0
    older_avg = sum(older) / max(1.0, months_span - RECENT_MONTHS) if older else 0.0

    if recent_avg > older_avg * (1 + ACTIVITY_BAND):
        activity = ActivityTrend.UP
    elif recent_avg < older_avg * (1 - ACTIVITY_BAND):
        activity = ActivityTrend.DOWN
    else:
        activity = ActivityTrend.STABLE

    logger.debug(
        "Summary: %d records, %d instruments, recent avg %.2f vs older %.2f",
        n, len(by_instrument), recent_avg, older_avg,
    )

    return SummaryMetrics(
        total_usd=total_usd,
        total_eur=total_eur,
        total_transactions=n,
        unique_instruments=len(by_instrument),
        average_per_transaction=total_usd / n,
        best_month=best_month,
        best_month_amount=best_month_amount,
        best_instrument=best_instrument,
        best_instrument_amount=best_instrument_amount,
        first_payment=first_payment,
        last_payment=last_payment,
        monthly_average=monthly_average,
        activity_trend=activity,
    )


def _best(totals: dict[str, float]) -> tuple[str, float]:
    """Key with the largest positive total; ties keep the first key."""
    best_key = ""
    best_amount = 0.0
    for key, amount in totals.items():
        if amount > best_amount:
            best_key, best_amount = key, amount
    return best_key, best_amount
