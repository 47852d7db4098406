"""Dividend trend extrapolation: regression, seasonality, growth, and risk.

The projections are illustrative heuristics. ``confidence_percent`` and
``risk_level`` come from fixed formulas, not statistical inference.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

import numpy as np
from scipy.stats import linregress  # type: ignore[import-untyped]

from dividend_pipeline.config import Currency, ForecastConfig, RiskLevel, Trend
from dividend_pipeline.data.dates import parse_date
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)

# (calendar year, zero-based month)
MonthKey = tuple[int, int]


@dataclass(frozen=True)
class MonthlyTotal:
    """Sum and number of payments in one calendar month."""

    total: float
    count: int


@dataclass(frozen=True)
class TrendFit:
    """Least-squares slope over month index and its heuristic confidence."""

    slope: float
    confidence: float


@dataclass(frozen=True)
class SeasonalFactor:
    """Calendar month (0-11) and its payout relative to the monthly average."""

    month: int
    multiplier: float


@dataclass(frozen=True)
class InstrumentGrowth:
    """Recent payout growth of one instrument.

    Attributes:
        name: Instrument long name.
        growth_percent: Mean of the last 3 payments vs mean of earlier
            payments, in percent.
        predicted_next_amount: Recent mean grown by ``growth_percent``.
    """

    name: str
    growth_percent: float
    predicted_next_amount: float


@dataclass
class ForecastResult:
    """Forecast outputs for display.

    Attributes:
        next_quarter_estimate: Projected total for the next 3 months.
        next_year_estimate: Projected total for the next 12 months.
        trend: Direction of the monthly regression slope.
        confidence_percent: Heuristic confidence, 0-95.
        seasonal_pattern: One factor per calendar month, January first.
            Empty when there was too little data to forecast.
        top_growth_instruments: Fastest growing instruments, descending.
        risk_level: Volatility class of the monthly totals.
    """

    next_quarter_estimate: float = 0.0
    next_year_estimate: float = 0.0
    trend: Trend = Trend.NEUTRAL
    confidence_percent: float = 0.0
    seasonal_pattern: list[SeasonalFactor] = field(default_factory=list)
    top_growth_instruments: list[InstrumentGrowth] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class ProjectionPoint:
    """One month of the history-plus-projection series."""

    label: str
    amount: float
    projected: bool


def compute_forecast(
    records: Sequence[DividendRecord],
    config: ForecastConfig | None = None,
    today: date | None = None,
) -> ForecastResult:
    """Compute trend, projections, seasonality, growth ranking, and risk.

    Args:
        records: Cleaned dividend records.
        config: Forecast configuration (defaults used if None).
        today: Clock used for unparseable dates.

    Returns:
        ForecastResult. Zeroed and neutral when there are fewer than
        ``config.min_records`` records.
    """
    cfg = config or ForecastConfig()

    if len(records) < cfg.min_records:
        logger.info(
            "Forecast skipped: %d records (minimum %d)", len(records), cfg.min_records
        )
        return ForecastResult()

    monthly = monthly_totals(records, cfg.currency, today)
    totals = [m.total for m in monthly.values()]

    fit = linear_trend(totals, cfg.confidence_cap)
    trend = classify_trend(fit.slope, cfg.trend_threshold)

    avg_monthly = average_recent(totals, cfg.recent_months)
    next_quarter = max(0.0, avg_monthly * 3 + fit.slope * 3)
    next_year = max(0.0, avg_monthly * 12 + fit.slope * 12)

    volatility = compute_volatility(totals, avg_monthly)

    logger.debug(
        "Forecast: %d months, slope %.4f, avg %.2f, volatility %.4f",
        len(totals), fit.slope, avg_monthly, volatility,
    )

    return ForecastResult(
        next_quarter_estimate=next_quarter,
        next_year_estimate=next_year,
        trend=trend,
        confidence_percent=fit.confidence,
        seasonal_pattern=seasonal_pattern(monthly, avg_monthly),
        top_growth_instruments=top_growth_instruments(
            records, cfg.currency, cfg.top_growth_limit
        ),
        risk_level=classify_risk(volatility, cfg),
    )


def monthly_totals(
    records: Sequence[DividendRecord],
    currency: Currency = Currency.USD,
    today: date | None = None,
) -> dict[MonthKey, MonthlyTotal]:
    """Sum amounts per calendar month, in chronological key order.

    Keys are (year, zero-based month) of each record's canonical date.
    """
    sums: dict[MonthKey, float] = {}
    counts: dict[MonthKey, int] = {}
    for record in records:
        paid = parse_date(record.payment_date, today)
        key = (paid.year, paid.month - 1)
        sums[key] = sums.get(key, 0.0) + _amount(record, currency)
        counts[key] = counts.get(key, 0) + 1

    return {key: MonthlyTotal(total=sums[key], count=counts[key]) for key in sorted(sums)}


def linear_trend(totals: Sequence[float], confidence_cap: float = 95.0) -> TrendFit:
    """Ordinary least-squares slope of monthly totals over their index.

    ``confidence = min(cap, |slope| * 10 + (n / 12) * 20)``.

    Returns:
        TrendFit(0, 0) when fewer than 2 months are available.
    """
    n = len(totals)
    if n < 2:
        return TrendFit(slope=0.0, confidence=0.0)

    x = np.arange(n, dtype=np.float64)
    y = np.asarray(totals, dtype=np.float64)
    slope = float(linregress(x, y).slope)

    if not math.isfinite(slope):
        logger.warning("Non-finite trend slope over %d months", n)
        return TrendFit(slope=0.0, confidence=0.0)

    confidence = min(confidence_cap, abs(slope) * 10 + (n / 12) * 20)
    return TrendFit(slope=slope, confidence=confidence)


def classify_trend(slope: float, threshold: float = 5.0) -> Trend:
    """Bullish above ``threshold`` per month, bearish below its negative."""
    if slope > threshold:
        return Trend.BULLISH
    if slope < -threshold:
        return Trend.BEARISH
    return Trend.NEUTRAL


def average_recent(totals: Sequence[float], recent_months: int = 3) -> float:
    """Sum of the last ``recent_months`` totals divided by ``recent_months``.

    The divisor does not shrink when fewer months exist.
    """
    if recent_months <= 0:
        return 0.0
    return sum(totals[-recent_months:]) / recent_months


def seasonal_pattern(
    monthly: Mapping[MonthKey, MonthlyTotal], avg_monthly: float
) -> list[SeasonalFactor]:
    """Per calendar month, historical mean total divided by ``avg_monthly``.

    Months without history use ``avg_monthly`` (multiplier 1.0). All
    multipliers are 1.0 when ``avg_monthly`` is not positive.
    """
    by_month: dict[int, list[float]] = {m: [] for m in range(12)}
    for (_, month), bucket in monthly.items():
        by_month[month].append(bucket.total)

    pattern: list[SeasonalFactor] = []
    for month in range(12):
        if avg_monthly <= 0:
            pattern.append(SeasonalFactor(month=month, multiplier=1.0))
            continue
        values = by_month[month]
        month_avg = sum(values) / len(values) if values else avg_monthly
        pattern.append(SeasonalFactor(month=month, multiplier=month_avg / avg_monthly))
    return pattern


def top_growth_instruments(
    records: Sequence[DividendRecord],
    currency: Currency = Currency.USD,
    limit: int = 5,
) -> list[InstrumentGrowth]:
    """Rank instruments by growth of their recent payments.

    Payments are taken in record order, so "last 3" means the last three
    rows of the instrument as the sheet lists them. Growth compares the
    mean of those with the mean of all earlier ones (divisor at least 1).
    Instruments with a single payment report zero growth; instruments
    whose earlier mean is zero have no finite growth and are left out.
    """
    payments: dict[str, list[float]] = {}
    for record in records:
        payments.setdefault(record.instrument_name, []).append(_amount(record, currency))

    ranking: list[InstrumentGrowth] = []
    for name, amounts in payments.items():
        n = len(amounts)

        if n < 2:
            ranking.append(InstrumentGrowth(name=name, growth_percent=0.0, predicted_next_amount=0.0))
            continue

        recent = sum(amounts[-3:]) / 3
        older = sum(amounts[:-3]) / max(1, n - 3)
        if older == 0:
            logger.debug("%s: no earlier payments to compare, skipping", name)
            continue

        growth = (recent - older) / older * 100
        if not math.isfinite(growth):
            continue

        ranking.append(
            InstrumentGrowth(
                name=name,
                growth_percent=growth,
                predicted_next_amount=recent * (1 + growth / 100),
            )
        )

    ranking.sort(key=lambda g: g.growth_percent, reverse=True)
    return ranking[:limit]


def compute_volatility(totals: Sequence[float], avg_monthly: float) -> float:
    """Dispersion of all monthly totals around ``avg_monthly``, relative to it.

    Sample form (n - 1 denominator). Zero for fewer than 2 months; infinite
    when ``avg_monthly`` is not positive but the totals vary.
    """
    n = len(totals)
    if n < 2:
        return 0.0

    arr = np.asarray(totals, dtype=np.float64)
    spread = float(np.sqrt(np.sum((arr - avg_monthly) ** 2) / (n - 1)))

    if avg_monthly <= 0:
        return math.inf if spread > 0 else 0.0
    return spread / avg_monthly


def classify_risk(volatility: float, config: ForecastConfig | None = None) -> RiskLevel:
    cfg = config or ForecastConfig()
    if volatility > cfg.high_volatility:
        return RiskLevel.HIGH
    if volatility > cfg.medium_volatility:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def projection_series(
    records: Sequence[DividendRecord],
    as_of: date,
    config: ForecastConfig | None = None,
) -> list[ProjectionPoint]:
    """Recent monthly history followed by flat projected months.

    History covers the last ``history_months`` months with payments,
    labelled ``YYYY-MM``. The projection covers the
    ``projection_months`` months after ``as_of``, each at the mean of the
    last 3 historical months grown by ``projection_growth``.
    """
    cfg = config or ForecastConfig()
    monthly = monthly_totals(records, cfg.currency, as_of)
    history = list(monthly.items())[-cfg.history_months:]

    points = [
        ProjectionPoint(label=_month_label(year, month), amount=bucket.total, projected=False)
        for (year, month), bucket in history
    ]

    values = [bucket.total for _, bucket in history]
    projected_amount = average_recent(values, cfg.recent_months) * (1 + cfg.projection_growth)

    for offset in range(1, cfg.projection_months + 1):
        index = as_of.month - 1 + offset
        points.append(
            ProjectionPoint(
                label=_month_label(as_of.year + index // 12, index % 12),
                amount=projected_amount,
                projected=True,
            )
        )
    return points


def _amount(record: DividendRecord, currency: Currency) -> float:
    if currency is Currency.EUR:
        return record.amount_net_eur
    return record.amount_net_usd


def _month_label(year: int, month: int) -> str:
    return f"{year:04d}-{month + 1:02d}"
