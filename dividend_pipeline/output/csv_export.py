"""CSV export of cleaned records and aggregates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from dividend_pipeline.analysis.aggregation import DateAggregate, InstrumentAggregate
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)

# (CSV header, attribute name), in output order. Dates are exported as the
# payment date text, which is also the grouping key.
RECORD_COLUMNS: list[tuple[str, str]] = [
    ("payment_date", "payment_date"),
    ("instrument_name", "instrument_name"),
    ("isin", "isin"),
    ("amount_net_usd", "amount_net_usd"),
    ("amount_net_eur", "amount_net_eur"),
    ("withholding_rate_percent", "withholding_rate_percent"),
    ("withholding_tax_usd", "withholding_tax_usd"),
    ("withholding_tax_eur", "withholding_tax_eur"),
    ("position_id", "position_id"),
    ("type", "dividend_type"),
]

DATE_COLUMNS: list[tuple[str, str]] = [
    ("date", "date"),
    ("total_usd", "total_usd"),
    ("total_eur", "total_eur"),
    ("cumulative_usd", "cumulative_usd"),
    ("cumulative_eur", "cumulative_eur"),
]

INSTRUMENT_COLUMNS: list[tuple[str, str]] = [
    ("instrument_name", "instrument_name"),
    ("date", "payment_date"),
    ("amount_usd", "amount_usd"),
    ("amount_eur", "amount_eur"),
]


def to_frame(rows: Sequence[object], columns: list[tuple[str, str]]) -> pd.DataFrame:
    """Tabulate dataclass rows using a (header, attribute) column table."""
    return pd.DataFrame(
        [[getattr(row, attr) for _, attr in columns] for row in rows],
        columns=[header for header, _ in columns],
    )


def _write(
    rows: Sequence[object],
    columns: list[tuple[str, str]],
    path: Path,
    decimals: int,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = to_frame(rows, columns)
    frame.to_csv(path, index=False, float_format=f"%.{decimals}f", encoding="utf-8")
    logger.info("Exported %s (%d rows)", path, len(frame))
    return path


def export_records_csv(
    records: Sequence[DividendRecord], path: Path, decimals: int = 2
) -> Path:
    """Write cleaned records, payment date text as received."""
    return _write(records, RECORD_COLUMNS, path, decimals)


def export_by_date_csv(
    aggregates: Sequence[DateAggregate], path: Path, decimals: int = 2
) -> Path:
    """Write date aggregates in the given order."""
    return _write(aggregates, DATE_COLUMNS, path, decimals)


def export_by_instrument_csv(
    aggregates: Sequence[InstrumentAggregate], path: Path, decimals: int = 2
) -> Path:
    """Write instrument aggregates in the given order."""
    return _write(aggregates, INSTRUMENT_COLUMNS, path, decimals)
