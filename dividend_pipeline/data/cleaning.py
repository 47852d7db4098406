"""Validation and type coercion of raw spreadsheet rows.

Rows arrive keyed by the sheet's header labels with loosely typed values
(amounts are often stored as text). Validation checks presence and
non-null values only, not numeric type.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime

import pandas as pd

from dividend_pipeline.config import (
    AMOUNT_NET_EUR,
    AMOUNT_NET_USD,
    DIVIDEND_TYPE,
    INSTRUMENT_NAME,
    ISIN,
    PAYMENT_DATE,
    POSITION_ID,
    WITHHOLDING_RATE,
    WITHHOLDING_TAX_EUR,
    WITHHOLDING_TAX_USD,
)
from dividend_pipeline.data.dates import format_date, parse_date
from dividend_pipeline.data.models import DividendRecord

logger = logging.getLogger(__name__)

# Leading numeric prefix, as accepted by a permissive float parse.
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

# Number of rejected rows reported individually in debug output.
_REJECTED_LOG_LIMIT = 5


def is_missing(value: object) -> bool:
    """True for None and scalar NaN/NaT cell values."""
    if value is None:
        return True
    if isinstance(value, (str, bytes)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_valid_shape(raw: object) -> bool:
    """Check that a raw row carries the fields a dividend record needs.

    Requires non-null payment date and instrument name, and at least one
    non-null net amount column. Cell types are not checked.

    Args:
        raw: Candidate row, normally a mapping of header label to cell.

    Returns:
        True if the row can be coerced into a DividendRecord.
    """
    if not isinstance(raw, Mapping):
        return False

    def present(label: str) -> bool:
        return label in raw and not is_missing(raw[label])

    return (
        present(PAYMENT_DATE)
        and present(INSTRUMENT_NAME)
        and (present(AMOUNT_NET_USD) or present(AMOUNT_NET_EUR))
    )


def parse_amount(value: object) -> float:
    """Parse a currency amount the way a permissive float parse would.

    Numbers pass through. Text yields its longest leading numeric prefix
    (``"12.5 USD"`` -> 12.5, ``"3,75"`` -> 3.0). Anything else, including
    non-finite results, yields 0.0.
    """
    if is_missing(value) or not value or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        result = float(value)
    else:
        match = _NUMERIC_PREFIX.match(str(value))
        if match is None:
            return 0.0
        result = float(match.group(1))

    return result if math.isfinite(result) else 0.0


def clean_records(raw_rows: Iterable[object]) -> list[DividendRecord]:
    """Turn raw keyed rows into validated dividend records.

    Two filter passes: shape validation before coercion, then the business
    rule after it (non-empty date and name, and a positive USD or EUR
    amount). Input order is preserved and the input is not modified.

    Args:
        raw_rows: Rows produced by the sheet extractor.

    Returns:
        Cleaned records, in input order.
    """
    rows = list(raw_rows)
    records: list[DividendRecord] = []
    rejected = 0

    for index, raw in enumerate(rows):
        if not is_valid_shape(raw):
            if rejected < _REJECTED_LOG_LIMIT:
                logger.debug("Row %d rejected (missing fields): %r", index, raw)
            rejected += 1
            continue

        record = _coerce(raw)  # type: ignore[arg-type]
        if not _meets_business_rule(record):
            if rejected < _REJECTED_LOG_LIMIT:
                logger.debug("Row %d rejected (no positive amount): %r", index, raw)
            rejected += 1
            continue

        records.append(record)

    logger.info("Cleaned %d of %d rows (%d rejected)", len(records), len(rows), rejected)
    return records


def _coerce(raw: Mapping[str, object]) -> DividendRecord:
    """Coerce every field of a shape-valid row to its target type."""
    return DividendRecord(
        payment_date=_coerce_payment_date(raw.get(PAYMENT_DATE)),
        instrument_name=_coerce_text(raw.get(INSTRUMENT_NAME)),
        amount_net_usd=parse_amount(raw.get(AMOUNT_NET_USD)),
        amount_net_eur=parse_amount(raw.get(AMOUNT_NET_EUR)),
        withholding_rate_percent=_coerce_text(raw.get(WITHHOLDING_RATE)),
        withholding_tax_usd=parse_amount(raw.get(WITHHOLDING_TAX_USD)),
        withholding_tax_eur=parse_amount(raw.get(WITHHOLDING_TAX_EUR)),
        position_id=_coerce_text(raw.get(POSITION_ID)),
        dividend_type=_coerce_text(raw.get(DIVIDEND_TYPE)),
        isin=_coerce_text(raw.get(ISIN)),
    )


def _coerce_text(value: object) -> str:
    """String coercion with empty string for missing or falsy values."""
    if is_missing(value) or not value:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce_payment_date(value: object) -> str:
    """Payment date text; decoded dates and serials render as DD/MM/YYYY."""
    if is_missing(value) or not value:
        return ""
    if isinstance(value, (datetime, date)):
        return format_date(parse_date(value))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_date(parse_date(value))
    return _coerce_text(value)


def _meets_business_rule(record: DividendRecord) -> bool:
    return bool(
        record.payment_date
        and record.instrument_name
        and (record.amount_net_usd > 0 or record.amount_net_eur > 0)
    )
