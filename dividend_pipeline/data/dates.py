"""Payment date parsing and display formatting.

Source exports mix Excel serial numbers, European ``DD/MM/YYYY`` text and
ISO-like ``YYYY-MM-DD`` text. Patterns are tried in order and the first
match wins; day/month/year is always assumed for the slash form, never
month/day/year.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone

import pandas as pd

from dividend_pipeline.config import EXCEL_EPOCH_OFFSET, SECONDS_PER_DAY

logger = logging.getLogger(__name__)

_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_YEAR_FIRST = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_date(value: object, today: date | None = None) -> date:
    """Normalise a payment date cell to a calendar date.

    Never raises. Empty input and unparseable text fall back to ``today``
    (or the current date when no clock is injected).

    Args:
        value: Raw cell value: text, Excel serial number, or a date/datetime
            already decoded by the spreadsheet engine.
        today: Sentinel returned when the value cannot be interpreted.

    Returns:
        The canonical calendar date.
    """
    sentinel = today if today is not None else date.today()

    if not value:
        return sentinel

    if isinstance(value, datetime):
        # NaT is a datetime subclass
        if pd.isna(value):
            return sentinel
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_serial(float(value), sentinel)

    text = str(value).strip()

    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _build_date(year, month, day, text, sentinel)

    match = _YEAR_FIRST.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _build_date(year, month, day, text, sentinel)

    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        logger.warning("Unparseable date %r, using %s", text, sentinel)
        return sentinel
    return parsed.date()


def format_date(value: date) -> str:
    """Render a date as zero-padded ``DD/MM/YYYY``."""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def _from_serial(serial: float, sentinel: date) -> date:
    """Convert an Excel serial day count (UTC) to a date."""
    if not math.isfinite(serial):
        logger.warning("Non-finite date serial %r, using %s", serial, sentinel)
        return sentinel
    seconds = (serial - EXCEL_EPOCH_OFFSET) * SECONDS_PER_DAY
    try:
        return (_UNIX_EPOCH + timedelta(seconds=seconds)).date()
    except OverflowError:
        logger.warning("Date serial %r out of range, using %s", serial, sentinel)
        return sentinel


def _build_date(
    year: int, month: int, day: int, text: str, sentinel: date
) -> date:
    """Build a date from matched components, falling back on invalid days."""
    try:
        return date(year, month, day)
    except ValueError:
        logger.warning("Invalid calendar date %r, using %s", text, sentinel)
        return sentinel
