"""Data models for the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd


@dataclass(frozen=True)
class DividendRecord:
    """One cleaned dividend payment, consumed by every analysis module.

    Attributes:
        payment_date: Payment date text as received. Used for display and
            as the grouping key.
        instrument_name: Long-form company name as it appears in the source.
        amount_net_usd: Net dividend received in USD.
        amount_net_eur: Net dividend received in EUR.
        withholding_rate_percent: Withholding rate, kept as free text.
        withholding_tax_usd: Tax withheld in USD.
        withholding_tax_eur: Tax withheld in EUR.
        position_id: Broker position identifier.
        dividend_type: Payment type label.
        isin: Instrument ISIN.
    """

    payment_date: str
    instrument_name: str
    amount_net_usd: float
    amount_net_eur: float
    withholding_rate_percent: str = ""
    withholding_tax_usd: float = 0.0
    withholding_tax_eur: float = 0.0
    position_id: str = ""
    dividend_type: str = ""
    isin: str = ""


@dataclass
class Workbook:
    """Decoded spreadsheet.

    Attributes:
        sheet_names: Sheet names in workbook order.
        sheets: Header-less cell grid per readable sheet. Rows and columns
            are 0-indexed; empty cells are NaN or None. Sheets that failed
            to decode are absent.
    """

    sheet_names: list[str]
    sheets: dict[str, pd.DataFrame] = field(default_factory=dict)


@dataclass(frozen=True)
class FileInfo:
    """Metadata of an accepted upload."""

    name: str
    size: str
    last_modified: datetime
