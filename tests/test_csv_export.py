"""Tests for CSV export."""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

from dividend_pipeline.analysis.aggregation import by_date, by_instrument_and_date
from dividend_pipeline.data.models import DividendRecord
from dividend_pipeline.output.csv_export import (
    DATE_COLUMNS,
    RECORD_COLUMNS,
    export_by_date_csv,
    export_by_instrument_csv,
    export_records_csv,
    to_frame,
)

TODAY = date(2025, 6, 30)

RECORDS = [
    DividendRecord(
        payment_date="15/01/2024",
        instrument_name="Coca-Cola",
        amount_net_usd=10.0,
        amount_net_eur=9.2,
        withholding_rate_percent="15 %",
        withholding_tax_usd=1.765,
        isin="US1912161007",
        dividend_type="Cash",
    ),
    DividendRecord(
        payment_date="2024-02-15",
        instrument_name="Repsol",
        amount_net_usd=4.5,
        amount_net_eur=4.1,
    ),
]


def _read(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8") as handle:
        return list(csv.reader(handle))


class TestExportRecords:
    """Cleaned record export."""

    def test_header_and_rows(self, tmp_path: Path) -> None:
        path = export_records_csv(RECORDS, tmp_path / "records.csv")
        rows = _read(path)
        assert rows[0] == [
            "payment_date", "instrument_name", "isin", "amount_net_usd",
            "amount_net_eur", "withholding_rate_percent", "withholding_tax_usd",
            "withholding_tax_eur", "position_id", "type",
        ]
        assert rows[1] == [
            "15/01/2024", "Coca-Cola", "US1912161007", "10.00",
            "9.20", "15 %", "1.76", "0.00", "", "Cash",
        ]
        # Payment date text is kept as received
        assert rows[2][0] == "2024-02-15"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = export_records_csv(RECORDS, tmp_path / "a" / "b" / "records.csv", decimals=1)
        assert path.exists()
        assert _read(path)[1][3] == "10.0"

    def test_empty(self, tmp_path: Path) -> None:
        rows = _read(export_records_csv([], tmp_path / "records.csv"))
        assert len(rows) == 1


class TestExportAggregates:
    """Date and instrument aggregate export."""

    def test_by_date(self, tmp_path: Path) -> None:
        path = export_by_date_csv(by_date(RECORDS, today=TODAY), tmp_path / "by_date.csv")
        assert _read(path) == [
            ["date", "total_usd", "total_eur", "cumulative_usd", "cumulative_eur"],
            ["15/01/2024", "10.00", "9.20", "10.00", "9.20"],
            ["2024-02-15", "4.50", "4.10", "14.50", "13.30"],
        ]

    def test_by_date_keeps_date_spellings_apart(self, tmp_path: Path) -> None:
        records = [
            DividendRecord("01/02/2024", "Coca-Cola", 1.0, 0.9),
            DividendRecord("1/2/2024", "Coca-Cola", 2.0, 1.8),
        ]
        path = export_by_date_csv(by_date(records, today=TODAY), tmp_path / "by_date.csv")
        rows = _read(path)[1:]
        assert [row[0] for row in rows] == ["01/02/2024", "1/2/2024"]
        assert [row[1] for row in rows] == ["1.00", "2.00"]

    def test_by_instrument(self, tmp_path: Path) -> None:
        aggregates = by_instrument_and_date(RECORDS, today=TODAY)
        path = export_by_instrument_csv(aggregates, tmp_path / "by_instrument.csv")
        assert _read(path) == [
            ["instrument_name", "date", "amount_usd", "amount_eur"],
            ["Coca-Cola", "15/01/2024", "10.00", "9.20"],
            ["Repsol", "2024-02-15", "4.50", "4.10"],
        ]


class TestToFrame:
    """Column-table tabulation shared with the CLI."""

    def test_headers_and_values(self) -> None:
        frame = to_frame(RECORDS, RECORD_COLUMNS)
        assert list(frame.columns) == [header for header, _ in RECORD_COLUMNS]
        assert frame["type"].tolist() == ["Cash", ""]
        assert frame["amount_net_usd"].tolist() == [10.0, 4.5]

    def test_empty(self) -> None:
        frame = to_frame([], DATE_COLUMNS)
        assert frame.empty
        assert list(frame.columns) == [header for header, _ in DATE_COLUMNS]
