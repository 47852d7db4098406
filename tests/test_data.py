"""Tests for sheet processing and file loading orchestration."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from dividend_pipeline.data import load_file, process_sheet
from dividend_pipeline.data.models import Workbook
from dividend_pipeline.errors import (
    HeaderNotFoundError,
    InputRejectedError,
    NoValidRecordsError,
    SheetEmptyError,
    SheetUnreadableError,
)

HEADER = [
    "Fecha de pago",
    "Nombre del instrumento",
    "Dividendo neto recibido (USD)",
    "Dividendo neto recibido (EUR)",
    "ISIN",
]

DIVIDEND_ROWS = [
    ["Dividend report", None, None, None, None],
    HEADER,
    ["15/01/2024", "Coca-Cola", 10.0, 9.2, "US1912161007"],
    ["15/02/2024", "Repsol", "4.5", "4.1", "ES0173516115"],
    ["15/03/2024", "Coca-Cola", 0, 0, "US1912161007"],
    [None, None, None, None, None],
    ["15/04/2024", "Coca-Cola", 11.0, 10.1, "US1912161007"],
]


def _grid(rows: list[list[object]]) -> pd.DataFrame:
    width = max(len(r) for r in rows)
    return pd.DataFrame([list(r) + [np.nan] * (width - len(r)) for r in rows], dtype=object)


def _make_workbook(**sheets: list[list[object]]) -> Workbook:
    return Workbook(
        sheet_names=list(sheets),
        sheets={name: _grid(rows) if rows else pd.DataFrame() for name, rows in sheets.items()},
    )


def _write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


class TestProcessSheet:
    """Extraction plus cleaning of one sheet."""

    def test_returns_cleaned_records(self) -> None:
        workbook = _make_workbook(Dividends=DIVIDEND_ROWS)
        result = process_sheet(workbook, 0)
        assert result.sheet_name == "Dividends"
        assert result.headers == HEADER
        assert [r.payment_date for r in result.records] == [
            "15/01/2024", "15/02/2024", "15/04/2024",
        ]
        assert result.records[1].amount_net_usd == pytest.approx(4.5)

    def test_index_out_of_range(self) -> None:
        workbook = _make_workbook(Dividends=DIVIDEND_ROWS)
        with pytest.raises(SheetUnreadableError):
            process_sheet(workbook, 5)

    def test_sheet_missing_from_map(self) -> None:
        workbook = Workbook(sheet_names=["Broken"], sheets={})
        with pytest.raises(SheetUnreadableError, match='"Broken"'):
            process_sheet(workbook, 0)

    def test_empty_sheet(self) -> None:
        workbook = _make_workbook(Empty=[])
        with pytest.raises(SheetEmptyError, match='"Empty"'):
            process_sheet(workbook, 0)

    def test_no_header(self) -> None:
        workbook = _make_workbook(Notes=[["just", "some", "notes"]] * 6)
        with pytest.raises(HeaderNotFoundError, match='"Notes"'):
            process_sheet(workbook, 0)

    def test_no_valid_records_lists_headers(self) -> None:
        rows = [HEADER, ["15/01/2024", "Coca-Cola", 0, 0, "US1"]]
        workbook = _make_workbook(Dividends=rows)
        with pytest.raises(NoValidRecordsError) as info:
            process_sheet(workbook, 0)
        assert info.value.headers == HEADER
        assert "Nombre del instrumento" in str(info.value)

    def test_sheets_processed_independently(self) -> None:
        workbook = _make_workbook(
            Notes=[["just", "some", "notes"]],
            Dividends=DIVIDEND_ROWS,
        )
        with pytest.raises(HeaderNotFoundError):
            process_sheet(workbook, 0)
        assert len(process_sheet(workbook, 1).records) == 3


class TestLoadFile:
    """End-to-end loading from a real .xlsx file."""

    def test_selects_dividend_sheet(self, tmp_path: Path) -> None:
        path = _write_workbook(
            tmp_path / "export.xlsx",
            {"Summary": [["x"]], "Positions": [["y"]], "Dividends": DIVIDEND_ROWS},
        )
        loaded = load_file(path)
        assert loaded.default_sheet == 2
        assert loaded.file_info.name == "export.xlsx"

        result = process_sheet(loaded.workbook, loaded.default_sheet)
        assert len(result.records) == 3
        assert result.records[0].instrument_name == "Coca-Cola"
        assert result.records[0].amount_net_usd == pytest.approx(10.0)

    def test_positional_fallback(self, tmp_path: Path) -> None:
        sheets = {f"Sheet{i}": [["x"]] for i in range(1, 4)}
        sheets["Sheet4"] = DIVIDEND_ROWS
        path = _write_workbook(tmp_path / "export.xlsx", sheets)
        loaded = load_file(path)
        assert loaded.default_sheet == 3
        assert len(process_sheet(loaded.workbook, 3).records) == 3

    def test_rejected_before_read(self, tmp_path: Path) -> None:
        path = tmp_path / "export.txt"
        path.write_text("hello")
        with pytest.raises(InputRejectedError):
            load_file(path)
