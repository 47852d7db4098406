"""Tests for upload validation, reading, and workbook decoding."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from dividend_pipeline.config import IngestConfig
from dividend_pipeline.data.workbook import (
    format_file_size,
    load_workbook,
    read_upload,
    validate_upload,
)
from dividend_pipeline.errors import (
    InputRejectedError,
    ReadFailureError,
    WorkbookInvalidError,
)


def _write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write header-less sheets to a real .xlsx file."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


class TestValidateUpload:
    """Type and size checks before reading."""

    def test_accepts_xlsx(self, tmp_path: Path) -> None:
        path = _write_workbook(tmp_path / "divs.xlsx", {"S": [["a"]]})
        info = validate_upload(path)
        assert info.name == "divs.xlsx"
        assert info.size.endswith(("Bytes", "KB"))

    def test_extension_is_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "DIVS.XLS"
        path.write_bytes(b"content")
        assert validate_upload(path).name == "DIVS.XLS"

    def test_rejects_other_types(self, tmp_path: Path) -> None:
        path = tmp_path / "divs.csv"
        path.write_text("a,b\n")
        with pytest.raises(InputRejectedError, match="not a spreadsheet"):
            validate_upload(path)

    def test_rejects_oversize(self, tmp_path: Path) -> None:
        path = tmp_path / "big.xlsx"
        path.write_bytes(b"x" * 2048)
        config = IngestConfig(max_file_bytes=1024)
        with pytest.raises(InputRejectedError, match="too large"):
            validate_upload(path, config)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReadFailureError):
            validate_upload(tmp_path / "missing.xlsx")


class TestReadUpload:
    """Read-to-completion behaviour."""

    def test_returns_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "f.xlsx"
        path.write_bytes(b"abc")
        assert read_upload(path) == b"abc"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f.xlsx"
        path.write_bytes(b"")
        with pytest.raises(ReadFailureError, match="no data"):
            read_upload(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReadFailureError):
            read_upload(tmp_path / "missing.xlsx")


class TestLoadWorkbook:
    """Decoding into header-less grids."""

    def test_sheet_names_in_order(self, tmp_path: Path) -> None:
        path = _write_workbook(
            tmp_path / "w.xlsx",
            {"Summary": [["x"]], "Dividends": [["y"]], "Other": [["z"]]},
        )
        workbook = load_workbook(path.read_bytes())
        assert workbook.sheet_names == ["Summary", "Dividends", "Other"]
        assert set(workbook.sheets) == {"Summary", "Dividends", "Other"}

    def test_grid_is_header_less(self, tmp_path: Path) -> None:
        rows = [["Fecha de pago", "ISIN"], ["15/03/2024", "US1"]]
        path = _write_workbook(tmp_path / "w.xlsx", {"S": rows})
        grid = load_workbook(path.read_bytes()).sheets["S"]
        assert grid.shape == (2, 2)
        assert grid.iloc[0, 0] == "Fecha de pago"
        assert grid.iloc[1, 1] == "US1"

    def test_text_amounts_not_coerced(self, tmp_path: Path) -> None:
        path = _write_workbook(tmp_path / "w.xlsx", {"S": [["12,5"]]})
        grid = load_workbook(path.read_bytes()).sheets["S"]
        assert grid.iloc[0, 0] == "12,5"

    def test_garbage_content(self) -> None:
        with pytest.raises(WorkbookInvalidError, match="not a readable workbook"):
            load_workbook(b"definitely not a spreadsheet")


class TestFormatFileSize:
    """1024-based size labels."""

    @pytest.mark.parametrize(
        ("num_bytes", "expected"),
        [
            (0, "0 Bytes"),
            (500, "500 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (10 * 1024 * 1024, "10 MB"),
            (3 * 1024**3, "3 GB"),
        ],
    )
    def test_sizes(self, num_bytes: int, expected: str) -> None:
        assert format_file_size(num_bytes) == expected
