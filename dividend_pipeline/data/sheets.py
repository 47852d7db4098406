"""Header detection and row extraction for a single worksheet."""

from __future__ import annotations

import logging

import pandas as pd

from dividend_pipeline.config import IngestConfig
from dividend_pipeline.data.cleaning import is_missing
from dividend_pipeline.errors import HeaderNotFoundError, WorkbookInvalidError

logger = logging.getLogger(__name__)


def _is_empty(cell: object) -> bool:
    return is_missing(cell) or (isinstance(cell, str) and cell == "")


def _label(cell: object) -> str:
    """Header label text for a cell ("" for empty cells)."""
    if _is_empty(cell):
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


def locate_header_row(
    sheet: pd.DataFrame,
    sheet_name: str,
    config: IngestConfig | None = None,
) -> int:
    """Find the header row by keyword heuristic.

    A row qualifies when it has more than ``min_header_cells`` non-empty
    cells and one of them contains a header keyword (case-insensitive).
    Only the first ``header_scan_rows`` rows are considered.

    Args:
        sheet: Header-less cell grid.
        sheet_name: Sheet name, reported on failure.
        config: Ingest configuration (defaults used if None).

    Returns:
        0-based index of the first qualifying row.

    Raises:
        HeaderNotFoundError: If no scanned row qualifies.
    """
    cfg = config or IngestConfig()
    n_scan = min(cfg.header_scan_rows, len(sheet))

    for idx in range(n_scan):
        cells = [c for c in sheet.iloc[idx].tolist() if not _is_empty(c)]
        if len(cells) <= cfg.min_header_cells:
            continue
        texts = [str(c).strip().lower() for c in cells]
        if any(kw in text for text in texts for kw in cfg.header_keywords):
            logger.debug("%s: header found at row %d", sheet_name, idx)
            return idx

    raise HeaderNotFoundError(sheet_name, cfg.header_scan_rows)


def header_labels(sheet: pd.DataFrame, header_row: int) -> list[str]:
    """Non-empty, trimmed header labels in column order."""
    labels = [_label(c) for c in sheet.iloc[header_row].tolist()]
    return [label for label in labels if label]


def extract_rows(sheet: pd.DataFrame, header_row: int) -> list[dict[str, object]]:
    """Map every row below the header to a dict keyed by header label.

    Columns with an empty header label are skipped, as are null, NaN and
    empty-string cells. Rows left with no keys are dropped.

    Args:
        sheet: Header-less cell grid.
        header_row: Index returned by ``locate_header_row``.

    Returns:
        Keyed raw rows, in sheet order.
    """
    labels = [_label(c) for c in sheet.iloc[header_row].tolist()]
    rows: list[dict[str, object]] = []

    for idx in range(header_row + 1, len(sheet)):
        cells = sheet.iloc[idx].tolist()
        row: dict[str, object] = {}
        for label, cell in zip(labels, cells):
            if not label or _is_empty(cell):
                continue
            row[label] = cell
        if row:
            rows.append(row)

    logger.debug("Extracted %d populated rows below header row %d", len(rows), header_row)
    return rows


def select_default_sheet(
    sheet_names: list[str], config: IngestConfig | None = None
) -> int:
    """Pick the sheet most likely to hold dividend data.

    Prefers the first name containing a dividend keyword; otherwise falls
    back to ``fallback_sheet_index`` (the fourth sheet by convention),
    clamped to the last sheet.

    Raises:
        WorkbookInvalidError: If there are no sheets.
    """
    cfg = config or IngestConfig()
    if not sheet_names:
        raise WorkbookInvalidError("The file contains no worksheets")

    for idx, name in enumerate(sheet_names):
        lowered = name.lower()
        if any(kw in lowered for kw in cfg.dividend_sheet_keywords):
            return idx

    return min(cfg.fallback_sheet_index, len(sheet_names) - 1)
