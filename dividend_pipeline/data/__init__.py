"""Data loading orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dividend_pipeline.config import IngestConfig
from dividend_pipeline.data.cleaning import clean_records
from dividend_pipeline.data.models import DividendRecord, FileInfo, Workbook
from dividend_pipeline.data.sheets import (
    extract_rows,
    header_labels,
    locate_header_row,
    select_default_sheet,
)
from dividend_pipeline.data.workbook import load_workbook, read_upload, validate_upload
from dividend_pipeline.errors import (
    NoValidRecordsError,
    SheetEmptyError,
    SheetUnreadableError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DividendRecord",
    "LoadedFile",
    "SheetResult",
    "Workbook",
    "load_file",
    "process_sheet",
]


@dataclass(frozen=True)
class SheetResult:
    """Outcome of processing one sheet.

    Attributes:
        sheet_name: Name of the processed sheet.
        headers: Header labels found in the sheet.
        records: Cleaned dividend records, in sheet order.
    """

    sheet_name: str
    headers: list[str]
    records: list[DividendRecord]


@dataclass(frozen=True)
class LoadedFile:
    """An accepted upload decoded into a workbook."""

    file_info: FileInfo
    workbook: Workbook
    default_sheet: int


def load_file(path: Path, config: IngestConfig | None = None) -> LoadedFile:
    """Validate, read, and decode an upload, and pick its default sheet.

    Loading sequence:
        1. Reject wrong file types and oversize files (nothing is read).
        2. Read the file to completion.
        3. Decode the workbook.
        4. Select the sheet most likely to hold dividends.

    Raises:
        InputRejectedError, ReadFailureError, WorkbookInvalidError.
    """
    file_info = validate_upload(path, config)
    content = read_upload(path)
    workbook = load_workbook(content)
    default_sheet = select_default_sheet(workbook.sheet_names, config)
    logger.info(
        "%s (%s): default sheet %r",
        file_info.name, file_info.size, workbook.sheet_names[default_sheet],
    )
    return LoadedFile(file_info=file_info, workbook=workbook, default_sheet=default_sheet)


def process_sheet(
    workbook: Workbook,
    sheet_index: int,
    config: IngestConfig | None = None,
) -> SheetResult:
    """Extract and clean the dividend records of one sheet.

    Each call re-runs the whole extraction from the workbook; nothing is
    cached between sheets.

    Args:
        workbook: Decoded workbook.
        sheet_index: Position of the sheet in ``workbook.sheet_names``.
        config: Ingest configuration (defaults used if None).

    Returns:
        SheetResult with at least one record.

    Raises:
        SheetUnreadableError: Index out of range or sheet not decoded.
        SheetEmptyError: Sheet has no rows.
        HeaderNotFoundError: No header row in the scanned rows.
        NoValidRecordsError: No row survived cleaning.
    """
    if not 0 <= sheet_index < len(workbook.sheet_names):
        raise SheetUnreadableError(f"Sheet #{sheet_index} does not exist in the workbook")

    sheet_name = workbook.sheet_names[sheet_index]
    sheet = workbook.sheets.get(sheet_name)
    if sheet is None:
        raise SheetUnreadableError(f'Sheet "{sheet_name}" could not be read')

    if sheet.empty:
        raise SheetEmptyError(f'Sheet "{sheet_name}" is empty or contains no data')

    header_row = locate_header_row(sheet, sheet_name, config)
    headers = header_labels(sheet, header_row)
    records = clean_records(extract_rows(sheet, header_row))

    if not records:
        raise NoValidRecordsError(sheet_name, headers)

    logger.info("%s: %d dividend records", sheet_name, len(records))
    return SheetResult(sheet_name=sheet_name, headers=headers, records=records)
