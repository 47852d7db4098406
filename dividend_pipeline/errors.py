"""Exceptions raised while loading and processing dividend spreadsheets.

Each class maps to one user-facing failure condition. Library code raises
them; ``dividend_pipeline.state`` and the CLI turn them into messages.
"""

from __future__ import annotations


class DividendPipelineError(Exception):
    """Base class for all recoverable pipeline failures."""


class InputRejectedError(DividendPipelineError):
    """Upload has the wrong file type or exceeds the size limit."""


class ReadFailureError(DividendPipelineError):
    """Underlying byte read failed or returned nothing."""


class WorkbookInvalidError(DividendPipelineError):
    """Workbook could not be decoded or contains no sheets."""


class SheetUnreadableError(DividendPipelineError):
    """Selected sheet is missing from the workbook's sheet map."""


class SheetEmptyError(DividendPipelineError):
    """Selected sheet contains no rows."""


class HeaderNotFoundError(DividendPipelineError):
    """No header row within the scanned rows of a sheet."""

    def __init__(self, sheet_name: str, scanned_rows: int) -> None:
        self.sheet_name = sheet_name
        self.scanned_rows = scanned_rows
        super().__init__(
            f'No header row found in the first {scanned_rows} rows of sheet '
            f'"{sheet_name}"'
        )


class NoValidRecordsError(DividendPipelineError):
    """Extraction and cleaning left no dividend records."""

    def __init__(self, sheet_name: str, headers: list[str]) -> None:
        self.sheet_name = sheet_name
        self.headers = list(headers)
        found = ", ".join(self.headers) if self.headers else "none"
        super().__init__(
            f'No valid dividend records found in sheet "{sheet_name}". '
            f"Check that the file has the expected columns (headers found: {found})"
        )
