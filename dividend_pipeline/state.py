"""Application state for a loaded dividend file.

The pipeline itself is stateless. The presentation shell keeps one
ViewState and replaces it through the transformations below; every
pipeline failure becomes the state's ``error`` text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from dividend_pipeline.config import IngestConfig
from dividend_pipeline.data import load_file, process_sheet
from dividend_pipeline.data.models import DividendRecord, FileInfo, Workbook
from dividend_pipeline.errors import DividendPipelineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    """Current file, sheet selection, records, and status messages.

    Attributes:
        file_info: Accepted upload metadata. None until a file is accepted.
        workbook: Decoded workbook. None until a file decodes.
        sheet_index: Selected sheet position.
        records: Records of the selected sheet (empty on failure).
        error: Human-readable failure message, if the last step failed.
        message: Success message of the last step.
    """

    file_info: FileInfo | None = None
    workbook: Workbook | None = None
    sheet_index: int = 0
    records: tuple[DividendRecord, ...] = ()
    error: str | None = None
    message: str | None = None

    @property
    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheet_names) if self.workbook else []


def open_file(path: Path, config: IngestConfig | None = None) -> ViewState:
    """Load a new upload, discarding any previous state.

    The default sheet is processed straight away.
    """
    try:
        loaded = load_file(path, config)
    except DividendPipelineError as exc:
        logger.warning("Could not load %s: %s", path, exc)
        return ViewState(error=f"Error processing the file: {exc}")

    state = ViewState(
        file_info=loaded.file_info,
        workbook=loaded.workbook,
        sheet_index=loaded.default_sheet,
    )
    return select_sheet(state, loaded.default_sheet, config)


def select_sheet(
    state: ViewState, sheet_index: int, config: IngestConfig | None = None
) -> ViewState:
    """Re-run extraction for another sheet of the loaded workbook.

    A failure clears the records but keeps the workbook, so another sheet
    can still be chosen.
    """
    if state.workbook is None:
        return state

    try:
        result = process_sheet(state.workbook, sheet_index, config)
    except DividendPipelineError as exc:
        logger.warning("Sheet #%d failed: %s", sheet_index, exc)
        return replace(
            state,
            sheet_index=sheet_index,
            records=(),
            error=f"Error processing the sheet: {exc}",
            message=None,
        )

    return replace(
        state,
        sheet_index=sheet_index,
        records=tuple(result.records),
        error=None,
        message=(
            f"File processed successfully. Found {len(result.records)} "
            f'dividend records in sheet "{result.sheet_name}".'
        ),
    )
