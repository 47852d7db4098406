"""Upload validation, byte reading, and workbook decoding."""

from __future__ import annotations

import io
import logging
import mimetypes
from datetime import datetime
from pathlib import Path

import pandas as pd

from dividend_pipeline.config import IngestConfig
from dividend_pipeline.data.models import FileInfo, Workbook
from dividend_pipeline.errors import (
    InputRejectedError,
    ReadFailureError,
    WorkbookInvalidError,
)

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def validate_upload(path: Path, config: IngestConfig | None = None) -> FileInfo:
    """Check file type and size before anything is read.

    The file is accepted when either its extension or its guessed MIME
    type identifies a spreadsheet.

    Args:
        path: Uploaded file.
        config: Ingest configuration (defaults used if None).

    Returns:
        FileInfo for display.

    Raises:
        InputRejectedError: Wrong file type, or file larger than the limit.
        ReadFailureError: File metadata cannot be read.
    """
    cfg = config or IngestConfig()

    mime_type, _ = mimetypes.guess_type(path.name)
    has_extension = path.suffix.lower() in cfg.allowed_extensions
    if not has_extension and mime_type not in cfg.allowed_mime_types:
        raise InputRejectedError(
            f"{path.name}: not a spreadsheet file "
            f"(expected {' or '.join(cfg.allowed_extensions)})"
        )

    try:
        stat = path.stat()
    except OSError as exc:
        raise ReadFailureError(f"{path.name}: {exc.strerror or exc}") from exc

    if stat.st_size > cfg.max_file_bytes:
        raise InputRejectedError(
            f"{path.name}: file is too large ({format_file_size(stat.st_size)}, "
            f"maximum {format_file_size(cfg.max_file_bytes)})"
        )

    return FileInfo(
        name=path.name,
        size=format_file_size(stat.st_size),
        last_modified=datetime.fromtimestamp(stat.st_mtime),
    )


def read_upload(path: Path) -> bytes:
    """Read the whole file into memory.

    Raises:
        ReadFailureError: The read failed or produced no bytes.
    """
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ReadFailureError(f"{path.name}: {exc.strerror or exc}") from exc

    if not content:
        raise ReadFailureError(f"{path.name}: the file could not be read (no data)")

    logger.debug("%s: read %d bytes", path.name, len(content))
    return content


def load_workbook(content: bytes) -> Workbook:
    """Decode spreadsheet bytes into a Workbook of header-less grids.

    The engine is chosen from the content (openpyxl for .xlsx, xlrd for
    .xls). Cells are kept as objects so text amounts are not coerced.
    A sheet that fails to decode is left out of the sheet map.

    Raises:
        WorkbookInvalidError: Content is not a readable workbook, or it
            has no sheets.
    """
    try:
        excel_file = pd.ExcelFile(io.BytesIO(content))
    except Exception as exc:
        raise WorkbookInvalidError(f"The file is not a readable workbook: {exc}") from exc

    with excel_file:
        sheet_names = [str(name) for name in excel_file.sheet_names]
        if not sheet_names:
            raise WorkbookInvalidError("The file contains no worksheets")

        sheets: dict[str, pd.DataFrame] = {}
        for name in sheet_names:
            try:
                sheets[name] = pd.read_excel(
                    excel_file, sheet_name=name, header=None, dtype=object
                )
            except Exception as exc:
                logger.warning("Sheet %r could not be decoded: %s", name, exc)

    logger.info("Workbook with %d sheets (%d readable)", len(sheet_names), len(sheets))
    return Workbook(sheet_names=sheet_names, sheets=sheets)


def format_file_size(num_bytes: int) -> str:
    """Human-readable size using 1024-based units, up to two decimals."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"
