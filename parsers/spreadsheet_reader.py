"""
Spreadsheet reader for bulk imports.

Reads an uploaded CSV or Excel file into ordered headers and rows of
trimmed strings, which is the shape the header auto-mapper works on.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Union
import structlog

import pandas as pd

from exceptions import ImportFileError
from utils.text_utils import clean_cell

logger = structlog.get_logger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
# openpyxl cannot read legacy binary workbooks
UNSUPPORTED_EXTENSIONS = (".xls",)
SAMPLE_VALUE_COUNT = 5


@dataclass
class SpreadsheetData:
    """Headers and rows of one uploaded sheet."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column_values(self, header: str) -> list[str]:
        """All values of one column, "" where a row has none."""
        return column_values(self.rows, header)


def column_values(rows: list[dict[str, str]], header: str) -> list[str]:
    return [row.get(header) or "" for row in rows]


def column_samples(rows: list[dict[str, str]], header: str, limit: int = SAMPLE_VALUE_COUNT) -> list[str]:
    """First `limit` non-empty values of a column, for showing to a user."""
    samples = []
    for value in column_values(rows, header):
        if value:
            samples.append(value)
            if len(samples) >= limit:
                break
    return samples


def read_spreadsheet(
    file: Union[str, Path, BytesIO, bytes],
    filename: str = "",
) -> SpreadsheetData:
    """
    Read a CSV or Excel upload.

    Excel workbooks (.xlsx/.xlsm) are read from their first sheet with
    openpyxl; legacy .xls files are rejected; everything else is read as
    CSV. Cells become trimmed strings, fully empty rows are
    dropped and column order is preserved.

    Args:
        file: File path, file-like object or raw bytes
        filename: Original filename, used to pick the format when `file`
                  is not a path

    Returns:
        SpreadsheetData

    Raises:
        ImportFileError: If the file is a legacy .xls workbook, cannot be read
                         or has no data rows
    """
    if isinstance(file, bytes):
        file = BytesIO(file)

    name = filename or (str(file) if isinstance(file, (str, Path)) else "")
    if name.lower().endswith(UNSUPPORTED_EXTENSIONS):
        logger.warning("spreadsheet_format_unsupported", filename=name)
        raise ImportFileError(
            message="Legacy .xls files are not supported; save the sheet as .xlsx or .csv",
            details={"filename": name}
        )

    is_excel = name.lower().endswith(EXCEL_EXTENSIONS)

    logger.info("reading_spreadsheet", filename=name, format="excel" if is_excel else "csv")

    try:
        if is_excel:
            df = pd.read_excel(file, sheet_name=0, engine="openpyxl")
        else:
            df = pd.read_csv(file, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except Exception as e:
        logger.error("spreadsheet_read_failed", filename=name, error=str(e))
        raise ImportFileError(
            message="Failed to read spreadsheet",
            details={"filename": name, "original_error": str(e)}
        )

    headers = [clean_cell(col) for col in df.columns]
    data = SpreadsheetData(headers=headers)

    for record in df.itertuples(index=False, name=None):
        row = {header: clean_cell(value) for header, value in zip(headers, record)}
        if any(row.values()):
            data.rows.append(row)

    if not data.rows:
        logger.warning("spreadsheet_empty", filename=name)
        raise ImportFileError(
            message="No data found in the file",
            details={"filename": name}
        )

    logger.info(
        "spreadsheet_read",
        filename=name,
        header_count=len(headers),
        row_count=data.row_count
    )

    return data
