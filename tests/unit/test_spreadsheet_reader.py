"""
Unit tests for the spreadsheet reader and cell cleanup.

Run: pytest tests/unit/test_spreadsheet_reader.py -v
"""

from datetime import date, datetime
from io import BytesIO

import pandas as pd
import pytest

from exceptions import ImportFileError
from parsers.spreadsheet_reader import (
    SpreadsheetData,
    read_spreadsheet,
    column_values,
    column_samples,
)
from utils.text_utils import clean_cell, normalize_label, collapse_whitespace


def build_xlsx(frame: pd.DataFrame) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False)
    return buffer.getvalue()


class TestReadCsv:
    """CSV uploads."""

    def test_headers_and_rows_in_order(self):
        content = b"Drug Name,Qty,Exp Date\nParacetamol, 100 ,2026-03-01\nAmoxicillin,40,15/08/2026\n"

        data = read_spreadsheet(content, filename="stock.csv")

        assert data.headers == ["Drug Name", "Qty", "Exp Date"]
        assert data.rows[0] == {"Drug Name": "Paracetamol", "Qty": "100", "Exp Date": "2026-03-01"}
        assert data.row_count == 2

    def test_values_stay_as_text(self):
        """Leading zeros and 'NA' are not coerced."""
        content = b"Phone,Note\n08031234567,NA\n"

        data = read_spreadsheet(content, filename="customers.csv")

        assert data.rows == [{"Phone": "08031234567", "Note": "NA"}]

    def test_empty_rows_are_dropped(self):
        content = b"Name,Qty\nParacetamol,10\n,\nIbuprofen,5\n"

        data = read_spreadsheet(content, filename="stock.csv")

        assert [row["Name"] for row in data.rows] == ["Paracetamol", "Ibuprofen"]

    def test_unknown_extension_read_as_csv(self):
        data = read_spreadsheet(BytesIO(b"Name\nParacetamol\n"), filename="upload.txt")

        assert data.headers == ["Name"]

    def test_header_only_file_has_no_data(self):
        with pytest.raises(ImportFileError) as exc_info:
            read_spreadsheet(b"Name,Qty\n", filename="stock.csv")

        assert exc_info.value.message == "No data found in the file"

    def test_empty_file_cannot_be_read(self):
        with pytest.raises(ImportFileError) as exc_info:
            read_spreadsheet(b"", filename="stock.csv")

        assert exc_info.value.message == "Failed to read spreadsheet"
        assert exc_info.value.status_code == 422


class TestReadExcel:
    """Excel uploads."""

    def test_reads_first_sheet(self):
        frame = pd.DataFrame({
            "Drug Name": ["Paracetamol", "Amoxicillin"],
            "Qty": [100, 40],
            "Cost Price": [1200.0, 2000.5],
        })

        data = read_spreadsheet(build_xlsx(frame), filename="stock.xlsx")

        assert data.headers == ["Drug Name", "Qty", "Cost Price"]
        assert data.rows[0] == {"Drug Name": "Paracetamol", "Qty": "100", "Cost Price": "1200"}
        assert data.rows[1]["Cost Price"] == "2000.5"

    def test_dates_become_iso(self):
        frame = pd.DataFrame({
            "Name": ["Paracetamol", "Ibuprofen"],
            "Expiry": [datetime(2026, 3, 1), None],
        })

        data = read_spreadsheet(build_xlsx(frame), filename="stock.xlsx")

        assert data.rows[0]["Expiry"] == "2026-03-01"
        assert data.rows[1]["Expiry"] == ""

    def test_corrupt_workbook(self):
        with pytest.raises(ImportFileError):
            read_spreadsheet(b"not a workbook", filename="stock.xlsx")

    def test_legacy_xls_is_rejected(self):
        with pytest.raises(ImportFileError) as exc_info:
            read_spreadsheet(b"\xd0\xcf\x11\xe0", filename="Stock.XLS")

        assert ".xls" in exc_info.value.message
        assert exc_info.value.details == {"filename": "Stock.XLS"}


class TestColumnHelpers:
    """Tests for column_values() and column_samples()"""

    ROWS = [{"Name": "A"}, {"Name": ""}, {}, {"Name": "B"}, {"Name": "C"}]

    def test_column_values_fill_missing(self):
        assert column_values(self.ROWS, "Name") == ["A", "", "", "B", "C"]

    def test_column_samples_skip_blanks(self):
        assert column_samples(self.ROWS, "Name", limit=2) == ["A", "B"]

    def test_dataclass_delegates(self):
        data = SpreadsheetData(headers=["Name"], rows=self.ROWS)

        assert data.column_values("Name") == column_values(self.ROWS, "Name")


class TestCleanCell:
    """Tests for clean_cell()"""

    def test_none_and_nan(self):
        assert clean_cell(None) == ""
        assert clean_cell(float("nan")) == ""
        assert clean_cell(pd.NaT) == ""

    def test_whole_floats_lose_decimal(self):
        assert clean_cell(50.0) == "50"
        assert clean_cell(12.75) == "12.75"

    def test_dates(self):
        assert clean_cell(pd.Timestamp("2026-03-01 13:45")) == "2026-03-01"
        assert clean_cell(date(2026, 3, 1)) == "2026-03-01"

    def test_strip_and_truncate(self):
        assert clean_cell("  Paracetamol  ") == "Paracetamol"
        assert clean_cell("Paracetamol", max_length=4) == "Para"


class TestLabels:
    """Tests for normalize_label() and collapse_whitespace()"""

    @pytest.mark.parametrize("raw,expected", [
        ("Batch_No.", "batch no"),
        ("  E.Date ", "e date"),
        ("B/N", "b n"),
        ("Cost--Price", "cost price"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize_label(self, raw, expected):
        assert normalize_label(raw) == expected

    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \t b\n c ") == "a b c"
