"""
Text utilities for spreadsheet headers and cell values.

Used by the header matcher (label normalization) and the spreadsheet
reader / line parser (cell cleanup).
"""

import re
from datetime import date, datetime
from typing import Any, Optional

_LABEL_SEPARATORS = re.compile(r"[_\-\s./]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: Optional[str]) -> str:
    """
    Normalize a header or synonym for comparison.

    Lowercases and collapses runs of `_ - . /` and whitespace into a
    single space:
    - "Batch_No." → "batch no"
    - "  E.Date " → "e date"
    - "B/N" → "b n"

    Args:
        label: Raw header text

    Returns:
        Normalized label ("" for None/blank)
    """
    if not label:
        return ""
    return _LABEL_SEPARATORS.sub(" ", label.lower()).strip()


def collapse_whitespace(text: str) -> str:
    """Collapse internal whitespace runs to single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def clean_cell(value: Any, max_length: Optional[int] = None) -> str:
    """
    Clean a spreadsheet cell for downstream parsing.

    - None / NaN become ""
    - Whole-number floats lose their ".0" (pandas reads 50 as 50.0)
    - Excel dates become ISO "YYYY-MM-DD"
    - Strips whitespace, optionally truncates

    Args:
        value: Raw cell value
        max_length: Maximum characters to keep

    Returns:
        Cleaned string
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value != value:  # NaT
            return ""
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            value = int(value)

    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text
