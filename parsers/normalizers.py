"""
Flexible date and number normalizers.

Spreadsheet cells and pasted product lines carry dates and amounts in
whatever shape the person typing them preferred. These helpers turn them
into canonical values and signal failure with a sentinel (None / 0.0)
instead of raising, so one bad cell never aborts a bulk import.
"""

import re
from datetime import date
from typing import Optional
import structlog

import pandas as pd

logger = structlog.get_logger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
MONTH_YEAR = re.compile(r"^(\d{1,2})/(\d{4})$")
DASH_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
FOUR_DIGIT_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")
MONTH_NAME = re.compile(r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\b", re.IGNORECASE)

CURRENCY_NOISE = re.compile(r"[₦$,\s]")
LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

MONTHS: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


def format_iso_date(year: int, month: int, day: int = 1) -> Optional[str]:
    """Build "YYYY-MM-DD", or None when the parts are not a real date."""
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def expand_year(year: str) -> int:
    """Two-digit years are taken as 20YY."""
    return int(f"20{year}") if len(year) == 2 else int(year)


def parse_flexible_date(value: Optional[str]) -> Optional[str]:
    """
    Parse a human-entered date into "YYYY-MM-DD".

    Strategies, first hit wins:
    1. "YYYY-MM-DD" passes through unchanged
    2. "A/B/YYYY" - if A > 12 it is the day (DD/MM), otherwise A is the month
    3. "MM/YYYY" - day defaults to 01
    4. "DD-MM-YYYY"
    5. pandas date parsing ("Mar 2026", "15 March 2026", ...)

    Args:
        value: Raw date text

    Returns:
        ISO date string, or None if every strategy fails
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()

    if ISO_DATE.match(cleaned):
        return cleaned

    match = SLASH_DATE.match(cleaned)
    if match:
        a, b, year = match.groups()
        if int(a) > 12:
            day, month = a, b
        else:
            month, day = a, b
        parsed = format_iso_date(int(year), int(month), int(day))
        if parsed:
            return parsed

    match = MONTH_YEAR.match(cleaned)
    if match:
        month, year = match.groups()
        parsed = format_iso_date(int(year), int(month))
        if parsed:
            return parsed

    match = DASH_DATE.match(cleaned)
    if match:
        day, month, year = match.groups()
        parsed = format_iso_date(int(year), int(month), int(day))
        if parsed:
            return parsed

    # Bare numbers and words like "now" would otherwise parse to today's date
    if not (FOUR_DIGIT_YEAR.search(cleaned) or MONTH_NAME.search(cleaned)):
        logger.debug("date_unparseable", value=cleaned)
        return None

    try:
        timestamp = pd.to_datetime(cleaned, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        timestamp = pd.NaT

    if pd.isna(timestamp):
        logger.debug("date_unparseable", value=cleaned)
        return None

    return timestamp.date().isoformat()


def parse_numeric_value(value: Optional[str]) -> float:
    """
    Parse an amount or count, ignoring ₦, $, thousands commas and spaces.

    Like a lenient float parse, a numeric prefix is accepted
    ("1500NGN" → 1500.0).

    Args:
        value: Raw cell text

    Returns:
        Parsed number, 0.0 for empty or unparseable input (never NaN)
    """
    parsed = parse_numeric_or_none(value)
    return parsed if parsed is not None else 0.0


def parse_numeric_or_none(value: Optional[str]) -> Optional[float]:
    """
    Same rules as parse_numeric_value, but None when nothing parses.

    Lets callers tell a real zero apart from an unreadable cell.
    """
    if value is None:
        return None

    cleaned = CURRENCY_NOISE.sub("", str(value))
    if not cleaned:
        return None

    match = LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group(0))
