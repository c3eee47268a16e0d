"""
Value-pattern classifier.

Guesses what a spreadsheet column holds by looking at the shape of its
values rather than its header. Used as a fallback when the header matches
nothing in the synonym dictionary.
"""

import re
from datetime import date
from typing import Iterable, Optional
import structlog

logger = structlog.get_logger(__name__)

SAMPLE_SIZE = 10

# Type guesses returned by detect_field_type_from_values
EXPIRY_DATE = "expiry_date"
DATE = "date"
BATCH_NUMBER = "batch_number"
PHONE = "phone"
EMAIL = "email"
PRICE = "price"
NUMERIC = "numeric"

DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),  # 2026-03-01
    re.compile(r"^\d{2}/\d{2}/\d{4}$"),  # 01/03/2026
    re.compile(r"^\d{2}-\d{2}-\d{4}$"),  # 01-03-2026
    re.compile(r"^\d{2}/\d{4}$"),  # 03/2026 (expiry format)
    re.compile(r"^\d{2}-\d{4}$"),  # 03-2026
    re.compile(r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE),
]

BATCH_PATTERNS = [
    re.compile(r"^[A-Z]{2,}\d+$", re.IGNORECASE),  # ABC123
    re.compile(r"^BN?\d+$", re.IGNORECASE),  # BN12345, B12345
    re.compile(r"^[A-Z0-9]{6,}$", re.IGNORECASE),  # 6+ alphanumerics
]

PHONE_PATTERNS = [
    re.compile(r"^0[789]\d{9}$"),  # Nigerian mobile: 08031234567
    re.compile(r"^\+234\d{10}$"),  # +2348031234567
    re.compile(r"^\d{10,11}$"),  # Generic
]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NUMERIC_PATTERN = re.compile(r"^[\d,]+\.?\d*$")
YEAR_PATTERN = re.compile(r"(?<!\d)(\d{4})(?!\d)")
CURRENCY_SYMBOL = re.compile(r"[₦$]")
TWO_DECIMALS = re.compile(r"\.\d{2}$")

PHONE_NOISE = re.compile(r"[\s\-()]")
CURRENCY_NOISE = re.compile(r"[₦$,\s]")


def sample_values(values: Iterable[Optional[str]], size: int = SAMPLE_SIZE) -> list[str]:
    """First `size` non-empty values, trimmed."""
    sample = []
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            sample.append(text)
            if len(sample) >= size:
                break
    return sample


def _share_at_least(matches: int, total: int, percent: int) -> bool:
    """matches/total >= percent%, in integers so 7/10 clears 70% exactly."""
    return matches * 100 >= total * percent


def _any_match(value: str, patterns: list[re.Pattern]) -> bool:
    return any(p.search(value) for p in patterns)


def _has_future_year(values: list[str], current_year: int) -> bool:
    for value in values:
        for year in YEAR_PATTERN.findall(value):
            if int(year) > current_year:
                return True
    return False


def detect_field_type_from_values(
    values: Iterable[Optional[str]],
    today: Optional[date] = None,
    sample_size: int = SAMPLE_SIZE,
) -> Optional[str]:
    """
    Classify a column from a sample of its values.

    Checks run in order and the first one that clears its threshold wins:

    1. Dates (70%): "expiry_date" when any matched value has a year after
       the current one, otherwise "date"
    2. Batch codes (50%)
    3. Phone numbers (50%), after stripping spaces, dashes and parens
    4. Emails (50%)
    5. Numbers (70%): "price" when any value carries ₦/$ or a two-decimal
       suffix, otherwise "numeric"

    Args:
        values: Raw column values (only the first `sample_size` non-empty
                ones are inspected)
        today: Reference date for the expiry check (defaults to today)
        sample_size: How many values to sample

    Returns:
        Type guess, or None when the sample is too mixed
    """
    sample = sample_values(values, sample_size)
    if not sample:
        return None

    total = len(sample)

    date_matches = [v for v in sample if _any_match(v, DATE_PATTERNS)]
    if _share_at_least(len(date_matches), total, 70):
        current_year = (today or date.today()).year
        if _has_future_year(date_matches, current_year):
            return EXPIRY_DATE
        return DATE

    batch_matches = sum(1 for v in sample if _any_match(v, BATCH_PATTERNS))
    if _share_at_least(batch_matches, total, 50):
        return BATCH_NUMBER

    phone_matches = sum(
        1 for v in sample if _any_match(PHONE_NOISE.sub("", v), PHONE_PATTERNS)
    )
    if _share_at_least(phone_matches, total, 50):
        return PHONE

    email_matches = sum(1 for v in sample if EMAIL_PATTERN.match(v))
    if _share_at_least(email_matches, total, 50):
        return EMAIL

    numeric_matches = sum(
        1 for v in sample if NUMERIC_PATTERN.match(CURRENCY_NOISE.sub("", v))
    )
    if _share_at_least(numeric_matches, total, 70):
        looks_like_price = any(
            CURRENCY_SYMBOL.search(v) or TWO_DECIMALS.search(v) for v in sample
        )
        return PRICE if looks_like_price else NUMERIC

    logger.debug("value_type_undetected", sample_size=total)
    return None
