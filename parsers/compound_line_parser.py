"""
Compound product-line parser.

Breaks a single free-text product line, as typed by hand or read off a
scanned invoice, into structured fields:

    "Amoxicillin 250mg Caps - 50pcs N2000 B/N: ABC123"
    → name="Amoxicillin 250mg Caps", quantity=50, price=2000.0,
      batch_number="ABC123", category="Capsule"

Extraction is a fixed pipeline of stages (quantity, price, expiry, batch).
Each stage tries its patterns in order; the first hit sets the field and its
span is cut out of the remaining text before the next stage runs. Category
is then read (without cutting) from what is left, and the leftover text
becomes the product name.
"""

import re
from dataclasses import dataclass, asdict
from typing import Callable, Optional
import structlog

from parsers.normalizers import MONTHS, expand_year, format_iso_date
from utils.text_utils import collapse_whitespace

logger = structlog.get_logger(__name__)

NAME_MAX_LENGTH = 100
MIN_NAME_LENGTH = 2

AMOUNT = r"(\d[\d,]*(?:\.\d+)?)"
CURRENCY = r"(?:₦|N)"
EXPIRY_PREFIX = r"\b(?:expiry|exp|best\s+before|bb)\b[:.\s]*"
MONTH_ALTERNATION = "|".join(MONTHS)

QUANTITY_PATTERNS = [
    re.compile(r"\bx\s*(\d+)\b", re.IGNORECASE),
    re.compile(
        r"\b(\d+)\s*(?:pcs|pieces|units?|tablets?|tabs?|capsules?|caps?|bottles?|packs?|boxes|box|cartons?)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\((\d+)\s*(?:tablets?|tabs?|caps?|pieces?|pcs|units?)\)", re.IGNORECASE),
    re.compile(r"\bqty\s*[:.]?\s*(\d+)\b", re.IGNORECASE),
    re.compile(r"\bstock\s*[:.]?\s*(\d+)\b", re.IGNORECASE),
]

# The bare "N" currency prefix is case-sensitive and may not follow a letter,
# digit or slash, so "Amoxicillin 250" and "B/N 123" are not prices.
PRICE_PATTERNS = [
    re.compile(rf"(?:@\s*)?(?:₦|(?<![\w/])N)\s?{AMOUNT}"),
    re.compile(rf"@\s*{CURRENCY}?\s?{AMOUNT}"),
    re.compile(rf"\bNGN\s*{AMOUNT}", re.IGNORECASE),
    re.compile(rf"\bprice\s*[:.]?\s*{CURRENCY}?\s?{AMOUNT}", re.IGNORECASE),
    re.compile(rf"\bcost\s*[:.]?\s*{CURRENCY}?\s?{AMOUNT}", re.IGNORECASE),
    re.compile(rf"{AMOUNT}\s*(?:naira|ngn)\b", re.IGNORECASE),
]

EXPIRY_PATTERNS = [
    re.compile(rf"{EXPIRY_PREFIX}(\d{{1,2}})[/-](\d{{4}}|\d{{2}})\b", re.IGNORECASE),
    re.compile(rf"{EXPIRY_PREFIX}(\d{{4}})-(\d{{2}})-(\d{{2}})\b", re.IGNORECASE),
    re.compile(rf"{EXPIRY_PREFIX}({MONTH_ALTERNATION})[a-z]*\.?[\s/-]*(\d{{4}})\b", re.IGNORECASE),
]

BATCH_PATTERNS = [
    re.compile(r"\b(?:b/n|batch|lot|bn)\b(?:\s*no\b\.?)?[:.#\s]*([A-Z0-9][A-Z0-9-]*)", re.IGNORECASE),
]

# Declaration order decides ties: the first category whose keyword appears wins.
CATEGORY_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("tab", "tablet"), "Tablet"),
    (("cap", "caps", "capsule"), "Capsule"),
    (("syrup", "syr", "suspension", "susp"), "Syrup"),
    (("inj", "injection", "vial"), "Injection"),
    (("cream", "ointment", "gel", "topical"), "Cream"),
    (("drop", "drops", "eye", "ear"), "Drops"),
    (("inhaler", "spray", "nasal"), "Inhaler"),
    (("powder", "sachet"), "Powder"),
]

CATEGORY_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(?:" + "|".join(keywords) + r")s?\b", re.IGNORECASE), category)
    for keywords, category in CATEGORY_KEYWORDS
]

NAME_EDGE_SEPARATORS = " -–—:,"
EMPTY_BRACKETS = re.compile(r"\(\s*\)|\[\s*\]")


@dataclass
class ParsedProductLine:
    """Structured fields extracted from one product line."""
    name: str
    quantity: Optional[int] = None
    price: Optional[float] = None
    expiry: Optional[str] = None  # YYYY-MM-DD
    batch_number: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, dropping fields that were not found."""
        return {key: value for key, value in asdict(self).items() if value is not None}


def _to_quantity(match: re.Match) -> int:
    return int(match.group(1))


def _to_price(match: re.Match) -> float:
    return float(match.group(1).replace(",", ""))


def _to_expiry(match: re.Match) -> Optional[str]:
    groups = match.groups()
    if len(groups) == 3:
        year, month, day = groups
        return format_iso_date(int(year), int(month), int(day))

    month, year = groups
    if month.isdigit():
        return format_iso_date(expand_year(year), int(month))
    return format_iso_date(int(year), MONTHS[month[:3].lower()])


def _to_batch(match: re.Match) -> str:
    return match.group(1).strip()


@dataclass(frozen=True)
class ExtractionStage:
    """One destructive extraction step: patterns tried in order, first hit wins."""
    field: str
    patterns: list[re.Pattern]
    convert: Callable[[re.Match], object]

    def apply(self, remaining: str) -> tuple[Optional[object], str]:
        """
        Run the stage on the remaining text.

        Returns:
            (value or None, remaining text with the matched span removed)
        """
        for pattern in self.patterns:
            match = pattern.search(remaining)
            if not match:
                continue
            value = self.convert(match)
            if value is None:
                continue
            remaining = remaining[:match.start()] + " " + remaining[match.end():]
            return value, remaining
        return None, remaining


EXTRACTION_STAGES: list[ExtractionStage] = [
    ExtractionStage("quantity", QUANTITY_PATTERNS, _to_quantity),
    ExtractionStage("price", PRICE_PATTERNS, _to_price),
    ExtractionStage("expiry", EXPIRY_PATTERNS, _to_expiry),
    ExtractionStage("batch_number", BATCH_PATTERNS, _to_batch),
]

INDICATOR_PATTERNS: list[re.Pattern] = [
    pattern for stage in EXTRACTION_STAGES for pattern in stage.patterns
]


def detect_category(text: str) -> Optional[str]:
    """First category (in table order) with a whole-word keyword in text."""
    for pattern, category in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return None


def _clean_name(remaining: str) -> str:
    name = EMPTY_BRACKETS.sub(" ", remaining)
    return collapse_whitespace(name).strip(NAME_EDGE_SEPARATORS)


def parse_compound_product_line(text: str) -> ParsedProductLine:
    """
    Extract name, quantity, price, expiry, batch and category from a line.

    Args:
        text: One product line, fields in any order

    Returns:
        ParsedProductLine; `name` is always set, other fields only when found.
        If stripping leaves fewer than 2 characters, the original text
        (truncated to 100 characters) is used as the name.
    """
    original = (text or "").strip()
    remaining = original
    found: dict[str, object] = {}

    for stage in EXTRACTION_STAGES:
        value, remaining = stage.apply(remaining)
        if value is not None:
            found[stage.field] = value

    category = detect_category(remaining)

    name = _clean_name(remaining)
    if len(name) < MIN_NAME_LENGTH:
        name = original[:NAME_MAX_LENGTH]

    parsed = ParsedProductLine(name=name, category=category, **found)

    logger.debug(
        "compound_line_parsed",
        fields_found=sorted(found),
        category=category
    )

    return parsed


def is_compound_line(text: str) -> bool:
    """
    Cheap check whether a line is worth running through the full parser.

    True when the line is at least 5 characters long and carries any
    quantity, price, expiry or batch indicator.
    """
    if not text or len(text.strip()) < 5:
        return False
    return any(pattern.search(text) for pattern in INDICATOR_PATTERNS)
