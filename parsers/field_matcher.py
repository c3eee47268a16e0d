"""
Header-to-field matching for spreadsheet imports.

Maps unpredictable spreadsheet headers ("S.Price", "Batch No", "SOH") onto
the canonical target fields of an import. Matching is dictionary driven:
each target field carries a list of known header spellings, and headers are
scored against them with a small, explainable similarity rule. When a
header matches nothing, the column's values are classified instead.

FIELD_SYNONYMS is a versioned contract: adding or removing a synonym changes
mapping outcomes for existing spreadsheets.
"""

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional, Sequence
import structlog

from parsers.value_classifier import (
    detect_field_type_from_values,
    PRICE,
    NUMERIC,
    DATE,
)
from utils.text_utils import normalize_label

logger = structlog.get_logger(__name__)

HIGH_CONFIDENCE = 0.7
MIN_CONFIDENCE = 0.3
VALUE_MATCH_CONFIDENCE = 0.5

FIELD_SYNONYMS: dict[str, list[str]] = {
    # Product/Medication fields
    "name": ["item", "description", "drug name", "product", "sku name", "product name", "drug", "medicine", "medication", "item name", "article"],
    "unit_price": ["p.price", "cost", "unit cost", "rate", "w-sale", "land cost", "purchase price", "buy price", "cost price", "wholesale"],
    "selling_price": ["s.price", "retail", "msrp", "unit price", "dispense price", "sale price", "sell price", "retail price", "selling"],
    "batch_number": ["bn", "b/n", "batch", "lot", "lot no", "control no", "batch no", "batch number", "lot number"],
    "expiry_date": ["exp", "expiry", "best before", "valid to", "e.date", "expiration", "exp date", "expiry date", "expires"],
    "manufacturing_date": ["mfg", "mfg date", "manufacturing", "mfd", "production date", "manufactured"],
    "current_stock": ["qty", "in stock", "balance", "soh", "stock on hand", "count", "quantity", "stock", "stock level", "available"],
    "category": ["type", "form", "dosage form", "category", "classification", "class"],
    "barcode_id": ["barcode", "upc", "ean", "sku", "code", "product code", "item code"],
    "nafdac_reg_number": ["nafdac", "reg no", "registration", "nafdac no", "reg number"],
    "reorder_level": ["reorder", "minimum", "min stock", "min qty", "threshold", "alert level"],
    "supplier": ["vendor", "manufacturer", "supplier", "source", "distributor"],
    "location": ["shelf", "bin", "location", "storage", "rack", "position"],

    # Patient/Customer fields
    "full_name": ["patient", "customer", "name", "patient name", "customer name", "client", "client name", "full name"],
    "phone": ["mobile", "gsm", "contact", "tel", "phone no", "phone number", "cell", "telephone", "mobile no"],
    "email": ["email", "e-mail", "email address", "mail"],
    "date_of_birth": ["dob", "birth date", "birthday", "date of birth", "age", "born"],
    "address": ["address", "location", "residence", "home address", "street"],

    # Doctor fields
    "hospital_clinic": ["hospital", "clinic", "facility", "workplace", "practice", "institution"],
    "specialty": ["specialty", "specialization", "department", "field", "discipline"],
    "license_number": ["license", "license no", "medical license", "practitioner no", "reg no", "mdcn"],
}


@dataclass(frozen=True)
class FieldMatch:
    """A proposed header → target field assignment."""
    field: str
    confidence: float


def similarity(first: str, second: str) -> float:
    """
    Score how closely two labels match, in [0, 1].

    Both labels are normalized first. The first applicable rule wins:
    - identical → 1.0
    - one contains the other → 0.9
    - shared words → 0.7 × shared / max(word counts)
    - otherwise → 0.0
    """
    s1 = normalize_label(first)
    s2 = normalize_label(second)

    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    if s1 in s2 or s2 in s1:
        return 0.9

    words1 = s1.split(" ")
    words2 = s2.split(" ")
    common = [w for w in words1 if w in words2]
    if common:
        return 0.7 * (len(common) / max(len(words1), len(words2)))

    return 0.0


def candidate_labels(field: str) -> list[str]:
    """Synonyms of a field followed by the field name itself."""
    return [*FIELD_SYNONYMS.get(field, [field]), field.replace("_", " ")]


def _field_for_value_type(detected: str, target_fields: Sequence[str]) -> Optional[str]:
    for field in target_fields:
        if detected == PRICE:
            if "price" in field:
                return field
        elif detected == NUMERIC:
            if "stock" in field or "quantity" in field:
                return field
        elif detected == DATE:
            if "date" in field:
                return field
        elif field == detected:
            return field
    return None


def match_header_to_field(
    header: str,
    target_fields: Sequence[str],
    column_values: Optional[Sequence[Optional[str]]] = None,
    today: Optional[date] = None,
) -> Optional[FieldMatch]:
    """
    Find the target field a header most likely stands for.

    Every synonym of every candidate field is scored against the header and
    the single best (field, score) pair is kept; on equal scores the field
    seen first wins. Only when no synonym scores above zero are the column
    values classified, mapping the detected type onto a plausible field at
    confidence 0.5.

    Args:
        header: Spreadsheet header
        target_fields: Candidate fields, in priority order
        column_values: Optional values of the column, for the fallback
        today: Reference date for expiry detection in the fallback

    Returns:
        Best FieldMatch, or None when nothing reaches MIN_CONFIDENCE
    """
    best: Optional[FieldMatch] = None

    for field in target_fields:
        for label in candidate_labels(field):
            score = similarity(header, label)
            if score > 0 and (best is None or score > best.confidence):
                best = FieldMatch(field=field, confidence=score)

    if best is None and column_values is not None:
        detected = detect_field_type_from_values(column_values, today=today)
        if detected:
            field = _field_for_value_type(detected, target_fields)
            if field:
                best = FieldMatch(field=field, confidence=VALUE_MATCH_CONFIDENCE)
                logger.debug(
                    "header_matched_by_values",
                    header=header,
                    detected_type=detected,
                    field=field
                )

    if best is None or best.confidence < MIN_CONFIDENCE:
        return None
    return best


def auto_map_headers(
    headers: Sequence[str],
    target_fields: Sequence[str],
    rows: Sequence[Mapping[str, Optional[str]]],
    today: Optional[date] = None,
) -> dict[str, Optional[FieldMatch]]:
    """
    Map every header of a dataset onto at most one target field.

    Two greedy passes, both in header order:
    1. Accept matches scoring >= HIGH_CONFIDENCE against all target fields,
       unless the field was already claimed by an earlier header.
    2. For headers still unmapped, match again against unclaimed fields
       only and accept any result.

    Headers left over map to None (the caller keeps them as metadata).
    No field is ever assigned to two headers.

    Args:
        headers: Spreadsheet headers, in column order
        target_fields: Fields of the entity being imported, in priority order
        rows: Data rows keyed by header
        today: Reference date for expiry detection

    Returns:
        Mapping of every header to its FieldMatch or None, in header order
    """
    mappings: dict[str, Optional[FieldMatch]] = {header: None for header in headers}
    used_fields: set[str] = set()

    def values_of(header: str) -> list[str]:
        return [row.get(header) or "" for row in rows]

    for header in headers:
        match = match_header_to_field(header, target_fields, values_of(header), today=today)
        if match and match.confidence >= HIGH_CONFIDENCE and match.field not in used_fields:
            mappings[header] = match
            used_fields.add(match.field)

    for header in headers:
        if mappings[header] is not None:
            continue

        remaining = [f for f in target_fields if f not in used_fields]
        match = match_header_to_field(header, remaining, values_of(header), today=today)
        if match and match.field not in used_fields:
            mappings[header] = match
            used_fields.add(match.field)

    logger.debug(
        "headers_auto_mapped",
        header_count=len(headers),
        mapped_count=len(used_fields)
    )

    return mappings
