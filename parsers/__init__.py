"""
Field-inference and parsing engine for inventory imports.

Pure, side-effect-free functions: header → field matching, column value
classification, compound product-line extraction and date/number
normalization. Plus the spreadsheet reader that feeds them.
"""

from parsers.normalizers import (
    parse_flexible_date,
    parse_numeric_value,
    parse_numeric_or_none,
)
from parsers.value_classifier import detect_field_type_from_values
from parsers.field_matcher import (
    FIELD_SYNONYMS,
    HIGH_CONFIDENCE,
    MIN_CONFIDENCE,
    FieldMatch,
    similarity,
    match_header_to_field,
    auto_map_headers,
)
from parsers.compound_line_parser import (
    ParsedProductLine,
    parse_compound_product_line,
    is_compound_line,
)
from parsers.spreadsheet_reader import (
    SpreadsheetData,
    read_spreadsheet,
)

__all__ = [
    # Normalizers
    "parse_flexible_date",
    "parse_numeric_value",
    "parse_numeric_or_none",

    # Header matching
    "detect_field_type_from_values",
    "FIELD_SYNONYMS",
    "HIGH_CONFIDENCE",
    "MIN_CONFIDENCE",
    "FieldMatch",
    "similarity",
    "match_header_to_field",
    "auto_map_headers",

    # Product lines
    "ParsedProductLine",
    "parse_compound_product_line",
    "is_compound_line",

    # Files
    "SpreadsheetData",
    "read_spreadsheet",
]
