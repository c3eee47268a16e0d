"""
Product-line parsing service.

Takes pasted or OCR'd text (one product per line) and runs each line that
looks like it carries structured fields through the compound-line parser.
Lines that don't are kept as plain product names.
"""

from typing import Optional
import structlog

from models.imports import ParsedProductLineResponse, ParseLinesResponse
from parsers.compound_line_parser import (
    NAME_MAX_LENGTH,
    is_compound_line,
    parse_compound_product_line,
)

logger = structlog.get_logger(__name__)


class ProductLineService:
    """Parse free-text product lists."""

    def parse_line(self, text: str, check_compound: bool = True) -> ParsedProductLineResponse:
        """
        Parse a single line.

        With check_compound, lines without any field indicator skip the
        parser and come back as a plain (truncated) name.
        """
        line = text.strip()
        if check_compound and not is_compound_line(line):
            return ParsedProductLineResponse(name=line[:NAME_MAX_LENGTH], is_compound=False)

        parsed = parse_compound_product_line(line)
        return ParsedProductLineResponse(**parsed.to_dict(), is_compound=is_compound_line(line))

    def parse_lines(self, text: str) -> ParseLinesResponse:
        """
        Parse every non-blank line of a block of text.

        Args:
            text: Pasted/OCR text, one product per line

        Returns:
            ParseLinesResponse with parsed lines and compound/plain counts
        """
        lines = [self.parse_line(line) for line in text.splitlines() if line.strip()]
        compound_count = sum(1 for line in lines if line.is_compound)

        logger.info(
            "product_lines_parsed",
            line_count=len(lines),
            compound_count=compound_count
        )

        return ParseLinesResponse(
            lines=lines,
            compound_count=compound_count,
            plain_count=len(lines) - compound_count,
        )


# Singleton instance
_product_line_service: Optional[ProductLineService] = None


def get_product_line_service() -> ProductLineService:
    """Get or create ProductLineService instance."""
    global _product_line_service
    if _product_line_service is None:
        _product_line_service = ProductLineService()
    return _product_line_service
