"""
Business logic services.

Each service handles one domain area.
"""

from services.import_service import DataImportService, get_import_service
from services.product_line_service import ProductLineService, get_product_line_service

__all__ = [
    "DataImportService",
    "get_import_service",
    "ProductLineService",
    "get_product_line_service",
]
