"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.import_config import (
    ImportEntityType,
    ImportConfig,
    IMPORT_CONFIGS,
    get_import_config,
)
from models.records import (
    MedicationCategory,
    MedicationImport,
    CustomerImport,
    DoctorImport,
    lookup_category,
)
from models.imports import (
    ColumnMapping,
    Mappings,
    MappingResponse,
    PreviewResponse,
    ImportResult,
    ParsedProductLineResponse,
    ParseLinesResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Entity configuration
    "ImportEntityType",
    "ImportConfig",
    "IMPORT_CONFIGS",
    "get_import_config",

    # Records
    "MedicationCategory",
    "MedicationImport",
    "CustomerImport",
    "DoctorImport",
    "lookup_category",

    # API
    "ColumnMapping",
    "Mappings",
    "MappingResponse",
    "PreviewResponse",
    "ImportResult",
    "ParsedProductLineResponse",
    "ParseLinesResponse",
]
