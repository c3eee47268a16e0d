"""
Import API schemas.

Request and response shapes for the header-mapping, preview, import and
product-line parsing endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional

from models.import_config import ImportEntityType


class ColumnMapping(BaseModel):
    """A header assigned to a target field."""

    mapped_to: str = Field(description="Target field the column feeds")
    confidence: float = Field(ge=0.0, le=1.0, description="Match confidence 0-1")
    is_auto_mapped: bool = Field(True, description="False once a user picked the field")


# header -> mapping, None means "keep as metadata"
Mappings = dict[str, Optional[ColumnMapping]]


class UnmappedColumn(BaseModel):
    """Column that will be kept as metadata unless the user maps it."""

    source_column: str
    sample_values: list[str] = Field(default_factory=list)


class FieldInfo(BaseModel):
    """Target field with its label."""

    field: str
    label: str
    required: bool


class ImportConfigResponse(BaseModel):
    """Fields an entity accepts on import."""

    entity_type: ImportEntityType
    fields: list[FieldInfo]


class MappingResponse(BaseModel):
    """Result of reading a file and auto-mapping its headers."""

    entity_type: ImportEntityType
    headers: list[str]
    rows: list[dict[str, str]] = Field(default_factory=list)
    mappings: Mappings
    unmapped_columns: list[UnmappedColumn] = Field(default_factory=list)
    missing_required_fields: list[str] = Field(default_factory=list)


class MappingOverrideRequest(BaseModel):
    """User correction of one header's mapping."""

    mappings: Mappings
    header: str
    target_field: Optional[str] = Field(None, description="Empty/None sends the column to metadata")


class PreviewRequest(BaseModel):
    """Rows and mappings to preview."""

    headers: list[str]
    rows: list[dict[str, str]]
    mappings: Mappings


class ImportPreviewRow(BaseModel):
    """One previewed row."""

    row_index: int = Field(description="Spreadsheet row number (header is row 1)")
    data: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, str] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PreviewResponse(BaseModel):
    rows: list[ImportPreviewRow]
    total_rows: int
    rows_with_errors: int


class ExecuteImportRequest(PreviewRequest):
    """Rows and mappings to import for a pharmacy."""

    pharmacy_id: str = Field(..., min_length=1)


class ImportRowError(BaseModel):
    row: int
    message: str


class ImportResult(BaseModel):
    """Summary of an executed import."""

    total_rows: int
    success_count: int
    error_count: int
    metadata_columns_preserved: int
    errors: list[ImportRowError] = Field(default_factory=list)


class MatchHeaderRequest(BaseModel):
    header: str
    target_fields: list[str] = Field(..., min_length=1)
    column_values: Optional[list[str]] = None


class FieldMatchResponse(BaseModel):
    field: str
    confidence: float


class DetectTypeRequest(BaseModel):
    values: list[str]


class DetectTypeResponse(BaseModel):
    detected_type: Optional[str] = None


class ParseLineRequest(BaseModel):
    text: str


class ParseLinesRequest(BaseModel):
    text: str = Field(description="Pasted or OCR text, one product per line")


class ParsedProductLineResponse(BaseModel):
    """Structured fields of one product line."""

    name: str
    quantity: Optional[int] = None
    price: Optional[float] = None
    expiry: Optional[str] = Field(None, description="YYYY-MM-DD")
    batch_number: Optional[str] = None
    category: Optional[str] = None
    is_compound: bool = True


class ParseLinesResponse(BaseModel):
    lines: list[ParsedProductLineResponse]
    compound_count: int
    plain_count: int


class NormalizeRequest(BaseModel):
    dates: list[str] = Field(default_factory=list)
    numbers: list[str] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    dates: list[Optional[str]]
    numbers: list[float]
