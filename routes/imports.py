"""
Import API routes.

Spreadsheet header mapping, preview and import, plus the product-line and
normalization helpers the import screens call directly.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
import structlog

from models.import_config import ImportEntityType, get_import_config
from models.imports import (
    ImportConfigResponse,
    FieldInfo,
    MappingResponse,
    MappingOverrideRequest,
    Mappings,
    PreviewRequest,
    PreviewResponse,
    ExecuteImportRequest,
    ImportResult,
    MatchHeaderRequest,
    FieldMatchResponse,
    DetectTypeRequest,
    DetectTypeResponse,
    ParseLineRequest,
    ParseLinesRequest,
    ParsedProductLineResponse,
    ParseLinesResponse,
    NormalizeRequest,
    NormalizeResponse,
)
from parsers.field_matcher import match_header_to_field
from parsers.value_classifier import detect_field_type_from_values
from parsers.normalizers import parse_flexible_date, parse_numeric_value
from parsers.spreadsheet_reader import read_spreadsheet
from services.import_service import get_import_service
from services.product_line_service import get_product_line_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Imports"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# SPREADSHEET IMPORT
# ===================

@router.get("/configs/{entity_type}", response_model=ImportConfigResponse)
async def get_config(entity_type: ImportEntityType):
    """List the fields an entity accepts, required ones first."""
    config = get_import_config(entity_type)
    return ImportConfigResponse(
        entity_type=config.entity_type,
        fields=[
            FieldInfo(field=f, label=config.label_for(f), required=f in config.required)
            for f in config.all_fields
        ],
    )


@router.post("/{entity_type}/mapping", response_model=MappingResponse)
async def map_upload(entity_type: ImportEntityType, file: UploadFile = File(...)):
    """
    Read an uploaded CSV/Excel file and auto-map its headers.

    Returns the parsed rows with the proposed mapping so the client can
    review it before previewing.
    """
    try:
        content = await file.read()
        data = read_spreadsheet(content, filename=file.filename or "")
        return get_import_service().build_mapping(entity_type, data.headers, data.rows)
    except Exception as e:
        return handle_error(e)


@router.post("/{entity_type}/mapping/override", response_model=Mappings)
async def override_mapping(entity_type: ImportEntityType, request: MappingOverrideRequest):
    """Apply a manual mapping for one header."""
    try:
        return get_import_service().apply_manual_mapping(
            entity_type, request.mappings, request.header, request.target_field
        )
    except Exception as e:
        return handle_error(e)


@router.post("/{entity_type}/preview", response_model=PreviewResponse)
async def preview_import(entity_type: ImportEntityType, request: PreviewRequest):
    """Preview how rows will be imported with the given mapping."""
    try:
        return get_import_service().generate_preview(
            entity_type, request.headers, request.rows, request.mappings
        )
    except Exception as e:
        return handle_error(e)


@router.post("/{entity_type}/execute", response_model=ImportResult)
async def execute_import(entity_type: ImportEntityType, request: ExecuteImportRequest):
    """Import all rows for a pharmacy. Row failures are reported, not raised."""
    try:
        return get_import_service().execute_import(
            entity_type,
            request.headers,
            request.rows,
            request.mappings,
            request.pharmacy_id,
        )
    except Exception as e:
        return handle_error(e)


# ===================
# FIELD INFERENCE
# ===================

@router.post("/match-header", response_model=FieldMatchResponse | None)
async def match_header(request: MatchHeaderRequest):
    """Best target field for one header, or null when nothing matches."""
    match = match_header_to_field(request.header, request.target_fields, request.column_values)
    if match is None:
        return None
    return FieldMatchResponse(field=match.field, confidence=match.confidence)


@router.post("/detect-type", response_model=DetectTypeResponse)
async def detect_type(request: DetectTypeRequest):
    """Classify a column from its values."""
    return DetectTypeResponse(detected_type=detect_field_type_from_values(request.values))


# ===================
# PRODUCT LINES
# ===================

@router.post("/parse-line", response_model=ParsedProductLineResponse)
async def parse_line(request: ParseLineRequest):
    """Split one free-text product line into fields."""
    return get_product_line_service().parse_line(request.text, check_compound=False)


@router.post("/parse-lines", response_model=ParseLinesResponse)
async def parse_lines(request: ParseLinesRequest):
    """Split a pasted product list (one per line) into fields."""
    return get_product_line_service().parse_lines(request.text)


@router.post("/normalize", response_model=NormalizeResponse)
async def normalize(request: NormalizeRequest):
    """Normalize raw date and number strings."""
    return NormalizeResponse(
        dates=[parse_flexible_date(value) for value in request.dates],
        numbers=[parse_numeric_value(value) for value in request.numbers],
    )
