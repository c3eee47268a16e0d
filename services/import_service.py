"""
Data import service.

Drives a spreadsheet import end to end: auto-mapping headers onto an
entity's fields, user overrides, previewing rows, building typed records
and inserting them. One bad row never stops the batch; its error is
recorded and the import moves on.
"""

import random
import string
import time
from datetime import date
from typing import Callable, Optional, Sequence
import structlog

from pydantic import ValidationError as PydanticValidationError

from config import get_supabase_client, settings, ConnectionError
from models.import_config import ImportConfig, ImportEntityType, get_import_config
from models.imports import (
    ColumnMapping,
    Mappings,
    MappingResponse,
    UnmappedColumn,
    ImportPreviewRow,
    PreviewResponse,
    ImportResult,
    ImportRowError,
)
from models.records import (
    MedicationImport,
    CustomerImport,
    DoctorImport,
    lookup_category,
)
from parsers.field_matcher import auto_map_headers
from parsers.normalizers import parse_flexible_date, parse_numeric_or_none
from parsers.spreadsheet_reader import column_samples
from exceptions import (
    AppError,
    DatabaseError,
    RowImportError,
    UnknownTargetFieldError,
)

logger = structlog.get_logger(__name__)

Record = MedicationImport | CustomerImport | DoctorImport


def generate_batch_number() -> str:
    """Placeholder batch number for rows that have none: BATCH-<ms>-<4 chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"BATCH-{int(time.time() * 1000)}-{suffix}"


def _optional(value: Optional[str]) -> Optional[str]:
    return value or None


def _amount(value: Optional[str], label: str) -> Optional[float]:
    """Numeric cell value; None for an empty cell, RowImportError for text that is not a number."""
    if not value or not value.strip():
        return None
    amount = parse_numeric_or_none(value)
    if amount is None:
        raise RowImportError(f"Invalid {label}")
    return amount


class DataImportService:
    """
    Spreadsheet import business logic.

    Mapping and preview are pure; only execute_import touches the database.
    """

    def __init__(self):
        self._db = None

    @property
    def db(self):
        """
        Supabase client, connected on first use.

        Raises:
            DatabaseError: If the store is not configured or unreachable
        """
        if self._db is None:
            try:
                self._db = get_supabase_client()
            except ConnectionError as e:
                raise DatabaseError("connect", str(e))
        return self._db

    def connect(self):
        """Connect to the store now rather than on the first insert."""
        return self.db

    # ===================
    # MAPPING
    # ===================

    def build_mapping(
        self,
        entity_type: ImportEntityType | str,
        headers: Sequence[str],
        rows: Sequence[dict[str, str]],
        today: Optional[date] = None,
    ) -> MappingResponse:
        """
        Auto-map spreadsheet headers onto the entity's fields.

        Args:
            entity_type: Entity being imported
            headers: Spreadsheet headers, in column order
            rows: Data rows keyed by header
            today: Reference date for expiry detection

        Returns:
            MappingResponse with mappings, unmapped columns and missing
            required fields
        """
        config = get_import_config(entity_type)
        matches = auto_map_headers(headers, config.all_fields, rows, today=today)

        mappings: Mappings = {
            header: ColumnMapping(mapped_to=match.field, confidence=match.confidence)
            if match else None
            for header, match in matches.items()
        }

        unmapped = [
            UnmappedColumn(source_column=header, sample_values=column_samples(list(rows), header))
            for header, mapping in mappings.items()
            if mapping is None
        ]

        logger.info(
            "headers_mapped",
            entity_type=config.entity_type.value,
            header_count=len(headers),
            unmapped_count=len(unmapped)
        )

        return MappingResponse(
            entity_type=config.entity_type,
            headers=list(headers),
            rows=list(rows),
            mappings=mappings,
            unmapped_columns=unmapped,
            missing_required_fields=self.missing_required_fields(config, mappings),
        )

    def missing_required_fields(self, config: ImportConfig, mappings: Mappings) -> list[str]:
        """Labels of required fields no header is mapped to."""
        mapped = {m.mapped_to for m in mappings.values() if m}
        return [config.label_for(f) for f in config.required if f not in mapped]

    def apply_manual_mapping(
        self,
        entity_type: ImportEntityType | str,
        mappings: Mappings,
        header: str,
        target_field: Optional[str],
    ) -> Mappings:
        """
        Apply a user's mapping choice for one header.

        A chosen field gets confidence 1.0; any other header holding that
        field is released to metadata so no field is mapped twice. An empty
        choice sends the header to metadata.

        Raises:
            UnknownTargetFieldError: If the field does not belong to the entity
        """
        config = get_import_config(entity_type)
        updated: Mappings = dict(mappings)

        if not target_field:
            updated[header] = None
            return updated

        if target_field not in config.all_fields:
            raise UnknownTargetFieldError(target_field, config.entity_type.value)

        for other, mapping in updated.items():
            if other != header and mapping and mapping.mapped_to == target_field:
                updated[other] = None

        updated[header] = ColumnMapping(mapped_to=target_field, confidence=1.0, is_auto_mapped=False)

        logger.info("mapping_overridden", header=header, target_field=target_field)
        return updated

    # ===================
    # PREVIEW
    # ===================

    def split_row(
        self,
        headers: Sequence[str],
        row: dict[str, str],
        mappings: Mappings,
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Split a row into mapped field data and leftover metadata."""
        data: dict[str, str] = {}
        metadata: dict[str, str] = {}

        for header in headers:
            mapping = mappings.get(header)
            value = (row.get(header) or "").strip()
            if mapping:
                data[mapping.mapped_to] = value
            elif value:
                metadata[header] = value

        return data, metadata

    def generate_preview(
        self,
        entity_type: ImportEntityType | str,
        headers: Sequence[str],
        rows: Sequence[dict[str, str]],
        mappings: Mappings,
        limit: Optional[int] = None,
    ) -> PreviewResponse:
        """
        Preview how the first rows will be imported.

        Low-confidence mappings produce warnings, missing required fields
        produce errors. Nothing is written.
        """
        config = get_import_config(entity_type)
        limit = limit or settings.preview_row_limit

        low_confidence = []
        for header in headers:
            mapping = mappings.get(header)
            if mapping and mapping.confidence < settings.mapping_high_confidence:
                low_confidence.append((header, mapping))

        preview = []
        for index, row in enumerate(rows[:limit]):
            data, metadata = self.split_row(headers, row, mappings)
            warnings = [
                f'"{header}" → "{mapping.mapped_to}" (low confidence)'
                for header, mapping in low_confidence
            ]
            errors = [
                f"Missing required field: {config.label_for(f)}"
                for f in config.required
                if not data.get(f)
            ]
            preview.append(ImportPreviewRow(
                row_index=index + 2,
                data=data,
                metadata=metadata,
                errors=errors,
                warnings=warnings,
            ))

        return PreviewResponse(
            rows=preview,
            total_rows=len(rows),
            rows_with_errors=sum(1 for r in preview if r.errors),
        )

    # ===================
    # RECORDS
    # ===================

    def build_medication(self, data: dict[str, str], metadata: dict[str, str]) -> MedicationImport:
        expiry_date = parse_flexible_date(data.get("expiry_date"))
        if not expiry_date:
            raise RowImportError("Invalid expiry date")

        name = data.get("name") or ""
        if not name:
            raise RowImportError("Name is required")

        current_stock = _amount(data.get("current_stock"), "stock level")
        reorder_level = _amount(data.get("reorder_level"), "reorder level")
        unit_price = _amount(data.get("unit_price"), "unit price")
        selling_price = _amount(data.get("selling_price"), "selling price")

        return MedicationImport(
            name=name,
            category=lookup_category(data.get("category")),
            batch_number=data.get("batch_number") or generate_batch_number(),
            current_stock=current_stock or 0,
            reorder_level=reorder_level or settings.default_reorder_level,
            expiry_date=expiry_date,
            manufacturing_date=parse_flexible_date(data.get("manufacturing_date")),
            unit_price=unit_price or 0,
            selling_price=selling_price or None,
            barcode_id=_optional(data.get("barcode_id")),
            nafdac_reg_number=_optional(data.get("nafdac_reg_number")),
            supplier=_optional(data.get("supplier")),
            location=_optional(data.get("location")),
            metadata=metadata,
        )

    def build_customer(self, data: dict[str, str], metadata: dict[str, str]) -> CustomerImport:
        if not data.get("full_name"):
            raise RowImportError("Name is required")

        return CustomerImport(
            full_name=data["full_name"],
            phone=_optional(data.get("phone")),
            email=_optional(data.get("email")),
            date_of_birth=parse_flexible_date(data.get("date_of_birth")),
            address=_optional(data.get("address")),
            notes=_optional(data.get("notes")),
            metadata=metadata,
        )

    def build_doctor(self, data: dict[str, str], metadata: dict[str, str]) -> DoctorImport:
        if not data.get("full_name"):
            raise RowImportError("Name is required")

        return DoctorImport(
            full_name=data["full_name"],
            phone=_optional(data.get("phone")),
            email=_optional(data.get("email")),
            hospital_clinic=_optional(data.get("hospital_clinic")),
            specialty=_optional(data.get("specialty")),
            license_number=_optional(data.get("license_number")),
            address=_optional(data.get("address")),
            notes=_optional(data.get("notes")),
            metadata=metadata,
        )

    def build_record(
        self,
        entity_type: ImportEntityType | str,
        data: dict[str, str],
        metadata: dict[str, str],
    ) -> Record:
        """
        Turn one row's mapped data into a typed record.

        Raises:
            RowImportError: If the row is missing required values or a value
                            fails validation
        """
        config = get_import_config(entity_type)
        builders: dict[ImportEntityType, Callable[[dict, dict], Record]] = {
            ImportEntityType.MEDICATION: self.build_medication,
            ImportEntityType.CUSTOMER: self.build_customer,
            ImportEntityType.DOCTOR: self.build_doctor,
        }

        try:
            return builders[config.entity_type](data, metadata)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise RowImportError(f"Invalid {location}: {first['msg']}")

    # ===================
    # EXECUTE
    # ===================

    def insert_record(self, table: str, record: Record, pharmacy_id: str) -> None:
        """Insert one record, tagged with the pharmacy it belongs to."""
        payload = {**record.model_dump(mode="json"), "pharmacy_id": pharmacy_id}
        try:
            self.db.table(table).insert(payload).execute()
        except Exception as e:
            logger.error("import_insert_failed", table=table, error=str(e))
            raise DatabaseError("insert", str(e))

    def execute_import(
        self,
        entity_type: ImportEntityType | str,
        headers: Sequence[str],
        rows: Sequence[dict[str, str]],
        mappings: Mappings,
        pharmacy_id: str,
    ) -> ImportResult:
        """
        Import every row, collecting per-row failures.

        Args:
            entity_type: Entity being imported
            headers: Spreadsheet headers
            rows: Data rows keyed by header
            mappings: Final header mappings
            pharmacy_id: Pharmacy the records belong to

        Returns:
            ImportResult summary (row numbers are spreadsheet rows)
        """
        config = get_import_config(entity_type)

        logger.info(
            "import_started",
            entity_type=config.entity_type.value,
            pharmacy_id=pharmacy_id,
            row_count=len(rows)
        )

        # Fail the whole import up front when the store is unavailable
        self.connect()

        errors: list[ImportRowError] = []
        metadata_columns: set[str] = set()
        success_count = 0

        for index, row in enumerate(rows):
            row_number = index + 2
            data, metadata = self.split_row(headers, row, mappings)
            metadata_columns.update(metadata)

            try:
                record = self.build_record(config.entity_type, data, metadata)
                self.insert_record(config.table, record, pharmacy_id)
                success_count += 1
            except AppError as e:
                logger.warning("import_row_failed", row=row_number, error=e.message)
                errors.append(ImportRowError(row=row_number, message=e.message))

        result = ImportResult(
            total_rows=len(rows),
            success_count=success_count,
            error_count=len(errors),
            metadata_columns_preserved=len(metadata_columns),
            errors=errors,
        )

        logger.info(
            "import_completed",
            entity_type=config.entity_type.value,
            success_count=result.success_count,
            error_count=result.error_count
        )

        return result


# Singleton instance
_import_service: Optional[DataImportService] = None


def get_import_service() -> DataImportService:
    """Get or create DataImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = DataImportService()
    return _import_service
