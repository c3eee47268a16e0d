"""
Custom exception classes for the application.

The field-inference engine never raises for malformed input; these
exceptions are raised at the file-ingestion, import and persistence seams.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "IMPORT_FILE_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# IMPORT ERRORS
# ===================

class ImportFileError(ValidationError):
    """Uploaded spreadsheet could not be read or holds no data."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMPORT_FILE_ERROR",
            message=message,
            details=details
        )


class UnknownEntityTypeError(ValidationError):
    """Import entity type is not one of the supported ones."""

    def __init__(self, entity_type: str):
        super().__init__(
            code="UNKNOWN_ENTITY_TYPE",
            message=f"Unknown import entity type: {entity_type}",
            details={"provided": entity_type, "valid": ["medication", "customer", "doctor"]}
        )


class UnknownTargetFieldError(ValidationError):
    """Manual mapping names a field the entity does not have."""

    def __init__(self, field: str, entity_type: str):
        super().__init__(
            code="UNKNOWN_TARGET_FIELD",
            message=f"'{field}' is not a field of {entity_type}",
            details={"field": field, "entity_type": entity_type}
        )


class RowImportError(ValidationError):
    """A single spreadsheet row could not be turned into a record."""

    def __init__(self, message: str, row: Optional[int] = None):
        super().__init__(
            code="ROW_IMPORT_ERROR",
            message=message,
            details={"row": row} if row is not None else None
        )
        self.row = row
