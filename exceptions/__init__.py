"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    DatabaseError,

    # Import
    ImportFileError,
    UnknownEntityTypeError,
    UnknownTargetFieldError,
    RowImportError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "DatabaseError",

    # Import
    "ImportFileError",
    "UnknownEntityTypeError",
    "UnknownTargetFieldError",
    "RowImportError",
]
