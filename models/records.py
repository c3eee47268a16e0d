"""
Record schemas built from imported spreadsheet rows.

These are the shapes inserted into the medications, customers and doctors
tables. Unmapped spreadsheet columns travel along as `metadata`.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import date

from models.base import BaseSchema


class MedicationCategory(str, Enum):
    """Medication categories accepted on import."""
    TABLET = "Tablet"
    SYRUP = "Syrup"
    CAPSULE = "Capsule"
    INJECTION = "Injection"
    CREAM = "Cream"
    DROPS = "Drops"
    INHALER = "Inhaler"
    POWDER = "Powder"
    VITAMINS = "Vitamins"
    SUPPLEMENTS = "Supplements"
    OTHER = "Other"


# Spreadsheet category text (lowercased) -> category
CATEGORY_LOOKUP: dict[str, MedicationCategory] = {
    "tablet": MedicationCategory.TABLET, "tablets": MedicationCategory.TABLET,
    "syrup": MedicationCategory.SYRUP, "syrups": MedicationCategory.SYRUP,
    "capsule": MedicationCategory.CAPSULE, "capsules": MedicationCategory.CAPSULE,
    "injection": MedicationCategory.INJECTION, "injections": MedicationCategory.INJECTION,
    "cream": MedicationCategory.CREAM, "creams": MedicationCategory.CREAM,
    "drops": MedicationCategory.DROPS, "drop": MedicationCategory.DROPS,
    "inhaler": MedicationCategory.INHALER, "inhalers": MedicationCategory.INHALER,
    "powder": MedicationCategory.POWDER, "powders": MedicationCategory.POWDER,
    "vitamins": MedicationCategory.VITAMINS, "vitamin": MedicationCategory.VITAMINS,
    "supplements": MedicationCategory.SUPPLEMENTS, "supplement": MedicationCategory.SUPPLEMENTS,
    "other": MedicationCategory.OTHER,
}


def lookup_category(value: Optional[str]) -> MedicationCategory:
    """Map free spreadsheet text onto a category, `Other` when unknown."""
    return CATEGORY_LOOKUP.get((value or "").strip().lower(), MedicationCategory.OTHER)


class MedicationImport(BaseSchema):
    """Medication row ready for insertion."""

    name: str = Field(..., min_length=1, max_length=255)
    category: MedicationCategory = MedicationCategory.OTHER
    batch_number: str = Field(..., min_length=1)
    current_stock: float = Field(default=0, ge=0)
    reorder_level: float = Field(default=10, ge=0)
    expiry_date: date
    manufacturing_date: Optional[date] = None
    unit_price: float = Field(default=0, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    barcode_id: Optional[str] = None
    nafdac_reg_number: Optional[str] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class CustomerImport(BaseSchema):
    """Customer (patient) row ready for insertion."""

    full_name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class DoctorImport(BaseSchema):
    """Doctor row ready for insertion."""

    full_name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    hospital_clinic: Optional[str] = None
    specialty: Optional[str] = None
    license_number: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)
