"""
Import entity configuration.

Each importable entity declares which target fields it has (required first,
then optional) and the human label shown for each. The ordered field list
is what the header auto-mapper iterates over, so the order matters for
tie-breaks.
"""

from dataclasses import dataclass, field
from enum import Enum

from exceptions import UnknownEntityTypeError


class ImportEntityType(str, Enum):
    """Entities that can be bulk-imported from a spreadsheet."""
    MEDICATION = "medication"
    CUSTOMER = "customer"
    DOCTOR = "doctor"


@dataclass(frozen=True)
class ImportConfig:
    """Target fields and labels for one importable entity."""
    entity_type: ImportEntityType
    required: tuple[str, ...]
    optional: tuple[str, ...]
    labels: dict[str, str] = field(default_factory=dict)
    table: str = ""

    @property
    def all_fields(self) -> list[str]:
        """Required fields followed by optional ones."""
        return [*self.required, *self.optional]

    def label_for(self, field_name: str) -> str:
        return self.labels.get(field_name, field_name)


IMPORT_CONFIGS: dict[ImportEntityType, ImportConfig] = {
    ImportEntityType.MEDICATION: ImportConfig(
        entity_type=ImportEntityType.MEDICATION,
        required=("name", "expiry_date", "unit_price"),
        optional=(
            "category", "batch_number", "current_stock", "reorder_level",
            "selling_price", "barcode_id", "nafdac_reg_number", "supplier",
            "location", "manufacturing_date",
        ),
        labels={
            "name": "Product Name",
            "category": "Category",
            "batch_number": "Batch Number",
            "current_stock": "Stock Level",
            "reorder_level": "Reorder Level",
            "expiry_date": "Expiry Date",
            "manufacturing_date": "Manufacturing Date",
            "unit_price": "Purchase Price",
            "selling_price": "Selling Price",
            "barcode_id": "Barcode",
            "nafdac_reg_number": "NAFDAC Reg No",
            "supplier": "Supplier",
            "location": "Location",
        },
        table="medications",
    ),
    ImportEntityType.CUSTOMER: ImportConfig(
        entity_type=ImportEntityType.CUSTOMER,
        required=("full_name",),
        optional=("phone", "email", "date_of_birth", "address", "notes"),
        labels={
            "full_name": "Patient Name",
            "phone": "Phone Number",
            "email": "Email",
            "date_of_birth": "Date of Birth",
            "address": "Address",
            "notes": "Notes",
        },
        table="customers",
    ),
    ImportEntityType.DOCTOR: ImportConfig(
        entity_type=ImportEntityType.DOCTOR,
        required=("full_name",),
        optional=(
            "phone", "email", "hospital_clinic", "specialty",
            "license_number", "address", "notes",
        ),
        labels={
            "full_name": "Doctor Name",
            "phone": "Phone Number",
            "email": "Email",
            "hospital_clinic": "Hospital/Clinic",
            "specialty": "Specialty",
            "license_number": "License Number",
            "address": "Address",
            "notes": "Notes",
        },
        table="doctors",
    ),
}


def get_import_config(entity_type: "ImportEntityType | str") -> ImportConfig:
    """
    Look up the configuration for an entity type.

    Raises:
        UnknownEntityTypeError: If the entity type is not supported
    """
    try:
        return IMPORT_CONFIGS[ImportEntityType(entity_type)]
    except ValueError:
        raise UnknownEntityTypeError(str(entity_type))
