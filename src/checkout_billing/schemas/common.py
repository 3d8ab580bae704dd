"""Shared enums for checkout billing schemas."""

from enum import Enum


class ChargeCategory(str, Enum):
    """Charge categories used by the deductible waterfall."""

    EVALUATION_MANAGEMENT = "evaluation_management"
    SURGICAL = "surgical"
    PATHOLOGY = "pathology"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[ChargeCategory, str] = {
    ChargeCategory.EVALUATION_MANAGEMENT: "Office Visit (E&M)",
    ChargeCategory.SURGICAL: "Surgical Procedures",
    ChargeCategory.PATHOLOGY: "Pathology/Biopsy",
    ChargeCategory.OTHER: "Other Services",
}


class ChargeOrigin(str, Enum):
    """Where a checkout line item came from."""

    MEDICAL = "medical"
    COSMETIC = "cosmetic"
    PRODUCT = "product"


class CopayType(str, Enum):
    """Which flat copay, if any, was collected for the encounter."""

    VISIT = "visit"
    PROCEDURE = "procedure"
    NONE = "none"
