"""Checkout billing schemas for charges, policies and calculation results."""

from .charges import ChargeItem, EncounterCharges
from .common import CATEGORY_LABELS, ChargeCategory, ChargeOrigin, CopayType
from .policy import REQUIRED_BENEFIT_FIELDS, InsurancePolicy
from .result import (
    ROUNDING_TOLERANCE,
    CalculationResult,
    CategoryBreakdown,
    CoinsuranceSplit,
    CopayDetails,
    DeductibleAllocation,
    LineItemBreakdown,
    SelfPayLineItem,
    SelfPayResult,
)

__all__ = [
    # Common
    "ChargeCategory",
    "ChargeOrigin",
    "CopayType",
    "CATEGORY_LABELS",
    # Inputs
    "ChargeItem",
    "EncounterCharges",
    "InsurancePolicy",
    "REQUIRED_BENEFIT_FIELDS",
    # Results
    "DeductibleAllocation",
    "CopayDetails",
    "CoinsuranceSplit",
    "LineItemBreakdown",
    "CategoryBreakdown",
    "CalculationResult",
    "ROUNDING_TOLERANCE",
    # Self-pay
    "SelfPayLineItem",
    "SelfPayResult",
]
