"""Output schemas for a checkout billing calculation."""

from decimal import Decimal

from pydantic import BaseModel

from ..money import CENT, ZERO
from .common import ChargeCategory, ChargeOrigin, CopayType

# Accepted per-category drift between patient + insurance and charged.
ROUNDING_TOLERANCE = CENT


class DeductibleAllocation(BaseModel):
    """One step of the deductible waterfall."""

    category: ChargeCategory
    category_label: str
    charged: Decimal
    applied: Decimal
    remaining_before: Decimal
    remaining_after: Decimal

    @property
    def unconsumed(self) -> Decimal:
        """Portion of the category that moves on to copay and coinsurance."""
        return self.charged - self.applied


class CopayDetails(BaseModel):
    """The single copay decision for an encounter."""

    copay_type: CopayType = CopayType.NONE
    category: ChargeCategory | None = None
    scheduled_amount: Decimal = ZERO
    amount: Decimal = ZERO
    capped: bool = False
    waived: bool = False
    reason: str | None = None


class CoinsuranceSplit(BaseModel):
    """Patient/insurer split of a post-deductible, post-copay remainder."""

    remainder: Decimal
    percent: Decimal
    patient: Decimal
    insurance: Decimal


class LineItemBreakdown(BaseModel):
    """Audit trail for a single charge line."""

    code: str
    description: str
    origin: ChargeOrigin
    category: ChargeCategory
    quantity: int
    unit_amount: Decimal
    charged: Decimal
    deductible_applied: Decimal = ZERO
    copay_applied: Decimal = ZERO
    # Amount of this line left for the category-level coinsurance split
    coinsurable: Decimal = ZERO
    coinsurance_patient: Decimal = ZERO
    coinsurance_insurance: Decimal = ZERO
    patient_total: Decimal = ZERO
    insurance_total: Decimal = ZERO
    applied_to_deductible: bool = False
    hsa_eligible: bool = False
    notes: list[str] = []


class CategoryBreakdown(BaseModel):
    """Per-category totals after deductible, copay and coinsurance."""

    category: ChargeCategory
    category_label: str
    charged: Decimal
    deductible_applied: Decimal = ZERO
    copay_applied: Decimal = ZERO
    coinsurance_patient: Decimal = ZERO
    coinsurance_insurance: Decimal = ZERO
    patient_total: Decimal = ZERO
    insurance_total: Decimal = ZERO

    @property
    def rounding_drift(self) -> Decimal:
        return self.patient_total + self.insurance_total - self.charged


class CalculationResult(BaseModel):
    """Patient responsibility for one encounter."""

    categories: list[CategoryBreakdown] = []
    line_items: list[LineItemBreakdown] = []
    deductible_waterfall: list[DeductibleAllocation] = []
    copay: CopayDetails = CopayDetails()
    # Totals
    total_charged: Decimal = ZERO
    total_deductible_applied: Decimal = ZERO
    total_copay: Decimal = ZERO
    total_coinsurance_patient: Decimal = ZERO
    total_coinsurance_insurance: Decimal = ZERO
    total_patient: Decimal = ZERO
    total_insurance: Decimal = ZERO
    # Deductible accumulator, to be written back by the caller
    deductible_total: Decimal | None = None
    deductible_met_before: Decimal | None = None
    deductible_met: Decimal | None = None
    deductible_remaining: Decimal | None = None
    # HSA metadata
    hsa_eligible: bool = False
    hsa_eligible_amount: Decimal = ZERO
    estimated_without_insurance: bool = False
    summary: list[str] = []

    def category(self, category: ChargeCategory) -> CategoryBreakdown | None:
        for breakdown in self.categories:
            if breakdown.category == category:
                return breakdown
        return None

    def is_balanced(self, tolerance: Decimal = ROUNDING_TOLERANCE) -> bool:
        """True when every category reconciles to its charged amount."""
        return all(abs(c.rounding_drift) <= tolerance for c in self.categories)


class SelfPayLineItem(BaseModel):
    """A discounted cash-price line."""

    code: str
    description: str
    quantity: int
    unit_amount: Decimal
    charged: Decimal
    discount: Decimal
    patient_responsibility: Decimal


class SelfPayResult(BaseModel):
    """Cash-price estimate for an uninsured checkout."""

    line_items: list[SelfPayLineItem] = []
    subtotal: Decimal = ZERO
    discount_percent: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_due: Decimal = ZERO
