"""HSA eligibility metadata."""

from decimal import Decimal

from ..money import ZERO
from ..schemas.policy import InsurancePolicy


def is_hsa_eligible(policy: InsurancePolicy | None) -> bool:
    """HDHP plans make patient payments HSA-eligible."""
    return bool(policy is not None and policy.is_hdhp)


def hsa_eligible_amount(policy: InsurancePolicy | None, patient_total: Decimal) -> Decimal:
    return patient_total if is_hsa_eligible(policy) else ZERO
