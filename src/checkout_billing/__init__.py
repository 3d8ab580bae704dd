"""Patient responsibility calculation for clinic checkout."""

from .engine import (
    calculate_patient_responsibility,
    calculate_self_pay_charges,
    classify_charges,
)
from .errors import BillingError, PolicyIncompleteError, ValidationError

__all__ = [
    "calculate_patient_responsibility",
    "calculate_self_pay_charges",
    "classify_charges",
    "BillingError",
    "PolicyIncompleteError",
    "ValidationError",
]
