"""Billing calculation engine for checkout patient responsibility."""

import logging
from collections.abc import Iterable

from ..config import EngineConfig
from ..errors import PolicyIncompleteError, ValidationError
from ..money import ZERO
from ..schemas.charges import ChargeItem
from ..schemas.policy import InsurancePolicy
from ..schemas.result import CalculationResult
from .breakdown import (
    build_calculation_result,
    build_category_breakdown,
    build_uninsured_estimate,
)
from .classifier import classify_charges, classify_code, group_by_category
from .coinsurance import split_coinsurance
from .copay import resolve_copay
from .deductible import allocate_deductible
from .priority import DEDUCTIBLE_PRIORITY
from .self_pay import calculate_self_pay_charges

__all__ = [
    "DEDUCTIBLE_PRIORITY",
    "calculate_patient_responsibility",
    "calculate_self_pay_charges",
    "classify_charges",
    "classify_code",
    "require_complete_policy",
    "validate_policy",
]

logger = logging.getLogger(__name__)


def validate_policy(policy: InsurancePolicy) -> None:
    """Reject structurally invalid benefit values.

    Missing fields are not an error here; see ``require_complete_policy``.
    """
    for name in ("deductible_total", "deductible_met", "visit_copay", "procedure_copay"):
        value = getattr(policy, name)
        if value is not None and (not value.is_finite() or value < 0):
            raise ValidationError(f"Policy {name} must be a non-negative amount, got {value}")

    percent = policy.coinsurance_percent
    if percent is not None and (not percent.is_finite() or not 0 <= percent <= 100):
        raise ValidationError(f"Policy coinsurance_percent must be between 0 and 100, got {percent}")

    if (
        policy.deductible_total is not None
        and policy.deductible_met is not None
        and policy.deductible_met > policy.deductible_total
    ):
        raise ValidationError(
            f"Policy deductible_met ({policy.deductible_met}) exceeds "
            f"deductible_total ({policy.deductible_total})"
        )


def require_complete_policy(policy: InsurancePolicy | None) -> InsurancePolicy:
    if policy is None:
        raise PolicyIncompleteError(["policy"])
    if policy.missing_fields:
        raise PolicyIncompleteError(policy.missing_fields)
    return policy


def calculate_patient_responsibility(
    charges: Iterable[ChargeItem],
    policy: InsurancePolicy | None,
    config: EngineConfig | None = None,
) -> CalculationResult:
    """Compute what the patient owes for one encounter.

    Steps:
    1. Validate the policy and classify the charges (raises ValidationError)
    2. Run the deductible waterfall in DEDUCTIBLE_PRIORITY order
    3. Resolve the single copay, if any
    4. Split each category's remainder by coinsurance
    5. Aggregate into a CalculationResult with HSA metadata

    An absent or incomplete policy is not fatal: the encounter is estimated
    as self-pay with ``estimated_without_insurance`` set.
    """
    config = config or EngineConfig()

    if policy is not None:
        validate_policy(policy)
    classified = classify_charges(charges, config.classification.code_overrides)
    encounter = group_by_category(classified)

    try:
        policy = require_complete_policy(policy)
    except PolicyIncompleteError as exc:
        logger.warning("%s; estimating encounter without insurance", exc)
        return build_uninsured_estimate(
            encounter,
            policy,
            reason=(
                "No insurance on file - estimated as self-pay"
                if policy is None
                else "Insurance details incomplete - estimated as self-pay"
            ),
        )

    allocations = allocate_deductible(encounter.totals(), policy.deductible_remaining)
    remainders = {a.category: a.unconsumed for a in allocations}

    copay = resolve_copay(
        encounter,
        policy,
        remainders,
        waive_until_deductible_met=config.copay.waive_until_deductible_met,
    )

    categories = []
    for allocation in allocations:
        copay_applied = copay.amount if copay.category == allocation.category else ZERO
        split = split_coinsurance(
            allocation.unconsumed - copay_applied, policy.coinsurance_percent
        )
        categories.append(build_category_breakdown(allocation, copay_applied, split))

    result = build_calculation_result(encounter, policy, allocations, copay, categories)
    logger.info(
        "Calculated encounter: charged=%s patient=%s insurance=%s deductible_applied=%s",
        result.total_charged,
        result.total_patient,
        result.total_insurance,
        result.total_deductible_applied,
    )
    return result
