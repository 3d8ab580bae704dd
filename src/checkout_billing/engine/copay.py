"""Copay selection: one flat copay per encounter at most."""

import logging
from collections.abc import Mapping
from decimal import Decimal

from ..money import ZERO, format_currency
from ..schemas.charges import EncounterCharges
from ..schemas.common import ChargeCategory, CopayType
from ..schemas.policy import InsurancePolicy
from ..schemas.result import CopayDetails

logger = logging.getLogger(__name__)


def resolve_copay(
    encounter: EncounterCharges,
    policy: InsurancePolicy,
    remainders: Mapping[ChargeCategory, Decimal],
    *,
    waive_until_deductible_met: bool = False,
) -> CopayDetails:
    """Decide which copay applies and how much of it is collected.

    Rules:
    - procedure copay: any surgical charge is present; suppresses the visit copay
    - visit copay: the encounter has office-visit charges and nothing else
    - the copay lands on its own category and is capped at that category's
      post-deductible remainder
    - with ``waive_until_deductible_met`` the copay is waived while the
      deductible is still open at the start of the encounter
    """
    if encounter.has(ChargeCategory.SURGICAL):
        copay_type = CopayType.PROCEDURE
        category = ChargeCategory.SURGICAL
        scheduled = policy.procedure_copay or ZERO
    elif encounter.categories == [ChargeCategory.EVALUATION_MANAGEMENT]:
        copay_type = CopayType.VISIT
        category = ChargeCategory.EVALUATION_MANAGEMENT
        scheduled = policy.visit_copay or ZERO
    else:
        return CopayDetails(reason="No copay applies to this combination of charges")

    if scheduled <= ZERO:
        return CopayDetails(reason=f"Plan has no {copay_type.value} copay")

    if waive_until_deductible_met and not policy.is_deductible_met:
        logger.debug("Waiving %s copay, deductible not met", copay_type.value)
        return CopayDetails(
            copay_type=copay_type,
            category=category,
            scheduled_amount=scheduled,
            waived=True,
            reason="Copay waived - applying charges to deductible",
        )

    available = remainders.get(category, ZERO)
    amount = min(scheduled, available)
    capped = amount < scheduled
    reason = None
    if capped:
        reason = (
            f"Copay limited to {format_currency(amount)}, the amount left "
            f"after deductible for {category.label}"
        )

    return CopayDetails(
        copay_type=copay_type,
        category=category,
        scheduled_amount=scheduled,
        amount=amount,
        capped=capped,
        reason=reason,
    )
