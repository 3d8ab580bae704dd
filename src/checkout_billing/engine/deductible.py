"""Deductible waterfall across charge categories."""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from ..money import ZERO
from ..schemas.charges import ChargeItem
from ..schemas.common import ChargeCategory
from ..schemas.result import DeductibleAllocation
from .priority import DEDUCTIBLE_PRIORITY

logger = logging.getLogger(__name__)


def allocate_deductible(
    category_totals: Mapping[ChargeCategory, Decimal],
    remaining_deductible: Decimal,
    priority: Sequence[ChargeCategory] = DEDUCTIBLE_PRIORITY,
) -> list[DeductibleAllocation]:
    """Consume the remaining deductible category by category.

    For each category in ``priority`` that has charges:
    applied = min(category total, remaining); remaining -= applied.
    Categories without charges produce no record.
    """
    remaining = max(remaining_deductible, ZERO)
    allocations: list[DeductibleAllocation] = []

    for category in priority:
        if category not in category_totals:
            continue
        charged = category_totals[category]
        applied = min(charged, remaining)

        allocations.append(
            DeductibleAllocation(
                category=category,
                category_label=category.label,
                charged=charged,
                applied=applied,
                remaining_before=remaining,
                remaining_after=remaining - applied,
            )
        )
        logger.debug(
            "Deductible %s: charged=%s applied=%s remaining=%s",
            category.value,
            charged,
            applied,
            remaining - applied,
        )
        remaining -= applied

    return allocations


def total_consumed(allocations: Sequence[DeductibleAllocation]) -> Decimal:
    return sum((a.applied for a in allocations), ZERO)


def distribute_to_lines(amount: Decimal, lines: Sequence[ChargeItem]) -> list[Decimal]:
    """Attribute a category-level amount to its lines in order, filling each line before the next."""
    shares: list[Decimal] = []
    left = amount
    for line in lines:
        share = min(line.line_total, left)
        shares.append(share)
        left -= share
    return shares
