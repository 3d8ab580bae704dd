"""Discounted cash-price estimate for patients without insurance."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from ..errors import ValidationError
from ..money import ZERO, percent_of
from ..schemas.charges import ChargeItem
from ..schemas.result import SelfPayLineItem, SelfPayResult
from .classifier import validate_charge

logger = logging.getLogger(__name__)

DEFAULT_SELF_PAY_DISCOUNT = Decimal("15")


def calculate_self_pay_charges(
    charges: Iterable[ChargeItem],
    discount_percent: Decimal = DEFAULT_SELF_PAY_DISCOUNT,
) -> SelfPayResult:
    """Apply the practice's self-pay discount to every line."""
    if not 0 <= discount_percent <= 100:
        raise ValidationError(f"Self-pay discount {discount_percent}% must be between 0 and 100")

    charges = list(charges)
    for item in charges:
        validate_charge(item)

    line_items: list[SelfPayLineItem] = []
    for item in charges:
        discount = percent_of(item.line_total, discount_percent)
        line_items.append(
            SelfPayLineItem(
                code=item.code,
                description=item.description,
                quantity=item.quantity,
                unit_amount=item.amount,
                charged=item.line_total,
                discount=discount,
                patient_responsibility=item.line_total - discount,
            )
        )

    subtotal = sum((line.charged for line in line_items), ZERO)
    total_discount = sum((line.discount for line in line_items), ZERO)
    logger.info(
        "Self-pay estimate: %d lines, subtotal=%s discount=%s",
        len(line_items),
        subtotal,
        total_discount,
    )

    return SelfPayResult(
        line_items=line_items,
        subtotal=subtotal,
        discount_percent=discount_percent,
        total_discount=total_discount,
        total_due=subtotal - total_discount,
    )
