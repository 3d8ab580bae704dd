"""Coinsurance split between patient and insurer."""

from collections.abc import Sequence
from decimal import Decimal

from ..money import ZERO, percent_of, round_currency
from ..schemas.result import CoinsuranceSplit


def split_coinsurance(remainder: Decimal, coinsurance_percent: Decimal) -> CoinsuranceSplit:
    """Split a category remainder by the patient's coinsurance percentage.

    The patient share is rounded half-up to the cent; the insurer gets the
    exact complement so the split always reconciles to ``remainder``.
    """
    if remainder <= ZERO:
        return CoinsuranceSplit(
            remainder=ZERO, percent=coinsurance_percent, patient=ZERO, insurance=ZERO
        )

    patient = percent_of(remainder, coinsurance_percent)
    return CoinsuranceSplit(
        remainder=remainder,
        percent=coinsurance_percent,
        patient=patient,
        insurance=remainder - patient,
    )


def apportion(amount: Decimal, weights: Sequence[Decimal]) -> list[Decimal]:
    """Spread a rounded amount over lines in proportion to ``weights``.

    Each share is the difference of rounded cumulative shares, so shares
    are never negative, never exceed their weight when ``amount`` does not
    exceed the weight total, and always sum exactly to ``amount``.
    """
    total = sum(weights, ZERO)
    if total <= ZERO:
        return [ZERO for _ in weights]

    shares: list[Decimal] = []
    running = ZERO
    allocated = ZERO
    for weight in weights:
        running += weight
        cumulative = round_currency(amount * running / total)
        shares.append(cumulative - allocated)
        allocated = cumulative
    return shares
