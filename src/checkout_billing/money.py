"""Currency helpers. All amounts are Decimals quantized to the cent."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_currency(amount: Decimal) -> Decimal:
    """Round to 2 decimal places using half-up rounding."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Return ``percent`` % of ``amount``, rounded to the cent."""
    return round_currency(amount * percent / Decimal(100))


def format_currency(amount: Decimal) -> str:
    """Format as US dollars, e.g. ``$1,234.50``."""
    return f"${amount:,.2f}"
