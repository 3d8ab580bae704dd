"""Charge line items and their per-encounter grouping."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from ..money import ZERO, round_currency
from .common import ChargeCategory, ChargeOrigin


class ChargeItem(BaseModel):
    """A single billable line: a CPT service, cosmetic treatment or product sale.

    ``amount`` is the unit fee; ``category`` is filled in by the classifier
    when not supplied by the caller.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    description: str = ""
    amount: Decimal
    quantity: int = 1
    origin: ChargeOrigin = ChargeOrigin.MEDICAL
    category: ChargeCategory | None = None

    @property
    def line_total(self) -> Decimal:
        return round_currency(self.amount * self.quantity)


class EncounterCharges(BaseModel):
    """Classified charges grouped by category, in waterfall priority order."""

    model_config = ConfigDict(frozen=True)

    groups: dict[ChargeCategory, list[ChargeItem]] = {}

    @property
    def categories(self) -> list[ChargeCategory]:
        """Categories that have at least one line, in priority order."""
        return [category for category, items in self.groups.items() if items]

    @property
    def items(self) -> list[ChargeItem]:
        return [item for items in self.groups.values() for item in items]

    def has(self, category: ChargeCategory) -> bool:
        return bool(self.groups.get(category))

    def lines(self, category: ChargeCategory) -> list[ChargeItem]:
        return list(self.groups.get(category, []))

    def total(self, category: ChargeCategory) -> Decimal:
        return sum((item.line_total for item in self.groups.get(category, [])), ZERO)

    def totals(self) -> dict[ChargeCategory, Decimal]:
        return {category: self.total(category) for category in self.categories}
