"""Insurance policy benefits consumed by the engine."""

from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, field_validator

from ..money import ZERO, round_currency

# Fields without which deductible/coinsurance math cannot run.
REQUIRED_BENEFIT_FIELDS = ("deductible_total", "deductible_met", "coinsurance_percent")


class InsurancePolicy(BaseModel):
    """Patient insurance benefits as verified at check-in.

    Numeric fields are optional because eligibility responses are often
    partial; see ``missing_fields``.
    """

    model_config = ConfigDict(frozen=True)

    carrier: str | None = None
    plan: str | None = None
    member_id: str | None = None
    # Deductible
    deductible_total: Decimal | None = None
    deductible_met: Decimal | None = None
    # Patient share after deductible, 0-100
    coinsurance_percent: Decimal | None = None
    # Copays
    visit_copay: Decimal | None = None
    procedure_copay: Decimal | None = None
    # Plan type
    is_hdhp: bool = False

    @field_validator("deductible_total", "deductible_met", "visit_copay", "procedure_copay")
    @classmethod
    def _to_cents(cls, value: Decimal | None) -> Decimal | None:
        if value is None:
            return None
        try:
            return round_currency(value)
        except InvalidOperation as exc:
            raise ValueError(f"{value} is too large to bill in cents") from exc

    @property
    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_BENEFIT_FIELDS if getattr(self, name) is None]

    @property
    def deductible_remaining(self) -> Decimal:
        if self.deductible_total is None:
            return ZERO
        return max(self.deductible_total - (self.deductible_met or ZERO), ZERO)

    @property
    def is_deductible_met(self) -> bool:
        return self.deductible_remaining == ZERO
