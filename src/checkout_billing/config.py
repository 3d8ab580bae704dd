"""Engine configuration models.

The checkout workflow loads each section from ``configs/config.json``
through ``workflows`` ResourceConfig; library callers build an
``EngineConfig`` directly.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from .schemas.common import ChargeCategory

CONFIG_FILE = "configs/config.json"


class ClassificationConfig(BaseModel):
    """Per-practice adjustments to CPT classification."""

    code_overrides: dict[str, ChargeCategory] = {}

    @field_validator("code_overrides")
    @classmethod
    def _normalize_codes(cls, value: dict[str, ChargeCategory]) -> dict[str, ChargeCategory]:
        return {code.strip().upper(): category for code, category in value.items()}


class CopayConfig(BaseModel):
    """Copay collection rules."""

    waive_until_deductible_met: bool = False


class SelfPayConfig(BaseModel):
    """Cash-price settings for uninsured checkout."""

    discount_percent: Decimal = Field(default=Decimal("15"), ge=0, le=100)


class EngineConfig(BaseModel):
    """Top-level engine configuration."""

    classification: ClassificationConfig = ClassificationConfig()
    copay: CopayConfig = CopayConfig()
    self_pay: SelfPayConfig = SelfPayConfig()
