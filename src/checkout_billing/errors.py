"""Exceptions raised by the billing calculation engine."""


class BillingError(Exception):
    """Base class for billing engine errors."""


class ValidationError(BillingError):
    """Charge or policy input is malformed and cannot be calculated."""


class PolicyIncompleteError(BillingError):
    """Policy is missing the deductible or coinsurance fields.

    The engine recovers from this by estimating the encounter as self-pay.
    """

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = missing_fields
        super().__init__(
            "Insurance policy is missing required fields: " + ", ".join(missing_fields)
        )
