"""Deductible waterfall priority.

Business rule: the order in which charge categories absorb the remaining
deductible. Review changes to this tuple with the billing office; the
allocator consumes it as-is.
"""

from ..schemas.common import ChargeCategory

DEDUCTIBLE_PRIORITY: tuple[ChargeCategory, ...] = (
    ChargeCategory.EVALUATION_MANAGEMENT,
    ChargeCategory.SURGICAL,
    ChargeCategory.PATHOLOGY,
    ChargeCategory.OTHER,
)
