"""Charge classification by CPT code and line origin."""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from ..errors import ValidationError
from ..schemas.charges import ChargeItem, EncounterCharges
from ..schemas.common import ChargeCategory, ChargeOrigin
from .priority import DEDUCTIBLE_PRIORITY

logger = logging.getLogger(__name__)

_EM = ChargeCategory.EVALUATION_MANAGEMENT
_SURGICAL = ChargeCategory.SURGICAL
_PATHOLOGY = ChargeCategory.PATHOLOGY

# Largest line total the engine accepts; keeps cent arithmetic inside the
# default decimal context precision.
MAX_LINE_TOTAL = Decimal("1000000000.00")


def _codes(category: ChargeCategory, *codes: str) -> dict[str, ChargeCategory]:
    return {code: category for code in codes}


# Codes the practice bills routinely. Checked before the numeric ranges so
# that biopsies (inside the surgical range) land in pathology.
CPT_CATEGORIES: dict[str, ChargeCategory] = {
    # Office visits, new and established
    **_codes(_EM, "99201", "99202", "99203", "99204", "99205"),
    **_codes(_EM, "99211", "99212", "99213", "99214", "99215"),
    # Online digital E&M
    **_codes(_EM, "99421", "99422", "99423"),
    # Excision, benign lesions
    **_codes(_SURGICAL, "11400", "11401", "11402", "11403", "11404", "11406"),
    **_codes(_SURGICAL, "11420", "11421", "11422", "11423", "11424", "11426"),
    **_codes(_SURGICAL, "11440", "11441", "11442", "11443", "11444", "11446"),
    # Excision, malignant lesions
    **_codes(_SURGICAL, "11600", "11601", "11602", "11603", "11604", "11606"),
    **_codes(_SURGICAL, "11620", "11621", "11622", "11623", "11624", "11626"),
    **_codes(_SURGICAL, "11640", "11641", "11642", "11643", "11644", "11646"),
    # Mohs
    **_codes(_SURGICAL, "17311", "17312", "17313", "17314", "17315"),
    # Destruction (cryotherapy, electrosurgery) and skin tag removal
    **_codes(_SURGICAL, "17000", "17003", "17004", "17110", "17111"),
    **_codes(_SURGICAL, "17260", "17261", "17262", "17263", "17264"),
    **_codes(_SURGICAL, "17270", "17271", "17272", "17273", "17274"),
    **_codes(_SURGICAL, "17280", "17281", "17282", "17283", "17284"),
    **_codes(_SURGICAL, "11300", "11301", "11302", "11303"),
    # Biopsies and surgical pathology
    **_codes(_PATHOLOGY, "11102", "11103", "11104", "11105", "11106", "11107"),
    **_codes(_PATHOLOGY, "88305", "88307"),
}

# Inclusive numeric CPT ranges, used when a code is not in the table above.
CPT_RANGES: list[tuple[int, int, ChargeCategory]] = [
    (99202, 99499, _EM),
    (10004, 69990, _SURGICAL),
    (80047, 89398, _PATHOLOGY),
]


def validate_charge(item: ChargeItem) -> None:
    """Reject amounts and quantities the engine cannot bill."""
    if not item.amount.is_finite():
        raise ValidationError(f"Charge {item.code}: amount {item.amount} is not a number")
    if item.amount < 0:
        raise ValidationError(f"Charge {item.code}: amount {item.amount} is negative")
    if item.quantity < 1:
        raise ValidationError(f"Charge {item.code}: quantity {item.quantity} must be at least 1")
    if item.amount * item.quantity > MAX_LINE_TOTAL:
        raise ValidationError(
            f"Charge {item.code}: line total exceeds the maximum of {MAX_LINE_TOTAL}"
        )


def classify_code(
    code: str,
    origin: ChargeOrigin = ChargeOrigin.MEDICAL,
    overrides: Mapping[str, ChargeCategory] | None = None,
) -> ChargeCategory:
    """Map a line's code and origin to a waterfall category.

    Cosmetic treatments and retail products are never covered medical
    services and always fall into OTHER. Unknown medical codes do too.
    """
    if origin != ChargeOrigin.MEDICAL:
        return ChargeCategory.OTHER

    code = code.strip().upper()
    if overrides and code in overrides:
        return overrides[code]
    if code in CPT_CATEGORIES:
        return CPT_CATEGORIES[code]

    if len(code) == 5 and code.isdigit():
        number = int(code)
        for low, high, category in CPT_RANGES:
            if low <= number <= high:
                return category

    logger.warning("Unrecognized charge code %r, classifying as %s", code, ChargeCategory.OTHER.value)
    return ChargeCategory.OTHER


def classify_charges(
    charges: Iterable[ChargeItem],
    overrides: Mapping[str, ChargeCategory] | None = None,
) -> list[ChargeItem]:
    """Validate every charge and tag it with a category.

    All charges are validated before any is returned, so a single bad line
    rejects the whole encounter. A category supplied by the caller is kept.
    """
    charges = list(charges)
    for item in charges:
        validate_charge(item)

    classified: list[ChargeItem] = []
    for item in charges:
        if item.category is None:
            item = item.model_copy(
                update={"category": classify_code(item.code, item.origin, overrides)}
            )
        classified.append(item)
        logger.debug("Charge %s (%s) -> %s", item.code, item.origin.value, item.category.value)

    return classified


def group_by_category(charges: Iterable[ChargeItem]) -> EncounterCharges:
    """Group classified charges in deductible priority order, keeping input order within a group."""
    groups: dict[ChargeCategory, list[ChargeItem]] = {c: [] for c in DEDUCTIBLE_PRIORITY}
    for item in charges:
        if item.category is None:
            raise ValidationError(f"Charge {item.code} has not been classified")
        groups[item.category].append(item)
    return EncounterCharges(groups=groups)
