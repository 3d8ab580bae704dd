"""Unit tests for charge validation and classification."""

import logging
from decimal import Decimal

import pytest

from checkout_billing.engine.classifier import (
    classify_charges,
    classify_code,
    group_by_category,
)
from checkout_billing.engine.priority import DEDUCTIBLE_PRIORITY
from checkout_billing.errors import ValidationError
from checkout_billing.schemas import ChargeCategory, ChargeItem, ChargeOrigin


def _charge(
    code: str,
    amount: str = "100.00",
    quantity: int = 1,
    origin: ChargeOrigin = ChargeOrigin.MEDICAL,
    category: ChargeCategory | None = None,
) -> ChargeItem:
    """Helper to create a ChargeItem for testing."""
    return ChargeItem(
        code=code,
        description=f"Service {code}",
        amount=Decimal(amount),
        quantity=quantity,
        origin=origin,
        category=category,
    )


# ============================================================================
# CODE CLASSIFICATION TESTS
# ============================================================================


class TestClassifyCode:
    """Tests for mapping codes and origins to categories."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("99213", ChargeCategory.EVALUATION_MANAGEMENT),
            ("99421", ChargeCategory.EVALUATION_MANAGEMENT),
            ("11402", ChargeCategory.SURGICAL),
            ("17311", ChargeCategory.SURGICAL),
            ("17000", ChargeCategory.SURGICAL),
            ("11102", ChargeCategory.PATHOLOGY),
            ("88305", ChargeCategory.PATHOLOGY),
        ],
    )
    def test_known_codes(self, code, expected):
        """Codes in the practice table map directly."""
        assert classify_code(code) == expected

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("99242", ChargeCategory.EVALUATION_MANAGEMENT),
            ("20610", ChargeCategory.SURGICAL),
            ("81025", ChargeCategory.PATHOLOGY),
        ],
    )
    def test_range_fallback(self, code, expected):
        """Codes outside the table fall back to CPT ranges."""
        assert classify_code(code) == expected

    def test_biopsy_beats_surgical_range(self):
        """Biopsy codes sit in the surgical range but classify as pathology."""
        assert classify_code("11104") == ChargeCategory.PATHOLOGY

    def test_unrecognized_code_is_other(self, caplog):
        """HCPCS and malformed codes become OTHER with a warning, not an error."""
        with caplog.at_level(logging.WARNING):
            assert classify_code("J3301") == ChargeCategory.OTHER
            assert classify_code("abc") == ChargeCategory.OTHER
        assert "Unrecognized charge code" in caplog.text

    @pytest.mark.parametrize("origin", [ChargeOrigin.COSMETIC, ChargeOrigin.PRODUCT])
    def test_non_medical_origin_is_other(self, origin):
        """Cosmetic and product lines are OTHER regardless of code."""
        assert classify_code("11402", origin) == ChargeCategory.OTHER

    def test_override_wins(self):
        """Configured overrides take precedence over the code table."""
        overrides = {"17000": ChargeCategory.OTHER}
        assert classify_code("17000", overrides=overrides) == ChargeCategory.OTHER


# ============================================================================
# CHARGE LIST TESTS
# ============================================================================


class TestClassifyCharges:
    """Tests for validating and tagging a charge list."""

    def test_tags_each_charge(self):
        charges = classify_charges([_charge("99213"), _charge("SPF50", origin=ChargeOrigin.PRODUCT)])
        assert [c.category for c in charges] == [
            ChargeCategory.EVALUATION_MANAGEMENT,
            ChargeCategory.OTHER,
        ]

    def test_preset_category_kept(self):
        """A category supplied by the caller is not re-derived."""
        charges = classify_charges([_charge("99213", category=ChargeCategory.OTHER)])
        assert charges[0].category == ChargeCategory.OTHER

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            classify_charges([_charge("99213"), _charge("11402", amount="-10.00")])

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="quantity"):
            classify_charges([_charge("99213", quantity=0)])

    def test_zero_amount_allowed(self):
        """No-charge lines are valid."""
        charges = classify_charges([_charge("99211", amount="0")])
        assert charges[0].line_total == Decimal("0")

    def test_line_total_uses_quantity(self):
        assert _charge("11102", amount="99.995", quantity=2).line_total == Decimal("199.99")


class TestGroupByCategory:
    """Tests for grouping classified charges."""

    def test_groups_in_priority_order(self):
        charges = classify_charges(
            [
                _charge("SPF50", amount="40.00", origin=ChargeOrigin.PRODUCT),
                _charge("88305", amount="100.00"),
                _charge("99213", amount="150.00"),
            ]
        )
        encounter = group_by_category(charges)
        assert list(encounter.groups) == list(DEDUCTIBLE_PRIORITY)
        assert encounter.categories == [
            ChargeCategory.EVALUATION_MANAGEMENT,
            ChargeCategory.PATHOLOGY,
            ChargeCategory.OTHER,
        ]
        assert encounter.total(ChargeCategory.PATHOLOGY) == Decimal("100.00")
        assert encounter.total(ChargeCategory.SURGICAL) == Decimal("0")

    def test_unclassified_charge_rejected(self):
        with pytest.raises(ValidationError):
            group_by_category([_charge("99213")])


class TestLargeAmounts:
    """Amounts beyond what cent arithmetic can carry are rejected cleanly."""

    def test_huge_amount_rejected(self):
        with pytest.raises(ValidationError, match="maximum"):
            classify_charges([_charge("99213", amount="1e30")])

    def test_huge_quantity_rejected(self):
        with pytest.raises(ValidationError, match="maximum"):
            classify_charges([_charge("99213", amount="500.00", quantity=10**10)])

    def test_lowercase_override_from_config(self):
        """Overrides configured in lower case still match."""
        from checkout_billing.config import ClassificationConfig

        overrides = ClassificationConfig(code_overrides={"j3301": "pathology"}).code_overrides
        charges = classify_charges([_charge("J3301")], overrides)
        assert charges[0].category == ChargeCategory.PATHOLOGY
