"""Tests for the self-pay cash-price calculator."""

from decimal import Decimal

import pytest

from checkout_billing.engine import calculate_self_pay_charges
from checkout_billing.errors import ValidationError
from checkout_billing.schemas import ChargeItem

D = Decimal


class TestSelfPay:
    """Tests for calculate_self_pay_charges."""

    def test_default_discount(self):
        """15% off every line."""
        result = calculate_self_pay_charges(
            [
                ChargeItem(code="99213", description="Office visit", amount=D("150.00")),
                ChargeItem(code="11102", description="Biopsy", amount=D("100.00"), quantity=2),
            ]
        )

        assert result.subtotal == D("350.00")
        assert result.discount_percent == D("15")
        assert [line.discount for line in result.line_items] == [D("22.50"), D("30.00")]
        assert result.total_discount == D("52.50")
        assert result.total_due == D("297.50")

    def test_discount_rounds_half_up(self):
        result = calculate_self_pay_charges([ChargeItem(code="99213", amount=D("0.10"))], D("15"))
        assert result.line_items[0].discount == D("0.02")
        assert result.line_items[0].patient_responsibility == D("0.08")

    def test_no_discount(self):
        result = calculate_self_pay_charges([ChargeItem(code="99213", amount=D("80.00"))], D("0"))
        assert result.total_due == D("80.00")

    def test_invalid_discount(self):
        with pytest.raises(ValidationError):
            calculate_self_pay_charges([ChargeItem(code="99213", amount=D("80.00"))], D("120"))

    def test_negative_charge(self):
        with pytest.raises(ValidationError):
            calculate_self_pay_charges([ChargeItem(code="99213", amount=D("-80.00"))])

    def test_amount_too_large(self):
        with pytest.raises(ValidationError):
            calculate_self_pay_charges([ChargeItem(code="99213", amount=D("1e30"))])
