"""
Tests for argument schemas and the generic validator.
"""
from decimal import Decimal

import pytest

from core.currency import RateTable
from core.payments import AddPaymentArgs, FraudCheckArgs, PaymentSummaryArgs
from core.validation import Invalid, Valid, strip_markup, validate


CONTEXT = {"rates": RateTable.default()}


def fields(result):
    assert isinstance(result, Invalid)
    return [error.field for error in result.errors]


class TestDefaults:
    """Test that defaults and typing are applied."""

    def test_summary_defaults(self):
        result = validate(PaymentSummaryArgs, {"userId": "U123"}, CONTEXT)
        assert isinstance(result, Valid)
        assert result.value.currency == "GBP"
        assert result.value.timeframe == "all"
        assert result.value.include_details is False

    def test_threshold_is_decimal(self):
        result = validate(FraudCheckArgs, {"userId": "U123", "threshold": 60}, CONTEXT)
        assert result.value.threshold == Decimal("60")
        assert result.value.detail_level == "basic"

    def test_snake_case_names_accepted(self):
        result = validate(FraudCheckArgs, {"user_id": "U123", "detail_level": "detailed"}, CONTEXT)
        assert isinstance(result, Valid)
        assert result.value.detail_level == "detailed"

    def test_unknown_fields_ignored(self):
        assert isinstance(validate(PaymentSummaryArgs, {"userId": "U123", "colour": "red"}, CONTEXT), Valid)


class TestRejections:
    """Test that each constraint produces a field-level error."""

    def test_missing_required_field(self):
        assert fields(validate(PaymentSummaryArgs, {}, CONTEXT)) == ["userId"]

    def test_user_id_too_short(self):
        assert fields(validate(PaymentSummaryArgs, {"userId": "U1"}, CONTEXT)) == ["userId"]

    def test_unknown_timeframe_accepted(self):
        """Unknown windows are resolved by the handler, not rejected."""
        result = validate(PaymentSummaryArgs, {"userId": "U123", "timeframe": "year"}, CONTEXT)
        assert isinstance(result, Valid)
        assert result.value.timeframe == "year"

    def test_currency_length(self):
        assert fields(validate(PaymentSummaryArgs, {"userId": "U123", "currency": "EU"}, CONTEXT)) == ["currency"]

    def test_currency_must_be_supported(self):
        result = validate(PaymentSummaryArgs, {"userId": "U123", "currency": "CHF"}, CONTEXT)
        assert fields(result) == ["currency"]
        assert "unsupported currency CHF" in result.message

    @pytest.mark.parametrize("threshold", [0, -5])
    def test_threshold_must_be_positive(self, threshold):
        assert fields(validate(FraudCheckArgs, {"userId": "U123", "threshold": threshold}, CONTEXT)) == ["threshold"]

    def test_non_mapping_arguments(self):
        assert fields(validate(PaymentSummaryArgs, ["U123"], CONTEXT)) == ["arguments"]

    def test_none_means_no_arguments(self):
        assert fields(validate(PaymentSummaryArgs, None, CONTEXT)) == ["userId"]


class TestAddPaymentArgs:
    """Test the write tool's stricter schema."""

    def base(self, **overrides):
        raw = {"userId": "U123", "amount": 25.5, "payee": "Erin"}
        raw.update(overrides)
        return validate(AddPaymentArgs, raw, CONTEXT)

    def test_valid(self):
        value = self.base().value
        assert value.amount == Decimal("25.5")
        assert value.currency == "GBP"
        assert value.description is None

    def test_ceiling_is_inclusive(self):
        assert isinstance(self.base(amount=10000), Valid)

    @pytest.mark.parametrize("currency, amount", [("JPY", 50000), ("USD", 12000), ("EUR", 11500)])
    def test_ceiling_applies_in_base_currency(self, currency, amount):
        """¥50,000, $12,000 and €11,500 are all worth at most £10,000."""
        assert isinstance(self.base(currency=currency, amount=amount), Valid)

    def test_foreign_amount_over_ceiling(self):
        """€11,600 is worth £10,086.96."""
        result = self.base(currency="EUR", amount=11600)
        assert fields(result) == ["amount"]
        assert "GBP 10086.96" in result.message

    @pytest.mark.parametrize("amount", [10000.01, 0, -1])
    def test_amount_bounds(self, amount):
        assert fields(self.base(amount=amount)) == ["amount"]

    def test_amount_precision(self):
        assert fields(self.base(amount=1.005)) == ["amount"]

    def test_payee_is_sanitised(self):
        assert self.base(payee="<b>Erin</b>").value.payee == "bErin/b"

    def test_markup_only_payee_rejected(self):
        assert fields(self.base(payee="<>")) == ["payee"]

    def test_description_is_sanitised(self):
        value = self.base(description="<script>alert(1)</script>").value
        assert value.description == "scriptalert(1)/script"

    def test_description_length(self):
        assert fields(self.base(description="x" * 501)) == ["description"]

    def test_unsupported_currency(self):
        assert fields(self.base(currency="BTC")) == ["currency"]


def test_strip_markup():
    assert strip_markup("a<b>c") == "abc"
    assert strip_markup("plain") == "plain"
