from decimal import Decimal

import pytest

from backoffice.core.config import settings
from backoffice.core.exceptions import ValidationError
from backoffice.services.calculator import (
    amount_in_words, calculate_invoice, calculate_line, derive_status, round_half_away, to_decimal
)


def test_single_line_invoice_with_default_gst():
    totals = calculate_invoice([{"quantity": 2, "rate": 100, "tax_rate": 18}])

    assert totals.lines[0].amount == Decimal("200.00")
    assert totals.lines[0].tax_amount == Decimal("36.00")
    assert totals.sub_total == Decimal("200.00")
    assert totals.cgst_amount == Decimal("18.00")
    assert totals.sgst_amount == Decimal("18.00")
    assert totals.igst_amount == Decimal("0.00")
    assert totals.tax_total == Decimal("36.00")
    assert totals.grand_total == Decimal("236")
    assert totals.round_off == Decimal("0")
    assert totals.balance == Decimal("236")
    assert totals.status == "unpaid"
    assert totals.amount_in_words == "Two Hundred Thirty Six Rupees Only"


def test_grand_total_rounds_half_away_from_zero():
    # 0.50 worth of tax lands exactly on a tie
    totals = calculate_invoice(
        [{"quantity": 1, "rate": "10.50"}], cgst_rate=0, sgst_rate=0, igst_rate=0
    )
    assert totals.grand_total == Decimal("11")
    assert totals.round_off == Decimal("0.50")

    assert round_half_away(Decimal("-0.50")) == Decimal("-1")
    assert round_half_away(Decimal("2.49")) == Decimal("2")


def test_round_off_matches_difference():
    totals = calculate_invoice(
        [{"quantity": 3, "rate": "33.33"}, {"quantity": "1.5", "rate": "12.10"}],
        discount="5.25",
    )
    unrounded = totals.sub_total + totals.tax_total - totals.discount
    assert totals.unrounded_total == unrounded
    assert totals.grand_total == round_half_away(unrounded)
    assert totals.round_off == totals.grand_total - unrounded
    assert totals.balance == totals.grand_total - totals.paid_amount


def test_line_tax_rate_overrides_combined_rate():
    own_rate = calculate_line(1, 100, tax_rate=5)
    default_rate = calculate_line(1, 100, default_tax_rate=Decimal("18"))

    assert own_rate.tax_amount == Decimal("5.00")
    assert own_rate.total == Decimal("105.00")
    assert default_rate.tax_rate == Decimal("18")
    assert default_rate.tax_amount == Decimal("18.00")


def test_line_tax_does_not_feed_invoice_tax():
    totals = calculate_invoice([{"quantity": 1, "rate": 100, "tax_rate": 28}])
    assert totals.lines[0].tax_amount == Decimal("28.00")
    assert totals.tax_total == Decimal("18.00")
    assert totals.grand_total == Decimal("118")


def test_zero_quantity_and_rate_are_allowed():
    totals = calculate_invoice([{"quantity": 0, "rate": 0}])
    assert totals.sub_total == Decimal("0")
    assert totals.grand_total == Decimal("0")
    # Nothing owed means the invoice is settled
    assert totals.status == "paid"
    assert totals.amount_in_words == "Zero Rupees Only"


def test_paid_amount_drives_status():
    partial = calculate_invoice([{"quantity": 1, "rate": 100}], paid_amount=50)
    paid = calculate_invoice([{"quantity": 1, "rate": 100}], paid_amount=118)

    assert partial.balance == Decimal("68")
    assert partial.status == "partial"
    assert paid.balance == Decimal("0")
    assert paid.status == "paid"


def test_igst_only_invoice():
    totals = calculate_invoice(
        [{"quantity": 4, "rate": 250}], cgst_rate=0, sgst_rate=0, igst_rate=12
    )
    assert totals.igst_amount == Decimal("120.00")
    assert totals.tax_total == Decimal("120.00")
    assert totals.grand_total == Decimal("1120")


@pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity", object()])
def test_non_numeric_input_is_rejected(value):
    with pytest.raises(ValidationError):
        to_decimal(value, "quantity")


def test_non_numeric_line_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        calculate_invoice([{"quantity": "two", "rate": 100}])
    assert "quantity" in exc_info.value.message


def test_numeric_strings_and_numbers_agree():
    assert to_decimal("2") == to_decimal(2) == to_decimal(2.0)


def test_derive_status():
    assert derive_status(Decimal("0"), Decimal("0")) == "paid"
    assert derive_status(Decimal("-5"), Decimal("105")) == "paid"
    assert derive_status(Decimal("10"), Decimal("5")) == "partial"
    assert derive_status(Decimal("10"), Decimal("0")) == "unpaid"


@pytest.mark.parametrize("amount, words", [
    (236, "Two Hundred Thirty Six Rupees Only"),
    (150000, "One Lakh Fifty Thousand Rupees Only"),
    (10000000, "One Crore Rupees Only"),
    (Decimal("1001.99"), "One Thousand One Rupees Only"),
])
def test_amount_in_words(amount, words):
    assert amount_in_words(amount) == words


def test_amount_in_words_custom_phrase():
    assert amount_in_words(5, "Dollars") == "Five Dollars"


def test_omitted_rates_and_phrase_follow_settings(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_IGST_RATE", Decimal("5"))
    monkeypatch.setattr(settings, "CURRENCY_PHRASE", "Dollars Only")

    totals = calculate_invoice([{"quantity": 1, "rate": 100}])

    assert totals.igst_rate == Decimal("5")
    assert totals.igst_amount == Decimal("5.00")
    assert totals.lines[0].tax_rate == Decimal("23")
    assert totals.grand_total == Decimal("123")
    assert totals.amount_in_words == "One Hundred Twenty Three Dollars Only"
