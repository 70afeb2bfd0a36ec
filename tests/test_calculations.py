from types import SimpleNamespace

import pytest

from calculations import (
    calculate_coupon_amount,
    calculate_discount_rate,
    calculate_final_total_details,
    calculate_savings,
    calculate_subtotal,
    calculate_total_after_discount,
    calculate_total_with_taxes,
)


def test_subtotal_of_empty_cart():
    assert calculate_subtotal([]) == 0


def test_subtotal_mixes_mappings_and_objects():
    items = [
        {"price": 2.5, "quantity": 4},
        SimpleNamespace(price=10, quantity=3),
    ]
    assert calculate_subtotal(items) == pytest.approx(40)


def test_subtotal_with_custom_fields():
    items = [{"amount": 3, "qty": 3}]
    assert calculate_subtotal(items, "amount", "qty") == 9


def test_discount_rate_is_capped():
    assert calculate_discount_rate(10, 5) == 15
    assert calculate_discount_rate(80, 40) == 100


def test_total_after_discount():
    assert calculate_total_after_discount(200, 10) == pytest.approx(180)


def test_total_with_taxes():
    assert calculate_total_with_taxes(200, 5) == pytest.approx(210)


def test_coupon_amount_never_exceeds_base():
    assert calculate_coupon_amount(10, 15) == 10
    assert calculate_coupon_amount(100, 15) == 15


def test_details_tax_after_discount():
    """200 subtotal, 10% off, 5% tax charged on the discounted 180"""
    details = calculate_final_total_details(200, 10, 0, 5)
    assert details.discount_amount == pytest.approx(20)
    assert details.tax_amount == pytest.approx(9)
    assert details.total == pytest.approx(189)


def test_details_tax_on_full_subtotal():
    details = calculate_final_total_details(200, 10, 0, 5, after_discount=False)
    assert details.tax_amount == pytest.approx(10)
    assert details.total == pytest.approx(190)


@pytest.mark.parametrize(
    "subtotal,rate,coupon,tax",
    [(200, 10, 15, 5), (99.99, 33.3, 7.77, 19.6), (0, 50, 10, 10), (10, 100, 5, 8)],
)
def test_details_are_consistent(subtotal, rate, coupon, tax):
    d = calculate_final_total_details(subtotal, rate, coupon, tax)
    assert d.subtotal - d.discount_amount - d.coupon_discount_amount + d.tax_amount == pytest.approx(d.total, abs=1e-9)
    assert d.savings == pytest.approx(d.discount_amount + d.coupon_discount_amount)


def test_total_monotonic_in_discount_and_tax():
    totals_by_discount = [calculate_final_total_details(200, r, 15, 5).total for r in range(0, 101, 10)]
    assert totals_by_discount == sorted(totals_by_discount, reverse=True)

    totals_by_tax = [calculate_final_total_details(200, 10, 15, t).total for t in range(0, 30, 3)]
    assert totals_by_tax == sorted(totals_by_tax)


def test_savings():
    assert calculate_savings(200, 10, 15) == pytest.approx(35)
