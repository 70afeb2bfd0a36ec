"""Stateless pricing arithmetic.

Every function takes plain numbers (or an item list) and returns a number,
so the cart can recompute totals from scratch on each call. Percentages are
expressed 0-100. Tax is charged on the discounted amount unless a caller
asks otherwise.
"""
from typing import Any, Iterable, Mapping

from models import TotalDetails

MAX_DISCOUNT_RATE = 100.0


def item_value(item: Any, field: str) -> float:
    if isinstance(item, Mapping):
        return float(item[field])
    return float(getattr(item, field))


def calculate_subtotal(items: Iterable[Any], price_field: str = "price", quantity_field: str = "quantity") -> float:
    return sum(
        (item_value(item, price_field) * item_value(item, quantity_field) for item in items),
        0.0,
    )


def calculate_discount_rate(global_discount: float, condition_discount: float = 0.0) -> float:
    """Combined percentage, capped so a cart can't go below zero."""
    return min(MAX_DISCOUNT_RATE, max(0.0, global_discount + condition_discount))


def calculate_discount_amount(subtotal: float, discount_rate: float) -> float:
    return subtotal * discount_rate / 100


def calculate_total_after_discount(subtotal: float, discount_rate: float) -> float:
    return subtotal - calculate_discount_amount(subtotal, discount_rate)


def calculate_coupon_amount(discounted_subtotal: float, coupon_discount: float) -> float:
    return min(max(0.0, coupon_discount), max(0.0, discounted_subtotal))


def calculate_tax_amount(taxable: float, tax_rate: float) -> float:
    return taxable * tax_rate / 100


def calculate_total_with_taxes(subtotal: float, tax_rate: float) -> float:
    return subtotal + calculate_tax_amount(subtotal, tax_rate)


def calculate_final_total_details(
    subtotal: float,
    discount_rate: float,
    coupon_discount: float,
    tax_rate: float,
    after_discount: bool = True,
) -> TotalDetails:
    discount_amount = calculate_discount_amount(subtotal, discount_rate)
    discounted = subtotal - discount_amount
    coupon_amount = calculate_coupon_amount(discounted, coupon_discount)
    net = discounted - coupon_amount
    tax_amount = calculate_tax_amount(net if after_discount else subtotal, tax_rate)

    return TotalDetails(
        subtotal=subtotal,
        discount_rate=discount_rate,
        discount_amount=discount_amount,
        coupon_discount_amount=coupon_amount,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=net + tax_amount,
        savings=discount_amount + coupon_amount,
    )


def calculate_savings(subtotal: float, discount_rate: float, coupon_discount: float) -> float:
    details = calculate_final_total_details(subtotal, discount_rate, coupon_discount, 0.0)
    return details.savings
