import logging
from typing import Any, List, Mapping, Optional, Union

from calculations import (
    calculate_discount_rate,
    calculate_final_total_details,
    calculate_subtotal,
    calculate_total_after_discount,
    calculate_total_with_taxes,
)
from conditions import ConditionManager
from coupons import CouponManager, UserId
from fields import FieldMap
from models import Coupon, TotalDetails
from settings import Settings

logger = logging.getLogger(__name__)

ROUND_DIGITS = 3


class Cart:
    """Prices a list of items.

    Composes a ``ConditionManager`` (rule discounts), a ``CouponManager``
    (coupon discounts) and a ``FieldMap`` (which item attributes hold the
    price and quantity). Global discount and tax rate come from
    ``settings`` and can be overridden on the cart or per call.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        condition_manager: Optional[ConditionManager] = None,
        coupon_manager: Optional[CouponManager] = None,
        fields: Optional[Mapping[str, Any]] = None,
    ):
        settings = settings or Settings()
        self._items: List[Any] = []
        self._global_discount = settings.global_discount
        self._global_tax_rate = settings.global_tax_rate
        self._condition_manager = condition_manager or ConditionManager(fire_events=settings.fire_events)
        self._coupon_manager = coupon_manager or CouponManager()
        self.fields = FieldMap(fields)

    # configuration

    def set_items(self, items: List[Any]) -> "Cart":
        self._items = list(items)
        return self

    def get_items(self) -> List[Any]:
        return list(self._items)

    def discount(self, global_discount: float) -> "Cart":
        return self.set_global_discount(global_discount)

    def set_global_discount(self, global_discount: float) -> "Cart":
        self._global_discount = float(global_discount)
        return self

    def set_global_tax_rate(self, global_tax_rate: float) -> "Cart":
        self._global_tax_rate = float(global_tax_rate)
        return self

    def get_global_discount(self) -> float:
        return self._global_discount

    def get_global_tax_rate(self) -> float:
        return self._global_tax_rate

    def set_fields(self, fields: Mapping[str, Any]) -> "Cart":
        self.fields.set_fields(fields)
        return self

    def conditions(self) -> ConditionManager:
        return self._condition_manager

    def coupons(self) -> CouponManager:
        return self._coupon_manager

    def set_condition_manager(self, condition_manager: ConditionManager) -> "Cart":
        self._condition_manager = condition_manager
        return self

    def set_coupon_manager(self, coupon_manager: CouponManager) -> "Cart":
        self._coupon_manager = coupon_manager
        return self

    # calculations

    def condition_discount(self) -> float:
        return self._condition_manager.evaluate(self._items)

    def subtotal(self) -> float:
        return calculate_subtotal(self._items, self.fields.price_field, self.fields.quantity_field)

    def discount_rate(self, global_discount: Optional[float] = None) -> float:
        if global_discount is None:
            global_discount = self._global_discount
        return calculate_discount_rate(global_discount, self.condition_discount())

    def tax(self, global_tax_rate: Optional[float] = None) -> float:
        """Subtotal plus tax, before any discount."""
        return calculate_total_with_taxes(self.subtotal(), self._tax_rate(global_tax_rate))

    def tax_amount(self, global_tax_rate: Optional[float] = None, after_discount: bool = True) -> float:
        return self.total_detailed(tax_rate=global_tax_rate, after_discount=after_discount).tax_amount

    def total_with_discount(self, global_discount: Optional[float] = None) -> float:
        return calculate_total_after_discount(self.subtotal(), self.discount_rate(global_discount))

    def get_coupon_discount(self) -> float:
        return self._coupon_manager.get_coupon_discount(self.subtotal())

    def savings(self, global_discount: Optional[float] = None) -> float:
        return round(self.total_detailed(global_discount=global_discount).savings, ROUND_DIGITS)

    def total(self) -> float:
        return round(self.total_detailed().total, ROUND_DIGITS)

    def total_detailed(
        self,
        global_discount: Optional[float] = None,
        tax_rate: Optional[float] = None,
        after_discount: bool = True,
    ) -> TotalDetails:
        subtotal = self.subtotal()
        details = calculate_final_total_details(
            subtotal,
            self.discount_rate(global_discount),
            self._coupon_manager.get_coupon_discount(subtotal),
            self._tax_rate(tax_rate),
            after_discount=after_discount,
        )
        logger.debug("Cart totals: %s", details)
        return details

    def _tax_rate(self, override: Optional[float]) -> float:
        return self._global_tax_rate if override is None else override

    # coupons

    def add_coupon(self, coupon: Union[Mapping[str, Any], Coupon]) -> "Cart":
        self._coupon_manager.add_coupon(coupon)
        return self

    def remove_coupon(self, code: str) -> "Cart":
        self._coupon_manager.remove_coupon(code)
        return self

    def apply_coupon(self, code: str, user_id: UserId = None) -> "Cart":
        self._coupon_manager.apply_coupon(code, user_id)
        return self

    def get_coupon(self, code: str) -> Optional[Coupon]:
        return self._coupon_manager.get_coupon(code)

    def remove_applied_coupons(self) -> "Cart":
        self._coupon_manager.remove_applied_coupons()
        return self

    def clear_applied_coupons(self) -> "Cart":
        self._coupon_manager.clear_applied_coupons()
        return self

    def get_applied_coupons(self) -> List[Coupon]:
        return self._coupon_manager.get_applied_coupons()
