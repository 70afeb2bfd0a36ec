import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from errors import (
    CouponError,
    CouponExpiredError,
    CouponNotFoundError,
    CouponUsageLimitExceededError,
    CouponUserMismatchError,
    DuplicateCouponError,
    InvalidCouponError,
)
from models import Coupon, normalize_code

logger = logging.getLogger(__name__)

UserId = Optional[Union[int, str]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CouponManager:
    """Coupon definitions plus the set of codes applied to the current cart.

    ``coupons`` may be a mapping shared with other managers; usage counters
    live on the shared ``Coupon`` objects, the applied set is per manager.
    """

    def __init__(
        self,
        coupons: Optional[Dict[str, Coupon]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._coupons: Dict[str, Coupon] = coupons if coupons is not None else {}
        self._applied: Dict[str, Coupon] = {}
        self._clock = clock

    def add_coupon(self, coupon: Union[Mapping[str, Any], Coupon]) -> "CouponManager":
        if not isinstance(coupon, Coupon):
            try:
                coupon = Coupon.model_validate(coupon)
            except ValidationError as e:
                raise InvalidCouponError(f"Invalid coupon: {e}") from e
        if coupon.code in self._coupons:
            raise DuplicateCouponError(coupon.code)
        self._coupons[coupon.code] = coupon
        logger.info("Coupon %s registered (%s)", coupon.code, coupon.label)
        return self

    def remove_coupon(self, code: str) -> "CouponManager":
        code = normalize_code(code)
        self._coupons.pop(code, None)
        self._applied.pop(code, None)
        return self

    def get_coupon(self, code: str) -> Optional[Coupon]:
        return self._coupons.get(normalize_code(code))

    def check_coupon(self, code: str, user_id: UserId = None) -> Coupon:
        """Run every check ``apply_coupon`` would, without changing anything."""
        code = normalize_code(code)
        coupon = self._coupons.get(code)
        if coupon is None:
            raise CouponNotFoundError(code)
        if coupon.is_expired(self._clock()):
            raise CouponExpiredError(code)
        if not coupon.has_uses_left():
            raise CouponUsageLimitExceededError(code)
        if not coupon.allows_user(user_id):
            raise CouponUserMismatchError(code)
        return coupon

    def apply_coupon(self, code: str, user_id: UserId = None) -> "CouponManager":
        code = normalize_code(code)
        if code in self._live_applied():
            return self
        try:
            coupon = self.check_coupon(code, user_id)
        except CouponError as e:
            logger.warning("Coupon %s rejected: %s", code, e)
            raise
        self._applied[code] = coupon
        coupon.uses += 1
        logger.info("Coupon %s applied (%s uses)", code, coupon.uses)
        return self

    def get_coupon_discount(self, subtotal: float) -> float:
        """Total amount taken off ``subtotal`` by the applied coupons.

        Percent coupons are proportional to ``subtotal``; pass the cart's
        current subtotal (``Cart.get_coupon_discount`` does).
        """
        return sum(coupon.discount_for(subtotal) for coupon in self.get_applied_coupons())

    def remove_applied_coupons(self) -> "CouponManager":
        """Un-apply everything and give the uses back."""
        for coupon in self.get_applied_coupons():
            coupon.uses = max(0, coupon.uses - 1)
        self._applied.clear()
        return self

    def clear_applied_coupons(self) -> "CouponManager":
        """Un-apply everything; the uses stay consumed."""
        self._applied.clear()
        return self

    def get_applied_coupons(self) -> List[Coupon]:
        return list(self._live_applied().values())

    def _live_applied(self) -> Dict[str, Coupon]:
        # Drop codes whose definition was removed (or replaced) through a shared catalog
        stale = [code for code, coupon in self._applied.items() if self._coupons.get(code) is not coupon]
        for code in stale:
            del self._applied[code]
        return self._applied

    def get_coupons(self) -> Dict[str, Coupon]:
        return dict(self._coupons)
