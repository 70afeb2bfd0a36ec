class CartError(Exception):
    """Base class for every pricing failure raised by this library."""


class InvalidConditionError(CartError, ValueError):
    pass


class InvalidCouponError(CartError, ValueError):
    pass


class CouponError(CartError):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class DuplicateCouponError(CouponError):
    def __init__(self, code: str):
        super().__init__(code, f"Coupon code {code} already exists")


class CouponNotFoundError(CouponError):
    def __init__(self, code: str):
        super().__init__(code, f"Coupon {code} not found")


class CouponExpiredError(CouponError):
    def __init__(self, code: str):
        super().__init__(code, f"Coupon {code} has expired")


class CouponUsageLimitExceededError(CouponError):
    def __init__(self, code: str):
        super().__init__(code, f"Coupon {code} usage limit reached")


class CouponUserMismatchError(CouponError):
    def __init__(self, code: str):
        super().__init__(code, f"Coupon {code} is not available for this user")
