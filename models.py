from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

CouponType = Literal["percent", "fixed"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CartItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    price: float
    qty: int = Field(..., ge=0)


class Condition(BaseModel):
    slug: str = Field(..., min_length=1)
    condition: Union[StrictBool, Callable[..., Any]]
    discount: float = Field(0.0, ge=0)
    skip: bool = False

    def resolve(self, items: List[Any]) -> bool:
        """Truth value of the rule for ``items``; only a literal ``True`` counts."""
        value = self.condition(items) if callable(self.condition) else self.condition
        return value is True


class Coupon(CamelModel):
    code: str = Field(..., min_length=1)
    discount: float = Field(..., ge=0)
    type: CouponType
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = Field(None, ge=0)
    user_id: Optional[Union[int, str]] = None
    uses: int = Field(0, ge=0)

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        value = normalize_code(value)
        if not value:
            raise ValueError("code must not be blank")
        return value

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def has_uses_left(self) -> bool:
        return self.max_uses is None or self.uses < self.max_uses

    def allows_user(self, user_id: Optional[Union[int, str]]) -> bool:
        if self.user_id is None:
            return True
        return user_id is not None and str(user_id) == str(self.user_id)

    def discount_for(self, subtotal: float) -> float:
        """Amount this coupon takes off ``subtotal``."""
        if self.type == "percent":
            return subtotal * self.discount / 100
        return self.discount

    @property
    def label(self) -> str:
        if self.type == "percent":
            return f"{self.discount:g}% off"
        return f"{self.discount:g} off"


class DiscountApplied(CamelModel):
    slug: str
    discount_percent: float
    condition_value: bool


class TotalDetails(CamelModel):
    subtotal: float
    discount_rate: float
    discount_amount: float
    coupon_discount_amount: float
    tax_rate: float
    tax_amount: float
    total: float
    savings: float


# HTTP request / response bodies

class CouponCreate(CamelModel):
    code: str
    type: CouponType = "percent"
    amount: float
    uses: Optional[int] = None
    expires_at: Optional[datetime] = None
    user_id: Optional[Union[int, str]] = None

    def coupon_data(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "discount": self.amount,
            "type": self.type,
            "expires_at": self.expires_at,
            "max_uses": self.uses,
            "user_id": self.user_id,
        }


class CouponResponse(BaseModel):
    message: str


class CouponValidateRequest(CamelModel):
    session_id: str
    code: str
    cart: List[CartItem]
    user_id: Optional[Union[int, str]] = None


class CouponValidateResponse(CamelModel):
    valid: bool
    discount: Optional[float] = 0
    new_total: Optional[float] = 0
    message: str


class CartUpdateRequest(CamelModel):
    items: List[CartItem]
    discount: Optional[float] = Field(None, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0)


class CartTotalsResponse(CamelModel):
    session_id: str
    item_count: int
    applied_coupons: List[str]
    totals: TotalDetails
