import logging
from typing import Dict, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cart import Cart
from coupons import CouponManager
from errors import (
    CouponError,
    CouponNotFoundError,
    DuplicateCouponError,
    InvalidCouponError,
)
from models import (
    CartTotalsResponse,
    CartUpdateRequest,
    Coupon,
    CouponCreate,
    CouponResponse,
    CouponValidateRequest,
    CouponValidateResponse,
)
from settings import Settings

logger = logging.getLogger(__name__)


def _status_for(error: Exception) -> int:
    if isinstance(error, CouponNotFoundError):
        return 404
    if isinstance(error, DuplicateCouponError):
        return 409
    if isinstance(error, InvalidCouponError):
        return 422
    return 400


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Cart pricing")

    # 🔐 Allow frontend CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Coupon definitions are shared; each session cart keeps its own applied set
    catalog: Dict[str, Coupon] = {}
    registry = CouponManager(catalog)
    sessions: Dict[str, Cart] = {}

    app.state.settings = settings
    app.state.coupons = registry
    app.state.sessions = sessions

    def get_cart(session_id: str) -> Cart:
        if session_id not in sessions:
            cart = Cart(settings, coupon_manager=CouponManager(catalog))
            cart.set_fields({"quantity": "qty"})
            sessions[session_id] = cart
            logger.info("Opened cart session %s", session_id)
        return sessions[session_id]

    def totals_response(session_id: str, cart: Cart) -> dict:
        details = cart.total_detailed()
        return CartTotalsResponse(
            session_id=session_id,
            item_count=len(cart.get_items()),
            applied_coupons=[c.code for c in cart.get_applied_coupons()],
            totals=details,
        ).model_dump(by_alias=True)

    # 🔐 Admin API key check
    def check_admin(api_key: Optional[str]):
        if not settings.admin_api_key or api_key != settings.admin_api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.exception_handler(CouponError)
    @app.exception_handler(InvalidCouponError)
    async def coupon_error_handler(request: Request, exc: Exception):
        return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc)})

    # 🎯 1. CREATE COUPON
    @app.post("/api/coupons", response_model=CouponResponse)
    def create_coupon(coupon: CouponCreate, api_key: Optional[str] = Header(None, alias="x-api-key")):
        check_admin(api_key)
        registry.add_coupon(coupon.coupon_data())
        code = coupon.code.strip().upper()
        return {"message": f"✅ Coupon {code} created successfully"}

    # 🎯 2. READ COUPON
    @app.get("/api/coupons/{code}")
    def read_coupon(code: str):
        coupon = registry.get_coupon(code)
        if coupon is None:
            raise CouponNotFoundError(code.strip().upper())
        return coupon.model_dump(by_alias=True, mode="json")

    # 🎯 3. DELETE COUPON
    @app.delete("/api/coupons/{code}", response_model=CouponResponse)
    def delete_coupon(code: str, api_key: Optional[str] = Header(None, alias="x-api-key")):
        check_admin(api_key)
        code = code.strip().upper()
        if registry.get_coupon(code) is None:
            raise CouponNotFoundError(code)
        registry.remove_coupon(code)
        for cart in sessions.values():
            cart.remove_coupon(code)
        return {"message": f"🗑️ Coupon {code} removed"}

    # 🎯 4. VALIDATE COUPON
    @app.post("/api/coupons/validate", response_model=CouponValidateResponse)
    def validate_coupon(body: CouponValidateRequest):
        code = body.code.strip().upper()
        cart = sessions.get(body.session_id)

        if cart is not None and code in [c.code for c in cart.get_applied_coupons()]:
            return {"valid": False, "message": "❌ Coupon already used in this session"}

        try:
            coupon = registry.check_coupon(code, body.user_id)
        except CouponError as e:
            return {"valid": False, "message": f"❌ {e.message}"}

        # Price the posted cart on its own, with the session's rates when there is one
        preview = Cart(settings, coupon_manager=CouponManager())
        preview.set_fields({"quantity": "qty"})
        preview.set_items(body.cart)
        if cart is not None:
            preview.discount(cart.get_global_discount()).set_global_tax_rate(cart.get_global_tax_rate())

        preview.add_coupon(coupon.model_copy()).apply_coupon(code, body.user_id)
        after = preview.total_detailed()

        return {
            "valid": True,
            "discount": round(after.coupon_discount_amount, 3),
            "newTotal": round(after.total, 3),
            "message": f"✅ {code} applied – {coupon.label}",
        }

    # 🎯 5. SET CART ITEMS
    @app.put("/api/carts/{session_id}")
    def update_cart(session_id: str, body: CartUpdateRequest):
        cart = get_cart(session_id)
        cart.set_items(body.items)
        if body.discount is not None:
            cart.discount(body.discount)
        if body.tax_rate is not None:
            cart.set_global_tax_rate(body.tax_rate)
        return totals_response(session_id, cart)

    # 🎯 6. CART TOTALS
    @app.get("/api/carts/{session_id}")
    def read_cart(session_id: str):
        if session_id not in sessions:
            raise HTTPException(status_code=404, detail="Cart not found")
        return totals_response(session_id, sessions[session_id])

    # 🎯 7. REDEEM COUPON
    @app.post("/api/carts/{session_id}/coupons/{code}")
    def redeem_coupon(session_id: str, code: str, userId: Optional[str] = None):
        cart = get_cart(session_id)
        cart.apply_coupon(code, userId)
        return totals_response(session_id, cart)

    # 🎯 8. DROP APPLIED COUPONS
    @app.delete("/api/carts/{session_id}/coupons")
    def drop_coupons(session_id: str, restore: bool = True):
        cart = get_cart(session_id)
        if restore:
            cart.remove_applied_coupons()
        else:
            cart.clear_applied_coupons()
        return totals_response(session_id, cart)

    return app


app = create_app()
