# shopfront/checkout/routes.py
from flask import request

from . import bp
from ..services import cart_service, checkout_service
from ..services.resources import CouponResource, OrderResource
from ..utils.api import ok
from ..utils.decorators import current_session, login_required


@bp.post("/preview")
@login_required
def preview():
    """Quote the selected cart lines; a bad coupon is reported, not raised."""
    data = request.get_json(silent=True) or {}
    ctx = current_session()
    cart = cart_service.get_or_create_cart(ctx)
    q, check = checkout_service.preview(cart, CouponResource(ctx.client()), data.get("coupon_code"))
    return ok("Order preview", {
        "quote": q.as_api(),
        "coupon": check.as_api() if check is not None else None,
        "cart": cart.as_api(),
    })


@bp.post("")
@login_required
def place_order():
    ctx = current_session()
    client = ctx.client()
    cart = cart_service.get_or_create_cart(ctx)
    created, q = checkout_service.place_order(
        cart, request.get_json(silent=True) or {}, CouponResource(client), OrderResource(client),
    )
    return ok("Your order has been placed", {"order": created.as_api(), "quote": q.as_api()}, 201)
