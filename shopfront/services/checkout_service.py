# shopfront/services/checkout_service.py
"""
Checkout: price the selected cart lines, then hand the snapshot to the backend.

The quote shown before submit is only a preview. The backend re-checks the
coupon and stock when the order is created, and whatever it answers is what
the customer sees.
"""
from __future__ import annotations

import logging

from flask import current_app

from ..errors import ValidationFailed
from ..model import Cart
from ..schemas import AdminOrderForm, CheckoutForm, parse_form
from ..utils.dates import store_today
from ..utils.money import D, round_money
from . import cart_service
from .coupon_service import CouponCheck, lookup_and_evaluate, normalize_code
from .order_status import PaymentStatus
from .resources import CouponResource, OrderResource
from .totals import OrderQuote, quote

log = logging.getLogger(__name__)


def _flat_fee():
    return current_app.config["SHIPPING_FEE"]


def price(subtotal, coupons: CouponResource, code=None, today=None) -> tuple[OrderQuote, CouponCheck | None]:
    """Quote an order for `subtotal`, applying `code` when it checks out."""
    today = today or store_today()
    check = None
    code = normalize_code(code)
    if code:
        check = lookup_and_evaluate(coupons.find_by_code, code, subtotal, today)
    return quote(subtotal, _flat_fee(), check, code or None), check


def preview(cart: Cart, coupons: CouponResource, code=None, today=None):
    return price(cart.subtotal_dec(), coupons, code, today)


def order_payload(form: CheckoutForm, lines, q: OrderQuote) -> dict:
    return {
        "customerName": form.customer_name,
        "phone": form.phone,
        "email": form.email,
        "address": form.full_address(),
        "note": form.note,
        "items": [
            {"variantId": vid, "quantity": qty, "price": int(round_money(unit))}
            for vid, qty, unit in lines
        ],
        "subtotal": int(q.subtotal),
        "shippingFee": int(q.shipping_fee),
        "discountAmount": int(q.discount_amount),
        "couponCode": q.coupon_code,
        "totalAmount": int(q.total),
        "paymentMethod": form.payment_method.value,
        # every new order starts unpaid; online gateways confirm later
        "paymentStatus": PaymentStatus.PENDING.value,
        "orderStatus": "PENDING",
    }


def _reject_coupon(check: CouponCheck | None):
    if check is not None and not check.ok:
        raise ValidationFailed({"coupon_code": check.message})


def place_order(cart: Cart, payload: dict, coupons: CouponResource, orders: OrderResource, today=None):
    form = parse_form(CheckoutForm, payload)
    selected = cart.selected_items()
    if not selected:
        raise ValidationFailed({"items": "select at least one product to check out"})

    q, check = preview(cart, coupons, form.coupon_code, today)
    _reject_coupon(check)

    lines = [(i.variant_id, i.quantity, i.unit_price_dec()) for i in selected]
    created = orders.create(order_payload(form, lines, q))
    cart_service.remove_purchased(cart, [i.variant_id for i in selected])
    log.info("order %s placed from cart %s, total %s", created.order_number, cart.uuid, q.total)
    return created, q


def admin_create(payload: dict, coupons: CouponResource, orders: OrderResource, today=None):
    """Manual order entered from the back-office, priced with the same rules."""
    form = parse_form(AdminOrderForm, payload)
    lines = [(line.variant_id, line.quantity, D(line.price)) for line in form.items]
    subtotal = sum((D(unit) * qty for _, qty, unit in lines), D(0))

    q, check = price(subtotal, coupons, form.coupon_code, today)
    _reject_coupon(check)
    return orders.admin_create(order_payload(form, lines, q)), q
