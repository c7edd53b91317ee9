# shopfront/services/coupon_service.py
"""
Coupon and promotion evaluation.

Everything here is pure: the caller supplies the coupon (or None when the
code lookup failed), the amount and the store's "today". Results are
returned as CouponCheck values; the backend re-validates when the order is
created and its answer wins.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Callable, Iterable, NamedTuple

from ..utils.money import D, Money, floor_money


class Rejection(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    OUT_OF_WINDOW = "OUT_OF_WINDOW"
    BELOW_MIN_ORDER = "BELOW_MIN_ORDER"
    USAGE_EXHAUSTED = "USAGE_EXHAUSTED"
    NOT_APPLICABLE = "NOT_APPLICABLE"


MESSAGES = {
    Rejection.NOT_FOUND: "Invalid discount code",
    Rejection.INACTIVE: "This discount code is no longer active",
    Rejection.OUT_OF_WINDOW: "This discount code is not valid today",
    Rejection.BELOW_MIN_ORDER: "Minimum order of {min_order} required",
    Rejection.USAGE_EXHAUSTED: "This discount code has reached its usage limit",
    Rejection.NOT_APPLICABLE: "This promotion does not apply to the product",
}


class CouponCheck(NamedTuple):
    discount: Money | None
    reason: Rejection | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    def as_api(self):
        return {
            "valid": self.ok,
            "discount": int(self.discount) if self.discount is not None else None,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


def _reject(reason: Rejection, **fmt) -> CouponCheck:
    return CouponCheck(None, reason, MESSAGES[reason].format(**fmt))


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def percent_discount(amount, percent, cap=None) -> Money:
    """amount * percent / 100, capped, floored to whole units, never above amount."""
    amount = D(amount)
    if amount <= 0:
        return D(0)
    raw = amount * D(percent) / D(100)
    if cap is not None:
        raw = min(raw, D(cap))
    return max(D(0), min(floor_money(raw), floor_money(amount)))


def _in_window(start: date | None, end: date | None, today: date) -> bool:
    if start and today < start:
        return False
    if end and today > end:
        return False
    return True


def evaluate_coupon(coupon, subtotal, today: date) -> CouponCheck:
    if coupon is None:
        return _reject(Rejection.NOT_FOUND)
    if not coupon.active:
        return _reject(Rejection.INACTIVE)
    if not _in_window(coupon.start_date, coupon.end_date, today):
        return _reject(Rejection.OUT_OF_WINDOW)

    subtotal = D(subtotal)
    if coupon.min_order_amount is not None and subtotal < D(coupon.min_order_amount):
        return _reject(Rejection.BELOW_MIN_ORDER, min_order=int(D(coupon.min_order_amount)))

    # null and 0 both mean unlimited
    limit = coupon.usage_limit or 0
    if limit > 0 and (coupon.used_count or 0) >= limit:
        return _reject(Rejection.USAGE_EXHAUSTED)

    return CouponCheck(percent_discount(subtotal, coupon.discount_value, coupon.max_discount_amount))


def lookup_and_evaluate(lookup: Callable[[str], object], code, subtotal, today: date) -> CouponCheck:
    """Normalise `code`, fetch the coupon with `lookup` and evaluate it."""
    code = normalize_code(code)
    if not code:
        return _reject(Rejection.NOT_FOUND)
    return evaluate_coupon(lookup(code), subtotal, today)


def evaluate_promotion(promotion, product_id: int, amount, today: date) -> CouponCheck:
    """Discount of `promotion` on `amount` worth of `product_id`."""
    if promotion is None:
        return _reject(Rejection.NOT_FOUND)
    if not promotion.active:
        return _reject(Rejection.INACTIVE)
    if not _in_window(promotion.start_date, promotion.end_date, today):
        return _reject(Rejection.OUT_OF_WINDOW)
    if product_id not in set(promotion.product_ids or ()):
        return _reject(Rejection.NOT_APPLICABLE)
    amount = D(amount)
    if promotion.min_order_amount is not None and amount < D(promotion.min_order_amount):
        return _reject(Rejection.BELOW_MIN_ORDER, min_order=int(D(promotion.min_order_amount)))
    return CouponCheck(percent_discount(amount, promotion.discount_value, promotion.max_discount_amount))


def best_promotion(promotions: Iterable, product_id: int, amount, today: date):
    """Return (promotion, discount) with the largest discount, or (None, 0)."""
    best, best_discount = None, D(0)
    for promo in promotions:
        check = evaluate_promotion(promo, product_id, amount, today)
        if check.ok and check.discount > best_discount:
            best, best_discount = promo, check.discount
    return best, best_discount
