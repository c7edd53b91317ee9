# shopfront/services/totals.py
from __future__ import annotations

from typing import NamedTuple

from ..utils.money import D, Money, round_money


def shipping_fee(subtotal, flat_fee, free_shipping: bool = False) -> Money:
    """Flat fee for any non-empty order; free-shipping zeroes it."""
    if free_shipping or D(subtotal) <= 0:
        return D(0)
    return round_money(flat_fee)


def compute_total(subtotal, shipping_fee, discount_amount) -> Money:
    return max(D(0), round_money(D(subtotal) + D(shipping_fee) - D(discount_amount)))


class OrderQuote(NamedTuple):
    subtotal: Money
    shipping_fee: Money
    discount_amount: Money
    total: Money
    coupon_code: str | None = None

    def as_api(self):
        return {
            "subtotal": int(self.subtotal),
            "shipping_fee": int(self.shipping_fee),
            "discount_amount": int(self.discount_amount),
            "total": int(self.total),
            "coupon_code": self.coupon_code,
        }


def quote(subtotal, flat_fee, coupon_check=None, coupon_code=None, free_shipping=False) -> OrderQuote:
    """Price an order; a rejected or missing coupon contributes no discount."""
    subtotal = round_money(subtotal)
    fee = shipping_fee(subtotal, flat_fee, free_shipping)
    discount = D(0)
    if coupon_check is not None and coupon_check.ok:
        discount = min(D(coupon_check.discount), subtotal)
    else:
        coupon_code = None
    return OrderQuote(subtotal, fee, discount, compute_total(subtotal, fee, discount), coupon_code)
