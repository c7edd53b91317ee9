# shopfront/services/cart_service.py
from __future__ import annotations

from ..errors import NotFound, ValidationFailed
from ..extensions import db
from ..model import Cart, CartItem
from ..schemas import Variant
from ..utils.money import D
from .session_service import SessionContext


def get_or_create_cart(ctx: SessionContext) -> Cart:
    ctx.require()
    cart = Cart.query.filter_by(session_id=ctx.id, status="active").first()
    if not cart:
        cart = Cart(session_id=ctx.id, status="active")   # uuid autogenerates in model
        db.session.add(cart)
        db.session.commit()
    return cart


def _item(cart: Cart, item_id: int) -> CartItem:
    item = next((i for i in cart.items if i.id == item_id), None)
    if item is None:
        raise NotFound("cart item not found")
    return item


def _qty(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed({"quantity": "quantity must be a whole number"}) from None


def add_item(cart: Cart, variant: Variant, quantity=1) -> CartItem:
    """Add a variant, merging into an existing line for the same variant."""
    quantity = _qty(quantity)
    if quantity < 1:
        raise ValidationFailed({"quantity": "quantity must be at least 1"})
    if not variant.active:
        raise ValidationFailed({"variant_id": "this product is no longer available"})

    item = cart.find_item(variant.id)
    new_qty = quantity + (item.quantity if item else 0)
    if variant.stock_quantity is not None and new_qty > variant.stock_quantity:
        raise ValidationFailed({"quantity": f"only {variant.stock_quantity} left in stock"})

    if item:
        item.quantity = new_qty
        item.selected = True
    else:
        item = CartItem(
            variant_id=variant.id,
            product_id=variant.product_id,
            product_name=variant.product_name or variant.sku,
            attributes_description=variant.attributes_description(),
            image_url=variant.image_url,
            unit_price=variant.effective_price(),
            quantity=new_qty,
            selected=True,
        )
        cart.items.append(item)
    db.session.commit()
    return item


def set_quantity(cart: Cart, item_id: int, quantity) -> CartItem | None:
    """Set a line's quantity; zero or less removes the line."""
    quantity = _qty(quantity)
    item = _item(cart, item_id)
    if quantity <= 0:
        cart.items.remove(item)
        db.session.commit()
        return None
    item.quantity = quantity
    db.session.commit()
    return item


def remove_item(cart: Cart, item_id: int):
    cart.items.remove(_item(cart, item_id))
    db.session.commit()


def toggle_selected(cart: Cart, item_id: int) -> CartItem:
    item = _item(cart, item_id)
    item.selected = not item.selected
    db.session.commit()
    return item


def select_all(cart: Cart, selected: bool = True):
    for item in cart.items:
        item.selected = selected
    db.session.commit()


def clear(cart: Cart):
    cart.items.clear()
    db.session.commit()


def remove_purchased(cart: Cart, variant_ids):
    """Drop lines that went into an order; unselected lines stay for later."""
    variant_ids = set(variant_ids)
    for item in [i for i in cart.items if i.variant_id in variant_ids]:
        cart.items.remove(item)
    if not cart.items:
        cart.status = "checked_out"
    db.session.commit()


def refresh_prices(cart: Cart, variants: dict[int, Variant]) -> list[CartItem]:
    """
    Re-price lines against live variants.

    Lines whose price moved keep the old price in `previous_price` so the
    customer can be told; variants that disappeared are deselected.
    """
    changed = []
    for item in cart.items:
        live = variants.get(item.variant_id)
        if live is None or not live.active:
            item.selected = False
            continue
        price = D(live.effective_price())
        if price != item.unit_price_dec():
            item.previous_price = item.unit_price_dec()
            item.unit_price = price
            changed.append(item)
        else:
            item.previous_price = None
    db.session.commit()
    return changed
