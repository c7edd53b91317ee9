# shopfront/cart/routes.py
from __future__ import annotations

from flask import request

from . import bp
from ..errors import NotFound, ValidationFailed
from ..schemas import Variant
from ..services import cart_service
from ..utils.api import ok
from ..utils.decorators import current_session, login_required


def _cart():
    return cart_service.get_or_create_cart(current_session())


def _variant(client, variant_id) -> Variant:
    return client.fetch(Variant, "GET", f"/v1/variants/{variant_id}")


# ---- read ------------------------------------------------------------------

@bp.get("")
@login_required
def get_cart():
    return ok("Cart", _cart().as_api())


# ---- lines -----------------------------------------------------------------

@bp.post("/items")
@login_required
def add_item():
    data = request.get_json(silent=True) or {}
    variant_id = data.get("variant_id")
    if not isinstance(variant_id, int):
        raise ValidationFailed({"variant_id": "variant_id is required"})

    cart = _cart()
    variant = _variant(current_session().client(), variant_id)
    item = cart_service.add_item(cart, variant, data.get("quantity", 1))
    return ok("Added to cart", {"item": item.as_api(), "cart": cart.as_api()}, 201)


@bp.patch("/items/<int:item_id>")
@login_required
def update_item(item_id):
    data = request.get_json(silent=True) or {}
    if "quantity" not in data:
        raise ValidationFailed({"quantity": "quantity is required"})
    cart = _cart()
    item = cart_service.set_quantity(cart, item_id, data["quantity"])
    msg = "Quantity updated" if item else "Item removed"
    return ok(msg, cart.as_api())


@bp.delete("/items/<int:item_id>")
@login_required
def remove_item(item_id):
    cart = _cart()
    cart_service.remove_item(cart, item_id)
    return ok("Item removed", cart.as_api())


@bp.post("/items/<int:item_id>/toggle")
@login_required
def toggle_item(item_id):
    cart = _cart()
    cart_service.toggle_selected(cart, item_id)
    return ok("Selection updated", cart.as_api())


@bp.post("/select")
@login_required
def select_all():
    data = request.get_json(silent=True) or {}
    cart = _cart()
    cart_service.select_all(cart, bool(data.get("selected", True)))
    return ok("Selection updated", cart.as_api())


@bp.delete("")
@login_required
def clear_cart():
    cart = _cart()
    cart_service.clear(cart)
    return ok("Cart cleared", cart.as_api())


@bp.post("/refresh")
@login_required
def refresh():
    """Re-price every line against the live catalog."""
    cart = _cart()
    client = current_session().client()
    live = {}
    for item in cart.items:
        try:
            live[item.variant_id] = _variant(client, item.variant_id)
        except NotFound:
            pass   # deselected by refresh_prices
    changed = cart_service.refresh_prices(cart, live)
    msg = f"{len(changed)} price(s) changed" if changed else "Prices are up to date"
    return ok(msg, {"changed": [i.id for i in changed], "cart": cart.as_api()})
