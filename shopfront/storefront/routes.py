# shopfront/storefront/routes.py
from flask import current_app, request

from . import bp
from ..schemas import OrderDetail, Product, Variant, parse
from ..services.backend import BackendClient
from ..services.coupon_service import best_promotion
from ..services.resources import OrderResource, PromotionResource
from ..utils.api import ok, page_args
from ..utils.dates import store_today
from ..utils.decorators import current_session, login_required


def _pages():
    return page_args(request.args, current_app.config["DEFAULT_PAGE_SIZE"])


# ---- public catalog ----------------------------------------------------------

@bp.get("/products")
def list_products():
    """
    Query params:
      - page, size (1-based)
      - search=<text>
      - categoryId=<id>, brandId=<id>
      - sort=createdAt,desc
    """
    page, size = _pages()
    result = BackendClient.from_app().fetch_page(
        "/v1/products", Product, page=page, size=size, auth=False,
        search=request.args.get("search"),
        sort=request.args.get("sort") or "createdAt,desc",
        categoryId=request.args.get("categoryId"),
        brandId=request.args.get("brandId"),
    )
    return ok("Products", result.as_api())


@bp.get("/products/<int:product_id>")
def get_product(product_id):
    """Product with its variants and the best promotion currently running on it."""
    client = BackendClient.from_app()
    product = client.fetch(Product, "GET", f"/v1/products/{product_id}", auth=False)
    variants = [parse(Variant, v) for v in client.get(f"/v1/products/{product_id}/variants", auth=False) or []]

    promo, discount = best_promotion(PromotionResource(client).active(), product.id, product.price, store_today())
    return ok("Product", {
        "product": product.as_api(),
        "variants": [v.as_api() for v in variants],
        "promotion": {
            "id": promo.id,
            "name": promo.name,
            "discount": int(discount),
            "price_after": int(product.price - discount),
        } if promo else None,
    })


@bp.get("/promotions/active")
def active_promotions():
    promos = PromotionResource(BackendClient.from_app()).active()
    return ok("Active promotions", [p.as_api() for p in promos])


# ---- my orders ---------------------------------------------------------------

@bp.get("/orders")
@login_required
def my_orders():
    page, size = _pages()
    result = OrderResource(current_session().client()).my_orders(page, size)
    return ok("Your orders", result.as_api())


@bp.get("/orders/<int:order_id>")
@login_required
def my_order(order_id):
    order: OrderDetail = OrderResource(current_session().client()).detail(order_id)
    return ok("Order", order.as_api())
