# shopfront/admin/routes.py
"""
Back-office endpoints.

Every catalog screen goes through the same generic gateway: list, get,
create, update, deactivate, reactivate, permanent delete. Orders get their
own routes because of the status machine.
"""
from __future__ import annotations

from flask import current_app, request

from . import bp
from ..errors import NotFound
from ..schemas import StatusChange, parse_form
from ..services import checkout_service, order_status
from ..services.resources import CouponResource, OrderResource, catalog
from ..utils.api import ok, page_args
from ..utils.decorators import current_session, require_role_at_least, role_at_least

RESOURCES = ("products", "variants", "brands", "categories", "coupons", "promotions", "customers", "employees")
_ANY = f"<any({', '.join(RESOURCES)}):name>"

# minimum role to create / edit / (de)activate; anything else defaults to MANAGER
WRITE_ROLE = {"employees": "ADMIN"}


def _resource(name, min_role="STAFF"):
    ctx = current_session()
    require_role_at_least(ctx, min_role)
    resources = catalog(ctx.client())
    if name not in resources:
        raise NotFound()
    return resources[name]


def _writable(name):
    return _resource(name, WRITE_ROLE.get(name, "MANAGER"))


def _body():
    return request.get_json(silent=True) or {}


def _list_args():
    page, size = page_args(request.args, current_app.config["DEFAULT_PAGE_SIZE"])
    return {
        "page": page,
        "size": size,
        "search": request.args.get("search"),
        "status": request.args.get("status"),
        "sort": request.args.get("sort"),
    }


# ---- generic catalog resources ---------------------------------------------

@bp.get(f"/{_ANY}")
def list_resource(name):
    result = _resource(name).list(**_list_args())
    return ok(f"{name.capitalize()} list", result.as_api())


@bp.get(f"/{_ANY}/<int:rid>")
def get_resource(name, rid):
    return ok(name.capitalize(), _resource(name).get(rid).as_api())


@bp.post(f"/{_ANY}")
def create_resource(name):
    created = _writable(name).create(_body())
    return ok("Created successfully", created.as_api() if created else None, 201)


@bp.put(f"/{_ANY}/<int:rid>")
def update_resource(name, rid):
    updated = _writable(name).update(rid, _body())
    return ok("Updated successfully", updated.as_api() if updated else None)


@bp.delete(f"/{_ANY}/<int:rid>")
def deactivate_resource(name, rid):
    _writable(name).deactivate(rid)
    return ok("Deactivated successfully")


@bp.post(f"/{_ANY}/<int:rid>/reactivate")
def reactivate_resource(name, rid):
    entity = _writable(name).reactivate(rid)
    return ok("Reactivated successfully", entity.as_api() if entity else None)


@bp.delete(f"/{_ANY}/<int:rid>/permanent")
def delete_resource_permanent(name, rid):
    _resource(name, "ADMIN").delete_permanent(rid)
    return ok("Deleted permanently")


# ---- orders ----------------------------------------------------------------

def _orders() -> OrderResource:
    return OrderResource(current_session().client())


@bp.get("/orders/transitions")
@role_at_least("STAFF")
def order_transitions():
    table = {
        status.value: [t.as_api() for t in moves]
        for status, moves in order_status.TRANSITIONS.items()
    }
    return ok("Order transitions", table)


@bp.get("/orders")
@role_at_least("STAFF")
def list_orders():
    """
    Query params:
      - page, size
      - status=PENDING|CONFIRMED|SHIPPING|DELIVERED|COMPLETED|CANCELLED|DISPUTE
      - search=<order number / customer>
    """
    args = _list_args()
    if args["status"]:
        args["status"] = args["status"].upper()
    return ok("Orders", _orders().list(**args).as_api())


@bp.get("/orders/<int:order_id>")
@role_at_least("STAFF")
def get_order(order_id):
    order = _orders().detail(order_id)
    return ok("Order", {
        "order": order.as_api(),
        "terminal": order_status.is_terminal(order.order_status),
        "actions": [t.as_api() for t in order_status.available_actions(order.order_status)],
    })


@bp.post("/orders/<int:order_id>/status")
@role_at_least("STAFF")
def change_order_status(order_id):
    change = parse_form(StatusChange, _body())
    orders = _orders()
    order = orders.detail(order_id)
    updated, move = orders.change_status(order, change.status, change.tracking_code)
    expected = order_status.payment_status_after(
        order.payment_method, order.payment_status, order.order_status, move.target)
    return ok(f"Order {order.order_number}: {move.label}", {
        "order": updated.as_api(),
        "expected_payment_status": expected.value,
        "side_effect": move.side_effect,
        "restocks": order_status.restocks(move.target),
        "actions": [t.as_api() for t in order_status.available_actions(updated.order_status)],
    })


@bp.post("/orders")
@role_at_least("STAFF")
def create_order():
    client = current_session().client()
    created, q = checkout_service.admin_create(_body(), CouponResource(client), OrderResource(client))
    return ok("Order created", {"order": created.as_api(), "quote": q.as_api()}, 201)
