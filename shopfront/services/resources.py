# shopfront/services/resources.py
"""Thin gateways over the backend's CRUD endpoints, one per admin screen."""
from __future__ import annotations

import logging
from datetime import date

from ..errors import ConflictError, NotFound, ValidationFailed
from ..utils.dates import store_today
from ..schemas import (
    AdminOrder,
    Brand,
    BrandForm,
    Category,
    CategoryForm,
    Coupon,
    CouponForm,
    CustomerForm,
    EmployeeForm,
    OrderDetail,
    Product,
    ProductForm,
    Promotion,
    PromotionForm,
    UserAccount,
    UserOrder,
    Variant,
    VariantEditForm,
    VariantForm,
    parse,
    parse_form,
)
from . import order_status
from .backend import BackendClient

log = logging.getLogger(__name__)


class Resource:
    def __init__(self, client: BackendClient, path: str, schema, form=None, *, edit_form=None,
                 conflict_field="name", default_sort=None, reference_field=None, list_path=None):
        self.client = client
        self.path = path
        self.list_path = list_path or path
        self.schema = schema
        self.form = form
        self.edit_form = edit_form or form
        self.conflict_field = conflict_field
        self.default_sort = default_sort
        self.reference_field = reference_field

    def _url(self, rid=None, suffix=""):
        return f"{self.path}/{rid}{suffix}" if rid is not None else self.path

    def _write(self, method, path, body):
        try:
            return self.client.fetch(self.schema, method, path, json=body)
        except ConflictError as e:
            e.field = e.field or self.conflict_field
            raise

    def validate(self, payload: dict):
        return parse_form(self.form, payload) if self.form else payload

    def validate_edit(self, payload: dict):
        if self.edit_form is self.form:
            return self.validate(payload)
        return parse_form(self.edit_form, payload)

    def list(self, page=1, size=10, search=None, status=None, sort=None, **filters):
        return self.client.fetch_page(
            self.list_path, self.schema, page=page, size=size, search=search,
            status=status, sort=sort or self.default_sort, **filters,
        )

    def get(self, rid):
        return self.client.fetch(self.schema, "GET", self._url(rid))

    def create(self, payload: dict):
        form = self.validate(payload)
        return self._write("POST", self.path, form.to_wire() if self.form else form)

    def update(self, rid, payload: dict):
        form = self.validate_edit(payload)
        return self._write("PUT", self._url(rid), form.to_wire() if self.form else form)

    def deactivate(self, rid):
        """Soft delete: the backend flips `active` off and keeps the row."""
        self.client.delete(self._url(rid))

    def form_values(self, entity) -> dict:
        """Editable fields of a stored record, as the edit form prefills them."""
        return entity.model_dump()

    def reactivate(self, rid):
        """Re-send the record through its edit form with `active` switched on."""
        form = self.validate_edit({**self.form_values(self.get(rid)), "active": True})
        return self._write("PUT", self._url(rid), form.to_wire() if self.form else form)

    def reference_count(self, entity) -> int:
        return int(getattr(entity, self.reference_field, 0) or 0) if self.reference_field else 0

    def delete_permanent(self, rid):
        """Hard delete, refused while anything still references the row."""
        entity = self.get(rid)
        refs = self.reference_count(entity)
        if refs:
            raise ConflictError(f"cannot delete permanently: still referenced by {refs} record(s)",
                                field=self.reference_field)
        self.client.delete(self._url(rid, "/permanent"))
        log.info("permanently deleted %s/%s", self.path, rid)


class CouponResource(Resource):
    def __init__(self, client):
        super().__init__(client, "/v1/coupons", Coupon, CouponForm,
                         conflict_field="code", default_sort="endDate,desc")

    def validate(self, payload: dict, today: date | None = None):
        form = parse_form(CouponForm, payload)
        check_active_window(form, today)
        return form

    def form_values(self, entity) -> dict:
        values = entity.model_dump()
        # the backend stores 0 for unlimited
        values["usage_limit"] = values.get("usage_limit") or None
        return values

    def find_by_code(self, code: str):
        try:
            return self.client.fetch(Coupon, "GET", f"{self.path}/code/{code}")
        except NotFound:
            return None


class PromotionResource(Resource):
    def __init__(self, client):
        super().__init__(client, "/v1/promotions", Promotion, PromotionForm,
                         default_sort="endDate,desc")

    def validate(self, payload: dict, today: date | None = None):
        form = parse_form(PromotionForm, payload)
        check_active_window(form, today)
        return form

    def active(self):
        data = self.client.get(f"{self.path}/active", auth=False) or []
        return [parse(Promotion, p) for p in data]


def check_active_window(form, today: date | None):
    """An active coupon/promotion must not already be over."""
    today = today or store_today()
    if form.active and form.end_date < today:
        raise ValidationFailed({"end_date": "an active discount cannot end in the past"})


class OrderResource(Resource):
    def __init__(self, client):
        super().__init__(client, "/v1/orders", AdminOrder, default_sort="createdAt,desc")

    def detail(self, rid) -> OrderDetail:
        return self.client.fetch(OrderDetail, "GET", self._url(rid))

    def change_status(self, order: OrderDetail, target, tracking_code=None):
        """Validate against the transition table, then ask the backend."""
        move = order_status.check_transition(order.order_status, target)
        tracking_code = tracking_code or order.tracking_code
        if move.requires_tracking and not tracking_code:
            raise ValidationFailed({"tracking_code": "tracking code is required to ship an order"})
        body = {"status": move.target.value}
        if tracking_code:
            body["trackingCode"] = tracking_code
        updated = self.client.fetch(OrderDetail, "PUT", self._url(order.id, "/status"), json=body)
        log.info("order %s: %s -> %s", order.order_number, order.order_status.value, move.target.value)
        return updated, move

    def create(self, payload: dict):
        return self.client.fetch(OrderDetail, "POST", self.path, json=payload)

    def admin_create(self, payload: dict):
        return self.client.fetch(OrderDetail, "POST", f"{self.path}/admin-create", json=payload)

    def my_orders(self, page=1, size=10):
        return self.client.fetch_page(f"{self.path}/my-orders", UserOrder, page=page, size=size,
                                      sort="createdAt,desc")


def catalog(client: BackendClient) -> dict[str, Resource]:
    """Admin screens keyed by the name used in URLs."""
    return {
        "products": Resource(client, "/v1/products", Product, ProductForm,
                             default_sort="createdAt,desc", reference_field="variant_count"),
        "variants": Resource(client, "/v1/variants", Variant, VariantForm, edit_form=VariantEditForm,
                             conflict_field="sku", default_sort="createdAt,desc", reference_field="order_count"),
        "brands": Resource(client, "/v1/brands", Brand, BrandForm,
                           default_sort="name,asc", reference_field="product_count"),
        "categories": Resource(client, "/v1/categories", Category, CategoryForm,
                               default_sort="name,asc", reference_field="product_count"),
        "coupons": CouponResource(client),
        "promotions": PromotionResource(client),
        "customers": Resource(client, "/v1/users", UserAccount, CustomerForm, conflict_field="email",
                              list_path="/v1/users/customers", default_sort="createdAt,desc",
                              reference_field="order_count"),
        "employees": Resource(client, "/v1/users", UserAccount, EmployeeForm, conflict_field="email",
                              list_path="/v1/users/employees", default_sort="createdAt,desc"),
    }
