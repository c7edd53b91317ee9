from datetime import date

import pytest

from shopfront.errors import ConflictError, IllegalTransition, ValidationFailed
from shopfront.services.backend import BackendClient
from shopfront.services.resources import CouponResource, OrderResource, catalog

from conftest import BACKEND, coupon_payload, order_detail_payload, variant_payload


@pytest.fixture
def backend(http):
    return BackendClient(BACKEND, token="tok", http=http)


def test_catalog_has_every_admin_screen(backend):
    assert set(catalog(backend)) == {
        "products", "variants", "brands", "categories",
        "coupons", "promotions", "customers", "employees",
    }


def test_list_uses_default_sort_and_list_path(backend, http):
    http.reply("GET", "/v1/users/customers", {"content": [], "number": 0, "size": 10})
    catalog(backend)["customers"].list(page=1, size=10)
    call = http.last()
    assert call.path == "/v1/users/customers"
    assert call.params["sort"] == "createdAt,desc"


def test_create_validates_before_sending(backend, http):
    with pytest.raises(ValidationFailed) as info:
        catalog(backend)["brands"].create({"name": ""})
    assert "name" in info.value.errors
    assert http.calls == []


def test_create_sends_camel_case(backend, http):
    http.reply("POST", "/v1/brands", {"id": 9, "name": "Uniqlo", "imageUrl": "x.png"})
    brand = catalog(backend)["brands"].create({"name": " Uniqlo ", "image_url": "x.png"})
    assert brand.id == 9
    assert http.last().json == {"name": "Uniqlo", "imageUrl": "x.png", "description": None, "active": True}


def test_duplicate_name_reports_field(backend, http):
    http.reply("POST", "/v1/brands", status=409, message="Brand already exists")
    with pytest.raises(ConflictError) as info:
        catalog(backend)["brands"].create({"name": "Uniqlo"})
    assert info.value.payload() == {"errors": {"name": "Brand already exists"}}


def test_duplicate_coupon_code_reports_code_field(backend, http):
    http.reply("POST", "/v1/coupons", status=409, message="Code exists")
    form = {"code": "sale10", "discount_value": 10, "start_date": "2099-01-01", "end_date": "2099-01-31"}
    with pytest.raises(ConflictError) as info:
        catalog(backend)["coupons"].create(form)
    assert info.value.field == "code"
    assert http.last().json["code"] == "SALE10"


@pytest.mark.parametrize("changes,field", [
    ({"discount_value": 0}, "discount_value"),
    ({"discount_value": 101}, "discount_value"),
    ({"max_discount_amount": 0}, "max_discount_amount"),
    ({"min_order_amount": -1}, "min_order_amount"),
    ({"usage_limit": 0}, "usage_limit"),
    ({"code": "   "}, "code"),
])
def test_coupon_form_rules(backend, changes, field):
    form = {"code": "SALE10", "discount_value": 10, "start_date": "2024-06-01", "end_date": "2024-06-30"}
    form.update(changes)
    with pytest.raises(ValidationFailed) as info:
        CouponResource(backend).validate(form, today=date(2024, 6, 15))
    assert field in info.value.errors


def test_coupon_window_must_be_ordered(backend):
    form = {"code": "X", "discount_value": 10, "start_date": "2024-06-30", "end_date": "2024-06-01"}
    with pytest.raises(ValidationFailed):
        CouponResource(backend).validate(form, today=date(2024, 6, 15))


def test_active_coupon_cannot_end_in_past(backend):
    form = {"code": "X", "discount_value": 10, "start_date": "2024-01-01", "end_date": "2024-02-01"}
    with pytest.raises(ValidationFailed) as info:
        CouponResource(backend).validate(form, today=date(2024, 6, 15))
    assert "end_date" in info.value.errors
    form["active"] = False
    CouponResource(backend).validate(form, today=date(2024, 6, 15))


def test_find_by_code_missing_returns_none(backend, http):
    assert CouponResource(backend).find_by_code("NOPE") is None


def test_find_by_code(backend, http):
    http.reply("GET", "/v1/coupons/code/SALE10", coupon_payload())
    assert CouponResource(backend).find_by_code("SALE10").discount_value == 10


def test_reactivate_puts_active_flag(backend, http):
    http.reply("GET", "/v1/categories/4", {"id": 4, "name": "Shirts", "active": False})
    http.reply("PUT", "/v1/categories/4", {"id": 4, "name": "Shirts", "active": True})
    category = catalog(backend)["categories"].reactivate(4)
    assert category.active
    assert http.last("PUT").json["active"] is True


def test_reactivate_refuses_expired_coupon(backend, http):
    http.reply("GET", "/v1/coupons/9", coupon_payload(id=9, startDate="2020-01-01", endDate="2020-01-31",
                                                     active=False, usedCount=42))
    with pytest.raises(ValidationFailed) as info:
        catalog(backend)["coupons"].reactivate(9)
    assert "end_date" in info.value.errors
    assert not any(c.method == "PUT" for c in http.calls)


def test_reactivate_coupon_sends_only_editable_fields(backend, http):
    http.reply("GET", "/v1/coupons/9", coupon_payload(id=9, active=False, usedCount=42, usageLimit=0))
    http.reply("PUT", "/v1/coupons/9", coupon_payload(id=9, usedCount=42))
    catalog(backend)["coupons"].reactivate(9)
    body = http.last("PUT").json
    assert body["active"] is True
    assert body["usageLimit"] is None
    assert "usedCount" not in body
    assert "id" not in body


def test_reactivate_variant_uses_edit_fields(backend, http):
    http.reply("GET", "/v1/variants/11", variant_payload(vid=11, price=275000, active=False, orderCount=3))
    http.reply("PUT", "/v1/variants/11", variant_payload(vid=11, price=275000))
    catalog(backend)["variants"].reactivate(11)
    assert http.last("PUT").json == {
        "sku": "SKU-11", "price": 275000, "stockQuantity": 10,
        "imageUrl": "https://img.test/shirt.jpg", "active": True,
    }


def test_permanent_delete_refused_while_referenced(backend, http):
    http.reply("GET", "/v1/brands/2", {"id": 2, "name": "Uniqlo", "productCount": 3})
    with pytest.raises(ConflictError, match="3 record"):
        catalog(backend)["brands"].delete_permanent(2)
    assert not any(c.method == "DELETE" for c in http.calls)


def test_permanent_delete(backend, http):
    http.reply("GET", "/v1/brands/2", {"id": 2, "name": "Uniqlo", "productCount": 0})
    http.reply("DELETE", "/v1/brands/2/permanent")
    catalog(backend)["brands"].delete_permanent(2)
    assert http.last().path == "/v1/brands/2/permanent"


# ---- orders ------------------------------------------------------------------

def test_change_status(backend, http):
    http.reply("GET", "/v1/orders/5", order_detail_payload(status="PENDING"))
    http.reply("PUT", "/v1/orders/5/status", order_detail_payload(status="CONFIRMED"))
    orders = OrderResource(backend)
    updated, move = orders.change_status(orders.detail(5), "CONFIRMED")
    assert updated.order_status.value == "CONFIRMED"
    assert move.label == "Confirm"
    assert http.last().json == {"status": "CONFIRMED"}


def test_illegal_status_change_never_reaches_backend(backend, http):
    http.reply("GET", "/v1/orders/5", order_detail_payload(status="COMPLETED"))
    orders = OrderResource(backend)
    with pytest.raises(IllegalTransition):
        orders.change_status(orders.detail(5), "CANCELLED")
    assert not any(c.method == "PUT" for c in http.calls)


def test_shipping_needs_tracking_code(backend, http):
    http.reply("GET", "/v1/orders/5", order_detail_payload(status="CONFIRMED"))
    http.reply("PUT", "/v1/orders/5/status", order_detail_payload(status="SHIPPING", trackingCode="GHN123"))
    orders = OrderResource(backend)
    order = orders.detail(5)
    with pytest.raises(ValidationFailed):
        orders.change_status(order, "SHIPPING")
    updated, _ = orders.change_status(order, "SHIPPING", "GHN123")
    assert updated.tracking_code == "GHN123"
    assert http.last().json == {"status": "SHIPPING", "trackingCode": "GHN123"}


def test_order_detail_accepts_coupon_discount_alias(backend, http):
    payload = order_detail_payload()
    payload.pop("discountAmount")
    payload["couponDiscount"] = 12000
    http.reply("GET", "/v1/orders/5", payload)
    assert OrderResource(backend).detail(5).discount_amount == 12000
