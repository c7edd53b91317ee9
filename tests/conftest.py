from __future__ import annotations

from typing import NamedTuple

import pytest
import requests

from shopfront import create_app
from shopfront.extensions import db

BACKEND = "http://backend.test/api"
PROVINCES = "http://provinces.test/api"


class Call(NamedTuple):
    method: str
    path: str
    params: dict | None
    json: dict | None
    headers: dict


class FakeResponse:
    def __init__(self, status_code=200, body=None, reason="OK"):
        self.status_code = status_code
        self._body = body
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeHttp:
    """Stands in for requests.Session; answers from a (method, path) table."""

    def __init__(self):
        self.routes = {}
        self.calls: list[Call] = []

    def reply(self, method, path, data=None, *, status=200, message="OK", body=None):
        if body is None:
            body = {"status": "SUCCESS" if status < 400 else "ERROR", "message": message, "data": data}
        self.routes[(method.upper(), path)] = FakeResponse(status, body, reason=message)
        return self

    def fail(self, method, path, exc=None):
        self.routes[(method.upper(), path)] = exc or requests.ConnectionError("connection refused")
        return self

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url
        for base in (BACKEND, PROVINCES):
            if url.startswith(base):
                path = url[len(base):]
        self.calls.append(Call(method, path, params, json, headers or {}))
        answer = self.routes.get((method, path))
        if answer is None:
            return FakeResponse(404, {"status": "ERROR", "message": f"no route {method} {path}"}, "Not Found")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def last(self, method=None, path=None) -> Call:
        for call in reversed(self.calls):
            if (method is None or call.method == method) and (path is None or call.path == path):
                return call
        raise AssertionError(f"no call {method} {path}")


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def app(http):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "JWT_SECRET_KEY": "test-secret-key-long-enough-for-hs256",
        "BACKEND_API_URL": BACKEND,
        "PROVINCES_API_URL": PROVINCES,
        "BACKEND_HTTP": http,
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for service-level tests; route tests use `client` instead."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def login_payload(roles=("ROLE_USER",), **extra):
    data = {
        "accessToken": "upstream-token",
        "id": 7,
        "name": "Nguyen An",
        "firstName": "An",
        "lastName": "Nguyen",
        "email": "an@example.com",
        "roles": list(roles),
    }
    data.update(extra)
    return data


@pytest.fixture
def login(client, http):
    """Log in through the API with the given roles; returns auth headers."""
    def _login(*roles):
        http.reply("POST", "/v1/auth/login", login_payload(roles or ("ROLE_USER",)))
        r = client.post("/auth/login", json={"email": "an@example.com", "password": "secret"})
        assert r.status_code == 200, r.get_json()
        return {"Authorization": f"Bearer {r.get_json()['data']['access_token']}"}
    return _login


def variant_payload(vid=11, price=250000, stock=10, **extra):
    data = {
        "id": vid,
        "sku": f"SKU-{vid}",
        "productId": 3,
        "productName": "Linen shirt",
        "price": price,
        "stockQuantity": stock,
        "imageUrl": "https://img.test/shirt.jpg",
        "active": True,
        "attributes": {"Color": "White", "Size": "M"},
    }
    data.update(extra)
    return data


def coupon_payload(code="SALE10", percent=10, **extra):
    data = {
        "id": 1,
        "code": code,
        "discountValue": percent,
        "maxDiscountAmount": None,
        "minOrderAmount": None,
        "usageLimit": None,
        "usedCount": 0,
        "startDate": "2024-01-01",
        "endDate": "2099-12-31",
        "active": True,
    }
    data.update(extra)
    return data


def order_detail_payload(oid=5, status="PENDING", method="COD", payment="PENDING", **extra):
    data = {
        "id": oid,
        "orderNumber": f"ORD-{oid:04d}",
        "createdAt": "2024-06-15T10:00:00",
        "orderStatus": status,
        "paymentStatus": payment,
        "paymentMethod": method,
        "customerName": "Nguyen An",
        "phone": "0901234567",
        "address": "1 Le Loi, Ben Nghe, Quan 1, Ho Chi Minh",
        "subtotal": 550000,
        "shippingFee": 30000,
        "discountAmount": 55000,
        "totalAmount": 525000,
        "items": [{"variantId": 11, "productName": "Linen shirt", "quantity": 2, "price": 275000}],
    }
    data.update(extra)
    return data
