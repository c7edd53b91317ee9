from datetime import timedelta
from decimal import Decimal

import pytest

from shopfront.errors import AuthRequired, NotFound, ValidationFailed
from shopfront.extensions import db
from shopfront.model import StoreSession
from shopfront.schemas import Variant
from shopfront.utils.dates import utc_now
from shopfront.services import cart_service
from shopfront.services.session_service import SessionContext

from conftest import variant_payload


@pytest.fixture
def session_ctx(ctx):
    record = StoreSession(upstream_token="tok", user_id="7", email="an@example.com",
                          roles="USER", expires_at=utc_now() + timedelta(days=1))
    db.session.add(record)
    db.session.commit()
    return SessionContext(record)


@pytest.fixture
def cart(session_ctx):
    return cart_service.get_or_create_cart(session_ctx)


def variant(**kw):
    return Variant.model_validate(variant_payload(**kw))


def test_cart_needs_login(ctx):
    with pytest.raises(AuthRequired):
        cart_service.get_or_create_cart(SessionContext())


def test_same_cart_is_reused(session_ctx, cart):
    assert cart_service.get_or_create_cart(session_ctx).id == cart.id


def test_add_snapshots_variant(cart):
    item = cart_service.add_item(cart, variant(), 2)
    assert item.product_name == "Linen shirt"
    assert item.attributes_description == "Color: White, Size: M"
    assert item.unit_price_dec() == Decimal("250000")
    assert cart.subtotal_dec() == Decimal("500000")


def test_add_same_variant_merges(cart):
    cart_service.add_item(cart, variant(), 1)
    cart_service.add_item(cart, variant(), 2)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3


def test_add_uses_sale_price_while_promotion_valid(cart):
    item = cart_service.add_item(cart, variant(salePrice=200000, isPromotionStillValid=True))
    assert item.unit_price_dec() == Decimal("200000")


def test_add_beyond_stock_rejected(cart):
    cart_service.add_item(cart, variant(stock=3), 2)
    with pytest.raises(ValidationFailed, match="only 3 left"):
        cart_service.add_item(cart, variant(stock=3), 2)


def test_add_inactive_variant_rejected(cart):
    with pytest.raises(ValidationFailed):
        cart_service.add_item(cart, variant(active=False))


@pytest.mark.parametrize("qty", [0, -1, "two"])
def test_add_bad_quantity(cart, qty):
    with pytest.raises(ValidationFailed):
        cart_service.add_item(cart, variant(), qty)


def test_set_quantity_and_remove_at_zero(cart):
    item = cart_service.add_item(cart, variant(), 1)
    cart_service.set_quantity(cart, item.id, 4)
    assert cart.total_quantity() == 4
    assert cart_service.set_quantity(cart, item.id, 0) is None
    assert cart.items == []


def test_unknown_item(cart):
    with pytest.raises(NotFound):
        cart_service.remove_item(cart, 999)


def test_subtotal_counts_selected_lines_only(cart):
    a = cart_service.add_item(cart, variant(vid=1, price=100000))
    cart_service.add_item(cart, variant(vid=2, price=50000), 2)
    cart_service.toggle_selected(cart, a.id)
    assert cart.subtotal_dec() == Decimal("100000")
    assert cart.as_api()["totals"]["selected_count"] == 1

    cart_service.select_all(cart, False)
    assert cart.subtotal_dec() == 0
    cart_service.select_all(cart)
    assert cart.subtotal_dec() == Decimal("200000")


def test_remove_purchased_keeps_unselected(cart):
    cart_service.add_item(cart, variant(vid=1))
    cart_service.add_item(cart, variant(vid=2))
    cart_service.remove_purchased(cart, [1])
    assert [i.variant_id for i in cart.items] == [2]
    assert cart.status == "active"

    cart_service.remove_purchased(cart, [2])
    assert cart.status == "checked_out"


def test_refresh_prices_flags_changes(cart):
    cart_service.add_item(cart, variant(vid=1, price=100000))
    cart_service.add_item(cart, variant(vid=2, price=50000))
    cart_service.add_item(cart, variant(vid=3, price=70000))

    changed = cart_service.refresh_prices(cart, {
        1: variant(vid=1, price=120000),
        2: variant(vid=2, price=50000),
    })
    assert [i.variant_id for i in changed] == [1]
    line = cart.find_item(1)
    assert line.price_changed
    assert line.as_api()["previous_price"] == 100000
    assert line.as_api()["price"] == 120000
    # variant 3 vanished from the catalog
    assert not cart.find_item(3).selected


def test_clear(cart):
    cart_service.add_item(cart, variant())
    cart_service.clear(cart)
    assert cart.items == []
