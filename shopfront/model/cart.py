# shopfront/model/cart.py
from __future__ import annotations
import uuid as _uuid
from decimal import Decimal
from sqlalchemy.sql import func
from ..extensions import db
from ..utils.money import round_money


class Cart(db.Model):
    __tablename__ = "cart"

    id = db.Column(db.Integer, primary_key=True)
    uuid = db.Column(db.String(36), unique=True, index=True, default=lambda: str(_uuid.uuid4()))
    session_id = db.Column(db.String(36), db.ForeignKey("store_session.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    status = db.Column(db.String(16), default="active", index=True)   # active | checked_out
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    items = db.relationship(
        "CartItem",
        backref="cart",
        cascade="all, delete-orphan",
        lazy="joined",
        order_by="CartItem.id.asc()"
    )

    # --------- money helpers / totals ----------
    def selected_items(self):
        return [i for i in self.items if i.selected]

    def subtotal_dec(self) -> Decimal:
        # only lines ticked for checkout count
        return round_money(sum((i.line_total_dec() for i in self.selected_items()), Decimal("0")))

    def total_quantity(self) -> int:
        return sum(int(i.quantity or 0) for i in self.selected_items())

    def find_item(self, variant_id: int):
        return next((i for i in self.items if i.variant_id == variant_id), None)

    def as_api(self):
        return {
            "id": self.id,
            "uuid": self.uuid,
            "status": self.status,
            "items": [i.as_api() for i in self.items],
            "totals": {
                "subtotal": int(self.subtotal_dec()),
                "selected_count": len(self.selected_items()),
                "total_quantity": self.total_quantity(),
            },
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class CartItem(db.Model):
    __tablename__ = "cart_item"

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("cart.id"), nullable=False, index=True)
    variant_id = db.Column(db.Integer, nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=True, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    attributes_description = db.Column(db.String(255))
    image_url = db.Column(db.String(1024))

    # price captured when the line was added; refreshed explicitly
    unit_price = db.Column(db.Numeric(14, 0), nullable=False, default=0)
    previous_price = db.Column(db.Numeric(14, 0), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    selected = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    # ---- price helpers ----
    def unit_price_dec(self) -> Decimal:
        return Decimal(str(self.unit_price or 0))

    def line_total_dec(self) -> Decimal:
        return round_money(self.unit_price_dec() * Decimal(self.quantity or 0))

    @property
    def price_changed(self) -> bool:
        return self.previous_price is not None and Decimal(str(self.previous_price)) != self.unit_price_dec()

    def as_api(self):
        return {
            "id": self.id,
            "variant_id": self.variant_id,
            "product_id": self.product_id,
            "name": self.product_name,
            "attributes": self.attributes_description,
            "image_url": self.image_url,
            "price": int(self.unit_price_dec()),
            "previous_price": int(self.previous_price) if self.previous_price is not None else None,
            "price_changed": self.price_changed,
            "quantity": self.quantity,
            "selected": self.selected,
            "line_total": int(self.line_total_dec()),
        }
