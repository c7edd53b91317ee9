# --- shopfront/model/session.py ---
import uuid as _uuid

from sqlalchemy.sql import func

from ..extensions import db
from ..utils.dates import utc_now


class StoreSession(db.Model):
    """Local auth token store: one row per logged-in browser."""
    __tablename__ = "store_session"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(_uuid.uuid4()))
    upstream_token = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.String(64), index=True)
    email = db.Column(db.String(255), index=True)
    roles = db.Column(db.String(255), nullable=False, default="USER")   # comma separated
    user_json = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, server_default=func.now())
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    carts = db.relationship("Cart", backref="session", cascade="all, delete-orphan", lazy="selectin")

    def role_list(self):
        return [r for r in (self.roles or "").split(",") if r]

    def is_expired(self, now=None) -> bool:
        return self.expires_at < (now or utc_now())
