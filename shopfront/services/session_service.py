# shopfront/services/session_service.py
"""
Per-request auth context.

A SessionContext is built explicitly from the local token store (hydrate)
and removed on logout (teardown); nothing is kept in module globals.
"""
from __future__ import annotations

import logging

from flask import current_app
from flask_jwt_extended import create_access_token

from ..errors import AuthRequired, BackendError, ValidationFailed
from ..extensions import db
from ..model import StoreSession
from ..utils.dates import utc_now
from ..schemas import (
    AddressForm,
    LoginData,
    LoginForm,
    PasswordForm,
    ProfileForm,
    RegisterForm,
    parse,
    parse_form,
)
from .backend import BackendClient

log = logging.getLogger(__name__)

ROLE_LEVEL = {"USER": 1, "STAFF": 2, "MANAGER": 3, "ADMIN": 4}


def normalize_roles(roles) -> list[str]:
    out = []
    for r in roles or ():
        r = str(r).strip().upper().removeprefix("ROLE_")
        if r and r not in out:
            out.append(r)
    return out or ["USER"]


class SessionContext:
    def __init__(self, record: StoreSession | None = None):
        self.record = record

    @classmethod
    def hydrate(cls, session_id: str | None) -> "SessionContext":
        """Load the session row; expired or unknown ids give an anonymous context."""
        if not session_id:
            return cls()
        record = db.session.get(StoreSession, session_id)
        if record is None or record.is_expired():
            return cls()
        return cls(record)

    # ---- identity ----
    @property
    def is_authenticated(self) -> bool:
        return self.record is not None

    @property
    def id(self):
        return self.record.id if self.record else None

    @property
    def token(self):
        return self.record.upstream_token if self.record else None

    @property
    def user(self) -> dict:
        return dict(self.record.user_json or {}) if self.record else {}

    @property
    def roles(self) -> list[str]:
        return self.record.role_list() if self.record else []

    def has_role(self, *roles) -> bool:
        wanted = {r.upper() for r in roles}
        return any(r in wanted for r in self.roles)

    def level(self) -> int:
        return max((ROLE_LEVEL.get(r, 0) for r in self.roles), default=0)

    def at_least(self, role: str) -> bool:
        return self.level() >= ROLE_LEVEL[role.upper()]

    def client(self) -> BackendClient:
        return BackendClient.from_app(self.token)

    def require(self) -> "SessionContext":
        if not self.is_authenticated:
            raise AuthRequired()
        return self

    # ---- lifecycle ----
    def merge_user(self, changes: dict):
        user = self.user
        user.update(changes)
        self.record.user_json = user
        db.session.commit()

    def teardown(self):
        """Logout: drop the stored token and everything hanging off it."""
        if self.record is None:
            return
        log.info("session %s closed for %s", self.record.id, self.record.email)
        db.session.delete(self.record)
        db.session.commit()
        self.record = None

    def as_api(self):
        return {
            "authenticated": self.is_authenticated,
            "user": self.user or None,
            "roles": self.roles,
        }


# ---------------------------------------------------------------- actions --

def login(payload: dict):
    """Log in against the backend; returns (SessionContext, our own access token)."""
    form = parse_form(LoginForm, payload)
    client = BackendClient.from_app()
    data = client.post("/v1/auth/login", json=form.model_dump(), auth=False)
    if not isinstance(data, dict) or not data.get("accessToken"):
        raise BackendError("Server did not return a token")
    login_data = parse(LoginData, data)

    expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    record = StoreSession(
        upstream_token=login_data.access_token,
        user_id=str(login_data.id),
        email=login_data.email,
        roles=",".join(normalize_roles(login_data.roles)),
        user_json=login_data.user_snapshot(),
        expires_at=utc_now() + expires,
    )
    db.session.add(record)
    db.session.commit()
    log.info("session %s opened for %s", record.id, record.email)

    access_token = create_access_token(identity=record.id, expires_delta=expires)
    return SessionContext(record), access_token


def register(payload: dict):
    form = parse_form(RegisterForm, payload)
    BackendClient.from_app().post("/v1/auth/register", json=form.to_wire(), auth=False)


def forgot_password(email: str):
    email = (email or "").strip().lower()
    if not email:
        raise ValidationFailed({"email": "Email required"})
    BackendClient.from_app().post("/v1/auth/forgot-password", json={"email": email}, auth=False)


def update_profile(ctx: SessionContext, payload: dict):
    form = parse_form(ProfileForm, payload)
    ctx.client().put("/v1/users/profile", json=form.to_wire())
    changes = form.model_dump(mode="json")
    changes["name"] = f"{form.last_name} {form.first_name}".strip()
    ctx.merge_user(changes)


def update_address(ctx: SessionContext, payload: dict):
    form = parse_form(AddressForm, payload)
    ctx.client().put("/v1/users/profile/address", json=form.to_wire())
    ctx.merge_user(form.model_dump())


def update_password(ctx: SessionContext, payload: dict):
    form = parse_form(PasswordForm, payload)
    ctx.client().post("/v1/users/update-password", json=form.to_wire())


def revalidate(ctx: SessionContext) -> bool:
    """Probe the backend with the stored token; a 401 ends the session."""
    if not ctx.is_authenticated:
        return False
    try:
        ctx.client().get("/v1/categories/all-brief")
    except AuthRequired:
        ctx.teardown()
        return False
    return True


def purge_expired(now=None) -> int:
    now = now or utc_now()
    expired = StoreSession.query.filter(StoreSession.expires_at < now).all()
    for record in expired:
        db.session.delete(record)
    db.session.commit()
    return len(expired)
