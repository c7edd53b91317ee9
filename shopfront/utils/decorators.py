# ------- shopfront/utils/decorators.py -------
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..errors import AuthRequired, Forbidden
from ..services.session_service import ROLE_LEVEL, SessionContext


def current_session() -> SessionContext:
    """SessionContext for this request, hydrated once from the bearer JWT."""
    if "shop_session" not in g:
        verify_jwt_in_request(optional=True)
        g.shop_session = SessionContext.hydrate(get_jwt_identity())
    return g.shop_session


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_session().is_authenticated:
            raise AuthRequired()
        return fn(*args, **kwargs)
    return wrapper


def require_role_at_least(ctx: SessionContext, min_role: str, message: str | None = None):
    if not ctx.is_authenticated:
        raise AuthRequired()
    if not ctx.at_least(min_role):
        raise Forbidden(message)


def role_at_least(min_role: str, message: str | None = None):  # ADMIN > MANAGER > STAFF > USER
    if min_role not in ROLE_LEVEL:
        raise ValueError(f"unknown role {min_role}")
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            require_role_at_least(current_session(), min_role, message)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
