# shopfront/errors.py
from __future__ import annotations

import logging

from flask import jsonify

from .utils.api import api_error

log = logging.getLogger(__name__)


class ShopfrontError(Exception):
    """Base error; every subclass renders as an ERROR envelope."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, data: dict | None = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def payload(self):
        return self.data


class ValidationFailed(ShopfrontError):
    status_code = 422
    default_message = "Please check the highlighted fields"

    def __init__(self, errors: dict[str, str], message: str | None = None):
        self.errors = dict(errors)
        if message is None and len(self.errors) == 1:
            message = next(iter(self.errors.values()))
        super().__init__(message, {"errors": self.errors})


class ConflictError(ShopfrontError):
    status_code = 409
    default_message = "Already exists"

    def __init__(self, message: str | None = None, field: str | None = None):
        self.field = field
        super().__init__(message)

    def payload(self):
        if self.field:
            return {"errors": {self.field: self.message}}
        return None


class AuthRequired(ShopfrontError):
    status_code = 401
    default_message = "You need to log in"


class Forbidden(ShopfrontError):
    status_code = 403
    default_message = "You do not have permission to do this"


class NotFound(ShopfrontError):
    status_code = 404
    default_message = "Not found"


class IllegalTransition(ShopfrontError):
    status_code = 409

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"cannot move order from {getattr(current, 'value', current)} "
            f"to {getattr(target, 'value', target)}"
        )


class BackendError(ShopfrontError):
    status_code = 502
    default_message = "Server error"

    def __init__(self, message: str | None = None, upstream_status: int | None = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class SchemaError(BackendError):
    default_message = "Unexpected response from server"


def register_error_handlers(app):
    @app.errorhandler(ShopfrontError)
    def handle_shopfront_error(e):
        if e.status_code >= 500:
            log.warning("%s: %s", type(e).__name__, e.message)
        r = jsonify(api_error(e.message, e.payload()))
        r.status_code = e.status_code
        return r


def register_jwt_handlers(jwt):
    """Bad or expired local tokens answer with the same envelope as everything else."""
    def _unauthorized(message):
        r = jsonify(api_error(message))
        r.status_code = 401
        return r

    @jwt.expired_token_loader
    def expired(_header, _payload):
        return _unauthorized("Your session has expired, please log in again")

    @jwt.invalid_token_loader
    def invalid(reason):
        return _unauthorized(f"Invalid token: {reason}")

    @jwt.unauthorized_loader
    def missing(reason):
        return _unauthorized(AuthRequired.default_message)
