# shopfront/auth/routes.py
from flask import request

from . import bp
from ..services import session_service
from ..utils.api import ok
from ..utils.decorators import current_session, login_required


def _body():
    return request.get_json(silent=True) or {}


@bp.post("/login")
def login():
    ctx, access_token = session_service.login(_body())
    data = ctx.as_api()
    data["access_token"] = access_token
    return ok("You've logged in successfully", data)


@bp.post("/register")
def register():
    session_service.register(_body())
    return ok("Account created, you can log in now", status=201)


@bp.post("/forgot-password")
def forgot_password():
    session_service.forgot_password(_body().get("email"))
    return ok("If the email exists, a reset link has been sent")


@bp.post("/logout")
def logout():
    # logging out twice is not an error
    current_session().teardown()
    return ok("Logged out")


@bp.get("/me")
def me():
    return ok("Session", current_session().as_api())


@bp.post("/revalidate")
def revalidate():
    ctx = current_session()
    alive = session_service.revalidate(ctx)
    return ok("Session is valid" if alive else "Session ended", ctx.as_api())


@bp.put("/profile")
@login_required
def update_profile():
    ctx = current_session()
    session_service.update_profile(ctx, _body())
    return ok("Profile updated", ctx.as_api())


@bp.put("/profile/address")
@login_required
def update_address():
    ctx = current_session()
    session_service.update_address(ctx, _body())
    return ok("Address updated", ctx.as_api())


@bp.post("/password")
@login_required
def update_password():
    session_service.update_password(current_session(), _body())
    return ok("Password changed")
