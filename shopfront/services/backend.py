# shopfront/services/backend.py
"""
Shared client for the shop's REST backend.

One request, one answer: no retries, no queuing. Every response is checked
against the `{status, message, data}` envelope before the data is handed
back; HTTP failures become the matching ShopfrontError.
"""
from __future__ import annotations

import logging

import requests
from flask import current_app

from ..errors import (
    AuthRequired,
    BackendError,
    ConflictError,
    Forbidden,
    NotFound,
    ValidationFailed,
)
from ..schemas import ApiEnvelope, Page, parse

log = logging.getLogger(__name__)


def _json_or_none(resp):
    try:
        return resp.json()
    except ValueError:
        return None


def error_for_status(status: int, message: str):
    if status == 401:
        return AuthRequired(message)
    if status == 403:
        return Forbidden(message)
    if status == 404:
        return NotFound(message)
    if status == 409:
        return ConflictError(message)
    if status in (400, 422):
        return ValidationFailed({"form": message}, message)
    return BackendError(message, upstream_status=status)


class BackendClient:
    def __init__(self, base_url: str, token: str | None = None, http=None, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_app(cls, token: str | None = None) -> "BackendClient":
        cfg = current_app.config
        return cls(
            cfg["BACKEND_API_URL"],
            token=token,
            http=cfg.get("BACKEND_HTTP"),
            timeout=cfg.get("BACKEND_TIMEOUT"),
        )

    # ------------------------------------------------------------------
    def request(self, method: str, path: str, *, params=None, json=None, auth: bool = True):
        if auth and not self.token:
            # fail before touching the network
            raise AuthRequired()

        headers = {"Accept": "application/json"}
        if auth:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}{path}"
        log.debug("%s %s params=%s", method, path, params)

        try:
            resp = self.http.request(method, url, params=params, json=json, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise BackendError("Cannot reach the server, please try again") from e

        if resp.status_code == 204:
            return None

        body = _json_or_none(resp)
        if not resp.ok:
            message = body.get("message") if isinstance(body, dict) else None
            log.warning("%s %s -> %s %s", method, path, resp.status_code, message)
            raise error_for_status(resp.status_code, message or f"Error {resp.status_code}: {resp.reason}")

        if body is None:
            return None
        envelope = parse(ApiEnvelope, body)
        if envelope.status != "SUCCESS":
            raise BackendError(envelope.message or "Request failed")
        return envelope.data

    def get(self, path, **kw):
        return self.request("GET", path, **kw)

    def post(self, path, **kw):
        return self.request("POST", path, **kw)

    def put(self, path, **kw):
        return self.request("PUT", path, **kw)

    def delete(self, path, **kw):
        return self.request("DELETE", path, **kw)

    def fetch(self, model, method, path, **kw):
        return parse(model, self.request(method, path, **kw))

    def fetch_page(self, path, model, *, page=1, size=10, sort=None, search=None, status=None, auth=True, **filters) -> Page:
        """GET a paginated list; `page` is 1-based, the backend's is 0-based."""
        params = {"page": max(page, 1) - 1, "size": size}
        if sort:
            params["sort"] = sort
        if search:
            params["search"] = search
        if status:
            params["status"] = status
        params.update({k: v for k, v in filters.items() if v not in (None, "")})
        return parse(Page[model], self.get(path, params=params, auth=auth))
