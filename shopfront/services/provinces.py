# shopfront/services/provinces.py
"""Read-only lookups against provinces.open-api.vn for the address selects."""
from __future__ import annotations

import logging

import requests
from flask import current_app

from ..errors import BackendError, NotFound
from ..schemas import District, Province, parse

log = logging.getLogger(__name__)


class ProvinceClient:
    def __init__(self, base_url: str, http=None, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_app(cls):
        cfg = current_app.config
        return cls(cfg["PROVINCES_API_URL"], http=cfg.get("BACKEND_HTTP"), timeout=cfg.get("BACKEND_TIMEOUT"))

    def _get(self, path, params=None):
        try:
            resp = self.http.request("GET", f"{self.base_url}{path}", params=params,
                                     headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("address lookup %s failed: %s", path, e)
            raise BackendError("Cannot load address data") from e
        if resp.status_code == 404:
            raise NotFound("Unknown address code")
        if not resp.ok:
            raise BackendError(f"Address service error {resp.status_code}", upstream_status=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError("Address service returned invalid data") from e

    def provinces(self) -> list[Province]:
        return [parse(Province, p) for p in self._get("/p/") or []]

    def districts(self, province_code: int) -> list[District]:
        return parse(Province, self._get(f"/p/{province_code}", {"depth": 2})).districts

    def wards(self, district_code: int):
        return parse(District, self._get(f"/d/{district_code}", {"depth": 2})).wards
