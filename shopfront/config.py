import os
from datetime import timedelta


def _float(name, default):
    raw = os.environ.get(name)
    return float(raw) if raw not in (None, "") else default


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    # same lifetime as the storefront auth cookie
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)

    BACKEND_API_URL = os.environ.get("BACKEND_API_URL", "http://localhost:8080/api")
    BACKEND_TIMEOUT = _float("BACKEND_TIMEOUT", 15.0)
    PROVINCES_API_URL = os.environ.get("PROVINCES_API_URL", "https://provinces.open-api.vn/api")

    SHIPPING_FEE = int(os.environ.get("SHIPPING_FEE", "30000"))
    STORE_UTC_OFFSET_HOURS = int(os.environ.get("STORE_UTC_OFFSET_HOURS", "7"))
    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "10"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # requests.Session-compatible object; None means a fresh requests.Session
    BACKEND_HTTP = None

    @staticmethod
    def init_app(app):
        uri = os.getenv("SQLALCHEMY_DATABASE_URI") or os.getenv("DATABASE_URL")
        if not uri:
            os.makedirs(app.instance_path, exist_ok=True)
            uri = f"sqlite:///{os.path.join(app.instance_path, 'shopfront.db')}"
        app.config["SQLALCHEMY_DATABASE_URI"] = uri
