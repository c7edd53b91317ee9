# --- shopfront/utils/api.py ---
from flask import jsonify

from .dates import store_now


def api_ok(message, data=None):
    return {
        "status": "SUCCESS",
        "message": message,
        "data": data,
        "API_TIME_HUMAN": store_now().strftime("%Y-%m-%d %H:%M:%S"),
    }

def api_error(message, data=None):
    return {
        "status": "ERROR",
        "message": message,
        "data": data,
        "API_TIME_HUMAN": store_now().strftime("%Y-%m-%d %H:%M:%S"),
    }


# ---- standard API response format ------------------------------------------
def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r

def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r


def page_args(args, default_size=10):
    """Read 1-based ?page=&size= from a query string, clamped like the lists expect."""
    def _to_int(v, default):
        try:
            return int(v)
        except (TypeError, ValueError):
            return default
    page = max(_to_int(args.get("page"), 1), 1)
    size = min(max(_to_int(args.get("size"), default_size), 1), 100)
    return page, size
