# shopfront/utils/dates.py
from datetime import date, datetime, timedelta, timezone

from flask import current_app, has_app_context

DEFAULT_OFFSET_HOURS = 7

def utc_now() -> datetime:
    """Naive UTC, the way the session table stores timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def store_now() -> datetime:
    """Wall-clock time of the store (UTC+7 unless configured otherwise)."""
    hours = DEFAULT_OFFSET_HOURS
    if has_app_context():
        hours = current_app.config.get("STORE_UTC_OFFSET_HOURS", DEFAULT_OFFSET_HOURS)
    return utc_now() + timedelta(hours=hours)

def store_today() -> date:
    return store_now().date()
