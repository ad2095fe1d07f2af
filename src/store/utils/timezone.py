# src/store/utils/timezone.py
from __future__ import annotations

import logging
from datetime import datetime, date

import pytz

from src.store.config import settings

# -----------------------------------------------------------------------------
# Configure local timezone with fallback
# -----------------------------------------------------------------------------
try:
    LOCAL_TZ = pytz.timezone(settings.TIMEZONE)
except Exception as exc:
    logging.getLogger(__name__).warning(
        "Invalid TIMEZONE '%s' in environment; falling back to UTC. Error: %s",
        settings.TIMEZONE,
        exc,
    )
    LOCAL_TZ = pytz.utc


def now_local() -> datetime:
    """
    Return the current time as a timezone-aware datetime in the configured local timezone.
    """
    return datetime.now(LOCAL_TZ)


def today_local() -> date:
    """
    Return the current date in the configured local timezone.
    Visibility windows of banners and offers are compared against this.
    """
    return now_local().date()


def now_iso() -> str:
    """Current instant as ISO-8601 in UTC, e.g. '2025-10-04T07:40:15.123456+00:00'."""
    return datetime.now(pytz.utc).isoformat()
