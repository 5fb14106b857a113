"""Clock helpers.

Reservations and payments are calendar dates in the hostel's own zone, so
"today" is computed there rather than in UTC.
"""

from __future__ import annotations

import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Santiago"


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def hostal_timezone() -> ZoneInfo:
    return ZoneInfo(os.environ.get("HOSTAL_TIMEZONE", DEFAULT_TIMEZONE))


def local_today() -> date:
    """Return today's calendar date in the hostel's zone."""
    return utc_now().astimezone(hostal_timezone()).date()
