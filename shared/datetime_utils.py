"""
Date/time helpers — framework-agnostic.

Every timestamp handled by the service is a timezone-aware UTC ``datetime``.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def hours_until(moment: datetime, now: datetime) -> int:
    """Whole hours remaining until *moment*, rounded up (never below 0)."""
    remaining = (moment - now) / timedelta(hours=1)
    return max(0, math.ceil(remaining))
