"""
Calendar Period Utility

Turns epoch-second timestamps into calendar periods for anchored indicators.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Hashable, Optional
from zoneinfo import ZoneInfo

from stockterm.core.config import settings


class AnchorPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    SESSION = "session"


def get_market_tz(name: Optional[str] = None):
    """Resolve the configured market timezone."""
    tz_name = name or settings.market_timezone
    if tz_name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz_name)


def to_datetime(seconds: float, tz=None) -> datetime:
    """Convert epoch seconds to an aware datetime in the market timezone."""
    return datetime.fromtimestamp(seconds, tz or get_market_tz())


def period_key(seconds: float, anchor: AnchorPeriod, tz=None) -> Hashable:
    """
    Key identifying the anchor period a timestamp falls in.

    Two timestamps belong to the same period iff their keys are equal.
    SESSION never changes, so a session-anchored series accumulates from its
    first bar.
    """
    anchor = AnchorPeriod(anchor)
    if anchor == AnchorPeriod.SESSION:
        return 0

    dt = to_datetime(seconds, tz)
    if anchor == AnchorPeriod.DAY:
        return (dt.year, dt.month, dt.day)
    if anchor == AnchorPeriod.WEEK:
        iso = dt.isocalendar()
        return (iso[0], iso[1])
    return (dt.year, dt.month)


def is_new_period(previous: float, current: float, anchor: AnchorPeriod, tz=None) -> bool:
    """Check whether `current` starts a new anchor period relative to `previous`."""
    if previous != previous or current != current:  # NaN timestamps never reset
        return False
    return period_key(previous, anchor, tz) != period_key(current, anchor, tz)
