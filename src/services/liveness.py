"""
Liveness tracking for footfall sensors

Liveness is derived at read time from ``last_seen`` and the current instant.
The stored ``status`` only matters when it is ``maintenance``, which sticks
until an ingest or an explicit status change clears it.
"""

from datetime import datetime, timedelta
from typing import Optional

from src.core.config import settings
from src.schemas.device import DeviceState

LIVENESS_WINDOW = timedelta(seconds=settings.liveness_window_seconds)


def is_active(last_seen: Optional[datetime], now: datetime,
              window: timedelta = LIVENESS_WINDOW) -> bool:
    """A device is active iff it was seen within the liveness window"""
    if last_seen is None:
        return False
    return now - last_seen <= window


def effective_status(stored_status: Optional[str], last_seen: Optional[datetime],
                     now: datetime, window: timedelta = LIVENESS_WINDOW) -> DeviceState:
    """Status as reported to callers"""
    if stored_status == DeviceState.MAINTENANCE.value:
        return DeviceState.MAINTENANCE
    if is_active(last_seen, now, window):
        return DeviceState.ACTIVE
    return DeviceState.INACTIVE


def _plural(amount: int, unit: str, single: str) -> str:
    return single if amount == 1 else f"{amount} {unit}s"


def humanize_delta(delta: timedelta) -> str:
    """Relative duration in words, e.g. '5 minutes' or 'an hour'"""
    seconds = abs(delta.total_seconds())
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    if minutes < 45:
        return _plural(round(minutes), "minute", "a minute")
    if minutes < 90:
        return "an hour"
    if hours < 22:
        return _plural(round(hours), "hour", "an hour")
    if hours < 36:
        return "a day"
    if days < 26:
        return _plural(round(days), "day", "a day")
    if days < 45:
        return "a month"
    if days < 320:
        return _plural(round(days / 30.4), "month", "a month")
    if days < 548:
        return "a year"
    return _plural(round(days / 365.25), "year", "a year")


def time_since_last_seen(last_seen: Optional[datetime], now: datetime) -> Optional[str]:
    if last_seen is None:
        return None
    delta = now - last_seen
    words = humanize_delta(delta)
    if delta < timedelta(0):
        return f"in {words}"
    return f"{words} ago"
