# usopen_live/utils/time_utils.py
import math
import time
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import List, Optional, Union
from zoneinfo import ZoneInfo

DEFAULT_HOME_TIMEZONE = "America/New_York"

TimezoneLike = Union[str, ZoneInfo]


@lru_cache(maxsize=16)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def get_zone(tz: TimezoneLike = DEFAULT_HOME_TIMEZONE) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else _zone(tz)


def parse_utc_timestamp(value: str) -> datetime:
    """Parses an ISO 8601 timestamp from the feed into an aware UTC datetime.

    The feed emits ``2025-08-30T15:00Z`` style strings; naive values are
    taken to be UTC. Raises ValueError on anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a timestamp: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def convert_utc_to_home(
    value: Union[str, datetime], tz: TimezoneLike = DEFAULT_HOME_TIMEZONE
) -> datetime:
    """Converts a UTC timestamp (string or datetime) to the home timezone."""
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        moment = parse_utc_timestamp(value)
    return moment.astimezone(get_zone(tz))


def is_same_home_day(
    utc_iso: Optional[str], date_iso: Optional[str], tz: TimezoneLike = DEFAULT_HOME_TIMEZONE
) -> bool:
    """True when ``utc_iso`` falls on calendar day ``date_iso`` in the home timezone."""
    if not utc_iso or not date_iso:
        return False
    try:
        return convert_utc_to_home(utc_iso, tz).date().isoformat() == date_iso
    except (TypeError, ValueError):
        return False


def current_home_date(
    tz: TimezoneLike = DEFAULT_HOME_TIMEZONE, now: Optional[datetime] = None
) -> str:
    moment = now or datetime.now(timezone.utc)
    return convert_utc_to_home(moment, tz).date().isoformat()


def is_today(
    date_iso: str, tz: TimezoneLike = DEFAULT_HOME_TIMEZONE, now: Optional[datetime] = None
) -> bool:
    return date_iso == current_home_date(tz, now)


def is_today_or_future(
    date_iso: str, tz: TimezoneLike = DEFAULT_HOME_TIMEZONE, now: Optional[datetime] = None
) -> bool:
    try:
        target = date.fromisoformat(date_iso)
    except ValueError:
        return False
    return target >= date.fromisoformat(current_home_date(tz, now))


def tournament_dates(start: date, end: date) -> List[str]:
    """Every calendar day from ``start`` to ``end`` inclusive, as ISO strings."""
    dates = []
    current = start
    while current <= end:
        dates.append(current.isoformat())
        current += timedelta(days=1)
    return dates


def to_yyyymmdd(date_iso: str) -> str:
    return date_iso.replace("-", "")


def cache_buster(window_seconds: int = 5, now: Optional[float] = None) -> int:
    """Index of the current ``window_seconds`` bucket since the epoch."""
    current = time.time() if now is None else now
    return math.floor(current / window_seconds)


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """UTC timestamp formatted like ``2025-08-30T15:00:00.000Z``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_time_for_display(moment: datetime) -> str:
    """e.g. ``2:30 PM``."""
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment.minute:02d} {'AM' if moment.hour < 12 else 'PM'}"


def format_date_for_display(moment: Union[date, datetime]) -> str:
    """e.g. ``Mon, Aug 26``."""
    return f"{moment.strftime('%a, %b')} {moment.day}"


def points_display(points: int) -> str:
    if points == 50:
        return "AD"
    return str(points)
