import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from zocpos.config import Settings

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TICK = timedelta(microseconds=1)


def store_tz(settings: Settings) -> ZoneInfo:
    return ZoneInfo(settings.TZ)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_time(dt: datetime, tz: ZoneInfo) -> datetime:
    return as_utc(dt).astimezone(tz)


def parse_bound(value: str, tz: ZoneInfo, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime into an aware UTC datetime.

    A bare date expands to the first (or, with ``end_of_day``, the last)
    instant of that day in the store timezone. Naive datetimes are read as
    store-local. Raises ``ValueError`` for anything unparseable.
    """
    raw = value.strip()
    if _DATE_ONLY.match(raw):
        day = date.fromisoformat(raw)
        return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=tz).astimezone(timezone.utc)
    dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class Window:
    """Inclusive ``[start, end]`` span of UTC instants."""
    start: datetime
    end: datetime

    @property
    def length(self) -> timedelta:
        return self.end - self.start + _TICK

    def previous(self) -> Optional["Window"]:
        """The window of equal length ending just before this one starts.

        None when that window would fall before ``datetime.min``.
        """
        try:
            return Window(self.start - self.length, self.start - _TICK)
        except OverflowError:
            return None


def day_window(day: date, tz: ZoneInfo) -> Window:
    start = datetime.combine(day, time.min, tzinfo=tz)
    return Window(start.astimezone(timezone.utc),
                  (start + timedelta(days=1)).astimezone(timezone.utc) - _TICK)


def resolve_window(date_from: Optional[str], date_to: Optional[str], tz: ZoneInfo,
                   default_days: int, now: Optional[datetime] = None) -> Optional[Window]:
    """Turn raw query bounds into a window.

    Missing ``date_to`` means now; missing ``date_from`` means ``default_days``
    before ``date_to``. Returns None for malformed or inverted bounds, which
    callers treat as an empty range.
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)
    try:
        end = parse_bound(date_to, tz, end_of_day=True) if date_to else now
        start = parse_bound(date_from, tz) if date_from else end - timedelta(days=default_days)
    except (ValueError, OverflowError):
        return None
    if start > end:
        return None
    return Window(start, end)
