# test_periods.py
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from zocpos.errors import ValidationError
from zocpos.services.listing import escape_like, strict_window
from zocpos.services.periods import Window, day_window, parse_bound, resolve_window

UTC = ZoneInfo("UTC")
KOLKATA = ZoneInfo("Asia/Kolkata")
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_date_only_bounds_cover_whole_day():
    start = parse_bound("2024-01-31", UTC)
    end = parse_bound("2024-01-31", UTC, end_of_day=True)
    assert start == datetime(2024, 1, 31, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)


def test_bounds_follow_store_timezone():
    assert parse_bound("2024-01-02", KOLKATA) == datetime(2024, 1, 1, 18, 30, tzinfo=timezone.utc)
    # naive datetimes are store-local, explicit offsets are respected
    assert parse_bound("2024-01-02T10:00:00", KOLKATA) == datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc)
    assert parse_bound("2024-01-02T10:00:00Z", KOLKATA) == datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", ["", "soon", "2024-02-30", "31/01/2024"])
def test_parse_bound_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_bound(raw, UTC)


def test_resolve_window_defaults():
    w = resolve_window(None, None, UTC, 30, NOW)
    assert w == Window(NOW - timedelta(days=30), NOW)

    w = resolve_window(None, "2024-01-31", UTC, 30, NOW)
    assert w.end.date() == date(2024, 1, 31)
    assert w.start == w.end - timedelta(days=30)


def test_resolve_window_rejects_bad_input():
    assert resolve_window("nope", None, UTC, 30, NOW) is None
    assert resolve_window("2024-02-01", "2024-01-01", UTC, 30, NOW) is None


def test_previous_window_has_equal_length():
    january = resolve_window("2024-01-01", "2024-01-31", UTC, 30, NOW)
    prev = january.previous()
    assert prev.length == january.length == timedelta(days=31)
    assert prev.start == datetime(2023, 12, 1, tzinfo=timezone.utc)
    assert prev.end < january.start


def test_day_window_in_timezone():
    w = day_window(date(2024, 1, 2), KOLKATA)
    assert w.start == datetime(2024, 1, 1, 18, 30, tzinfo=timezone.utc)
    assert w.length == timedelta(days=1)
    assert w.previous() == day_window(date(2024, 1, 1), KOLKATA)


def test_strict_window():
    assert strict_window(None, None, UTC) is None
    w = strict_window("2024-01-01", None, UTC)
    assert w.start == datetime(2024, 1, 1, tzinfo=timezone.utc) and w.end is None
    with pytest.raises(ValidationError):
        strict_window(None, "later", UTC)


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_windows_near_the_calendar_start():
    first = resolve_window("0001-01-01", "0001-01-02", UTC, 30, NOW)
    assert first.start == datetime.min.replace(tzinfo=timezone.utc)
    assert first.previous() is None

    assert resolve_window(None, "0001-01-05", UTC, 30, NOW) is None
    # local midnight on day one is before datetime.min in UTC
    assert resolve_window("0001-01-01", "0001-01-02", KOLKATA, 30, NOW) is None
    with pytest.raises(ValidationError):
        strict_window("0001-01-01", None, KOLKATA)
