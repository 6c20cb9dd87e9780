import math
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query

from zocpos.config import Settings
from zocpos.errors import ValidationError
from zocpos.services.periods import Window, parse_bound


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(term: str, *columns):
    """Case-insensitive substring match of ``term`` against any of ``columns``."""
    pattern = f"%{escape_like(term.strip())}%"
    return or_(*(col.ilike(pattern, escape="\\") for col in columns))


def strict_window(date_from: Optional[str], date_to: Optional[str], tz) -> Optional[Window]:
    """Like ``resolve_window`` but without defaults, and malformed dates are a 400."""
    if not date_from and not date_to:
        return None
    try:
        start = parse_bound(date_from, tz) if date_from else None
        end = parse_bound(date_to, tz, end_of_day=True) if date_to else None
    except (ValueError, OverflowError):
        raise ValidationError("invalid date filter")
    return Window(start, end)


def window_clauses(column, window: Optional[Window]) -> list:
    if window is None:
        return []
    out = []
    if window.start is not None:
        out.append(column >= window.start)
    if window.end is not None:
        out.append(column <= window.end)
    return out


def clamp_page(page: int, page_size: Optional[int], settings: Settings) -> tuple[int, int]:
    if page < 1:
        page = 1
    if not page_size or page_size < 1:
        page_size = settings.DEFAULT_PAGE_SIZE
    return page, min(page_size, settings.MAX_PAGE_SIZE)


def paginate(q: Query, page: int, page_size: int) -> tuple[list, int, int]:
    """Return ``(rows, total, page_count)``; pages past the end are empty."""
    total = q.order_by(None).count()
    offset = (page - 1) * page_size
    # never bind an offset past the end; huge values overflow SQLite integers
    rows = q.offset(offset).limit(page_size).all() if offset < total else []
    page_count = math.ceil(total / page_size) if total else 0
    return rows, total, page_count
