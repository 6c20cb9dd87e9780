"""
Sales reporting engine.

Builds the analytics snapshot for a filter: daily revenue, top items,
payment-method mix, hourly histogram, summary with period-over-period growth,
and the option lists used to populate filter controls. Each metric is its own
grouped query over the same match conditions; rounding is applied only when
the output models are built.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import false, func, select
from sqlalchemy.orm import Session

from zocpos.config import Settings
from zocpos.models.core import MenuItem, Order, OrderLine, OrderStatus
from zocpos.schemas.analytics import (
    AnalyticsFilter, AnalyticsOut, AnalyticsSummary, CategoryShare, DailyRevenue,
    DashboardCharts, DashboardMetrics, FilterOptions, HourlyOrders, PaymentMethodShare,
    SalesPoint, TopMenuItem,
)
from zocpos.services.periods import (
    Window, as_utc, day_window, local_time, resolve_window, store_tz,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
UNKNOWN = "Unknown"
CHART_RANGES = {"1d": 1, "7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_CHART_RANGE = "7d"


def _round(x, places: int = 2) -> float:
    q = Decimal(1).scaleb(-places)
    return float(Decimal(str(x)).quantize(q, rounding=ROUND_HALF_UP))


def _dec(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x or 0))


def growth(current, previous) -> Decimal:
    """Percent change versus the previous period.

    A previous period of zero gives 100 if anything happened now, else 0.
    """
    current, previous = _dec(current), _dec(previous)
    if previous > 0:
        return (current - previous) / previous * 100
    return Decimal(100) if current > 0 else ZERO


# ── Match conditions ────────────────────────────────────────────────────────

def _category_names(category: str):
    return select(MenuItem.name).where(MenuItem.category == category)


def match_conditions(f: AnalyticsFilter, window: Optional[Window]) -> list:
    """SQL conditions on ``Order`` for a filter and a resolved window."""
    if window is None:
        conds = [false()]
    else:
        conds = [Order.created_at >= window.start, Order.created_at <= window.end]

    status = f.status_filter()
    conds.append(Order.status != OrderStatus.CANCELLED if status is None else Order.status == status)

    if f.payment_method:
        conds.append(Order.payment_method == f.payment_method)
    if f.min_amount is not None:
        conds.append(Order.total >= f.min_amount)
    if f.max_amount is not None:
        conds.append(Order.total <= f.max_amount)
    if f.category:
        has_line = (
            select(OrderLine.id)
            .where(OrderLine.order_id == Order.id, OrderLine.name.in_(_category_names(f.category)))
            .exists()
        )
        conds.append(has_line)
    return conds


# ── Metrics ─────────────────────────────────────────────────────────────────

def time_buckets(db: Session, conds: list, tz) -> tuple[list[DailyRevenue], list[HourlyOrders]]:
    """Bucket matched orders by store-local day (sparse) and hour (all 24)."""
    daily: dict[date, list] = {}
    hourly = [0] * 24
    for created_at, total in db.query(Order.created_at, Order.total).filter(*conds):
        local = local_time(created_at, tz)
        bucket = daily.setdefault(local.date(), [ZERO, 0])
        bucket[0] += _dec(total)
        bucket[1] += 1
        hourly[local.hour] += 1

    daily_out = [
        DailyRevenue(date=day.isoformat(), revenue=_round(revenue), orders=n)
        for day, (revenue, n) in sorted(daily.items())
    ]
    hourly_out = [HourlyOrders(hour=f"{h:02d}:00", orders=n) for h, n in enumerate(hourly)]
    return daily_out, hourly_out


def top_menu_items(db: Session, conds: list, category: Optional[str], limit: int) -> list[TopMenuItem]:
    qty = func.sum(OrderLine.quantity)
    revenue = func.sum(OrderLine.quantity * OrderLine.price)
    q = (
        db.query(OrderLine.name, qty, revenue)
        .join(Order, OrderLine.order_id == Order.id)
        .filter(*conds)
    )
    if category:
        q = q.filter(OrderLine.name.in_(_category_names(category)))
    rows = q.group_by(OrderLine.name).order_by(qty.desc()).limit(limit).all()
    return [TopMenuItem(name=name, orders=int(n or 0), revenue=_round(rev or 0)) for name, n, rev in rows]


def payment_methods(db: Session, conds: list) -> list[PaymentMethodShare]:
    rows = (
        db.query(Order.payment_method, func.count(Order.id))
        .filter(*conds)
        .group_by(Order.payment_method)
        .all()
    )
    counts: dict[str, int] = {}
    for method, n in rows:
        key = method or UNKNOWN
        counts[key] = counts.get(key, 0) + n
    total = sum(counts.values())
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        PaymentMethodShare(
            method=method,
            count=n,
            percentage=_round(Decimal(n) * 100 / total, 1) if total else 0.0,
        )
        for method, n in ranked
    ]


def totals(db: Session, conds: list) -> tuple[Decimal, int]:
    revenue, n = db.query(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).filter(*conds).one()
    return _dec(revenue), int(n or 0)


def summary(db: Session, f: AnalyticsFilter, window: Optional[Window], conds: list) -> AnalyticsSummary:
    revenue, n = totals(db, conds)
    prev = window.previous() if window is not None else None
    if prev is None:
        prev_revenue, prev_n = ZERO, 0
    else:
        prev_revenue, prev_n = totals(db, match_conditions(f, prev))
    return AnalyticsSummary(
        total_revenue=_round(revenue),
        total_orders=n,
        average_order_value=_round(revenue / n if n else ZERO),
        revenue_growth=_round(growth(revenue, prev_revenue), 1),
        orders_growth=_round(growth(n, prev_n), 1),
    )


def filter_options(db: Session) -> FilterOptions:
    categories = [c for (c,) in db.query(MenuItem.category).distinct() if c]
    methods = [m for (m,) in db.query(Order.payment_method).distinct() if m]
    statuses = [s.value for (s,) in db.query(Order.status).distinct() if s]
    return FilterOptions(categories=sorted(categories), payment_methods=sorted(methods), statuses=sorted(statuses))


def build_report(db: Session, f: AnalyticsFilter, settings: Settings,
                 now: Optional[datetime] = None) -> AnalyticsOut:
    tz = store_tz(settings)
    window = resolve_window(f.date_from, f.date_to, tz, settings.ANALYTICS_DEFAULT_DAYS, now)
    if window is None:
        logger.info("analytics: unusable date range %r..%r, reporting empty window", f.date_from, f.date_to)
    else:
        logger.debug("analytics window %s .. %s filters=%s", window.start, window.end,
                     f.model_dump(exclude_none=True))

    conds = match_conditions(f, window)
    daily, hourly = time_buckets(db, conds, tz)
    return AnalyticsOut(
        daily_revenue=daily,
        top_menu_items=top_menu_items(db, conds, f.category, settings.TOP_ITEMS_LIMIT),
        payment_methods=payment_methods(db, conds),
        hourly_orders=hourly,
        summary=summary(db, f, window, conds),
        filter_options=filter_options(db),
    )


# ── Dashboard ───────────────────────────────────────────────────────────────

def _not_cancelled(window: Window) -> list:
    return [Order.created_at >= window.start, Order.created_at <= window.end,
            Order.status != OrderStatus.CANCELLED]


def dashboard_metrics(db: Session, settings: Settings, now: Optional[datetime] = None) -> DashboardMetrics:
    """Today against yesterday, in the store's calendar."""
    tz = store_tz(settings)
    today = day_window(local_time(now or datetime.now(tz), tz).date(), tz)
    yesterday = today.previous()

    sales, n = totals(db, _not_cancelled(today))
    prev_sales, prev_n = totals(db, _not_cancelled(yesterday))
    avg = sales / n if n else ZERO
    prev_avg = prev_sales / prev_n if prev_n else ZERO

    available = db.query(func.count(MenuItem.id)).filter(MenuItem.available.is_(True)).scalar() or 0
    new_today = (
        db.query(func.count(MenuItem.id))
        .filter(MenuItem.created_at >= today.start, MenuItem.created_at <= today.end)
        .scalar()
    ) or 0

    return DashboardMetrics(
        total_sales=_round(sales),
        total_orders=n,
        average_order=_round(avg),
        menu_items=available,
        sales_growth=_round(growth(sales, prev_sales), 1),
        orders_growth=_round(growth(n, prev_n), 1),
        average_growth=_round(growth(avg, prev_avg), 1),
        items_growth=new_today,
    )


def chart_window(range_key: Optional[str], date_from: Optional[str], date_to: Optional[str],
                 tz, now: Optional[datetime] = None) -> Optional[Window]:
    if date_from and date_to:
        return resolve_window(date_from, date_to, tz, 0, now)
    end = as_utc(now) if now else as_utc(datetime.now(tz))
    days = CHART_RANGES.get(range_key or DEFAULT_CHART_RANGE, CHART_RANGES[DEFAULT_CHART_RANGE])
    return Window(end - timedelta(days=days), end)


def dashboard_charts(db: Session, settings: Settings, range_key: Optional[str] = None,
                     date_from: Optional[str] = None, date_to: Optional[str] = None,
                     now: Optional[datetime] = None) -> DashboardCharts:
    tz = store_tz(settings)
    window = chart_window(range_key, date_from, date_to, tz, now)
    conds = [false()] if window is None else _not_cancelled(window)

    per_day: dict[date, Decimal] = {}
    for created_at, total in db.query(Order.created_at, Order.total).filter(*conds):
        day = local_time(created_at, tz).date()
        per_day[day] = per_day.get(day, ZERO) + _dec(total)
    sales = [
        SalesPoint(date=day.isoformat(), day=day.strftime("%a"), sales=_round(amount))
        for day, amount in sorted(per_day.items())
    ]

    # one category per item name so duplicate names don't double-count lines
    catalog = (
        select(MenuItem.name.label("name"), func.min(MenuItem.category).label("category"))
        .group_by(MenuItem.name)
        .subquery()
    )
    rows = (
        db.query(catalog.c.category, func.sum(OrderLine.quantity * OrderLine.price))
        .join(Order, OrderLine.order_id == Order.id)
        .outerjoin(catalog, catalog.c.name == OrderLine.name)
        .filter(*conds)
        .group_by(catalog.c.category)
        .all()
    )
    by_category: dict[str, Decimal] = {}
    for name, v in rows:
        key = name or UNKNOWN
        by_category[key] = by_category.get(key, ZERO) + _dec(v)
    grand = sum(by_category.values(), ZERO)
    shares = [
        CategoryShare(name=name, value=_round(v * 100 / grand, 1))
        for name, v in sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
        if grand > 0
    ]
    return DashboardCharts(sales=sales, categories=shares)
