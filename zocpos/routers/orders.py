import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from zocpos.config import Settings
from zocpos.db import get_db
from zocpos.deps import get_settings, order_list_filter, parse_id
from zocpos.errors import NotFoundError
from zocpos.models.core import Order
from zocpos.schemas.common import Msg, Page
from zocpos.schemas.orders import OrderIn, OrderListFilter, OrderOut, OrderStatusCounts, OrderUpdate
from zocpos.services import ordering
from zocpos.services.listing import clamp_page, paginate, search_clause, strict_window, window_clauses
from zocpos.services.periods import day_window, local_time, store_tz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _filtered(db: Session, f: OrderListFilter, settings: Settings):
    q = db.query(Order)
    if f.status:
        q = q.filter(Order.status == f.status)
    if f.payment_method:
        q = q.filter(Order.payment_method == f.payment_method)
    q = q.filter(*window_clauses(Order.created_at, strict_window(f.date_from, f.date_to, store_tz(settings))))
    if f.search:
        q = q.filter(search_clause(f.search, Order.order_number, Order.customer_name))
    return q.order_by(Order.created_at.desc(), Order.order_number.desc())


def _get_or_404(db: Session, order_id: str) -> Order:
    o = db.get(Order, parse_id(order_id, "order"))
    if not o:
        raise NotFoundError("Order not found")
    return o


@router.get("", response_model=Page[OrderOut])
def list_orders(
    f: OrderListFilter = Depends(order_list_filter),
    page: int = 1,
    page_size: Optional[int] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    List orders (paged), newest first.

    Query params:
      - status, paymentMethod: exact match ("all" disables)
      - dateFrom / dateTo:     inclusive ISO dates or datetimes
      - search:                substring of order number or customer name
      - page (1-based), pageSize
    """
    page, page_size = clamp_page(page, page_size, settings)
    rows, total, page_count = paginate(_filtered(db, f, settings), page, page_size)
    return Page[OrderOut](
        items=[OrderOut.model_validate(o) for o in rows],
        total=total, page=page, page_size=page_size, page_count=page_count,
    )


@router.post("", response_model=OrderOut, status_code=201)
def create_order(body: OrderIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return ordering.create_order(db, body, settings)


@router.get("/status", response_model=OrderStatusCounts)
def order_status_counts(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    tz = store_tz(settings)
    today = day_window(local_time(datetime.now(tz), tz).date(), tz)
    return OrderStatusCounts(**ordering.status_counts(db, today))


@router.get("/export")
def export_orders(
    f: OrderListFilter = Depends(order_list_filter),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = ordering.export_csv(_filtered(db, f, settings).all(), store_tz(settings))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders-export.csv"'},
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, order_id)


@router.patch("/{order_id}", response_model=OrderOut)
def update_order(order_id: str, body: OrderUpdate, db: Session = Depends(get_db)):
    o = _get_or_404(db, order_id)
    return ordering.update_order(db, o, body)


@router.delete("/{order_id}", response_model=Msg)
def delete_order(order_id: str, db: Session = Depends(get_db)):
    o = _get_or_404(db, order_id)
    number = o.order_number
    db.delete(o)
    db.commit()
    logger.info("order %s deleted", number)
    return Msg(message="Order deleted successfully")
