from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional

from zocpos.config import Settings
from zocpos.db import get_db
from zocpos.deps import billing_list_filter, get_settings, parse_id
from zocpos.errors import NotFoundError
from zocpos.models.core import Order
from zocpos.schemas.billing import BillingListFilter, BillingSummary, BillOut, BillPage
from zocpos.services.billing import (
    BILL_STATUS, BILLABLE_STATUSES, ORDER_STATUS_FOR_BILL, _money, compute_bill, render_receipt,
)
from zocpos.services.listing import clamp_page, paginate, search_clause, strict_window, window_clauses
from zocpos.services.periods import store_tz

router = APIRouter(prefix="/billing", tags=["billing"])


def _get_bill_or_404(db: Session, order_id: str) -> BillOut:
    o = db.get(Order, parse_id(order_id, "order"))
    if not o or o.status not in BILLABLE_STATUSES:
        raise NotFoundError("Bill not found")
    return compute_bill(o)


@router.get("", response_model=BillPage)
def list_bills(
    f: BillingListFilter = Depends(billing_list_filter),
    page: int = 1,
    page_size: Optional[int] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Bills derived from completed, paid and refunded orders.

    `summary` covers the whole filtered set, not just the page: paid revenue
    and the amount still awaiting payment.
    """
    q = db.query(Order)
    if f.status:
        q = q.filter(Order.status == ORDER_STATUS_FOR_BILL[f.status])
    else:
        q = q.filter(Order.status.in_(BILLABLE_STATUSES))
    if f.payment_method:
        q = q.filter(Order.payment_method == f.payment_method)
    q = q.filter(*window_clauses(Order.created_at, strict_window(f.date_from, f.date_to, store_tz(settings))))
    if f.search:
        q = q.filter(search_clause(f.search, Order.order_number, Order.customer_name))

    totals = {"paid": Decimal("0"), "pending": Decimal("0")}
    for status, amount in q.with_entities(Order.status, Order.total):
        bill_status = BILL_STATUS[status]
        if bill_status in totals:
            totals[bill_status] += Decimal(str(amount))

    page, page_size = clamp_page(page, page_size, settings)
    rows, total, page_count = paginate(q.order_by(Order.created_at.desc()), page, page_size)
    return BillPage(
        items=[compute_bill(o) for o in rows],
        total=total, page=page, page_size=page_size, page_count=page_count,
        summary=BillingSummary(total_revenue=_money(totals["paid"]), pending_amount=_money(totals["pending"])),
    )


@router.get("/{order_id}", response_model=BillOut)
def get_bill(order_id: str, db: Session = Depends(get_db)):
    return _get_bill_or_404(db, order_id)


@router.get("/{order_id}/receipt", response_class=PlainTextResponse)
def get_receipt(order_id: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    bill = _get_bill_or_404(db, order_id)
    return render_receipt(bill, settings.RESTAURANT_NAME, store_tz(settings))
