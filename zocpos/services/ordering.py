import csv
import io
import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from zocpos.config import Settings
from zocpos.errors import ValidationError
from zocpos.models.common import utcnow
from zocpos.models.core import ALLOWED_TRANSITIONS, Counter, Order, OrderLine, OrderStatus
from zocpos.schemas.orders import OrderIn, OrderLineIn, OrderUpdate
from zocpos.services.billing import _cents
from zocpos.services.periods import local_time

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING)


def next_order_number(db: Session, settings: Settings) -> str:
    """Allocate the next order number inside the caller's transaction.

    The increment is a single UPDATE, so the row lock (or SQLite's write
    lock) is held until the caller commits and no two orders share a value.
    """
    bumped = (
        db.query(Counter)
        .filter(Counter.name == Counter.ORDERS)
        .update({Counter.value: Counter.value + 1}, synchronize_session=False)
    )
    if not bumped:
        raise RuntimeError("order counter is not initialised")
    value = db.query(Counter.value).filter(Counter.name == Counter.ORDERS).scalar()
    return f"{settings.ORDER_NUMBER_PREFIX}-{value:04d}"


def build_lines(items: list[OrderLineIn]) -> tuple[list[OrderLine], Decimal]:
    lines: list[OrderLine] = []
    total = Decimal("0")
    for pos, it in enumerate(items):
        price = _cents(it.price)
        lines.append(OrderLine(
            position=pos,
            menu_item_id=it.menu_item_id,
            name=it.name.strip(),
            quantity=it.quantity,
            price=price,
        ))
        total += price * it.quantity
    return lines, _cents(total)


def create_order(db: Session, body: OrderIn, settings: Settings) -> Order:
    lines, total = build_lines(body.items)
    if body.total is not None and _cents(body.total) != total:
        raise ValidationError(f"total {_cents(body.total)} does not match line items ({total})")

    order = Order(
        order_number=next_order_number(db, settings),
        customer_name=body.customer_name,
        total=total,
        status=OrderStatus.PENDING,
        payment_method=(body.payment_method or "").strip() or None,
        tax_rate=settings.TAX_RATE,
        items=lines,
    )
    db.add(order)
    db.commit()
    logger.info("order %s created for %s (%s)", order.order_number, order.customer_name, total)
    return order


def apply_status(order: Order, new_status: OrderStatus) -> None:
    current = order.status
    if new_status == current:
        return
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            f"cannot move order from '{current.value}' to '{new_status.value}'",
            error_code="INVALID_TRANSITION",
        )
    order.status = new_status
    logger.info("order %s: %s -> %s", order.order_number, current.value, new_status.value)


def update_order(db: Session, order: Order, body: OrderUpdate) -> Order:
    changes = body.model_dump(exclude_unset=True)

    if changes.get("items") is not None:
        if order.status not in EDITABLE_STATUSES:
            raise ValidationError(f"items cannot be changed once an order is '{order.status.value}'")
        order.items, order.total = build_lines(body.items)
    if changes.get("status") is not None:
        apply_status(order, body.status)
    if changes.get("customer_name") is not None:
        order.customer_name = body.customer_name.strip()
    if "payment_method" in changes:
        order.payment_method = (body.payment_method or "").strip() or None

    order.updated_at = utcnow()
    db.commit()
    return order


def status_counts(db: Session, today) -> dict:
    """Live queue counts; completed only counts orders placed today."""
    live = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)
    rows = (
        db.query(Order.status, func.count(Order.id))
        .filter(Order.status.in_(live))
        .group_by(Order.status)
        .all()
    )
    counts = {s.value: 0 for s in live}
    counts.update({status.value: n for status, n in rows})
    counts["completed"] = (
        db.query(func.count(Order.id))
        .filter(
            Order.status == OrderStatus.COMPLETED,
            Order.created_at >= today.start,
            Order.created_at <= today.end,
        )
        .scalar()
    ) or 0
    return counts


def export_csv(orders: list[Order], tz) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Order Number", "Customer", "Items", "Total", "Status", "Date"])
    for o in orders:
        writer.writerow([
            o.order_number,
            o.customer_name,
            "; ".join(f"{l.quantity}x {l.name}" for l in o.items),
            f"{_cents(o.total)}",
            o.status.value,
            local_time(o.created_at, tz).date().isoformat(),
        ])
    return buf.getvalue()
