from decimal import Decimal, ROUND_HALF_UP
from zoneinfo import ZoneInfo

from zocpos.models.core import Order, OrderStatus
from zocpos.schemas.billing import BillOut
from zocpos.schemas.orders import OrderLineOut
from zocpos.services.periods import local_time

CENT = Decimal("0.01")

# Orders that have a bill, and how the bill reads their status.
BILLABLE_STATUSES = (OrderStatus.COMPLETED, OrderStatus.PAID, OrderStatus.REFUNDED)
BILL_STATUS = {
    OrderStatus.COMPLETED: "pending",
    OrderStatus.PAID: "paid",
    OrderStatus.REFUNDED: "refunded",
}
ORDER_STATUS_FOR_BILL = {v: k for k, v in BILL_STATUS.items()}
DEFAULT_PAYMENT_METHOD = "Cash"

def _cents(x) -> Decimal:
    # use string to avoid float binary artifacts
    return Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP)

def _money(x) -> float:
    return float(_cents(x))

def split_tax(total, tax_rate) -> dict:
    """Split a tax-inclusive total; subtotal + tax always equals total."""
    total = _cents(total)
    rate = Decimal(str(tax_rate or 0))
    subtotal = _cents(total / (1 + rate))
    return {"subtotal": subtotal, "tax": total - subtotal, "total": total}

def compute_bill(order: Order) -> BillOut:
    split = split_tax(order.total, order.tax_rate)
    return BillOut(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        items=[OrderLineOut.model_validate(l) for l in order.items],
        subtotal=float(split["subtotal"]),
        tax=float(split["tax"]),
        tax_rate=float(order.tax_rate or 0),
        total=float(split["total"]),
        payment_method=order.payment_method or DEFAULT_PAYMENT_METHOD,
        status=BILL_STATUS[order.status],
        created_at=order.created_at,
    )

def render_receipt(bill: BillOut, restaurant_name: str, tz: ZoneInfo, width: int = 40) -> str:
    """Plain-text receipt sized for a narrow thermal printer."""
    def row(left: str, right: str) -> str:
        pad = max(width - len(left) - len(right), 1)
        return f"{left}{' ' * pad}{right}"

    rule = "-" * width
    lines = [
        restaurant_name.center(width).rstrip(),
        "Thank you for your order!".center(width).rstrip(),
        "=" * width,
        f"Order #: {bill.order_number}",
        f"Customer: {bill.customer_name}",
        f"Date: {local_time(bill.created_at, tz).strftime('%Y-%m-%d %H:%M')}",
        f"Payment: {bill.payment_method}",
        rule,
    ]
    for item in bill.items:
        lines.append(row(f"{item.quantity}x {item.name}", f"{_cents(item.price * item.quantity)}"))
    lines += [
        rule,
        row("Subtotal:", f"{_cents(bill.subtotal)}"),
        row(f"Tax ({_cents(bill.tax_rate * 100)}%):", f"{_cents(bill.tax)}"),
        row("Total:", f"{_cents(bill.total)}"),
        rule,
        "Thank you for dining with us!".center(width).rstrip(),
        "Visit us again soon!".center(width).rstrip(),
    ]
    return "\n".join(lines) + "\n"
