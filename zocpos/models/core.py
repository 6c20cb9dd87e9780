from sqlalchemy import (
    String, ForeignKey, Boolean, Numeric, Enum, Text, Integer
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from enum import Enum as PyEnum
from decimal import Decimal
from zocpos.db import Base
from zocpos.models.common import IdMixin, TSMMixin

# ── Enums ───────────────────────────────────────────────────────────────────
class OrderStatus(PyEnum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

# Lifecycle: pending → preparing → ready → completed → paid → refunded.
# Cancel is only reachable before the kitchen has finished.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

SUGGESTED_CATEGORIES = ["Appetizers", "Main Course", "Desserts", "Beverages", "Salads", "Soups", "Sides"]

def _enum_values(enum_cls):
    return [m.value for m in enum_cls]

# ── Menu ────────────────────────────────────────────────────────────────────
class MenuItem(Base, IdMixin, TSMMixin):
    __tablename__ = "menu_items"
    name: Mapped[str] = mapped_column(String(160), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    category: Mapped[str] = mapped_column(String(80), index=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True)

# ── Orders ──────────────────────────────────────────────────────────────────
class Order(Base, IdMixin, TSMMixin):
    __tablename__ = "orders"
    order_number: Mapped[str] = mapped_column(String(20), unique=True)
    customer_name: Mapped[str] = mapped_column(String(160))
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=20, values_callable=_enum_values),
        default=OrderStatus.PENDING, index=True,
    )
    payment_method: Mapped[str | None] = mapped_column(String(40))
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(6, 4), default=Decimal("0"))

    items: Mapped[list["OrderLine"]] = relationship(
        back_populates="order", cascade="all, delete-orphan",
        order_by="OrderLine.position", lazy="selectin",
    )

class OrderLine(Base, IdMixin):
    """Snapshot of a menu item at order time; never follows later menu edits."""
    __tablename__ = "order_lines"
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    menu_item_id: Mapped[str | None] = mapped_column(String(36))
    name: Mapped[str] = mapped_column(String(160), index=True)
    quantity: Mapped[int] = mapped_column(Integer)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    order: Mapped[Order] = relationship(back_populates="items")

# ── Sequences ───────────────────────────────────────────────────────────────
class Counter(Base):
    __tablename__ = "counters"
    ORDERS = "orders"

    name: Mapped[str] = mapped_column(String(40), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, default=0)
