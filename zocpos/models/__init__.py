# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    OrderStatus, ALLOWED_TRANSITIONS, SUGGESTED_CATEGORIES,
    MenuItem, Order, OrderLine, Counter,
)

__all__ = [
    "OrderStatus", "ALLOWED_TRANSITIONS", "SUGGESTED_CATEGORIES",
    "MenuItem", "Order", "OrderLine", "Counter",
]
