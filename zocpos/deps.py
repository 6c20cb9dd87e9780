import uuid
from typing import Optional

from fastapi import Query, Request
from pydantic import ValidationError as PydanticValidationError

from zocpos.config import Settings
from zocpos.errors import ValidationError
from zocpos.schemas.analytics import AnalyticsFilter
from zocpos.schemas.billing import BillingListFilter
from zocpos.schemas.menu import MenuItemListFilter
from zocpos.schemas.orders import OrderListFilter


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def parse_id(value: str, label: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ValidationError(f"Invalid {label} ID")


def _build(model, **values):
    # query strings are validated here, outside FastAPI's own request validation
    try:
        return model(**values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg')}" if field else str(first.get("msg")))


def analytics_filter(
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    order_status: Optional[str] = Query(None, alias="orderStatus"),
    category: Optional[str] = Query(None),
    min_amount: Optional[str] = Query(None, alias="minAmount"),
    max_amount: Optional[str] = Query(None, alias="maxAmount"),
) -> AnalyticsFilter:
    return _build(
        AnalyticsFilter,
        date_from=date_from, date_to=date_to, payment_method=payment_method,
        order_status=order_status, category=category, min_amount=min_amount, max_amount=max_amount,
    )


def order_list_filter(
    status: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    search: Optional[str] = Query(None),
) -> OrderListFilter:
    return _build(
        OrderListFilter,
        status=None if status in (None, "", "all") else status,
        payment_method=None if payment_method in (None, "", "all") else payment_method,
        date_from=date_from, date_to=date_to, search=search or None,
    )


def menu_item_list_filter(
    category: Optional[str] = Query(None),
    available: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
) -> MenuItemListFilter:
    return _build(
        MenuItemListFilter,
        category=None if category in (None, "", "all") else category,
        available=available, search=search or None,
    )


def billing_list_filter(
    status: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    search: Optional[str] = Query(None),
) -> BillingListFilter:
    return _build(
        BillingListFilter,
        status=None if status in (None, "", "all") else status,
        payment_method=None if payment_method in (None, "", "all") else payment_method,
        date_from=date_from, date_to=date_to, search=search or None,
    )
