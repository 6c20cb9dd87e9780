from decimal import Decimal, InvalidOperation
from pydantic import Field, field_validator
from typing import Optional

from zocpos.models.core import OrderStatus
from zocpos.schemas.common import ApiModel

ALL = "all"

class AnalyticsFilter(ApiModel):
    """Query-string filter for the analytics report.

    Dates stay as raw strings: a malformed date narrows the report to an
    empty window instead of failing the request.
    """
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    payment_method: Optional[str] = Field(default=None, max_length=40)
    order_status: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=80)
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    @field_validator("min_amount", "max_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        # non-numeric bounds are ignored, not rejected
        if v is None or isinstance(v, Decimal):
            return v
        try:
            amount = Decimal(str(v).strip())
        except InvalidOperation:
            return None
        return amount if amount.is_finite() else None

    @field_validator("order_status")
    @classmethod
    def known_status(cls, v):
        if v is None or v == ALL:
            return v
        try:
            OrderStatus(v)
        except ValueError:
            raise ValueError(f"unknown order status '{v}'")
        return v

    @field_validator("payment_method", "category")
    @classmethod
    def blank_is_all(cls, v):
        if v is None or not v.strip() or v == ALL:
            return None
        return v.strip()

    def status_filter(self) -> Optional[OrderStatus]:
        if self.order_status in (None, ALL):
            return None
        return OrderStatus(self.order_status)

class DailyRevenue(ApiModel):
    date: str
    revenue: float
    orders: int

class TopMenuItem(ApiModel):
    name: str
    orders: int
    revenue: float

class PaymentMethodShare(ApiModel):
    method: str
    count: int
    percentage: float

class HourlyOrders(ApiModel):
    hour: str
    orders: int

class AnalyticsSummary(ApiModel):
    total_revenue: float
    total_orders: int
    average_order_value: float
    revenue_growth: float
    orders_growth: float

class FilterOptions(ApiModel):
    categories: list[str]
    payment_methods: list[str]
    statuses: list[str]

class AnalyticsOut(ApiModel):
    daily_revenue: list[DailyRevenue]
    top_menu_items: list[TopMenuItem]
    payment_methods: list[PaymentMethodShare]
    hourly_orders: list[HourlyOrders]
    summary: AnalyticsSummary
    filter_options: FilterOptions

# ── Dashboard ───────────────────────────────────────────────────────────────
class DashboardMetrics(ApiModel):
    total_sales: float
    total_orders: int
    average_order: float
    menu_items: int
    sales_growth: float
    orders_growth: float
    average_growth: float
    items_growth: int

class SalesPoint(ApiModel):
    date: str
    day: str
    sales: float

class CategoryShare(ApiModel):
    name: str
    value: float

class DashboardCharts(ApiModel):
    sales: list[SalesPoint]
    categories: list[CategoryShare]
