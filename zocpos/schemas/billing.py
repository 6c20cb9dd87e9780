from pydantic import Field
from typing import Literal, Optional

from zocpos.schemas.common import ApiModel, Page, UtcDatetime
from zocpos.schemas.orders import OrderLineOut

BillStatusLiteral = Literal["pending", "paid", "refunded"]

class BillOut(ApiModel):
    id: str
    order_number: str
    customer_name: str
    items: list[OrderLineOut]
    subtotal: float
    tax: float
    tax_rate: float
    total: float
    payment_method: str
    status: BillStatusLiteral
    created_at: UtcDatetime

class BillingSummary(ApiModel):
    total_revenue: float
    pending_amount: float

class BillPage(Page[BillOut]):
    summary: BillingSummary

class BillingListFilter(ApiModel):
    status: Optional[BillStatusLiteral] = None
    payment_method: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    search: Optional[str] = Field(default=None, max_length=100)
