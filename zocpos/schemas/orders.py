from pydantic import Field, field_validator
from typing import Optional

from zocpos.models.core import OrderStatus
from zocpos.schemas.common import ApiModel, UtcDatetime

class OrderLineIn(ApiModel):
    name: str = Field(min_length=1, max_length=160)
    quantity: int = Field(gt=0)
    price: float = Field(ge=0, allow_inf_nan=False)
    menu_item_id: Optional[str] = None

class OrderLineOut(ApiModel):
    name: str
    quantity: int
    price: float
    menu_item_id: Optional[str] = None

class OrderIn(ApiModel):
    customer_name: str = Field(min_length=1, max_length=160)
    items: list[OrderLineIn] = Field(min_length=1)
    payment_method: Optional[str] = Field(default=None, max_length=40)
    # optional client-side total; must agree with the lines when present
    total: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @field_validator("customer_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

class OrderUpdate(ApiModel):
    status: Optional[OrderStatus] = None
    customer_name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    items: Optional[list[OrderLineIn]] = Field(default=None, min_length=1)
    payment_method: Optional[str] = Field(default=None, max_length=40)

    @field_validator("customer_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

class OrderOut(ApiModel):
    id: str
    order_number: str
    customer_name: str
    items: list[OrderLineOut]
    total: float
    status: OrderStatus
    payment_method: Optional[str] = None
    tax_rate: float
    created_at: UtcDatetime
    updated_at: UtcDatetime

class OrderListFilter(ApiModel):
    status: Optional[OrderStatus] = None
    payment_method: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    search: Optional[str] = Field(default=None, max_length=100)

class OrderStatusCounts(ApiModel):
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    completed: int = 0
