from pydantic import Field, field_validator
from typing import Optional

from zocpos.schemas.common import ApiModel, UtcDatetime

def _strip(v: Optional[str]) -> Optional[str]:
    return v.strip() if isinstance(v, str) else v

class MenuItemIn(ApiModel):
    name: str = Field(min_length=1, max_length=160)
    description: Optional[str] = None
    price: float = Field(gt=0, allow_inf_nan=False)
    category: str = Field(min_length=1, max_length=80)
    available: bool = True

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

class MenuItemUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    category: Optional[str] = Field(default=None, min_length=1, max_length=80)
    available: Optional[bool] = None

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

class MenuItemOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    category: str
    available: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime

class MenuItemListFilter(ApiModel):
    category: Optional[str] = None
    available: Optional[bool] = None
    search: Optional[str] = Field(default=None, max_length=100)
