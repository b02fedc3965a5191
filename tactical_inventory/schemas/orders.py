"""Purchase order schemas"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List
from decimal import Decimal
import datetime as dt

from .common import OrderStatus
from .movements import MovementLine


class OrderLine(MovementLine):
    """Ordered item; ``unitPrice`` on the wire"""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, alias="unitPrice")


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: dt.date
    supplier: Optional[str] = Field(None, max_length=150)
    lines: List[OrderLine] = Field(default_factory=list, alias="items")


class OrderLineOut(BaseModel):
    id: int
    code: str
    description: str = ""
    qty: int
    unit_price: Decimal = Decimal("0")

    @field_serializer("unit_price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)


class OrderOut(BaseModel):
    id: int
    order_number: str
    date: dt.date
    supplier: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    items: List[OrderLineOut] = []

    @field_serializer("total_amount")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)
