"""Stock ledger schemas"""

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, Any, Dict
from datetime import datetime

from .common import Site, StockStatus, derive_status


class StockRecord(BaseModel):
    """Authoritative per-(code, site) stock state"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    site: Site
    description: str = ""
    size: Optional[str] = None
    stock_new: int = 0
    stock_recovered: int = 0
    stock_min: int = 0
    status: StockStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return self.stock_new + self.stock_recovered

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "StockRecord":
        """Build a record from a raw row, re-deriving the status from the pools"""
        data = dict(row)
        data["status"] = derive_status(
            int(data.get("stock_new") or 0) + int(data.get("stock_recovered") or 0),
            int(data.get("stock_min") or 0),
        )
        return cls.model_validate(data)


class ItemBase(BaseModel):
    description: str = Field(default="", max_length=255)
    size: Optional[str] = Field(None, max_length=20)
    stock_min: int = Field(default=0, ge=0)


class ItemCreate(ItemBase):
    code: str = Field(..., min_length=1, max_length=50)

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()


class ItemUpdate(BaseModel):
    description: Optional[str] = Field(None, max_length=255)
    size: Optional[str] = Field(None, max_length=20)
    stock_min: Optional[int] = Field(None, ge=0)


class ReorderSuggestion(BaseModel):
    code: str
    description: str = ""
    size: Optional[str] = None
    site: Site
    stock_new: int
    stock_recovered: int
    stock_min: int
    total_stock: int
    suggested_qty: int
