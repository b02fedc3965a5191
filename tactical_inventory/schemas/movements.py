"""Movement schemas: entries, dispatches and recoveries"""

from pydantic import BaseModel, Field, field_validator, computed_field, ConfigDict
from typing import Optional, List
import datetime as dt

from .common import Site, RecoveryDestination, DispatchStatus


class MovementLine(BaseModel):
    """Item line shared by every movement kind; ``qty`` on the wire"""
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., max_length=50)
    description: str = Field(default="", max_length=255)
    size: Optional[str] = Field(None, max_length=20)
    quantity: int = Field(..., alias="qty")

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()


class RecoveryLine(MovementLine):
    destination: RecoveryDestination

    @field_validator("destination", mode="before")
    @classmethod
    def parse_destination(cls, v):
        return RecoveryDestination.parse(v)


class _SiteBound(BaseModel):
    site: Site

    @field_validator("site", mode="before")
    @classmethod
    def parse_site(cls, v):
        return Site.parse(v)


# Entry Schemas
class EntryCreate(_SiteBound):
    date: dt.date
    lines: List[MovementLine] = Field(default_factory=list, alias="items")

    model_config = ConfigDict(populate_by_name=True)


class EntryUpdate(EntryCreate):
    pass


class EntryLineOut(BaseModel):
    id: int
    code: str
    description: str = ""
    size: Optional[str] = None
    qty: int


class EntryOut(BaseModel):
    id: int
    date: dt.date
    site: Site
    total_items: int
    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    items: List[EntryLineOut] = []


# Dispatch Schemas
class DispatchCreate(_SiteBound):
    model_config = ConfigDict(populate_by_name=True)

    date: dt.date
    employee_id: str = Field(..., min_length=1, max_length=50)
    employee_name: str = Field(..., min_length=1, max_length=150)
    service: str = Field(default="", max_length=100)
    dispatch_type: str = Field(default="Normal", max_length=30)
    lines: List[MovementLine] = Field(default_factory=list, alias="items")


class DispatchUpdate(BaseModel):
    """Replacement lines for a pending dispatch; header fields left as None stay unchanged"""
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[dt.date] = None
    service: Optional[str] = Field(None, max_length=100)
    dispatch_type: Optional[str] = Field(None, max_length=30)
    lines: List[MovementLine] = Field(default_factory=list, alias="items")


class DispatchLineOut(EntryLineOut):
    allocated: int = 0


class DispatchOut(BaseModel):
    id: int
    date: dt.date
    employee_id: str
    employee_name: str
    service: str = ""
    site: Site
    dispatch_type: str = "Normal"
    status: DispatchStatus
    total_items: int
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    items: List[DispatchLineOut] = []


# Recovery Schemas
class RecoveryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: dt.date
    employee_id: str = Field(..., min_length=1, max_length=50)
    employee_name: str = Field(..., min_length=1, max_length=150)
    lines: List[RecoveryLine] = Field(default_factory=list, alias="items")


class RecoveryLineOut(EntryLineOut):
    destination: RecoveryDestination


class RecoveryOut(BaseModel):
    id: int
    date: dt.date
    employee_id: str
    employee_name: str
    total_items: int
    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    items: List[RecoveryLineOut] = []

    @computed_field
    @property
    def has_recovered(self) -> bool:
        """At least one line was credited to a site"""
        return any(not item.destination.is_discard for item in self.items)

    @computed_field
    @property
    def has_discard(self) -> bool:
        """At least one line went to the discard sink"""
        return any(item.destination.is_discard for item in self.items)


# Results
class OversellWarning(BaseModel):
    """Dispatch line that asked for more than the site had on hand"""
    code: str
    site: Site
    requested: int
    available: int

    @computed_field
    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class MovementResult(BaseModel):
    movement_id: int
    warnings: List[OversellWarning] = []
