"""Cyclic inventory schemas"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
import datetime as dt

from .common import Site, CyclicTaskStatus


class CyclicLine(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    description: str = Field(default="", max_length=255)
    size: Optional[str] = Field(None, max_length=20)


class CyclicTaskCreate(BaseModel):
    date: dt.date
    site: Site
    lines: List[CyclicLine] = Field(default_factory=list, alias="items")

    model_config = {"populate_by_name": True}

    @field_validator("site", mode="before")
    @classmethod
    def parse_site(cls, v):
        return Site.parse(v)


class CountEntry(BaseModel):
    line_id: int
    physical_count: int


class CompleteTaskRequest(BaseModel):
    counts: List[CountEntry] = []


class CyclicItemOut(BaseModel):
    id: int
    code: str
    description: str = ""
    size: Optional[str] = None
    theoretical_stock: int
    physical_count: Optional[int] = None
    difference: Optional[int] = None


class CyclicTaskOut(BaseModel):
    id: int
    date: dt.date
    site: Site
    status: CyclicTaskStatus
    created_by: Optional[str] = None
    completed_by: Optional[str] = None
    completed_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    items: List[CyclicItemOut] = []


class CyclicStats(BaseModel):
    total_tasks: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0
    today_pending: int = 0
    tasks_with_differences: int = 0


class CountUpdate(BaseModel):
    physical_count: int
