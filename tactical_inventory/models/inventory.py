"""
Stock Ledger Models
SQLAlchemy model for the per-(code, site) stock record
"""
from sqlalchemy import (
    Column, String, Integer, DateTime, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.sql import func

from tactical_inventory.core.database import Base
from tactical_inventory.schemas.common import SITE_VALUES, StockStatus, sql_in_list


class InventoryItem(Base):
    """
    Inventory Item - Stock Record

    One row per catalog code and site. Stock is split into the new-units
    pool and the recovered-units pool; status is derived from their total
    and the minimum threshold.
    """
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Item ID")
    code = Column(String(50), nullable=False, doc="Catalog code")
    description = Column(String(255), nullable=False, default='', doc="Item description")
    size = Column(String(20), doc="Size classification tag")
    site = Column(String(10), nullable=False, doc="Warehouse site")

    # Quantity Information
    stock_new = Column(Integer, nullable=False, default=0, doc="New units on hand")
    stock_recovered = Column(Integer, nullable=False, default=0, doc="Recovered units on hand")
    stock_min = Column(Integer, nullable=False, default=0, doc="Reorder threshold")
    status = Column(String(20), nullable=False, default=StockStatus.OUT_OF_STOCK.value, doc="Derived stock status")

    # Audit Trail
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint('code', 'site', name='uq_inventory_items_code_site'),
        CheckConstraint("stock_new >= 0", name='stock_new_non_negative'),
        CheckConstraint("stock_recovered >= 0", name='stock_recovered_non_negative'),
        CheckConstraint("stock_min >= 0", name='stock_min_non_negative'),
        CheckConstraint(f"site IN {sql_in_list(SITE_VALUES)}", name='valid_site'),
        CheckConstraint(
            f"status IN {sql_in_list(status.value for status in StockStatus)}",
            name='valid_status'
        ),
        Index('idx_inventory_items_site', 'site'),
    )
