"""
Cyclic Inventory Models
Count tasks with their frozen theoretical snapshot and physical counts
"""
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from tactical_inventory.core.database import Base
from tactical_inventory.schemas.common import SITE_VALUES, CyclicTaskStatus, sql_in_list


class CyclicInventoryTask(Base):
    """Cyclic count task assigned to one site"""
    __tablename__ = "cyclic_inventory_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, doc="Scheduled count date")
    assigned_to = Column(String(10), nullable=False, doc="Site to be counted")
    status = Column(String(20), nullable=False, default=CyclicTaskStatus.PENDING.value)

    # Audit Trail
    created_by = Column(String(100))
    completed_by = Column(String(100))
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    items = relationship("CyclicInventoryItem", back_populates="task", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(f"assigned_to IN {sql_in_list(SITE_VALUES)}", name='valid_site'),
        CheckConstraint(
            f"status IN {sql_in_list(status.value for status in CyclicTaskStatus)}",
            name='valid_status'
        ),
        Index('idx_cyclic_tasks_status_date', 'status', 'date'),
    )


class CyclicInventoryItem(Base):
    """Counted line: theoretical snapshot, physical count and signed difference"""
    __tablename__ = "cyclic_inventory_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("cyclic_inventory_tasks.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False, default='')
    size = Column(String(20))
    theoretical_stock = Column(Integer, nullable=False, default=0)
    physical_count = Column(Integer)
    difference = Column(Integer, doc="physical_count - theoretical_stock")

    task = relationship("CyclicInventoryTask", back_populates="items")

    __table_args__ = (
        CheckConstraint("physical_count IS NULL OR physical_count >= 0", name='physical_count_non_negative'),
    )
