"""
Movement Models
Header and line tables for entries, dispatches and recoveries
"""
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from tactical_inventory.core.database import Base
from tactical_inventory.schemas.common import (
    DESTINATION_VALUES, SITE_VALUES, DispatchStatus, sql_in_list
)


class Entry(Base):
    """Entry - inbound receipt header"""
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, doc="Receipt date")
    site = Column(String(10), nullable=False, doc="Receiving site")
    total_items = Column(Integer, nullable=False, default=0, doc="Sum of line quantities")

    # Audit Trail
    created_by = Column(String(100), doc="Created by user")
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    items = relationship("EntryItem", back_populates="entry", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(f"site IN {sql_in_list(SITE_VALUES)}", name='valid_site'),
        Index('idx_entries_site_date', 'site', 'date'),
    )


class EntryItem(Base):
    """Entry line"""
    __tablename__ = "entry_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(Integer, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False, default='')
    size = Column(String(20))
    qty = Column(Integer, nullable=False)

    entry = relationship("Entry", back_populates="items")

    __table_args__ = (
        CheckConstraint("qty > 0", name='qty_positive'),
    )


class Dispatch(Base):
    """Dispatch - outbound issuance to an employee"""
    __tablename__ = "dispatches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, doc="Issue date")
    employee_id = Column(String(50), nullable=False, doc="Receiving employee reference")
    employee_name = Column(String(150), nullable=False, doc="Receiving employee name")
    service = Column(String(100), nullable=False, default='', doc="Service the employee belongs to")
    site = Column(String(10), nullable=False, doc="Issuing site")
    dispatch_type = Column(String(30), nullable=False, default='Normal', doc="Dispatch type")
    status = Column(String(20), nullable=False, default=DispatchStatus.PENDING.value)
    total_items = Column(Integer, nullable=False, default=0)

    # Audit Trail
    created_by = Column(String(100))
    approved_by = Column(String(100))
    approved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    items = relationship("DispatchItem", back_populates="dispatch", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(f"site IN {sql_in_list(SITE_VALUES)}", name='valid_site'),
        CheckConstraint(
            f"status IN {sql_in_list(status.value for status in DispatchStatus)}",
            name='valid_status'
        ),
        Index('idx_dispatches_site_date', 'site', 'date'),
    )


class DispatchItem(Base):
    """Dispatch line"""
    __tablename__ = "dispatch_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dispatch_id = Column(Integer, ForeignKey("dispatches.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False, default='')
    size = Column(String(20))
    qty = Column(Integer, nullable=False)
    allocated = Column(Integer, nullable=False, default=0, doc="Units actually taken from stock")

    dispatch = relationship("Dispatch", back_populates="items")

    __table_args__ = (
        CheckConstraint("qty > 0", name='qty_positive'),
        CheckConstraint("allocated >= 0 AND allocated <= qty", name='allocated_within_qty'),
    )


class Recovery(Base):
    """Recovery - returned equipment header; destinations live on the lines"""
    __tablename__ = "recoveries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    employee_id = Column(String(50), nullable=False)
    employee_name = Column(String(150), nullable=False)
    total_items = Column(Integer, nullable=False, default=0)

    # Audit Trail
    created_by = Column(String(100))
    created_at = Column(DateTime(timezone=True))

    items = relationship("RecoveryItem", back_populates="recovery", cascade="all, delete-orphan")


class RecoveryItem(Base):
    """Recovery line routed to a site or to the discard sink"""
    __tablename__ = "recovery_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recovery_id = Column(Integer, ForeignKey("recoveries.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False, default='')
    size = Column(String(20))
    qty = Column(Integer, nullable=False)
    destination = Column(String(10), nullable=False)

    recovery = relationship("Recovery", back_populates="items")

    __table_args__ = (
        CheckConstraint("qty > 0", name='qty_positive'),
        CheckConstraint(f"destination IN {sql_in_list(DESTINATION_VALUES)}", name='valid_destination'),
        Index('idx_recovery_items_destination', 'destination'),
    )
