"""
Purchase Order Models
Supplier orders raised from reorder suggestions
"""
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Numeric, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from tactical_inventory.core.database import Base
from tactical_inventory.schemas.common import OrderStatus, sql_in_list


class Order(Base):
    """Purchase order header"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(20), unique=True, doc="PED-#### number derived from the id")
    date = Column(Date, nullable=False, doc="Order date")
    supplier = Column(String(150), doc="Supplier name")
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0, doc="Sum of qty * unit price")

    # Audit Trail
    created_by = Column(String(100))
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            f"status IN {sql_in_list(status.value for status in OrderStatus)}",
            name='valid_status'
        ),
        CheckConstraint("total_amount >= 0", name='total_non_negative'),
        Index('idx_orders_date', 'date'),
    )


class OrderItem(Base):
    """Purchase order line"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False, default='')
    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("qty > 0", name='qty_positive'),
        CheckConstraint("unit_price >= 0", name='unit_price_non_negative'),
    )
