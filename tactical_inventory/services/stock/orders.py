"""
Order Service
Supplier purchase orders; ordering does not touch the stock ledger
"""
from decimal import Decimal
from typing import List, Sequence

from tactical_inventory.core.logging import get_logger
from tactical_inventory.schemas.common import OrderStatus
from tactical_inventory.schemas.orders import OrderCreate, OrderLine, OrderOut
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import utcnow
from .stock_rules import validate_lines

logger = get_logger("business")

CENTS = Decimal("0.01")


def format_order_number(order_id: int) -> str:
    return f"PED-{order_id:04d}"


def order_total(lines: Sequence[OrderLine]) -> Decimal:
    """Sum of quantity times unit price, rounded to cents"""
    total = sum((line.quantity * line.unit_price for line in lines), Decimal("0"))
    return total.quantize(CENTS)


class OrderService(LedgerService):
    """Purchase order creation and listing"""

    def create_order(self, data: OrderCreate) -> OrderOut:
        """
        Create the header and its lines in one transaction

        The order number is derived from the generated id inside the same
        transaction, so two concurrent orders never share a number.
        """
        validate_lines(data.lines)
        total = order_total(data.lines)
        now = utcnow()

        with self.adapter.transaction() as tx:
            order_id = tx.insert("orders", {
                "date": data.date,
                "supplier": data.supplier or None,
                "status": OrderStatus.PENDING.value,
                "total_amount": total,
                "created_by": self.actor,
                "created_at": now,
                "updated_at": now,
            })
            order_number = format_order_number(order_id)
            tx.execute("UPDATE orders SET order_number = ? WHERE id = ?", [order_number, order_id])

            for line in data.lines:
                tx.insert("order_items", {
                    "order_id": order_id,
                    "code": line.code,
                    "description": line.description or "",
                    "qty": line.quantity,
                    "unit_price": line.unit_price.quantize(CENTS),
                })

        logger.info(f"Order {order_number} created for {data.supplier or 'no supplier'}: {total}")
        self._publish(events.ORDER_CREATED, [], order_id, order_number=order_number)
        return self.get_order(order_id)

    def get_order(self, order_id: int) -> OrderOut:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "orders", order_id, "Order")
            lines = self._fetch_lines(tx, "order_items", "order_id", order_id)
        return OrderOut.model_validate({**header, "items": lines})

    def list_orders(self) -> List[OrderOut]:
        with self.adapter.transaction() as tx:
            headers = self._attach_lines(
                tx,
                tx.execute("SELECT * FROM orders ORDER BY date DESC, id DESC").rows,
                "order_items",
                "order_id",
            )
        return [OrderOut.model_validate(header) for header in headers]
