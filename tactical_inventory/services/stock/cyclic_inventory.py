"""
Cyclic Inventory Service
Count tasks comparing a frozen theoretical snapshot against physical counts

Counting never writes to the stock ledger; differences are left for a
person to act on.
"""
from datetime import date
from typing import List, Optional, Sequence

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.exceptions import (
    IncompleteCountError, InvalidStateError, NotFoundError, ValidationError
)
from tactical_inventory.schemas.common import CyclicTaskStatus, Site
from tactical_inventory.schemas.cyclic import (
    CountEntry, CyclicItemOut, CyclicStats, CyclicTaskCreate, CyclicTaskOut
)
from tactical_inventory.services.db_adapters import TransactionContext
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import StockLedger, utcnow

logger = get_logger("business")


class CyclicInventoryService(LedgerService):
    """
    Cyclic Counting functionality
    Task creation with stock snapshot, count recording and completion
    """

    def create_task(self, data: CyclicTaskCreate) -> int:
        if not data.lines:
            raise ValidationError("At least one item line is required")
        for position, line in enumerate(data.lines, start=1):
            if not line.code.strip():
                raise ValidationError(f"Line {position}: item code is required")

        now = utcnow()
        with self.adapter.transaction() as tx:
            ledger = StockLedger(tx)
            task_id = tx.insert("cyclic_inventory_tasks", {
                "date": data.date,
                "assigned_to": data.site.value,
                "status": CyclicTaskStatus.PENDING.value,
                "created_by": self.actor,
                "created_at": now,
                "updated_at": now,
            })
            for line in data.lines:
                code = line.code.strip()
                record = ledger.get(code, data.site)
                tx.insert("cyclic_inventory_items", {
                    "task_id": task_id,
                    "code": code,
                    "description": line.description or (record.description if record else ""),
                    "size": line.size if line.size is not None else (record.size if record else None),
                    "theoretical_stock": record.total if record else 0,
                })

        logger.info(f"Cyclic task {task_id} created for {data.site.value} with {len(data.lines)} line(s)")
        self._publish(events.CYCLIC_TASK_CREATED, [data.site.value], task_id)
        return task_id

    def record_count(self, task_id: int, line_id: int, physical_count: int) -> CyclicItemOut:
        """Store a physical count and its signed difference against the snapshot"""
        with self.adapter.transaction() as tx:
            header = self._pending_task(tx, task_id)
            item = self._record(tx, task_id, line_id, physical_count)

        self._publish(
            events.CYCLIC_COUNT_RECORDED, [header["assigned_to"]], task_id,
            line_id=line_id, difference=item.difference,
        )
        return item

    def complete_task(
        self,
        task_id: int,
        completed_by: Optional[str] = None,
        counts: Optional[Sequence[CountEntry]] = None,
    ) -> CyclicTaskOut:
        """
        Pending -> Completed

        Any ``counts`` given are recorded first, in the same transaction.
        Every line must have a physical count before the task can close.
        """
        with self.adapter.transaction() as tx:
            header = self._pending_task(tx, task_id)
            for entry in counts or ():
                self._record(tx, task_id, entry.line_id, entry.physical_count)

            missing = [
                row["id"] for row in tx.execute(
                    "SELECT id FROM cyclic_inventory_items "
                    "WHERE task_id = ? AND physical_count IS NULL ORDER BY id",
                    [task_id],
                ).rows
            ]
            if missing:
                raise IncompleteCountError(task_id, missing)

            now = utcnow()
            tx.execute(
                "UPDATE cyclic_inventory_tasks SET status = ?, completed_by = ?, completed_at = ?, "
                "updated_at = ? WHERE id = ?",
                [CyclicTaskStatus.COMPLETED.value, completed_by or self.actor, now, now, task_id],
            )

        logger.info(f"Cyclic task {task_id} completed")
        self._publish(events.CYCLIC_TASK_COMPLETED, [header["assigned_to"]], task_id)
        return self.get_task(task_id)

    def get_task(self, task_id: int) -> CyclicTaskOut:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "cyclic_inventory_tasks", task_id, "Cyclic task")
            lines = self._fetch_lines(tx, "cyclic_inventory_items", "task_id", task_id)
        return self._to_task({**header, "items": lines})

    def list_tasks(
        self, status: Optional[CyclicTaskStatus] = None, site: Optional[Site] = None
    ) -> List[CyclicTaskOut]:
        clauses, params = [], []
        if status is not None:
            clauses.append("status = ?")
            params.append(CyclicTaskStatus(status).value)
        if site is not None:
            clauses.append("assigned_to = ?")
            params.append(Site.parse(site).value)

        sql = "SELECT * FROM cyclic_inventory_tasks"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY date DESC, id DESC"

        with self.adapter.transaction() as tx:
            tasks = self._attach_lines(tx, tx.execute(sql, params).rows, "cyclic_inventory_items", "task_id")
        return [self._to_task(task) for task in tasks]

    def get_stats(self, today: Optional[date] = None) -> CyclicStats:
        """Task counters; "today" is the database's current date unless given"""
        pending = CyclicTaskStatus.PENDING.value
        today_sql = "?" if today is not None else self.adapter.current_date_sql
        params = [pending, CyclicTaskStatus.COMPLETED.value, pending]
        if today is not None:
            params.append(today)

        with self.adapter.transaction() as tx:
            counts = tx.execute(
                "SELECT COUNT(*) AS total_tasks, "
                "COALESCE(SUM(CASE WHEN status = ? THEN 1 ELSE 0 END), 0) AS pending_tasks, "
                "COALESCE(SUM(CASE WHEN status = ? THEN 1 ELSE 0 END), 0) AS completed_tasks, "
                f"COALESCE(SUM(CASE WHEN status = ? AND date = {today_sql} THEN 1 ELSE 0 END), 0) AS today_pending "
                "FROM cyclic_inventory_tasks",
                params,
            ).first()
            with_differences = tx.execute(
                "SELECT COUNT(DISTINCT task_id) AS tasks_with_differences "
                "FROM cyclic_inventory_items WHERE difference IS NOT NULL AND difference <> 0"
            ).scalar()

        return CyclicStats(
            total_tasks=int(counts["total_tasks"] or 0),
            pending_tasks=int(counts["pending_tasks"] or 0),
            completed_tasks=int(counts["completed_tasks"] or 0),
            today_pending=int(counts["today_pending"] or 0),
            tasks_with_differences=int(with_differences or 0),
        )

    def _pending_task(self, tx: TransactionContext, task_id: int) -> dict:
        header = self._fetch_header(tx, "cyclic_inventory_tasks", task_id, "Cyclic task", lock=True)
        if header["status"] != CyclicTaskStatus.PENDING.value:
            raise InvalidStateError(f"Cyclic task {task_id} is already completed")
        return header

    @staticmethod
    def _record(tx: TransactionContext, task_id: int, line_id: int, physical_count: int) -> CyclicItemOut:
        if isinstance(physical_count, bool) or not isinstance(physical_count, int) or physical_count < 0:
            raise ValidationError("Physical count must be a non-negative integer")

        line = tx.execute(
            "SELECT * FROM cyclic_inventory_items WHERE id = ? AND task_id = ?",
            [line_id, task_id],
        ).first()
        if line is None:
            raise NotFoundError(f"Line {line_id} not found on cyclic task {task_id}")

        difference = physical_count - int(line["theoretical_stock"])
        tx.execute(
            "UPDATE cyclic_inventory_items SET physical_count = ?, difference = ? WHERE id = ?",
            [physical_count, difference, line_id],
        )
        return CyclicItemOut.model_validate(
            {**line, "physical_count": physical_count, "difference": difference}
        )

    @staticmethod
    def _to_task(row: dict) -> CyclicTaskOut:
        return CyclicTaskOut.model_validate({**row, "site": row["assigned_to"]})
