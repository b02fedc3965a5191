"""
Dispatch Service
Outbound issuance with new-first allocation and the Pending -> Approved lifecycle
"""
from typing import List, Optional

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.exceptions import InvalidStateError
from tactical_inventory.schemas.common import DispatchStatus, Site
from tactical_inventory.schemas.movements import (
    DispatchCreate, DispatchUpdate, DispatchOut, MovementLine, MovementResult, OversellWarning
)
from tactical_inventory.services.db_adapters import TransactionContext
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import StockLedger, utcnow
from .stock_rules import total_items, validate_lines

logger = get_logger("business")


class DispatchService(LedgerService):
    """
    Dispatch processing

    Stock leaves the ledger when the dispatch is created. Approval only
    changes the header. Corrections and deletions are allowed while the
    dispatch is still pending.
    """

    def create_dispatch(self, data: DispatchCreate) -> MovementResult:
        validate_lines(data.lines)
        now = utcnow()

        with self.adapter.transaction() as tx:
            dispatch_id = tx.insert("dispatches", {
                "date": data.date,
                "employee_id": data.employee_id,
                "employee_name": data.employee_name,
                "service": data.service,
                "site": data.site.value,
                "dispatch_type": data.dispatch_type,
                "status": DispatchStatus.PENDING.value,
                "total_items": total_items(data.lines),
                "created_by": self.actor,
                "created_at": now,
                "updated_at": now,
            })
            warnings = self._allocate_lines(tx, dispatch_id, data.site, data.lines)

        logger.info(f"Dispatch {dispatch_id} issued at {data.site.value} to {data.employee_id}")
        self._publish(
            events.DISPATCH_CREATED, [data.site.value], dispatch_id, oversold=len(warnings)
        )
        return MovementResult(movement_id=dispatch_id, warnings=warnings)

    def update_dispatch(self, dispatch_id: int, data: DispatchUpdate) -> MovementResult:
        """
        Reverse then reapply

        The units each original line took go back into the new-units pool
        whichever pool they were drawn from, then the new lines are allocated.
        """
        validate_lines(data.lines)

        with self.adapter.transaction() as tx:
            header = self._pending_header(tx, dispatch_id)
            site = Site.parse(header["site"])
            self._reverse_lines(tx, dispatch_id, site)

            tx.execute(
                "UPDATE dispatches SET date = ?, service = ?, dispatch_type = ?, "
                "total_items = ?, updated_at = ? WHERE id = ?",
                [
                    data.date or header["date"],
                    header["service"] if data.service is None else data.service,
                    data.dispatch_type or header["dispatch_type"],
                    total_items(data.lines),
                    utcnow(),
                    dispatch_id,
                ],
            )
            warnings = self._allocate_lines(tx, dispatch_id, site, data.lines)

        self._publish(events.DISPATCH_UPDATED, [site.value], dispatch_id, oversold=len(warnings))
        return MovementResult(movement_id=dispatch_id, warnings=warnings)

    def delete_dispatch(self, dispatch_id: int) -> None:
        with self.adapter.transaction() as tx:
            header = self._pending_header(tx, dispatch_id)
            site = Site.parse(header["site"])
            self._reverse_lines(tx, dispatch_id, site)
            tx.execute("DELETE FROM dispatches WHERE id = ?", [dispatch_id])

        logger.info(f"Dispatch {dispatch_id} deleted and reversed at {site.value}")
        self._publish(events.DISPATCH_DELETED, [site.value], dispatch_id)

    def approve_dispatch(self, dispatch_id: int, approved_by: Optional[str] = None) -> DispatchOut:
        """Pending -> Approved; the ledger is not touched again"""
        with self.adapter.transaction() as tx:
            header = self._pending_header(tx, dispatch_id)
            now = utcnow()
            tx.execute(
                "UPDATE dispatches SET status = ?, approved_by = ?, approved_at = ?, updated_at = ? "
                "WHERE id = ?",
                [DispatchStatus.APPROVED.value, approved_by or self.actor, now, now, dispatch_id],
            )

        self._publish(events.DISPATCH_APPROVED, [header["site"]], dispatch_id)
        return self.get_dispatch(dispatch_id)

    def get_dispatch(self, dispatch_id: int) -> DispatchOut:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "dispatches", dispatch_id, "Dispatch")
            lines = self._fetch_lines(tx, "dispatch_items", "dispatch_id", dispatch_id)
        return DispatchOut.model_validate({**header, "items": lines})

    def list_dispatches(
        self, site: Optional[Site] = None, status: Optional[DispatchStatus] = None
    ) -> List[DispatchOut]:
        clauses, params = [], []
        if site is not None:
            clauses.append("site = ?")
            params.append(Site.parse(site).value)
        if status is not None:
            clauses.append("status = ?")
            params.append(DispatchStatus(status).value)

        sql = "SELECT * FROM dispatches"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY date DESC, id DESC"

        with self.adapter.transaction() as tx:
            headers = self._attach_lines(tx, tx.execute(sql, params).rows, "dispatch_items", "dispatch_id")
        return [DispatchOut.model_validate(header) for header in headers]

    def _pending_header(self, tx: TransactionContext, dispatch_id: int) -> dict:
        header = self._fetch_header(tx, "dispatches", dispatch_id, "Dispatch", lock=True)
        if header["status"] != DispatchStatus.PENDING.value:
            raise InvalidStateError(
                f"Dispatch {dispatch_id} is {header['status']}; only pending dispatches can change"
            )
        return header

    def _allocate_lines(
        self, tx: TransactionContext, dispatch_id: int, site: Site, lines: List[MovementLine]
    ) -> List[OversellWarning]:
        ledger = StockLedger(tx)
        warnings = []
        for line in lines:
            allocation = ledger.allocate(line.code, site, line.quantity)
            self._insert_line(
                tx, "dispatch_items", "dispatch_id", dispatch_id, line,
                allocated=allocation.allocated,
            )
            if allocation.shortfall:
                logger.warning(
                    f"Oversell on dispatch {dispatch_id}: {line.code} at {site.value} "
                    f"requested {line.quantity}, available {allocation.allocated}"
                )
                warnings.append(OversellWarning(
                    code=line.code,
                    site=site,
                    requested=line.quantity,
                    available=allocation.allocated,
                ))
        return warnings

    def _reverse_lines(self, tx: TransactionContext, dispatch_id: int, site: Site):
        """Credit back what each line actually took; oversold units were never there"""
        ledger = StockLedger(tx)
        for line in self._fetch_lines(tx, "dispatch_items", "dispatch_id", dispatch_id):
            if line["allocated"]:
                ledger.apply_delta(line["code"], site, line["allocated"], 0)
        tx.execute("DELETE FROM dispatch_items WHERE dispatch_id = ?", [dispatch_id])
