"""
Recovery Service
Returned equipment routed per line to a site's recovered pool or to discard
"""
from typing import List, Optional

from tactical_inventory.core.logging import get_logger
from tactical_inventory.schemas.common import RecoveryDestination, Site
from tactical_inventory.schemas.movements import RecoveryCreate, RecoveryOut, MovementResult
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import StockLedger, utcnow
from .stock_rules import total_items, validate_lines

logger = get_logger("business")


class RecoveryService(LedgerService):

    def create_recovery(self, data: RecoveryCreate) -> MovementResult:
        """
        Record a recovery

        Site-bound lines credit the destination's recovered pool, which may
        be any site. Discarded lines are kept for audit only.
        """
        validate_lines(data.lines)
        credited_sites = []

        with self.adapter.transaction() as tx:
            ledger = StockLedger(tx)
            recovery_id = tx.insert("recoveries", {
                "date": data.date,
                "employee_id": data.employee_id,
                "employee_name": data.employee_name,
                "total_items": total_items(data.lines),
                "created_by": self.actor,
                "created_at": utcnow(),
            })

            for line in data.lines:
                self._insert_line(
                    tx, "recovery_items", "recovery_id", recovery_id, line,
                    destination=line.destination.value,
                )
                if line.destination.is_discard:
                    continue
                site = line.destination.to_site()
                ledger.receive_recovered(line.code, site, line.quantity, line.description, line.size)
                credited_sites.append(site.value)

        discarded = sum(line.quantity for line in data.lines if line.destination.is_discard)
        logger.info(f"Recovery {recovery_id} from {data.employee_id}: {discarded} unit(s) discarded")
        self._publish(events.RECOVERY_CREATED, credited_sites, recovery_id, discarded=discarded)
        return MovementResult(movement_id=recovery_id)

    def get_recovery(self, recovery_id: int) -> RecoveryOut:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "recoveries", recovery_id, "Recovery")
            lines = self._fetch_lines(tx, "recovery_items", "recovery_id", recovery_id)
        return RecoveryOut.model_validate({**header, "items": lines})

    def list_recoveries(self, site: Optional[Site] = None) -> List[RecoveryOut]:
        """A site sees recoveries with a line routed to it or to the discard sink"""
        sql = "SELECT * FROM recoveries"
        params = []
        if site is not None:
            sql += (
                " WHERE id IN (SELECT recovery_id FROM recovery_items"
                " WHERE destination IN (?, ?))"
            )
            params += [Site.parse(site).value, RecoveryDestination.DISCARD.value]
        sql += " ORDER BY date DESC, id DESC"

        with self.adapter.transaction() as tx:
            headers = self._attach_lines(tx, tx.execute(sql, params).rows, "recovery_items", "recovery_id")
        return [RecoveryOut.model_validate(header) for header in headers]
