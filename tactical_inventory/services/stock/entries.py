"""
Entry Service
Inbound receipts: every line credits the new-units pool at the receiving site
"""
from typing import List, Optional

from tactical_inventory.core.logging import get_logger
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.movements import (
    EntryCreate, EntryUpdate, EntryOut, MovementLine, MovementResult
)
from tactical_inventory.services.db_adapters import TransactionContext
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import StockLedger, utcnow
from .stock_rules import total_items, validate_lines

logger = get_logger("business")


class EntryService(LedgerService):
    """
    Entry processing
    Create, correct (reverse then reapply) and delete inbound receipts
    """

    def create_entry(self, data: EntryCreate) -> MovementResult:
        validate_lines(data.lines)
        now = utcnow()

        with self.adapter.transaction() as tx:
            entry_id = tx.insert("entries", {
                "date": data.date,
                "site": data.site.value,
                "total_items": total_items(data.lines),
                "created_by": self.actor,
                "created_at": now,
                "updated_at": now,
            })
            self._apply_lines(tx, entry_id, data.site, data.lines)

        logger.info(f"Entry {entry_id} received at {data.site.value}: {total_items(data.lines)} units")
        self._publish(events.ENTRY_CREATED, [data.site.value], entry_id)
        return MovementResult(movement_id=entry_id)

    def update_entry(self, entry_id: int, data: EntryUpdate) -> MovementResult:
        """Reverse the original lines at the original site, then apply the new lines"""
        validate_lines(data.lines)

        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "entries", entry_id, "Entry", lock=True)
            original_site = Site.parse(header["site"])
            self._reverse_lines(tx, entry_id, original_site)

            tx.execute(
                "UPDATE entries SET date = ?, site = ?, total_items = ?, updated_at = ? WHERE id = ?",
                [data.date, data.site.value, total_items(data.lines), utcnow(), entry_id],
            )
            self._apply_lines(tx, entry_id, data.site, data.lines)

        self._publish(events.ENTRY_UPDATED, [original_site.value, data.site.value], entry_id)
        return MovementResult(movement_id=entry_id)

    def delete_entry(self, entry_id: int) -> None:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "entries", entry_id, "Entry", lock=True)
            site = Site.parse(header["site"])
            self._reverse_lines(tx, entry_id, site)
            tx.execute("DELETE FROM entries WHERE id = ?", [entry_id])

        logger.info(f"Entry {entry_id} deleted and reversed at {site.value}")
        self._publish(events.ENTRY_DELETED, [site.value], entry_id)

    def get_entry(self, entry_id: int) -> EntryOut:
        with self.adapter.transaction() as tx:
            header = self._fetch_header(tx, "entries", entry_id, "Entry")
            lines = self._fetch_lines(tx, "entry_items", "entry_id", entry_id)
        return EntryOut.model_validate({**header, "items": lines})

    def list_entries(self, site: Optional[Site] = None) -> List[EntryOut]:
        sql = "SELECT * FROM entries"
        params = []
        if site is not None:
            sql += " WHERE site = ?"
            params.append(Site.parse(site).value)
        sql += " ORDER BY date DESC, id DESC"

        with self.adapter.transaction() as tx:
            headers = self._attach_lines(tx, tx.execute(sql, params).rows, "entry_items", "entry_id")
        return [EntryOut.model_validate(header) for header in headers]

    def _apply_lines(self, tx: TransactionContext, entry_id: int, site: Site, lines: List[MovementLine]):
        ledger = StockLedger(tx)
        for line in lines:
            self._insert_line(tx, "entry_items", "entry_id", entry_id, line)
            ledger.receive_new(line.code, site, line.quantity, line.description, line.size)

    def _reverse_lines(self, tx: TransactionContext, entry_id: int, site: Site):
        ledger = StockLedger(tx)
        for line in self._fetch_lines(tx, "entry_items", "entry_id", entry_id):
            ledger.apply_delta(line["code"], site, -line["qty"], 0)
        tx.execute("DELETE FROM entry_items WHERE entry_id = ?", [entry_id])
