"""
Inventory Service
Per-site stock inquiry, item maintenance and reorder suggestions
"""
from typing import List, Optional

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.exceptions import ConstraintError, NotFoundError
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.inventory import ItemCreate, ItemUpdate, ReorderSuggestion, StockRecord
from tactical_inventory.services.db_adapters import TransactionContext
from tactical_inventory.services import notifications as events
from .base_service import LedgerService
from .stock_ledger import STOCK_TABLE, StockLedger, utcnow

logger = get_logger("business")


class InventoryService(LedgerService):
    """
    Stock inquiry and item maintenance

    Item removal is independent of movements: it never reverses or
    rewrites movement history.
    """

    def list_stock(self, site: Site) -> List[StockRecord]:
        with self.adapter.transaction() as tx:
            rows = tx.execute(
                f"SELECT * FROM {STOCK_TABLE} WHERE site = ? ORDER BY code",
                [Site.parse(site).value],
            ).rows
        return [StockRecord.from_row(row) for row in rows]

    def get_item(self, site: Site, item_id: int) -> StockRecord:
        with self.adapter.transaction() as tx:
            return StockRecord.from_row(self._fetch_item(tx, site, item_id))

    def create_item(self, site: Site, data: ItemCreate) -> StockRecord:
        """Register a catalog code at a site with empty pools"""
        site = Site.parse(site)
        with self.adapter.transaction() as tx:
            ledger = StockLedger(tx)
            if ledger.get(data.code, site) is not None:
                raise ConstraintError(f"Item {data.code} already exists at {site.value}")
            record = ledger.ensure_exists(data.code, site, data.description, data.size)
            tx.execute(
                f"UPDATE {STOCK_TABLE} SET stock_min = ?, updated_at = ? WHERE id = ?",
                [data.stock_min, utcnow(), record.id],
            )
            record = ledger.refresh_status(data.code, site)

        self._publish(events.ITEM_CREATED, [site.value], record.id, code=record.code)
        return record

    def update_item(self, site: Site, item_id: int, data: ItemUpdate) -> StockRecord:
        """Change descriptive fields or the reorder threshold; status follows the threshold"""
        site = Site.parse(site)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        with self.adapter.transaction() as tx:
            row = self._fetch_item(tx, site, item_id, lock=True)
            if changes:
                assignments = ", ".join(f"{column} = ?" for column in changes)
                tx.execute(
                    f"UPDATE {STOCK_TABLE} SET {assignments}, updated_at = ? WHERE id = ?",
                    [*changes.values(), utcnow(), item_id],
                )
            record = StockLedger(tx).refresh_status(row["code"], site)

        self._publish(events.ITEM_UPDATED, [site.value], item_id, code=record.code)
        return record

    def delete_item(self, site: Site, item_id: int) -> None:
        site = Site.parse(site)
        with self.adapter.transaction() as tx:
            row = self._fetch_item(tx, site, item_id, lock=True)
            tx.execute(f"DELETE FROM {STOCK_TABLE} WHERE id = ?", [item_id])

        logger.info(f"Item {row['code']} removed from {site.value}")
        self._publish(events.ITEM_DELETED, [site.value], item_id, code=row["code"])

    def reorder_suggestions(self, site: Optional[Site] = None) -> List[ReorderSuggestion]:
        """Items below their threshold, largest gap first within each site"""
        sql = (
            f"SELECT * FROM {STOCK_TABLE} "
            f"WHERE stock_new + stock_recovered < stock_min"
        )
        params = []
        if site is not None:
            sql += " AND site = ?"
            params.append(Site.parse(site).value)
        sql += " ORDER BY site, stock_min - (stock_new + stock_recovered) DESC, code"

        with self.adapter.transaction() as tx:
            rows = tx.execute(sql, params).rows

        suggestions = []
        for row in rows:
            record = StockRecord.from_row(row)
            suggestions.append(ReorderSuggestion(
                code=record.code,
                description=record.description,
                size=record.size,
                site=record.site,
                stock_new=record.stock_new,
                stock_recovered=record.stock_recovered,
                stock_min=record.stock_min,
                total_stock=record.total,
                suggested_qty=record.stock_min - record.total,
            ))
        return suggestions

    @staticmethod
    def _fetch_item(tx: TransactionContext, site: Site, item_id: int, lock: bool = False) -> dict:
        lock_clause = tx.lock_clause if lock else ""
        row = tx.execute(
            f"SELECT * FROM {STOCK_TABLE} WHERE id = ? AND site = ?{lock_clause}",
            [item_id, Site.parse(site).value],
        ).first()
        if row is None:
            raise NotFoundError(f"Item {item_id} not found at {Site.parse(site).value}")
        return row
