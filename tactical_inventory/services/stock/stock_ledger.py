"""
Stock Ledger
Authoritative per-(code, site) stock record and its additive mutations

Every method runs on the caller's open transaction. Pools only ever move
through SQL-side deltas clamped at zero, and the status column is rewritten
from the pools after each change.
"""
from datetime import datetime, timezone
from typing import Optional

from tactical_inventory.core.logging import get_logger
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.inventory import StockRecord
from tactical_inventory.services.db_adapters import TransactionContext
from .stock_rules import Allocation, allocate_new_first, derive_status

logger = get_logger("business")

STOCK_TABLE = "inventory_items"
STOCK_KEY = ("code", "site")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StockLedger:
    """Stock record access bound to one transaction"""

    def __init__(self, tx: TransactionContext):
        self.tx = tx

    def get(self, code: str, site: Site, lock: bool = False) -> Optional[StockRecord]:
        """Read a record; ``lock`` holds the row until the transaction ends"""
        lock_clause = self.tx.lock_clause if lock else ""
        row = self.tx.execute(
            f"SELECT * FROM {STOCK_TABLE} WHERE code = ? AND site = ?{lock_clause}",
            [code, Site.parse(site).value],
        ).first()
        return StockRecord.from_row(row) if row else None

    def ensure_exists(
        self, code: str, site: Site, description: str = "", size: Optional[str] = None
    ) -> StockRecord:
        """Create a zero-stock record for (code, site) unless one is already there"""
        self.tx.upsert(
            STOCK_TABLE,
            STOCK_KEY,
            self._new_row(code, site, description, size),
        )
        return self.get(code, site)

    def receive_new(
        self, code: str, site: Site, quantity: int, description: str = "", size: Optional[str] = None
    ) -> StockRecord:
        """Add received units to the new pool; the entry line also refreshes description and size"""
        self.tx.upsert(
            STOCK_TABLE,
            STOCK_KEY,
            self._new_row(code, site, description, size, stock_new=quantity),
            increment=("stock_new",),
            overwrite=("description", "size", "updated_at"),
        )
        return self.refresh_status(code, site)

    def receive_recovered(
        self, code: str, site: Site, quantity: int, description: str = "", size: Optional[str] = None
    ) -> StockRecord:
        """Add returned units to the recovered pool of the destination site"""
        self.tx.upsert(
            STOCK_TABLE,
            STOCK_KEY,
            self._new_row(code, site, description, size, stock_recovered=quantity),
            increment=("stock_recovered",),
            overwrite=("updated_at",),
        )
        return self.refresh_status(code, site)

    def apply_delta(
        self, code: str, site: Site, new_delta: int, recovered_delta: int
    ) -> Optional[StockRecord]:
        """
        Add signed deltas to both pools, clamping each at zero

        A missing record is left missing and ``None`` is returned.
        """
        greatest = self.tx.greatest
        self.tx.execute(
            f"UPDATE {STOCK_TABLE} "
            f"SET stock_new = {greatest('0', 'stock_new + ?')}, "
            f"stock_recovered = {greatest('0', 'stock_recovered + ?')}, "
            f"updated_at = ? "
            f"WHERE code = ? AND site = ?",
            [new_delta, recovered_delta, utcnow(), code, Site.parse(site).value],
        )
        return self.refresh_status(code, site)

    def allocate(self, code: str, site: Site, quantity: int) -> Allocation:
        """
        Issue ``quantity`` units using new-first allocation

        The record is locked before its pools are read. Whatever the pools
        cannot cover comes back as shortfall; the pools end at zero.
        """
        record = self.get(code, site, lock=True)
        if record is None:
            return Allocation(from_new=0, from_recovered=0, shortfall=quantity)

        allocation = allocate_new_first(quantity, record.stock_new, record.stock_recovered)
        self.apply_delta(code, site, -allocation.from_new, -(quantity - allocation.from_new))
        return allocation

    def refresh_status(self, code: str, site: Site) -> Optional[StockRecord]:
        """Rewrite the stored status from the current pools"""
        record = self.get(code, site)
        if record is None:
            return None
        self.tx.execute(
            f"UPDATE {STOCK_TABLE} SET status = ? WHERE id = ?",
            [record.status.value, record.id],
        )
        return record

    @staticmethod
    def _new_row(
        code: str,
        site: Site,
        description: str,
        size: Optional[str],
        stock_new: int = 0,
        stock_recovered: int = 0,
    ) -> dict:
        now = utcnow()
        return {
            "code": code,
            "site": Site.parse(site).value,
            "description": description or "",
            "size": size,
            "stock_new": stock_new,
            "stock_recovered": stock_recovered,
            "stock_min": 0,
            "status": derive_status(stock_new + stock_recovered, 0).value,
            "created_at": now,
            "updated_at": now,
        }


__all__ = ["StockLedger", "STOCK_TABLE", "utcnow"]
