"""
Ledger Service Base
Shared plumbing for services that run movements against the stock ledger
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from tactical_inventory.core.exceptions import NotFoundError
from tactical_inventory.services.db_adapters import DatabaseAdapter, TransactionContext
from tactical_inventory.services.notifications import (
    ChangeEvent, ChangeNotifier, publish_safely
)

DEFAULT_ACTOR = "system"


class LedgerService:
    """
    Base for movement, count and inquiry services

    Holds the adapter, the change notifier and the acting user's name.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        notifier: Optional[ChangeNotifier] = None,
        current_user: Optional[str] = None,
    ):
        self.adapter = adapter
        self.notifier = notifier
        self.current_user = current_user

    @property
    def actor(self) -> str:
        return self.current_user or DEFAULT_ACTOR

    def _publish(self, kind: str, sites: Iterable[str], entity_id: Optional[int], **payload) -> None:
        unique_sites = list(dict.fromkeys(sites))
        publish_safely(
            self.notifier,
            ChangeEvent(kind=kind, sites=unique_sites, entity_id=entity_id, payload=payload),
        )

    @staticmethod
    def _fetch_header(
        tx: TransactionContext, table: str, record_id: int, label: str, lock: bool = False
    ) -> Dict[str, Any]:
        lock_clause = tx.lock_clause if lock else ""
        row = tx.execute(f"SELECT * FROM {table} WHERE id = ?{lock_clause}", [record_id]).first()
        if row is None:
            raise NotFoundError(f"{label} {record_id} not found")
        return row

    @staticmethod
    def _fetch_lines(tx: TransactionContext, table: str, fk: str, record_id: int) -> List[Dict[str, Any]]:
        return tx.execute(
            f"SELECT * FROM {table} WHERE {fk} = ? ORDER BY id", [record_id]
        ).rows

    @staticmethod
    def _attach_lines(
        tx: TransactionContext, headers: Sequence[Dict[str, Any]], table: str, fk: str
    ) -> List[Dict[str, Any]]:
        """Load the lines of many headers with one query"""
        if not headers:
            return []
        ids = [header["id"] for header in headers]
        placeholders = ", ".join("?" for _ in ids)
        grouped: Dict[int, List[Dict[str, Any]]] = {record_id: [] for record_id in ids}
        for line in tx.execute(
            f"SELECT * FROM {table} WHERE {fk} IN ({placeholders}) ORDER BY id", ids
        ).rows:
            grouped[line[fk]].append(line)
        return [{**header, "items": grouped[header["id"]]} for header in headers]

    @staticmethod
    def _insert_line(tx: TransactionContext, table: str, fk: str, record_id: int, line, **extra) -> int:
        values = {
            fk: record_id,
            "code": line.code,
            "description": line.description or "",
            "size": line.size,
            "qty": line.quantity,
        }
        values.update(extra)
        return tx.insert(table, values)
