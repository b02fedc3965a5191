"""
SQLite Adapter
Local and test backend. Native upserts use ON CONFLICT; the read-then-write
path can be forced to exercise the fallback used by engines without one.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Sequence

from sqlalchemy import Table
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from tactical_inventory.core.exceptions import QueryError
from .base_adapter import DatabaseAdapter, QueryResult

# Same storage format SQLAlchemy uses for DateTime columns on SQLite
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class SQLiteAdapter(DatabaseAdapter):
    name = "sqlite"
    # Writers are serialized by the database file lock
    lock_clause = ""

    def greatest(self, left: str, right: str) -> str:
        return f"MAX({left}, {right})"

    @property
    def current_date_sql(self) -> str:
        return "DATE('now')"

    def prepare_params(self, binds: Dict[str, Any]) -> Dict[str, Any]:
        prepared = super().prepare_params(binds)
        for name, value in prepared.items():
            if isinstance(value, datetime):
                prepared[name] = value.strftime(_DATETIME_FORMAT)
            elif isinstance(value, date):
                prepared[name] = value.isoformat()
            elif isinstance(value, Decimal):
                prepared[name] = float(value)
        return prepared

    def last_insert_id(self, result: QueryResult) -> int:
        if not result.lastrowid:
            raise QueryError("INSERT did not report a generated id")
        return int(result.lastrowid)

    def build_upsert(
        self,
        table: Table,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str],
        overwrite: Sequence[str],
    ):
        stmt = sqlite_insert(table).values(**values)
        set_ = {column: table.c[column] + stmt.excluded[column] for column in increment}
        set_.update({column: stmt.excluded[column] for column in overwrite})
        if not set_:
            return stmt.on_conflict_do_nothing(index_elements=list(key_columns))
        return stmt.on_conflict_do_update(index_elements=list(key_columns), set_=set_)
