"""
PostgreSQL Adapter
Generated ids come back through RETURNING; upserts use ON CONFLICT
"""
from typing import Any, Dict, Sequence

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert

from tactical_inventory.core.exceptions import QueryError
from .base_adapter import DatabaseAdapter, QueryResult


class PostgresAdapter(DatabaseAdapter):
    name = "postgresql"

    @property
    def returning_id_clause(self) -> str:
        return " RETURNING id"

    def last_insert_id(self, result: QueryResult) -> int:
        row = result.first()
        if row is None or row.get("id") is None:
            raise QueryError("INSERT did not return a generated id")
        return int(row["id"])

    def build_upsert(
        self,
        table: Table,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str],
        overwrite: Sequence[str],
    ):
        stmt = pg_insert(table).values(**values)
        set_ = {column: table.c[column] + stmt.excluded[column] for column in increment}
        set_.update({column: stmt.excluded[column] for column in overwrite})
        if not set_:
            return stmt.on_conflict_do_nothing(index_elements=list(key_columns))
        return stmt.on_conflict_do_update(index_elements=list(key_columns), set_=set_)
