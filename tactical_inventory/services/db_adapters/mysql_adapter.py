"""
MySQL Adapter
Generated ids come from the cursor; upserts use ON DUPLICATE KEY UPDATE
"""
from typing import Any, Dict, Sequence

from sqlalchemy import Table
from sqlalchemy.dialects.mysql import insert as mysql_insert

from tactical_inventory.core.exceptions import QueryError
from .base_adapter import DatabaseAdapter, QueryResult


class MySQLAdapter(DatabaseAdapter):
    name = "mysql"

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
        stmt = mysql_insert(table).values(**values)
        set_ = {column: table.c[column] + stmt.inserted[column] for column in increment}
        set_.update({column: stmt.inserted[column] for column in overwrite})
        if not set_:
            # MySQL has no DO NOTHING; assigning the key to itself is a no-op
            set_ = {key_columns[0]: table.c[key_columns[0]]}
        return stmt.on_duplicate_key_update(set_)
