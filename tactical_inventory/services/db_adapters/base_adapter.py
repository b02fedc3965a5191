"""
Base Database Adapter
Uniform query/transaction interface over the supported SQL dialects

Services write SQL once, with positional ``?`` placeholders, and never ask
which backend is active. Each concrete adapter owns the dialect details:
generated-id retrieval, upsert syntax, row locking and scalar helpers.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import Table, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import (
    DisconnectionError, IntegrityError, InterfaceError, SQLAlchemyError
)
from sqlalchemy.sql.dml import Insert

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.database import Base, init_db, check_db_connection
from tactical_inventory import models  # noqa: F401  registers every table on Base.metadata
from tactical_inventory.core.exceptions import (
    ConstraintError, DatabaseConnectionError, DatabaseError, QueryError
)

logger = get_logger("database")

T = TypeVar("T")


@dataclass
class QueryResult:
    """Dialect-independent statement result"""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    lastrowid: Optional[int] = None

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        row = self.first()
        if row is None:
            return None
        return next(iter(row.values()))


def bind_positional(sql: str, params: Sequence[Any] = ()) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite ``?`` placeholders into ordered named binds ``:p1 .. :pn``

    Question marks inside quoted literals are left alone. The number of
    placeholders must match the number of parameters exactly.
    """
    params = list(params or ())
    out: List[str] = []
    binds: Dict[str, Any] = {}
    quote = None

    for ch in sql:
        if quote:
            out.append(ch)
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            out.append(ch)
        elif ch == "?":
            index = len(binds) + 1
            if index > len(params):
                raise QueryError(
                    f"Statement has more placeholders than the {len(params)} parameter(s) supplied"
                )
            name = f"p{index}"
            binds[name] = params[index - 1]
            out.append(f":{name}")
        else:
            out.append(ch)

    if len(binds) != len(params):
        raise QueryError(
            f"Statement has {len(binds)} placeholder(s) but {len(params)} parameter(s) were supplied"
        )
    return "".join(out), binds


class TransactionContext:
    """Connection-scoped handle passed to code running inside a transaction"""

    def __init__(self, adapter: "DatabaseAdapter", connection: Connection):
        self.adapter = adapter
        self.connection = connection

    def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        return self.adapter.run(self.connection, sql, params)

    def execute_statement(self, statement) -> QueryResult:
        return self.adapter.run_statement(self.connection, statement)

    def insert(self, table: str, values: Dict[str, Any]) -> int:
        """Insert one row and return its generated id"""
        columns = list(values)
        result = self.execute(
            self.adapter.insert_sql(table, columns),
            [values[column] for column in columns],
        )
        return self.adapter.last_insert_id(result)

    def upsert(
        self,
        table: str,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str] = (),
        overwrite: Sequence[str] = (),
    ) -> None:
        self.adapter.upsert(self, table, key_columns, values, increment, overwrite)

    @property
    def lock_clause(self) -> str:
        return self.adapter.lock_clause

    def greatest(self, left: str, right: str) -> str:
        return self.adapter.greatest(left, right)


class DatabaseAdapter(ABC):
    """
    Base class for all dialect adapters

    Concrete adapters are selected once at startup (see ``create_adapter``)
    and passed explicitly to every service.
    """

    name = "generic"
    lock_clause = " FOR UPDATE"
    native_upsert_default = True

    def __init__(self, engine: Engine, native_upsert: Optional[bool] = None):
        self.engine = engine
        self.native_upsert = self.native_upsert_default if native_upsert is None else native_upsert

    # ------------------------------------------------------------------
    # Dialect hooks
    # ------------------------------------------------------------------

    @property
    def returning_id_clause(self) -> str:
        return ""

    @abstractmethod
    def last_insert_id(self, result: QueryResult) -> int:
        """Generated id of the header row inserted by ``result``"""
        pass

    @abstractmethod
    def build_upsert(
        self,
        table: Table,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str],
        overwrite: Sequence[str],
    ) -> Insert:
        """Single round-trip insert-or-update statement for this dialect"""
        pass

    def greatest(self, left: str, right: str) -> str:
        return f"GREATEST({left}, {right})"

    @property
    def current_date_sql(self) -> str:
        return "CURRENT_DATE"

    def prepare_params(self, binds: Dict[str, Any]) -> Dict[str, Any]:
        """Convert bind values into types every driver accepts"""
        return {
            name: value.value if isinstance(value, Enum) else value
            for name, value in binds.items()
        }

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def translate_error(self, exc: SQLAlchemyError) -> DatabaseError:
        if isinstance(exc, IntegrityError):
            return ConstraintError(str(getattr(exc, "orig", exc)))
        if isinstance(exc, (InterfaceError, DisconnectionError)) or getattr(exc, "connection_invalidated", False):
            return DatabaseConnectionError(str(exc))
        return QueryError(str(getattr(exc, "orig", None) or exc))

    def run(self, connection: Connection, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        statement, binds = bind_positional(sql, params)
        try:
            cursor = connection.execute(text(statement), self.prepare_params(binds))
        except SQLAlchemyError as exc:
            raise self.translate_error(exc) from exc
        return self._to_result(cursor)

    def run_statement(self, connection: Connection, statement) -> QueryResult:
        try:
            cursor = connection.execute(statement)
        except SQLAlchemyError as exc:
            raise self.translate_error(exc) from exc
        return self._to_result(cursor)

    @staticmethod
    def _to_result(cursor) -> QueryResult:
        if cursor.returns_rows:
            rows = [dict(row) for row in cursor.mappings()]
            return QueryResult(rows=rows, rowcount=len(rows))
        return QueryResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)

    def _connect(self) -> Connection:
        try:
            return self.engine.connect()
        except SQLAlchemyError as exc:
            logger.error(f"Could not acquire a {self.name} connection: {exc}")
            raise DatabaseConnectionError(str(exc)) from exc

    @contextmanager
    def transaction(self) -> Iterator[TransactionContext]:
        """
        Scoped transaction

        Commits when the block finishes, rolls back on any exception raised
        inside it, and always returns the connection to the pool.
        """
        connection = self._connect()
        try:
            trans = connection.begin()
        except SQLAlchemyError as exc:
            connection.close()
            raise DatabaseConnectionError(str(exc)) from exc

        try:
            yield TransactionContext(self, connection)
            trans.commit()
        except SQLAlchemyError as exc:
            self._rollback(trans, exc)
            raise self.translate_error(exc) from exc
        except BaseException as exc:
            self._rollback(trans, exc)
            raise
        finally:
            connection.close()

    def _rollback(self, trans, cause: BaseException) -> None:
        if not trans.is_active:
            return
        logger.warning(f"Rolling back {self.name} transaction: {cause!r}")
        try:
            trans.rollback()
        except SQLAlchemyError as exc:
            # The original error is already propagating
            logger.error(f"Rollback failed: {exc}")

    def with_transaction(self, fn: Callable[[TransactionContext], T]) -> T:
        with self.transaction() as tx:
            return fn(tx)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Run one statement in its own transaction"""
        with self.transaction() as tx:
            return tx.execute(sql, params)

    # ------------------------------------------------------------------
    # Inserts and upserts
    # ------------------------------------------------------------------

    def insert_sql(self, table: str, columns: Sequence[str], returning: bool = True) -> str:
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        return sql + self.returning_id_clause if returning else sql

    def upsert(
        self,
        tx: TransactionContext,
        table: str,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str] = (),
        overwrite: Sequence[str] = (),
    ) -> None:
        """
        Insert ``values`` or, when the unique key already exists, update in place

        Columns in ``increment`` are additive (existing + supplied value);
        columns in ``overwrite`` take the supplied value. Both paths give the
        same result inside one transaction.
        """
        if not key_columns:
            raise QueryError("Upsert needs at least one key column")
        if self.native_upsert:
            statement = self.build_upsert(
                Base.metadata.tables[table], key_columns, values, increment, overwrite
            )
            tx.execute_statement(statement)
        else:
            self._upsert_read_then_write(tx, table, key_columns, values, increment, overwrite)

    def _upsert_read_then_write(
        self,
        tx: TransactionContext,
        table: str,
        key_columns: Sequence[str],
        values: Dict[str, Any],
        increment: Sequence[str],
        overwrite: Sequence[str],
    ) -> None:
        where = " AND ".join(f"{column} = ?" for column in key_columns)
        keys = [values[column] for column in key_columns]
        existing = tx.execute(
            f"SELECT {key_columns[0]} FROM {table} WHERE {where}{self.lock_clause}", keys
        ).first()

        if existing is None:
            columns = list(values)
            tx.execute(
                self.insert_sql(table, columns, returning=False),
                [values[column] for column in columns],
            )
            return

        assignments = [f"{column} = {column} + ?" for column in increment]
        assignments += [f"{column} = ?" for column in overwrite]
        if not assignments:
            return
        params = [values[column] for column in increment] + [values[column] for column in overwrite]
        tx.execute(f"UPDATE {table} SET {', '.join(assignments)} WHERE {where}", params + keys)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        init_db(self.engine)

    def check_connection(self) -> bool:
        return check_db_connection(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info(f"{self.name} connection pool disposed")
