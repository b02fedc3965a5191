"""
Database adapters
One adapter per supported backend, selected once from configuration
"""
from typing import Optional

from sqlalchemy.engine import Engine

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.config import Settings, settings as default_settings
from tactical_inventory.core.database import build_engine
from .base_adapter import DatabaseAdapter, QueryResult, TransactionContext, bind_positional
from .postgres_adapter import PostgresAdapter
from .mysql_adapter import MySQLAdapter
from .sqlite_adapter import SQLiteAdapter

logger = get_logger("database")

ADAPTERS = {
    "postgresql": PostgresAdapter,
    "mysql": MySQLAdapter,
    "sqlite": SQLiteAdapter,
}


def adapter_for_engine(engine: Engine, native_upsert: Optional[bool] = None) -> DatabaseAdapter:
    """Wrap an existing engine in the adapter matching its dialect"""
    try:
        adapter_class = ADAPTERS[engine.dialect.name]
    except KeyError:
        raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")
    return adapter_class(engine, native_upsert=native_upsert)


def create_adapter(config: Optional[Settings] = None) -> DatabaseAdapter:
    """Build the engine for the configured backend and wrap it"""
    config = config or default_settings
    adapter = adapter_for_engine(build_engine(config))
    logger.info(f"Using {adapter.name} database adapter")
    return adapter


__all__ = [
    "DatabaseAdapter",
    "QueryResult",
    "TransactionContext",
    "bind_positional",
    "PostgresAdapter",
    "MySQLAdapter",
    "SQLiteAdapter",
    "adapter_for_engine",
    "create_adapter",
]
