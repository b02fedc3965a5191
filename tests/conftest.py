"""
Test Configuration and Fixtures
Shared testing infrastructure for the stock ledger
"""

import pytest
from datetime import date
from typing import Generator, Optional

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from tactical_inventory.core.database import init_db
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.inventory import StockRecord
from tactical_inventory.services.db_adapters import DatabaseAdapter, SQLiteAdapter
from tactical_inventory.services.notifications import RecordingChangeNotifier
from tactical_inventory.services.stock import (
    CyclicInventoryService, DispatchService, EntryService, InventoryService,
    OrderService, RecoveryService, StockLedger
)

TEST_DATE = date(2024, 3, 15)
TEST_USER = "almacenista"


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["native", "fallback"])
def adapter(request, engine: Engine) -> DatabaseAdapter:
    """SQLite adapter, once with native upserts and once with read-then-write upserts"""
    return SQLiteAdapter(engine, native_upsert=request.param == "native")


@pytest.fixture
def notifier() -> RecordingChangeNotifier:
    return RecordingChangeNotifier()


@pytest.fixture
def entry_service(adapter, notifier) -> EntryService:
    return EntryService(adapter, notifier, TEST_USER)


@pytest.fixture
def dispatch_service(adapter, notifier) -> DispatchService:
    return DispatchService(adapter, notifier, TEST_USER)


@pytest.fixture
def recovery_service(adapter, notifier) -> RecoveryService:
    return RecoveryService(adapter, notifier, TEST_USER)


@pytest.fixture
def cyclic_service(adapter, notifier) -> CyclicInventoryService:
    return CyclicInventoryService(adapter, notifier, TEST_USER)


@pytest.fixture
def inventory_service(adapter, notifier) -> InventoryService:
    return InventoryService(adapter, notifier, TEST_USER)


@pytest.fixture
def order_service(adapter, notifier) -> OrderService:
    return OrderService(adapter, notifier, TEST_USER)


@pytest.fixture
def client(adapter, notifier) -> Generator[TestClient, None, None]:
    """Test client wired to the test adapter and recording notifier"""
    from tactical_inventory.main import create_app

    app = create_app(adapter=adapter, notifier=notifier)
    with TestClient(app) as test_client:
        yield test_client


class LedgerTestHelper:
    """Helper methods for seeding and reading stock records"""

    @staticmethod
    def stock(adapter: DatabaseAdapter, code: str, site: Site) -> Optional[StockRecord]:
        with adapter.transaction() as tx:
            return StockLedger(tx).get(code, site)

    @staticmethod
    def seed(
        adapter: DatabaseAdapter,
        code: str,
        site: Site,
        new: int = 0,
        recovered: int = 0,
        stock_min: int = 0,
        description: str = "",
    ) -> StockRecord:
        with adapter.transaction() as tx:
            ledger = StockLedger(tx)
            ledger.ensure_exists(code, site, description)
            if new:
                ledger.receive_new(code, site, new, description)
            if recovered:
                ledger.receive_recovered(code, site, recovered)
            tx.execute(
                "UPDATE inventory_items SET stock_min = ? WHERE code = ? AND site = ?",
                [stock_min, code, site.value],
            )
            return ledger.refresh_status(code, site)

    @staticmethod
    def count_rows(adapter: DatabaseAdapter, table: str) -> int:
        return adapter.execute(f"SELECT COUNT(*) AS n FROM {table}").scalar()


@pytest.fixture
def helper() -> LedgerTestHelper:
    return LedgerTestHelper()
