"""
Stock ledger tests against both upsert paths
"""

from tactical_inventory.schemas.common import Site, StockStatus
from tactical_inventory.services.stock import StockLedger


class TestStockLedger:

    def test_receive_new_creates_record(self, adapter, helper):
        with adapter.transaction() as tx:
            record = StockLedger(tx).receive_new("PT30", Site.CEDIS, 10, "Pantalon", "30")
        assert record.stock_new == 10
        assert record.stock_recovered == 0
        assert record.status is StockStatus.IN_STOCK

        stored = helper.stock(adapter, "PT30", Site.CEDIS)
        assert stored.description == "Pantalon"
        assert stored.size == "30"

    def test_receive_new_is_additive_and_refreshes_metadata(self, adapter, helper):
        with adapter.transaction() as tx:
            ledger = StockLedger(tx)
            ledger.receive_new("PT30", Site.CEDIS, 10, "Pantalon", "30")
            ledger.receive_new("PT30", Site.CEDIS, 5, "Pantalon tactico", "32")
        record = helper.stock(adapter, "PT30", Site.CEDIS)
        assert record.stock_new == 15
        assert record.description == "Pantalon tactico"
        assert record.size == "32"

    def test_receive_recovered_keeps_metadata(self, adapter, helper):
        helper.seed(adapter, "BOTA", Site.NLD, new=2, description="Bota")
        with adapter.transaction() as tx:
            StockLedger(tx).receive_recovered("BOTA", Site.NLD, 3, "otra", "XL")
        record = helper.stock(adapter, "BOTA", Site.NLD)
        assert (record.stock_new, record.stock_recovered) == (2, 3)
        assert record.description == "Bota"

    def test_sites_are_partitioned(self, adapter, helper):
        helper.seed(adapter, "PT30", Site.CEDIS, new=10)
        assert helper.stock(adapter, "PT30", Site.ACUNA) is None

    def test_apply_delta_clamps_at_zero(self, adapter, helper):
        helper.seed(adapter, "PT30", Site.CEDIS, new=3, recovered=1)
        with adapter.transaction() as tx:
            record = StockLedger(tx).apply_delta("PT30", Site.CEDIS, -10, -10)
        assert (record.stock_new, record.stock_recovered) == (0, 0)
        assert record.status is StockStatus.OUT_OF_STOCK

    def test_apply_delta_on_missing_record_creates_nothing(self, adapter, helper):
        with adapter.transaction() as tx:
            assert StockLedger(tx).apply_delta("NADA", Site.NLD, 5, 0) is None
        assert helper.stock(adapter, "NADA", Site.NLD) is None

    def test_ensure_exists_is_idempotent(self, adapter, helper):
        helper.seed(adapter, "PT30", Site.CEDIS, new=4)
        with adapter.transaction() as tx:
            record = StockLedger(tx).ensure_exists("PT30", Site.CEDIS)
        assert record.stock_new == 4
        assert helper.count_rows(adapter, "inventory_items") == 1

    def test_allocate_new_first(self, adapter, helper):
        helper.seed(adapter, "PT30", Site.CEDIS, new=5, recovered=10)
        with adapter.transaction() as tx:
            allocation = StockLedger(tx).allocate("PT30", Site.CEDIS, 8)
        assert (allocation.from_new, allocation.from_recovered, allocation.shortfall) == (5, 3, 0)

        record = helper.stock(adapter, "PT30", Site.CEDIS)
        assert (record.stock_new, record.stock_recovered) == (0, 7)

    def test_allocate_missing_record_is_full_shortfall(self, adapter, helper):
        with adapter.transaction() as tx:
            allocation = StockLedger(tx).allocate("NADA", Site.CEDIS, 4)
        assert allocation.shortfall == 4
        assert helper.stock(adapter, "NADA", Site.CEDIS) is None

    def test_status_follows_threshold(self, adapter, helper):
        record = helper.seed(adapter, "PT30", Site.CEDIS, new=5, stock_min=5)
        assert record.status is StockStatus.REORDER

    def test_status_rederived_on_read(self, adapter, helper):
        helper.seed(adapter, "PT30", Site.CEDIS, new=5, stock_min=0)
        # Threshold changed behind the ledger's back
        adapter.execute("UPDATE inventory_items SET stock_min = 10 WHERE code = ?", ["PT30"])
        assert helper.stock(adapter, "PT30", Site.CEDIS).status is StockStatus.REORDER
