"""
Inventory inquiry and maintenance tests
"""

import pytest

from tactical_inventory.core.exceptions import ConstraintError, NotFoundError
from tactical_inventory.schemas.common import Site, StockStatus
from tactical_inventory.schemas.inventory import ItemCreate, ItemUpdate


class TestItemMaintenance:

    def test_create_item_with_empty_pools(self, inventory_service, notifier):
        record = inventory_service.create_item(
            Site.NLD, ItemCreate(code=" GORRA ", description="Gorra", size="U", stock_min=3)
        )
        assert record.code == "GORRA"
        assert (record.stock_new, record.stock_recovered, record.stock_min) == (0, 0, 3)
        assert record.status is StockStatus.OUT_OF_STOCK
        assert notifier.kinds() == ["item-created"]

    def test_duplicate_item_rejected(self, inventory_service):
        inventory_service.create_item(Site.NLD, ItemCreate(code="GORRA"))
        with pytest.raises(ConstraintError):
            inventory_service.create_item(Site.NLD, ItemCreate(code="GORRA"))

    def test_update_threshold_recomputes_status(self, inventory_service, adapter, helper):
        seeded = helper.seed(adapter, "PT30", Site.CEDIS, new=4)
        assert seeded.status is StockStatus.IN_STOCK

        record = inventory_service.update_item(Site.CEDIS, seeded.id, ItemUpdate(stock_min=4))
        assert record.status is StockStatus.REORDER
        assert record.stock_new == 4

    def test_item_belongs_to_its_site(self, inventory_service, adapter, helper):
        seeded = helper.seed(adapter, "PT30", Site.CEDIS, new=4)
        with pytest.raises(NotFoundError):
            inventory_service.get_item(Site.NLD, seeded.id)

    def test_delete_item(self, inventory_service, adapter, helper):
        seeded = helper.seed(adapter, "PT30", Site.CEDIS, new=4)
        inventory_service.delete_item(Site.CEDIS, seeded.id)
        assert helper.stock(adapter, "PT30", Site.CEDIS) is None
        with pytest.raises(NotFoundError):
            inventory_service.delete_item(Site.CEDIS, seeded.id)


def test_list_stock_is_per_site(inventory_service, adapter, helper):
    helper.seed(adapter, "B", Site.CEDIS, new=1)
    helper.seed(adapter, "A", Site.CEDIS, new=1)
    helper.seed(adapter, "A", Site.ACUNA, new=9)

    assert [r.code for r in inventory_service.list_stock(Site.CEDIS)] == ["A", "B"]
    assert [r.stock_new for r in inventory_service.list_stock(Site.ACUNA)] == [9]


def test_reorder_suggestions(inventory_service, adapter, helper):
    helper.seed(adapter, "A", Site.CEDIS, new=1, stock_min=3)
    helper.seed(adapter, "B", Site.CEDIS, new=0, recovered=2, stock_min=10)
    helper.seed(adapter, "C", Site.ACUNA, new=0, stock_min=1)
    helper.seed(adapter, "D", Site.CEDIS, new=5, stock_min=5)

    suggestions = inventory_service.reorder_suggestions()
    assert [(s.site, s.code, s.suggested_qty) for s in suggestions] == [
        (Site.ACUNA, "C", 1),
        (Site.CEDIS, "B", 8),
        (Site.CEDIS, "A", 2),
    ]
    assert [s.code for s in inventory_service.reorder_suggestions(Site.CEDIS)] == ["B", "A"]
