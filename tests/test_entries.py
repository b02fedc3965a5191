"""
Entry service tests
"""

import logging
import pytest

from tactical_inventory.core.exceptions import ConstraintError, NotFoundError, ValidationError
from tactical_inventory.schemas.common import Site, StockStatus
from tactical_inventory.schemas.movements import EntryCreate, EntryUpdate
from tactical_inventory.services.notifications import ChangeNotifier
from tactical_inventory.services.stock import EntryService, StockLedger

from tests.conftest import TEST_DATE, TEST_USER


def entry(site="CEDIS", *lines):
    return EntryCreate(
        date=TEST_DATE,
        site=site,
        items=[{"code": code, "qty": qty, "description": f"Item {code}"} for code, qty in lines],
    )


class TestCreateEntry:

    def test_first_entry_creates_stock(self, entry_service, adapter, helper):
        result = entry_service.create_entry(entry("CEDIS", ("PT30", 10)))

        record = helper.stock(adapter, "PT30", Site.CEDIS)
        assert (record.stock_new, record.stock_recovered) == (10, 0)
        assert record.status is StockStatus.IN_STOCK

        stored = entry_service.get_entry(result.movement_id)
        assert stored.total_items == 10
        assert stored.created_by == TEST_USER
        assert [(line.code, line.qty) for line in stored.items] == [("PT30", 10)]

    def test_total_items_is_recomputed(self, entry_service):
        result = entry_service.create_entry(entry("NLD", ("A", 2), ("B", 3), ("A", 4)))
        assert entry_service.get_entry(result.movement_id).total_items == 9

    def test_site_name_is_normalised(self, entry_service, adapter, helper):
        entry_service.create_entry(entry("acuna", ("PT30", 1)))
        assert helper.stock(adapter, "PT30", Site.ACUNA).stock_new == 1

    def test_empty_entry_rejected(self, entry_service, helper, adapter):
        with pytest.raises(ValidationError):
            entry_service.create_entry(entry("CEDIS"))
        assert helper.count_rows(adapter, "entries") == 0

    def test_zero_quantity_rejected(self, entry_service):
        with pytest.raises(ValidationError):
            entry_service.create_entry(entry("CEDIS", ("PT30", 0)))

    def test_failing_line_rolls_back_whole_entry(self, entry_service, adapter, helper, notifier, monkeypatch):
        original = StockLedger.receive_new
        calls = []

        def failing_receive_new(self, code, site, quantity, description="", size=None):
            calls.append(code)
            if len(calls) == 3:
                raise ConstraintError("duplicate key")
            return original(self, code, site, quantity, description, size)

        monkeypatch.setattr(StockLedger, "receive_new", failing_receive_new)

        with pytest.raises(ConstraintError):
            entry_service.create_entry(entry("CEDIS", ("L1", 1), ("L2", 2), ("L3", 3), ("L4", 4), ("L5", 5)))

        assert helper.count_rows(adapter, "inventory_items") == 0
        assert helper.count_rows(adapter, "entries") == 0
        assert helper.count_rows(adapter, "entry_items") == 0
        assert notifier.events == []

    def test_notification_after_commit(self, entry_service, notifier):
        result = entry_service.create_entry(entry("CEDIS", ("PT30", 1)))
        event = notifier.events[-1]
        assert event.kind == "entry-created"
        assert event.sites == ["CEDIS"]
        assert event.entity_id == result.movement_id

    def test_notifier_failure_keeps_committed_entry(self, adapter, helper, caplog):
        class BrokenNotifier(ChangeNotifier):
            def publish(self, event):
                raise RuntimeError("socket closed")

        service = EntryService(adapter, BrokenNotifier(), TEST_USER)
        with caplog.at_level(logging.ERROR, logger="tactical_inventory"):
            service.create_entry(entry("CEDIS", ("PT30", 6)))

        assert helper.stock(adapter, "PT30", Site.CEDIS).stock_new == 6
        assert any("Failed to publish entry-created" in r.getMessage() for r in caplog.records)


class TestEntryCorrections:

    def test_update_reverses_then_reapplies(self, entry_service, adapter, helper):
        result = entry_service.create_entry(entry("CEDIS", ("PT30", 10)))
        entry_service.update_entry(
            result.movement_id,
            EntryUpdate(date=TEST_DATE, site="CEDIS", items=[{"code": "PT30", "qty": 4}]),
        )
        assert helper.stock(adapter, "PT30", Site.CEDIS).stock_new == 4
        assert entry_service.get_entry(result.movement_id).total_items == 4

    def test_update_can_move_entry_to_another_site(self, entry_service, adapter, helper, notifier):
        result = entry_service.create_entry(entry("CEDIS", ("PT30", 10)))
        entry_service.update_entry(
            result.movement_id,
            EntryUpdate(date=TEST_DATE, site="NLD", items=[{"code": "PT30", "qty": 10}]),
        )
        assert helper.stock(adapter, "PT30", Site.CEDIS).stock_new == 0
        assert helper.stock(adapter, "PT30", Site.NLD).stock_new == 10
        assert notifier.events[-1].sites == ["CEDIS", "NLD"]

    def test_delete_reverses_with_clamp(self, entry_service, dispatch_service, adapter, helper):
        from tactical_inventory.schemas.movements import DispatchCreate

        result = entry_service.create_entry(entry("CEDIS", ("PT30", 10)))
        dispatch_service.create_dispatch(DispatchCreate(
            date=TEST_DATE, site="CEDIS", employee_id="E1", employee_name="Ana",
            items=[{"code": "PT30", "qty": 7}],
        ))
        entry_service.delete_entry(result.movement_id)

        record = helper.stock(adapter, "PT30", Site.CEDIS)
        assert record.stock_new == 0
        with pytest.raises(NotFoundError):
            entry_service.get_entry(result.movement_id)
        assert helper.count_rows(adapter, "entry_items") == 0

    def test_missing_entry(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.delete_entry(999)


def test_list_entries_by_site(entry_service):
    entry_service.create_entry(entry("CEDIS", ("A", 1)))
    entry_service.create_entry(entry("NLD", ("B", 1)))
    entry_service.create_entry(entry("CEDIS", ("C", 1)))

    cedis = entry_service.list_entries(Site.CEDIS)
    assert [e.items[0].code for e in cedis] == ["C", "A"]
    assert len(entry_service.list_entries()) == 3
