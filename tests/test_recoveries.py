"""
Recovery service tests: cross-site credit and the discard sink
"""

import pydantic
import pytest

from tactical_inventory.schemas.common import RecoveryDestination, Site
from tactical_inventory.schemas.movements import RecoveryCreate

from tests.conftest import TEST_DATE


def recovery(*lines):
    return RecoveryCreate(
        date=TEST_DATE,
        employee_id="EMP-002",
        employee_name="Maria Salas",
        items=[
            {"code": code, "qty": qty, "destination": destination}
            for code, qty, destination in lines
        ],
    )


class TestCreateRecovery:

    def test_credits_recovered_pool_at_destination(self, recovery_service, adapter, helper):
        helper.seed(adapter, "CHALECO", Site.CEDIS, new=4)
        recovery_service.create_recovery(recovery(("CHALECO", 2, "NLD")))

        assert helper.stock(adapter, "CHALECO", Site.NLD).stock_recovered == 2
        cedis = helper.stock(adapter, "CHALECO", Site.CEDIS)
        assert (cedis.stock_new, cedis.stock_recovered) == (4, 0)

    def test_discard_never_touches_ledger(self, recovery_service, adapter, helper):
        helper.seed(adapter, "CHALECO", Site.CEDIS, new=4)
        result = recovery_service.create_recovery(recovery(("CHALECO", 3, "Desecho")))

        assert helper.count_rows(adapter, "inventory_items") == 1
        cedis = helper.stock(adapter, "CHALECO", Site.CEDIS)
        assert (cedis.stock_new, cedis.stock_recovered) == (4, 0)

        stored = recovery_service.get_recovery(result.movement_id)
        assert stored.items[0].destination is RecoveryDestination.DISCARD
        assert stored.total_items == 3

    def test_mixed_destinations_set_both_flags(self, recovery_service, notifier):
        result = recovery_service.create_recovery(recovery(("A", 1, "ACUNA"), ("B", 2, "desecho")))
        stored = recovery_service.get_recovery(result.movement_id)

        assert stored.has_recovered is True
        assert stored.has_discard is True
        assert notifier.events[-1].sites == ["ACUÑA"]
        assert notifier.events[-1].payload["discarded"] == 2

    def test_only_discard(self, recovery_service):
        result = recovery_service.create_recovery(recovery(("A", 1, "Desecho")))
        stored = recovery_service.get_recovery(result.movement_id)
        assert (stored.has_recovered, stored.has_discard) == (False, True)

    def test_unknown_destination_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            recovery(("A", 1, "BODEGA-X"))


def test_site_listing_includes_discarded_recoveries(recovery_service):
    to_nld = recovery_service.create_recovery(recovery(("A", 1, "NLD")))
    discarded = recovery_service.create_recovery(recovery(("B", 1, "Desecho")))
    recovery_service.create_recovery(recovery(("C", 1, "CEDIS")))

    ids = [r.id for r in recovery_service.list_recoveries(Site.NLD)]
    assert ids == [discarded.movement_id, to_nld.movement_id]
    assert len(recovery_service.list_recoveries()) == 3
