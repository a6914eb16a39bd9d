"""
End-to-end reconciliation scenarios through InventoryService
"""
import pytest

from inventory_tracker.core.models import BoxStockItem, StockLevel
from inventory_tracker.database.store import BOX_STOCK_KEY, OUTGOING_DOCUMENTS_KEY, STOCK_UNITS_KEY
from inventory_tracker.utils.exceptions import InsufficientStockError


class TestReconciliationScenario:
    """Ship against availability computed from both ledgers"""

    def test_add_ship_and_reject(self, service):
        service.add_units([{"sku": "A-1-BLK", "size": "40", "color": "Red", "quantity": 20}])

        items = service.available_stock().items
        assert len(items) == 1
        assert items[0].total_pairs == 20

        service.ship(None, "Store A", [{"sku": "A-1-BLK", "size": "40", "color": "red", "quantity": 5}])
        assert service.available_stock().items[0].total_pairs == 15

        documents_before = service.store.load_versioned(OUTGOING_DOCUMENTS_KEY, [])
        with pytest.raises(InsufficientStockError):
            service.ship(None, "Store A", [{"sku": "A-1-BLK", "size": "40", "color": "red", "quantity": 16}])

        assert service.store.load_versioned(OUTGOING_DOCUMENTS_KEY, []) == documents_before
        assert service.available_stock().items[0].total_pairs == 15

    def test_fuzzy_shipment_reduces_matched_variant(self, service):
        service.add_units([{"sku": "SKU-1-BLK", "size": "40", "color": "Black", "quantity": 10}])

        service.ship(None, "Store A", [{"sku": "SKU-1-BLK-EXTRA", "size": "40", "color": "black", "quantity": 4}])

        items = service.available_stock().items
        assert len(items) == 1
        assert items[0].total_pairs == 6

    def test_all_or_nothing_leaves_both_ledgers(self, seeded_service):
        units_before = seeded_service.store.load_versioned(STOCK_UNITS_KEY, [])
        documents_before = seeded_service.store.load_versioned(OUTGOING_DOCUMENTS_KEY, [])

        with pytest.raises(InsufficientStockError):
            seeded_service.ship(None, "Store A", [
                {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 1},
                {"sku": "SHOE-001-BLK", "size": "41", "color": "black", "quantity": 99},
            ])

        assert seeded_service.store.load_versioned(STOCK_UNITS_KEY, []) == units_before
        assert seeded_service.store.load_versioned(OUTGOING_DOCUMENTS_KEY, []) == documents_before


class TestBoxStockFollowsUnits:
    """Unit changes deduct box stock through UnitsAllocated"""

    @pytest.fixture
    def service_with_boxes(self, service):
        service.store.save(BOX_STOCK_KEY, [
            BoxStockItem(id="box-1", sku="SHOE-001-BLK", name="Trail Runner", category="running",
                         box_count=10, pairs_per_box=6).to_dict(),
        ])
        return service

    def test_add_deducts_once_per_sku(self, service_with_boxes):
        service_with_boxes.add_units([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "Black", "quantity": 4},
            {"sku": "shoe-001-blk", "size": "41", "color": "Black", "quantity": 6},
        ])

        item = service_with_boxes.box_stock.get_item("SHOE-001-BLK")
        assert item.box_count == 8
        assert item.total_pairs == 48
        assert item.stock_level == StockLevel.LOW

    def test_correction_down_also_deducts(self, service_with_boxes):
        added = service_with_boxes.add_units([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "Black", "quantity": 6},
        ])
        unit = added[0]
        unit.quantity = 1

        service_with_boxes.units.update_unit(unit, actor="Budi")

        assert service_with_boxes.box_stock.get_item("SHOE-001-BLK").box_count == 8

    def test_delete_does_not_restore_boxes(self, service_with_boxes):
        added = service_with_boxes.add_units([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "Black", "quantity": 6},
        ])

        service_with_boxes.units.delete_unit(added[0].id)

        assert service_with_boxes.box_stock.get_item("SHOE-001-BLK").box_count == 9


class TestImports:
    """Row imports through the service"""

    def test_unit_import_applies_valid_rows_only(self, service):
        report, added = service.import_unit_rows([
            {"sku": "A-1-BLK", "size": "40", "color": "Red", "quantity": 5},
            {"sku": "A-1-BLK", "size": "", "color": "Red", "quantity": 5},
        ])

        assert len(report.invalid) == 1
        assert len(added) == 1
        assert service.available_stock().total_pairs == 5

    def test_shipment_import_creates_documents_per_recipient(self, seeded_service):
        report, documents = seeded_service.import_outgoing_rows([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 2, "recipient": "Store A"},
            {"sku": "SHOE-001-BLK", "size": "41", "color": "black", "quantity": 3, "recipient": "Store B"},
            {"sku": "SHOE-001-BLK", "size": "41", "color": "black", "quantity": 30, "recipient": "Store B"},
        ])

        assert len(report.valid) == 2
        assert report.invalid[0].reason == "Insufficient stock (available: 12)"
        assert sorted(d.recipient for d in documents) == ["Store A", "Store B"]
        assert seeded_service.available_stock().total_pairs == 27

    def test_shipment_import_validates_against_subtracted_variant(self, service):
        service.store.save(STOCK_UNITS_KEY, [
            {"id": "u-1", "sku": "shoe-001-blk", "size": "40", "color": "Red", "quantity": 10},
            {"id": "u-2", "sku": "SHOE-001-BLK", "size": "40", "color": "Red", "quantity": 0},
        ])

        report, documents = service.import_outgoing_rows([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "red", "quantity": 5, "recipient": "Store A"},
        ])

        assert report.invalid[0].reason == "Insufficient stock (available: 0)"
        assert documents == []
        totals = {item.id: item.total_pairs for item in service.available_stock().items}
        assert totals == {"shoe-001-blk-red-40": 10, "SHOE-001-BLK-red-40": 0}
