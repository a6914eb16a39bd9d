"""
Integration tests for SqlLedgerStore on SQLite
"""
import pytest

from inventory_tracker.database.connection import build_session_factory
from inventory_tracker.database.models import LedgerCollection
from inventory_tracker.database.store import SqlLedgerStore
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.exceptions import ConcurrentModificationError


class TestSqlLedgerStore:
    """Test versioned collections persisted through SQLAlchemy"""

    def test_missing_key(self, sql_store):
        assert sql_store.load_versioned("stock-units", []) == ([], 0)

    def test_first_save_creates_row(self, sql_store, engine):
        version = sql_store.save("stock-units", [{"id": "u-1", "quantity": 3}], expected_version=0)

        assert version == 1
        session = build_session_factory(engine)()
        try:
            row = session.get(LedgerCollection, "stock-units")
            assert row.version == 1
            assert "u-1" in row.payload
        finally:
            session.close()

    def test_compare_and_swap(self, sql_store):
        sql_store.save("box-stock", [])
        data, version = sql_store.load_versioned("box-stock", [])

        assert sql_store.save("box-stock", [{"sku": "A"}], expected_version=version) == version + 1

        with pytest.raises(ConcurrentModificationError):
            sql_store.save("box-stock", [{"sku": "B"}], expected_version=version)

        assert sql_store.load("box-stock", []) == [{"sku": "A"}]

    def test_stale_first_write_is_rejected(self, sql_store):
        sql_store.save("recipients", [{"name": "first"}], expected_version=0)

        with pytest.raises(ConcurrentModificationError):
            sql_store.save("recipients", [{"name": "second"}], expected_version=0)

    def test_unconditional_save(self, sql_store):
        sql_store.save("products", [{"sku": "A"}])
        assert sql_store.save("products", [{"sku": "B"}]) == 2
        assert sql_store.load("products", []) == [{"sku": "B"}]

    def test_lost_update_is_prevented(self, sql_store):
        """Two writers read the same version; only the first write lands."""
        sql_store.save("stock-units", [])
        first_data, first_version = sql_store.load_versioned("stock-units", [])
        second_data, second_version = sql_store.load_versioned("stock-units", [])

        sql_store.save("stock-units", first_data + [{"id": "first"}], expected_version=first_version)

        with pytest.raises(ConcurrentModificationError):
            sql_store.save("stock-units", second_data + [{"id": "second"}], expected_version=second_version)

        assert sql_store.load("stock-units", []) == [{"id": "first"}]


class TestServiceOnSql:
    """Run the ledgers against the SQL store"""

    def test_units_and_shipments_round_trip(self, sql_store, config):
        service = InventoryService(store=sql_store, config=config)

        service.add_units([{"sku": "A-1-BLK", "size": "40", "color": "Red", "quantity": 20}])
        service.ship(None, "Store A", [{"sku": "A-1-BLK", "size": "40", "color": "red", "quantity": 5}])

        reopened = InventoryService(store=sql_store, config=config)
        assert reopened.available_stock().items[0].total_pairs == 15
        assert len(reopened.outgoing.list_documents()) == 1
