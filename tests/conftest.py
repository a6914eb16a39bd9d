"""
Test configuration and fixtures for Inventory Tracker
"""
import os

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.api.main import app
from inventory_tracker.core.models import BoxStockItem, Product, StockUnitEntry
from inventory_tracker.database.connection import build_engine, build_session_factory
from inventory_tracker.database.models.base import Base
from inventory_tracker.database.store import BOX_STOCK_KEY, InMemoryLedgerStore, SqlLedgerStore
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.config import InventoryTrackerConfig


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config() -> InventoryTrackerConfig:
    """Configuration with the in-memory backend and default ledger rules"""
    return InventoryTrackerConfig(
        store_backend="memory",
        document_number_prefix="AKS",
        default_actor="Warehouse Staff",
        high_stock_threshold=30,
        medium_stock_threshold=15,
    )


# =============================================================================
# Stores
# =============================================================================

@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session (StaticPool)"""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(engine) -> SqlLedgerStore:
    return SqlLedgerStore(build_session_factory(engine))


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def service(memory_store, config) -> InventoryService:
    return InventoryService(store=memory_store, config=config)


@pytest.fixture
def seeded_service(service) -> InventoryService:
    """
    Service with one catalog product, box stock for it and two variants:

    - SHOE-001-BLK Black 40: 20 pairs
    - SHOE-001-BLK Black 41: 12 pairs

    Seeding writes the ledgers directly so box stock is not deducted.
    """
    service.catalog.upsert_product(Product(
        sku="SHOE-001-BLK", name="Trail Runner", category="running",
        sizes=["40", "41"], colors=["Black"],
    ))
    service.store.save(BOX_STOCK_KEY, [
        BoxStockItem(id="box-1", sku="SHOE-001-BLK", name="Trail Runner", category="running",
                     box_count=10, pairs_per_box=6).to_dict(),
    ])
    service.store.save("stock-units", [
        StockUnitEntry(id="u-1", sku="SHOE-001-BLK", size="40", color="Black", quantity=20).to_dict(),
        StockUnitEntry(id="u-2", sku="SHOE-001-BLK", size="41", color="Black", quantity=12).to_dict(),
    ])
    return service


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def client(seeded_service):
    """TestClient bound to the seeded in-memory service"""
    app.dependency_overrides[get_service] = lambda: seeded_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
