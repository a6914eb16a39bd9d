"""
FastAPI dependencies.
"""

from inventory_tracker.services.inventory import InventoryService, get_inventory_service


def get_service() -> InventoryService:
    """Inventory service used by every route; overridden in tests."""
    return get_inventory_service()
