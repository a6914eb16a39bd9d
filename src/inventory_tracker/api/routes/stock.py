"""
Available stock routes.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
def get_available_stock(
    search: Optional[str] = Query(None, description="Search by SKU or product name"),
    in_stock_only: bool = Query(False, description="Hide variants with zero pairs"),
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """
    Current availability per (sku, color, size), recomputed on every call.
    """
    availability = service.available_stock()

    needle = search.lower() if search else None
    items = [
        item for item in availability.items
        if (not needle or needle in item.sku.lower() or needle in item.name.lower())
        and (not in_stock_only or item.total_pairs > 0)
    ]

    return {
        "items": [item.to_dict() for item in items],
        "total": len(items),
        "totalPairs": sum(item.total_pairs for item in items),
        "unresolved": [line.to_dict() for line in availability.unresolved],
    }
