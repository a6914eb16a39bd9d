"""
Box stock routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.api.schemas import ImportRowsRequest
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
def list_box_stock(service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    items = service.box_stock.list_items()
    return {
        "items": [item.to_dict() for item in items],
        "total": len(items),
    }


@router.post("/import")
def import_box_stock(
    request: ImportRowsRequest,
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """
    Merge spreadsheet rows into box stock. Invalid rows are reported, not applied.
    """
    report, merged = service.import_box_rows(request.rows)
    return {
        **report.summary(),
        "items": [item.to_dict() for item in merged],
    }
