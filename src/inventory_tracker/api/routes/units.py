"""
Stock unit ledger routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.api.schemas import StockUnitBatchCreate, StockUnitUpdate
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
def list_units(service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    units = service.units.list_units()
    return {
        "items": [unit.to_dict() for unit in units],
        "total": len(units),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def add_units(
    batch: StockUnitBatchCreate,
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """
    Add a batch of unit entries. Box stock is deducted per SKU.
    """
    added = service.add_units([unit.to_record() for unit in batch.units], actor=batch.actor)
    logger.info(f"API added {len(added)} stock units")
    return {
        "items": [unit.to_dict() for unit in added],
        "total": len(added),
    }


@router.get("/{unit_id}")
def get_unit(unit_id: str, service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    return service.units.get_unit(unit_id).to_dict()


@router.put("/{unit_id}")
def update_unit(
    unit_id: str,
    update: StockUnitUpdate,
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    record = {
        "id": unit_id,
        "sku": update.sku,
        "size": update.size,
        "color": update.color,
        "quantity": update.quantity,
        "boxId": update.box_id,
        "manufactureDate": update.manufacture_date,
    }
    return service.units.update_unit(record, actor=update.actor).to_dict()


@router.delete("/{unit_id}")
def delete_unit(unit_id: str, service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    removed = service.units.delete_unit(unit_id)
    return {"deleted": removed.id}
