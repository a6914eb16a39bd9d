"""
Report routes.
"""

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.exceptions import ValidationError

router = APIRouter()


@router.get("/shipping")
def shipping_report(
    start_date: Optional[date] = Query(None, description="Inclusive start date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Inclusive end date (YYYY-MM-DD)"),
    recipient: Optional[str] = Query(None, description="Filter by recipient name"),
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date", field="start_date",
                              value=start_date)
    return service.shipping_report(start_date, end_date, recipient)


@router.get("/inventory")
def inventory_summary(service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    return service.inventory_summary()
