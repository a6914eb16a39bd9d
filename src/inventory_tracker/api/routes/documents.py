"""
Outgoing document routes.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_tracker.api.dependencies import get_service
from inventory_tracker.api.schemas import DocumentCreate, ImportRowsRequest
from inventory_tracker.services.inventory import InventoryService
from inventory_tracker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("")
def list_documents(
    number: Optional[str] = Query(None, description="Filter by document number"),
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """List documents, newest first."""
    if number:
        documents = service.outgoing.find_by_number(number)
    else:
        documents = service.outgoing.list_documents()

    return {
        "items": [document.to_dict() for document in documents],
        "total": len(documents),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_document(
    request: DocumentCreate,
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """
    Create an outgoing document.

    Every line is checked against current availability; if any line is
    short, nothing is written and 409 lists the short lines.
    """
    document = service.ship(
        recipient_id=request.recipient_id,
        recipient_name=request.recipient,
        line_items=[item.model_dump() for item in request.items],
        notes=request.notes,
    )
    return document.to_dict()


@router.post("/import")
def import_documents(
    request: ImportRowsRequest,
    service: InventoryService = Depends(get_service)
) -> Dict[str, Any]:
    """Create one document per recipient from spreadsheet rows."""
    report, documents = service.import_outgoing_rows(request.rows)
    return {
        **report.summary(),
        "documents": [document.to_dict() for document in documents],
    }


@router.get("/{document_id}")
def get_document(document_id: str, service: InventoryService = Depends(get_service)) -> Dict[str, Any]:
    return service.outgoing.get_document(document_id).to_dict()
