"""
Pydantic schemas for API request validation.

Bodies use the same camelCase field names as the stored records;
snake_case names are accepted as well.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Stock unit schemas
class StockUnitCreate(CamelModel):
    """One unit-stock addition."""
    sku: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    box_id: Optional[str] = None
    manufacture_date: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "size": self.size,
            "color": self.color,
            "quantity": self.quantity,
            "boxId": self.box_id,
            "manufactureDate": self.manufacture_date,
        }


class StockUnitBatchCreate(CamelModel):
    """Batch of unit-stock additions."""
    units: List[StockUnitCreate]
    actor: Optional[str] = None


class StockUnitUpdate(CamelModel):
    """Replacement values for an existing entry; omitted boxId and manufactureDate are kept."""
    sku: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    box_id: Optional[str] = None
    manufacture_date: Optional[datetime] = None
    actor: Optional[str] = None


# Outgoing document schemas
class LineItemRequest(CamelModel):
    """Requested variant and quantity."""
    sku: str
    size: str
    color: str
    quantity: int
    name: Optional[str] = None


class DocumentCreate(CamelModel):
    """Outgoing document creation."""
    recipient_id: Optional[str] = None
    recipient: Optional[str] = None
    items: List[LineItemRequest] = Field(default_factory=list)
    notes: str = ""


# Import schemas
class ImportRowsRequest(BaseModel):
    """Spreadsheet rows, one dict per row."""
    rows: List[Dict[str, Any]]
    actor: Optional[str] = None
