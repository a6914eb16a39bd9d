"""
Data models for the Inventory Tracker.

Records are persisted as JSON objects with camelCase keys, so every model
offers to_dict()/from_dict() that map between the stored shape and the
snake_case attributes used in code.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any
from enum import Enum


DEFAULT_HIGH_STOCK_THRESHOLD = 30
DEFAULT_MEDIUM_STOCK_THRESHOLD = 15

UNKNOWN_PRODUCT_NAME = "Unknown Product"
UNCATEGORIZED = "uncategorized"


class StockLevel(Enum):
    """Box stock level derived from the box count."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def stock_level_for(box_count: int,
                    high_threshold: int = DEFAULT_HIGH_STOCK_THRESHOLD,
                    medium_threshold: int = DEFAULT_MEDIUM_STOCK_THRESHOLD) -> StockLevel:
    """
    Classify a box count: above high_threshold is high, above
    medium_threshold is medium, anything else is low.
    """
    if box_count > high_threshold:
        return StockLevel.HIGH
    if box_count > medium_threshold:
        return StockLevel.MEDIUM
    return StockLevel.LOW


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass a datetime through)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(value)


@dataclass
class StockUnitEntry:
    """
    One addition to the unit-level ledger: a quantity of pairs of one
    SKU in one size and color.
    """

    id: str
    sku: str
    size: str
    color: str
    quantity: int = 0
    box_id: Optional[str] = None

    date_added: Optional[datetime] = None
    added_by: Optional[str] = None
    last_modified: Optional[datetime] = None
    modified_by: Optional[str] = None
    manufacture_date: Optional[datetime] = None

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError("Stock unit quantity cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored representation."""
        return {
            "id": self.id,
            "sku": self.sku,
            "size": self.size,
            "color": self.color,
            "quantity": self.quantity,
            "boxId": self.box_id,
            "dateAdded": format_timestamp(self.date_added),
            "addedBy": self.added_by,
            "lastModified": format_timestamp(self.last_modified),
            "modifiedBy": self.modified_by,
            "manufactureDate": format_timestamp(self.manufacture_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockUnitEntry":
        return cls(
            id=str(data.get("id", "")),
            sku=str(data.get("sku", "")),
            size=str(data.get("size", "")),
            color=str(data.get("color", "")),
            quantity=_to_int(data.get("quantity")),
            box_id=data.get("boxId") or None,
            date_added=parse_timestamp(data.get("dateAdded")),
            added_by=data.get("addedBy"),
            last_modified=parse_timestamp(data.get("lastModified")),
            modified_by=data.get("modifiedBy"),
            manufacture_date=parse_timestamp(data.get("manufactureDate")),
        )


@dataclass
class OutgoingLineItem:
    """A single shipped variant inside an outgoing document."""

    id: str
    sku: str
    name: str
    size: str
    color: str
    quantity: int

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError("Outgoing line quantity must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "size": self.size,
            "color": self.color,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutgoingLineItem":
        return cls(
            id=str(data.get("id", "")),
            sku=str(data.get("sku", "")),
            name=str(data.get("name", "")),
            size=str(data.get("size", "")),
            color=str(data.get("color", "")),
            quantity=_to_int(data.get("quantity")),
        )


@dataclass
class OutgoingDocument:
    """
    One delivery to one recipient.

    The recipient field is a snapshot of the name at creation time and is
    never refreshed from the recipient directory.
    """

    id: str
    document_number: str
    date: str
    time: str
    recipient: str
    items: List[OutgoingLineItem] = field(default_factory=list)
    recipient_id: Optional[str] = None
    notes: str = ""
    total_items: int = 0

    def __post_init__(self):
        self.total_items = sum(item.quantity for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "documentNumber": self.document_number,
            "date": self.date,
            "time": self.time,
            "recipientId": self.recipient_id,
            "recipient": self.recipient,
            "notes": self.notes,
            "items": [item.to_dict() for item in self.items],
            "totalItems": self.total_items,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutgoingDocument":
        return cls(
            id=str(data.get("id", "")),
            document_number=str(data.get("documentNumber", "")),
            date=str(data.get("date", "")),
            time=str(data.get("time", "")),
            recipient=str(data.get("recipient", "")),
            items=[OutgoingLineItem.from_dict(item) for item in data.get("items") or []],
            recipient_id=data.get("recipientId") or None,
            notes=data.get("notes") or "",
        )


@dataclass
class BoxStockItem:
    """Coarse box-level stock for one SKU."""

    id: str
    sku: str
    name: str
    category: str
    box_count: int = 0
    pairs_per_box: int = 0
    total_pairs: int = 0
    stock_level: StockLevel = StockLevel.LOW

    def __post_init__(self):
        if self.box_count < 0:
            raise ValueError("Box count cannot be negative")
        self.recalculate()

    def recalculate(self,
                    high_threshold: int = DEFAULT_HIGH_STOCK_THRESHOLD,
                    medium_threshold: int = DEFAULT_MEDIUM_STOCK_THRESHOLD) -> None:
        """Derive total pairs and stock level from the box count."""
        self.total_pairs = self.box_count * self.pairs_per_box
        self.stock_level = stock_level_for(self.box_count, high_threshold, medium_threshold)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "boxCount": self.box_count,
            "pairsPerBox": self.pairs_per_box,
            "totalPairs": self.total_pairs,
            "stockLevel": self.stock_level.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoxStockItem":
        return cls(
            id=str(data.get("id", "")),
            sku=str(data.get("sku", "")),
            name=str(data.get("name", "")),
            category=str(data.get("category", "")),
            box_count=_to_int(data.get("boxCount")),
            pairs_per_box=_to_int(data.get("pairsPerBox")),
        )


@dataclass
class AggregatedStockItem:
    """Current availability of one (sku, color, size) variant. Never persisted."""

    id: str
    sku: str
    name: str
    category: str
    size: str
    color: str
    total_pairs: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "size": self.size,
            "color": self.color,
            "totalPairs": self.total_pairs,
        }


@dataclass
class Recipient:
    """A delivery destination kept in the recipient directory."""

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Recipient name cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "notes": self.notes,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipient":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
            notes=data.get("notes"),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )


@dataclass
class Product:
    """Catalog entry, used only to label aggregated stock."""

    sku: str
    name: str
    category: str = UNCATEGORIZED
    sizes: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "sizes": list(self.sizes),
            "colors": list(self.colors),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            sku=str(data.get("sku", "")),
            name=str(data.get("name", "")),
            category=data.get("category") or UNCATEGORIZED,
            sizes=[str(size) for size in data.get("sizes") or []],
            colors=[str(color) for color in data.get("colors") or []],
        )
