"""
Stock picker: search available variants and build the line items of a
shipment.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from inventory_tracker.core.aggregator import AggregationResult
from inventory_tracker.core.models import AggregatedStockItem
from inventory_tracker.utils.exceptions import NotFoundError, ValidationError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class PickedItem:
    item: AggregatedStockItem
    quantity: int

    @property
    def max_quantity(self) -> int:
        return self.item.total_pairs

    def to_line(self) -> Dict[str, object]:
        return {
            "sku": self.item.sku,
            "name": self.item.name,
            "size": self.item.size,
            "color": self.item.color,
            "quantity": self.quantity,
        }


class StockPicker:
    """
    Selection state for one shipment.

    Availability is read from the provider on construction and on refresh();
    quantities are always kept within [1, available].
    """

    def __init__(self, availability: Callable[[], AggregationResult]):
        self.availability = availability
        self._items: List[AggregatedStockItem] = []
        self._selected: Dict[str, PickedItem] = {}
        self.refresh()

    @property
    def items(self) -> List[AggregatedStockItem]:
        return list(self._items)

    @property
    def selected(self) -> List[PickedItem]:
        return list(self._selected.values())

    def search(self, term: Optional[str] = None) -> List[AggregatedStockItem]:
        """Case-insensitive substring match on sku or name."""
        if not term:
            return self.items
        needle = term.lower()
        return [
            item for item in self._items
            if needle in item.sku.lower() or needle in (item.name or "").lower()
        ]

    def select(self, item_id: str, quantity: int = 1) -> PickedItem:
        """
        Add a variant to the selection.

        Selecting an already selected variant adds one more pair, up to the
        available quantity.

        Raises:
            NotFoundError: The variant is not in the current availability view
            ValidationError: The variant has no pairs available
        """
        item = next((i for i in self._items if i.id == item_id), None)
        if item is None:
            raise NotFoundError(f"Stock item not found: {item_id}", entity="stock_item", entity_id=item_id)
        if item.total_pairs <= 0:
            raise ValidationError(f"No stock available for {item.sku}", field="quantity", value=0)

        picked = self._selected.get(item_id)
        if picked is not None:
            picked.quantity = self._clamp(picked.quantity + 1, item.total_pairs)
            return picked

        picked = PickedItem(item=item, quantity=self._clamp(quantity, item.total_pairs))
        self._selected[item_id] = picked
        return picked

    def set_quantity(self, item_id: str, quantity: int) -> PickedItem:
        picked = self._selected.get(item_id)
        if picked is None:
            raise NotFoundError(f"Item not selected: {item_id}", entity="stock_item", entity_id=item_id)
        picked.quantity = self._clamp(quantity, picked.max_quantity)
        return picked

    def remove(self, item_id: str) -> None:
        self._selected.pop(item_id, None)

    def clear(self) -> None:
        self._selected.clear()

    def refresh(self) -> None:
        """
        Re-read availability and re-clamp the selection.

        Selected variants that are gone or sold out are dropped.
        """
        self._items = list(self.availability().items)
        by_id = {item.id: item for item in self._items}

        for item_id in list(self._selected):
            item = by_id.get(item_id)
            if item is None or item.total_pairs <= 0:
                logger.info(f"Dropping {item_id} from selection: no longer available")
                del self._selected[item_id]
                continue
            picked = self._selected[item_id]
            picked.item = item
            picked.quantity = self._clamp(picked.quantity, item.total_pairs)

    def build_line_items(self) -> List[Dict[str, object]]:
        return [picked.to_line() for picked in self._selected.values()]

    @staticmethod
    def _clamp(quantity: int, available: int) -> int:
        return max(1, min(int(quantity), available))
