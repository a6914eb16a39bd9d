"""
Box-stock synchronization.

Box stock is a coarse per-SKU count of boxes. It is not reconciled with the
unit ledger; it only receives one-way deductions when units are allocated,
rounded up to whole boxes.
"""

import math
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from inventory_tracker.core.events import EventDispatcher, UnitsAllocated
from inventory_tracker.core.models import BoxStockItem
from inventory_tracker.core.validator import Valid
from inventory_tracker.database.store import BOX_STOCK_KEY, LedgerStore
from inventory_tracker.utils.config import get_config
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


def boxes_to_reduce(pairs: int, pairs_per_box: int) -> int:
    """
    Number of whole boxes consumed by a number of pairs.

    >>> boxes_to_reduce(13, 12)
    2
    """
    if pairs_per_box <= 0 or pairs <= 0:
        return 0
    return math.ceil(pairs / pairs_per_box)


def _new_box_id() -> str:
    return f"box-{uuid.uuid4().hex[:12]}"


class BoxStockSynchronizer:
    """Owns the box-stock collection."""

    def __init__(self, store: LedgerStore, config=None):
        self.store = store
        self.config = config or get_config()

    @property
    def _thresholds(self) -> Tuple[int, int]:
        ledger = self.config.ledger
        return ledger.high_stock_threshold, ledger.medium_stock_threshold

    def _load(self) -> Tuple[List[BoxStockItem], int]:
        raw, version = self.store.load_versioned(BOX_STOCK_KEY, [])
        items = [BoxStockItem.from_dict(item) for item in raw]
        for item in items:
            item.recalculate(*self._thresholds)
        return items, version

    def _save(self, items: List[BoxStockItem], expected_version: int) -> int:
        return self.store.save(
            BOX_STOCK_KEY, [item.to_dict() for item in items], expected_version=expected_version
        )

    def subscribe(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe(UnitsAllocated, self.handle_units_allocated)

    def handle_units_allocated(self, event: UnitsAllocated) -> None:
        self.apply_sync(event.sku, event.quantity)

    def list_items(self) -> List[BoxStockItem]:
        items, _ = self._load()
        return items

    def get_item(self, sku: str) -> Optional[BoxStockItem]:
        wanted = sku.lower()
        return next((item for item in self.list_items() if item.sku.lower() == wanted), None)

    def apply_sync(self, sku: str, pairs: int) -> Optional[BoxStockItem]:
        """
        Deduct the boxes corresponding to a number of pairs.

        The SKU is matched case-insensitively. A SKU without box stock is
        left alone; the box count is clamped at zero.

        Returns:
            The updated item, or None when nothing was changed
        """
        items, version = self._load()
        wanted = sku.lower()
        item = next((i for i in items if i.sku.lower() == wanted), None)

        if item is None:
            logger.debug(f"No box stock for {sku}; sync skipped")
            return None

        boxes = boxes_to_reduce(pairs, item.pairs_per_box)
        if boxes == 0:
            return None

        previous = item.box_count
        item.box_count = max(0, item.box_count - boxes)
        item.recalculate(*self._thresholds)
        self._save(items, version)

        logger.info(
            f"Box stock {item.sku}: {pairs} pairs -> -{boxes} boxes "
            f"({previous} -> {item.box_count}, {item.stock_level.value})"
        )
        return item

    def merge_batch(self, rows: Iterable[Any]) -> List[BoxStockItem]:
        """
        Merge imported box-stock rows.

        A row replaces the existing item with the same SKU (case-insensitive)
        and keeps its id; other rows are appended with a new id. Only Valid
        rows are applied, anything else in the batch is skipped.

        Args:
            rows: Validated rows (Valid/Invalid) or plain records with sku,
                name, category, boxCount and pairsPerBox

        Returns:
            The merged or created items, in row order
        """
        records = [self._record_of(row) for row in rows]
        records = [record for record in records if record is not None]
        if not records:
            return []

        items, version = self._load()
        index_by_sku: Dict[str, int] = {item.sku.lower(): i for i, item in enumerate(items)}
        merged: List[BoxStockItem] = []

        for record in records:
            sku = str(record["sku"]).strip()
            position = index_by_sku.get(sku.lower())

            item = BoxStockItem(
                id=items[position].id if position is not None else _new_box_id(),
                sku=sku,
                name=str(record.get("name") or ""),
                category=str(record.get("category") or ""),
                box_count=int(record.get("boxCount") or 0),
                pairs_per_box=int(record.get("pairsPerBox") or 0),
            )
            item.recalculate(*self._thresholds)

            if position is not None:
                items[position] = item
            else:
                index_by_sku[sku.lower()] = len(items)
                items.append(item)
            merged.append(item)

        self._save(items, version)
        logger.info(f"Merged {len(merged)} box stock rows ({len(items)} items stored)")
        return merged

    @staticmethod
    def _record_of(row: Any) -> Optional[Dict[str, Any]]:
        if isinstance(row, Valid):
            return row.record
        if isinstance(row, dict):
            return row
        return None
