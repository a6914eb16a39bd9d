"""
Unit-level stock ledger.

Holds every addition of pairs by (sku, size, color). Entries can be corrected
or removed by id; each write rewrites the whole collection under the version
that was read. Box-stock is kept in step through UnitsAllocated events that
are published only after the unit write has been persisted.
"""

import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from inventory_tracker.core.events import EventDispatcher, UnitsAllocated
from inventory_tracker.core.models import StockUnitEntry, parse_timestamp
from inventory_tracker.database.store import LedgerStore, STOCK_UNITS_KEY
from inventory_tracker.utils.config import get_config
from inventory_tracker.utils.exceptions import NotFoundError, ValidationError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)

UnitInput = Union[StockUnitEntry, Dict[str, Any]]


def _new_unit_id() -> str:
    return str(uuid.uuid4())


class StockUnitLedger:
    """
    Additive ledger of stock units.

    Deleting an entry does not give boxes back to box-stock; that drift is
    accepted.
    """

    def __init__(self, store: LedgerStore, dispatcher: Optional[EventDispatcher] = None,
                 config=None):
        """
        Args:
            store: Ledger store holding the stock-units collection
            dispatcher: Receives UnitsAllocated after each persisted change
            config: Optional configuration override
        """
        self.store = store
        self.dispatcher = dispatcher
        self.config = config or get_config()

        logger.debug("StockUnitLedger initialized")

    # Reads

    def _load(self) -> Tuple[List[StockUnitEntry], int]:
        raw, version = self.store.load_versioned(STOCK_UNITS_KEY, [])
        return [StockUnitEntry.from_dict(item) for item in raw], version

    def _save(self, units: List[StockUnitEntry], expected_version: int) -> int:
        return self.store.save(
            STOCK_UNITS_KEY, [unit.to_dict() for unit in units], expected_version=expected_version
        )

    def list_units(self) -> List[StockUnitEntry]:
        units, _ = self._load()
        return units

    def get_unit(self, unit_id: str) -> StockUnitEntry:
        for unit in self.list_units():
            if unit.id == unit_id:
                return unit
        raise NotFoundError(f"Stock unit not found: {unit_id}", entity="stock_unit", entity_id=unit_id)

    def units_by_sku(self) -> Dict[str, List[StockUnitEntry]]:
        """Group entries by SKU, preserving the order SKUs first appear in."""
        grouped: Dict[str, List[StockUnitEntry]] = OrderedDict()
        for unit in self.list_units():
            grouped.setdefault(unit.sku, []).append(unit)
        return grouped

    # Writes

    def add_units(self, entries: Iterable[UnitInput],
                  actor: Optional[str] = None) -> List[StockUnitEntry]:
        """
        Append a batch of entries.

        Each entry gets a fresh id; dateAdded and addedBy are filled when
        absent. After the write, one UnitsAllocated is published per distinct
        SKU (compared case-insensitively) carrying the batch total for it.

        Args:
            entries: StockUnitEntry objects or dicts in the stored shape
            actor: Recorded as addedBy where the entry has none

        Returns:
            The stored entries, in input order

        Raises:
            ValidationError: An entry is malformed
            ConcurrentModificationError: The ledger changed since it was read
        """
        now = datetime.now()
        added_by = actor or self.config.ledger.default_actor

        new_units = [self._prepare(entry, now, added_by) for entry in entries]
        if not new_units:
            logger.debug("add_units called with an empty batch")
            return []

        units, version = self._load()
        units.extend(new_units)
        self._save(units, version)

        logger.info(f"Added {len(new_units)} stock unit entries")

        totals: Dict[str, Tuple[str, int]] = OrderedDict()
        for unit in new_units:
            sku_key = unit.sku.lower()
            sku, quantity = totals.get(sku_key, (unit.sku, 0))
            totals[sku_key] = (sku, quantity + unit.quantity)

        for sku, quantity in totals.values():
            self._publish(UnitsAllocated(sku=sku, quantity=quantity, source="add"))

        return new_units

    def update_unit(self, unit: UnitInput, actor: Optional[str] = None) -> StockUnitEntry:
        """
        Replace an entry by id.

        The original dateAdded and addedBy are kept, as are boxId and
        manufactureDate when the replacement leaves them empty. When the
        quantity changed, one UnitsAllocated carrying the absolute difference
        is published; box stock is deducted for increases and decreases alike.

        Raises:
            ValidationError: SKU, size or color is empty
            NotFoundError: No entry has this id
        """
        updated = unit if isinstance(unit, StockUnitEntry) else self._coerce(unit)
        self._require_variant(updated)
        actor = actor or self.config.ledger.default_actor

        units, version = self._load()
        index = next((i for i, existing in enumerate(units) if existing.id == updated.id), None)
        if index is None:
            raise NotFoundError(
                f"Stock unit not found: {updated.id}", entity="stock_unit", entity_id=updated.id
            )

        previous = units[index]
        quantity_difference = updated.quantity - previous.quantity

        updated.date_added = previous.date_added
        updated.added_by = previous.added_by
        if updated.box_id is None:
            updated.box_id = previous.box_id
        if updated.manufacture_date is None:
            updated.manufacture_date = previous.manufacture_date
        updated.last_modified = datetime.now()
        updated.modified_by = actor

        units[index] = updated
        self._save(units, version)

        logger.info(
            f"Updated stock unit {updated.id} ({updated.sku}): "
            f"quantity {previous.quantity} -> {updated.quantity}"
        )

        if quantity_difference != 0:
            self._publish(UnitsAllocated(
                sku=updated.sku, quantity=abs(quantity_difference), source="update"
            ))

        return updated

    def delete_unit(self, unit_id: str) -> StockUnitEntry:
        """
        Remove an entry by id. Box stock is not compensated.

        Raises:
            NotFoundError: No entry has this id
        """
        units, version = self._load()
        remaining = [unit for unit in units if unit.id != unit_id]
        if len(remaining) == len(units):
            raise NotFoundError(f"Stock unit not found: {unit_id}", entity="stock_unit", entity_id=unit_id)

        removed = next(unit for unit in units if unit.id == unit_id)
        self._save(remaining, version)

        logger.info(f"Deleted stock unit {unit_id} ({removed.sku}, {removed.quantity} pairs)")
        return removed

    # Helpers

    def _publish(self, event: UnitsAllocated) -> None:
        if self.dispatcher is None:
            return
        result = self.dispatcher.publish(event)
        if result.handlers_failed:
            logger.warning(
                f"{result.handlers_failed} handler(s) failed for {event.sku}; "
                f"unit ledger change is kept"
            )

    def _prepare(self, entry: UnitInput, now: datetime, added_by: str) -> StockUnitEntry:
        unit = entry if isinstance(entry, StockUnitEntry) else self._coerce(entry)
        self._require_variant(unit)

        unit.id = _new_unit_id()
        unit.date_added = unit.date_added or now
        unit.added_by = unit.added_by or added_by
        return unit

    @staticmethod
    def _require_variant(unit: StockUnitEntry) -> None:
        if not unit.sku or not unit.sku.strip():
            raise ValidationError("Stock unit SKU cannot be empty", field="sku")
        if not unit.size or not unit.size.strip() or not unit.color or not unit.color.strip():
            raise ValidationError("Stock unit size and color are required", field="size/color")
        unit.sku = unit.sku.strip()

    @staticmethod
    def _coerce(data: Dict[str, Any]) -> StockUnitEntry:
        try:
            return StockUnitEntry(
                id=str(data.get("id") or ""),
                sku=str(data.get("sku") or ""),
                size=str(data.get("size") or ""),
                color=str(data.get("color") or ""),
                quantity=int(data.get("quantity") or 0),
                box_id=data.get("boxId") or data.get("box_id"),
                date_added=parse_timestamp(data.get("dateAdded")),
                added_by=data.get("addedBy"),
                manufacture_date=parse_timestamp(data.get("manufactureDate")),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid stock unit: {e}", value=data.get("sku"))
