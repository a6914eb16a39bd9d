"""
Available-stock aggregation for the Inventory Tracker.

Availability is never stored. It is rebuilt on every read from two ledgers:

Additions:
- every StockUnitEntry adds its quantity to the variant key
  "sku-color(lower case)-size"

Subtractions:
- every line of every OutgoingDocument removes its quantity from the
  variant it resolves to, clamped at zero
- a line resolves to its exact key first; when the additive ledger has no
  such key, the first existing variant with the same base SKU (first three
  hyphen segments, case-insensitive), the same size and the same color
  (case-insensitive) is used instead
- a line that resolves to nothing is dropped and reported as an anomaly

The first-match fallback is order dependent: if two variants collide on
base SKU + size + color, the one created first in the additive pass wins.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from inventory_tracker.core.models import (
    AggregatedStockItem,
    OutgoingDocument,
    Product,
    StockUnitEntry,
    UNCATEGORIZED,
    UNKNOWN_PRODUCT_NAME,
)
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)

BASE_SKU_SEGMENTS = 3

ProductLookup = Callable[[str], Optional[Product]]


def base_sku(sku: str) -> str:
    """Return the first three hyphen-separated segments of a SKU."""
    return "-".join(sku.split("-")[:BASE_SKU_SEGMENTS])


def normalize_color(color: str) -> str:
    return color.lower()


def variant_key(sku: str, color: str, size: str) -> str:
    """Composite key shared by the additive and subtractive passes."""
    return f"{sku}-{normalize_color(color)}-{size}"


@dataclass
class UnresolvedLine:
    """An outgoing line that matched no variant in the additive ledger."""

    document_id: str
    document_number: str
    line_id: str
    sku: str
    size: str
    color: str
    quantity: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "documentId": self.document_id,
            "documentNumber": self.document_number,
            "lineId": self.line_id,
            "sku": self.sku,
            "size": self.size,
            "color": self.color,
            "quantity": self.quantity,
        }


@dataclass
class AggregationResult:
    """Output of one aggregation run."""

    items: List[AggregatedStockItem] = field(default_factory=list)
    unresolved: List[UnresolvedLine] = field(default_factory=list)

    def by_key(self) -> Dict[str, AggregatedStockItem]:
        return {item.id: item for item in self.items}

    def find_item(self, sku: str, color: str, size: str) -> Optional[AggregatedStockItem]:
        """Resolve a requested variant with the same rule the subtractive pass uses."""
        aggregated = self.by_key()
        key = StockAggregator.resolve_key(aggregated, sku, color, size)
        return aggregated[key] if key else None

    @property
    def total_pairs(self) -> int:
        return sum(item.total_pairs for item in self.items)


class StockAggregator:
    """
    Rebuilds the available-stock view from the unit ledger and the
    outgoing-document ledger.

    The aggregator holds no state between runs: the same inputs always give
    the same output, and aggregate() never raises on inconsistent data.
    """

    def __init__(self, product_lookup: Optional[ProductLookup] = None):
        """
        Args:
            product_lookup: Callable returning the catalog product for a SKU,
                or None. Used only to label items with name and category.
        """
        self.product_lookup = product_lookup

    def aggregate(self, units: Iterable[StockUnitEntry],
                  documents: Iterable[OutgoingDocument]) -> AggregationResult:
        """
        Compute current availability per (sku, color, size).

        Args:
            units: Full unit-stock ledger
            documents: Full outgoing-document ledger

        Returns:
            AggregationResult with items in first-seen order and the list of
            outgoing lines that could not be matched
        """
        aggregated = self._additive_pass(units)
        unresolved = self._subtractive_pass(aggregated, documents)

        logger.debug(
            f"Aggregated {len(aggregated)} variants, "
            f"{len(unresolved)} unresolved outgoing lines"
        )
        return AggregationResult(items=list(aggregated.values()), unresolved=unresolved)

    def _additive_pass(self, units: Iterable[StockUnitEntry]) -> Dict[str, AggregatedStockItem]:
        aggregated: Dict[str, AggregatedStockItem] = {}
        labels: Dict[str, tuple] = {}

        for unit in units:
            key = variant_key(unit.sku, unit.color, unit.size)

            if key not in aggregated:
                name, category = self._label_for(base_sku(unit.sku), labels)
                aggregated[key] = AggregatedStockItem(
                    id=key,
                    sku=unit.sku,
                    name=name,
                    category=category,
                    size=unit.size,
                    color=unit.color,
                    total_pairs=0,
                )

            aggregated[key].total_pairs += unit.quantity

        return aggregated

    def _subtractive_pass(self, aggregated: Dict[str, AggregatedStockItem],
                          documents: Iterable[OutgoingDocument]) -> List[UnresolvedLine]:
        unresolved: List[UnresolvedLine] = []

        for document in documents:
            for line in document.items:
                key = self.resolve_key(aggregated, line.sku, line.color, line.size)

                if key is None:
                    logger.warning(
                        f"Outgoing line {line.sku} ({line.color}, {line.size}) x{line.quantity} "
                        f"in document {document.document_number} matches no stock unit; "
                        f"subtraction dropped"
                    )
                    unresolved.append(UnresolvedLine(
                        document_id=document.id,
                        document_number=document.document_number,
                        line_id=line.id,
                        sku=line.sku,
                        size=line.size,
                        color=line.color,
                        quantity=line.quantity,
                    ))
                    continue

                item = aggregated[key]
                item.total_pairs = max(0, item.total_pairs - line.quantity)

        return unresolved

    @staticmethod
    def resolve_key(aggregated: Dict[str, AggregatedStockItem],
                    sku: str, color: str, size: str) -> Optional[str]:
        """
        Find the variant key an outgoing line applies to.

        Returns:
            The exact key when present, else the first fuzzy match, else None
        """
        key = variant_key(sku, color, size)
        if key in aggregated:
            return key

        wanted_base = base_sku(sku).lower()
        wanted_color = normalize_color(color)

        for candidate_key, item in aggregated.items():
            if (base_sku(item.sku).lower() == wanted_base
                    and item.size == size
                    and normalize_color(item.color) == wanted_color):
                logger.debug(f"Fuzzy match: '{key}' -> '{candidate_key}'")
                return candidate_key

        return None

    def _label_for(self, sku_base: str, labels: Dict[str, tuple]) -> tuple:
        """Resolve (name, category) for a base SKU, falling back to sentinels."""
        if sku_base in labels:
            return labels[sku_base]

        label = (UNKNOWN_PRODUCT_NAME, UNCATEGORIZED)

        if self.product_lookup is not None:
            try:
                product = self.product_lookup(sku_base)
            except Exception as e:
                logger.warning(f"Product lookup failed for '{sku_base}': {e}")
                product = None

            if product is not None:
                label = (product.name or UNKNOWN_PRODUCT_NAME, product.category or UNCATEGORIZED)

        labels[sku_base] = label
        return label
