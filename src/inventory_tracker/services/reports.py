"""
Shipping and inventory reports.

Reports are computed on request from the ledgers and the aggregation
result; nothing here is stored.
"""

from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from inventory_tracker.core.aggregator import AggregationResult
from inventory_tracker.core.models import BoxStockItem, OutgoingDocument, StockLevel
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


def _document_date(document: OutgoingDocument) -> Optional[date]:
    """Documents store "YYYY-MM-DD"; older ones may hold a full ISO timestamp."""
    text = (document.date or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning(f"Document {document.document_number} has unreadable date '{document.date}'")
        return None


class ReportGenerator:
    """Static report builders."""

    @staticmethod
    def shipping_report(documents: Iterable[OutgoingDocument],
                        start_date: Optional[date] = None,
                        end_date: Optional[date] = None,
                        recipient_search: Optional[str] = None) -> Dict[str, Any]:
        """
        Group shipments by recipient.

        Args:
            documents: Outgoing documents
            start_date: Inclusive lower bound on the document date
            end_date: Inclusive upper bound on the document date
            recipient_search: Case-insensitive substring on the recipient name

        Returns:
            Dict with one group per recipient (shipment count, total pairs and
            per-product totals keyed by sku and name) and the grand totals
        """
        needle = recipient_search.lower() if recipient_search else None
        groups: Dict[str, Dict[str, Any]] = OrderedDict()
        products: Dict[str, Dict[str, Dict[str, Any]]] = {}

        for document in documents:
            if needle and needle not in document.recipient.lower():
                continue

            if start_date or end_date:
                shipped_on = _document_date(document)
                if shipped_on is None:
                    continue
                if start_date and shipped_on < start_date:
                    continue
                if end_date and shipped_on > end_date:
                    continue

            recipient = document.recipient
            group = groups.setdefault(recipient, {
                "recipient": recipient,
                "totalShipments": 0,
                "totalPairs": 0,
                "documents": [],
            })
            group["totalShipments"] += 1
            group["totalPairs"] += document.total_items
            group["documents"].append(document.document_number)

            summaries = products.setdefault(recipient, OrderedDict())
            for line in document.items:
                product_key = f"{line.sku}-{line.name}"
                summary = summaries.setdefault(product_key, {
                    "sku": line.sku,
                    "name": line.name,
                    "totalPairs": 0,
                })
                summary["totalPairs"] += line.quantity

        recipients: List[Dict[str, Any]] = []
        for recipient, group in groups.items():
            recipients.append({**group, "products": list(products[recipient].values())})

        return {
            "generatedAt": datetime.now().isoformat(),
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
            "recipients": recipients,
            "totalShipments": sum(g["totalShipments"] for g in recipients),
            "totalPairs": sum(g["totalPairs"] for g in recipients),
        }

    @staticmethod
    def inventory_summary(availability: AggregationResult,
                          box_items: Iterable[BoxStockItem]) -> Dict[str, Any]:
        box_items = list(box_items)

        level_counts = {level.value: 0 for level in StockLevel}
        for item in box_items:
            level_counts[item.stock_level.value] += 1

        return {
            "generatedAt": datetime.now().isoformat(),
            "availablePairs": availability.total_pairs,
            "variantCount": len(availability.items),
            "outOfStockVariants": sum(1 for item in availability.items if item.total_pairs == 0),
            "unresolvedLines": len(availability.unresolved),
            "boxStock": {
                "items": len(box_items),
                "totalBoxes": sum(item.box_count for item in box_items),
                "totalPairs": sum(item.total_pairs for item in box_items),
                "stockLevels": level_counts,
            },
        }
