"""
High-level inventory service.

Wires the ledgers, the box-stock synchronizer and the aggregation engine
around one store and one event dispatcher, and exposes the operations the
CLI and the HTTP API need:
- availability view and search
- unit, box and shipment imports (validated row by row)
- shipment creation
- reports
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from inventory_tracker.core.aggregator import AggregationResult, StockAggregator
from inventory_tracker.core.events import EventDispatcher
from inventory_tracker.core.models import AggregatedStockItem, OutgoingDocument, StockUnitEntry
from inventory_tracker.core.validator import ImportRowValidator, ValidationReport
from inventory_tracker.database.store import LedgerStore, create_store
from inventory_tracker.services.box_stock import BoxStockSynchronizer
from inventory_tracker.services.catalog import ProductCatalog
from inventory_tracker.services.outgoing import OutgoingShipmentLedger
from inventory_tracker.services.picker import StockPicker
from inventory_tracker.services.recipients import RecipientDirectory
from inventory_tracker.services.reports import ReportGenerator
from inventory_tracker.services.stock_units import StockUnitLedger
from inventory_tracker.utils.config import get_config
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


class InventoryService:
    """Facade over the inventory ledgers."""

    def __init__(self, store: Optional[LedgerStore] = None, config=None):
        """
        Initialize service with a store and configuration.

        Args:
            store: Ledger store; built from configuration when omitted
            config: Optional configuration override
        """
        self.config = config or get_config()
        self.store = store or create_store(self.config)

        self.dispatcher = EventDispatcher()
        self.catalog = ProductCatalog(self.store)
        self.recipients = RecipientDirectory(self.store)
        self.aggregator = StockAggregator(product_lookup=self.catalog.get_product_for_sku)

        self.box_stock = BoxStockSynchronizer(self.store, config=self.config)
        self.box_stock.subscribe(self.dispatcher)

        self.units = StockUnitLedger(self.store, dispatcher=self.dispatcher, config=self.config)
        self.outgoing = OutgoingShipmentLedger(
            self.store,
            availability=self.available_stock,
            recipients=self.recipients,
            config=self.config,
        )

        logger.info("InventoryService initialized")

    # Availability

    def available_stock(self, documents: Optional[List[OutgoingDocument]] = None) -> AggregationResult:
        """
        Recompute availability from both ledgers.

        Args:
            documents: Outgoing documents snapshot to subtract; read from the
                ledger when omitted
        """
        if documents is None:
            documents = self.outgoing.list_documents()
        return self.aggregator.aggregate(self.units.list_units(), documents)

    def search_stock(self, term: Optional[str] = None,
                     in_stock_only: bool = False) -> List[AggregatedStockItem]:
        items = StockPicker(self.available_stock).search(term)
        if in_stock_only:
            items = [item for item in items if item.total_pairs > 0]
        return items

    def picker(self) -> StockPicker:
        return StockPicker(self.available_stock)

    # Units

    def add_units(self, entries: Iterable[Any], actor: Optional[str] = None) -> List[StockUnitEntry]:
        return self.units.add_units(entries, actor=actor)

    def import_unit_rows(self, rows: Iterable[Dict[str, Any]],
                         actor: Optional[str] = None) -> Tuple[ValidationReport, List[StockUnitEntry]]:
        """Validate unit rows and add the valid ones as one batch."""
        report = ImportRowValidator.validate_unit_rows(rows)
        added = self.units.add_units([row.record for row in report.valid], actor=actor)
        return report, added

    # Box stock

    def import_box_rows(self, rows: Iterable[Dict[str, Any]]):
        report = ImportRowValidator.validate_box_rows(rows)
        merged = self.box_stock.merge_batch(report.valid)
        return report, merged

    # Shipments

    def ship(self, recipient_id: Optional[str], recipient_name: Optional[str],
             line_items: Iterable[Dict[str, Any]], notes: str = "") -> OutgoingDocument:
        return self.outgoing.create_document(recipient_id, recipient_name, line_items, notes)

    def import_outgoing_rows(self, rows: Iterable[Dict[str, Any]]) -> Tuple[ValidationReport, List[OutgoingDocument]]:
        """
        Validate outgoing rows against current availability and create one
        document per recipient from the valid ones. The documents are saved
        on the snapshot the rows were validated against.
        """
        shipped, version = self.outgoing.snapshot()
        report = ImportRowValidator.validate_outgoing_rows(
            rows, self.available_stock(shipped), self.recipients.list()
        )
        documents = self.outgoing.create_documents_from_batch(report.valid, expected_version=version)
        return report, documents

    # Reports

    def shipping_report(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                        recipient_search: Optional[str] = None) -> Dict[str, Any]:
        return ReportGenerator.shipping_report(
            self.outgoing.list_documents(), start_date, end_date, recipient_search
        )

    def inventory_summary(self) -> Dict[str, Any]:
        return ReportGenerator.inventory_summary(self.available_stock(), self.box_stock.list_items())


_service: Optional[InventoryService] = None


def get_inventory_service() -> InventoryService:
    """Process-wide service built from configuration."""
    global _service
    if _service is None:
        _service = InventoryService()
    return _service


def reset_inventory_service() -> None:
    global _service
    _service = None
