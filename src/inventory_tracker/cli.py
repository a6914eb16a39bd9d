"""
Command-line interface for Inventory Tracker operations.

Covers the day-to-day warehouse tasks: viewing available stock, adding
units, importing box stock and shipments from JSON row files, creating a
shipment, printing reports and showing configuration.
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from inventory_tracker.utils.logger import get_logger, setup_logging
from inventory_tracker.utils.config import get_config, validate_configuration
from inventory_tracker.utils.exceptions import InventoryTrackerError, InsufficientStockError


cli_logger = get_logger(__name__)


def _read_rows(path: str) -> List[Dict[str, Any]]:
    """Read a JSON file holding a list of row objects (or {"rows": [...]})."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("rows", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of rows")
    return data


def parse_item(value: str) -> Dict[str, Any]:
    """Parse "sku:size:color:qty" into a line item."""
    parts = value.rsplit(":", 3)
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(f"Expected sku:size:color:qty, got '{value}'")
    sku, size, color, quantity = parts
    try:
        quantity = int(quantity)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Quantity must be an integer in '{value}'")
    return {"sku": sku, "size": size, "color": color, "quantity": quantity}


def _print_report(report: Dict[str, Any]) -> None:
    if report["invalid"]:
        print(f"⚠️  {report['invalid']} of {report['total']} rows rejected:")
        for row in report["reasons"]:
            print(f"   - {row.get('sku') or '?'}: {row['reason']}")


class InventoryTrackerCLI:
    """Command-line interface for Inventory Tracker operations."""

    def __init__(self, service=None):
        self.service = service

    def _init_service(self):
        """Initialize the inventory service (lazy loading)."""
        if self.service is None:
            from inventory_tracker.services.inventory import InventoryService
            try:
                self.service = InventoryService()
                cli_logger.info("Service initialized successfully")
            except Exception as e:
                cli_logger.error(f"Failed to initialize service: {e}")
                raise
        return self.service

    def cmd_stock(self, args) -> int:
        """Print available stock."""
        service = self._init_service()
        items = service.search_stock(args.search, in_stock_only=args.in_stock)

        if not items:
            print("📭 No stock found")
            return 0

        print(f"{'SKU':<24} {'Name':<28} {'Color':<12} {'Size':<6} {'Pairs':>6}")
        for item in items:
            print(f"{item.sku:<24} {item.name[:28]:<28} {item.color:<12} {item.size:<6} {item.total_pairs:>6}")
        print(f"\n📦 {len(items)} variants, {sum(i.total_pairs for i in items)} pairs")
        return 0

    def cmd_add_units(self, args) -> int:
        """Validate unit rows from a file and add the valid ones."""
        service = self._init_service()
        report, added = service.import_unit_rows(_read_rows(args.file), actor=args.actor)

        _print_report(report.summary())
        print(f"✅ Added {len(added)} stock unit entries")
        return 0 if added or not report.rows else 1

    def cmd_import_boxes(self, args) -> int:
        service = self._init_service()
        report, merged = service.import_box_rows(_read_rows(args.file))

        _print_report(report.summary())
        print(f"✅ Imported {len(merged)} box stock items")
        return 0 if merged or not report.rows else 1

    def cmd_ship(self, args) -> int:
        """Create one outgoing document."""
        service = self._init_service()
        try:
            document = service.ship(
                recipient_id=args.recipient_id,
                recipient_name=args.recipient,
                line_items=args.item,
                notes=args.notes or "",
            )
        except InsufficientStockError as e:
            print(f"❌ {e.message}")
            for shortage in e.shortages:
                print(
                    f"   - {shortage['sku']} {shortage['color']} {shortage['size']}: "
                    f"requested {shortage['requested']}, available {shortage['available']}"
                )
            return 1

        print(f"✅ Created {document.document_number} for {document.recipient} "
              f"({document.total_items} pairs)")
        return 0

    def cmd_import_shipments(self, args) -> int:
        service = self._init_service()
        report, documents = service.import_outgoing_rows(_read_rows(args.file))

        _print_report(report.summary())
        for document in documents:
            print(f"✅ {document.document_number}: {document.recipient} ({document.total_items} pairs)")
        return 0 if documents or not report.rows else 1

    def cmd_report(self, args) -> int:
        service = self._init_service()

        if args.report_type == "shipping":
            start = date.fromisoformat(args.start) if args.start else None
            end = date.fromisoformat(args.end) if args.end else None
            report = service.shipping_report(start, end, args.recipient)
        else:
            report = service.inventory_summary()

        print(json.dumps(report, indent=2, ensure_ascii=False))
        return 0

    def cmd_config(self, args) -> int:
        """Handle configuration commands."""
        if args.config_action == "validate":
            result = validate_configuration()
            if result["valid"]:
                print("✅ Configuration is valid")
                return 0
            print(f"❌ Configuration validation failed: {result['error']}")
            return 1

        config = get_config()
        print("📋 Current configuration:")
        print(json.dumps({
            "storage": {
                "backend": config.storage.backend,
                "database_url": config.storage.database_url,
            },
            "ledger": config.ledger.model_dump(),
            "application": config.app.model_dump(),
        }, indent=2))
        return 0

    def cmd_serve(self, args) -> int:
        import uvicorn

        uvicorn.run("inventory_tracker.api.main:app", host=args.host, port=args.port)
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="inventory-tracker",
        description="Warehouse Inventory Tracker",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    stock_parser = subparsers.add_parser("stock", help="Show available stock")
    stock_parser.add_argument("--search", help="Filter by SKU or product name")
    stock_parser.add_argument("--in-stock", action="store_true", help="Hide variants with zero pairs")

    units_parser = subparsers.add_parser("add-units", help="Add stock units from a JSON row file")
    units_parser.add_argument("file", help="JSON file with rows {sku, size, color, quantity}")
    units_parser.add_argument("--actor", help="Recorded as addedBy")

    boxes_parser = subparsers.add_parser("import-boxes", help="Import box stock from a JSON row file")
    boxes_parser.add_argument("file", help="JSON file with rows {sku, name, category, boxCount, pairsPerBox}")

    ship_parser = subparsers.add_parser("ship", help="Create an outgoing document")
    ship_parser.add_argument("--recipient", help="Recipient name")
    ship_parser.add_argument("--recipient-id", help="Recipient id from the directory")
    ship_parser.add_argument(
        "--item", action="append", type=parse_item, required=True,
        help="Line item as sku:size:color:qty (repeatable)"
    )
    ship_parser.add_argument("--notes", help="Document notes")

    shipments_parser = subparsers.add_parser(
        "import-shipments", help="Create outgoing documents from a JSON row file"
    )
    shipments_parser.add_argument("file", help="JSON file with rows {sku, size, color, quantity, recipient, notes}")

    report_parser = subparsers.add_parser("report", help="Print a report")
    report_parser.add_argument("report_type", choices=["shipping", "inventory"])
    report_parser.add_argument("--start", help="Shipping report start date (YYYY-MM-DD)")
    report_parser.add_argument("--end", help="Shipping report end date (YYYY-MM-DD)")
    report_parser.add_argument("--recipient", help="Shipping report recipient filter")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument("config_action", choices=["show", "validate"])

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


COMMANDS = {
    "stock": InventoryTrackerCLI.cmd_stock,
    "add-units": InventoryTrackerCLI.cmd_add_units,
    "import-boxes": InventoryTrackerCLI.cmd_import_boxes,
    "ship": InventoryTrackerCLI.cmd_ship,
    "import-shipments": InventoryTrackerCLI.cmd_import_shipments,
    "report": InventoryTrackerCLI.cmd_report,
    "config": InventoryTrackerCLI.cmd_config,
    "serve": InventoryTrackerCLI.cmd_serve,
}


def main(argv: Optional[List[str]] = None, cli: Optional[InventoryTrackerCLI] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()

    if not args.command:
        parser.print_help()
        return 1

    cli = cli or InventoryTrackerCLI()

    try:
        return COMMANDS[args.command](cli, args)
    except KeyboardInterrupt:
        print("\n⏹️  Operation cancelled by user")
        return 130
    except (InventoryTrackerError, ValueError, OSError) as e:
        cli_logger.error(f"CLI operation failed: {e}")
        print(f"❌ Operation failed: {e}")
        return 1


def cli_entry_point():
    """Entry point for console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry_point()
