"""
Import row validation for the Inventory Tracker.

Rows arrive from the spreadsheet import boundary as loose dicts. Each row is
classified on its own into Valid(record) or Invalid(record, reason); callers
only ever hand Valid rows to a ledger, so an invalid row cannot partially
mutate anything.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from inventory_tracker.core.aggregator import AggregationResult
from inventory_tracker.core.models import Recipient
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


MISSING_SKU = "Missing SKU"
MISSING_SIZE = "Missing size"
MISSING_COLOR = "Missing color"
MISSING_NAME = "Missing product name"
MISSING_RECIPIENT = "Missing recipient"
INVALID_QUANTITY = "Invalid quantity (must be greater than 0)"
INVALID_BOX_COUNT = "Invalid box count (must be greater than 0)"
INVALID_PAIRS_PER_BOX = "Invalid pairs per box (must be greater than 0)"
STOCK_NOT_FOUND = "Stock item not found"


@dataclass(frozen=True)
class Valid:
    """A row that passed every check; record holds the normalized fields."""
    record: Dict[str, Any]

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """A rejected row with whatever could be read from it."""
    record: Dict[str, Any]
    reason: str

    @property
    def is_valid(self) -> bool:
        return False


ValidatedRow = Union[Valid, Invalid]


@dataclass
class ValidationReport:
    """Per-row classification of one import batch."""

    rows: List[ValidatedRow] = field(default_factory=list)

    @property
    def valid(self) -> List[Valid]:
        return [row for row in self.rows if isinstance(row, Valid)]

    @property
    def invalid(self) -> List[Invalid]:
        return [row for row in self.rows if isinstance(row, Invalid)]

    def summary(self) -> Dict[str, Any]:
        return {
            "total": len(self.rows),
            "valid": len(self.valid),
            "invalid": len(self.invalid),
            "reasons": [
                {**row.record, "reason": row.reason} for row in self.invalid
            ],
        }


def _field(row: Dict[str, Any], name: str) -> Any:
    """Read a column by its lower-case or capitalized header."""
    for candidate in (name, name[0].upper() + name[1:], name.upper()):
        value = row.get(candidate)
        if value is not None and value != "":
            return value
    return None


def _text(row: Dict[str, Any], name: str) -> str:
    value = _field(row, name)
    return str(value).strip() if value is not None else ""


def _count(row: Dict[str, Any], name: str) -> int:
    """
    Parse a whole-number count. Anything else, fractions included, reads
    as 0 and is rejected by the caller's positivity check.
    """
    value = _field(row, name)
    if value is None:
        return 0
    try:
        number = float(str(value).strip())
    except ValueError:
        return 0
    if not number.is_integer():
        return 0
    return int(number)


class ImportRowValidator:
    """Validators for the three import row shapes."""

    @staticmethod
    def validate_unit_row(row: Dict[str, Any]) -> ValidatedRow:
        """
        Validate a unit-stock row {sku, size, color, quantity}.

        Returns:
            Valid with the normalized record, or Invalid with the first failing reason
        """
        record = {
            "sku": _text(row, "sku"),
            "size": _text(row, "size"),
            "color": _text(row, "color"),
            "quantity": _count(row, "quantity"),
        }

        reason = ImportRowValidator._variant_problem(record)
        if reason:
            return Invalid(record, reason)
        return Valid(record)

    @staticmethod
    def validate_box_row(row: Dict[str, Any]) -> ValidatedRow:
        """Validate a box-stock row {sku, name, category, boxCount, pairsPerBox}."""
        record = {
            "sku": _text(row, "sku"),
            "name": _text(row, "name"),
            "category": _text(row, "category"),
            "boxCount": _count(row, "boxCount"),
            "pairsPerBox": _count(row, "pairsPerBox"),
        }

        if not record["sku"]:
            return Invalid(record, MISSING_SKU)
        if not record["name"]:
            return Invalid(record, MISSING_NAME)
        if record["boxCount"] <= 0:
            return Invalid(record, INVALID_BOX_COUNT)
        if record["pairsPerBox"] <= 0:
            return Invalid(record, INVALID_PAIRS_PER_BOX)
        return Valid(record)

    @staticmethod
    def validate_outgoing_row(row: Dict[str, Any], availability: AggregationResult,
                              recipients: Iterable[Recipient] = ()) -> ValidatedRow:
        """
        Validate an outgoing row {sku, size, color, quantity, recipient, notes}.

        The row is checked against availability on its own; rows in the same
        batch do not see each other's quantities.

        Args:
            row: Raw import row
            availability: Current aggregation result
            recipients: Known recipients for name resolution

        Returns:
            Valid record enriched with the stock item name and the matching
            recipientId (when a recipient name matches), or Invalid
        """
        record = {
            "sku": _text(row, "sku"),
            "size": _text(row, "size"),
            "color": _text(row, "color"),
            "quantity": _count(row, "quantity"),
            "recipient": _text(row, "recipient"),
            "notes": _text(row, "notes"),
        }

        reason = ImportRowValidator._variant_problem(record)
        if reason:
            return Invalid(record, reason)
        if not record["recipient"]:
            return Invalid(record, MISSING_RECIPIENT)

        # Same resolution as the subtraction pass, so the row is checked
        # against the variant it will later be taken from
        stock_item = availability.find_item(record["sku"], record["color"], record["size"])
        if stock_item is None:
            return Invalid(record, STOCK_NOT_FOUND)
        if stock_item.total_pairs < record["quantity"]:
            return Invalid(record, f"Insufficient stock (available: {stock_item.total_pairs})")

        recipient_name = record["recipient"].lower()
        matching = next(
            (r for r in recipients if r.name.lower() == recipient_name), None
        )

        return Valid({
            **record,
            "name": stock_item.name or record["sku"],
            "recipientId": matching.id if matching else None,
        })

    @staticmethod
    def validate_unit_rows(rows: Iterable[Dict[str, Any]]) -> ValidationReport:
        report = ValidationReport([ImportRowValidator.validate_unit_row(row) for row in rows])
        logger.info(f"Unit rows validated: {len(report.valid)} valid, {len(report.invalid)} invalid")
        return report

    @staticmethod
    def validate_box_rows(rows: Iterable[Dict[str, Any]]) -> ValidationReport:
        report = ValidationReport([ImportRowValidator.validate_box_row(row) for row in rows])
        logger.info(f"Box rows validated: {len(report.valid)} valid, {len(report.invalid)} invalid")
        return report

    @staticmethod
    def validate_outgoing_rows(rows: Iterable[Dict[str, Any]], availability: AggregationResult,
                               recipients: Iterable[Recipient] = ()) -> ValidationReport:
        recipients = list(recipients)
        report = ValidationReport([
            ImportRowValidator.validate_outgoing_row(row, availability, recipients)
            for row in rows
        ])
        logger.info(f"Outgoing rows validated: {len(report.valid)} valid, {len(report.invalid)} invalid")
        return report

    @staticmethod
    def _variant_problem(record: Dict[str, Any]) -> Optional[str]:
        if not record["sku"]:
            return MISSING_SKU
        if not record["size"]:
            return MISSING_SIZE
        if not record["color"]:
            return MISSING_COLOR
        if record["quantity"] <= 0:
            return INVALID_QUANTITY
        return None

