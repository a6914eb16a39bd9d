"""
Unit tests for ImportRowValidator
"""
import pytest

from inventory_tracker.core.aggregator import StockAggregator
from inventory_tracker.core.models import Product, Recipient, StockUnitEntry
from inventory_tracker.core.validator import (
    ImportRowValidator,
    Invalid,
    Valid,
    INVALID_BOX_COUNT,
    INVALID_PAIRS_PER_BOX,
    INVALID_QUANTITY,
    MISSING_COLOR,
    MISSING_NAME,
    MISSING_RECIPIENT,
    MISSING_SIZE,
    MISSING_SKU,
    STOCK_NOT_FOUND,
)


@pytest.fixture
def availability():
    aggregator = StockAggregator(
        product_lookup=lambda sku: Product(sku=sku, name="Trail Runner") if sku == "SHOE-001-BLK" else None
    )
    return aggregator.aggregate(
        [StockUnitEntry(id="u-1", sku="SHOE-001-BLK", size="40", color="Black", quantity=10)], []
    )


class TestUnitRows:
    """Test unit-stock row validation"""

    @pytest.mark.parametrize("row,reason", [
        ({"size": "40", "color": "Red", "quantity": 1}, MISSING_SKU),
        ({"sku": "A-1-B", "color": "Red", "quantity": 1}, MISSING_SIZE),
        ({"sku": "A-1-B", "size": "40", "quantity": 1}, MISSING_COLOR),
        ({"sku": "A-1-B", "size": "40", "color": "Red", "quantity": 0}, INVALID_QUANTITY),
        ({"sku": "A-1-B", "size": "40", "color": "Red", "quantity": "many"}, INVALID_QUANTITY),
        ({"sku": "A-1-B", "size": "40", "color": "Red", "quantity": "2.5"}, INVALID_QUANTITY),
        ({"sku": "A-1-B", "size": "40", "color": "Red", "quantity": 1.5}, INVALID_QUANTITY),
    ])
    def test_invalid_rows(self, row, reason):
        result = ImportRowValidator.validate_unit_row(row)

        assert isinstance(result, Invalid)
        assert result.reason == reason
        assert not result.is_valid

    def test_valid_row_is_normalized(self):
        result = ImportRowValidator.validate_unit_row(
            {"SKU": " A-1-B ", "Size": 40, "Color": "Red", "Quantity": "12"}
        )

        assert isinstance(result, Valid)
        assert result.record == {"sku": "A-1-B", "size": "40", "color": "Red", "quantity": 12}

    def test_report_counts(self):
        report = ImportRowValidator.validate_unit_rows([
            {"sku": "A-1-B", "size": "40", "color": "Red", "quantity": 1},
            {"sku": "", "size": "40", "color": "Red", "quantity": 1},
        ])

        summary = report.summary()
        assert summary["total"] == 2
        assert summary["valid"] == 1
        assert summary["invalid"] == 1
        assert summary["reasons"][0]["reason"] == MISSING_SKU


class TestBoxRows:
    """Test box-stock row validation"""

    @pytest.mark.parametrize("row,reason", [
        ({"name": "Runner", "boxCount": 1, "pairsPerBox": 6}, MISSING_SKU),
        ({"sku": "A-1-B", "boxCount": 1, "pairsPerBox": 6}, MISSING_NAME),
        ({"sku": "A-1-B", "name": "Runner", "boxCount": 0, "pairsPerBox": 6}, INVALID_BOX_COUNT),
        ({"sku": "A-1-B", "name": "Runner", "boxCount": 2, "pairsPerBox": -1}, INVALID_PAIRS_PER_BOX),
    ])
    def test_invalid_rows(self, row, reason):
        assert ImportRowValidator.validate_box_row(row).reason == reason

    def test_valid_row(self):
        result = ImportRowValidator.validate_box_row(
            {"sku": "A-1-B", "name": "Runner", "category": "running", "boxCount": "3", "pairsPerBox": 6}
        )

        assert result.is_valid
        assert result.record["boxCount"] == 3

    def test_whole_number_floats_are_accepted(self):
        result = ImportRowValidator.validate_box_row(
            {"sku": "A-1-B", "name": "Runner", "boxCount": "4.0", "pairsPerBox": 6.0}
        )

        assert result.record["boxCount"] == 4
        assert result.record["pairsPerBox"] == 6

    def test_fractional_pairs_per_box_rejected(self):
        result = ImportRowValidator.validate_box_row(
            {"sku": "A-1-B", "name": "Runner", "boxCount": 2, "pairsPerBox": "5.5"}
        )

        assert result.reason == INVALID_PAIRS_PER_BOX


class TestOutgoingRows:
    """Test outgoing row validation against availability"""

    def test_missing_recipient(self, availability):
        result = ImportRowValidator.validate_outgoing_row(
            {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 1}, availability
        )

        assert result.reason == MISSING_RECIPIENT

    def test_stock_not_found(self, availability):
        result = ImportRowValidator.validate_outgoing_row(
            {"sku": "NOPE-1-X", "size": "40", "color": "black", "quantity": 1, "recipient": "Store A"},
            availability,
        )

        assert result.reason == STOCK_NOT_FOUND

    def test_insufficient_stock_reports_available(self, availability):
        result = ImportRowValidator.validate_outgoing_row(
            {"sku": "shoe-001-blk", "size": "40", "color": "BLACK", "quantity": 11, "recipient": "Store A"},
            availability,
        )

        assert result.reason == "Insufficient stock (available: 10)"

    def test_valid_row_carries_name_and_recipient_id(self, availability):
        recipients = [Recipient(id="r-1", name="Store A")]

        result = ImportRowValidator.validate_outgoing_row(
            {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 10,
             "recipient": "store a", "notes": "gate 3"},
            availability,
            recipients,
        )

        assert result.is_valid
        assert result.record["name"] == "Trail Runner"
        assert result.record["recipientId"] == "r-1"
        assert result.record["notes"] == "gate 3"

    def test_rows_are_checked_independently(self, availability):
        row = {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 8, "recipient": "Store A"}

        report = ImportRowValidator.validate_outgoing_rows([row, dict(row)], availability)

        assert len(report.valid) == 2

    def test_checks_the_variant_the_shipment_is_taken_from(self):
        """SKUs differing only in case are separate variants; the exact key wins."""
        aggregator = StockAggregator()
        availability = aggregator.aggregate([
            StockUnitEntry(id="u-1", sku="shoe-001-blk", size="40", color="Red", quantity=10),
            StockUnitEntry(id="u-2", sku="SHOE-001-BLK", size="40", color="Red", quantity=0),
        ], [])
        row = {"sku": "SHOE-001-BLK", "size": "40", "color": "red", "quantity": 5, "recipient": "Store A"}

        result = ImportRowValidator.validate_outgoing_row(row, availability)

        assert result.reason == "Insufficient stock (available: 0)"
        assert availability.find_item("SHOE-001-BLK", "red", "40").id == "SHOE-001-BLK-red-40"
