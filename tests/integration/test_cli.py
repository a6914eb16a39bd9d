"""
Integration tests for the command-line interface
"""
import argparse
import json
import pytest

from inventory_tracker.cli import InventoryTrackerCLI, main, parse_item


@pytest.fixture
def cli(seeded_service):
    return InventoryTrackerCLI(service=seeded_service)


@pytest.fixture
def rows_file(tmp_path):
    def write(rows):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps(rows), encoding="utf-8")
        return str(path)
    return write


class TestParseItem:
    """Test --item parsing"""

    def test_parses_four_fields(self):
        assert parse_item("SHOE-001-BLK:40:Black:3") == {
            "sku": "SHOE-001-BLK", "size": "40", "color": "Black", "quantity": 3,
        }

    @pytest.mark.parametrize("value", ["SHOE-001-BLK:40:3", "SHOE-001-BLK:40:Black:many"])
    def test_rejects_malformed(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_item(value)


class TestCommands:
    """Test command handlers end to end"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1

    def test_stock(self, cli, capsys):
        assert main(["stock", "--search", "trail"], cli=cli) == 0

        output = capsys.readouterr().out
        assert "SHOE-001-BLK" in output
        assert "2 variants, 32 pairs" in output

    def test_ship(self, cli, seeded_service, capsys):
        code = main(["ship", "--recipient", "Store A", "--item", "SHOE-001-BLK:40:black:4"], cli=cli)

        assert code == 0
        assert "Created AKS-" in capsys.readouterr().out
        assert seeded_service.available_stock().total_pairs == 28

    def test_ship_insufficient_stock(self, cli, seeded_service, capsys):
        code = main(["ship", "--recipient", "Store A", "--item", "SHOE-001-BLK:41:black:50"], cli=cli)

        assert code == 1
        assert "available 12" in capsys.readouterr().out
        assert seeded_service.outgoing.list_documents() == []

    def test_ship_without_recipient_fails(self, cli):
        assert main(["ship", "--item", "SHOE-001-BLK:40:black:1"], cli=cli) == 1

    def test_add_units(self, cli, seeded_service, rows_file):
        path = rows_file([{"sku": "SHOE-001-BLK", "size": "42", "color": "Black", "quantity": 6}])

        assert main(["add-units", path, "--actor", "Dina"], cli=cli) == 0
        assert seeded_service.units.list_units()[-1].added_by == "Dina"
        assert seeded_service.box_stock.get_item("SHOE-001-BLK").box_count == 9

    def test_import_boxes_reports_rejections(self, cli, rows_file, capsys):
        path = rows_file({"rows": [
            {"sku": "SHOE-009-RED", "name": "Sprinter", "boxCount": 3, "pairsPerBox": 10},
            {"sku": "SHOE-010-RED", "name": "", "boxCount": 3, "pairsPerBox": 10},
        ]})

        assert main(["import-boxes", path], cli=cli) == 0
        assert "Missing product name" in capsys.readouterr().out

    def test_import_shipments(self, cli, seeded_service, rows_file):
        path = rows_file([
            {"sku": "SHOE-001-BLK", "size": "40", "color": "black", "quantity": 1, "recipient": "Store A"},
        ])

        assert main(["import-shipments", path], cli=cli) == 0
        assert len(seeded_service.outgoing.list_documents()) == 1

    def test_missing_file(self, cli):
        assert main(["add-units", "/nonexistent/rows.json"], cli=cli) == 1

    def test_inventory_report(self, cli, capsys):
        assert main(["report", "inventory"], cli=cli) == 0

        output = capsys.readouterr().out
        assert '"availablePairs": 32' in output

    def test_config_validate(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "memory")
        from inventory_tracker.utils.config import reload_config
        reload_config()

        assert main(["config", "validate"]) == 0
