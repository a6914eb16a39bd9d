from inventory_tracker.cli import cli_entry_point

cli_entry_point()
