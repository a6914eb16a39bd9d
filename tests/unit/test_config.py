"""
Unit tests for configuration loading
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from inventory_tracker.utils.config import (
    InventoryTrackerConfig,
    LedgerConfig,
    StorageConfig,
    get_config,
    reload_config,
    validate_configuration,
)


class TestInventoryTrackerConfig:
    """Test settings and sub-configurations"""

    def test_defaults(self, monkeypatch):
        for name in ("STORE_BACKEND", "DOCUMENT_NUMBER_PREFIX", "HIGH_STOCK_THRESHOLD"):
            monkeypatch.delenv(name, raising=False)

        config = InventoryTrackerConfig(_env_file=None)

        assert config.storage.backend == "sql"
        assert config.storage.database_url == "sqlite:///./inventory.db"
        assert config.ledger.document_number_prefix == "AKS"
        assert config.ledger.default_actor == "Warehouse Staff"
        assert config.ledger.high_stock_threshold == 30
        assert config.ledger.medium_stock_threshold == 15

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "Memory")
        monkeypatch.setenv("DOCUMENT_NUMBER_PREFIX", "WH")
        monkeypatch.setenv("HIGH_STOCK_THRESHOLD", "50")

        config = InventoryTrackerConfig(_env_file=None)

        assert config.storage.backend == "memory"
        assert config.ledger.document_number_prefix == "WH"
        assert config.ledger.high_stock_threshold == 50

    def test_rejects_unknown_backend(self):
        with pytest.raises(PydanticValidationError):
            StorageConfig(backend="redis")

    def test_rejects_inverted_thresholds(self):
        with pytest.raises(PydanticValidationError):
            LedgerConfig(high_stock_threshold=10, medium_stock_threshold=15)

    def test_get_config_raises_on_invalid_settings(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "redis")

        with pytest.raises(ValueError):
            reload_config()

        monkeypatch.setenv("STORE_BACKEND", "memory")
        assert reload_config().storage.backend == "memory"

    def test_validate_configuration(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "memory")
        reload_config()

        result = validate_configuration()

        assert result["valid"] is True
        assert result["summary"]["storage"]["backend"] == "memory"
        assert get_config() is get_config()
