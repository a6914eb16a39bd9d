"""
Configuration management for the Inventory Tracker.

Settings are loaded from environment variables (and an optional .env file)
through pydantic-settings, validated, and exposed as grouped sub-configurations.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)

STORE_BACKENDS = ("sql", "memory")


class StorageConfig(BaseModel):
    """Ledger store configuration."""

    backend: str = Field(default="sql", description="Ledger store backend (sql or memory)")
    database_url: str = Field(
        default="sqlite:///./inventory.db",
        description="SQLAlchemy database URL for the sql backend"
    )
    echo_sql: bool = Field(default=False, description="Log emitted SQL statements")

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v):
        v = v.strip().lower()
        if v not in STORE_BACKENDS:
            raise ValueError(f"Store backend must be one of: {STORE_BACKENDS}")
        return v


class LedgerConfig(BaseModel):
    """Business rules shared by the ledgers."""

    document_number_prefix: str = Field(default="AKS", description="Outgoing document number prefix")
    default_actor: str = Field(default="Warehouse Staff", description="Actor recorded when none is given")
    high_stock_threshold: int = Field(default=30, description="Box count above which stock is high")
    medium_stock_threshold: int = Field(default=15, description="Box count above which stock is medium")

    @field_validator('document_number_prefix', 'default_actor')
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @model_validator(mode='after')
    def validate_thresholds(self):
        if self.medium_stock_threshold < 0:
            raise ValueError("Stock thresholds cannot be negative")
        if self.high_stock_threshold <= self.medium_stock_threshold:
            raise ValueError("High stock threshold must be greater than medium threshold")
        return self


class ApplicationConfig(BaseModel):
    """General application configuration."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="./logs", description="Log files directory")
    debug_mode: bool = Field(default=False, description="Debug mode flag")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


class InventoryTrackerConfig(BaseSettings):
    """Main application configuration combining all sub-configurations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    store_backend: str = "sql"
    database_url: str = "sqlite:///./inventory.db"
    database_echo: bool = False

    document_number_prefix: str = "AKS"
    default_actor: str = "Warehouse Staff"
    high_stock_threshold: int = 30
    medium_stock_threshold: int = 15

    log_level: str = "INFO"
    log_dir: str = "./logs"
    debug_mode: bool = False

    @property
    def storage(self) -> StorageConfig:
        """Get ledger store configuration."""
        return StorageConfig(
            backend=self.store_backend,
            database_url=self.database_url,
            echo_sql=self.database_echo
        )

    @property
    def ledger(self) -> LedgerConfig:
        """Get ledger business-rule configuration."""
        return LedgerConfig(
            document_number_prefix=self.document_number_prefix,
            default_actor=self.default_actor,
            high_stock_threshold=self.high_stock_threshold,
            medium_stock_threshold=self.medium_stock_threshold
        )

    @property
    def app(self) -> ApplicationConfig:
        """Get Application configuration."""
        return ApplicationConfig(
            log_level=self.log_level,
            log_dir=self.log_dir,
            debug_mode=self.debug_mode
        )


# Global configuration instance
_config: Optional[InventoryTrackerConfig] = None


def get_config() -> InventoryTrackerConfig:
    """
    Get the global configuration instance.

    Returns:
        InventoryTrackerConfig: Validated configuration instance.

    Raises:
        ValueError: If configuration validation fails.
    """
    global _config

    if _config is None:
        try:
            _config = InventoryTrackerConfig()
            # Sub-configs carry the validators
            _config.storage
            _config.ledger
            _config.app
        except Exception as e:
            _config = None
            raise ValueError(f"Configuration validation failed: {e}")

    return _config


def reload_config() -> InventoryTrackerConfig:
    """
    Reload configuration from environment variables.

    Returns:
        InventoryTrackerConfig: New validated configuration instance.
    """
    global _config
    _config = None
    return get_config()


def validate_configuration() -> Dict[str, Any]:
    """
    Validate current configuration and return status information.

    Returns:
        Dict containing validation results and configuration summary.
    """
    try:
        config = get_config()

        return {
            "valid": True,
            "timestamp": datetime.now().isoformat(),
            "summary": {
                "storage": {
                    "backend": config.storage.backend,
                    "database_url": config.storage.database_url,
                },
                "ledger": config.ledger.model_dump(),
                "application": config.app.model_dump(),
            }
        }

    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        return {
            "valid": False,
            "error": str(e),
            "timestamp": datetime.now().isoformat()
        }
