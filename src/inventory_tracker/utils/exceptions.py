"""
Custom exceptions for the Inventory Tracker.

Every error raised by the ledgers derives from InventoryTrackerError and carries
a details dict, so the CLI and the HTTP layer can report it without knowing the
concrete type.
"""

from typing import Optional, Dict, Any, List


class InventoryTrackerError(Exception):
    """Base exception for all Inventory Tracker errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(InventoryTrackerError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(InventoryTrackerError):
    """Raised when input is rejected before any ledger is touched."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            value: Invalid value
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details)
        self.field = field
        self.value = value


class NotFoundError(InventoryTrackerError):
    """Raised when a record id does not exist in its ledger."""

    def __init__(self, message: str, entity: Optional[str] = None,
                 entity_id: Optional[str] = None):
        details = {}
        if entity:
            details["entity"] = entity
        if entity_id:
            details["entity_id"] = entity_id

        super().__init__(message, details)
        self.entity = entity
        self.entity_id = entity_id


class InsufficientStockError(InventoryTrackerError):
    """Raised when a shipment asks for more pairs than are available."""

    def __init__(self, message: str, shortages: Optional[List[Dict[str, Any]]] = None):
        """
        Initialize insufficient stock error.

        Args:
            message: Error message
            shortages: One entry per short line with sku, size, color,
                requested and available quantities
        """
        shortages = shortages or []
        details = {}
        if shortages:
            details["shortages"] = shortages
            details["short_lines"] = len(shortages)

        super().__init__(message, details)
        self.shortages = shortages


class StorageError(InventoryTrackerError):
    """Raised when the ledger store cannot be read or written."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 key: Optional[str] = None):
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Store operation that failed (load, save)
            key: Collection key involved in the operation
        """
        details = {}
        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key

        super().__init__(message, details=details)
        self.operation = operation
        self.key = key


class ConcurrentModificationError(StorageError):
    """Raised when a collection changed between read and write."""

    def __init__(self, message: str, key: Optional[str] = None,
                 expected_version: Optional[int] = None,
                 actual_version: Optional[int] = None):
        super().__init__(message, operation="save", key=key)
        self.expected_version = expected_version
        self.actual_version = actual_version

        if expected_version is not None:
            self.details["expected_version"] = expected_version
        if actual_version is not None:
            self.details["actual_version"] = actual_version
