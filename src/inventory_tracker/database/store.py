"""
Ledger stores: named, versioned JSON collections.

Every ledger is one collection that is read whole and written whole.
Writers pass the version they read as expected_version; if the stored
version has moved on in between, the write is refused with
ConcurrentModificationError and nothing is changed. This protects each
collection against lost updates. It does not make a change spanning two
collections atomic.
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from inventory_tracker.database.connection import session_scope
from inventory_tracker.database.models import LedgerCollection
from inventory_tracker.utils.exceptions import ConcurrentModificationError, StorageError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


STOCK_UNITS_KEY = "stock-units"
OUTGOING_DOCUMENTS_KEY = "outgoing-documents"
BOX_STOCK_KEY = "box-stock"
RECIPIENTS_KEY = "recipients"
PRODUCTS_KEY = "products"

COLLECTION_KEYS = (
    STOCK_UNITS_KEY,
    OUTGOING_DOCUMENTS_KEY,
    BOX_STOCK_KEY,
    RECIPIENTS_KEY,
    PRODUCTS_KEY,
)


def _serialize(key: str, data: Any) -> str:
    try:
        return json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Collection '{key}' is not serializable: {e}", operation="save", key=key)


def _deserialize(key: str, payload: str) -> Any:
    try:
        return json.loads(payload)
    except ValueError as e:
        raise StorageError(f"Collection '{key}' holds invalid JSON: {e}", operation="load", key=key)


class LedgerStore(ABC):
    """
    Read/write contract of the persistence collaborator.

    A collection that was never written has version 0.
    """

    @abstractmethod
    def load_versioned(self, key: str, fallback: Any) -> Tuple[Any, int]:
        """Return (data, version); fallback and version 0 when the key is absent."""

    @abstractmethod
    def save(self, key: str, data: Any, expected_version: Optional[int] = None) -> int:
        """
        Replace a collection and return its new version.

        Args:
            key: Collection name
            data: JSON-serializable collection
            expected_version: Version the caller read; None writes unconditionally

        Raises:
            ConcurrentModificationError: expected_version is stale
            StorageError: the write failed
        """

    def load(self, key: str, fallback: Any) -> Any:
        data, _ = self.load_versioned(key, fallback)
        return data


class InMemoryLedgerStore(LedgerStore):
    """Process-local store. Payloads are kept serialized so callers never share objects."""

    def __init__(self):
        self._collections: Dict[str, Tuple[str, int]] = {}
        self._lock = threading.Lock()

    def load_versioned(self, key: str, fallback: Any) -> Tuple[Any, int]:
        with self._lock:
            entry = self._collections.get(key)
        if entry is None:
            return fallback, 0
        payload, version = entry
        return _deserialize(key, payload), version

    def save(self, key: str, data: Any, expected_version: Optional[int] = None) -> int:
        payload = _serialize(key, data)

        with self._lock:
            current_version = self._collections.get(key, ("", 0))[1]
            if expected_version is not None and expected_version != current_version:
                raise ConcurrentModificationError(
                    f"Collection '{key}' was modified by another writer",
                    key=key,
                    expected_version=expected_version,
                    actual_version=current_version,
                )
            new_version = current_version + 1
            self._collections[key] = (payload, new_version)

        logger.debug(f"Saved '{key}' (version {new_version})")
        return new_version


class SqlLedgerStore(LedgerStore):
    """Store backed by the ledger_collections table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load_versioned(self, key: str, fallback: Any) -> Tuple[Any, int]:
        try:
            with session_scope(self.session_factory) as db:
                row = db.get(LedgerCollection, key)
                if row is None:
                    return fallback, 0
                payload, version = row.payload, row.version
        except SQLAlchemyError as e:
            logger.error(f"Failed to load '{key}': {e}")
            raise StorageError(f"Failed to load collection '{key}'", operation="load", key=key) from e

        return _deserialize(key, payload), version

    def save(self, key: str, data: Any, expected_version: Optional[int] = None) -> int:
        payload = _serialize(key, data)

        try:
            with session_scope(self.session_factory) as db:
                row = db.get(LedgerCollection, key)

                if row is None:
                    if expected_version not in (None, 0):
                        raise ConcurrentModificationError(
                            f"Collection '{key}' no longer exists",
                            key=key,
                            expected_version=expected_version,
                            actual_version=0,
                        )
                    db.add(LedgerCollection(key=key, payload=payload, version=1))
                    new_version = 1

                elif expected_version is None:
                    row.payload = payload
                    row.version = row.version + 1
                    new_version = row.version

                else:
                    # Compare-and-swap on the version column
                    result = db.execute(
                        update(LedgerCollection)
                        .where(LedgerCollection.key == key)
                        .where(LedgerCollection.version == expected_version)
                        .values(payload=payload, version=expected_version + 1,
                                updated_at=datetime.now())
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount != 1:
                        raise ConcurrentModificationError(
                            f"Collection '{key}' was modified by another writer",
                            key=key,
                            expected_version=expected_version,
                            actual_version=row.version,
                        )
                    new_version = expected_version + 1

        except IntegrityError as e:
            # Two writers created the same collection at once
            raise ConcurrentModificationError(
                f"Collection '{key}' was created by another writer",
                key=key,
                expected_version=expected_version,
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to save '{key}': {e}")
            raise StorageError(f"Failed to save collection '{key}'", operation="save", key=key) from e

        logger.debug(f"Saved '{key}' (version {new_version})")
        return new_version


def create_store(config=None) -> LedgerStore:
    """
    Build the store selected by configuration.

    The sql backend creates its tables on first use.
    """
    from inventory_tracker.database.connection import get_engine, get_session_factory, init_db

    if config is None:
        from inventory_tracker.utils.config import get_config
        config = get_config()

    if config.storage.backend == "memory":
        logger.info("Using in-memory ledger store")
        return InMemoryLedgerStore()

    init_db(get_engine())
    logger.info("Using SQL ledger store")
    return SqlLedgerStore(get_session_factory())
