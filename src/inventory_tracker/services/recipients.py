"""
Recipient directory.

Documents keep a snapshot of the recipient name, so nothing here ever
touches the outgoing ledger.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from inventory_tracker.core.models import Recipient
from inventory_tracker.database.store import LedgerStore, RECIPIENTS_KEY
from inventory_tracker.utils.exceptions import NotFoundError, ValidationError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address", "notes")


class RecipientDirectory:
    """CRUD over the recipients collection."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def _load(self) -> Tuple[List[Recipient], int]:
        raw, version = self.store.load_versioned(RECIPIENTS_KEY, [])
        return [Recipient.from_dict(item) for item in raw], version

    def _save(self, recipients: List[Recipient], expected_version: int) -> None:
        self.store.save(
            RECIPIENTS_KEY, [r.to_dict() for r in recipients], expected_version=expected_version
        )

    def list(self) -> List[Recipient]:
        recipients, _ = self._load()
        return recipients

    def get(self, recipient_id: str) -> Recipient:
        for recipient in self.list():
            if recipient.id == recipient_id:
                return recipient
        raise NotFoundError(
            f"Recipient not found: {recipient_id}", entity="recipient", entity_id=recipient_id
        )

    def find_by_name(self, name: str) -> Optional[Recipient]:
        wanted = name.strip().lower()
        if not wanted:
            return None
        return next((r for r in self.list() if r.name.lower() == wanted), None)

    def add(self, name: str, email: Optional[str] = None, phone: Optional[str] = None,
            address: Optional[str] = None, notes: Optional[str] = None) -> Recipient:
        """
        Create a recipient.

        Raises:
            ValidationError: name is empty
        """
        if not name or not name.strip():
            raise ValidationError("Recipient name is required", field="name")

        now = datetime.now()
        recipient = Recipient(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email,
            phone=phone,
            address=address,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        recipients, version = self._load()
        recipients.append(recipient)
        self._save(recipients, version)

        logger.info(f"Added recipient {recipient.name} ({recipient.id})")
        return recipient

    def update(self, recipient_id: str, changes: Dict[str, Any]) -> Recipient:
        recipients, version = self._load()
        recipient = next((r for r in recipients if r.id == recipient_id), None)
        if recipient is None:
            raise NotFoundError(
                f"Recipient not found: {recipient_id}", entity="recipient", entity_id=recipient_id
            )

        for field_name in EDITABLE_FIELDS:
            if field_name in changes:
                setattr(recipient, field_name, changes[field_name])

        if not recipient.name or not str(recipient.name).strip():
            raise ValidationError("Recipient name is required", field="name")
        recipient.name = str(recipient.name).strip()
        recipient.updated_at = datetime.now()

        self._save(recipients, version)
        logger.info(f"Updated recipient {recipient_id}")
        return recipient

    def delete(self, recipient_id: str) -> None:
        recipients, version = self._load()
        remaining = [r for r in recipients if r.id != recipient_id]
        if len(remaining) == len(recipients):
            raise NotFoundError(
                f"Recipient not found: {recipient_id}", entity="recipient", entity_id=recipient_id
            )
        self._save(remaining, version)
        logger.info(f"Deleted recipient {recipient_id}")
