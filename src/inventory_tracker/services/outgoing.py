"""
Outgoing-shipment ledger.

Every shipment is an immutable document that subtracts its line quantities
from availability the next time stock is aggregated. A document is only
written after every line has been checked against availability computed
from the same documents snapshot it is saved on top of; a single short line
rejects the whole document, and a document written by someone else in
between turns the save into a ConcurrentModificationError.
"""

import random
import uuid
from collections import OrderedDict, defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from inventory_tracker.core.aggregator import AggregationResult
from inventory_tracker.core.models import OutgoingDocument, OutgoingLineItem
from inventory_tracker.core.validator import Valid
from inventory_tracker.database.store import LedgerStore, OUTGOING_DOCUMENTS_KEY
from inventory_tracker.services.recipients import RecipientDirectory
from inventory_tracker.utils.config import get_config
from inventory_tracker.utils.exceptions import InsufficientStockError, NotFoundError, ValidationError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)

UNKNOWN_RECIPIENT = "Unknown Recipient"

# Aggregates the current stock units against the given outgoing documents
AvailabilityProvider = Callable[[List[OutgoingDocument]], AggregationResult]


def generate_document_number(prefix: str = "AKS", now: Optional[datetime] = None) -> str:
    """Build "PREFIX-YYYYMMDD-NNNN" with a random four digit suffix."""
    now = now or datetime.now()
    return f"{prefix}-{now:%Y%m%d}-{random.randint(1000, 9999)}"


class OutgoingShipmentLedger:
    """
    Append-only ledger of outgoing documents, newest first.

    Documents are never edited after creation.
    """

    def __init__(self, store: LedgerStore, availability: AvailabilityProvider,
                 recipients: Optional[RecipientDirectory] = None, config=None):
        """
        Args:
            store: Ledger store holding the outgoing-documents collection
            availability: Aggregates stock units against a documents snapshot
            recipients: Directory used to resolve recipient ids and names
            config: Optional configuration override
        """
        self.store = store
        self.availability = availability
        self.recipients = recipients or RecipientDirectory(store)
        self.config = config or get_config()

    # Reads

    def _load(self) -> Tuple[List[OutgoingDocument], int]:
        raw, version = self.store.load_versioned(OUTGOING_DOCUMENTS_KEY, [])
        return [OutgoingDocument.from_dict(item) for item in raw], version

    def snapshot(self) -> Tuple[List[OutgoingDocument], int]:
        """Documents together with the ledger version they were read at."""
        return self._load()

    def list_documents(self) -> List[OutgoingDocument]:
        documents, _ = self._load()
        return documents

    def get_document(self, document_id: str) -> OutgoingDocument:
        for document in self.list_documents():
            if document.id == document_id:
                return document
        raise NotFoundError(
            f"Outgoing document not found: {document_id}", entity="outgoing_document",
            entity_id=document_id
        )

    def find_by_number(self, document_number: str) -> List[OutgoingDocument]:
        """Document numbers are not guaranteed unique, so every match is returned."""
        return [d for d in self.list_documents() if d.document_number == document_number]

    # Writes

    def create_document(self, recipient_id: Optional[str], recipient_name: Optional[str],
                        line_items: Iterable[Dict[str, Any]], notes: str = "") -> OutgoingDocument:
        """
        Create one outgoing document.

        Args:
            recipient_id: Directory id of the recipient, if known
            recipient_name: Recipient name; looked up from the id when empty
            line_items: Dicts with sku, size, color, quantity and optionally name
            notes: Free text stored on the document

        Returns:
            The persisted document

        Raises:
            ValidationError: No lines, no recipient, or a non-positive quantity
            InsufficientStockError: One or more lines exceed availability;
                nothing is written
            ConcurrentModificationError: Another document was written after
                availability was checked; nothing is written
        """
        lines = [dict(line) for line in line_items]
        if not lines:
            raise ValidationError("Please select at least one item", field="items")

        recipient_id, recipient_name = self._resolve_recipient(recipient_id, recipient_name)

        for line in lines:
            try:
                quantity = int(line.get("quantity") or 0)
            except (TypeError, ValueError):
                quantity = 0
            if quantity <= 0:
                raise ValidationError(
                    "Line quantity must be greater than 0", field="quantity", value=line.get("quantity")
                )
            line["quantity"] = quantity

        documents, version = self._load()
        availability = self.availability(documents)
        self._check_availability(lines, availability)

        document = self._build_document(
            recipient_id=recipient_id,
            recipient_name=recipient_name,
            lines=[self._normalize_line(line, availability) for line in lines],
            notes=notes or "",
        )

        documents.insert(0, document)
        self.store.save(
            OUTGOING_DOCUMENTS_KEY, [d.to_dict() for d in documents], expected_version=version
        )

        logger.info(
            f"Created outgoing document {document.document_number} for {recipient_name}: "
            f"{len(document.items)} lines, {document.total_items} pairs"
        )
        return document

    def create_documents_from_batch(self, rows: Iterable[Any],
                                    expected_version: Optional[int] = None) -> List[OutgoingDocument]:
        """
        Create one document per recipient from validated import rows.

        Only Valid rows are used. Rows are grouped by the recipient name as
        written in the row; inventory is not re-checked here, the rows were
        validated against availability when they were classified.

        Args:
            rows: Classified import rows
            expected_version: Version of the documents snapshot the rows were
                validated against; the save is rejected when the ledger has
                moved on since

        Returns:
            The new documents, all saved in a single write

        Raises:
            ConcurrentModificationError: The ledger changed after validation
        """
        records = [row.record for row in rows if isinstance(row, Valid)]
        if not records:
            logger.info("No valid outgoing rows to import")
            return []

        groups: Dict[str, List[Dict[str, Any]]] = OrderedDict()
        for record in records:
            name = str(record.get("recipient") or "").strip() or UNKNOWN_RECIPIENT
            groups.setdefault(name, []).append(record)

        known = self.recipients.list()
        new_documents: List[OutgoingDocument] = []

        for name, group in groups.items():
            first = group[0]
            recipient_id = first.get("recipientId")
            recipient_name = name

            if not recipient_id:
                match = next((r for r in known if r.name.lower() == name.lower()), None)
                if match is not None:
                    recipient_id = match.id
                    recipient_name = match.name

            lines = [
                OutgoingLineItem(
                    id=str(uuid.uuid4()),
                    sku=str(record["sku"]).strip(),
                    name=str(record.get("name") or record["sku"]),
                    size=str(record["size"]),
                    color=str(record["color"]).lower(),
                    quantity=int(record["quantity"]),
                )
                for record in group
            ]

            new_documents.append(self._build_document(
                recipient_id=recipient_id,
                recipient_name=recipient_name,
                lines=lines,
                notes=str(first.get("notes") or ""),
            ))

        documents, version = self._load()
        self.store.save(
            OUTGOING_DOCUMENTS_KEY,
            [d.to_dict() for d in new_documents + documents],
            expected_version=version if expected_version is None else expected_version,
        )

        logger.info(
            f"Imported {len(new_documents)} outgoing documents from {len(records)} rows"
        )
        return new_documents

    # Helpers

    def _resolve_recipient(self, recipient_id: Optional[str],
                           recipient_name: Optional[str]) -> Tuple[Optional[str], str]:
        name = (recipient_name or "").strip()

        if recipient_id and not name:
            try:
                name = self.recipients.get(recipient_id).name
            except NotFoundError:
                raise ValidationError(
                    f"Unknown recipient: {recipient_id}", field="recipient_id", value=recipient_id
                )

        if not name:
            raise ValidationError("Please select a recipient", field="recipient")

        if not recipient_id:
            match = self.recipients.find_by_name(name)
            if match is not None:
                recipient_id = match.id

        return recipient_id, name

    @staticmethod
    def _check_availability(lines: List[Dict[str, Any]], availability: AggregationResult) -> None:
        """
        Raise InsufficientStockError listing every short line.

        Lines resolving to the same variant are checked against their
        combined quantity.
        """
        resolved = []
        requested_by_key: Dict[str, int] = defaultdict(int)

        for line in lines:
            item = availability.find_item(
                str(line.get("sku", "")).strip(), str(line.get("color", "")), str(line.get("size", ""))
            )
            resolved.append(item)
            if item is not None:
                requested_by_key[item.id] += line["quantity"]

        shortages = []
        for line, item in zip(lines, resolved):
            available = item.total_pairs if item is not None else 0
            requested_total = requested_by_key[item.id] if item is not None else line["quantity"]
            if requested_total > available:
                shortages.append({
                    "sku": line.get("sku"),
                    "size": line.get("size"),
                    "color": line.get("color"),
                    "requested": line["quantity"],
                    "requested_total": requested_total,
                    "available": available,
                })

        if shortages:
            logger.warning(f"Outgoing document rejected: {len(shortages)} line(s) exceed availability")
            raise InsufficientStockError(
                f"Insufficient stock for {len(shortages)} line(s)", shortages=shortages
            )

    @staticmethod
    def _normalize_line(line: Dict[str, Any], availability: AggregationResult) -> OutgoingLineItem:
        sku = str(line.get("sku", "")).strip()
        color = str(line.get("color", ""))
        size = str(line.get("size", ""))
        item = availability.find_item(sku, color, size)

        return OutgoingLineItem(
            id=str(uuid.uuid4()),
            sku=sku,
            name=str(line.get("name") or (item.name if item else sku)),
            size=size,
            color=color.lower(),
            quantity=line["quantity"],
        )

    def _build_document(self, recipient_id: Optional[str], recipient_name: str,
                        lines: List[OutgoingLineItem], notes: str) -> OutgoingDocument:
        now = datetime.now()
        return OutgoingDocument(
            id=str(uuid.uuid4()),
            document_number=generate_document_number(self.config.ledger.document_number_prefix, now),
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M:%S"),
            recipient=recipient_name,
            items=lines,
            recipient_id=recipient_id,
            notes=notes,
        )
