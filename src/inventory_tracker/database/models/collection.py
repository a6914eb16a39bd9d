"""
Ledger collection model.

Each ledger (stock units, outgoing documents, box stock, recipients,
products) is kept as a single row holding the whole serialized list.
The version column is bumped on every write and is what the store
compares against to reject stale writers.
"""

from datetime import datetime

from sqlalchemy import Column, String, Integer, DateTime, Text

from .base import Base


class LedgerCollection(Base):
    """One named, versioned JSON collection."""

    __tablename__ = "ledger_collections"

    key = Column(String(100), primary_key=True)
    payload = Column(Text, nullable=False, default="[]")
    version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def __repr__(self):
        return f"<LedgerCollection(key={self.key}, version={self.version})>"
