"""
SQLAlchemy database models for the Inventory Tracker.

Models:
- LedgerCollection: one versioned JSON document per ledger
"""

from .base import Base
from .collection import LedgerCollection

__all__ = [
    "Base",
    "LedgerCollection",
]
