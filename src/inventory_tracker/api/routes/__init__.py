"""
API route modules.
"""

from . import box_stock, documents, reports, stock, units

__all__ = ["box_stock", "documents", "reports", "stock", "units"]
