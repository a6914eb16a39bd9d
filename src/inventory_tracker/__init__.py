"""
Warehouse Inventory Tracker

Tracks footwear stock at two granularities: boxes per SKU and pairs per
SKU, size and color. Available stock is recomputed on every read from the
unit-stock ledger and the outgoing-shipment ledger.
"""

__version__ = "1.0.0"
__author__ = "Inventory Tracker Team"
