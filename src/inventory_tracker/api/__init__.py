"""
HTTP API for the Inventory Tracker.
"""
