"""
Ledger persistence: SQLAlchemy connection handling and collection stores.
"""
