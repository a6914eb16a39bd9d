"""
Ledger services and the inventory facade.
"""
