"""Tactical inventory: multi-site stock ledger and movement engine"""

__version__ = "1.0.0"
