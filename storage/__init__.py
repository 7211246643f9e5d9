"""
Storage Package

Handles persistence of the cached price.

Current implementation:
- SQLite (WAL mode) single-row-per-symbol cache that survives restarts
"""

from storage.price_store import PriceStore

__all__ = ["PriceStore"]
