"""Append-only ledger storage.

Exports:
    Ledger: Protocol every backing store implements.
    SQLiteLedger: SQLite implementation.
    get_ledger: Ledger singleton at the configured path.
    reset_ledger: Drop the singleton (tests).
"""

from __future__ import annotations

from dnd_ledger.storage.ledger import Ledger, SQLiteLedger, StoredRow, get_ledger, reset_ledger


__all__ = ["Ledger", "SQLiteLedger", "StoredRow", "get_ledger", "reset_ledger"]
