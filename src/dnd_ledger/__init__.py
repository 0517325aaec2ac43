"""dnd-ledger - D&D 5E character state engine.

Character state is an append-only ledger of small records. The current
character is always derived from that history, and every change a player
(or an agent) makes is validated against the derived state before new
records are appended.

ARCHITECTURE:
- The ledger owns TRUTH: records are appended, never rewritten
- Snapshots are pure folds over the ledger
- Actions validate against a snapshot and append records in one transaction

Example:
    >>> from dnd_ledger import SQLiteLedger, CharacterRecord, perform_action, build_snapshot
    >>>
    >>> ledger = SQLiteLedger("data/ledger.db")
    >>> ledger.add_character(CharacterRecord(id="c-1", name="Elara", species="elf"))
    >>> perform_action(ledger, "c-1", "add_level", {"class_name": "wizard", "level": "1", "hit_die_roll": "6"})
    >>> build_snapshot(ledger, "c-1").spell_slots
    (1, 1)

Modules:
    core: Configuration, logging, constants and exceptions.
    models: Rules tables, spell catalog, ledger records and snapshot schemas.
    storage: Append-only SQLite ledger.
    engine: Snapshot builder, action validators and the action runner.
    tools: Actions exposed as agent tools.
"""

from __future__ import annotations

# Core
from dnd_ledger.core.config import Settings, get_settings
from dnd_ledger.core.exceptions import DndLedgerError
from dnd_ledger.core.logging import configure_logging, get_logger

# Models
from dnd_ledger.models.records import CharacterRecord
from dnd_ledger.models.snapshot import CharacterSnapshot

# Storage
from dnd_ledger.storage.ledger import Ledger, SQLiteLedger, get_ledger

# Engine
from dnd_ledger.engine.forms import ActionComplete, ActionIncomplete, ActionResult
from dnd_ledger.engine.service import perform_action
from dnd_ledger.engine.snapshot import build_snapshot

# Tools
from dnd_ledger.tools.registry import execute_tool, format_approval


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "DndLedgerError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "CharacterRecord",
    "CharacterSnapshot",
    # Storage
    "Ledger",
    "SQLiteLedger",
    "get_ledger",
    # Engine
    "ActionComplete",
    "ActionIncomplete",
    "ActionResult",
    "build_snapshot",
    "perform_action",
    # Tools
    "execute_tool",
    "format_approval",
]
