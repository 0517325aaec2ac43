"""Append-only ledger storage.

The engine talks to storage only through the ``Ledger`` protocol:
- append a record
- list every record of one kind for a character, in creation order
- read the latest record (overall, or per key) for "latest wins" resources
- group several appends into one atomic transaction

``SQLiteLedger`` implements it on a single SQLite file. Records are stored
in one append-only table with a JSON payload; rows are never updated or
deleted. Driver errors (``sqlite3.Error``) propagate unchanged.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator, Protocol, TypeVar
from uuid import uuid4

from dnd_ledger.core.exceptions import LedgerError
from dnd_ledger.core.logging import get_logger
from dnd_ledger.models.records import RECORD_TYPES, CharacterRecord, LedgerRecord

logger = get_logger(__name__)

R = TypeVar("R", bound=LedgerRecord)


# =============================================================================
# Ledger Contract
# =============================================================================


class Ledger(Protocol):
    """Storage operations the engine relies on."""

    def get_character(self, character_id: str) -> CharacterRecord | None: ...

    def add_character(self, character: CharacterRecord) -> CharacterRecord: ...

    def append(self, record: R) -> R: ...

    def list_records(self, record_type: type[R], character_id: str) -> list[R]: ...

    def latest(self, record_type: type[R], character_id: str) -> R | None: ...

    def latest_by(self, record_type: type[R], character_id: str, key: str) -> dict[str, R]: ...

    def transaction(self) -> AbstractContextManager[None]: ...


# =============================================================================
# Row Mapping
# =============================================================================


@dataclass
class StoredRow:
    """Raw ledger row as read from SQLite."""

    seq: int
    id: str
    character_id: str
    kind: str
    payload: str
    note: str | None
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> StoredRow:
        """Create from database row."""
        return cls(
            seq=row["seq"],
            id=row["id"],
            character_id=row["character_id"],
            kind=row["kind"],
            payload=row["payload"],
            note=row["note"],
            created_at=row["created_at"],
        )

    def to_record(self, record_type: type[R]) -> R:
        """Rebuild the typed record this row was written from."""
        data: dict[str, Any] = json.loads(self.payload)
        data.update(
            id=self.id,
            seq=self.seq,
            character_id=self.character_id,
            note=self.note,
            created_at=datetime.fromisoformat(self.created_at),
        )
        return record_type.model_validate(data)


def _record_kind(record_type: type[LedgerRecord]) -> str:
    kind = record_type.kind
    if RECORD_TYPES.get(kind) is not record_type:
        raise LedgerError(f"Unknown ledger record type {record_type.__name__}", record_kind=kind)
    return kind


# =============================================================================
# SQLite Ledger
# =============================================================================


class SQLiteLedger:
    """SQLite-backed append-only ledger.

    Each call outside a transaction uses its own short-lived connection.
    Inside ``transaction()`` every read and append shares one connection
    holding an immediate write lock, so multi-record effects are applied
    all together or not at all.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the ledger and create the schema if needed.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._tx_conn: sqlite3.Connection | None = None

        self._init_schema()

        logger.info(f"Ledger initialized at {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        if self._tx_conn is not None:
            yield self._tx_conn
            return

        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS characters (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    species TEXT,
                    lineage TEXT,
                    background TEXT,
                    alignment TEXT,
                    ruleset TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            # seq gives a strict creation order even when timestamps collide
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ledger_records (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    character_id TEXT NOT NULL REFERENCES characters(id),
                    kind TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    note TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_ledger_character_kind
                ON ledger_records(character_id, kind, seq)
            """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Run the enclosed reads and appends atomically.

        Nested calls join the outermost transaction.
        """
        if self._tx_conn is not None:
            yield
            return

        conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("BEGIN IMMEDIATE")
        self._tx_conn = conn
        try:
            yield
            conn.execute("COMMIT")
        except BaseException:
            conn.execute("ROLLBACK")
            logger.debug("Ledger transaction rolled back", db_path=str(self.db_path))
            raise
        finally:
            self._tx_conn = None
            conn.close()

    # =========================================================================
    # Characters
    # =========================================================================

    def add_character(self, character: CharacterRecord) -> CharacterRecord:
        """Store a new character identity.

        Args:
            character: Character to create; ``created_at`` is filled in.

        Returns:
            The stored character record.
        """
        created_at = character.created_at or datetime.now()
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO characters
                (id, name, species, lineage, background, alignment, ruleset, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (character.id, character.name, character.species, character.lineage,
                  character.background, character.alignment, character.ruleset,
                  created_at.isoformat()))

        logger.info("Character created", character_id=character.id, name=character.name)
        return character.model_copy(update={"created_at": created_at})

    def get_character(self, character_id: str) -> CharacterRecord | None:
        """Get a character by id, or None when it does not exist."""
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT id, name, species, lineage, background, alignment, ruleset, created_at
                FROM characters WHERE id = ?
            """, (character_id,)).fetchone()

        if row is None:
            return None
        return CharacterRecord(
            id=row["id"],
            name=row["name"],
            species=row["species"],
            lineage=row["lineage"],
            background=row["background"],
            alignment=row["alignment"],
            ruleset=row["ruleset"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # =========================================================================
    # Records
    # =========================================================================

    def append(self, record: R) -> R:
        """Append one record to the ledger.

        Args:
            record: Record built by a validator (envelope fields empty).

        Returns:
            The record with ``id``, ``seq`` and ``created_at`` assigned.
        """
        kind = _record_kind(type(record))
        record_id = str(uuid4())
        created_at = datetime.now()

        with self._get_connection() as conn:
            cursor = conn.execute("""
                INSERT INTO ledger_records (id, character_id, kind, payload, note, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (record_id, record.character_id, kind, json.dumps(record.payload()),
                  record.note, created_at.isoformat()))
            seq = cursor.lastrowid

        logger.debug("Ledger record appended", kind=kind, character_id=record.character_id, seq=seq)
        return record.model_copy(update={"id": record_id, "seq": seq, "created_at": created_at})

    def list_records(self, record_type: type[R], character_id: str) -> list[R]:
        """List every record of one kind for a character, oldest first."""
        kind = _record_kind(record_type)
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT seq, id, character_id, kind, payload, note, created_at
                FROM ledger_records
                WHERE character_id = ? AND kind = ?
                ORDER BY seq ASC
            """, (character_id, kind)).fetchall()

        return [StoredRow.from_row(row).to_record(record_type) for row in rows]

    def latest(self, record_type: type[R], character_id: str) -> R | None:
        """Get the most recent record of one kind, if any."""
        kind = _record_kind(record_type)
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT seq, id, character_id, kind, payload, note, created_at
                FROM ledger_records
                WHERE character_id = ? AND kind = ?
                ORDER BY seq DESC LIMIT 1
            """, (character_id, kind)).fetchone()

        if row is None:
            return None
        return StoredRow.from_row(row).to_record(record_type)

    def latest_by(self, record_type: type[R], character_id: str, key: str) -> dict[str, R]:
        """Get the most recent record per value of a payload field.

        Args:
            record_type: Record kind to read.
            character_id: Owning character.
            key: Payload field to group by (e.g. ``"ability"``).

        Returns:
            Mapping of key value to its latest record.
        """
        kind = _record_kind(record_type)
        if key not in record_type.model_fields:
            raise LedgerError(f"{record_type.__name__} has no field {key!r}", record_kind=kind)

        path = f"$.{key}"
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT seq, id, character_id, kind, payload, note, created_at
                FROM ledger_records
                WHERE seq IN (
                    SELECT MAX(seq) FROM ledger_records
                    WHERE character_id = ? AND kind = ?
                    GROUP BY json_extract(payload, ?)
                )
                ORDER BY seq ASC
            """, (character_id, kind, path)).fetchall()

        latest: dict[str, R] = {}
        for row in rows:
            record = StoredRow.from_row(row).to_record(record_type)
            latest[str(getattr(record, key))] = record
        return latest


# =============================================================================
# Singleton Instance
# =============================================================================


_ledger_instance: SQLiteLedger | None = None


def get_ledger() -> SQLiteLedger:
    """Get the global ledger instance built from settings.

    Returns:
        SQLiteLedger singleton instance.
    """
    global _ledger_instance

    if _ledger_instance is None:
        from dnd_ledger.core.config import get_settings

        _ledger_instance = SQLiteLedger(get_settings().ledger.database_path)

    return _ledger_instance


def reset_ledger() -> None:
    """Drop the global ledger instance so the next call rebuilds it."""
    global _ledger_instance
    _ledger_instance = None


__all__ = [
    "Ledger",
    "SQLiteLedger",
    "StoredRow",
    "get_ledger",
    "reset_ledger",
]
