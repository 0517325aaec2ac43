"""Action runner.

Runs one action against a fresh snapshot inside a single ledger
transaction, so the state an action validates against cannot change
between its checks and its writes.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, TypeVar

from dnd_ledger.core.exceptions import UnknownToolError
from dnd_ledger.core.logging import action_context, get_logger
from dnd_ledger.engine.actions import get_action
from dnd_ledger.engine.forms import ActionComplete, ActionIncomplete, ActionResult
from dnd_ledger.engine.snapshot import build_snapshot
from dnd_ledger.models.records import CharacterRecord, LedgerRecord
from dnd_ledger.storage.ledger import Ledger


logger = get_logger(__name__)

R = TypeVar("R", bound=LedgerRecord)


class CountingLedger:
    """Ledger wrapper that counts the records appended through it."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self.appended = 0

    def get_character(self, character_id: str) -> CharacterRecord | None:
        return self.ledger.get_character(character_id)

    def add_character(self, character: CharacterRecord) -> CharacterRecord:
        return self.ledger.add_character(character)

    def append(self, record: R) -> R:
        stored = self.ledger.append(record)
        self.appended += 1
        return stored

    def list_records(self, record_type: type[R], character_id: str) -> list[R]:
        return self.ledger.list_records(record_type, character_id)

    def latest(self, record_type: type[R], character_id: str) -> R | None:
        return self.ledger.latest(record_type, character_id)

    def latest_by(self, record_type: type[R], character_id: str, key: str) -> dict[str, R]:
        return self.ledger.latest_by(record_type, character_id, key)

    def transaction(self) -> AbstractContextManager[None]:
        return self.ledger.transaction()


def perform_action(
    ledger: Ledger,
    character_id: str,
    action_name: str,
    data: Mapping[str, Any],
) -> ActionResult:
    """Validate and, unless in check mode, commit one action.

    Args:
        ledger: Ledger to read and append to.
        character_id: Character the action applies to.
        action_name: Registered action name (e.g. ``"cast_spell"``).
        data: Flat form input.

    Returns:
        ``ActionComplete`` when records were written, otherwise
        ``ActionIncomplete`` with field-keyed errors.

    Raises:
        UnknownToolError: If no action is registered under ``action_name``.
    """
    action = get_action(action_name)
    if action is None:
        raise UnknownToolError(f"Unknown action: {action_name}", tool_name=action_name)

    counting = CountingLedger(ledger)
    with action_context(character_id, action_name):
        with ledger.transaction():
            snapshot = build_snapshot(ledger, character_id)
            if snapshot is None:
                logger.warning("Action requested for unknown character")
                return ActionIncomplete(
                    values=dict(data),
                    errors={"character_id": f"Character {character_id} not found"},
                )
            result = action.function(counting, snapshot, data)

        if isinstance(result, ActionComplete):
            logger.info("Action committed", records=counting.appended)
        elif result.errors:
            logger.debug("Action rejected", errors=result.errors)
        else:
            logger.debug("Action checked")
        return result


__all__ = ["CountingLedger", "perform_action"]
