"""Pytest configuration and shared fixtures.

This module provides common fixtures for all tests in the character ledger
test suite: a throwaway SQLite ledger per test and small builders that
append raw records the way earlier actions would have.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from dnd_ledger.core.config import clear_settings_cache
from dnd_ledger.engine.forms import ActionResult
from dnd_ledger.engine.snapshot import build_snapshot
from dnd_ledger.models.enums import Ability, ClassName
from dnd_ledger.models.records import (
    AbilityRecord,
    CharacterRecord,
    LevelRecord,
    SpellLearnedRecord,
    SpellPreparedRecord,
)
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import SQLiteLedger, reset_ledger


if TYPE_CHECKING:
    from collections.abc import Generator


CHARACTER_ID = "c-elara"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache and ledger singleton around each test."""
    clear_settings_cache()
    reset_ledger()
    yield
    clear_settings_cache()
    reset_ledger()


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def ledger(tmp_path: Path) -> SQLiteLedger:
    """Create an empty ledger in a temporary directory.

    Returns:
        SQLiteLedger backed by a fresh database file.
    """
    return SQLiteLedger(tmp_path / "ledger.db")


@pytest.fixture
def character(ledger: SQLiteLedger) -> CharacterRecord:
    """Create a level-0 elf sage with no records yet.

    Returns:
        The stored CharacterRecord.
    """
    return ledger.add_character(
        CharacterRecord(id=CHARACTER_ID, name="Elara", species="elf", background="sage")
    )


@pytest.fixture
def add_levels(ledger: SQLiteLedger, character: CharacterRecord) -> Callable[..., None]:
    """Append level records for a class.

    Returns:
        ``add(class_name, up_to, roll=..., subclass=None, start=1)``.
    """

    def add(
        class_name: ClassName,
        up_to: int,
        *,
        roll: int = 4,
        subclass: str | None = None,
        start: int = 1,
    ) -> None:
        for level in range(start, up_to + 1):
            ledger.append(
                LevelRecord(
                    character_id=character.id,
                    class_name=class_name,
                    level=level,
                    subclass=subclass,
                    hit_die_roll=roll,
                )
            )

    return add


@pytest.fixture
def set_ability(ledger: SQLiteLedger, character: CharacterRecord) -> Callable[..., None]:
    """Append an ability record.

    Returns:
        ``set(ability, score, proficient=False)``.
    """

    def set_(ability: Ability, score: int, proficient: bool = False) -> None:
        ledger.append(
            AbilityRecord(
                character_id=character.id, ability=ability, score=score, proficient=proficient
            )
        )

    return set_


@pytest.fixture
def snapshot_of(ledger: SQLiteLedger, character: CharacterRecord) -> Callable[[], CharacterSnapshot]:
    """Build the current snapshot of the test character.

    Returns:
        Zero-argument callable returning a fresh snapshot.
    """

    def build() -> CharacterSnapshot:
        snapshot = build_snapshot(ledger, character.id)
        assert snapshot is not None
        return snapshot

    return build


@pytest.fixture
def run_action(
    ledger: SQLiteLedger, snapshot_of: Callable[[], CharacterSnapshot]
) -> Callable[..., ActionResult]:
    """Run an action function against a fresh snapshot.

    Returns:
        ``run(function, **data)`` returning the action result.
    """

    def run(function: Callable[..., ActionResult], **data: str) -> ActionResult:
        return function(ledger, snapshot_of(), data)

    return run


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def wizard(
    ledger: SQLiteLedger,
    character: CharacterRecord,
    add_levels: Callable[..., None],
    set_ability: Callable[..., None],
) -> CharacterRecord:
    """A level-1 wizard: INT 16, DEX 14, CON 14, rolled 6 HP.

    The spellbook holds magic missile, shield, detect magic and sleep;
    magic missile is prepared along with the fire bolt cantrip.

    Returns:
        The wizard's CharacterRecord.
    """
    add_levels(ClassName.WIZARD, 1, roll=6)
    set_ability(Ability.INT, 16, proficient=True)
    set_ability(Ability.DEX, 14)
    set_ability(Ability.CON, 14)
    for spell_id in ("magic-missile", "shield", "detect-magic", "sleep"):
        ledger.append(SpellLearnedRecord(character_id=character.id, spell_id=spell_id))
    for spell_id in ("fire-bolt", "magic-missile"):
        ledger.append(
            SpellPreparedRecord(
                character_id=character.id, class_name=ClassName.WIZARD, spell_id=spell_id
            )
        )
    return character


@pytest.fixture
def multiclass_caster(
    ledger: SQLiteLedger,
    character: CharacterRecord,
    add_levels: Callable[..., None],
    set_ability: Callable[..., None],
) -> CharacterRecord:
    """A wizard 3 / cleric 2 (life domain) with INT 16, WIS 14, CON 12.

    Returns:
        The character's CharacterRecord.
    """
    add_levels(ClassName.WIZARD, 2, roll=4)
    add_levels(ClassName.WIZARD, 3, roll=4, subclass="school of evocation", start=3)
    add_levels(ClassName.CLERIC, 2, roll=5, subclass="life domain")
    set_ability(Ability.INT, 16)
    set_ability(Ability.WIS, 14)
    set_ability(Ability.CON, 12)
    return character
