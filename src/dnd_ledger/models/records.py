"""Ledger record schemas.

Every change to a character is stored as one immutable record. The ledger
assigns ``id``, ``seq`` (creation order) and ``created_at`` when a record is
appended; validators build records with those left empty.

Each record class declares a ``kind`` that names its stream in the ledger.
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    ClassName,
    ItemCategory,
    LearnAction,
    PoolAction,
    PrepareAction,
    ProficiencyLevel,
    Skill,
    TraitSource,
)


# =============================================================================
# Characters
# =============================================================================


class CharacterRecord(BaseModel):
    """Identity and static choices of a character.

    Created once; the engine never changes these fields.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(min_length=1)
    species: str | None = None
    lineage: str | None = None
    background: str | None = None
    alignment: str | None = None
    ruleset: str = "srd51"
    created_at: datetime | None = None


# =============================================================================
# Record Base
# =============================================================================


class LedgerRecord(BaseModel):
    """Base class for append-only ledger records."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[str] = ""
    # Fields owned by the ledger rather than the record payload
    envelope_fields: ClassVar[frozenset[str]] = frozenset(
        {"id", "seq", "character_id", "note", "created_at"}
    )

    character_id: str
    note: str | None = None
    id: str | None = None
    seq: int | None = None
    created_at: datetime | None = None

    def payload(self) -> dict[str, object]:
        """Serialize the kind-specific fields to JSON-compatible values."""
        return self.model_dump(mode="json", exclude=set(self.envelope_fields))


class LevelRecord(LedgerRecord):
    """A level gained in one class."""

    kind: ClassVar[str] = "level"

    class_name: ClassName
    level: int = Field(ge=1, le=20)
    subclass: str | None = None
    hit_die_roll: int = Field(ge=1, le=12)


class AbilityRecord(LedgerRecord):
    """Score and saving-throw proficiency for one ability, written together."""

    kind: ClassVar[str] = "ability"

    ability: Ability
    score: int = Field(ge=1, le=30)
    proficient: bool = False


class SkillRecord(LedgerRecord):
    kind: ClassVar[str] = "skill"

    skill: Skill
    proficiency: ProficiencyLevel


class HitPointRecord(LedgerRecord):
    """Change to current hit points (negative for damage)."""

    kind: ClassVar[str] = "hit_points"

    delta: int


class HitDieRecord(LedgerRecord):
    kind: ClassVar[str] = "hit_die"

    die_value: Literal[6, 8, 10, 12]
    action: PoolAction


class SpellSlotRecord(LedgerRecord):
    """Use or restore one spell slot; ``pact`` marks warlock pact slots."""

    kind: ClassVar[str] = "spell_slot"

    slot_level: int = Field(ge=1, le=9)
    action: PoolAction
    pact: bool = False


class SpellLearnedRecord(LedgerRecord):
    """Wizard spellbook entry."""

    kind: ClassVar[str] = "spell_learned"

    spell_id: str
    action: LearnAction = LearnAction.LEARN


class SpellPreparedRecord(LedgerRecord):
    kind: ClassVar[str] = "spell_prepared"

    class_name: ClassName
    spell_id: str
    action: PrepareAction = PrepareAction.PREPARE
    always_prepared: bool = False


class CoinRecord(LedgerRecord):
    """Full coin purse after a transaction (latest record wins)."""

    kind: ClassVar[str] = "coins"

    pp: int = Field(default=0, ge=0)
    gp: int = Field(default=0, ge=0)
    ep: int = Field(default=0, ge=0)
    sp: int = Field(default=0, ge=0)
    cp: int = Field(default=0, ge=0)


class ItemRecord(LedgerRecord):
    """Inventory state of one item (latest record per item wins)."""

    kind: ClassVar[str] = "item"

    item_id: str
    name: str
    category: ItemCategory = ItemCategory.GEAR
    worn: bool = False
    wielded: bool = False
    dropped: bool = False
    armor_type: ArmorType | None = None
    armor_class: int | None = None
    armor_dex_max: int | None = None
    armor_modifier: int | None = None
    max_charges: int | None = None
    charge_label: str | None = None


class ItemChargeRecord(LedgerRecord):
    kind: ClassVar[str] = "item_charge"

    item_id: str
    delta: int


class TraitRecord(LedgerRecord):
    kind: ClassVar[str] = "trait"

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    source: TraitSource
    source_detail: str | None = None
    level: int | None = None


RECORD_TYPES: dict[str, type[LedgerRecord]] = {
    record_type.kind: record_type
    for record_type in (
        LevelRecord,
        AbilityRecord,
        SkillRecord,
        HitPointRecord,
        HitDieRecord,
        SpellSlotRecord,
        SpellLearnedRecord,
        SpellPreparedRecord,
        CoinRecord,
        ItemRecord,
        ItemChargeRecord,
        TraitRecord,
    )
}


__all__ = [
    "CharacterRecord",
    "LedgerRecord",
    "LevelRecord",
    "AbilityRecord",
    "SkillRecord",
    "HitPointRecord",
    "HitDieRecord",
    "SpellSlotRecord",
    "SpellLearnedRecord",
    "SpellPreparedRecord",
    "CoinRecord",
    "ItemRecord",
    "ItemChargeRecord",
    "TraitRecord",
    "RECORD_TYPES",
]
