"""Pydantic V2 schemas for the character ledger engine.

Submodules:
    enums: Enumeration types (Ability, Skill, CasterKind, PoolAction, etc.)
    rules: SRD 5.1 class, slot and trait tables
    spells: SRD spell catalog
    records: Append-only ledger record schemas
    snapshot: Derived character snapshot value objects

Example:
    >>> from dnd_ledger.models import HitDieRecord, PoolAction
    >>> HitDieRecord(character_id="c-1", die_value=8, action=PoolAction.USE)
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    CasterKind,
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
# Ledger Records
# =============================================================================
from dnd_ledger.models.records import (
    RECORD_TYPES,
    AbilityRecord,
    CharacterRecord,
    CoinRecord,
    HitDieRecord,
    HitPointRecord,
    ItemChargeRecord,
    ItemRecord,
    LedgerRecord,
    LevelRecord,
    SkillRecord,
    SpellLearnedRecord,
    SpellPreparedRecord,
    SpellSlotRecord,
    TraitRecord,
)

# =============================================================================
# Snapshot
# =============================================================================
from dnd_ledger.models.snapshot import (
    AbilityScore,
    CharacterSnapshot,
    ClassLevel,
    CoinPurse,
    InventoryItem,
    PreparedSlot,
    SkillScore,
    SpellInfoForClass,
    Trait,
)
from dnd_ledger.models.spells import Spell, get_spell


__all__ = [
    # Enums
    "Ability",
    "ArmorType",
    "CasterKind",
    "ClassName",
    "ItemCategory",
    "LearnAction",
    "PoolAction",
    "PrepareAction",
    "ProficiencyLevel",
    "Skill",
    "TraitSource",
    # Records
    "RECORD_TYPES",
    "LedgerRecord",
    "CharacterRecord",
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
    # Snapshot
    "CharacterSnapshot",
    "ClassLevel",
    "AbilityScore",
    "SkillScore",
    "PreparedSlot",
    "SpellInfoForClass",
    "CoinPurse",
    "InventoryItem",
    "Trait",
    # Spells
    "Spell",
    "get_spell",
]
