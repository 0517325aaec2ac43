"""Character snapshot value objects.

A snapshot is the fully derived "current" state of one character at the
moment it was built. It is immutable; validators read it, append new ledger
records, and the next read produces a new snapshot.

Consumable pools are kept as flat, sorted lists of categories, so a level-1
wizard's slots are ``[1, 1]`` and a fighter 2 / wizard 1 has hit dice
``[10, 10, 6]``.
"""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dnd_ledger.core.constants import COIN_VALUES
from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    CasterKind,
    ClassName,
    ItemCategory,
    ProficiencyLevel,
    Skill,
    TraitSource,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ClassLevel(_Frozen):
    """Current level in one class."""

    class_name: ClassName
    level: int = Field(ge=1, le=20)
    subclass: str | None = None
    hit_die: int


class AbilityScore(_Frozen):
    """Resolved ability score with derived modifier and saving throw."""

    ability: Ability
    score: int
    modifier: int
    proficient: bool
    saving_throw: int


class SkillScore(_Frozen):
    skill: Skill
    ability: Ability
    proficiency: ProficiencyLevel
    modifier: int


class PreparedSlot(_Frozen):
    """One cantrip or prepared-spell slot; ``spell_id`` is None when empty."""

    spell_id: str | None = None
    always_prepared: bool = False


class SpellInfoForClass(_Frozen):
    """Spellcasting state for one spellcasting class.

    Attributes:
        class_name: The casting class.
        caster_kind: Tier used for slot lookups.
        ability: Spellcasting ability.
        max_spell_level: Highest spell level the class can prepare.
        spell_attack_bonus: Proficiency bonus + ability modifier.
        spell_save_dc: 8 + proficiency bonus + ability modifier.
        cantrip_slots: Cantrip slots, filled in preparation order.
        prepared_spells: Leveled-spell slots, filled in preparation order.
        known_spells: Spellbook spell ids for spellbook casters, otherwise None.
    """

    class_name: ClassName
    caster_kind: CasterKind
    ability: Ability
    max_spell_level: int
    spell_attack_bonus: int
    spell_save_dc: int
    cantrip_slots: tuple[PreparedSlot, ...] = ()
    prepared_spells: tuple[PreparedSlot, ...] = ()
    known_spells: tuple[str, ...] | None = None

    def slots_for(self, cantrip: bool) -> tuple[PreparedSlot, ...]:
        return self.cantrip_slots if cantrip else self.prepared_spells

    def prepared_ids(self, cantrip: bool) -> list[str]:
        """Spell ids currently occupying cantrip or leveled slots."""
        return [slot.spell_id for slot in self.slots_for(cantrip) if slot.spell_id]

    def free_slots(self, cantrip: bool) -> int:
        return sum(1 for slot in self.slots_for(cantrip) if slot.spell_id is None)

    def is_prepared(self, spell_id: str) -> bool:
        return spell_id in self.prepared_ids(True) or spell_id in self.prepared_ids(False)


class CoinPurse(_Frozen):
    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0

    @computed_field(description="Total purse value in copper pieces")
    @property
    def total_copper(self) -> int:
        """Calculate purse value in copper."""
        return sum(getattr(self, coin) * value for coin, value in COIN_VALUES.items())


class InventoryItem(_Frozen):
    """Current state of a held item."""

    item_id: str
    name: str
    category: ItemCategory
    worn: bool = False
    wielded: bool = False
    armor_type: ArmorType | None = None
    armor_class: int | None = None
    armor_dex_max: int | None = None
    armor_modifier: int | None = None
    max_charges: int | None = None
    charge_label: str | None = None
    current_charges: int = 0

    @property
    def equipped(self) -> bool:
        return self.worn or self.wielded


class Trait(_Frozen):
    name: str
    description: str
    source: TraitSource
    source_detail: str | None = None
    level: int | None = None


class CharacterSnapshot(_Frozen):
    """Derived current state of a character.

    Built by the snapshot builder in a single pass over the ledger; never
    mutated afterwards.
    """

    id: str
    name: str
    species: str | None = None
    lineage: str | None = None
    background: str | None = None
    alignment: str | None = None
    ruleset: str = "srd51"

    classes: tuple[ClassLevel, ...] = ()
    total_level: int = 0
    proficiency_bonus: int = 2

    abilities: dict[Ability, AbilityScore]
    skills: dict[Skill, SkillScore]

    max_hp: int = 0
    current_hp: int = 0
    armor_class: int = 10
    initiative: int = 0
    passive_perception: int = 10

    hit_dice: tuple[int, ...] = ()
    available_hit_dice: tuple[int, ...] = ()
    spell_slots: tuple[int, ...] = ()
    available_spell_slots: tuple[int, ...] = ()
    pact_slots: tuple[int, ...] = ()
    available_pact_slots: tuple[int, ...] = ()

    spells: tuple[SpellInfoForClass, ...] = ()
    coins: CoinPurse = Field(default_factory=CoinPurse)
    items: tuple[InventoryItem, ...] = ()
    traits: tuple[Trait, ...] = ()

    def class_level(self, class_name: str) -> ClassLevel | None:
        """Get the current level entry for a class, if held."""
        return next((c for c in self.classes if c.class_name == class_name), None)

    def spell_info(self, class_name: str) -> SpellInfoForClass | None:
        return next((s for s in self.spells if s.class_name == class_name), None)

    def modifier(self, ability: Ability) -> int:
        return self.abilities[ability].modifier

    def item(self, item_id: str) -> InventoryItem | None:
        return next((i for i in self.items if i.item_id == item_id), None)

    def slot_counts(self, *, pact: bool = False, available: bool = False) -> Counter[int]:
        """Spell slot pool as a level -> count mapping."""
        if pact:
            slots = self.available_pact_slots if available else self.pact_slots
        else:
            slots = self.available_spell_slots if available else self.spell_slots
        return Counter(slots)

    def used_slot_counts(self, *, pact: bool = False) -> Counter[int]:
        """Slots used per level (capacity minus available)."""
        return self.slot_counts(pact=pact) - self.slot_counts(pact=pact, available=True)

    def used_hit_dice(self) -> list[int]:
        """Spent hit dice, largest first."""
        used = Counter(self.hit_dice) - Counter(self.available_hit_dice)
        return sorted(used.elements(), reverse=True)


__all__ = [
    "ClassLevel",
    "AbilityScore",
    "SkillScore",
    "PreparedSlot",
    "SpellInfoForClass",
    "CoinPurse",
    "InventoryItem",
    "Trait",
    "CharacterSnapshot",
]
