"""Snapshot builder.

Reads one character's ledger history and folds it into a
``CharacterSnapshot`` in a single pass. Computation order:

1. class levels, total level, proficiency bonus
2. ability scores and saving throws, then skills
3. hit points, hit dice, regular and pact spell slots
4. per-class spellcasting info
5. coins, inventory, armor class, initiative, passive perception, traits

The fold is deterministic and performs no writes. A missing character
yields ``None`` rather than an error.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from dnd_ledger.core.logging import get_logger
from dnd_ledger.engine.replay import flatten_pool, replay_pool
from dnd_ledger.engine.slots import (
    class_caster_kind,
    max_spell_level,
    pact_slot_capacity,
    regular_slot_capacity,
)
from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    CasterKind,
    ClassName,
    ItemCategory,
    LearnAction,
    PrepareAction,
    ProficiencyLevel,
    Skill,
)
from dnd_ledger.models.records import (
    AbilityRecord,
    CharacterRecord,
    CoinRecord,
    HitDieRecord,
    HitPointRecord,
    ItemChargeRecord,
    ItemRecord,
    LevelRecord,
    SkillRecord,
    SpellLearnedRecord,
    SpellPreparedRecord,
    SpellSlotRecord,
    TraitRecord,
)
from dnd_ledger.models.rules import CLASS_DEFINITIONS, ability_modifier, proficiency_bonus
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
from dnd_ledger.models.spells import get_spell
from dnd_ledger.storage.ledger import Ledger

logger = get_logger(__name__)

DEFAULT_ABILITY_SCORE = 10

# Dexterity cap applied when an armor item does not set one explicitly
_ARMOR_DEX_CAPS: dict[ArmorType, int | None] = {
    ArmorType.LIGHT: None,
    ArmorType.MEDIUM: 2,
    ArmorType.HEAVY: 0,
}


# =============================================================================
# Ledger History
# =============================================================================


@dataclass
class CharacterHistory:
    """Everything the builder reads for one character.

    Replayed resources hold full ordered histories; latest-wins resources
    hold only their current record.
    """

    levels: list[LevelRecord] = field(default_factory=list)
    abilities: dict[str, AbilityRecord] = field(default_factory=dict)
    skills: dict[str, SkillRecord] = field(default_factory=dict)
    hit_points: list[HitPointRecord] = field(default_factory=list)
    hit_dice: list[HitDieRecord] = field(default_factory=list)
    spell_slots: list[SpellSlotRecord] = field(default_factory=list)
    spells_learned: list[SpellLearnedRecord] = field(default_factory=list)
    spells_prepared: list[SpellPreparedRecord] = field(default_factory=list)
    coins: CoinRecord | None = None
    items: dict[str, ItemRecord] = field(default_factory=dict)
    item_charges: list[ItemChargeRecord] = field(default_factory=list)
    traits: list[TraitRecord] = field(default_factory=list)


def load_history(ledger: Ledger, character_id: str) -> CharacterHistory:
    """Read every record stream the builder needs."""
    return CharacterHistory(
        levels=ledger.list_records(LevelRecord, character_id),
        abilities=ledger.latest_by(AbilityRecord, character_id, "ability"),
        skills=ledger.latest_by(SkillRecord, character_id, "skill"),
        hit_points=ledger.list_records(HitPointRecord, character_id),
        hit_dice=ledger.list_records(HitDieRecord, character_id),
        spell_slots=ledger.list_records(SpellSlotRecord, character_id),
        spells_learned=ledger.list_records(SpellLearnedRecord, character_id),
        spells_prepared=ledger.list_records(SpellPreparedRecord, character_id),
        coins=ledger.latest(CoinRecord, character_id),
        items=ledger.latest_by(ItemRecord, character_id, "item_id"),
        item_charges=ledger.list_records(ItemChargeRecord, character_id),
        traits=ledger.list_records(TraitRecord, character_id),
    )


# =============================================================================
# Component Folds
# =============================================================================


def resolve_classes(levels: Iterable[LevelRecord]) -> list[ClassLevel]:
    """Current level per class, in the order classes were first taken.

    The highest recorded level wins. The subclass is the first one ever
    assigned for that class.
    """
    highest: dict[ClassName, int] = {}
    subclasses: dict[ClassName, str] = {}
    for record in levels:
        highest[record.class_name] = max(highest.get(record.class_name, 0), record.level)
        if record.subclass and record.class_name not in subclasses:
            subclasses[record.class_name] = record.subclass

    return [
        ClassLevel(
            class_name=class_name,
            level=level,
            subclass=subclasses.get(class_name),
            hit_die=CLASS_DEFINITIONS[class_name].hit_die,
        )
        for class_name, level in highest.items()
    ]


def resolve_abilities(
    records: dict[str, AbilityRecord], prof_bonus: int
) -> dict[Ability, AbilityScore]:
    abilities: dict[Ability, AbilityScore] = {}
    for ability in Ability:
        record = records.get(ability.value)
        score = record.score if record else DEFAULT_ABILITY_SCORE
        proficient = record.proficient if record else False
        modifier = ability_modifier(score)
        abilities[ability] = AbilityScore(
            ability=ability,
            score=score,
            modifier=modifier,
            proficient=proficient,
            saving_throw=modifier + (prof_bonus if proficient else 0),
        )
    return abilities


def resolve_skills(
    records: dict[str, SkillRecord],
    abilities: dict[Ability, AbilityScore],
    prof_bonus: int,
) -> dict[Skill, SkillScore]:
    skills: dict[Skill, SkillScore] = {}
    for skill in Skill:
        record = records.get(skill.value)
        proficiency = record.proficiency if record else ProficiencyLevel.NONE
        skills[skill] = SkillScore(
            skill=skill,
            ability=skill.ability,
            proficiency=proficiency,
            modifier=abilities[skill.ability].modifier + proficiency.bonus(prof_bonus),
        )
    return skills


def _replay_prepared(
    records: Iterable[SpellPreparedRecord],
    class_name: ClassName,
    cantrip: bool,
    capacity: int,
) -> tuple[PreparedSlot, ...]:
    # spell id -> always_prepared, kept in preparation order
    current: dict[str, bool] = {}
    for record in records:
        if record.class_name != class_name:
            continue
        spell = get_spell(record.spell_id)
        if (spell is not None and spell.is_cantrip) != cantrip:
            continue
        if record.action == PrepareAction.PREPARE:
            current.setdefault(record.spell_id, record.always_prepared)
        else:
            current.pop(record.spell_id, None)

    slots = [PreparedSlot(spell_id=spell_id) for spell_id, always in current.items() if not always]
    slots.extend(PreparedSlot() for _ in range(capacity - len(slots)))
    slots.extend(
        PreparedSlot(spell_id=spell_id, always_prepared=True)
        for spell_id, always in current.items()
        if always
    )
    return tuple(slots)


def replay_spellbook(records: Iterable[SpellLearnedRecord]) -> list[str]:
    """Spell ids currently in the spellbook, in the order they were learned."""
    book: list[str] = []
    for record in records:
        if record.action == LearnAction.LEARN:
            if record.spell_id not in book:
                book.append(record.spell_id)
        elif record.spell_id in book:
            book.remove(record.spell_id)
    return book


def resolve_spells(
    classes: Iterable[ClassLevel],
    abilities: dict[Ability, AbilityScore],
    prof_bonus: int,
    history: CharacterHistory,
) -> list[SpellInfoForClass]:
    spellbook: list[str] | None = None
    infos: list[SpellInfoForClass] = []

    for entry in classes:
        kind = class_caster_kind(entry)
        definition = CLASS_DEFINITIONS[entry.class_name]
        casting = definition.spellcasting
        if kind is CasterKind.NONE or casting is None:
            continue
        modifier = abilities[casting.ability].modifier

        known: tuple[str, ...] | None = None
        if casting.spellbook:
            if spellbook is None:
                spellbook = replay_spellbook(history.spells_learned)
            known = tuple(spellbook)

        infos.append(
            SpellInfoForClass(
                class_name=entry.class_name,
                caster_kind=kind,
                ability=casting.ability,
                max_spell_level=max_spell_level(entry),
                spell_attack_bonus=prof_bonus + modifier,
                spell_save_dc=8 + prof_bonus + modifier,
                cantrip_slots=_replay_prepared(
                    history.spells_prepared,
                    entry.class_name,
                    cantrip=True,
                    capacity=definition.cantrips_known(entry.level),
                ),
                prepared_spells=_replay_prepared(
                    history.spells_prepared,
                    entry.class_name,
                    cantrip=False,
                    capacity=definition.spells_prepared(entry.level, modifier),
                ),
                known_spells=known,
            )
        )
    return infos


def resolve_items(
    items: dict[str, ItemRecord], charges: Iterable[ItemChargeRecord]
) -> list[InventoryItem]:
    """Held items with their current charge counts.

    Items start at full charge; each delta is clamped to ``[0, max]`` as it
    is applied.
    """
    held = {item_id: record for item_id, record in items.items() if not record.dropped}
    current: dict[str, int] = {
        item_id: record.max_charges or 0 for item_id, record in held.items()
    }
    for charge in charges:
        record = held.get(charge.item_id)
        if record is None:
            continue
        value = max(0, current[charge.item_id] + charge.delta)
        if record.max_charges is not None:
            value = min(value, record.max_charges)
        current[charge.item_id] = value

    return [
        InventoryItem(
            item_id=record.item_id,
            name=record.name,
            category=record.category,
            worn=record.worn,
            wielded=record.wielded,
            armor_type=record.armor_type,
            armor_class=record.armor_class,
            armor_dex_max=record.armor_dex_max,
            armor_modifier=record.armor_modifier,
            max_charges=record.max_charges,
            charge_label=record.charge_label,
            current_charges=current[record.item_id],
        )
        for record in held.values()
    ]


def armor_class(items: Iterable[InventoryItem], dex_modifier: int) -> int:
    """Armor class from worn armor plus equipped bonuses.

    Unarmored AC is 10 + DEX. Worn armor replaces the base, with DEX capped
    by the armor's limit. Shields and other equipped items add their
    modifier.
    """
    base = 10 + dex_modifier
    bonus = 0
    for item in items:
        if item.category is ItemCategory.ARMOR and item.worn and item.armor_class is not None:
            cap = item.armor_dex_max
            if cap is None and item.armor_type is not None:
                cap = _ARMOR_DEX_CAPS[item.armor_type]
            base = item.armor_class + (dex_modifier if cap is None else min(dex_modifier, cap))
        elif item.equipped and item.armor_modifier:
            bonus += item.armor_modifier
    return base + bonus


# =============================================================================
# Builder
# =============================================================================


def compute_snapshot(character: CharacterRecord, history: CharacterHistory) -> CharacterSnapshot:
    """Fold a character's history into its current snapshot."""
    classes = resolve_classes(history.levels)
    total_level = sum(entry.level for entry in classes)
    prof_bonus = proficiency_bonus(total_level)

    abilities = resolve_abilities(history.abilities, prof_bonus)
    skills = resolve_skills(history.skills, abilities, prof_bonus)
    con_modifier = abilities[Ability.CON].modifier
    dex_modifier = abilities[Ability.DEX].modifier

    max_hp = max(0, sum(r.hit_die_roll for r in history.levels) + con_modifier * total_level)
    current_hp = min(max(max_hp + sum(r.delta for r in history.hit_points), 0), max_hp)

    hit_die_capacity: dict[int, int] = {}
    for entry in classes:
        hit_die_capacity[entry.hit_die] = hit_die_capacity.get(entry.hit_die, 0) + entry.level
    available_dice = replay_pool(
        hit_die_capacity, ((r.die_value, r.action) for r in history.hit_dice)
    )

    slot_capacity = regular_slot_capacity(classes)
    available_slots = replay_pool(
        slot_capacity,
        ((r.slot_level, r.action) for r in history.spell_slots if not r.pact),
    )
    pact_capacity = pact_slot_capacity(classes)
    available_pact = replay_pool(
        pact_capacity,
        ((r.slot_level, r.action) for r in history.spell_slots if r.pact),
    )

    spells = resolve_spells(classes, abilities, prof_bonus, history)

    coins = CoinPurse()
    if history.coins is not None:
        record = history.coins
        coins = CoinPurse(pp=record.pp, gp=record.gp, ep=record.ep, sp=record.sp, cp=record.cp)

    items = resolve_items(history.items, history.item_charges)

    return CharacterSnapshot(
        id=character.id,
        name=character.name,
        species=character.species,
        lineage=character.lineage,
        background=character.background,
        alignment=character.alignment,
        ruleset=character.ruleset,
        classes=tuple(classes),
        total_level=total_level,
        proficiency_bonus=prof_bonus,
        abilities=abilities,
        skills=skills,
        max_hp=max_hp,
        current_hp=current_hp,
        armor_class=armor_class(items, dex_modifier),
        initiative=dex_modifier,
        passive_perception=10 + skills[Skill.PERCEPTION].modifier,
        hit_dice=tuple(sorted(flatten_pool(hit_die_capacity), reverse=True)),
        available_hit_dice=tuple(sorted(flatten_pool(available_dice), reverse=True)),
        spell_slots=tuple(flatten_pool(slot_capacity)),
        available_spell_slots=tuple(flatten_pool(available_slots)),
        pact_slots=tuple(flatten_pool(pact_capacity)),
        available_pact_slots=tuple(flatten_pool(available_pact)),
        spells=tuple(spells),
        coins=coins,
        items=tuple(items),
        traits=tuple(
            Trait(
                name=r.name,
                description=r.description,
                source=r.source,
                source_detail=r.source_detail,
                level=r.level,
            )
            for r in history.traits
        ),
    )


def build_snapshot(ledger: Ledger, character_id: str) -> CharacterSnapshot | None:
    """Build the current snapshot for a character.

    Args:
        ledger: Ledger to read from.
        character_id: Character to build.

    Returns:
        The snapshot, or None when the character does not exist.
    """
    character = ledger.get_character(character_id)
    if character is None:
        logger.debug("Snapshot requested for unknown character", character_id=character_id)
        return None

    snapshot = compute_snapshot(character, load_history(ledger, character_id))
    logger.debug(
        "Snapshot built",
        character_id=character_id,
        total_level=snapshot.total_level,
        current_hp=snapshot.current_hp,
    )
    return snapshot


__all__ = [
    "CharacterHistory",
    "load_history",
    "resolve_classes",
    "resolve_abilities",
    "resolve_skills",
    "resolve_spells",
    "resolve_items",
    "replay_spellbook",
    "armor_class",
    "compute_snapshot",
    "build_snapshot",
]
