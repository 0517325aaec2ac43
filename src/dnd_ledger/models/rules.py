"""SRD 5.1 rules tables.

This module contains all the static data the snapshot builder and the
action validators look up:
- Proficiency bonus and ability modifiers
- Class definitions (hit die, subclasses, spellcasting tier)
- Spell slot tables for full, half and third casters plus pact magic
- Cantrip and prepared/known spell counts
- Traits granted by classes, subclasses, species, lineages and backgrounds

The tables are loaded once at import time and are never written to.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dnd_ledger.models.enums import Ability, CasterKind, ClassName, TraitSource


# =============================================================================
# Proficiency Bonus and Ability Modifiers
# =============================================================================


def proficiency_bonus(total_level: int) -> int:
    """Get proficiency bonus for a total character level.

    Level 1-4 gives +2, and the bonus grows by one every four levels.
    """
    if total_level < 1:
        return 2
    return (total_level - 1) // 4 + 2


def ability_modifier(score: int) -> int:
    """Calculate the modifier for an ability score (floor division)."""
    return (score - 10) // 2


# =============================================================================
# Spell Slots by Caster Tier (SRD 5.1)
# =============================================================================

# Full casters: bard, cleric, druid, sorcerer, wizard
FULL_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {1: 2},
    2:  {1: 3},
    3:  {1: 4, 2: 2},
    4:  {1: 4, 2: 3},
    5:  {1: 4, 2: 3, 3: 2},
    6:  {1: 4, 2: 3, 3: 3},
    7:  {1: 4, 2: 3, 3: 3, 4: 1},
    8:  {1: 4, 2: 3, 3: 3, 4: 2},
    9:  {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    10: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    11: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    12: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    13: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    16: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 1, 7: 1, 8: 1, 9: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 1, 8: 1, 9: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
}

# Half casters: paladin, ranger (slots from level 2)
HALF_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {},
    2:  {1: 2},
    3:  {1: 3},
    4:  {1: 3},
    5:  {1: 4, 2: 2},
    6:  {1: 4, 2: 2},
    7:  {1: 4, 2: 3},
    8:  {1: 4, 2: 3},
    9:  {1: 4, 2: 3, 3: 2},
    10: {1: 4, 2: 3, 3: 2},
    11: {1: 4, 2: 3, 3: 3},
    12: {1: 4, 2: 3, 3: 3},
    13: {1: 4, 2: 3, 3: 3, 4: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 2},
    16: {1: 4, 2: 3, 3: 3, 4: 2},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
}

# Third casters: eldritch knight, arcane trickster (slots from level 3)
THIRD_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {},
    2:  {},
    3:  {1: 2},
    4:  {1: 3},
    5:  {1: 3},
    6:  {1: 3},
    7:  {1: 4, 2: 2},
    8:  {1: 4, 2: 2},
    9:  {1: 4, 2: 2},
    10: {1: 4, 2: 3},
    11: {1: 4, 2: 3},
    12: {1: 4, 2: 3},
    13: {1: 4, 2: 3, 3: 2},
    14: {1: 4, 2: 3, 3: 2},
    15: {1: 4, 2: 3, 3: 2},
    16: {1: 4, 2: 3, 3: 3},
    17: {1: 4, 2: 3, 3: 3},
    18: {1: 4, 2: 3, 3: 3},
    19: {1: 4, 2: 3, 3: 3, 4: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 1},
}

# Warlock pact magic: level -> (number of slots, slot level)
PACT_MAGIC_SLOTS: dict[int, tuple[int, int]] = {
    1: (1, 1),
    2: (2, 1),
    3: (2, 2),
    4: (2, 2),
    5: (2, 3),
    6: (2, 3),
    7: (2, 4),
    8: (2, 4),
    9: (2, 5),
    10: (2, 5),
    11: (3, 5),
    12: (3, 5),
    13: (3, 5),
    14: (3, 5),
    15: (3, 5),
    16: (3, 5),
    17: (4, 5),
    18: (4, 5),
    19: (4, 5),
    20: (4, 5),
}

SLOT_TABLES: dict[CasterKind, dict[int, dict[int, int]]] = {
    CasterKind.FULL: FULL_CASTER_SLOTS,
    CasterKind.HALF: HALF_CASTER_SLOTS,
    CasterKind.THIRD: THIRD_CASTER_SLOTS,
}

# Highest tier first
CASTER_TIER_ORDER: tuple[CasterKind, ...] = (
    CasterKind.FULL,
    CasterKind.HALF,
    CasterKind.THIRD,
)


def slots_at(kind: CasterKind, level: int) -> dict[int, int]:
    """Get the slot pool for a caster tier at a given (effective) level.

    Args:
        kind: Full, half or third caster tier.
        level: Caster level, clamped to 20.

    Returns:
        Mapping of spell level to slot count (empty below the tier's start).
    """
    table = SLOT_TABLES.get(kind)
    if table is None or level < 1:
        return {}
    return dict(table[min(level, 20)])


def pact_slots_at(level: int) -> dict[int, int]:
    """Get the pact magic pool for a warlock level."""
    if level < 1:
        return {}
    count, slot_level = PACT_MAGIC_SLOTS[min(level, 20)]
    return {slot_level: count}


def max_slot_level(kind: CasterKind, level: int) -> int:
    """Get the highest spell level a single class can cast at its level.

    Returns 0 when the class has no slots yet.
    """
    if kind is CasterKind.PACT:
        pool = pact_slots_at(level)
    else:
        pool = slots_at(kind, level)
    return max((lvl for lvl, count in pool.items() if count > 0), default=0)


# =============================================================================
# Cantrips and Spells Prepared
# =============================================================================

CANTRIPS_KNOWN: dict[ClassName, dict[int, int]] = {
    ClassName.BARD: {1: 2, 4: 3, 10: 4},
    ClassName.CLERIC: {1: 3, 4: 4, 10: 5},
    ClassName.DRUID: {1: 2, 4: 3, 10: 4},
    ClassName.SORCERER: {1: 4, 4: 5, 10: 6},
    ClassName.WARLOCK: {1: 2, 4: 3, 10: 4},
    ClassName.WIZARD: {1: 3, 4: 4, 10: 5},
}

THIRD_CASTER_CANTRIPS: dict[int, int] = {3: 2, 10: 3}

# Spells known by casters that do not prepare from a list (index = class level)
SPELLS_KNOWN: dict[ClassName, list[int]] = {
    ClassName.BARD: [0, 4, 5, 6, 7, 8, 9, 10, 11, 12, 14, 15, 15, 16, 18, 19, 19, 20, 22, 22, 22],
    ClassName.SORCERER: [0, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 12, 13, 13, 14, 14, 15, 15, 15, 15],
    ClassName.WARLOCK: [0, 2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 11, 11, 12, 12, 13, 13, 14, 14, 15, 15],
}

THIRD_CASTER_SPELLS_KNOWN: list[int] = [
    0, 0, 0, 3, 4, 4, 5, 6, 6, 7, 8, 8, 9, 10, 10, 11, 11, 12, 13, 13, 13,
]


def _progression_value(progression: dict[int, int], level: int) -> int:
    value = 0
    for threshold, count in sorted(progression.items()):
        if level >= threshold:
            value = count
    return value


# =============================================================================
# Class Definitions
# =============================================================================


class SpellcastingDefinition(BaseModel):
    """How a class casts spells.

    Attributes:
        kind: Caster tier driving the slot table.
        ability: Spellcasting ability.
        subclasses: Subclasses that unlock casting, or None when every
            member of the class casts.
        prepares: "full" for mod + level preparers, "half" for mod + level/2,
            None for casters with a fixed known-spell count.
        spellbook: Leveled spells must first be learned into a spellbook.
        spell_list: Class whose spell list is used, when not its own.
    """

    model_config = ConfigDict(frozen=True)

    kind: CasterKind
    ability: Ability
    subclasses: tuple[str, ...] | None = None
    prepares: str | None = None
    spellbook: bool = False
    spell_list: ClassName | None = None


class ClassDefinition(BaseModel):
    """Static definition of a character class."""

    model_config = ConfigDict(frozen=True)

    name: ClassName
    hit_die: int = Field(ge=6, le=12)
    subclass_level: int = Field(ge=1, le=3)
    subclasses: tuple[str, ...]
    spellcasting: SpellcastingDefinition | None = None

    def caster_kind(self, subclass: str | None) -> CasterKind:
        """Get the caster tier this class contributes for a given subclass.

        Subclass-gated casters only count once the matching subclass is held.
        """
        casting = self.spellcasting
        if casting is None:
            return CasterKind.NONE
        if casting.subclasses is not None and subclass not in casting.subclasses:
            return CasterKind.NONE
        return casting.kind

    @property
    def spell_list(self) -> ClassName:
        """Class whose spell list this class casts from."""
        if self.spellcasting and self.spellcasting.spell_list:
            return self.spellcasting.spell_list
        return self.name

    def cantrips_known(self, level: int) -> int:
        """Number of cantrip slots at a class level."""
        kind = self.spellcasting.kind if self.spellcasting else CasterKind.NONE
        if kind is CasterKind.THIRD:
            return _progression_value(THIRD_CASTER_CANTRIPS, level)
        return _progression_value(CANTRIPS_KNOWN.get(self.name, {}), level)

    def spells_prepared(self, level: int, modifier: int) -> int:
        """Number of leveled-spell slots at a class level.

        Args:
            level: Class level.
            modifier: Spellcasting ability modifier.
        """
        casting = self.spellcasting
        if casting is None:
            return 0
        level = min(level, 20)
        if casting.kind is CasterKind.THIRD:
            return THIRD_CASTER_SPELLS_KNOWN[level]
        if casting.prepares == "full":
            return max(1, modifier + level)
        if casting.prepares == "half":
            if max_slot_level(casting.kind, level) == 0:
                return 0
            return max(1, modifier + level // 2)
        return SPELLS_KNOWN[self.name][level]


CLASS_DEFINITIONS: dict[ClassName, ClassDefinition] = {
    ClassName.BARBARIAN: ClassDefinition(
        name=ClassName.BARBARIAN,
        hit_die=12,
        subclass_level=3,
        subclasses=("path of the berserker", "path of the totem warrior"),
    ),
    ClassName.BARD: ClassDefinition(
        name=ClassName.BARD,
        hit_die=8,
        subclass_level=3,
        subclasses=("college of lore", "college of valor"),
        spellcasting=SpellcastingDefinition(kind=CasterKind.FULL, ability=Ability.CHA),
    ),
    ClassName.CLERIC: ClassDefinition(
        name=ClassName.CLERIC,
        hit_die=8,
        subclass_level=1,
        subclasses=(
            "knowledge domain", "life domain", "light domain", "nature domain",
            "tempest domain", "trickery domain", "war domain",
        ),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.FULL, ability=Ability.WIS, prepares="full"
        ),
    ),
    ClassName.DRUID: ClassDefinition(
        name=ClassName.DRUID,
        hit_die=8,
        subclass_level=2,
        subclasses=("circle of the land", "circle of the moon"),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.FULL, ability=Ability.WIS, prepares="full"
        ),
    ),
    ClassName.FIGHTER: ClassDefinition(
        name=ClassName.FIGHTER,
        hit_die=10,
        subclass_level=3,
        subclasses=("champion", "battle master", "eldritch knight"),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.THIRD,
            ability=Ability.INT,
            subclasses=("eldritch knight",),
            spell_list=ClassName.WIZARD,
        ),
    ),
    ClassName.MONK: ClassDefinition(
        name=ClassName.MONK,
        hit_die=8,
        subclass_level=3,
        subclasses=("way of the open hand", "way of shadow", "way of the four elements"),
    ),
    ClassName.PALADIN: ClassDefinition(
        name=ClassName.PALADIN,
        hit_die=10,
        subclass_level=3,
        subclasses=("oath of devotion", "oath of the ancients", "oath of vengeance"),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.HALF, ability=Ability.CHA, prepares="half"
        ),
    ),
    ClassName.RANGER: ClassDefinition(
        name=ClassName.RANGER,
        hit_die=10,
        subclass_level=3,
        subclasses=("hunter", "beast master"),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.HALF, ability=Ability.WIS, prepares="half"
        ),
    ),
    ClassName.ROGUE: ClassDefinition(
        name=ClassName.ROGUE,
        hit_die=8,
        subclass_level=3,
        subclasses=("thief", "assassin", "arcane trickster"),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.THIRD,
            ability=Ability.INT,
            subclasses=("arcane trickster",),
            spell_list=ClassName.WIZARD,
        ),
    ),
    ClassName.SORCERER: ClassDefinition(
        name=ClassName.SORCERER,
        hit_die=6,
        subclass_level=1,
        subclasses=("draconic bloodline", "wild magic"),
        spellcasting=SpellcastingDefinition(kind=CasterKind.FULL, ability=Ability.CHA),
    ),
    ClassName.WARLOCK: ClassDefinition(
        name=ClassName.WARLOCK,
        hit_die=8,
        subclass_level=1,
        subclasses=("the archfey", "the fiend", "the great old one"),
        spellcasting=SpellcastingDefinition(kind=CasterKind.PACT, ability=Ability.CHA),
    ),
    ClassName.WIZARD: ClassDefinition(
        name=ClassName.WIZARD,
        hit_die=6,
        subclass_level=2,
        subclasses=(
            "school of abjuration", "school of conjuration", "school of divination",
            "school of enchantment", "school of evocation", "school of illusion",
            "school of necromancy", "school of transmutation",
        ),
        spellcasting=SpellcastingDefinition(
            kind=CasterKind.FULL, ability=Ability.INT, prepares="full", spellbook=True
        ),
    ),
}


def get_class(name: str) -> ClassDefinition | None:
    """Look up a class definition by its lowercase name."""
    try:
        return CLASS_DEFINITIONS[ClassName(name)]
    except ValueError:
        return None


# =============================================================================
# Traits
# =============================================================================


class TraitGrant(BaseModel):
    """A trait a character gains automatically."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    source: TraitSource
    source_detail: str | None = None
    level: int | None = None


# Class features: class -> class level -> [(name, description)]
CLASS_FEATURES: dict[ClassName, dict[int, list[tuple[str, str]]]] = {
    ClassName.BARBARIAN: {
        1: [
            ("rage", "Enter a rage as a bonus action for extra damage and resistance."),
            ("unarmored defense", "AC equals 10 + DEX + CON while wearing no armor."),
        ],
        2: [
            ("reckless attack", "Attack with advantage at the cost of giving advantage."),
            ("danger sense", "Advantage on DEX saves against effects you can see."),
        ],
        5: [("extra attack", "Attack twice when taking the Attack action.")],
        7: [("feral instinct", "Advantage on initiative rolls.")],
        9: [("brutal critical", "Roll one additional weapon die on a critical hit.")],
        11: [("relentless rage", "Drop to 1 HP instead of 0 while raging on a CON save.")],
        15: [("persistent rage", "Rage only ends early if you fall unconscious or choose.")],
        18: [("indomitable might", "STR checks use your STR score as a minimum.")],
        20: [("primal champion", "STR and CON increase by 4, to a maximum of 24.")],
    },
    ClassName.BARD: {
        1: [
            ("spellcasting", "Cast bard spells using Charisma."),
            ("bardic inspiration", "Grant an ally an inspiration die as a bonus action."),
        ],
        2: [
            ("jack of all trades", "Add half proficiency to ability checks you lack proficiency in."),
            ("song of rest", "Allies regain extra HP when spending hit dice on a short rest."),
        ],
        3: [("expertise", "Double proficiency for two chosen skills.")],
        5: [("font of inspiration", "Regain Bardic Inspiration on a short rest.")],
        6: [("countercharm", "Grant allies advantage against being frightened or charmed.")],
        10: [("magical secrets", "Learn two spells from any class.")],
        20: [("superior inspiration", "Regain one inspiration die when rolling initiative with none.")],
    },
    ClassName.CLERIC: {
        1: [("spellcasting", "Cast cleric spells using Wisdom.")],
        2: [("channel divinity", "Channel divine energy to fuel magical effects.")],
        5: [("destroy undead", "Turn Undead destroys low challenge undead.")],
        10: [("divine intervention", "Call on your deity to intervene.")],
    },
    ClassName.DRUID: {
        1: [
            ("druidic", "Know the secret language of druids."),
            ("spellcasting", "Cast druid spells using Wisdom."),
        ],
        2: [("wild shape", "Magically assume the shape of a beast.")],
        18: [("timeless body", "Age one year for every ten that pass.")],
        20: [("archdruid", "Use Wild Shape an unlimited number of times.")],
    },
    ClassName.FIGHTER: {
        1: [
            ("fighting style", "Adopt a particular style of fighting."),
            ("second wind", "Regain 1d10 + fighter level HP as a bonus action."),
        ],
        2: [("action surge", "Take one additional action on your turn.")],
        5: [("extra attack", "Attack twice when taking the Attack action.")],
        9: [("indomitable", "Reroll a failed saving throw.")],
    },
    ClassName.MONK: {
        1: [
            ("unarmored defense", "AC equals 10 + DEX + WIS while wearing no armor."),
            ("martial arts", "Use DEX for unarmed strikes and monk weapons."),
        ],
        2: [
            ("ki", "Spend ki points to fuel monk features."),
            ("unarmored movement", "Speed increases while not wearing armor."),
        ],
        3: [("deflect missiles", "Reduce damage from ranged weapon attacks.")],
        4: [("slow fall", "Reduce falling damage by five times monk level.")],
        5: [
            ("extra attack", "Attack twice when taking the Attack action."),
            ("stunning strike", "Spend ki to stun a creature you hit."),
        ],
        7: [("evasion", "Take no damage on successful DEX saves for half damage.")],
    },
    ClassName.PALADIN: {
        1: [
            ("divine sense", "Detect celestials, fiends and undead nearby."),
            ("lay on hands", "Heal from a pool of HP equal to five times paladin level."),
        ],
        2: [
            ("fighting style", "Adopt a particular style of fighting."),
            ("spellcasting", "Cast paladin spells using Charisma."),
            ("divine smite", "Expend a spell slot to deal radiant damage on a hit."),
        ],
        3: [("divine health", "Immune to disease.")],
        5: [("extra attack", "Attack twice when taking the Attack action.")],
        6: [("aura of protection", "Allies within 10 feet add your CHA to saving throws.")],
    },
    ClassName.RANGER: {
        1: [
            ("favored enemy", "Advantage tracking and recalling lore about chosen foes."),
            ("natural explorer", "Expertise at navigating a favored terrain."),
        ],
        2: [
            ("fighting style", "Adopt a particular style of fighting."),
            ("spellcasting", "Cast ranger spells using Wisdom."),
        ],
        3: [("primeval awareness", "Expend a slot to sense nearby creature types.")],
        5: [("extra attack", "Attack twice when taking the Attack action.")],
    },
    ClassName.ROGUE: {
        1: [
            ("expertise", "Double proficiency for two chosen skills."),
            ("sneak attack", "Deal extra damage once per turn with advantage."),
            ("thieves' cant", "Know the secret mix of jargon used by thieves."),
        ],
        2: [("cunning action", "Dash, Disengage or Hide as a bonus action.")],
        5: [("uncanny dodge", "Halve the damage of an attack you can see.")],
        7: [("evasion", "Take no damage on successful DEX saves for half damage.")],
    },
    ClassName.SORCERER: {
        1: [("spellcasting", "Cast sorcerer spells using Charisma.")],
        2: [("font of magic", "Gain sorcery points to fuel metamagic and slots.")],
        3: [("metamagic", "Twist spells to suit your needs.")],
        20: [("sorcerous restoration", "Regain 4 sorcery points on a short rest.")],
    },
    ClassName.WARLOCK: {
        1: [("pact magic", "Cast warlock spells using Charisma with pact slots.")],
        2: [("eldritch invocations", "Learn fragments of forbidden knowledge.")],
        3: [("pact boon", "Receive a gift from your patron.")],
        11: [("mystic arcanum", "Cast one 6th-level spell once per long rest.")],
    },
    ClassName.WIZARD: {
        1: [
            ("spellcasting", "Cast wizard spells from your spellbook using Intelligence."),
            ("arcane recovery", "Recover spell slots on a short rest once per day."),
        ],
        18: [("spell mastery", "Cast a chosen 1st- and 2nd-level spell at will.")],
        20: [("signature spells", "Two 3rd-level spells are always prepared.")],
    },
}

# Subclass features: subclass -> class level -> [(name, description)]
SUBCLASS_FEATURES: dict[str, dict[int, list[tuple[str, str]]]] = {
    "path of the berserker": {3: [("frenzy", "Make a bonus melee attack each turn while raging.")]},
    "college of lore": {3: [("cutting words", "Use inspiration to reduce an enemy roll.")]},
    "life domain": {1: [("disciple of life", "Healing spells restore extra HP.")]},
    "circle of the land": {2: [("natural recovery", "Recover spell slots on a short rest.")]},
    "champion": {3: [("improved critical", "Weapon attacks score a critical hit on 19 or 20.")]},
    "eldritch knight": {
        3: [
            ("spellcasting", "Cast wizard spells using Intelligence."),
            ("weapon bond", "Bond with up to two weapons."),
        ],
    },
    "arcane trickster": {
        3: [
            ("spellcasting", "Cast wizard spells using Intelligence."),
            ("mage hand legerdemain", "Use an invisible mage hand for sleight of hand."),
        ],
    },
    "way of the open hand": {3: [("open hand technique", "Flurry of Blows can knock foes prone.")]},
    "oath of devotion": {3: [("sacred weapon", "Imbue a weapon with positive energy.")]},
    "hunter": {3: [("hunter's prey", "Choose a hunting technique.")]},
    "thief": {3: [("fast hands", "Use Cunning Action for sleight of hand and objects.")]},
    "draconic bloodline": {1: [("draconic resilience", "Extra HP and natural armor.")]},
    "the fiend": {1: [("dark one's blessing", "Gain temporary HP when you drop a foe to 0.")]},
    "school of evocation": {2: [("sculpt spells", "Protect allies from your evocation spells.")]},
}

# Species and lineage traits: name -> [(name, description, level)]
SPECIES_TRAITS: dict[str, list[tuple[str, str, int | None]]] = {
    "dwarf": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("dwarven resilience", "Advantage on saves against poison and resistance to poison damage.", None),
        ("stonecunning", "Double proficiency on History checks about stonework.", None),
    ],
    "elf": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("keen senses", "Proficiency in the Perception skill.", None),
        ("fey ancestry", "Advantage on saves against being charmed; magic cannot put you to sleep.", None),
        ("trance", "Meditate for 4 hours instead of sleeping.", None),
    ],
    "halfling": [
        ("lucky", "Reroll a natural 1 on an attack roll, ability check or saving throw.", None),
        ("brave", "Advantage on saves against being frightened.", None),
        ("halfling nimbleness", "Move through the space of larger creatures.", None),
    ],
    "human": [
        ("ability score increase", "Each ability score increases by 1.", None),
    ],
    "dragonborn": [
        ("draconic ancestry", "Choose a dragon type that sets breath and resistance.", None),
        ("breath weapon", "Exhale destructive energy.", None),
        ("damage resistance", "Resistance to the damage type of your ancestry.", None),
    ],
    "gnome": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("gnome cunning", "Advantage on INT, WIS and CHA saves against magic.", None),
    ],
    "half-elf": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("fey ancestry", "Advantage on saves against being charmed; magic cannot put you to sleep.", None),
        ("skill versatility", "Proficiency in two skills of your choice.", None),
    ],
    "half-orc": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("menacing", "Proficiency in the Intimidation skill.", None),
        ("relentless endurance", "Drop to 1 HP instead of 0 once per long rest.", None),
        ("savage attacks", "Roll one extra weapon damage die on a melee critical hit.", None),
    ],
    "tiefling": [
        ("darkvision", "See in dim light within 60 feet as if it were bright light.", None),
        ("hellish resistance", "Resistance to fire damage.", None),
        ("infernal legacy", "Know the thaumaturgy cantrip.", None),
        ("infernal legacy: hellish rebuke", "Cast hellish rebuke once per long rest.", 3),
        ("infernal legacy: darkness", "Cast darkness once per long rest.", 5),
    ],
}

LINEAGE_TRAITS: dict[str, list[tuple[str, str, int | None]]] = {
    "hill dwarf": [("dwarven toughness", "Hit point maximum increases by 1 per level.", None)],
    "mountain dwarf": [("dwarven armor training", "Proficiency with light and medium armor.", None)],
    "high elf": [("cantrip", "Know one cantrip from the wizard spell list.", None)],
    "wood elf": [
        ("fleet of foot", "Base walking speed increases to 35 feet.", None),
        ("mask of the wild", "Attempt to hide when lightly obscured by nature.", None),
    ],
    "lightfoot": [("naturally stealthy", "Hide behind creatures at least one size larger.", None)],
    "stout": [("stout resilience", "Advantage on saves against poison.", None)],
    "rock gnome": [
        ("artificer's lore", "Double proficiency on History checks about magic items.", None),
        ("tinker", "Construct tiny clockwork devices.", None),
    ],
}

BACKGROUND_TRAITS: dict[str, list[tuple[str, str, int | None]]] = {
    "acolyte": [("shelter of the faithful", "Receive free healing and care at temples of your faith.", None)],
    "charlatan": [("false identity", "Maintain a second identity with documentation.", None)],
    "criminal": [("criminal contact", "Have a reliable contact in a criminal network.", None)],
    "entertainer": [("by popular demand", "Find a place to perform in exchange for lodging.", None)],
    "folk hero": [("rustic hospitality", "Common folk will shelter you.", None)],
    "guild artisan": [("guild membership", "Your guild provides lodging and support.", None)],
    "hermit": [("discovery", "You discovered a unique and powerful truth.", None)],
    "noble": [("position of privilege", "You are welcome in high society.", None)],
    "outlander": [("wanderer", "Excellent memory for maps and geography.", None)],
    "sage": [("researcher", "Know where to obtain information you lack.", None)],
    "sailor": [("ship's passage", "Secure free passage on a sailing ship.", None)],
    "soldier": [("military rank", "Soldiers loyal to your former organization recognize your authority.", None)],
    "urchin": [("city secrets", "Travel between city locations twice as fast.", None)],
}


def class_traits(class_name: str, subclass: str | None, class_level: int) -> list[TraitGrant]:
    """Traits gained on reaching exactly ``class_level`` in a class."""
    grants: list[TraitGrant] = []
    try:
        features = CLASS_FEATURES[ClassName(class_name)]
    except ValueError:
        return grants
    for name, description in features.get(class_level, []):
        grants.append(
            TraitGrant(
                name=name,
                description=description,
                source=TraitSource.CLASS,
                source_detail=class_name,
                level=class_level,
            )
        )
    if subclass:
        for name, description in SUBCLASS_FEATURES.get(subclass, {}).get(class_level, []):
            grants.append(
                TraitGrant(
                    name=name,
                    description=description,
                    source=TraitSource.SUBCLASS,
                    source_detail=subclass,
                    level=class_level,
                )
            )
    return grants


def _grants_at(
    table: list[tuple[str, str, int | None]],
    source: TraitSource,
    source_detail: str,
    total_level: int,
) -> list[TraitGrant]:
    # Level-less traits arrive with the character's first level
    return [
        TraitGrant(
            name=name,
            description=description,
            source=source,
            source_detail=source_detail,
            level=level,
        )
        for name, description, level in table
        if level == total_level or (level is None and total_level == 1)
    ]


def origin_traits(
    species: str | None,
    lineage: str | None,
    background: str | None,
    total_level: int,
) -> list[TraitGrant]:
    """Species, lineage and background traits gained at a total level."""
    grants: list[TraitGrant] = []
    if species:
        grants.extend(
            _grants_at(SPECIES_TRAITS.get(species, []), TraitSource.SPECIES, species, total_level)
        )
    if lineage:
        grants.extend(
            _grants_at(LINEAGE_TRAITS.get(lineage, []), TraitSource.LINEAGE, lineage, total_level)
        )
    if background:
        grants.extend(
            _grants_at(
                BACKGROUND_TRAITS.get(background, []),
                TraitSource.BACKGROUND,
                background,
                total_level,
            )
        )
    return grants


__all__ = [
    "proficiency_bonus",
    "ability_modifier",
    "FULL_CASTER_SLOTS",
    "HALF_CASTER_SLOTS",
    "THIRD_CASTER_SLOTS",
    "PACT_MAGIC_SLOTS",
    "SLOT_TABLES",
    "CASTER_TIER_ORDER",
    "slots_at",
    "pact_slots_at",
    "max_slot_level",
    "SpellcastingDefinition",
    "ClassDefinition",
    "CLASS_DEFINITIONS",
    "get_class",
    "TraitGrant",
    "class_traits",
    "origin_traits",
]
