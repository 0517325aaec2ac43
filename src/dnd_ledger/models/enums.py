"""Enumeration types for the character ledger engine.

Values are the exact strings stored in ledger records and accepted in raw
action input, so they must never be renamed.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """The six ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the capitalized ability name.

        Returns:
            Full ability name (e.g., 'Strength' for STR).
        """
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation.

        Returns:
            Three-letter abbreviation (e.g., 'STR').
        """
        return self.name


class Skill(StrEnum):
    """The eighteen skills, keyed by their display name."""

    # Strength skills
    ATHLETICS = "athletics"

    # Dexterity skills
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight of hand"
    STEALTH = "stealth"

    # Intelligence skills
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"

    # Wisdom skills
    ANIMAL_HANDLING = "animal handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"

    # Charisma skills
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"

    @property
    def ability(self) -> Ability:
        """Get the ability that governs this skill."""
        return SKILL_ABILITIES[self]


SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STR,
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}


class ProficiencyLevel(StrEnum):
    """How strongly a character is trained in a skill."""

    NONE = "none"
    HALF = "half"
    PROFICIENT = "proficient"
    EXPERT = "expert"

    def bonus(self, proficiency_bonus: int) -> int:
        """Get the amount this level adds to a skill modifier.

        Args:
            proficiency_bonus: The character's proficiency bonus.

        Returns:
            0, half (rounded down), single, or double the bonus.
        """
        if self is ProficiencyLevel.HALF:
            return proficiency_bonus // 2
        if self is ProficiencyLevel.PROFICIENT:
            return proficiency_bonus
        if self is ProficiencyLevel.EXPERT:
            return proficiency_bonus * 2
        return 0


class CasterKind(StrEnum):
    """Spellcasting tier of a class."""

    NONE = "none"
    FULL = "full"
    HALF = "half"
    THIRD = "third"
    PACT = "pact"


class ClassName(StrEnum):
    """The twelve SRD classes."""

    BARBARIAN = "barbarian"
    BARD = "bard"
    CLERIC = "cleric"
    DRUID = "druid"
    FIGHTER = "fighter"
    MONK = "monk"
    PALADIN = "paladin"
    RANGER = "ranger"
    ROGUE = "rogue"
    SORCERER = "sorcerer"
    WARLOCK = "warlock"
    WIZARD = "wizard"


class PoolAction(StrEnum):
    """Event action for consumable pools (hit dice, spell slots)."""

    USE = "use"
    RESTORE = "restore"


class PrepareAction(StrEnum):
    """Event action for spell preparation records."""

    PREPARE = "prepare"
    UNPREPARE = "unprepare"


class LearnAction(StrEnum):
    """Event action for spellbook records."""

    LEARN = "learn"
    FORGET = "forget"


class TraitSource(StrEnum):
    """Where a trait came from."""

    SPECIES = "species"
    LINEAGE = "lineage"
    BACKGROUND = "background"
    CLASS = "class"
    SUBCLASS = "subclass"
    FEAT = "feat"


class ItemCategory(StrEnum):
    """Inventory item categories."""

    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    CLOTHING = "clothing"
    JEWELRY = "jewelry"
    WAND = "wand"
    STAFF = "staff"
    AMMUNITION = "ammunition"
    GEAR = "gear"

    @property
    def wearable(self) -> bool:
        """Check if items of this category are worn rather than wielded."""
        return self in (
            ItemCategory.ARMOR,
            ItemCategory.CLOTHING,
            ItemCategory.JEWELRY,
        )


class ArmorType(StrEnum):
    """Armor weight classes."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


__all__ = [
    "Ability",
    "Skill",
    "SKILL_ABILITIES",
    "ProficiencyLevel",
    "CasterKind",
    "ClassName",
    "PoolAction",
    "PrepareAction",
    "LearnAction",
    "TraitSource",
    "ItemCategory",
    "ArmorType",
]
