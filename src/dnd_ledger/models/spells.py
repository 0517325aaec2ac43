"""SRD spell catalog.

A read-only subset of the SRD 5.1 spell list, cantrips through 5th level,
with enough coverage that every casting class has cantrips, rituals and
leveled spells to prepare.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dnd_ledger.models.enums import ClassName


class Spell(BaseModel):
    """A spell definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    level: int = Field(ge=0, le=9)
    school: str
    ritual: bool = False
    classes: tuple[ClassName, ...]

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0


_BD = ClassName.BARD
_CL = ClassName.CLERIC
_DR = ClassName.DRUID
_PA = ClassName.PALADIN
_RA = ClassName.RANGER
_SO = ClassName.SORCERER
_WA = ClassName.WARLOCK
_WI = ClassName.WIZARD


def _spell(
    spell_id: str,
    name: str,
    level: int,
    school: str,
    classes: tuple[ClassName, ...],
    *,
    ritual: bool = False,
) -> Spell:
    return Spell(id=spell_id, name=name, level=level, school=school, ritual=ritual, classes=classes)


SPELLS: tuple[Spell, ...] = (
    # Cantrips
    _spell("eldritch-blast", "Eldritch Blast", 0, "evocation", (_WA,)),
    _spell("fire-bolt", "Fire Bolt", 0, "evocation", (_SO, _WI)),
    _spell("ray-of-frost", "Ray of Frost", 0, "evocation", (_SO, _WI)),
    _spell("shocking-grasp", "Shocking Grasp", 0, "evocation", (_SO, _WI)),
    _spell("light", "Light", 0, "evocation", (_BD, _CL, _SO, _WI)),
    _spell("mage-hand", "Mage Hand", 0, "conjuration", (_BD, _SO, _WA, _WI)),
    _spell("minor-illusion", "Minor Illusion", 0, "illusion", (_BD, _SO, _WA, _WI)),
    _spell("prestidigitation", "Prestidigitation", 0, "transmutation", (_BD, _SO, _WA, _WI)),
    _spell("sacred-flame", "Sacred Flame", 0, "evocation", (_CL,)),
    _spell("guidance", "Guidance", 0, "divination", (_CL, _DR)),
    _spell("thaumaturgy", "Thaumaturgy", 0, "transmutation", (_CL,)),
    _spell("vicious-mockery", "Vicious Mockery", 0, "enchantment", (_BD,)),
    _spell("druidcraft", "Druidcraft", 0, "transmutation", (_DR,)),
    _spell("produce-flame", "Produce Flame", 0, "conjuration", (_DR,)),
    # 1st level
    _spell("magic-missile", "Magic Missile", 1, "evocation", (_SO, _WI)),
    _spell("shield", "Shield", 1, "abjuration", (_SO, _WI)),
    _spell("burning-hands", "Burning Hands", 1, "evocation", (_SO, _WI)),
    _spell("sleep", "Sleep", 1, "enchantment", (_BD, _SO, _WI)),
    _spell("charm-person", "Charm Person", 1, "enchantment", (_BD, _DR, _SO, _WA, _WI)),
    _spell("thunderwave", "Thunderwave", 1, "evocation", (_BD, _DR, _SO, _WI)),
    _spell("detect-magic", "Detect Magic", 1, "divination",
           (_BD, _CL, _DR, _PA, _RA, _SO, _WI), ritual=True),
    _spell("find-familiar", "Find Familiar", 1, "conjuration", (_WI,), ritual=True),
    _spell("identify", "Identify", 1, "divination", (_BD, _WI), ritual=True),
    _spell("comprehend-languages", "Comprehend Languages", 1, "divination",
           (_BD, _SO, _WA, _WI), ritual=True),
    _spell("alarm", "Alarm", 1, "abjuration", (_RA, _WI), ritual=True),
    _spell("cure-wounds", "Cure Wounds", 1, "evocation", (_BD, _CL, _DR, _PA, _RA)),
    _spell("healing-word", "Healing Word", 1, "evocation", (_BD, _CL, _DR)),
    _spell("bless", "Bless", 1, "enchantment", (_CL, _PA)),
    _spell("guiding-bolt", "Guiding Bolt", 1, "evocation", (_CL,)),
    _spell("shield-of-faith", "Shield of Faith", 1, "abjuration", (_CL, _PA)),
    _spell("hunters-mark", "Hunter's Mark", 1, "divination", (_RA,)),
    _spell("hex", "Hex", 1, "enchantment", (_WA,)),
    # 2nd level
    _spell("misty-step", "Misty Step", 2, "conjuration", (_SO, _WA, _WI)),
    _spell("scorching-ray", "Scorching Ray", 2, "evocation", (_SO, _WI)),
    _spell("hold-person", "Hold Person", 2, "enchantment", (_BD, _CL, _DR, _SO, _WA, _WI)),
    _spell("invisibility", "Invisibility", 2, "illusion", (_BD, _SO, _WA, _WI)),
    _spell("spiritual-weapon", "Spiritual Weapon", 2, "evocation", (_CL,)),
    _spell("lesser-restoration", "Lesser Restoration", 2, "abjuration", (_BD, _CL, _DR, _PA, _RA)),
    _spell("web", "Web", 2, "conjuration", (_SO, _WI)),
    _spell("augury", "Augury", 2, "divination", (_CL,), ritual=True),
    # 3rd level
    _spell("fireball", "Fireball", 3, "evocation", (_SO, _WI)),
    _spell("lightning-bolt", "Lightning Bolt", 3, "evocation", (_SO, _WI)),
    _spell("counterspell", "Counterspell", 3, "abjuration", (_SO, _WA, _WI)),
    _spell("dispel-magic", "Dispel Magic", 3, "abjuration", (_BD, _CL, _DR, _PA, _SO, _WA, _WI)),
    _spell("revivify", "Revivify", 3, "necromancy", (_CL, _PA)),
    _spell("spirit-guardians", "Spirit Guardians", 3, "conjuration", (_CL,)),
    _spell("fly", "Fly", 3, "transmutation", (_SO, _WA, _WI)),
    _spell("tiny-hut", "Tiny Hut", 3, "evocation", (_BD, _WI), ritual=True),
    _spell("water-breathing", "Water Breathing", 3, "transmutation",
           (_DR, _RA, _SO, _WI), ritual=True),
    # 4th level
    _spell("polymorph", "Polymorph", 4, "transmutation", (_BD, _DR, _SO, _WI)),
    _spell("greater-invisibility", "Greater Invisibility", 4, "illusion", (_BD, _SO, _WI)),
    _spell("dimension-door", "Dimension Door", 4, "conjuration", (_BD, _SO, _WA, _WI)),
    _spell("banishment", "Banishment", 4, "abjuration", (_CL, _PA, _SO, _WA, _WI)),
    # 5th level
    _spell("cone-of-cold", "Cone of Cold", 5, "evocation", (_SO, _WI)),
    _spell("raise-dead", "Raise Dead", 5, "necromancy", (_BD, _CL, _PA)),
    _spell("wall-of-force", "Wall of Force", 5, "evocation", (_WI,)),
    _spell("telepathic-bond", "Telepathic Bond", 5, "divination", (_WI,), ritual=True),
)

SPELLS_BY_ID: dict[str, Spell] = {spell.id: spell for spell in SPELLS}


def get_spell(spell_id: str | None) -> Spell | None:
    """Look up a spell by id."""
    if not spell_id:
        return None
    return SPELLS_BY_ID.get(spell_id)


def spells_for_class(class_name: ClassName, *, level: int | None = None) -> list[Spell]:
    """List catalog spells on a class list, optionally of one level."""
    return [
        spell
        for spell in SPELLS
        if class_name in spell.classes and (level is None or spell.level == level)
    ]


__all__ = ["Spell", "SPELLS", "SPELLS_BY_ID", "get_spell", "spells_for_class"]
