"""Spell casting.

A spell can be cast when it is prepared in any class, or when a wizard casts
a ritual spell from the spellbook as a ritual. Cantrips and ritual casts
never take a slot; every other cast consumes exactly one slot of the chosen
level, which may be higher than the spell's own level.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, cast

from pydantic import Field

from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    Checkbox,
    OptionalInt,
    OptionalStr,
)
from dnd_ledger.models.enums import ClassName, PoolAction
from dnd_ledger.models.records import SpellSlotRecord
from dnd_ledger.models.snapshot import CharacterSnapshot, SpellInfoForClass
from dnd_ledger.models.spells import Spell, get_spell
from dnd_ledger.storage.ledger import Ledger


class CastSpellInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("spell_id",)

    spell_id: OptionalStr = Field(
        default=None, description="The ID of the spell to cast (e.g. 'fire-bolt', 'magic-missile')"
    )
    as_ritual: Checkbox = Field(
        default=False,
        description="Cast as a ritual (ritual spells only); no spell slot is used",
    )
    slot_level: OptionalInt = Field(
        default=None,
        ge=1,
        le=9,
        description=(
            "Level of the spell slot to use; required for non-cantrip, non-ritual spells. "
            "May be higher than the spell's level to upcast."
        ),
    )


def _casting_class(snapshot: CharacterSnapshot, spell: Spell) -> SpellInfoForClass | None:
    """The class the spell is cast through, for attack bonus and save DC."""
    for info in snapshot.spells:
        if info.is_prepared(spell.id):
            return info
    return snapshot.spell_info(ClassName.WIZARD)


def _slot_source(snapshot: CharacterSnapshot, slot_level: int) -> bool | None:
    """Pick the pool to spend from: False for regular, True for pact, None if empty."""
    if snapshot.slot_counts(available=True)[slot_level] > 0:
        return False
    if snapshot.slot_counts(pact=True, available=True)[slot_level] > 0:
        return True
    return None


def cast_spell(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Cast a spell, consuming a slot unless it is a cantrip or ritual cast."""
    form = ActionForm(CastSpellInput, data)
    values = form.values
    if values is None or not form.require("spell_id", "Select a spell to cast"):
        return form.incomplete()

    spell = get_spell(values.spell_id)
    if spell is None:
        form.error("spell_id", "Spell not found")
        return form.incomplete()

    wizard = snapshot.spell_info(ClassName.WIZARD)
    in_spellbook = bool(wizard and wizard.known_spells and spell.id in wizard.known_spells)
    prepared = any(info.is_prepared(spell.id) for info in snapshot.spells)

    if values.as_ritual and not spell.ritual:
        form.error("as_ritual", f"{spell.name} cannot be cast as a ritual")
        return form.incomplete()

    if not prepared:
        if values.as_ritual and not in_spellbook:
            form.error("spell_id", f"{spell.name} is not prepared and cannot be cast as a ritual")
            return form.incomplete()
        if not values.as_ritual:
            form.error("spell_id", f"{spell.name} is not prepared!")
            return form.incomplete()

    pact: bool | None = None
    uses_slot = not (spell.is_cantrip or values.as_ritual)
    if not uses_slot:
        if values.slot_level is not None:
            reason = "a cantrip" if spell.is_cantrip else "as a ritual"
            form.error("slot_level", f"Cannot use spell slots when casting {reason}")
    elif form.require("slot_level", "Spell slot level is required"):
        slot_level = cast(int, values.slot_level)
        if slot_level < spell.level:
            form.error(
                "slot_level", f"Cannot cast level {spell.level} spell using level {slot_level} slot"
            )
        else:
            pact = _slot_source(snapshot, slot_level)
            if pact is None:
                form.error("slot_level", f"No level {slot_level} spell slots available")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    info = _casting_class(snapshot, spell)
    result: dict[str, Any] = {
        "spell_id": spell.id,
        "spell_attack_bonus": info.spell_attack_bonus if info else None,
        "spell_save_dc": info.spell_save_dc if info else None,
    }

    if not uses_slot:
        ritual = " as a ritual" if final.as_ritual else ""
        result["note"] = f"You cast {spell.name}{ritual}. No spell slot was used."
        return ActionComplete(result=result)

    slot_level = cast(int, final.slot_level)
    if pact is None:
        form.error("slot_level", f"No level {slot_level} spell slots available")
        return form.incomplete()

    note = f"Cast {spell.name}"
    if slot_level > spell.level:
        note += f" (at level {slot_level})"
    if final.note:
        note += f". {final.note}"

    with ledger.transaction():
        ledger.append(
            SpellSlotRecord(
                character_id=snapshot.id,
                slot_level=slot_level,
                action=PoolAction.USE,
                pact=pact,
                note=note,
            )
        )

    result.update(
        note=f"You cast {spell.name} using a level {slot_level} spell slot.",
        slot_level=slot_level,
        pact=pact,
    )
    return ActionComplete(result=result)


__all__ = ["CastSpellInput", "cast_spell"]
