"""Wizard spellbook: learning and forgetting leveled spells."""

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
    OptionalStr,
)
from dnd_ledger.models.enums import ClassName, LearnAction, PrepareAction
from dnd_ledger.models.records import LedgerRecord, SpellLearnedRecord, SpellPreparedRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.models.spells import get_spell
from dnd_ledger.storage.ledger import Ledger


class LearnSpellInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("spell_id",)

    spell_id: OptionalStr = Field(default=None, description="The ID of the spell to copy into the spellbook")
    allow_high_level: Checkbox = Field(
        default=False,
        description="Allow a spell above the highest level the wizard can currently prepare",
    )


class ForgetSpellInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("spell_id",)

    spell_id: OptionalStr = Field(default=None, description="The ID of the spell to remove from the spellbook")


def learn_spell(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Add a wizard spell to the spellbook."""
    form = ActionForm(LearnSpellInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    wizard = snapshot.spell_info(ClassName.WIZARD)
    if wizard is None:
        form.error("spell_id", "Only wizards keep a spellbook")
        return form.incomplete()

    if form.require("spell_id", "Select a spell to learn"):
        spell = get_spell(values.spell_id)
        known = wizard.known_spells or ()
        if spell is None:
            form.error("spell_id", f"Spell with ID {values.spell_id} not found")
        elif spell.is_cantrip:
            form.error("spell_id", f"{spell.name} is a cantrip; cantrips are not kept in a spellbook")
        elif ClassName.WIZARD not in spell.classes:
            form.error("spell_id", f"{spell.name} is not a wizard spell")
        elif spell.id in known:
            form.error("spell_id", f"{spell.name} is already in your spellbook")
        elif spell.level > wizard.max_spell_level and not values.allow_high_level:
            form.error(
                "spell_id",
                f"{spell.name} is level {spell.level}, higher than your max "
                f"{wizard.max_spell_level}; check allow high level to add it anyway",
            )
        elif spell.level <= wizard.max_spell_level and values.allow_high_level:
            form.error(
                "allow_high_level",
                f"{spell.name} is not above your max spell level; uncheck allow high level",
            )

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    spell = get_spell(final.spell_id)
    if spell is None:
        form.error("spell_id", f"Spell with ID {final.spell_id} not found")
        return form.incomplete()
    with ledger.transaction():
        ledger.append(
            SpellLearnedRecord(
                character_id=snapshot.id,
                spell_id=spell.id,
                action=LearnAction.LEARN,
                note=final.note,
            )
        )

    return ActionComplete(result={"note": f"Added {spell.name} to your spellbook", "spell_id": spell.id})


def forget_spell(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Remove a spell from the spellbook, unpreparing it if needed."""
    form = ActionForm(ForgetSpellInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    wizard = snapshot.spell_info(ClassName.WIZARD)
    if wizard is None:
        form.error("spell_id", "Only wizards keep a spellbook")
        return form.incomplete()

    if form.require("spell_id", "Select a spell to forget"):
        if values.spell_id not in (wizard.known_spells or ()):
            spell = get_spell(values.spell_id)
            label = spell.name if spell else values.spell_id
            form.error("spell_id", f"{label} is not in your spellbook")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    spell_id = cast(str, final.spell_id)
    records: list[LedgerRecord] = [
        SpellLearnedRecord(
            character_id=snapshot.id,
            spell_id=spell_id,
            action=LearnAction.FORGET,
            note=final.note,
        )
    ]
    prepared = next((s for s in wizard.prepared_spells if s.spell_id == spell_id), None)
    if prepared is not None and not prepared.always_prepared:
        records.append(
            SpellPreparedRecord(
                character_id=snapshot.id,
                class_name=ClassName.WIZARD,
                spell_id=spell_id,
                action=PrepareAction.UNPREPARE,
                note="Removed from spellbook",
            )
        )

    with ledger.transaction():
        for record in records:
            ledger.append(record)

    return ActionComplete(
        result={"spell_id": final.spell_id, "unprepared": len(records) > 1}
    )


__all__ = ["LearnSpellInput", "ForgetSpellInput", "learn_spell", "forget_spell"]
