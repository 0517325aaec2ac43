"""Spell preparation.

Each casting class has its own cantrip slots and leveled-spell slots. A
spell goes into a free slot, or replaces a spell the caller names in
``current_spell_id``; a replacement writes an unprepare and a prepare
record in one transaction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, cast

from pydantic import BeforeValidator, Field

from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    OptionalStr,
    blank_to_none,
)
from dnd_ledger.models.enums import ClassName, PrepareAction
from dnd_ledger.models.records import SpellPreparedRecord
from dnd_ledger.models.rules import CLASS_DEFINITIONS
from dnd_ledger.models.snapshot import CharacterSnapshot, SpellInfoForClass
from dnd_ledger.models.spells import get_spell
from dnd_ledger.storage.ledger import Ledger


OptionalClass = Annotated[ClassName | None, BeforeValidator(blank_to_none)]


class PrepareSpellInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("class_name", "spell_type", "spell_id")

    class_name: OptionalClass = Field(default=None, description="Class to prepare the spell for")
    spell_type: Annotated[
        Literal["cantrip", "spell"] | None, BeforeValidator(blank_to_none)
    ] = Field(default=None, description="'cantrip' for a cantrip slot, 'spell' for a leveled slot")
    spell_id: OptionalStr = Field(default=None, description="The ID of the spell to prepare")
    current_spell_id: OptionalStr = Field(
        default=None, description="ID of a prepared spell to replace, when no slot is free"
    )


class UnprepareSpellInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("class_name", "spell_id")

    class_name: OptionalClass = Field(default=None, description="Class the spell is prepared for")
    spell_id: OptionalStr = Field(default=None, description="The ID of the spell to unprepare")


def _kind_label(cantrip: bool) -> str:
    return "cantrip" if cantrip else "spell"


def _casting_info(
    form: ActionForm[Any], snapshot: CharacterSnapshot, class_name: ClassName
) -> SpellInfoForClass | None:
    info = snapshot.spell_info(class_name)
    if info is None:
        if snapshot.class_level(class_name) is None:
            form.error("class_name", f"{snapshot.name} does not have class {class_name}")
        else:
            form.error("class_name", f"{snapshot.name} cannot cast spells as a {class_name}")
    return info


def prepare_spell(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Prepare a spell into a class slot, optionally replacing another."""
    form = ActionForm(PrepareSpellInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    info: SpellInfoForClass | None = None
    if form.require("class_name", "A class is required") and values.class_name is not None:
        info = _casting_info(form, snapshot, values.class_name)

    form.require("spell_type", "Choose whether this is a cantrip or a spell")
    cantrip = values.spell_type == "cantrip"

    if form.require("spell_id", "Select a spell to prepare") and info and values.spell_type:
        spell = get_spell(values.spell_id)
        spell_list = CLASS_DEFINITIONS[info.class_name].spell_list
        if spell is None:
            form.error("spell_id", f"Spell with ID {values.spell_id} not found")
        elif spell_list not in spell.classes:
            form.error("spell_id", f"Cannot prepare {spell.name} as a {info.class_name}")
        elif cantrip and not spell.is_cantrip:
            form.error("spell_id", f"{spell.name} is not a cantrip")
        elif not cantrip and spell.is_cantrip:
            form.error("spell_id", f"{spell.name} is a cantrip, not a leveled spell")
        elif not cantrip and spell.level > info.max_spell_level:
            form.error(
                "spell_id",
                f"{spell.name} is level {spell.level}, higher than character max "
                f"{info.max_spell_level}",
            )
        elif not cantrip and info.known_spells is not None and spell.id not in info.known_spells:
            form.error("spell_id", f"{spell.name} is not in your spellbook")
        elif values.current_spell_id == spell.id:
            form.error("spell_id", f"{spell.name} is already prepared in this slot")
        else:
            for other in snapshot.spells:
                if spell.id in other.prepared_ids(cantrip):
                    form.error(
                        "spell_id",
                        f"{spell.name} is already prepared as a {other.class_name} "
                        f"{_kind_label(cantrip)}",
                    )
                    break

    if info and values.spell_type:
        if values.current_spell_id:
            slot = next(
                (s for s in info.slots_for(cantrip) if s.spell_id == values.current_spell_id),
                None,
            )
            current = get_spell(values.current_spell_id)
            label = current.name if current else values.current_spell_id
            if current is None:
                form.error(
                    "current_spell_id", f"Current spell with ID {values.current_spell_id} not found"
                )
            elif slot is None:
                form.error(
                    "current_spell_id",
                    f"{label} is not prepared as a {info.class_name} {_kind_label(cantrip)}",
                )
            elif slot.always_prepared:
                form.error("current_spell_id", f"{label} is always prepared and cannot be replaced")
        elif info.free_slots(cantrip) == 0 and not form.is_check:
            form.error(
                "current_spell_id",
                f"No free {info.class_name} {_kind_label(cantrip)} slots; choose a spell to replace",
            )

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    class_name = cast(ClassName, final.class_name)
    spell = get_spell(cast(str, final.spell_id))
    if spell is None:
        form.error("spell_id", f"Spell with ID {final.spell_id} not found")
        return form.incomplete()

    records = []
    if final.current_spell_id:
        records.append(
            SpellPreparedRecord(
                character_id=snapshot.id,
                class_name=class_name,
                spell_id=final.current_spell_id,
                action=PrepareAction.UNPREPARE,
                note=f"Replaced with {spell.name}",
            )
        )
    records.append(
        SpellPreparedRecord(
            character_id=snapshot.id,
            class_name=class_name,
            spell_id=spell.id,
            action=PrepareAction.PREPARE,
            note=final.note,
        )
    )

    with ledger.transaction():
        for record in records:
            ledger.append(record)

    return ActionComplete(
        result={
            "note": f"Prepared {spell.name} as a {class_name} {_kind_label(spell.is_cantrip)}",
            "spell_id": spell.id,
            "replaced_spell_id": final.current_spell_id,
        }
    )


def unprepare_spell(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Remove a prepared spell from a class slot."""
    form = ActionForm(UnprepareSpellInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    info: SpellInfoForClass | None = None
    if form.require("class_name", "A class is required") and values.class_name is not None:
        info = _casting_info(form, snapshot, values.class_name)

    if form.require("spell_id", "Select a spell to unprepare") and info:
        spell = get_spell(values.spell_id)
        label = spell.name if spell else values.spell_id
        slot = next(
            (
                s
                for s in info.cantrip_slots + info.prepared_spells
                if s.spell_id == values.spell_id
            ),
            None,
        )
        if slot is None:
            form.error("spell_id", f"{label} is not prepared as a {info.class_name}")
        elif slot.always_prepared:
            form.error("spell_id", f"{label} is always prepared and cannot be unprepared")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    with ledger.transaction():
        ledger.append(
            SpellPreparedRecord(
                character_id=snapshot.id,
                class_name=cast(ClassName, final.class_name),
                spell_id=cast(str, final.spell_id),
                action=PrepareAction.UNPREPARE,
                note=final.note,
            )
        )

    return ActionComplete(result={"spell_id": final.spell_id})


__all__ = [
    "PrepareSpellInput",
    "UnprepareSpellInput",
    "prepare_spell",
    "unprepare_spell",
]
