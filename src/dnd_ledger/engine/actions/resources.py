"""Single-unit resource changes: hit dice, spell slots and hit points."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, cast

from pydantic import BeforeValidator, Field

from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    Checkbox,
    HitDieValue,
    OptionalInt,
    blank_to_none,
)
from dnd_ledger.models.enums import PoolAction
from dnd_ledger.models.records import HitDieRecord, HitPointRecord, SpellSlotRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


OptionalPoolAction = Annotated[PoolAction | None, BeforeValidator(blank_to_none)]


# =============================================================================
# Hit Dice
# =============================================================================


class HitDiceInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("action", "die_value")

    action: OptionalPoolAction = Field(default=None, description="'use' to spend a die, 'restore' to regain one")
    die_value: HitDieValue = Field(default=None, description="Hit die size (6, 8, 10 or 12)")


def update_hit_dice(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Spend or regain one hit die."""
    form = ActionForm(HitDiceInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    used = snapshot.used_hit_dice()
    if form.require("action", "Action is required"):
        if values.action == PoolAction.USE and not snapshot.available_hit_dice:
            form.error("action", "No hit dice available to use")
        elif values.action == PoolAction.RESTORE and not used:
            form.error("action", "No hit dice to restore")

    if form.require("die_value", "Select a hit die") and not form.has_error("action"):
        die = values.die_value
        if values.action == PoolAction.USE and die not in snapshot.available_hit_dice:
            form.error("die_value", f"You don't have a d{die} hit die available")
        elif values.action == PoolAction.RESTORE and die not in used:
            form.error("die_value", f"No used d{die} hit dice to restore")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    action = cast(PoolAction, final.action)
    die_value = cast(int, final.die_value)
    with ledger.transaction():
        ledger.append(
            HitDieRecord(
                character_id=snapshot.id,
                die_value=die_value,
                action=action,
                note=final.note,
            )
        )

    return ActionComplete(result={"action": action.value, "die_value": die_value})


# =============================================================================
# Spell Slots
# =============================================================================


class SpellSlotsInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("action", "slot_level")

    action: OptionalPoolAction = Field(default=None, description="'use' to spend a slot, 'restore' to regain one")
    slot_level: OptionalInt = Field(default=None, ge=1, le=9, description="Spell slot level (1-9)")
    pact: Checkbox = Field(default=False, description="Use the warlock pact magic pool")


def update_spell_slots(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Spend or regain one spell slot of a level."""
    form = ActionForm(SpellSlotsInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    capacity = snapshot.slot_counts(pact=values.pact)
    available = snapshot.slot_counts(pact=values.pact, available=True)
    used = snapshot.used_slot_counts(pact=values.pact)

    preview: dict[str, Any] = {}
    action = values.action
    if action is None and form.is_check:
        # Suggest restoring when anything has been spent
        action = PoolAction.RESTORE if used else PoolAction.USE
        preview["action"] = action.value
    elif action is None:
        form.require("action", "Action is required")

    if action == PoolAction.USE and sum(available.values()) == 0:
        form.error("action", "No spell slots available to use")
    elif action == PoolAction.RESTORE and not used:
        form.error("action", "No spell slots to restore")

    level = values.slot_level
    if (
        form.require("slot_level", "Slot level is required")
        and level is not None
        and not form.has_error("action")
    ):
        if action == PoolAction.USE and available[level] <= 0:
            form.error("slot_level", f"No Level {level} slots available")
        elif action == PoolAction.RESTORE and available[level] >= capacity[level]:
            form.error("slot_level", f"All Level {level} slots are already available")

    if form.halted:
        return form.incomplete(**preview)

    final = form.finalize()
    if final is None:
        return form.incomplete()

    action = cast(PoolAction, final.action)
    slot_level = cast(int, final.slot_level)
    with ledger.transaction():
        ledger.append(
            SpellSlotRecord(
                character_id=snapshot.id,
                slot_level=slot_level,
                action=action,
                pact=final.pact,
                note=final.note,
            )
        )

    return ActionComplete(
        result={"action": action.value, "slot_level": slot_level, "pact": final.pact}
    )


# =============================================================================
# Hit Points
# =============================================================================


class HitPointsInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("action", "amount")

    action: Annotated[Literal["restore", "lose"] | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="'restore' to heal, 'lose' to take damage"
    )
    amount: OptionalInt = Field(default=None, ge=1, description="Hit points to restore or lose")


def update_hit_points(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Heal or damage the character, bounded by 0 and max HP."""
    form = ActionForm(HitPointsInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    headroom = snapshot.max_hp - snapshot.current_hp
    if form.require("action", "Action is required"):
        if values.action == "restore" and headroom == 0:
            form.error("action", "Already at full hit points")
        elif values.action == "lose" and snapshot.current_hp == 0:
            form.error("action", "Already at 0 hit points")

    amount = values.amount
    if (
        form.require("amount", "Amount is required")
        and amount is not None
        and not form.has_error("action")
    ):
        if values.action == "restore" and amount > headroom:
            form.error("amount", f"Cannot restore more than {headroom} HP (max {snapshot.max_hp})")
        elif values.action == "lose" and amount > snapshot.current_hp:
            form.error("amount", f"Cannot lose more than {snapshot.current_hp} HP")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    delta = cast(int, final.amount)
    if final.action == "lose":
        delta = -delta
    with ledger.transaction():
        ledger.append(HitPointRecord(character_id=snapshot.id, delta=delta, note=final.note))

    return ActionComplete(result={"delta": delta, "current_hp": snapshot.current_hp + delta})


__all__ = [
    "HitDiceInput",
    "SpellSlotsInput",
    "HitPointsInput",
    "update_hit_dice",
    "update_spell_slots",
    "update_hit_points",
]
