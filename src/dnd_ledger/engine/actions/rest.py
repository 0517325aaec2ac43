"""Short and long rests.

Short rest:
- each spent hit die needs a caller-supplied roll in ``[1, die]``; the
  character regains ``max(1, roll + CON)`` HP, capped at max HP
- a wizard may use Arcane Recovery to regain slots whose combined level is
  at most ``ceil(wizard level / 2)``, no slot above 5th level
- every used pact magic slot comes back

Long rest:
- HP back to max
- regain ``max(1, total hit dice // 2)`` spent hit dice, largest first
- every used spell slot comes back, regular and pact
"""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from dnd_ledger.core.constants import ARCANE_RECOVERY_MAX_SLOT, GENERAL_ERROR_KEY
from dnd_ledger.core.exceptions import StructuralError
from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    Checkbox,
    HitDieValue,
    OptionalInt,
    errors_from_validation,
    split_list,
)
from dnd_ledger.models.enums import Ability, ClassName, PoolAction
from dnd_ledger.models.records import (
    HitDieRecord,
    HitPointRecord,
    LedgerRecord,
    SpellSlotRecord,
)
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


_DICE_KEY = re.compile(r"^dice\.(\d+)\.(die|roll)$")

ArcaneSlotLevel = Annotated[int, Field(ge=1, le=ARCANE_RECOVERY_MAX_SLOT)]


class ShortRestInput(ActionInput):
    """Short rest options.

    Hit dice are passed as flat ``dice.<n>.die`` / ``dice.<n>.roll`` pairs;
    entries without a roll are ignored.
    """

    arcane_recovery: Checkbox = Field(
        default=False,
        description=(
            "Use Arcane Recovery (wizards only): recover slots with combined levels up to "
            "half the wizard level, rounded up, none above 5th level"
        ),
    )
    arcane_slots: Annotated[list[ArcaneSlotLevel], BeforeValidator(split_list)] = Field(
        default_factory=list,
        description="Comma-separated spell slot levels (1-5) to restore via Arcane Recovery",
    )


class LongRestInput(ActionInput):
    pass


class HitDieSpend(BaseModel):
    """One entry of the short rest dice list."""

    die: HitDieValue = None
    roll: OptionalInt = None


def parse_dice(data: Mapping[str, Any]) -> list[tuple[int, HitDieSpend]]:
    """Collect the ``dice.<n>.*`` entries from flat input, ordered by index.

    Raises:
        StructuralError: When an entry's die or roll is malformed.
    """
    grouped: dict[int, dict[str, Any]] = {}
    for key, value in data.items():
        match = _DICE_KEY.match(key)
        if match:
            grouped.setdefault(int(match.group(1)), {})[match.group(2)] = value

    entries: list[tuple[int, HitDieSpend]] = []
    errors: dict[str, str] = {}
    for index in sorted(grouped):
        try:
            entries.append((index, HitDieSpend.model_validate(grouped[index])))
        except ValidationError as exc:
            for field_name, message in errors_from_validation(exc).items():
                errors[f"dice.{index}.{field_name}"] = message
    if errors:
        raise StructuralError("Invalid hit dice input", errors=errors)
    return entries


def _restore_all_slots(snapshot: CharacterSnapshot, *, pact: bool, note: str) -> list[SpellSlotRecord]:
    used = snapshot.used_slot_counts(pact=pact)
    return [
        SpellSlotRecord(
            character_id=snapshot.id,
            slot_level=level,
            action=PoolAction.RESTORE,
            pact=pact,
            note=note,
        )
        for level in sorted(used.elements())
    ]


# =============================================================================
# Short Rest
# =============================================================================


def short_rest(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Spend hit dice, optionally use Arcane Recovery, and regain pact slots."""
    form = ActionForm(ShortRestInput, data)
    try:
        dice = parse_dice(form.data)
    except StructuralError as exc:
        form.errors.update(exc.errors)
        dice = []

    values = form.values
    if values is None or form.errors:
        return form.incomplete()

    con_modifier = snapshot.modifier(Ability.CON)
    remaining = list(snapshot.available_hit_dice)
    spent: list[tuple[int, int]] = []
    for index, entry in dice:
        if entry.roll is None or entry.die is None:
            continue
        if entry.die not in remaining:
            form.error(f"dice.{index}.die", f"You don't have a d{entry.die} hit die available")
            continue
        remaining.remove(entry.die)
        if not 1 <= entry.roll <= entry.die:
            form.error(f"dice.{index}.roll", f"Roll must be between 1 and {entry.die}")
            continue
        spent.append((entry.die, entry.roll))

    arcane_slots: list[int] = []
    if values.arcane_recovery:
        wizard = snapshot.class_level(ClassName.WIZARD)
        if wizard is None:
            form.error("arcane_recovery", "Only Wizards can use Arcane Recovery")
        else:
            arcane_slots = list(values.arcane_slots)
            limit = min(ARCANE_RECOVERY_MAX_SLOT, math.ceil(wizard.level / 2))
            total = sum(arcane_slots)
            if total > limit:
                form.error("arcane_slots", f"Total slot levels ({total}) exceeds maximum ({limit})")
            used = snapshot.used_slot_counts()
            for level, count in sorted(Counter(arcane_slots).items()):
                if used[level] < count:
                    form.error(
                        "arcane_slots",
                        f"You only have {used[level]} used level {level} spell slot(s), "
                        f"but trying to restore {count}",
                    )
                    break

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    headroom = snapshot.max_hp - snapshot.current_hp
    hp_restored = 0
    records: list[LedgerRecord] = []
    rolls: list[dict[str, int]] = []
    for die, roll in spent:
        gained = max(1, roll + con_modifier)
        hp_restored += min(gained, headroom - hp_restored)
        rolls.append({"die": die, "roll": roll, "modifier": con_modifier})
        records.append(
            HitDieRecord(
                character_id=snapshot.id,
                die_value=die,
                action=PoolAction.USE,
                note=f"Short rest: rolled {roll} on d{die}",
            )
        )

    note = final.note or "Short rest"
    if hp_restored > 0:
        records.append(HitPointRecord(character_id=snapshot.id, delta=hp_restored, note=note))
    for level in sorted(arcane_slots):
        records.append(
            SpellSlotRecord(
                character_id=snapshot.id,
                slot_level=level,
                action=PoolAction.RESTORE,
                note="Arcane Recovery",
            )
        )
    pact_records = _restore_all_slots(snapshot, pact=True, note=note)
    records.extend(pact_records)

    with ledger.transaction():
        for record in records:
            ledger.append(record)

    return ActionComplete(
        result={
            "hp_restored": hp_restored,
            "hit_dice_spent": len(spent),
            "dice_rolls": rolls,
            "spell_slots_restored": len(arcane_slots),
            "arcane_recovery_used": bool(arcane_slots),
            "pact_slots_restored": len(pact_records),
        }
    )


# =============================================================================
# Long Rest
# =============================================================================


def long_rest(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Restore HP, half the hit dice and every spell slot."""
    form = ActionForm(LongRestInput, data)
    if form.values is None:
        return form.incomplete()

    if snapshot.total_level == 0:
        form.error(GENERAL_ERROR_KEY, f"{snapshot.name} has no class levels yet")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    note = final.note or "Long rest"
    records: list[LedgerRecord] = []

    hp_restored = snapshot.max_hp - snapshot.current_hp
    if hp_restored > 0:
        records.append(HitPointRecord(character_id=snapshot.id, delta=hp_restored, note=note))

    allowance = max(1, len(snapshot.hit_dice) // 2)
    dice_restored = snapshot.used_hit_dice()[:allowance]
    records.extend(
        HitDieRecord(character_id=snapshot.id, die_value=die, action=PoolAction.RESTORE, note=note)
        for die in dice_restored
    )

    slot_records = _restore_all_slots(snapshot, pact=False, note=note)
    slot_records += _restore_all_slots(snapshot, pact=True, note=note)
    records.extend(slot_records)

    with ledger.transaction():
        for record in records:
            ledger.append(record)

    return ActionComplete(
        result={
            "hp_restored": hp_restored,
            "hit_dice_restored": dice_restored,
            "spell_slots_restored": len(slot_records),
        }
    )


__all__ = [
    "ShortRestInput",
    "LongRestInput",
    "HitDieSpend",
    "parse_dice",
    "short_rest",
    "long_rest",
]
