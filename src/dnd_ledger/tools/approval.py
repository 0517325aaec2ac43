"""One-line approval summaries for agent tool calls.

Before an agent's tool call is committed the player sees a short sentence
describing it, e.g. "Cast Magic Missile using level 2 slot".
"""

from __future__ import annotations

from typing import Any

from dnd_ledger.core.constants import COIN_NAMES, COIN_VALUES
from dnd_ledger.models.spells import get_spell


def _note_suffix(parameters: dict[str, Any]) -> str:
    note = parameters.get("note")
    return f" with note '{note}'" if note else ""


def _spell_name(spell_id: Any) -> str:
    spell = get_spell(spell_id)
    return spell.name if spell else str(spell_id)


def _as_int(value: Any) -> int:
    if value in (None, ""):
        return 0
    return int(value)


def format_cast_spell(parameters: dict[str, Any]) -> str:
    summary = f"Cast {_spell_name(parameters.get('spell_id'))}"
    if parameters.get("as_ritual") in (True, "true", "on"):
        summary += " as a ritual"
    elif parameters.get("slot_level"):
        summary += f" using level {parameters['slot_level']} slot"
    return summary + _note_suffix(parameters)


def format_prepare_spell(parameters: dict[str, Any]) -> str:
    summary = f"Prepare {_spell_name(parameters.get('spell_id'))} as a {parameters.get('class_name')}"
    if parameters.get("current_spell_id"):
        summary += f", replacing {_spell_name(parameters['current_spell_id'])}"
    return summary + _note_suffix(parameters)


def format_unprepare_spell(parameters: dict[str, Any]) -> str:
    return f"Unprepare {_spell_name(parameters.get('spell_id'))}" + _note_suffix(parameters)


def format_learn_spell(parameters: dict[str, Any]) -> str:
    return (
        f"Add {_spell_name(parameters.get('spell_id'))} to the spellbook"
        + _note_suffix(parameters)
    )


def format_forget_spell(parameters: dict[str, Any]) -> str:
    return (
        f"Remove {_spell_name(parameters.get('spell_id'))} from the spellbook"
        + _note_suffix(parameters)
    )


def format_hit_dice(parameters: dict[str, Any]) -> str:
    verb = "Use" if parameters.get("action") == "use" else "Restore"
    return f"{verb} a d{parameters.get('die_value')} hit die" + _note_suffix(parameters)


def format_spell_slots(parameters: dict[str, Any]) -> str:
    verb = "Use" if parameters.get("action") == "use" else "Restore"
    pool = "pact slot" if parameters.get("pact") in (True, "true", "on") else "spell slot"
    return f"{verb} a level {parameters.get('slot_level')} {pool}" + _note_suffix(parameters)


def format_hit_points(parameters: dict[str, Any]) -> str:
    verb = "Restore" if parameters.get("action") == "restore" else "Lose"
    return f"{verb} {parameters.get('amount')} HP" + _note_suffix(parameters)


def format_short_rest(parameters: dict[str, Any]) -> str:
    summary = "Take a short rest"
    dice = [entry for entry in parameters.get("dice") or [] if entry.get("roll")]
    if dice:
        rolls = ", ".join(f"d{entry.get('die')}={entry.get('roll')}" for entry in dice)
        summary += f" spending hit dice ({rolls})"
    if parameters.get("arcane_recovery") in (True, "true", "on"):
        summary += " with Arcane Recovery"
    return summary + _note_suffix(parameters)


def format_long_rest(parameters: dict[str, Any]) -> str:
    return "Take a long rest" + _note_suffix(parameters)


def format_add_level(parameters: dict[str, Any]) -> str:
    summary = f"Add level in {parameters.get('class_name')}"
    if parameters.get("subclass"):
        summary += f" ({parameters['subclass']})"
    summary += f", rolled {parameters.get('hit_die_roll')} HP"
    return summary + _note_suffix(parameters)


def format_add_trait(parameters: dict[str, Any]) -> str:
    return f"Add trait {parameters.get('name')}" + _note_suffix(parameters)


def format_update_ability(parameters: dict[str, Any]) -> str:
    ability = parameters.get("ability")
    changes = []
    if parameters.get("score") not in (None, ""):
        changes.append(f"set {ability} to {parameters['score']}")
    if parameters.get("saving_throw") == "add":
        changes.append(f"add {ability} saving throw proficiency")
    elif parameters.get("saving_throw") == "remove":
        changes.append(f"remove {ability} saving throw proficiency")
    summary = ", ".join(changes) or f"update {ability}"
    return summary[0].upper() + summary[1:] + _note_suffix(parameters)


def format_update_skill(parameters: dict[str, Any]) -> str:
    return (
        f"Set {parameters.get('skill')} to {parameters.get('proficiency')}"
        + _note_suffix(parameters)
    )


def format_update_coins(parameters: dict[str, Any]) -> str:
    """Summarize coin deltas; the note goes on its own line."""
    gains: list[str] = []
    spends: list[str] = []
    for coin in COIN_VALUES:
        amount = _as_int(parameters.get(coin))
        if amount > 0:
            gains.append(f"{amount} {COIN_NAMES[coin]}")
        elif amount < 0:
            spends.append(f"{-amount} {COIN_NAMES[coin]}")

    parts = []
    if gains:
        parts.append("Gain " + ", ".join(gains))
    if spends:
        parts.append(("spend " if gains else "Spend ") + ", ".join(spends))
    summary = "; ".join(parts) or "No coin change"
    if parameters.get("note"):
        summary += f"\n{parameters['note']}"
    return summary


def format_acquire_item(parameters: dict[str, Any]) -> str:
    summary = f"Acquire {parameters.get('name')}"
    category = parameters.get("category")
    if category and category != "gear":
        summary += f" ({category})"
    return summary + _note_suffix(parameters)


def format_drop_item(parameters: dict[str, Any]) -> str:
    return f"Drop {parameters.get('item_id')}" + _note_suffix(parameters)


def format_equip_item(parameters: dict[str, Any]) -> str:
    states = [
        label
        for label in ("worn", "wielded")
        if parameters.get(label) in (True, "true", "on")
    ]
    item = parameters.get("item_id")
    if not states:
        return f"Unequip {item}" + _note_suffix(parameters)
    return f"Set {item} as {' and '.join(states)}" + _note_suffix(parameters)


def format_manage_charge(parameters: dict[str, Any]) -> str:
    amount = parameters.get("amount")
    item = parameters.get("item_id")
    if parameters.get("action") == "use":
        return f"Use {amount} charges from {item}" + _note_suffix(parameters)
    return f"Add {amount} charges to {item}" + _note_suffix(parameters)


FORMATTERS = {
    "cast_spell": format_cast_spell,
    "prepare_spell": format_prepare_spell,
    "unprepare_spell": format_unprepare_spell,
    "learn_spell": format_learn_spell,
    "forget_spell": format_forget_spell,
    "update_hit_dice": format_hit_dice,
    "update_spell_slots": format_spell_slots,
    "update_hit_points": format_hit_points,
    "short_rest": format_short_rest,
    "long_rest": format_long_rest,
    "add_level": format_add_level,
    "add_trait": format_add_trait,
    "update_ability": format_update_ability,
    "update_skill": format_update_skill,
    "update_coins": format_update_coins,
    "acquire_item": format_acquire_item,
    "drop_item": format_drop_item,
    "equip_item": format_equip_item,
    "manage_charge": format_manage_charge,
}


__all__ = [
    "FORMATTERS",
    "format_cast_spell",
    "format_prepare_spell",
    "format_unprepare_spell",
    "format_learn_spell",
    "format_forget_spell",
    "format_hit_dice",
    "format_spell_slots",
    "format_hit_points",
    "format_short_rest",
    "format_long_rest",
    "format_add_level",
    "format_add_trait",
    "format_update_ability",
    "format_update_skill",
    "format_update_coins",
    "format_acquire_item",
    "format_drop_item",
    "format_equip_item",
    "format_manage_charge",
]
