"""Mutation validators, one per player action.

Every action has the signature ``(ledger, snapshot, data) -> ActionResult``
and follows the two-phase protocol in :mod:`dnd_ledger.engine.forms`.

Example:
    >>> from dnd_ledger.engine.actions import get_action
    >>> action = get_action("long_rest")
    >>> result = action.function(ledger, snapshot, {"is_check": "true"})
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dnd_ledger.engine.actions.attributes import (
    UpdateAbilityInput,
    UpdateSkillInput,
    update_ability,
    update_skill,
)
from dnd_ledger.engine.actions.casting import CastSpellInput, cast_spell
from dnd_ledger.engine.actions.coins import UpdateCoinsInput, make_change, update_coins
from dnd_ledger.engine.actions.items import (
    AcquireItemInput,
    DropItemInput,
    EquipItemInput,
    ManageChargeInput,
    acquire_item,
    drop_item,
    equip_item,
    manage_charge,
)
from dnd_ledger.engine.actions.leveling import AddLevelInput, AddTraitInput, add_level, add_trait
from dnd_ledger.engine.actions.preparation import (
    PrepareSpellInput,
    UnprepareSpellInput,
    prepare_spell,
    unprepare_spell,
)
from dnd_ledger.engine.actions.resources import (
    HitDiceInput,
    HitPointsInput,
    SpellSlotsInput,
    update_hit_dice,
    update_hit_points,
    update_spell_slots,
)
from dnd_ledger.engine.actions.rest import LongRestInput, ShortRestInput, long_rest, short_rest
from dnd_ledger.engine.actions.spellbook import (
    ForgetSpellInput,
    LearnSpellInput,
    forget_spell,
    learn_spell,
)
from dnd_ledger.engine.forms import ActionInput, ActionResult
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


ActionFunction = Callable[[Ledger, CharacterSnapshot, Mapping[str, Any]], ActionResult]


@dataclass(frozen=True)
class ActionDefinition:
    """A registered action.

    Attributes:
        name: Action name used by callers and tools.
        description: What the action does.
        schema: Input schema for the flat form data.
        function: The validator.
    """

    name: str
    description: str
    schema: type[ActionInput]
    function: ActionFunction


ACTIONS: dict[str, ActionDefinition] = {
    action.name: action
    for action in (
        ActionDefinition(
            "cast_spell",
            "Cast a prepared spell, spending a spell slot unless it is a cantrip or ritual",
            CastSpellInput,
            cast_spell,
        ),
        ActionDefinition(
            "prepare_spell",
            "Prepare a spell or cantrip for a class, optionally replacing a prepared one",
            PrepareSpellInput,
            prepare_spell,
        ),
        ActionDefinition(
            "unprepare_spell",
            "Remove a prepared spell or cantrip from a class",
            UnprepareSpellInput,
            unprepare_spell,
        ),
        ActionDefinition(
            "learn_spell", "Copy a wizard spell into the spellbook", LearnSpellInput, learn_spell
        ),
        ActionDefinition(
            "forget_spell", "Remove a spell from the spellbook", ForgetSpellInput, forget_spell
        ),
        ActionDefinition(
            "update_hit_dice", "Spend or regain one hit die", HitDiceInput, update_hit_dice
        ),
        ActionDefinition(
            "update_spell_slots",
            "Spend or regain one spell slot of a given level",
            SpellSlotsInput,
            update_spell_slots,
        ),
        ActionDefinition(
            "update_hit_points",
            "Restore or lose hit points",
            HitPointsInput,
            update_hit_points,
        ),
        ActionDefinition(
            "short_rest",
            "Take a short rest: spend hit dice to heal, use Arcane Recovery, regain pact slots",
            ShortRestInput,
            short_rest,
        ),
        ActionDefinition(
            "long_rest",
            "Take a long rest: full HP, half the hit dice and every spell slot back",
            LongRestInput,
            long_rest,
        ),
        ActionDefinition(
            "add_level", "Gain a level in a class", AddLevelInput, add_level
        ),
        ActionDefinition(
            "add_trait", "Record a feat or other custom trait", AddTraitInput, add_trait
        ),
        ActionDefinition(
            "update_ability",
            "Change an ability score or its saving throw proficiency",
            UpdateAbilityInput,
            update_ability,
        ),
        ActionDefinition(
            "update_skill", "Change a skill's proficiency level", UpdateSkillInput, update_skill
        ),
        ActionDefinition(
            "update_coins",
            "Gain or spend coins, breaking larger coins when needed",
            UpdateCoinsInput,
            update_coins,
        ),
        ActionDefinition(
            "acquire_item",
            "Add a new item to the inventory",
            AcquireItemInput,
            acquire_item,
        ),
        ActionDefinition(
            "drop_item", "Remove a carried item from the inventory", DropItemInput, drop_item
        ),
        ActionDefinition(
            "equip_item", "Wear, wield or unequip a carried item", EquipItemInput, equip_item
        ),
        ActionDefinition(
            "manage_charge",
            "Use or regain charges on an item",
            ManageChargeInput,
            manage_charge,
        ),
    )
}


def get_action(name: str) -> ActionDefinition | None:
    """Get a registered action by name."""
    return ACTIONS.get(name)


__all__ = [
    "ActionFunction",
    "ActionDefinition",
    "ACTIONS",
    "get_action",
    # Casting
    "CastSpellInput",
    "cast_spell",
    # Preparation
    "PrepareSpellInput",
    "UnprepareSpellInput",
    "prepare_spell",
    "unprepare_spell",
    # Spellbook
    "LearnSpellInput",
    "ForgetSpellInput",
    "learn_spell",
    "forget_spell",
    # Resources
    "HitDiceInput",
    "SpellSlotsInput",
    "HitPointsInput",
    "update_hit_dice",
    "update_spell_slots",
    "update_hit_points",
    # Rests
    "ShortRestInput",
    "LongRestInput",
    "short_rest",
    "long_rest",
    # Leveling
    "AddLevelInput",
    "AddTraitInput",
    "add_level",
    "add_trait",
    # Attributes
    "UpdateAbilityInput",
    "UpdateSkillInput",
    "update_ability",
    "update_skill",
    # Coins
    "UpdateCoinsInput",
    "make_change",
    "update_coins",
    # Items
    "AcquireItemInput",
    "DropItemInput",
    "EquipItemInput",
    "ManageChargeInput",
    "acquire_item",
    "drop_item",
    "equip_item",
    "manage_charge",
]
