"""Character engine: snapshot derivation and action validation.

Submodules:
    replay: Consumable pool replay (hit dice, spell slots)
    slots: Spell slot capacity across multiclass casters
    snapshot: Ledger history to CharacterSnapshot fold
    forms: Two-phase action input protocol
    actions: One validator per player action
    service: Transactional action runner

Example:
    >>> from dnd_ledger.engine import perform_action
    >>> result = perform_action(ledger, "c-1", "cast_spell", {"spell_id": "magic-missile", "slot_level": "2"})
    >>> result.complete
    True
"""

from __future__ import annotations

# =============================================================================
# Derivation
# =============================================================================
from dnd_ledger.engine.replay import flatten_pool, pool_from_list, replay_pool, used_pool
from dnd_ledger.engine.slots import (
    caster_levels,
    effective_caster_level,
    max_spell_level,
    pact_slot_capacity,
    regular_slot_capacity,
)
from dnd_ledger.engine.snapshot import (
    CharacterHistory,
    build_snapshot,
    compute_snapshot,
    load_history,
)

# =============================================================================
# Actions
# =============================================================================
from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionIncomplete,
    ActionInput,
    ActionResult,
)
from dnd_ledger.engine.actions import ACTIONS, ActionDefinition, get_action
from dnd_ledger.engine.service import perform_action


__all__ = [
    # Derivation
    "replay_pool",
    "flatten_pool",
    "pool_from_list",
    "used_pool",
    "caster_levels",
    "effective_caster_level",
    "regular_slot_capacity",
    "pact_slot_capacity",
    "max_spell_level",
    "CharacterHistory",
    "load_history",
    "compute_snapshot",
    "build_snapshot",
    # Actions
    "ActionInput",
    "ActionForm",
    "ActionIncomplete",
    "ActionComplete",
    "ActionResult",
    "ActionDefinition",
    "ACTIONS",
    "get_action",
    "perform_action",
]
