"""Multiclass spell slot capacity.

Regular slots:
- Class levels are summed per caster tier. Subclass-gated tiers (eldritch
  knight, arcane trickster) only count once that subclass is held.
- With a single tier present, that tier's table is read at the summed level.
- With several tiers, the effective caster level is
  ``full + half // 2 + third // 3``, read from the full caster table. The
  result never drops below what any present tier gives on its own table,
  so adding a class level never shrinks the pool.

Pact slots come from the warlock level alone and form a separate pool.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from dnd_ledger.engine.replay import Pool
from dnd_ledger.models.enums import CasterKind
from dnd_ledger.models.rules import (
    CASTER_TIER_ORDER,
    CLASS_DEFINITIONS,
    max_slot_level,
    pact_slots_at,
    slots_at,
)
from dnd_ledger.models.snapshot import ClassLevel


def class_caster_kind(entry: ClassLevel) -> CasterKind:
    """Caster tier one class entry contributes."""
    return CLASS_DEFINITIONS[entry.class_name].caster_kind(entry.subclass)


def caster_levels(classes: Iterable[ClassLevel]) -> dict[CasterKind, int]:
    """Sum class levels per caster tier, skipping non-casters."""
    totals: dict[CasterKind, int] = {}
    for entry in classes:
        kind = class_caster_kind(entry)
        if kind is CasterKind.NONE:
            continue
        totals[kind] = totals.get(kind, 0) + entry.level
    return totals


def effective_caster_level(levels: Mapping[CasterKind, int]) -> int:
    """Combined caster level used for multiclass slot lookups."""
    return (
        levels.get(CasterKind.FULL, 0)
        + levels.get(CasterKind.HALF, 0) // 2
        + levels.get(CasterKind.THIRD, 0) // 3
    )


def regular_slot_capacity(classes: Iterable[ClassLevel]) -> Pool:
    """Spell slot capacity shared by every non-pact casting class.

    Returns:
        Spell level -> slot count; empty for non-casters and pure warlocks.
    """
    levels = caster_levels(classes)
    present = [kind for kind in CASTER_TIER_ORDER if levels.get(kind, 0) > 0]
    if not present:
        return {}
    if len(present) == 1:
        return slots_at(present[0], levels[present[0]])
    candidates = [slots_at(CasterKind.FULL, effective_caster_level(levels))]
    candidates += [slots_at(kind, levels[kind]) for kind in present]
    return max(candidates, key=lambda pool: sum(pool.values()))


def pact_slot_capacity(classes: Iterable[ClassLevel]) -> Pool:
    """Pact magic slot capacity from the warlock level."""
    return pact_slots_at(caster_levels(classes).get(CasterKind.PACT, 0))


def max_spell_level(entry: ClassLevel) -> int:
    """Highest spell level a class can prepare at its own level (0 if none)."""
    kind = class_caster_kind(entry)
    if kind is CasterKind.NONE:
        return 0
    return max_slot_level(kind, entry.level)


__all__ = [
    "class_caster_kind",
    "caster_levels",
    "effective_caster_level",
    "regular_slot_capacity",
    "pact_slot_capacity",
    "max_spell_level",
]
