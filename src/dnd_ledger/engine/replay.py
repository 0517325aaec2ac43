"""Consumable pool replay.

Hit dice and spell slots share one algorithm: start from the capacity pool,
then walk the use/restore events in creation order. A ``use`` on an
exhausted category and a ``restore`` on a full category are dropped
silently, so the available pool is always a sub-multiset of the capacity.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from dnd_ledger.models.enums import PoolAction


Pool = dict[int, int]


def replay_pool(
    capacity: Mapping[int, int],
    events: Iterable[tuple[int, PoolAction]],
) -> Pool:
    """Compute the currently available pool.

    Args:
        capacity: Category -> count (die size or spell level).
        events: ``(category, action)`` pairs, oldest first.

    Returns:
        Category -> available count, with every capacity category present.
    """
    available: Pool = dict(capacity)

    for category, action in events:
        current = available.get(category, 0)
        if action == PoolAction.USE:
            if current > 0:
                available[category] = current - 1
        elif current < capacity.get(category, 0):
            available[category] = current + 1

    return available


def flatten_pool(pool: Mapping[int, int]) -> list[int]:
    """Expand a pool into a sorted list, e.g. ``{1: 2, 2: 1}`` -> ``[1, 1, 2]``."""
    flat: list[int] = []
    for category in sorted(pool):
        flat.extend([category] * max(pool[category], 0))
    return flat


def pool_from_list(items: Iterable[int]) -> Pool:
    """Collapse a list of categories back into a pool."""
    pool: Pool = {}
    for category in items:
        pool[category] = pool.get(category, 0) + 1
    return pool


def used_pool(capacity: Mapping[int, int], available: Mapping[int, int]) -> Pool:
    """Spent units per category (capacity minus available, never negative)."""
    used: Pool = {}
    for category, count in capacity.items():
        spent = count - available.get(category, 0)
        if spent > 0:
            used[category] = spent
    return used


__all__ = [
    "Pool",
    "replay_pool",
    "flatten_pool",
    "pool_from_list",
    "used_pool",
]
