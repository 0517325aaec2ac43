"""Rules constants shared across the ledger engine.

These values come straight from the SRD 5.1 and never change at runtime.
"""

from __future__ import annotations

# =============================================================================
# Character Limits
# =============================================================================

MAX_CLASS_LEVEL = 20
"""Highest level a character can hold in a single class."""

MIN_ABILITY_SCORE = 1
"""Lowest ability score a record may carry."""

MAX_ABILITY_SCORE = 30
"""Highest ability score a record may carry."""

HIT_DIE_SIZES: tuple[int, ...] = (6, 8, 10, 12)
"""Die sizes a class can use for hit dice."""

# =============================================================================
# Spellcasting
# =============================================================================

MIN_SPELL_LEVEL = 1
"""Lowest slot level (cantrips never use slots)."""

MAX_SPELL_LEVEL = 9
"""Highest slot level."""

ARCANE_RECOVERY_MAX_SLOT = 5
"""Arcane Recovery cannot restore slots above this level."""

# =============================================================================
# Currency
# =============================================================================

COIN_VALUES: dict[str, int] = {
    "pp": 1000,
    "gp": 100,
    "ep": 50,
    "sp": 10,
    "cp": 1,
}
"""Value of each coin denomination in copper pieces."""

COIN_NAMES: dict[str, str] = {
    "pp": "platinum",
    "gp": "gold",
    "ep": "electrum",
    "sp": "silver",
    "cp": "copper",
}
"""Display names used in approval summaries."""

# =============================================================================
# Input Sentinels
# =============================================================================

CHECK_FLAG = "is_check"
"""Raw input field that selects check-mode (soft) validation."""

GENERAL_ERROR_KEY = "general"
"""Error key for failures that do not belong to one field."""
