"""Tests for snapshot value objects."""

from __future__ import annotations

from collections import Counter

from dnd_ledger.models.enums import ClassName, ItemCategory
from dnd_ledger.models.snapshot import (
    CharacterSnapshot,
    CoinPurse,
    InventoryItem,
    PreparedSlot,
    SpellInfoForClass,
)


def _snapshot(**fields: object) -> CharacterSnapshot:
    return CharacterSnapshot(id="c", name="Test", abilities={}, skills={}, **fields)


class TestCharacterSnapshot:
    """Tests for pool helpers on CharacterSnapshot."""

    def test_slot_counts(self) -> None:
        snapshot = _snapshot(spell_slots=(1, 1, 2), available_spell_slots=(1, 2))
        assert snapshot.slot_counts() == Counter({1: 2, 2: 1})
        assert snapshot.slot_counts(available=True) == Counter({1: 1, 2: 1})
        assert snapshot.used_slot_counts() == Counter({1: 1})

    def test_pact_pool_is_separate(self) -> None:
        snapshot = _snapshot(pact_slots=(2, 2), available_pact_slots=(2,))
        assert snapshot.slot_counts() == Counter()
        assert snapshot.used_slot_counts(pact=True) == Counter({2: 1})

    def test_used_hit_dice_largest_first(self) -> None:
        snapshot = _snapshot(hit_dice=(10, 10, 6, 6), available_hit_dice=(10,))
        assert snapshot.used_hit_dice() == [10, 6, 6]

    def test_class_level_lookup(self) -> None:
        assert _snapshot().class_level(ClassName.WIZARD) is None


class TestSpellInfoForClass:
    """Tests for per-class spell slot helpers."""

    def test_slot_helpers(self) -> None:
        info = SpellInfoForClass(
            class_name=ClassName.WIZARD,
            caster_kind="full",
            ability="intelligence",
            max_spell_level=1,
            spell_attack_bonus=5,
            spell_save_dc=13,
            cantrip_slots=(PreparedSlot(spell_id="fire-bolt"), PreparedSlot()),
            prepared_spells=(PreparedSlot(spell_id="shield"),),
        )
        assert info.prepared_ids(True) == ["fire-bolt"]
        assert info.free_slots(True) == 1
        assert info.free_slots(False) == 0
        assert info.is_prepared("shield")
        assert not info.is_prepared("sleep")


class TestCoinsAndItems:
    """Tests for purse and inventory values."""

    def test_total_copper(self) -> None:
        purse = CoinPurse(pp=1, gp=2, ep=1, sp=3, cp=4)
        assert purse.total_copper == 1000 + 200 + 50 + 30 + 4

    def test_equipped(self) -> None:
        item = InventoryItem(item_id="wand", name="Wand", category=ItemCategory.WAND, wielded=True)
        assert item.equipped
        assert not InventoryItem(item_id="rope", name="Rope", category=ItemCategory.GEAR).equipped
