"""Integration tests for the character lifecycle.

Every change goes through ``perform_action`` against a real SQLite ledger,
the same path a form submission or an agent tool call takes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from dnd_ledger.engine.forms import ActionComplete, ActionIncomplete, ActionResult
from dnd_ledger.engine.service import perform_action
from dnd_ledger.models.enums import ClassName
from dnd_ledger.models.records import CharacterRecord, CoinRecord, SpellSlotRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import SQLiteLedger

SnapshotFactory = Callable[[], CharacterSnapshot]
Act = Callable[..., ActionResult]


@pytest.fixture
def act(ledger: SQLiteLedger, character: CharacterRecord) -> Act:
    """Run a named action for the test character.

    Returns:
        ``act(action_name, **data)`` returning the action result.
    """

    def run(action_name: str, **data: Any) -> ActionResult:
        return perform_action(ledger, character.id, action_name, data)

    return run


@pytest.fixture
def commit(act: Act) -> Act:
    """Run a named action and assert it committed.

    Returns:
        ``commit(action_name, **data)`` returning the completed result.
    """

    def run(action_name: str, **data: Any) -> ActionResult:
        result = act(action_name, **data)
        assert isinstance(result, ActionComplete), result.errors
        return result

    return run


@pytest.fixture
def wizard_cleric(commit: Act) -> None:
    """Build a wizard 3 / cleric 2 one level at a time."""
    commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
    commit(
        "add_level",
        class_name="wizard",
        level="2",
        subclass="school of evocation",
        hit_die_roll="4",
    )
    commit("add_level", class_name="wizard", level="3", hit_die_roll="4")
    commit("add_level", class_name="cleric", level="1", subclass="life domain", hit_die_roll="8")
    commit("add_level", class_name="cleric", level="2", hit_die_roll="5")


class TestNewWizard:
    """A first-level wizard built entirely through actions."""

    def test_level_one_wizard(self, commit: Act, snapshot_of: SnapshotFactory) -> None:
        commit("update_ability", ability="intelligence", score="16", saving_throw="add")
        commit("update_ability", ability="constitution", score="14")
        result = commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
        assert "arcane recovery" in [name.lower() for name in result.result["traits_granted"]]

        snapshot = snapshot_of()
        assert snapshot.total_level == 1
        assert snapshot.spell_slots == (1, 1)
        assert snapshot.hit_dice == (6,)
        assert snapshot.max_hp == 8
        assert snapshot.current_hp == 8

        info = snapshot.spell_info(ClassName.WIZARD)
        assert info is not None
        assert len(info.cantrip_slots) == 3
        assert info.spell_save_dc == 13
        assert info.known_spells == ()

    def test_learn_prepare_and_cast(self, commit: Act, snapshot_of: SnapshotFactory) -> None:
        commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
        commit("learn_spell", spell_id="magic-missile")
        commit("prepare_spell", class_name="wizard", spell_type="spell", spell_id="magic-missile")
        commit("cast_spell", spell_id="magic-missile", slot_level="1")
        commit("cast_spell", spell_id="magic-missile", slot_level="1")

        snapshot = snapshot_of()
        assert snapshot.available_spell_slots == ()
        assert snapshot.spell_slots == (1, 1)

    def test_out_of_slots(self, act: Act, commit: Act) -> None:
        commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
        commit("learn_spell", spell_id="magic-missile")
        commit("prepare_spell", class_name="wizard", spell_type="spell", spell_id="magic-missile")
        commit("update_spell_slots", action="use", slot_level="1")
        commit("update_spell_slots", action="use", slot_level="1")

        result = act("cast_spell", spell_id="magic-missile", slot_level="1")
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {"slot_level": "No level 1 spell slots available"}


class TestMulticlass:
    """A wizard 3 / cleric 2."""

    def test_derived_values(self, wizard_cleric: None, snapshot_of: SnapshotFactory) -> None:
        snapshot = snapshot_of()
        assert snapshot.total_level == 5
        assert snapshot.proficiency_bonus == 3
        assert snapshot.spell_slots == (1, 1, 1, 1, 2, 2, 2, 3, 3)
        assert sorted(snapshot.hit_dice, reverse=True) == [8, 8, 6, 6, 6]
        assert snapshot.max_hp == 27

        wizard = snapshot.class_level(ClassName.WIZARD)
        assert wizard is not None
        assert wizard.subclass == "school of evocation"

    def test_upcast(
        self, wizard_cleric: None, commit: Act, snapshot_of: SnapshotFactory
    ) -> None:
        commit("learn_spell", spell_id="magic-missile")
        commit("prepare_spell", class_name="wizard", spell_type="spell", spell_id="magic-missile")
        before = snapshot_of().slot_counts(available=True)

        commit("cast_spell", spell_id="magic-missile", slot_level="2")

        after = snapshot_of().slot_counts(available=True)
        assert after[2] == before[2] - 1
        assert after[1] == before[1]
        assert after[3] == before[3]

    def test_prepare_across_classes(
        self, wizard_cleric: None, act: Act, commit: Act, snapshot_of: SnapshotFactory
    ) -> None:
        commit("learn_spell", spell_id="detect-magic")
        commit("prepare_spell", class_name="wizard", spell_type="spell", spell_id="detect-magic")

        result = act(
            "prepare_spell", class_name="cleric", spell_type="spell", spell_id="detect-magic"
        )
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {
            "spell_id": "Detect Magic is already prepared as a wizard spell"
        }

        cleric = snapshot_of().spell_info(ClassName.CLERIC)
        assert cleric is not None
        assert "detect-magic" not in cleric.prepared_ids(False)


class TestLongRest:
    """Long rest on a fighter 2 / wizard 2."""

    @pytest.fixture
    def worn_out(self, commit: Act) -> None:
        commit("add_level", class_name="fighter", level="1", hit_die_roll="10")
        commit("add_level", class_name="fighter", level="2", hit_die_roll="6")
        commit("add_level", class_name="wizard", level="1", hit_die_roll="4")
        commit(
            "add_level",
            class_name="wizard",
            level="2",
            subclass="school of evocation",
            hit_die_roll="4",
        )
        for die in ("10", "10", "6"):
            commit("update_hit_dice", action="use", die_value=die)
        commit("update_hit_points", action="lose", amount="5")
        commit("update_spell_slots", action="use", slot_level="1")

    def test_restores_half_the_hit_dice(
        self, worn_out: None, commit: Act, snapshot_of: SnapshotFactory
    ) -> None:
        before = snapshot_of()
        assert len(before.hit_dice) == 4
        assert before.used_hit_dice() == [10, 10, 6]

        result = commit("long_rest")
        assert result.result["hit_dice_restored"] == [10, 10]
        assert result.result["hp_restored"] == 5

        after = snapshot_of()
        assert after.used_hit_dice() == [6]
        assert after.current_hp == after.max_hp
        assert after.available_spell_slots == after.spell_slots

    def test_second_rest_restores_the_rest(
        self, worn_out: None, commit: Act, snapshot_of: SnapshotFactory
    ) -> None:
        commit("long_rest")
        commit("long_rest")
        assert snapshot_of().used_hit_dice() == []


class TestCheckMode:
    """Check mode reports the same rule errors and writes nothing."""

    def test_check_then_commit(
        self, ledger: SQLiteLedger, character: CharacterRecord, act: Act, commit: Act
    ) -> None:
        commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
        commit("learn_spell", spell_id="magic-missile")
        commit("prepare_spell", class_name="wizard", spell_type="spell", spell_id="magic-missile")

        checked = act("cast_spell", spell_id="magic-missile", slot_level="1", is_check="true")
        assert isinstance(checked, ActionIncomplete)
        assert checked.errors == {}
        assert ledger.list_records(SpellSlotRecord, character.id) == []

        commit("cast_spell", spell_id="magic-missile", slot_level="1")
        assert len(ledger.list_records(SpellSlotRecord, character.id)) == 1

    def test_same_errors_in_both_modes(self, act: Act, commit: Act) -> None:
        commit("add_level", class_name="wizard", level="1", hit_die_roll="6")
        commit("learn_spell", spell_id="sleep")

        checked = act("cast_spell", spell_id="sleep", slot_level="1", is_check="true")
        committed = act("cast_spell", spell_id="sleep", slot_level="1")
        assert checked.errors == committed.errors == {"spell_id": "Sleep is not prepared!"}


class TestCoins:
    """Coin changes with change making."""

    def test_spend_breaks_larger_coins(
        self,
        ledger: SQLiteLedger,
        character: CharacterRecord,
        commit: Act,
        snapshot_of: SnapshotFactory,
    ) -> None:
        commit("update_coins", gp="10")
        result = commit("update_coins", sp="-5", note="rations")
        assert result.result["change_made"] is True

        coins = snapshot_of().coins
        assert (coins.gp, coins.sp) == (9, 5)
        assert coins.total_copper == 950
        assert ledger.latest(CoinRecord, character.id) is not None

    def test_insufficient_funds(self, act: Act, commit: Act, snapshot_of: SnapshotFactory) -> None:
        commit("update_coins", sp="3")
        result = act("update_coins", gp="-1")
        assert result.errors == {
            "general": "Insufficient funds: need 100cp but only have 30cp total"
        }
        assert snapshot_of().coins.sp == 3
