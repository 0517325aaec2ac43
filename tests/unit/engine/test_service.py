"""Tests for the action runner."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from dnd_ledger.core.exceptions import UnknownToolError
from dnd_ledger.engine.forms import ActionComplete, ActionIncomplete
from dnd_ledger.engine.service import CountingLedger, perform_action
from dnd_ledger.models.records import CharacterRecord, HitPointRecord, SpellSlotRecord
from dnd_ledger.storage.ledger import SQLiteLedger


class TestPerformAction:
    """Tests for perform_action."""

    def test_unknown_action(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        with pytest.raises(UnknownToolError, match="Unknown action: fly"):
            perform_action(ledger, wizard.id, "fly", {})

    def test_unknown_character(self, ledger: SQLiteLedger) -> None:
        result = perform_action(ledger, "c-nobody", "long_rest", {})
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {"character_id": "Character c-nobody not found"}

    def test_commit_writes_records(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        result = perform_action(
            ledger, wizard.id, "update_hit_points", {"action": "lose", "amount": "3"}
        )
        assert isinstance(result, ActionComplete)
        assert [r.delta for r in ledger.list_records(HitPointRecord, wizard.id)] == [-3]

    def test_check_writes_nothing(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        result = perform_action(
            ledger,
            wizard.id,
            "update_hit_points",
            {"action": "lose", "amount": "3", "is_check": "true"},
        )
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {}
        assert ledger.list_records(HitPointRecord, wizard.id) == []

    def test_rejection_writes_nothing(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        result = perform_action(ledger, wizard.id, "cast_spell", {"spell_id": "sleep"})
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {"spell_id": "Sleep is not prepared!"}
        assert ledger.list_records(SpellSlotRecord, wizard.id) == []

    def test_commit_logs_record_count(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        data = {
            "class_name": "wizard",
            "level": "2",
            "subclass": "school of evocation",
            "hit_die_roll": "4",
        }
        with capture_logs() as logs:
            result = perform_action(ledger, wizard.id, "add_level", data)

        assert isinstance(result, ActionComplete)
        committed = [entry for entry in logs if entry["event"] == "Action committed"]
        assert len(committed) == 1
        # One level record plus one trait record per granted trait
        assert committed[0]["records"] == 1 + len(result.result["traits_granted"])

    def test_check_logs_no_commit(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        with capture_logs() as logs:
            perform_action(ledger, wizard.id, "long_rest", {"is_check": "true"})
        assert not any(entry["event"] == "Action committed" for entry in logs)


class TestCountingLedger:
    """Tests for CountingLedger."""

    def test_counts_appends_only(self, ledger: SQLiteLedger, wizard: CharacterRecord) -> None:
        counting = CountingLedger(ledger)
        with counting.transaction():
            counting.append(HitPointRecord(character_id=wizard.id, delta=-2))
            counting.append(HitPointRecord(character_id=wizard.id, delta=1))
        assert counting.appended == 2
        assert [r.delta for r in counting.list_records(HitPointRecord, wizard.id)] == [-2, 1]
        assert counting.latest(HitPointRecord, wizard.id).delta == 1
        assert counting.get_character(wizard.id) == ledger.get_character(wizard.id)
        assert counting.appended == 2
