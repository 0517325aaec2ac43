"""Tests for inventory, equipment and item charge actions."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dnd_ledger.engine.actions.items import acquire_item, drop_item, equip_item, manage_charge
from dnd_ledger.engine.forms import ActionComplete, ActionIncomplete, ActionResult
from dnd_ledger.models.enums import ArmorType, ItemCategory
from dnd_ledger.models.records import CharacterRecord, ItemChargeRecord, ItemRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import SQLiteLedger

SnapshotFactory = Callable[[], CharacterSnapshot]
Run = Callable[..., ActionResult]


@pytest.fixture
def gear(ledger: SQLiteLedger, wizard: CharacterRecord) -> CharacterRecord:
    """Give the wizard leather armor, a wand, a ring and a rope.

    Returns:
        The wizard's CharacterRecord.
    """
    items = [
        ItemRecord(
            character_id=wizard.id,
            item_id="leather",
            name="Leather Armor",
            category=ItemCategory.ARMOR,
            armor_type=ArmorType.LIGHT,
            armor_class=11,
        ),
        ItemRecord(
            character_id=wizard.id,
            item_id="wand",
            name="Wand of Magic Missiles",
            category=ItemCategory.WAND,
            max_charges=7,
            charge_label="charges",
        ),
        ItemRecord(
            character_id=wizard.id,
            item_id="ring",
            name="Ring of Protection",
            category=ItemCategory.JEWELRY,
            armor_modifier=1,
        ),
        ItemRecord(character_id=wizard.id, item_id="rope", name="Hempen Rope"),
    ]
    for item in items:
        ledger.append(item)
    return wizard


class TestEquipItem:
    """Tests for equip_item."""

    def test_wear_armor_changes_ac(
        self, gear: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        assert snapshot_of().armor_class == 12
        result = run_action(equip_item, item_id="leather", worn="on")
        assert isinstance(result, ActionComplete)
        assert result.result == {"item_id": "leather", "worn": True, "wielded": False}
        assert snapshot_of().armor_class == 13

    def test_ring_bonus(
        self, gear: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        run_action(equip_item, item_id="ring", worn="on")
        assert snapshot_of().armor_class == 13

    def test_record_keeps_item_fields(
        self, ledger: SQLiteLedger, gear: CharacterRecord, run_action: Run
    ) -> None:
        run_action(equip_item, item_id="wand", wielded="on")
        latest = ledger.latest_by(ItemRecord, gear.id, "item_id")["wand"]
        assert latest.wielded
        assert latest.max_charges == 7
        assert latest.name == "Wand of Magic Missiles"

    def test_unequip(
        self, gear: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        run_action(equip_item, item_id="leather", worn="on")
        result = run_action(equip_item, item_id="leather")
        assert isinstance(result, ActionComplete)
        item = snapshot_of().item("leather")
        assert item is not None and not item.equipped

    def test_cannot_wear_wand(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(equip_item, item_id="wand", worn="true")
        assert result.errors == {"worn": "Wand of Magic Missiles is a wand and cannot be worn"}

    def test_already_in_state(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(equip_item, item_id="rope")
        assert result.errors == {"item_id": "Hempen Rope is already in that state"}

    def test_unknown_item(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(equip_item, item_id="lute", wielded="on")
        assert result.errors == {"item_id": "Elara is not carrying an item with ID lute"}


class TestManageCharge:
    """Tests for manage_charge."""

    def test_use_charges(
        self,
        ledger: SQLiteLedger,
        gear: CharacterRecord,
        run_action: Run,
        snapshot_of: SnapshotFactory,
    ) -> None:
        run_action(equip_item, item_id="wand", wielded="on")
        result = run_action(manage_charge, item_id="wand", action="use", amount="3")
        assert isinstance(result, ActionComplete)
        assert result.result == {
            "item_id": "wand",
            "delta": -3,
            "current_charges": 4,
            "note": "Wand of Magic Missiles: 4 charges remaining",
        }
        assert ledger.list_records(ItemChargeRecord, gear.id)[0].delta == -3

        item = snapshot_of().item("wand")
        assert item is not None
        assert item.current_charges == 4

    def test_must_be_equipped(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(manage_charge, item_id="wand", action="use", amount="1")
        assert result.errors == {
            "override": "Item must be equipped to use charges (check override to bypass)"
        }

        result = run_action(manage_charge, item_id="wand", action="use", amount="1", override="on")
        assert isinstance(result, ActionComplete)

    def test_not_enough_charges(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(
            manage_charge, item_id="wand", action="use", amount="8", override="on"
        )
        assert result.errors == {"amount": "Not enough charges (current: 7)"}

    def test_no_charges_left(
        self, ledger: SQLiteLedger, gear: CharacterRecord, run_action: Run
    ) -> None:
        ledger.append(ItemChargeRecord(character_id=gear.id, item_id="wand", delta=-7))
        result = run_action(manage_charge, item_id="wand", action="use", amount="1", override="on")
        assert result.errors["action"] == "Wand of Magic Missiles has no charges left"

    def test_add_charges(
        self, ledger: SQLiteLedger, gear: CharacterRecord, run_action: Run
    ) -> None:
        ledger.append(ItemChargeRecord(character_id=gear.id, item_id="wand", delta=-4))
        result = run_action(manage_charge, item_id="wand", action="add", amount="5")
        assert result.errors == {"amount": "Cannot add more than 4 charges (max 7)"}

        result = run_action(manage_charge, item_id="wand", action="add", amount="4")
        assert isinstance(result, ActionComplete)
        assert result.result["current_charges"] == 7

    def test_already_full(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(manage_charge, item_id="wand", action="add", amount="1")
        assert result.errors["action"] == "Wand of Magic Missiles is already fully charged"

    def test_item_without_charges(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(manage_charge, item_id="rope", action="use", amount="1")
        assert result.errors == {"item_id": "Hempen Rope does not have charges"}

    def test_check_mode(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(manage_charge, item_id="wand", is_check="true")
        assert result.errors == {}


class TestAcquireItem:
    """Tests for acquire_item."""

    def test_acquire_then_wear(
        self, wizard: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        result = run_action(
            acquire_item,
            item_id="chain",
            name="Chain Shirt",
            category="armor",
            armor_type="medium",
            armor_class="13",
            armor_dex_max="2",
        )
        assert isinstance(result, ActionComplete)
        assert result.result == {
            "item_id": "chain",
            "note": "Elara acquired Chain Shirt",
            "current_charges": None,
        }

        item = snapshot_of().item("chain")
        assert item is not None
        assert item.armor_type is ArmorType.MEDIUM
        assert not item.equipped

        run_action(equip_item, item_id="chain", worn="on")
        assert snapshot_of().armor_class == 15

    def test_starts_fully_charged(
        self, wizard: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        result = run_action(
            acquire_item,
            item_id="staff",
            name="Staff of Frost",
            category="staff",
            max_charges="10",
            charge_label="charges",
        )
        assert isinstance(result, ActionComplete)
        assert result.result["current_charges"] == 10

        item = snapshot_of().item("staff")
        assert item is not None
        assert item.current_charges == 10

    def test_defaults_to_gear(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, run_action: Run
    ) -> None:
        run_action(acquire_item, item_id="torch", name="Torch", category="", note="from the inn")
        record = ledger.latest_by(ItemRecord, wizard.id, "item_id")["torch"]
        assert record.category is ItemCategory.GEAR
        assert record.note == "from the inn"

    def test_shield_bonus(
        self, wizard: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        run_action(acquire_item, item_id="shield", name="Shield", category="shield", armor_modifier="2")
        run_action(equip_item, item_id="shield", wielded="on")
        assert snapshot_of().armor_class == 14

    def test_duplicate_id(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item, item_id="rope", name="Silk Rope")
        assert result.errors == {"item_id": "Elara already carries Hempen Rope with ID rope"}

    def test_armor_needs_type_and_class(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item, item_id="plate", name="Plate", category="armor")
        assert result.errors == {
            "armor_type": "Armor type is required",
            "armor_class": "Armor class is required",
        }

    def test_armor_fields_only_on_armor(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(
            acquire_item, item_id="cloak", name="Cloak", category="clothing", armor_class="12"
        )
        assert result.errors == {"armor_class": "Only armor has armor class"}

    def test_shield_needs_bonus(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item, item_id="shield", name="Shield", category="shield")
        assert result.errors == {"armor_modifier": "Shield AC bonus is required"}

    def test_charge_label_needs_max(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item, item_id="horn", name="Horn", charge_label="blasts")
        assert result.errors == {"charge_label": "A charge label needs max charges"}

    def test_missing_fields(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item)
        assert result.errors == {
            "item_id": "Item ID is required",
            "name": "Item name is required",
        }

    def test_unknown_category(self, wizard: CharacterRecord, run_action: Run) -> None:
        result = run_action(acquire_item, item_id="x", name="Thing", category="spaceship")
        assert isinstance(result, ActionIncomplete)
        assert "category" in result.errors

    def test_check_mode_writes_nothing(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, run_action: Run
    ) -> None:
        result = run_action(acquire_item, category="armor", is_check="true")
        assert isinstance(result, ActionIncomplete)
        assert result.errors == {}
        assert result.values["category"] == "armor"
        assert ledger.list_records(ItemRecord, wizard.id) == []


class TestDropItem:
    """Tests for drop_item."""

    def test_drop_removes_item(
        self,
        ledger: SQLiteLedger,
        gear: CharacterRecord,
        run_action: Run,
        snapshot_of: SnapshotFactory,
    ) -> None:
        run_action(equip_item, item_id="leather", worn="on")
        assert snapshot_of().armor_class == 13

        result = run_action(drop_item, item_id="leather")
        assert isinstance(result, ActionComplete)
        assert result.result == {"item_id": "leather", "note": "Dropped Leather Armor"}

        snapshot = snapshot_of()
        assert snapshot.item("leather") is None
        assert snapshot.armor_class == 12

        latest = ledger.latest_by(ItemRecord, gear.id, "item_id")["leather"]
        assert latest.dropped
        assert not latest.worn
        assert latest.armor_class == 11

    def test_charges_ignored_once_dropped(
        self, gear: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        run_action(drop_item, item_id="wand")
        result = run_action(manage_charge, item_id="wand", action="use", amount="1", override="on")
        assert result.errors == {"item_id": "Elara is not carrying an item with ID wand"}
        assert snapshot_of().item("wand") is None

    def test_drop_twice(self, gear: CharacterRecord, run_action: Run) -> None:
        assert isinstance(run_action(drop_item, item_id="rope"), ActionComplete)
        result = run_action(drop_item, item_id="rope")
        assert result.errors == {"item_id": "Elara is not carrying an item with ID rope"}

    def test_missing_item(self, gear: CharacterRecord, run_action: Run) -> None:
        result = run_action(drop_item)
        assert result.errors == {"item_id": "Select an item"}

    def test_reacquire_after_drop(
        self, gear: CharacterRecord, run_action: Run, snapshot_of: SnapshotFactory
    ) -> None:
        run_action(drop_item, item_id="rope")
        result = run_action(acquire_item, item_id="rope", name="Hempen Rope")
        assert isinstance(result, ActionComplete)
        assert snapshot_of().item("rope") is not None
