"""Tests for the snapshot builder."""

from __future__ import annotations

from collections.abc import Callable

from dnd_ledger.engine.snapshot import armor_class, build_snapshot, replay_spellbook
from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    ClassName,
    ItemCategory,
    LearnAction,
    PoolAction,
    PrepareAction,
    ProficiencyLevel,
    Skill,
    TraitSource,
)
from dnd_ledger.models.records import (
    CharacterRecord,
    CoinRecord,
    HitDieRecord,
    HitPointRecord,
    ItemChargeRecord,
    ItemRecord,
    SkillRecord,
    SpellLearnedRecord,
    SpellPreparedRecord,
    SpellSlotRecord,
    TraitRecord,
)
from dnd_ledger.models.snapshot import CharacterSnapshot, InventoryItem
from dnd_ledger.storage.ledger import SQLiteLedger

SnapshotFactory = Callable[[], CharacterSnapshot]


class TestEmptyCharacter:
    """Tests for a character with no records."""

    def test_defaults(self, snapshot_of: SnapshotFactory) -> None:
        snapshot = snapshot_of()
        assert snapshot.name == "Elara"
        assert snapshot.total_level == 0
        assert snapshot.proficiency_bonus == 2
        assert snapshot.max_hp == 0
        assert snapshot.current_hp == 0
        assert snapshot.armor_class == 10
        assert snapshot.passive_perception == 10
        assert snapshot.spell_slots == ()
        assert snapshot.hit_dice == ()
        assert all(score.score == 10 for score in snapshot.abilities.values())

    def test_unknown_character(self, ledger: SQLiteLedger) -> None:
        assert build_snapshot(ledger, "nobody") is None


class TestLevelingAndAbilities:
    """Tests for class levels, abilities and skills."""

    def test_level_one_wizard(self, wizard: CharacterRecord, snapshot_of: SnapshotFactory) -> None:
        snapshot = snapshot_of()
        assert [(c.class_name, c.level) for c in snapshot.classes] == [(ClassName.WIZARD, 1)]
        assert snapshot.max_hp == 8
        assert snapshot.current_hp == 8
        assert snapshot.armor_class == 12
        assert snapshot.initiative == 2
        assert snapshot.hit_dice == (6,)
        assert snapshot.spell_slots == (1, 1)
        assert snapshot.available_spell_slots == (1, 1)

    def test_saving_throws(self, wizard: CharacterRecord, snapshot_of: SnapshotFactory) -> None:
        abilities = snapshot_of().abilities
        assert abilities[Ability.INT].modifier == 3
        assert abilities[Ability.INT].saving_throw == 5
        assert abilities[Ability.DEX].saving_throw == 2

    def test_latest_ability_wins(
        self,
        wizard: CharacterRecord,
        set_ability: Callable[..., None],
        snapshot_of: SnapshotFactory,
    ) -> None:
        set_ability(Ability.INT, 18, proficient=True)
        assert snapshot_of().abilities[Ability.INT].modifier == 4

    def test_skills(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(
            SkillRecord(
                character_id=wizard.id, skill=Skill.ARCANA, proficiency=ProficiencyLevel.EXPERT
            )
        )
        ledger.append(
            SkillRecord(
                character_id=wizard.id,
                skill=Skill.PERCEPTION,
                proficiency=ProficiencyLevel.PROFICIENT,
            )
        )
        snapshot = snapshot_of()
        assert snapshot.skills[Skill.ARCANA].modifier == 3 + 4
        assert snapshot.skills[Skill.PERCEPTION].modifier == 2
        assert snapshot.skills[Skill.STEALTH].modifier == 2
        assert snapshot.passive_perception == 12

    def test_multiclass(
        self, multiclass_caster: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        snapshot = snapshot_of()
        assert snapshot.total_level == 5
        assert snapshot.proficiency_bonus == 3
        assert snapshot.max_hp == 4 * 3 + 5 * 2 + 1 * 5
        assert snapshot.hit_dice == (8, 8, 6, 6, 6)
        assert snapshot.spell_slots == (1, 1, 1, 1, 2, 2, 2, 3, 3)

        wizard = snapshot.class_level(ClassName.WIZARD)
        assert wizard is not None
        assert wizard.subclass == "school of evocation"

    def test_multiclass_spell_info(
        self, multiclass_caster: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        snapshot = snapshot_of()
        wizard = snapshot.spell_info(ClassName.WIZARD)
        cleric = snapshot.spell_info(ClassName.CLERIC)
        assert wizard is not None and cleric is not None
        assert wizard.max_spell_level == 2
        assert cleric.max_spell_level == 1
        assert wizard.spell_save_dc == 8 + 3 + 3
        assert cleric.spell_attack_bonus == 3 + 2
        assert len(wizard.prepared_spells) == 3 + 3
        assert len(cleric.prepared_spells) == 2 + 2
        assert wizard.known_spells == ()
        assert cleric.known_spells is None


class TestHitPoints:
    """Tests for current hit points."""

    def test_damage_and_healing_clamped(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(HitPointRecord(character_id=wizard.id, delta=-5))
        assert snapshot_of().current_hp == 3

        ledger.append(HitPointRecord(character_id=wizard.id, delta=-20))
        assert snapshot_of().current_hp == 0

        ledger.append(HitPointRecord(character_id=wizard.id, delta=30))
        assert snapshot_of().current_hp == 8

    def test_negative_con_floors_at_zero(
        self,
        add_levels: Callable[..., None],
        set_ability: Callable[..., None],
        snapshot_of: SnapshotFactory,
    ) -> None:
        add_levels(ClassName.WIZARD, 1, roll=1)
        set_ability(Ability.CON, 3)
        snapshot = snapshot_of()
        assert snapshot.max_hp == 0
        assert snapshot.current_hp == 0


class TestPools:
    """Tests for hit dice and spell slot replay."""

    def test_hit_dice_usage(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(HitDieRecord(character_id=wizard.id, die_value=6, action=PoolAction.USE))
        ledger.append(HitDieRecord(character_id=wizard.id, die_value=6, action=PoolAction.USE))
        snapshot = snapshot_of()
        assert snapshot.hit_dice == (6,)
        assert snapshot.available_hit_dice == ()

    def test_slot_usage(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(SpellSlotRecord(character_id=wizard.id, slot_level=1, action=PoolAction.USE))
        assert snapshot_of().available_spell_slots == (1,)

    def test_pact_slots_separate(
        self,
        ledger: SQLiteLedger,
        character: CharacterRecord,
        add_levels: Callable[..., None],
        snapshot_of: SnapshotFactory,
    ) -> None:
        add_levels(ClassName.WARLOCK, 3, subclass="the fiend")
        ledger.append(
            SpellSlotRecord(
                character_id=character.id, slot_level=2, action=PoolAction.USE, pact=True
            )
        )
        snapshot = snapshot_of()
        assert snapshot.spell_slots == ()
        assert snapshot.pact_slots == (2, 2)
        assert snapshot.available_pact_slots == (2,)


class TestSpellPreparation:
    """Tests for prepared spell replay."""

    def test_wizard_slots(self, wizard: CharacterRecord, snapshot_of: SnapshotFactory) -> None:
        info = snapshot_of().spell_info(ClassName.WIZARD)
        assert info is not None
        assert info.prepared_ids(True) == ["fire-bolt"]
        assert info.free_slots(True) == 2
        assert info.prepared_ids(False) == ["magic-missile"]
        assert info.free_slots(False) == 3
        assert info.known_spells == ("magic-missile", "shield", "detect-magic", "sleep")

    def test_unprepare(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(
            SpellPreparedRecord(
                character_id=wizard.id,
                class_name=ClassName.WIZARD,
                spell_id="magic-missile",
                action=PrepareAction.UNPREPARE,
            )
        )
        info = snapshot_of().spell_info(ClassName.WIZARD)
        assert info is not None
        assert info.prepared_ids(False) == []

    def test_always_prepared_extends_slots(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(
            SpellPreparedRecord(
                character_id=wizard.id,
                class_name=ClassName.WIZARD,
                spell_id="shield",
                always_prepared=True,
            )
        )
        info = snapshot_of().spell_info(ClassName.WIZARD)
        assert info is not None
        assert len(info.prepared_spells) == 5
        assert info.prepared_spells[-1].always_prepared
        assert info.free_slots(False) == 3


class TestSpellbookReplay:
    """Tests for replay_spellbook."""

    def test_learn_and_forget(self) -> None:
        records = [
            SpellLearnedRecord(character_id="c", spell_id="shield"),
            SpellLearnedRecord(character_id="c", spell_id="sleep"),
            SpellLearnedRecord(character_id="c", spell_id="shield", action=LearnAction.FORGET),
            SpellLearnedRecord(character_id="c", spell_id="shield"),
        ]
        assert replay_spellbook(records) == ["sleep", "shield"]


class TestInventory:
    """Tests for coins, items and armor class."""

    def test_coins_latest_wins(
        self, ledger: SQLiteLedger, character: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(CoinRecord(character_id=character.id, gp=10))
        ledger.append(CoinRecord(character_id=character.id, gp=7, sp=5))
        coins = snapshot_of().coins
        assert (coins.gp, coins.sp) == (7, 5)

    def test_item_charges(
        self, ledger: SQLiteLedger, character: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(
            ItemRecord(
                character_id=character.id,
                item_id="wand",
                name="Wand of Magic Missiles",
                category=ItemCategory.WAND,
                max_charges=7,
            )
        )
        ledger.append(ItemChargeRecord(character_id=character.id, item_id="wand", delta=-3))
        ledger.append(ItemChargeRecord(character_id=character.id, item_id="wand", delta=10))
        ledger.append(ItemChargeRecord(character_id=character.id, item_id="wand", delta=-2))
        item = snapshot_of().item("wand")
        assert item is not None
        assert item.current_charges == 5

    def test_dropped_items_excluded(
        self, ledger: SQLiteLedger, character: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(ItemRecord(character_id=character.id, item_id="rope", name="Rope"))
        ledger.append(
            ItemRecord(character_id=character.id, item_id="rope", name="Rope", dropped=True)
        )
        assert snapshot_of().items == ()

    def test_worn_armor_and_shield(
        self, ledger: SQLiteLedger, wizard: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        ledger.append(
            ItemRecord(
                character_id=wizard.id,
                item_id="chain-mail",
                name="Chain Mail",
                category=ItemCategory.ARMOR,
                armor_type=ArmorType.HEAVY,
                armor_class=16,
                worn=True,
            )
        )
        ledger.append(
            ItemRecord(
                character_id=wizard.id,
                item_id="shield",
                name="Shield",
                category=ItemCategory.SHIELD,
                armor_modifier=2,
                wielded=True,
            )
        )
        assert snapshot_of().armor_class == 18


class TestArmorClass:
    """Tests for armor_class."""

    def _armor(self, armor_type: ArmorType, base: int, dex_max: int | None = None) -> InventoryItem:
        return InventoryItem(
            item_id="armor",
            name="Armor",
            category=ItemCategory.ARMOR,
            armor_type=armor_type,
            armor_class=base,
            armor_dex_max=dex_max,
            worn=True,
        )

    def test_unarmored(self) -> None:
        assert armor_class([], 3) == 13

    def test_light_armor_full_dex(self) -> None:
        assert armor_class([self._armor(ArmorType.LIGHT, 11)], 4) == 15

    def test_medium_armor_caps_dex(self) -> None:
        assert armor_class([self._armor(ArmorType.MEDIUM, 14)], 4) == 16

    def test_explicit_cap_overrides_type(self) -> None:
        assert armor_class([self._armor(ArmorType.MEDIUM, 14, dex_max=3)], 4) == 17

    def test_negative_dex_not_capped_up(self) -> None:
        assert armor_class([self._armor(ArmorType.HEAVY, 18)], -1) == 17

    def test_unequipped_bonus_ignored(self) -> None:
        ring = InventoryItem(
            item_id="ring", name="Ring", category=ItemCategory.JEWELRY, armor_modifier=1
        )
        assert armor_class([ring], 0) == 10


class TestTraits:
    """Tests for trait listing."""

    def test_traits_in_order(
        self, ledger: SQLiteLedger, character: CharacterRecord, snapshot_of: SnapshotFactory
    ) -> None:
        for name in ("alert", "lucky"):
            ledger.append(
                TraitRecord(
                    character_id=character.id,
                    name=name,
                    description=f"The {name} feat",
                    source=TraitSource.FEAT,
                )
            )
        assert [trait.name for trait in snapshot_of().traits] == ["alert", "lucky"]
