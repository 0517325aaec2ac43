"""Inventory, equipment state and item charges.

An item's state is latest-wins per ``item_id``: acquiring writes the first
``ItemRecord``, and equipping or dropping writes a full copy with the
changed fields. A dropped item can be acquired again under the same id.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, cast

from pydantic import BeforeValidator, Field

from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    Checkbox,
    OptionalInt,
    OptionalStr,
    blank_to_none,
)
from dnd_ledger.models.enums import ArmorType, ItemCategory
from dnd_ledger.models.records import ItemChargeRecord, ItemRecord
from dnd_ledger.models.snapshot import CharacterSnapshot, InventoryItem
from dnd_ledger.storage.ledger import Ledger


class AcquireItemInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("item_id", "name")

    item_id: OptionalStr = Field(default=None, description="Unique ID for the new inventory item")
    name: OptionalStr = Field(default=None, description="Item name")
    category: Annotated[ItemCategory | None, BeforeValidator(blank_to_none)] = Field(
        default=ItemCategory.GEAR, description="Item category (weapon, armor, shield, gear, ...)"
    )
    armor_type: Annotated[ArmorType | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="Armor weight class (light, medium, heavy); armor only"
    )
    armor_class: OptionalInt = Field(default=None, ge=0, description="Base AC of worn armor")
    armor_dex_max: OptionalInt = Field(
        default=None, ge=0, description="Largest DEX bonus the armor allows"
    )
    armor_modifier: OptionalInt = Field(
        default=None, description="AC bonus while equipped (shields, rings, cloaks)"
    )
    max_charges: OptionalInt = Field(default=None, ge=1, description="Charges when full")
    charge_label: OptionalStr = Field(default=None, description="What a charge is called")


class DropItemInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("item_id",)

    item_id: OptionalStr = Field(default=None, description="The ID of the inventory item to drop")


class EquipItemInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("item_id",)

    item_id: OptionalStr = Field(default=None, description="The ID of the inventory item")
    worn: Checkbox = Field(default=False, description="Wear the item (armor, clothing, jewelry)")
    wielded: Checkbox = Field(default=False, description="Hold the item in hand")


class ManageChargeInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("item_id", "action", "amount")

    item_id: OptionalStr = Field(default=None, description="The ID of the item with charges")
    action: Annotated[Literal["use", "add"] | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="'use' to spend charges, 'add' to regain them"
    )
    amount: OptionalInt = Field(default=None, ge=1, description="Number of charges")
    override: Checkbox = Field(
        default=False, description="Allow using charges from an unequipped item"
    )


def _held_item(form: ActionForm[Any], snapshot: CharacterSnapshot, item_id: str | None) -> InventoryItem | None:
    item = snapshot.item(item_id) if item_id else None
    if item_id and item is None:
        form.error("item_id", f"{snapshot.name} is not carrying an item with ID {item_id}")
    return item


def _item_record(
    snapshot: CharacterSnapshot, item: InventoryItem, note: str | None, **changes: Any
) -> ItemRecord:
    """Full copy of a held item's state with some fields changed."""
    fields: dict[str, Any] = {
        "item_id": item.item_id,
        "name": item.name,
        "category": item.category,
        "worn": item.worn,
        "wielded": item.wielded,
        "armor_type": item.armor_type,
        "armor_class": item.armor_class,
        "armor_dex_max": item.armor_dex_max,
        "armor_modifier": item.armor_modifier,
        "max_charges": item.max_charges,
        "charge_label": item.charge_label,
    }
    fields.update(changes)
    return ItemRecord(character_id=snapshot.id, note=note, **fields)


# =============================================================================
# Acquire / Drop
# =============================================================================


def acquire_item(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Add a new item to the inventory, unequipped and fully charged."""
    form = ActionForm(AcquireItemInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    if form.require("item_id", "Item ID is required") and values.item_id is not None:
        existing = snapshot.item(values.item_id)
        if existing is not None:
            form.error(
                "item_id", f"{snapshot.name} already carries {existing.name} with ID {values.item_id}"
            )
    form.require("name", "Item name is required")

    category = values.category or ItemCategory.GEAR
    if category == ItemCategory.ARMOR:
        form.require("armor_type", "Armor type is required")
        form.require("armor_class", "Armor class is required")
    else:
        if category == ItemCategory.SHIELD:
            form.require("armor_modifier", "Shield AC bonus is required")
        for field_name in ("armor_type", "armor_class", "armor_dex_max"):
            if getattr(values, field_name) is not None:
                form.error(field_name, f"Only armor has {field_name.replace('_', ' ')}")

    if values.charge_label and values.max_charges is None:
        form.error("charge_label", "A charge label needs max charges")

    if form.halted:
        return form.incomplete(category=category.value)

    final = form.finalize()
    if final is None:
        return form.incomplete()

    record = ItemRecord(
        character_id=snapshot.id,
        item_id=cast(str, final.item_id),
        name=cast(str, final.name),
        category=category,
        armor_type=final.armor_type,
        armor_class=final.armor_class,
        armor_dex_max=final.armor_dex_max,
        armor_modifier=final.armor_modifier,
        max_charges=final.max_charges,
        charge_label=final.charge_label,
        note=final.note,
    )
    with ledger.transaction():
        ledger.append(record)

    return ActionComplete(
        result={
            "item_id": record.item_id,
            "note": f"{snapshot.name} acquired {record.name}",
            "current_charges": record.max_charges,
        }
    )


def drop_item(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Remove a held item from the inventory."""
    form = ActionForm(DropItemInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    item: InventoryItem | None = None
    if form.require("item_id", "Select an item"):
        item = _held_item(form, snapshot, values.item_id)

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None or item is None:
        return form.incomplete()

    with ledger.transaction():
        ledger.append(
            _item_record(snapshot, item, final.note, worn=False, wielded=False, dropped=True)
        )

    return ActionComplete(result={"item_id": item.item_id, "note": f"Dropped {item.name}"})


# =============================================================================
# Equip
# =============================================================================


def equip_item(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Set whether a held item is worn and/or wielded."""
    form = ActionForm(EquipItemInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    item: InventoryItem | None = None
    if form.require("item_id", "Select an item"):
        item = _held_item(form, snapshot, values.item_id)

    if item is not None:
        if values.worn and not item.category.wearable:
            form.error("worn", f"{item.name} is a {item.category} and cannot be worn")
        elif values.worn == item.worn and values.wielded == item.wielded:
            form.error("item_id", f"{item.name} is already in that state")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None or item is None:
        return form.incomplete()

    with ledger.transaction():
        ledger.append(
            _item_record(snapshot, item, final.note, worn=final.worn, wielded=final.wielded)
        )

    return ActionComplete(
        result={"item_id": item.item_id, "worn": final.worn, "wielded": final.wielded}
    )


# =============================================================================
# Charges
# =============================================================================


def manage_charge(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Use or regain charges on an item."""
    form = ActionForm(ManageChargeInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    item: InventoryItem | None = None
    if form.require("item_id", "Select an item"):
        item = _held_item(form, snapshot, values.item_id)
        if item is not None and item.max_charges is None:
            form.error("item_id", f"{item.name} does not have charges")
            item = None

    if form.require("action", "Action is required") and item is not None:
        if values.action == "use":
            if not item.equipped and not values.override:
                form.error(
                    "override", "Item must be equipped to use charges (check override to bypass)"
                )
            elif item.current_charges == 0:
                form.error("action", f"{item.name} has no charges left")
        elif item.max_charges is not None and item.current_charges >= item.max_charges:
            form.error("action", f"{item.name} is already fully charged")

    amount = values.amount
    if form.require("amount", "Amount is required") and item is not None and amount is not None:
        if values.action == "use" and amount > item.current_charges:
            form.error("amount", f"Not enough charges (current: {item.current_charges})")
        elif values.action == "add" and item.max_charges is not None:
            room = item.max_charges - item.current_charges
            if amount > room:
                form.error(
                    "amount",
                    f"Cannot add more than {room} charges (max {item.max_charges})",
                )

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None or item is None:
        return form.incomplete()

    delta = cast(int, final.amount)
    if final.action == "use":
        delta = -delta
    with ledger.transaction():
        ledger.append(
            ItemChargeRecord(
                character_id=snapshot.id,
                item_id=item.item_id,
                delta=delta,
                note=final.note,
            )
        )

    label = item.charge_label or "charges"
    return ActionComplete(
        result={
            "item_id": item.item_id,
            "delta": delta,
            "current_charges": item.current_charges + delta,
            "note": f"{item.name}: {item.current_charges + delta} {label} remaining",
        }
    )


__all__ = [
    "AcquireItemInput",
    "DropItemInput",
    "EquipItemInput",
    "ManageChargeInput",
    "acquire_item",
    "drop_item",
    "equip_item",
    "manage_charge",
]
