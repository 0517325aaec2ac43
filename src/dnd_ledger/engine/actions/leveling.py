"""Class levels and traits.

Adding a level also grants, in the same transaction, every trait the new
level brings: class and subclass features at the new class level, plus
species, lineage and background traits at the new total level.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, cast

from pydantic import BeforeValidator, Field

from dnd_ledger.core.config import get_settings
from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    OptionalInt,
    OptionalStr,
    blank_to_none,
)
from dnd_ledger.models.enums import ClassName, TraitSource
from dnd_ledger.models.records import LedgerRecord, LevelRecord, TraitRecord
from dnd_ledger.models.rules import CLASS_DEFINITIONS, class_traits, origin_traits
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


class AddLevelInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("class_name", "level", "hit_die_roll")

    class_name: Annotated[ClassName | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="Class to gain a level in"
    )
    level: OptionalInt = Field(default=None, ge=1, le=20, description="The new level in that class")
    subclass: OptionalStr = Field(
        default=None, description="Subclass, required at the level the class chooses one"
    )
    hit_die_roll: OptionalInt = Field(
        default=None, ge=1, description="HP rolled on the class hit die for this level"
    )


class AddTraitInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "description", "source")

    name: OptionalStr = Field(default=None, description="Trait name")
    description: OptionalStr = Field(default=None, description="What the trait does")
    source: Annotated[TraitSource | None, BeforeValidator(blank_to_none)] = Field(
        default=TraitSource.FEAT, description="Where the trait comes from"
    )
    source_detail: OptionalStr = Field(default=None, description="e.g. the feat or item name")
    level: OptionalInt = Field(default=None, ge=1, le=20, description="Character level gained at")


# =============================================================================
# Add Level
# =============================================================================


def add_level(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Add one class level, granting its traits."""
    form = ActionForm(AddLevelInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    max_level = get_settings().rules.max_level
    if snapshot.total_level >= max_level:
        form.error("level", f"{snapshot.name} is already at the maximum total level {max_level}")
        return form.incomplete()

    preview: dict[str, Any] = {}
    subclass = values.subclass
    class_name = values.class_name
    if form.require("class_name", "Select a class") and class_name is not None:
        definition = CLASS_DEFINITIONS[class_name]
        current = snapshot.class_level(class_name)
        expected = current.level + 1 if current else 1
        if values.level is None:
            preview["level"] = str(expected)
        form.require("level", "Level is required")

        if values.level is not None and values.level != expected:
            if current:
                form.error("level", f"Next {class_name} level must be {expected}")
            else:
                form.error("level", f"A new class must start at level 1, not {values.level}")

        new_level = values.level if values.level is not None else expected
        if current and current.subclass:
            if subclass and subclass != current.subclass:
                form.error(
                    "subclass", f"Subclass is already {current.subclass} and cannot change"
                )
            subclass = current.subclass
            preview["subclass"] = subclass
        elif new_level == definition.subclass_level:
            if form.require("subclass", f"Choose a {class_name} subclass at level {new_level}"):
                if subclass not in definition.subclasses:
                    form.error("subclass", f"{subclass} is not a {class_name} subclass")
        elif subclass:
            form.error(
                "subclass",
                f"{class_name} chooses a subclass at level {definition.subclass_level}",
            )

        if form.require("hit_die_roll", "Hit die roll is required"):
            roll = values.hit_die_roll
            if roll is not None and roll > definition.hit_die:
                form.error(
                    "hit_die_roll", f"Hit die roll must be between 1 and {definition.hit_die}"
                )

    if form.halted:
        return form.incomplete(**preview)

    final = form.finalize()
    if final is None:
        return form.incomplete(**preview)

    class_name = cast(ClassName, final.class_name)
    level = cast(int, final.level)
    new_total = snapshot.total_level + 1

    records: list[LedgerRecord] = [
        LevelRecord(
            character_id=snapshot.id,
            class_name=class_name,
            level=level,
            subclass=subclass,
            hit_die_roll=cast(int, final.hit_die_roll),
            note=final.note,
        )
    ]
    grants = class_traits(class_name, subclass, level) + origin_traits(
        snapshot.species, snapshot.lineage, snapshot.background, new_total
    )
    records.extend(
        TraitRecord(
            character_id=snapshot.id,
            name=grant.name,
            description=grant.description,
            source=grant.source,
            source_detail=grant.source_detail,
            level=grant.level if grant.level is not None else new_total,
        )
        for grant in grants
    )

    with ledger.transaction():
        for record in records:
            ledger.append(record)

    return ActionComplete(
        result={
            "note": f"{class_name} level {level}",
            "class_name": class_name.value,
            "level": level,
            "subclass": subclass,
            "traits_granted": [grant.name for grant in grants],
        }
    )


# =============================================================================
# Add Trait
# =============================================================================


def add_trait(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Record a custom trait (feats, boons, and the like)."""
    form = ActionForm(AddTraitInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    if form.require("name", "Trait name is required"):
        existing = next(
            (
                t
                for t in snapshot.traits
                if t.name.lower() == (values.name or "").lower() and t.source == values.source
            ),
            None,
        )
        if existing is not None:
            form.error("name", f"{snapshot.name} already has the {existing.source} trait {existing.name}")
    form.require("description", "Description is required")
    form.require("source", "Source is required")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    source = cast(TraitSource, final.source)
    with ledger.transaction():
        ledger.append(
            TraitRecord(
                character_id=snapshot.id,
                name=cast(str, final.name),
                description=cast(str, final.description),
                source=source,
                source_detail=final.source_detail,
                level=final.level or snapshot.total_level or None,
                note=final.note,
            )
        )

    return ActionComplete(result={"name": final.name, "source": source.value})


__all__ = ["AddLevelInput", "AddTraitInput", "add_level", "add_trait"]
