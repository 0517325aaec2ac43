"""Ability scores and skill proficiencies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, cast

from pydantic import BeforeValidator, Field

from dnd_ledger.core.constants import GENERAL_ERROR_KEY, MAX_ABILITY_SCORE, MIN_ABILITY_SCORE
from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    OptionalInt,
    blank_to_none,
)
from dnd_ledger.models.enums import Ability, ProficiencyLevel, Skill
from dnd_ledger.models.records import AbilityRecord, SkillRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


class UpdateAbilityInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("ability",)

    ability: Annotated[Ability | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="Ability to change (e.g. 'strength')"
    )
    score: OptionalInt = Field(
        default=None,
        ge=MIN_ABILITY_SCORE,
        le=MAX_ABILITY_SCORE,
        description="New ability score (1-30); leave blank to keep the current score",
    )
    saving_throw: Annotated[
        Literal["none", "add", "remove"] | None, BeforeValidator(blank_to_none)
    ] = Field(default="none", description="Saving throw proficiency change")


class UpdateSkillInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("skill", "proficiency")

    skill: Annotated[Skill | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="Skill to change"
    )
    proficiency: Annotated[ProficiencyLevel | None, BeforeValidator(blank_to_none)] = Field(
        default=None, description="New proficiency: none, half, proficient or expert"
    )


def update_ability(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Change an ability score and/or its saving throw proficiency.

    Both values are written together in a single record, so the latest
    record always carries the complete state of the ability.
    """
    form = ActionForm(UpdateAbilityInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    score: int | None = None
    proficient: bool | None = None
    if form.require("ability", "Select an ability") and values.ability is not None:
        current = snapshot.abilities[values.ability]
        score = values.score if values.score is not None else current.score
        proficient = current.proficient

        if values.saving_throw == "add":
            if current.proficient:
                form.error("saving_throw", f"Already proficient in {values.ability} saving throws")
            proficient = True
        elif values.saving_throw == "remove":
            if not current.proficient:
                form.error("saving_throw", f"Not proficient in {values.ability} saving throws")
            proficient = False

        if score == current.score and proficient == current.proficient and not form.errors:
            if not form.is_check:
                form.error(GENERAL_ERROR_KEY, "Must change the score or the saving throw")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    ability = cast(Ability, final.ability)
    score = cast(int, score)
    proficient = cast(bool, proficient)
    with ledger.transaction():
        ledger.append(
            AbilityRecord(
                character_id=snapshot.id,
                ability=ability,
                score=score,
                proficient=proficient,
                note=final.note,
            )
        )

    return ActionComplete(
        result={"ability": ability.value, "score": score, "proficient": proficient}
    )


def update_skill(
    ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]
) -> ActionResult:
    """Set a skill's proficiency level."""
    form = ActionForm(UpdateSkillInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    if (
        form.require("skill", "Select a skill")
        and form.require("proficiency", "Select a proficiency level")
        and values.skill is not None
    ):
        current = snapshot.skills[values.skill].proficiency
        if values.proficiency == current:
            form.error("proficiency", f"{values.skill} is already at {current} proficiency")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    skill = cast(Skill, final.skill)
    proficiency = cast(ProficiencyLevel, final.proficiency)
    with ledger.transaction():
        ledger.append(
            SkillRecord(
                character_id=snapshot.id,
                skill=skill,
                proficiency=proficiency,
                note=final.note,
            )
        )

    return ActionComplete(
        result={"skill": skill.value, "proficiency": proficiency.value}
    )


__all__ = ["UpdateAbilityInput", "UpdateSkillInput", "update_ability", "update_skill"]
