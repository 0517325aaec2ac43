"""Tests for the two-phase action form protocol."""

from __future__ import annotations

from typing import ClassVar

import pytest
from pydantic import Field

from dnd_ledger.core.exceptions import StructuralError
from dnd_ledger.engine.forms import (
    ActionForm,
    ActionInput,
    Checkbox,
    HitDieValue,
    OptionalInt,
    OptionalStr,
    blank_to_none,
    checkbox,
    parse_input,
    split_list,
)


class SampleInput(ActionInput):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "amount")

    name: OptionalStr = None
    amount: OptionalInt = Field(default=None, ge=1)
    die: HitDieValue = None
    flag: Checkbox = False


class TestCoercion:
    """Tests for flat input coercion helpers."""

    def test_blank_to_none(self) -> None:
        assert blank_to_none("  ") is None
        assert blank_to_none("x") == "x"
        assert blank_to_none(0) == 0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("on", True), ("ON", True), ("false", False), ("yes", False), (None, False)],
    )
    def test_checkbox(self, value: object, expected: bool) -> None:
        assert checkbox(value) is expected

    def test_split_list(self) -> None:
        assert split_list("a, b,,c ") == ["a", "b", "c"]
        assert split_list("") == []
        assert split_list(["x"]) == ["x"]


class TestParseInput:
    """Tests for parse_input."""

    def test_partial_parse(self) -> None:
        values = parse_input(SampleInput, {"name": "", "amount": "3"}, strict=False)
        assert values.name is None
        assert values.amount == 3

    def test_strict_requires_fields(self) -> None:
        with pytest.raises(StructuralError) as exc_info:
            parse_input(SampleInput, {"amount": "3"}, strict=True)
        assert exc_info.value.errors == {"name": "This field is required"}

    def test_malformed_value(self) -> None:
        with pytest.raises(StructuralError) as exc_info:
            parse_input(SampleInput, {"amount": "many"}, strict=False)
        assert "amount" in exc_info.value.errors

    def test_hit_die_sizes(self) -> None:
        with pytest.raises(StructuralError) as exc_info:
            parse_input(SampleInput, {"die": "4"}, strict=False)
        assert "6, 8, 10, or 12" in exc_info.value.errors["die"]

    def test_unknown_fields_ignored(self) -> None:
        values = parse_input(SampleInput, {"name": "x", "colour": "red"}, strict=False)
        assert values.name == "x"


class TestActionForm:
    """Tests for ActionForm state handling."""

    def test_structural_errors_in_check_mode(self) -> None:
        form = ActionForm(SampleInput, {"amount": "0", "is_check": "true"})
        assert form.values is None
        assert form.is_check
        assert "amount" in form.errors
        assert form.halted

    def test_require_skipped_in_check_mode(self) -> None:
        form = ActionForm(SampleInput, {"is_check": "on"})
        assert form.require("name", "Name is required") is False
        assert form.errors == {}

    def test_require_reports_outside_check_mode(self) -> None:
        form = ActionForm(SampleInput, {})
        assert form.require("name", "Name is required") is False
        assert form.errors == {"name": "Name is required"}
        assert form.halted

    def test_first_error_per_field_wins(self) -> None:
        form = ActionForm(SampleInput, {"name": "x"})
        form.error("name", "first")
        form.error("name", "second")
        assert form.errors == {"name": "first"}
        assert len(form.violations) == 2
        assert form.violations[1].field_name == "name"

    def test_incomplete_strips_check_flag(self) -> None:
        form = ActionForm(SampleInput, {"name": "x", "is_check": "true"})
        result = form.incomplete(preview=1)
        assert result.complete is False
        assert result.values == {"name": "x", "preview": 1}
        assert result.errors == {}

    def test_finalize(self) -> None:
        form = ActionForm(SampleInput, {"name": "x", "amount": "2", "flag": "on"})
        assert not form.halted
        final = form.finalize()
        assert final is not None
        assert final.flag is True

    def test_finalize_missing(self) -> None:
        form = ActionForm(SampleInput, {"name": "x"})
        assert form.finalize() is None
        assert form.errors == {"amount": "This field is required"}
