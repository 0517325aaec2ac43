"""Two-phase action input handling.

Every action runs the same protocol over a flat string-keyed input:

1. Partial parse against the action schema. Malformed input is a
   ``StructuralError`` and is always reported, even in check mode.
2. Business-rule checks against the snapshot. Each failure is a
   ``RuleViolation`` keyed by field. Checks that need a required field the
   caller has not supplied yet are skipped in check mode.
3. Check mode, or any recorded error, returns ``ActionIncomplete`` without
   touching the ledger.
4. Full parse, with required fields enforced.
5. The action appends its records inside one ledger transaction and
   returns ``ActionComplete``.

Example:
    >>> form = ActionForm(HitPointsInput, {"action": "lose", "amount": "3"})
    >>> form.values.amount
    3
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Generic, Literal, TypeVar, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationError

from dnd_ledger.core.constants import CHECK_FLAG, GENERAL_ERROR_KEY, HIT_DIE_SIZES
from dnd_ledger.core.exceptions import RuleViolation, StructuralError


# =============================================================================
# Input Coercion
# =============================================================================


def blank_to_none(value: Any) -> Any:
    """Treat empty form fields as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def checkbox(value: Any) -> bool:
    """Interpret an HTML checkbox value; anything but true/on is false."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "on")
    return False


def split_list(value: Any) -> Any:
    """Split a comma-separated field into a list of stripped items."""
    value = blank_to_none(value)
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _hit_die_size(value: int | None) -> int | None:
    if value is not None and value not in HIT_DIE_SIZES:
        raise ValueError("Die value must be 6, 8, 10, or 12")
    return value


OptionalInt = Annotated[int | None, BeforeValidator(blank_to_none)]
OptionalStr = Annotated[str | None, BeforeValidator(blank_to_none)]
Checkbox = Annotated[bool, BeforeValidator(checkbox)]
HitDieValue = Annotated[int | None, BeforeValidator(blank_to_none), AfterValidator(_hit_die_size)]


class ActionInput(BaseModel):
    """Base schema for flat action input.

    Every field is optional so the partial parse can run on a half-filled
    form. ``required_fields`` lists what the full parse insists on.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    required_fields: ClassVar[tuple[str, ...]] = ()

    is_check: Checkbox = False
    note: OptionalStr = None


S = TypeVar("S", bound=ActionInput)


def errors_from_validation(exc: ValidationError) -> dict[str, str]:
    """Map pydantic errors to field-keyed messages (first message per field)."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        key = str(loc[0]) if loc else GENERAL_ERROR_KEY
        errors.setdefault(key, error["msg"])
    return errors


def parse_input(schema: type[S], data: Mapping[str, Any], *, strict: bool) -> S:
    """Parse flat input against an action schema.

    Args:
        schema: Action input schema.
        data: Raw input.
        strict: Enforce ``required_fields``.

    Raises:
        StructuralError: When the input does not fit the schema.
    """
    try:
        values = schema.model_validate(dict(data))
    except ValidationError as exc:
        raise StructuralError(
            f"Invalid input for {schema.__name__}", errors=errors_from_validation(exc)
        ) from exc

    if strict:
        missing = {
            name: "This field is required"
            for name in schema.required_fields
            if getattr(values, name) is None
        }
        if missing:
            raise StructuralError(f"Incomplete input for {schema.__name__}", errors=missing)
    return values


# =============================================================================
# Results
# =============================================================================


class ActionIncomplete(BaseModel):
    """Check-mode preview or rejected input; nothing was written."""

    complete: Literal[False] = False
    values: dict[str, Any]
    errors: dict[str, str]


class ActionComplete(BaseModel):
    """The action was committed to the ledger."""

    complete: Literal[True] = True
    result: dict[str, Any] = {}


ActionResult = Union[ActionIncomplete, ActionComplete]


# =============================================================================
# Form State
# =============================================================================


class ActionForm(Generic[S]):
    """Per-call state of one action's two-phase validation.

    Attributes:
        values: Partially parsed input, or None when the input is malformed.
        is_check: True when the caller asked for a soft check only.
        errors: Field -> message for everything reported so far.
        violations: Rule violations recorded against the snapshot.
    """

    def __init__(self, schema: type[S], data: Mapping[str, Any]) -> None:
        self.schema = schema
        self.data: dict[str, Any] = dict(data)
        self.is_check = checkbox(self.data.get(CHECK_FLAG))
        self.errors: dict[str, str] = {}
        self.violations: list[RuleViolation] = []
        self.values: S | None = None

        try:
            self.values = parse_input(schema, self.data, strict=False)
        except StructuralError as exc:
            self.errors.update(exc.errors)

    def error(self, field_name: str, message: str) -> None:
        """Record a rule violation; the first message per field is kept."""
        self.violations.append(RuleViolation(message, field_name=field_name))
        self.errors.setdefault(field_name, message)

    def require(self, field_name: str, message: str) -> bool:
        """Check that a required field is present.

        Missing fields are only reported outside check mode.

        Returns:
            True when the field has a value.
        """
        if self.values is not None and getattr(self.values, field_name) is not None:
            return True
        if not self.is_check:
            self.error(field_name, message)
        return False

    def has_error(self, field_name: str) -> bool:
        return field_name in self.errors

    @property
    def halted(self) -> bool:
        """True when the action must stop before writing anything."""
        return self.is_check or bool(self.errors)

    def incomplete(self, **preview: Any) -> ActionIncomplete:
        """Build the no-side-effect result, optionally overlaying preview values."""
        values = {key: value for key, value in self.data.items() if key != CHECK_FLAG}
        values.update(preview)
        return ActionIncomplete(values=values, errors=dict(self.errors))

    def finalize(self) -> S | None:
        """Run the full parse; on failure the errors are recorded and None returned."""
        try:
            return parse_input(self.schema, self.data, strict=True)
        except StructuralError as exc:
            self.errors.update(exc.errors)
            return None


__all__ = [
    "blank_to_none",
    "checkbox",
    "split_list",
    "OptionalInt",
    "OptionalStr",
    "Checkbox",
    "HitDieValue",
    "ActionInput",
    "errors_from_validation",
    "parse_input",
    "ActionIncomplete",
    "ActionComplete",
    "ActionResult",
    "ActionForm",
]
