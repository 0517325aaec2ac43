"""Exception hierarchy for the character ledger engine.

The engine only knows two kinds of failure about user input: the input has
the wrong shape (StructuralError) or it breaks a named game rule
(RuleViolation). Everything else in this module describes programming or
configuration mistakes. Errors raised by the backing store are never
wrapped here; they propagate to the caller as-is.

Example:
    >>> from dnd_ledger.core.exceptions import RuleViolation
    >>> raise RuleViolation("No level 3 spell slots available", field_name="slot_level")
"""

from __future__ import annotations

from typing import Any


class DndLedgerError(Exception):
    """Base exception for all ledger engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Input Validation Exceptions
# =============================================================================


class StructuralError(DndLedgerError):
    """Raised when raw input does not match an action's schema.

    Structural failures are always hard errors, whether or not the caller
    asked for a check-mode preview.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize structural error with the per-field messages.

        Args:
            message: Human-readable error description.
            errors: Mapping of field name to error message.
            details: Optional dictionary containing additional error context.
        """
        self.errors = dict(errors or {})
        combined_details = details or {}
        if self.errors:
            combined_details["fields"] = sorted(self.errors)
        super().__init__(message, details=combined_details)


class RuleViolation(DndLedgerError):
    """Raised (or recorded) when a named business rule fails.

    The field name is the key under which the message is reported back to
    the caller.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.field_name = field_name
        combined_details = details or {}
        combined_details["field"] = field_name
        super().__init__(message, details=combined_details)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class ConfigurationError(DndLedgerError):
    """Raised when there are configuration issues.

    This includes missing or invalid settings values.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class LedgerError(DndLedgerError):
    """Raised when the ledger contract itself is misused.

    Examples are appending a record kind the ledger does not know about or
    committing a transaction that was never opened. Database driver errors
    are not converted into this type.
    """

    def __init__(
        self,
        message: str,
        *,
        record_kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if record_kind:
            combined_details["record_kind"] = record_kind
        super().__init__(message, details=combined_details)


class UnknownToolError(DndLedgerError):
    """Raised when the tool adapter is asked for a tool it never registered."""

    def __init__(
        self,
        message: str,
        *,
        tool_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if tool_name:
            combined_details["tool_name"] = tool_name
        super().__init__(message, details=combined_details)


__all__ = [
    "DndLedgerError",
    "StructuralError",
    "RuleViolation",
    "ConfigurationError",
    "LedgerError",
    "UnknownToolError",
]
