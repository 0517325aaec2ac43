"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DndLedgerError: Base exception for all engine errors.
        StructuralError: Input failed schema shape.
        RuleViolation: A business rule failed.
        ConfigurationError: Configuration-related errors.
        LedgerError: Ledger contract misuse.
        UnknownToolError: Unregistered tool requested.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up logging from the settings.
        get_logger: Get a structlog logger.
        action_context: Bind character and action to log entries.
"""

from __future__ import annotations

from dnd_ledger.core.config import (
    LedgerSettings,
    RulesSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dnd_ledger.core.exceptions import (
    ConfigurationError,
    DndLedgerError,
    LedgerError,
    RuleViolation,
    StructuralError,
    UnknownToolError,
)
from dnd_ledger.core.logging import action_context, configure_logging, get_logger


__all__ = [
    # Exceptions
    "DndLedgerError",
    "StructuralError",
    "RuleViolation",
    "ConfigurationError",
    "LedgerError",
    "UnknownToolError",
    # Configuration
    "Settings",
    "LedgerSettings",
    "RulesSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "action_context",
]
