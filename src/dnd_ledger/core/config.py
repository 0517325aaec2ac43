"""Configuration management for the character ledger engine.

Settings are loaded with pydantic-settings from environment variables and an
optional .env file. Nested groups can be overridden with a double underscore,
e.g. ``DND_LEDGER_LEDGER__DATABASE_PATH``.

Example:
    >>> from dnd_ledger.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.rules.ruleset)
    'srd51'

Environment Variables:
    DND_LEDGER_DATABASE_PATH: Path to the SQLite ledger file
    DND_LEDGER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_LEDGER_LOG_JSON: Emit JSON log lines instead of console output
    DND_LEDGER_LOG_FILE: Also write log lines to this file
    DND_LEDGER_RULES_MAX_LEVEL: Highest class level accepted by add_level
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_ledger.core.exceptions import ConfigurationError


class LedgerSettings(BaseSettings):
    """Configuration for the append-only ledger store.

    Attributes:
        database_path: Path to the SQLite database file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/dnd_ledger.db"),
        description="Path to SQLite ledger database",
    )


class RulesSettings(BaseSettings):
    """Configuration for the rules tables.

    Attributes:
        ruleset: Identifier of the rules data set characters are built with.
        max_level: Highest class level accepted when adding levels.
        coin_change_making: Default for breaking larger coins to cover a cost.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ruleset: Literal["srd51"] = Field(
        default="srd51",
        description="Rules data set identifier",
    )
    max_level: int = Field(
        default=20,
        ge=1,
        le=20,
        description="Highest class level",
    )
    coin_change_making: bool = Field(
        default=True,
        description="Break larger coins when paying by default",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode (forces DEBUG logging).
        log_level: Application logging level.
        log_json: Render log lines as JSON.
        log_file: Optional file that receives a copy of the log.
        ledger: Ledger store settings.
        rules: Rules table settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="D&D Character Ledger",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file that receives a copy of the log",
    )

    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept log levels in any case.

        Args:
            value: Raw value from the environment.

        Returns:
            Upper-cased level name when a string was given.
        """
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def effective_log_level(self) -> str:
        """Log level after applying debug mode, which forces DEBUG."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    This is primarily useful for testing or when environment variables
    have changed at runtime.
    """
    get_settings.cache_clear()


__all__ = [
    "LedgerSettings",
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
