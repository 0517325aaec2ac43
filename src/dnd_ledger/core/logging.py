"""Structured logging for the character ledger engine.

Every ledger append and every action outcome is logged through structlog
with key/value context. While an action runs, the character id and action
name are bound as context variables, so nested log lines from the ledger
and the snapshot builder carry them too.

Example:
    >>> from dnd_ledger.core.logging import action_context, get_logger
    >>> logger = get_logger(__name__)
    >>> with action_context("c-1", "long_rest"):
    ...     logger.info("Action committed", records=3)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from dnd_ledger.core.config import Settings


_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_ruleset_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp log entries with the application and the active ruleset.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with ``app`` and ``ruleset`` set.
    """
    from dnd_ledger.core.config import get_settings

    event_dict.setdefault("app", "dnd_ledger")
    event_dict.setdefault("ruleset", get_settings().rules.ruleset)
    return event_dict


def build_processors(json_format: bool) -> list[Processor]:
    """Processor chain for console or JSON output."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_ruleset_context,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Log lines go to stderr; a ``log_file`` in the settings adds a plain
    text copy.

    Args:
        settings: Settings to read the level, format and log file from.
            Defaults to the application settings.
    """
    if settings is None:
        from dnd_ledger.core.config import get_settings

        settings = get_settings()

    level = getattr(logging, settings.effective_log_level, logging.INFO)
    structlog.configure(
        processors=build_processors(settings.log_json),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file is not None:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(format=_STDLIB_FORMAT, level=level, handlers=handlers, force=True)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


@contextmanager
def action_context(character_id: str, action: str, **extra: Any) -> Iterator[None]:
    """Bind the character and action to every log line inside the block.

    Args:
        character_id: Character the action applies to.
        action: Action name.
        **extra: Additional key/value context.
    """
    with structlog.contextvars.bound_contextvars(
        character_id=character_id, action=action, **extra
    ):
        yield


__all__ = [
    "add_ruleset_context",
    "build_processors",
    "configure_logging",
    "get_logger",
    "action_context",
]
