"""Agent tool registry and execution.

Every registered action is exposed as a tool. Agents call tools with
typed JSON arguments; the executor flattens them into the string form
input the validators expect, so an agent call and a form submission go
through exactly the same checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dnd_ledger.core.constants import CHECK_FLAG
from dnd_ledger.core.exceptions import UnknownToolError
from dnd_ledger.core.logging import get_logger
from dnd_ledger.engine.actions import ACTIONS
from dnd_ledger.engine.forms import ActionComplete
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger
from dnd_ledger.tools.approval import FORMATTERS
from dnd_ledger.tools.base import ActionTool, ToolResult


logger = get_logger(__name__)


# Short rest dice arrive as a list and are flattened to dice.<n>.die / dice.<n>.roll
_DICE_PARAMETER: dict[str, Any] = {
    "dice": {
        "type": "array",
        "description": "Hit dice to spend, each with the die size and the rolled value",
        "items": {
            "type": "object",
            "properties": {
                "die": {"type": "integer", "enum": [6, 8, 10, 12]},
                "roll": {"type": "integer", "minimum": 1},
            },
            "required": ["die", "roll"],
        },
    }
}


# =============================================================================
# Tool Registry
# =============================================================================


_tool_registry: dict[str, ActionTool] = {
    name: ActionTool.from_action(
        action,
        FORMATTERS[name],
        extra_parameters=_DICE_PARAMETER if name == "short_rest" else None,
    )
    for name, action in ACTIONS.items()
}


def get_tool(name: str) -> ActionTool:
    """Get a tool by name.

    Raises:
        UnknownToolError: If no tool is registered under ``name``.
    """
    try:
        return _tool_registry[name]
    except KeyError:
        raise UnknownToolError(f"Unknown tool: {name}", tool_name=name) from None


def get_all_tools() -> list[ActionTool]:
    """Get all registered tools."""
    return list(_tool_registry.values())


def get_tools_as_openai_schema() -> list[dict[str, Any]]:
    """Get all tools in OpenAI function calling schema format."""
    return [tool_def.to_openai_schema() for tool_def in _tool_registry.values()]


# =============================================================================
# Tool Execution
# =============================================================================


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def flatten_parameters(parameters: Mapping[str, Any]) -> dict[str, str]:
    """Turn typed tool arguments into flat string form input.

    Booleans become ``"true"``/``"false"``, lists become comma-separated
    strings, and the short rest ``dice`` list becomes indexed keys.
    ``None`` values are dropped.
    """
    data: dict[str, str] = {}
    for key, value in parameters.items():
        if value is None:
            continue
        if key == "dice" and isinstance(value, list):
            for index, entry in enumerate(value):
                for field_name in ("die", "roll"):
                    if entry.get(field_name) is not None:
                        data[f"dice.{index}.{field_name}"] = _form_value(entry[field_name])
            continue
        data[key] = _form_value(value)
    return data


def execute_tool(
    name: str,
    ledger: Ledger,
    snapshot: CharacterSnapshot,
    parameters: Mapping[str, Any],
    is_check: bool = False,
) -> ToolResult:
    """Run a tool against a snapshot.

    Args:
        name: Tool name.
        ledger: Ledger the action appends to.
        snapshot: Current character snapshot.
        parameters: Typed tool arguments.
        is_check: Validate only, without writing.

    Returns:
        ToolResult; ``success`` is True only when records were written.

    Raises:
        UnknownToolError: If the tool does not exist.
    """
    tool_def = get_tool(name)
    data = flatten_parameters(parameters)
    if is_check:
        data[CHECK_FLAG] = "true"

    outcome = tool_def.function(ledger, snapshot, data)
    if isinstance(outcome, ActionComplete):
        logger.info("Tool executed", tool=name, character_id=snapshot.id)
        return ToolResult(tool_name=name, success=True, result=outcome.result)

    logger.debug("Tool not committed", tool=name, is_check=is_check, errors=outcome.errors)
    return ToolResult(tool_name=name, success=False, errors=outcome.errors)


def format_approval(name: str, parameters: Mapping[str, Any]) -> str:
    """One-line summary of a tool call for player approval.

    Raises:
        UnknownToolError: If the tool does not exist.
    """
    return get_tool(name).formatter(dict(parameters))


__all__ = [
    "get_tool",
    "get_all_tools",
    "get_tools_as_openai_schema",
    "flatten_parameters",
    "execute_tool",
    "format_approval",
]
