"""Agent tools - every action exposed for LLM function calling.

Example:
    >>> from dnd_ledger.tools import execute_tool, format_approval
    >>> format_approval("cast_spell", {"spell_id": "magic-missile", "slot_level": 2})
    'Cast Magic Missile using level 2 slot'
"""

from __future__ import annotations

from dnd_ledger.tools.base import ActionTool, ToolResult
from dnd_ledger.tools.registry import (
    execute_tool,
    flatten_parameters,
    format_approval,
    get_all_tools,
    get_tool,
    get_tools_as_openai_schema,
)


__all__ = [
    "ActionTool",
    "ToolResult",
    "get_tool",
    "get_all_tools",
    "get_tools_as_openai_schema",
    "flatten_parameters",
    "execute_tool",
    "format_approval",
]
