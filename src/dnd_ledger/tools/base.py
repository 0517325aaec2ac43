"""Base classes for agent tools.

Every tool wraps one registered action. The agent supplies typed
arguments; Python flattens them into form input and runs the same
validator a human form submission would.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from dnd_ledger.core.constants import CHECK_FLAG
from dnd_ledger.engine.actions import ActionDefinition, ActionFunction
from dnd_ledger.engine.forms import ActionInput


ApprovalFormatter = Callable[[dict[str, Any]], str]


# =============================================================================
# Tool Result
# =============================================================================


class ToolResult(BaseModel):
    """Result of a tool execution."""

    tool_name: str
    success: bool
    errors: dict[str, str] = Field(default_factory=dict)
    result: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Tool Definition
# =============================================================================


@dataclass
class ActionTool:
    """An action exposed to an agent.

    Attributes:
        name: Tool name, identical to the action name.
        description: Human-readable description for the agent.
        schema: Action input schema the parameters are derived from.
        function: The action validator.
        formatter: One-line approval summary for a set of arguments.
        extra_parameters: JSON schema properties the input schema cannot
            express (e.g. the short rest dice list).
    """

    name: str
    description: str
    schema: type[ActionInput]
    function: ActionFunction
    formatter: ApprovalFormatter
    extra_parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_action(
        cls,
        action: ActionDefinition,
        formatter: ApprovalFormatter,
        extra_parameters: dict[str, Any] | None = None,
    ) -> ActionTool:
        return cls(
            name=action.name,
            description=action.description,
            schema=action.schema,
            function=action.function,
            formatter=formatter,
            extra_parameters=extra_parameters or {},
        )

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON schema for the tool arguments (check mode is not exposed)."""
        schema = self.schema.model_json_schema()
        properties = {
            name: prop
            for name, prop in schema.get("properties", {}).items()
            if name != CHECK_FLAG
        }
        properties.update(self.extra_parameters)
        return {
            "type": "object",
            "properties": properties,
            "required": list(self.schema.required_fields),
        }

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI function schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


__all__ = ["ApprovalFormatter", "ToolResult", "ActionTool"]
