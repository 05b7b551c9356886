"""Tool interface shared by everything the agent can call."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

NO_PARAMETERS: dict[str, Any] = {"type": "object", "properties": {}, "required": []}


@dataclass
class ToolResult:
    """Result from tool execution."""

    success: bool
    output: str
    error: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def failure(cls, error: str) -> "ToolResult":
        return cls(success=False, output="", error=error)


class Tool(ABC):
    """Something the model can call by name."""

    # Tools that act on session state get the caller's chat_id on dispatch
    session_aware: bool = False

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for the arguments; no arguments unless overridden."""
        return NO_PARAMETERS

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult: ...

    def get_schema(self) -> dict[str, Any]:
        """Function-calling schema sent to the LLM."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def validate_args(self, args: dict[str, Any]) -> str | None:
        """Return an error message, or None when args are acceptable.

        Only required names and string types are checked; arguments the
        schema does not declare are ignored.
        """
        for name in self.parameters.get("required", []):
            if name not in args:
                return f"Missing required argument: {name}"

        for name, schema in self.parameters.get("properties", {}).items():
            if schema.get("type") == "string" and name in args and not isinstance(args[name], str):
                return f"Argument '{name}' must be a string"

        return None
