"""Tool registry: lookup by name and safe dispatch."""

from typing import Any

from .base import Tool, ToolResult


class ToolRegistry:
    """Registered tools, in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        return list(self._tools)

    def get_tools_schema(self) -> list[dict[str, Any]]:
        """Schemas for all tools (for LLM function calling)."""
        return [tool.get_schema() for tool in self._tools.values()]

    async def dispatch(
        self,
        tool_name: str,
        args: dict[str, Any],
        chat_id: str | None = None,
    ) -> ToolResult:
        """Run a tool by name. Failures of any kind come back as a failed result.

        Session-aware tools also receive chat_id, when one is given.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            return ToolResult.failure(f"Unknown tool: {tool_name}")

        error = tool.validate_args(args)
        if error is not None:
            return ToolResult.failure(error)

        # The session is chosen by the caller, never by the model
        call_args = {k: v for k, v in args.items() if not (tool.session_aware and k == "chat_id")}
        if tool.session_aware and chat_id is not None:
            call_args["chat_id"] = chat_id

        try:
            return await tool.execute(**call_args)
        except Exception as e:
            return ToolResult.failure(f"Tool execution failed: {e}")
