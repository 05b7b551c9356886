"""Tool registry and tool implementations."""

from .base import Tool, ToolResult
from .facts import DEFAULT_CHAT_ID, FetchFactTool, build_fact_tools
from .registry import ToolRegistry

__all__ = [
    "DEFAULT_CHAT_ID",
    "FetchFactTool",
    "Tool",
    "ToolResult",
    "ToolRegistry",
    "build_fact_tools",
]
