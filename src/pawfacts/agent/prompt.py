"""System prompt and tool-result text seen by the model."""

from typing import Any

INSTRUCTIONS = (
    "You are an agent that can fetch random dog images and cat facts. "
    "When asked, use the available actions. "
    "Inform the user about the latest fetched data if available."
)

TOOL_RULES = (
    "When you need to use a tool, respond with a tool call.\n"
    "If a tool reports a failure, tell the user and do not invent a result."
)


def _describe_tools(tools_schema: list[dict[str, Any]]) -> str:
    lines = [f"- {t['function']['name']}: {t['function']['description']}" for t in tools_schema]
    return "\n".join(lines) or "No tools available."


def build_system_prompt(
    tools_schema: list[dict[str, Any]],
    context_block: str = "",
) -> str:
    """Instructions, the tool list, then the rendered session facts.

    Args:
        tools_schema: Function-calling schemas from the registry.
        context_block: Output of ``FactStore.render()``; omitted when blank.
    """
    sections = [
        INSTRUCTIONS,
        "You have access to the following tools:\n" + _describe_tools(tools_schema),
        TOOL_RULES,
    ]
    if context_block.strip():
        sections.append(context_block)
    return "\n\n".join(sections)


def format_tool_result(tool_name: str, success: bool, output: str, error: str | None) -> str:
    if success:
        return f"[{tool_name}] Success:\n{output}"
    return f"[{tool_name}] Error: {error}\n{output}".rstrip()
