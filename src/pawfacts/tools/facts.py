"""Tools exposing the fact action handlers to the agent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..facts import ActionOutcome, FactActionHandler, FactFetcher, FactKind
from .base import Tool, ToolResult

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..session import SessionManager

DEFAULT_CHAT_ID = "default"

DESCRIPTIONS = {
    FactKind.DOG_IMAGE: "Fetches a random dog image URL.",
    FactKind.CAT_FACT: "Fetches a random cat fact.",
}


def outcome_to_tool_result(kind: FactKind, outcome: ActionOutcome) -> ToolResult:
    """Wrap an action outcome in the registry's result type."""
    return ToolResult(
        success=outcome.success,
        output=outcome.message,
        error=outcome.error,
        metadata={"kind": kind.value, **outcome.to_dict()},
    )


class FetchFactTool(Tool):
    """Runs a fact action handler for the calling session."""

    session_aware = True

    def __init__(self, handler: FactActionHandler) -> None:
        self.handler = handler

    @property
    def name(self) -> str:
        return f"get_{self.handler.kind.value}"

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self.handler.kind]

    async def execute(self, chat_id: str = DEFAULT_CHAT_ID, **kwargs: Any) -> ToolResult:
        outcome = await self.handler.run(chat_id)
        return outcome_to_tool_result(self.handler.kind, outcome)


def build_fact_tools(
    fetcher: FactFetcher,
    sessions: SessionManager,
    logger: JSONLLogger | None = None,
) -> list[FetchFactTool]:
    """Create one tool per fact kind, in enumeration order."""
    return [
        FetchFactTool(FactActionHandler(kind, fetcher, sessions, logger=logger))
        for kind in FactKind
    ]
