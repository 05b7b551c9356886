"""Agent loop: ask the model, run the tools it picks, feed results back."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from groq import AsyncGroq

from ..tools import ToolRegistry, ToolResult
from .prompt import build_system_prompt, format_tool_result

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..session import SessionManager


class StopReason(Enum):
    """Reasons for stopping the agent loop."""

    COMPLETE = "complete"
    MAX_TURNS = "max_turns"
    REPEATED_CALL = "repeated_call"
    CONSECUTIVE_ERRORS = "consecutive_errors"


@dataclass
class AgentConfig:
    """Configuration for the agent loop."""

    model: str = "llama-3.3-70b-versatile"
    max_turns: int = 10
    max_consecutive_errors: int = 3
    # Identical tool-call batches on consecutive turns before giving up
    max_repeated_calls: int = 2


@dataclass
class AgentResult:
    """Result from running the agent loop."""

    response: str
    stop_reason: StopReason
    turns: int
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class _PendingCall:
    id: str
    name: str
    args: dict[str, Any]

    @property
    def record(self) -> dict[str, Any]:
        return {"name": self.name, "args": self.args}


class _Breaker:
    """Tracks repeated batches and consecutive failures within one run."""

    def __init__(self, config: AgentConfig) -> None:
        self.config = config
        self.last_batch: str | None = None
        self.repeats = 0
        self.errors = 0

    def repeated(self, calls: list[_PendingCall]) -> bool:
        """True once the same batch of calls has come back max_repeated_calls turns in a row.

        Several identical calls inside one message are a single batch, so
        "two dog pictures" is allowed.
        """
        signature = json.dumps([c.record for c in calls], sort_keys=True)
        if signature == self.last_batch:
            self.repeats += 1
        else:
            self.last_batch = signature
            self.repeats = 1
        return self.repeats >= self.config.max_repeated_calls

    def failed(self, result: ToolResult) -> bool:
        """Count a result; True when too many failures came in a row."""
        self.errors = 0 if result.success else self.errors + 1
        return self.errors >= self.config.max_consecutive_errors


def _parse_calls(tool_calls: Any) -> list[_PendingCall]:
    calls = []
    for tc in tool_calls:
        try:
            args = json.loads(tc.function.arguments or "{}")
        except json.JSONDecodeError:
            args = {}
        if not isinstance(args, dict):
            args = {}
        calls.append(_PendingCall(id=tc.id, name=tc.function.name, args=args))
    return calls


def _assistant_entry(content: str | None, calls: list[_PendingCall]) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": content,
        "tool_calls": [
            {
                "id": c.id,
                "type": "function",
                "function": {"name": c.name, "arguments": json.dumps(c.args)},
            }
            for c in calls
        ],
    }


class AgentLoop:
    """Think, act, observe, until the model answers in plain text."""

    def __init__(
        self,
        registry: ToolRegistry,
        config: AgentConfig | None = None,
        groq_client: AsyncGroq | None = None,
        sessions: SessionManager | None = None,
        logger: JSONLLogger | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or AgentConfig()
        self.client = groq_client or AsyncGroq(api_key=os.getenv("GROQ_API_KEY"))
        self.sessions = sessions
        self.logger = logger

    def _context_block(self, chat_id: str | None) -> str:
        """The session's latest facts, for the system prompt."""
        if self.sessions is None or chat_id is None:
            return ""
        return self.sessions.facts(chat_id).render()

    def _initial_messages(
        self,
        message: str,
        chat_id: str | None,
        history: list[dict[str, Any]] | None,
        tools_schema: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        system = build_system_prompt(tools_schema, self._context_block(chat_id))
        return [
            {"role": "system", "content": system},
            *(history or []),
            {"role": "user", "content": message},
        ]

    async def _execute(self, call: _PendingCall, chat_id: str | None) -> ToolResult:
        if self.logger is not None:
            self.logger.log_tool_call(call.name, call.args, chat_id=chat_id)

        start_time = time.time()
        result = await self.registry.dispatch(call.name, call.args, chat_id=chat_id)
        duration_ms = (time.time() - start_time) * 1000

        if self.logger is not None:
            self.logger.log_tool_result(
                call.name,
                result.success,
                chat_id=chat_id,
                duration_ms=duration_ms,
                error=result.error,
            )
        return result

    def _stop(
        self,
        response: str,
        stop_reason: StopReason,
        turns: int,
        tool_calls: list[dict[str, Any]],
        chat_id: str | None,
    ) -> AgentResult:
        if self.logger is not None:
            self.logger.log_agent_stop(stop_reason.value, chat_id=chat_id, turns=turns)
        return AgentResult(response, stop_reason, turns, tool_calls)

    async def run(
        self,
        message: str,
        chat_id: str | None = None,
        history: list[dict[str, Any]] | None = None,
    ) -> AgentResult:
        """Run the agent loop for a user message.

        Args:
            message: The current user message.
            chat_id: Session whose facts are shown to the model and updated
                     by fact tools.
            history: Earlier user/assistant turns, oldest first.

        Returns:
            AgentResult with response and metadata.
        """
        breaker = _Breaker(self.config)
        tools_schema = self.registry.get_tools_schema()
        messages = self._initial_messages(message, chat_id, history, tools_schema)
        calls_made: list[dict[str, Any]] = []

        for turn in range(1, self.config.max_turns + 1):
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                tools=tools_schema or None,
                tool_choice="auto" if tools_schema else None,
            )
            reply = response.choices[0].message

            if not reply.tool_calls:
                return self._stop(reply.content or "", StopReason.COMPLETE, turn, calls_made, chat_id)

            calls = _parse_calls(reply.tool_calls)
            calls_made.extend(c.record for c in calls)

            if breaker.repeated(calls):
                return self._stop(
                    "Stopped: repeated tool call detected",
                    StopReason.REPEATED_CALL,
                    turn,
                    calls_made,
                    chat_id,
                )

            messages.append(_assistant_entry(reply.content, calls))

            for call in calls:
                result = await self._execute(call, chat_id)

                if breaker.failed(result):
                    return self._stop(
                        f"Stopped: {self.config.max_consecutive_errors} consecutive errors",
                        StopReason.CONSECUTIVE_ERRORS,
                        turn,
                        calls_made,
                        chat_id,
                    )

                messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": format_tool_result(call.name, result.success, result.output, result.error),
                })

        return self._stop(
            "Max turns reached",
            StopReason.MAX_TURNS,
            self.config.max_turns,
            calls_made,
            chat_id,
        )
