"""Fetch-and-remember action handlers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .fetcher import FactFetcher
from .models import FactKind

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..session import SessionManager


@dataclass(frozen=True)
class ActionOutcome:
    """Structured result handed back to the agent."""

    success: bool
    message: str
    value: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and (self.value is None or self.error is not None):
            raise ValueError("A successful outcome needs a value and no error")
        if not self.success and (self.value is not None or self.error is None):
            raise ValueError("A failed outcome needs an error and no value")

    @classmethod
    def fetched(cls, kind: FactKind, value: str) -> ActionOutcome:
        return cls(success=True, value=value, message=f"Fetched {kind.label}: {value}")

    @classmethod
    def failed(cls, kind: FactKind, error: str) -> ActionOutcome:
        return cls(success=False, error=error, message=f"Failed to fetch {kind.label}.")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding absent fields."""
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.value is not None:
            data["value"] = self.value
        if self.error is not None:
            data["error"] = self.error
        return data


class FactActionHandler:
    """Fetches one fact and, on success, stores it in the caller's session."""

    def __init__(
        self,
        kind: FactKind,
        fetcher: FactFetcher,
        sessions: SessionManager,
        logger: JSONLLogger | None = None,
    ) -> None:
        self.kind = kind
        self.fetcher = fetcher
        self.sessions = sessions
        self.logger = logger

    def _log(self, chat_id: str, success: bool, duration_ms: float, error: str | None = None) -> None:
        if self.logger is not None:
            self.logger.log_fact_fetch(
                self.kind,
                success,
                chat_id=chat_id,
                duration_ms=duration_ms,
                error=error,
            )

    async def run(self, chat_id: str) -> ActionOutcome:
        """Fetch, then update the session's store only if the fetch succeeded."""
        start_time = time.time()
        result = await self.fetcher.fetch(self.kind)
        duration_ms = (time.time() - start_time) * 1000

        if not result.ok:
            assert result.error is not None
            self._log(chat_id, False, duration_ms, result.error)
            return ActionOutcome.failed(self.kind, result.error)

        assert result.value is not None
        try:
            self.sessions.update_fact(chat_id, self.kind, result.value)
        except LookupError as e:
            self._log(chat_id, False, duration_ms, str(e))
            return ActionOutcome.failed(self.kind, str(e))

        self._log(chat_id, True, duration_ms)
        return ActionOutcome.fetched(self.kind, result.value)
