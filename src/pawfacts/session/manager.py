"""Per-chat session state: conversation history plus the latest facts."""

import asyncio
import json
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator

from ..facts.models import FactKind, FactStore


class SessionNotFoundError(LookupError):
    """Raised when a session is expected to exist but does not."""

    def __init__(self, chat_id: str) -> None:
        self.chat_id = chat_id
        super().__init__(f"Could not find session state for id: {chat_id}")


class SessionBusyError(RuntimeError):
    """Raised when a session is already handling a turn."""

    def __init__(self, chat_id: str) -> None:
        self.chat_id = chat_id
        super().__init__("⏳ Still working on the previous request. Please wait.")


@dataclass
class SessionState:
    """Everything remembered for one chat_id."""

    chat_id: str
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    messages: list[dict[str, Any]] = field(default_factory=list)
    facts: FactStore = field(default_factory=FactStore)

    def touch(self) -> None:
        self.last_activity = time.time()

    def to_dict(self) -> dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "created_at": self.created_at,
            "last_activity": self.last_activity,
            "messages": list(self.messages),
            "facts": self.facts.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionState":
        """Rebuild a session from its saved form.

        Raises ValueError when the data is not a saved session.
        """
        if not isinstance(data, dict) or not isinstance(data.get("chat_id"), str):
            raise ValueError("Session data must be an object with a chat_id")

        messages = data.get("messages")
        facts = data.get("facts")
        now = time.time()
        return cls(
            chat_id=data["chat_id"],
            created_at=data.get("created_at", now),
            last_activity=data.get("last_activity", now),
            messages=[
                m for m in messages
                if isinstance(m, dict) and isinstance(m.get("role"), str) and isinstance(m.get("content"), str)
            ] if isinstance(messages, list) else [],
            facts=FactStore.from_dict(facts) if isinstance(facts, dict) else FactStore(),
        )


@dataclass
class SessionConfig:
    """Configuration for session manager.

    When sessions_dir is None, sessions live in memory only.
    """

    sessions_dir: Path | None = None


class SessionManager:
    """Owns the mapping from chat_id to session state, plus one lock per chat."""

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config or SessionConfig()
        self._sessions: dict[str, SessionState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

        if self.config.sessions_dir is not None:
            self.config.sessions_dir.mkdir(parents=True, exist_ok=True)

    @property
    def persistent(self) -> bool:
        return self.config.sessions_dir is not None

    def _session_file(self, chat_id: str) -> Path:
        assert self.config.sessions_dir is not None
        return self.config.sessions_dir / f"{chat_id}.json"

    def _load(self, chat_id: str) -> SessionState | None:
        """Read a saved session; unreadable files count as missing."""
        if not self.persistent:
            return None

        path = self._session_file(chat_id)
        if not path.exists():
            return None

        try:
            return SessionState.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except ValueError:
            # JSONDecodeError is a ValueError too
            return None

    def _write_back(self, session: SessionState) -> None:
        if self.persistent:
            self._session_file(session.chat_id).write_text(
                json.dumps(session.to_dict(), indent=2), encoding="utf-8"
            )

    def find_session(self, chat_id: str) -> SessionState | None:
        """Get an existing session (in memory or on disk) without creating one."""
        session = self._sessions.get(chat_id)
        if session is None:
            session = self._load(chat_id)
            if session is not None:
                self._sessions[chat_id] = session
        return session

    def get_session(self, chat_id: str) -> SessionState:
        """Get or create a session for chat_id."""
        session = self.find_session(chat_id)
        if session is None:
            session = self._sessions[chat_id] = SessionState(chat_id=chat_id)
        return session

    def facts(self, chat_id: str) -> FactStore:
        """The fact store owned by chat_id's session."""
        return self.get_session(chat_id).facts

    def update_fact(self, chat_id: str, kind: FactKind, value: str) -> None:
        """Read the session, store the new value and write the session back.

        Raises:
            SessionNotFoundError: The session does not exist.
        """
        session = self.find_session(chat_id)
        if session is None:
            raise SessionNotFoundError(chat_id)

        session.facts.set(kind, value)
        session.touch()
        self._write_back(session)

    def add_message(self, chat_id: str, role: str, content: str) -> None:
        session = self.get_session(chat_id)
        session.messages.append({"role": role, "content": content, "timestamp": time.time()})
        session.touch()

    def history(self, chat_id: str, limit: int = 20) -> list[dict[str, str]]:
        """Most recent messages in chat API format (role and content only)."""
        if limit <= 0:
            return []
        return [
            {"role": m["role"], "content": m["content"]}
            for m in self.get_session(chat_id).messages[-limit:]
        ]

    def is_busy(self, chat_id: str) -> bool:
        lock = self._locks.get(chat_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def turn(self, chat_id: str) -> AsyncIterator[SessionState]:
        """Hold chat_id's session for one turn, then write it back.

        Does not wait: a session already in a turn raises SessionBusyError.
        """
        lock = self._locks.setdefault(chat_id, asyncio.Lock())
        if lock.locked():
            raise SessionBusyError(chat_id)

        async with lock:
            session = self.get_session(chat_id)
            session.touch()
            try:
                yield session
            finally:
                self._write_back(session)
