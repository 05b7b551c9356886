"""Structured event log, one JSON object per line.

Every fetch, tool call and agent stop is recorded with the chat it belongs
to. When the file reaches max_size_mb it is shifted to ``logs.1.jsonl``
(older backups move up one number) and at most ``backups`` are kept.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .facts.models import FactKind


@dataclass
class LogEntry:
    """A single log line. Unset fields are left out of the output."""

    timestamp: str
    event: str
    chat_id: str | None = None
    kind: str | None = None
    tool_name: str | None = None
    success: bool | None = None
    duration_ms: float | None = None
    stopped_reason: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if v is not None and v != {}}
        if "duration_ms" in data:
            data["duration_ms"] = round(data["duration_ms"], 1)
        return data


# Keywords that log() accepts as LogEntry fields rather than extra
ENTRY_FIELDS = frozenset(LogEntry.__dataclass_fields__) - {"timestamp", "event", "chat_id", "extra"}


class JSONLLogger:
    """Appends LogEntry lines to ``<log_dir>/<filename>``."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "logs.jsonl",
        max_size_mb: float = 10.0,
        backups: int = 5,
    ) -> None:
        self.log_dir = Path(log_dir) if log_dir is not None else Path.home() / ".pawfacts" / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.backups = backups
        self._current_chat_id: str | None = None

    @property
    def log_path(self) -> Path:
        return self.log_dir / self.filename

    def backup_path(self, n: int) -> Path:
        return self.log_dir / f"{self.log_path.stem}.{n}{self.log_path.suffix}"

    def set_chat_id(self, chat_id: str | None) -> None:
        """Default chat_id for entries that don't name one."""
        self._current_chat_id = chat_id

    def _rotate(self) -> None:
        oldest = self.backup_path(self.backups)
        if oldest.exists():
            oldest.unlink()
        for n in range(self.backups - 1, 0, -1):
            if self.backup_path(n).exists():
                self.backup_path(n).rename(self.backup_path(n + 1))
        self.log_path.rename(self.backup_path(1))

    def log(self, event: str, *, chat_id: str | None = None, **fields: Any) -> None:
        """Write one entry. Keyword names matching LogEntry fields fill them; the rest go in extra."""
        known = {k: fields.pop(k) for k in list(fields) if k in ENTRY_FIELDS}
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            chat_id=chat_id or self._current_chat_id,
            extra={k: v for k, v in fields.items() if v is not None},
            **known,
        )

        if self.log_path.exists() and self.log_path.stat().st_size >= self.max_size_bytes:
            self._rotate()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def _log_outcome(
        self,
        event: str,
        ok: bool,
        chat_id: str | None,
        elapsed: float | None,
        error: str | None,
        **fields: Any,
    ) -> None:
        # Successful outcomes never carry an error
        self.log(event, chat_id=chat_id, success=ok, duration_ms=elapsed, error=None if ok else error, **fields)

    def log_fact_fetch(
        self,
        kind: FactKind,
        success: bool,
        *,
        chat_id: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        self._log_outcome("fact_fetch", success, chat_id, duration_ms, error, kind=kind.value)

    def log_tool_call(self, tool_name: str, args: dict[str, Any], *, chat_id: str | None = None) -> None:
        self.log("tool_call", chat_id=chat_id, tool_name=tool_name, tool_args=args)

    def log_tool_result(
        self,
        tool_name: str,
        success: bool,
        *,
        chat_id: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        self._log_outcome("tool_result", success, chat_id, duration_ms, error, tool_name=tool_name)

    def log_agent_stop(self, reason: str, *, chat_id: str | None = None, turns: int | None = None) -> None:
        self.log("agent_stop", chat_id=chat_id, stopped_reason=reason, turns=turns)


_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Process-wide logger, created on first use."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Replace the process-wide logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
