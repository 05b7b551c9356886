"""Session management and persistence."""

from .manager import (
    SessionBusyError,
    SessionConfig,
    SessionManager,
    SessionNotFoundError,
    SessionState,
)

__all__ = [
    "SessionBusyError",
    "SessionConfig",
    "SessionManager",
    "SessionNotFoundError",
    "SessionState",
]
