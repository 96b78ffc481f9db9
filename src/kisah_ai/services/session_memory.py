"""Per-conversation message history.

Each session keeps at most `history_limit` messages; appending beyond
that drops the oldest ones first. Sessions are created lazily on first
reference and live for the lifetime of the process.
"""

import threading

from kisah_ai.config import settings
from kisah_ai.entities import DEFAULT_SESSION_ID, MessageEntity, Role, SessionEntity
from kisah_ai.utils import Clock, now_ms


class SessionMemory:
    """Bounded, process-wide session store."""

    def __init__(self, history_limit: int | None = None, clock: Clock | None = None) -> None:
        self._limit = history_limit or settings.session_history_limit
        self._clock = clock or now_ms
        self._sessions: dict[str, SessionEntity] = {}
        self._lock = threading.Lock()

    def _get_locked(self, session_id: str) -> SessionEntity:
        session = self._sessions.get(session_id)
        if session is None:
            session = SessionEntity(id=session_id)
            self._sessions[session_id] = session
        return session

    def get(self, session_id: str | None = None) -> SessionEntity:
        """Return a snapshot of the session, creating it empty on first access."""
        session_id = session_id or DEFAULT_SESSION_ID
        with self._lock:
            session = self._get_locked(session_id)
            return SessionEntity(id=session.id, history=list(session.history))

    def append(self, session_id: str | None, role: Role, text: str) -> MessageEntity:
        """Append a message stamped with the current time, then trim to the limit."""
        session_id = session_id or DEFAULT_SESSION_ID
        message = MessageEntity(role=role, text=text, ts=self._clock())
        with self._lock:
            session = self._get_locked(session_id)
            session.history.append(message)
            if len(session.history) > self._limit:
                del session.history[: len(session.history) - self._limit]
        return message

    def history(self, session_id: str | None = None) -> list[MessageEntity]:
        """Full history, oldest first."""
        return self.get(session_id).history

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def delete(self, session_id: str) -> bool:
        """Forget a session. Returns False if it was never referenced."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    @property
    def history_limit(self) -> int:
        return self._limit
