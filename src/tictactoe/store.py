"""Session storage: the contract the service relies on and an in-memory version."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Protocol

from .errors import NotFoundError

if TYPE_CHECKING:
    from .session import GameSession


class SessionStore(Protocol):
    """Key-value map from session id to session.

    ``update`` must behave as if serialized per id: the function sees the
    latest stored session and its result replaces it atomically.
    """

    def get(self, session_id: str) -> Optional["GameSession"]:
        ...

    def put(self, session: "GameSession") -> None:
        ...

    def remove(self, session_id: str) -> bool:
        ...

    def update(
        self, session_id: str, fn: Callable[["GameSession"], "GameSession"]
    ) -> "GameSession":
        ...

    def __len__(self) -> int:
        ...


class InMemorySessionStore:
    """Thread-safe dict of sessions with one lock per session id."""

    def __init__(self) -> None:
        self._sessions: Dict[str, "GameSession"] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._sessions))

    def get(self, session_id: str) -> Optional["GameSession"]:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session: "GameSession") -> None:
        with self._lock:
            self._sessions[session.id] = session
            self._locks.setdefault(session.id, threading.Lock())

    def remove(self, session_id: str) -> bool:
        with self._lock:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def update(
        self, session_id: str, fn: Callable[["GameSession"], "GameSession"]
    ) -> "GameSession":
        with self._lock:
            session_lock = self._locks.get(session_id)
        if session_lock is None:
            raise NotFoundError(f"Game not found: {session_id}")

        with session_lock:
            with self._lock:
                current = self._sessions.get(session_id)
            if current is None:
                raise NotFoundError(f"Game not found: {session_id}")
            updated = fn(current)
            with self._lock:
                if session_id in self._sessions:
                    self._sessions[session_id] = updated
            return updated

    def purge_older_than(self, max_age_seconds: float) -> int:
        """Drop sessions created more than ``max_age_seconds`` ago."""

        now = time.time()
        with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if now - session.created_at >= max_age_seconds
            ]
            for session_id in expired:
                self._sessions.pop(session_id, None)
                self._locks.pop(session_id, None)
        return len(expired)
