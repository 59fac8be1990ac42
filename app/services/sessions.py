"""Server-side sessions keyed by an opaque id carried in a signed cookie."""
from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Literal, Protocol

FlashKind = Literal["error", "success"]


@dataclass(frozen=True)
class Flash:
    kind: FlashKind
    message: str


@dataclass
class SessionData:
    id: str
    user_id: int | None = None
    flash: Flash | None = None
    touched_at: float = field(default_factory=lambda: time.monotonic())

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def set_flash(self, kind: FlashKind, message: str) -> None:
        self.flash = Flash(kind, message)

    def pop_flash(self) -> Flash | None:
        """Read-once: the flash is gone after this call."""
        flash, self.flash = self.flash, None
        return flash


class SessionStore(Protocol):
    def create(self) -> SessionData: ...

    def load(self, session_id: str) -> SessionData | None: ...

    def save(self, session: SessionData) -> None: ...

    def destroy(self, session_id: str) -> None: ...

    def __contains__(self, session_id: str) -> bool: ...


class InMemorySessionStore:
    """Process-local store; sessions idle longer than ``max_age`` seconds expire.

    A new session is only kept once it carries a user id or a flash, so
    anonymous one-off requests leave nothing behind. Expired entries are
    swept on save, at most once per ``sweep_interval`` seconds.
    """

    def __init__(self, max_age: int, sweep_interval: float = 60):
        self.max_age = max_age
        self.sweep_interval = sweep_interval
        self._sessions: dict[str, SessionData] = {}
        self._last_sweep = time.monotonic()

    def create(self) -> SessionData:
        return SessionData(id=secrets.token_urlsafe(32), touched_at=time.monotonic())

    def load(self, session_id: str) -> SessionData | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session, time.monotonic()):
            self.destroy(session_id)
            return None
        return session

    def save(self, session: SessionData) -> None:
        now = time.monotonic()
        if now - self._last_sweep >= self.sweep_interval:
            self.sweep(now)
        if session.id not in self._sessions and not (session.is_authenticated or session.flash):
            return
        session.touched_at = now
        self._sessions[session.id] = session

    def sweep(self, now: float | None = None) -> int:
        """Drop expired sessions; returns how many were removed."""
        now = time.monotonic() if now is None else now
        expired = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in expired:
            del self._sessions[sid]
        self._last_sweep = now
        return len(expired)

    def destroy(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def _expired(self, session: SessionData, now: float) -> bool:
        return now - session.touched_at > self.max_age

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
