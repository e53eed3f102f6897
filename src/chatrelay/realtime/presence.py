"""In-memory registry of who is online and how to reach them."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from chatrelay.utils import now


@dataclass(frozen=True)
class ConnectedSession:
    """Live connection metadata for one logged-in user."""

    user_id: UUID
    handle: str
    email: str | None = None
    connected_at: datetime = field(default_factory=now)


class PresenceRegistry:
    """Maps each user to their single live connection (last connection wins).

    Every method is one atomic step under a lock and never suspends, so the
    registry is safe both on the event loop and from threadpool handlers.
    Nothing is persisted: after a restart every user is offline until they
    reconnect.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, ConnectedSession] = {}
        self._lock = threading.Lock()

    def register(self, user_id: UUID, handle: str, email: str | None = None) -> ConnectedSession | None:
        """Insert or overwrite the entry for user_id and return the entry it replaced, if any."""
        session = ConnectedSession(user_id=user_id, handle=handle, email=email)
        with self._lock:
            previous = self._sessions.get(user_id)
            self._sessions[user_id] = session
        return previous

    def unregister(self, user_id: UUID, handle: str | None = None) -> bool:
        """Remove the entry for user_id. Unknown users are a no-op.

        When handle is given the entry is removed only if it still belongs to
        that handle, so a stale connection closing cannot evict a newer one.
        Returns True if an entry was removed.
        """
        with self._lock:
            current = self._sessions.get(user_id)
            if current is None:
                return False
            if handle is not None and current.handle != handle:
                return False
            del self._sessions[user_id]
            return True

    def lookup(self, user_id: UUID) -> str | None:
        with self._lock:
            session = self._sessions.get(user_id)
        return session.handle if session else None

    def is_online(self, user_id: UUID) -> bool:
        return self.lookup(user_id) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def list_user_ids(self) -> set[UUID]:
        with self._lock:
            return set(self._sessions)

    def sessions(self) -> list[ConnectedSession]:
        """Snapshot of all live sessions, oldest connection first."""
        with self._lock:
            snapshot = list(self._sessions.values())
        return sorted(snapshot, key=lambda s: s.connected_at)
