"""Process-wide map of online users to their live connections."""
from __future__ import annotations

import logging

from realtime_service.domain.entities.connection import Connection

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Single owner of "who is online" for this process.

    Only the connection manager mutates it; relay, typing and notification
    components read it. All operations are synchronous and never raise.
    """

    def __init__(self) -> None:
        self._by_user: dict[str, dict[str, Connection]] = {}
        self._owner: dict[str, str] = {}

    def register(self, user_id: str, connection: Connection) -> bool:
        """Add ``connection`` under ``user_id``. Returns True if the user just came online."""
        previous = self._owner.get(connection.id)
        if previous is not None and previous != user_id:
            # a session re-identified as someone else: move it
            self._drop(connection.id, previous)
        handles = self._by_user.setdefault(user_id, {})
        came_online = not handles
        handles[connection.id] = connection
        self._owner[connection.id] = user_id
        return came_online

    def deregister(self, connection: Connection) -> str | None:
        """Remove ``connection``. Returns the owning user id, or None if unknown."""
        user_id = self._owner.pop(connection.id, None)
        if user_id is None:
            return None
        self._drop(connection.id, user_id)
        return user_id

    def _drop(self, connection_id: str, user_id: str) -> None:
        handles = self._by_user.get(user_id)
        if handles is None:
            return
        handles.pop(connection_id, None)
        if not handles:
            del self._by_user[user_id]
            logger.debug("User %s is now offline", user_id)

    def is_online(self, user_id: str) -> bool:
        return bool(self._by_user.get(user_id))

    def handles_for(self, user_id: str) -> list[Connection]:
        return list(self._by_user.get(user_id, {}).values())

    def owner_of(self, connection: Connection) -> str | None:
        return self._owner.get(connection.id)

    def online_users(self) -> list[str]:
        return sorted(self._by_user)

    def all_connections(self) -> list[Connection]:
        return [c for handles in self._by_user.values() for c in handles.values()]

    def __len__(self) -> int:
        return len(self._owner)
