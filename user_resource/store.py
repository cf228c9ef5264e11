"""
In-memory user store.

Holds user records keyed by identifier for the lifetime of the process.
Every read and write goes through a single lock, so handlers can run on
the event loop or in a thread pool without racing on the mapping.

Note: nothing is persisted. Restarting the service empties the store.
"""

from threading import Lock
from typing import Dict, List, Optional

import structlog

from .models import User

logger = structlog.get_logger(__name__)


class UserStore:
    """
    Thread-safe mapping from user identifier to user record.

    Records are copied on the way in and on the way out, so the only way
    to change stored state is through put() and delete().
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._lock = Lock()

    def get(self, user_id: str) -> Optional[User]:
        """
        Look up a user.

        Args:
            user_id: User identifier

        Returns:
            A copy of the stored record, or None if absent
        """
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user is not None else None

    def put(self, user: User) -> User:
        """
        Insert or overwrite the record keyed by user.id.

        Args:
            user: Record to store

        Returns:
            The stored record
        """
        stored = user.model_copy()
        with self._lock:
            replaced = stored.id in self._users
            self._users[stored.id] = stored

        logger.info("User stored", user_id=stored.id, replaced=replaced)
        return stored.model_copy()

    def delete(self, user_id: str) -> bool:
        """
        Remove a user if present.

        Args:
            user_id: User identifier

        Returns:
            True if a record was removed, False if there was none
        """
        with self._lock:
            removed = self._users.pop(user_id, None) is not None

        if removed:
            logger.info("User deleted", user_id=user_id)
        return removed

    def list(self) -> List[User]:
        """Return a snapshot of all stored records."""
        with self._lock:
            return [user.model_copy() for user in self._users.values()]

    def count(self) -> int:
        """Number of distinct identifiers stored."""
        with self._lock:
            return len(self._users)

    def clear(self) -> None:
        """Drop every record."""
        with self._lock:
            self._users.clear()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._users
