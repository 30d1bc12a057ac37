"""
Process-wide registry of in-progress multi-part modal submissions.
"""

import threading
from typing import Dict, Iterator, Optional

from discord_github_bot.modals.models import ModalSession
from discord_github_bot.utils.logging import get_logger, log_session_event


class ModalSessionStore:
    """
    Key -> ModalSession registry.

    One instance is created by the bot and handed to the interaction
    handlers. Sessions are never expired automatically: they live until
    they are deleted (issue created, upstream failure, missing session)
    or overwritten by the same user starting over.

    The lock guards the mapping only. Interactions for the same key are
    serialized by Discord (a user cannot submit one form twice at once),
    so sessions themselves are mutated without further locking.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, ModalSession] = {}
        self._lock = threading.Lock()
        self.logger = get_logger(__name__)

    def create(self, key: str, session: ModalSession) -> None:
        """Store `session` under `key`, replacing any previous session."""
        with self._lock:
            replaced = key in self._sessions
            self._sessions[key] = session

        log_session_event(
            "created",
            key,
            field_count=len(session.fields),
            replaced=replaced,
        )

    def get(self, key: str) -> Optional[ModalSession]:
        """Return the session for `key`, or None when there is none."""
        with self._lock:
            return self._sessions.get(key)

    def delete(self, key: str) -> bool:
        """
        Remove the session for `key`.

        Returns:
            True if a session was removed
        """
        with self._lock:
            removed = self._sessions.pop(key, None) is not None

        if removed:
            log_session_event("deleted", key)
        return removed

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._sessions))

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
