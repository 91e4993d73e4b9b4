"""Pending download confirmations, one slot per conversation."""

import logging
import threading
from typing import Dict, List, Optional

from file_agent.schemas.agent import PendingConfirmation
from file_agent.schemas.files import FileInfo

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


class DialogStateStore:
    """
    Holds at most one PendingConfirmation per session id.

    Callers that do not supply a session id all share DEFAULT_SESSION_ID.
    All operations take the same lock, so a consume can never observe a
    half-written set.
    """

    def __init__(self):
        self._pending: Dict[str, PendingConfirmation] = {}
        self._lock = threading.Lock()

    def is_pending(self, session_id: str = DEFAULT_SESSION_ID) -> bool:
        with self._lock:
            pending = self._pending.get(session_id)
            return pending is not None and pending.active

    def set(
        self,
        candidates: List[FileInfo],
        target_directory: str,
        query: str,
        session_id: str = DEFAULT_SESSION_ID,
    ) -> None:
        """Replace the session's pending confirmation. An empty candidate list just clears it."""
        with self._lock:
            if not candidates:
                self._pending.pop(session_id, None)
                return
            if session_id in self._pending:
                logger.info("Discarding unresolved confirmation for session %s", session_id)
            self._pending[session_id] = PendingConfirmation(
                candidates=list(candidates),
                targetDirectory=target_directory,
                originalQuery=query,
            )

    def consume(self, session_id: str = DEFAULT_SESSION_ID) -> Optional[PendingConfirmation]:
        """Return and remove the session's pending confirmation, if any."""
        with self._lock:
            pending = self._pending.pop(session_id, None)
        if pending is None or not pending.active:
            return None
        return pending

    def clear(self, session_id: str = DEFAULT_SESSION_ID) -> None:
        with self._lock:
            self._pending.pop(session_id, None)

    def session_count(self) -> int:
        with self._lock:
            return len(self._pending)
