"""
Per-user conversation history.

Queries are recorded for logging and inspection only; history never
feeds back into scoring.
"""

import threading
from collections import deque
from typing import Deque, Dict, List

from ...shared import get_logger
from ...shared.exceptions import ValidationError
from .models import ConversationTurn


class InMemoryConversationMemory:
    """
    Bounded in-memory history keyed by user id.

    Each user has their own lock, so appends for different users never
    contend.
    """

    def __init__(self, max_turns: int = 50):
        if max_turns < 1:
            raise ValidationError("max_turns must be positive")
        self.max_turns = max_turns
        self.logger = get_logger(__name__)

        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._histories: Dict[str, Deque[ConversationTurn]] = {}

    def _user_entry(self, user_id: str):
        with self._registry_lock:
            if user_id not in self._locks:
                self._locks[user_id] = threading.Lock()
                self._histories[user_id] = deque(maxlen=self.max_turns)
            return self._locks[user_id], self._histories[user_id]

    def append(self, user_id: str, role: str, content: str) -> ConversationTurn:
        """Record one turn, dropping the oldest when the history is full."""
        if user_id is None or role is None or content is None:
            raise ValidationError("user_id, role and content are required")

        turn = ConversationTurn(user_id=user_id, role=role, content=content)
        lock, history = self._user_entry(user_id)
        with lock:
            history.append(turn)

        self.logger.debug(f"Recorded {role} turn for user {user_id}")
        return turn

    def get_history(self, user_id: str, limit: int = 10) -> List[ConversationTurn]:
        """
        Most recent turns for a user, oldest first.

        Args:
            user_id: User identifier
            limit: Maximum number of turns to return
        """
        if limit <= 0:
            return []

        with self._registry_lock:
            lock = self._locks.get(user_id)
            history = self._histories.get(user_id)
        if lock is None:
            return []

        with lock:
            turns = list(history)
        return turns[-limit:]

    def user_count(self) -> int:
        with self._registry_lock:
            return len(self._histories)
