"""
Memory State Store Module

In-process implementation of the IStateStore interface. States are kept in their
serialized form so that the store never shares mutable data with its callers.
"""

import threading
from typing import Any, Dict, Optional

from adapters.loggers.logger_adapter import app_logger
from core.domain.flow_model import ConversationState
from core.interfaces.state_store_interface import IStateStore


class InMemoryStateStore(IStateStore):
    """
    Conversation state store backed by a dictionary.

    Suitable for a single process; conversations are lost on restart.
    """

    def __init__(self):
        self._states: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        app_logger.info("InMemoryStateStore initialized")

    def load(self, conversation_id: str) -> Optional[ConversationState]:
        with self._lock:
            data = self._states.get(conversation_id)
        if data is None:
            return None
        return ConversationState.from_dict(data)

    def save(self, conversation_id: str, state: ConversationState) -> None:
        data = state.to_dict()
        with self._lock:
            self._states[conversation_id] = data
        app_logger.debug("Saved state for conversation %s: %s", conversation_id, data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
