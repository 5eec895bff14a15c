"""
State Store Interface Module

This module defines the interface for the conversation state store.
Any concrete implementation must be able to load and save a ConversationState
keyed by conversation id.
"""

from abc import ABC, abstractmethod
from typing import Optional

from core.domain.flow_model import ConversationState


class IStateStore(ABC):
    """
    Interface for the conversation state store.

    Implementations must hand out states that callers may mutate freely: a state
    returned by ``load`` must not share mutable data with the stored copy.
    """

    @abstractmethod
    def load(self, conversation_id: str) -> Optional[ConversationState]:
        """
        Load the state of a conversation.

        Args:
            conversation_id (str): The unique identifier of the conversation.

        Returns:
            Optional[ConversationState]: The stored state, or None if absent.

        Raises:
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    def save(self, conversation_id: str, state: ConversationState) -> None:
        """
        Persist the state of a conversation.

        Args:
            conversation_id (str): The unique identifier of the conversation.
            state (ConversationState): The state to persist.

        Raises:
            StoreError: If the state could not be written.
        """
