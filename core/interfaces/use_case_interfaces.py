"""
Use Case Interfaces Module

This module defines the interfaces for use cases within the Dialog Flow Orchestrator application.
These interfaces establish the contract that concrete use case implementations must follow,
ensuring consistency and separation of concerns across the application.
"""

from abc import ABC, abstractmethod
from typing import Optional

from core.domain.flow_model import ConversationState, TurnReport


class IHandleTurnUseCase(ABC):
    """
    Interface for the Handle Turn Use Case.

    This interface defines the contract for processing one user message of a
    conversation and collecting the bot's replies.
    """

    @abstractmethod
    def execute(self, conversation_id: str, user_text: str) -> TurnReport:
        """
        Execute the handle turn use case.

        Args:
            conversation_id (str): The unique identifier of the conversation.
            user_text (str): The text input provided by the user.

        Returns:
            TurnReport: The outcome of the turn, including the replies sent.
        """

    @abstractmethod
    def get_state(self, conversation_id: str) -> Optional[ConversationState]:
        """
        Return the persisted state of a conversation.

        Args:
            conversation_id (str): The unique identifier of the conversation.

        Returns:
            Optional[ConversationState]: The state, or None if the conversation is unknown.
        """
