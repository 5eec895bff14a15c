"""
Output Channel Interface Module

This module defines the interface through which the flow controller emits
messages. The controller never talks to a transport directly.
"""

from abc import ABC, abstractmethod

from core.domain.flow_model import InputHint


class IOutputChannel(ABC):
    """
    Interface for the output channel.

    Sending is fire-and-forget from the controller's perspective: failures are
    reported by raising ChannelError and are not retried.
    """

    @abstractmethod
    def send(
        self,
        conversation_id: str,
        text: str,
        input_hint: InputHint = InputHint.ACCEPTING_INPUT,
    ) -> None:
        """
        Send a message to a conversation.

        Args:
            conversation_id (str): The unique identifier of the conversation.
            text (str): The message text.
            input_hint (InputHint): How the client should treat its input box.

        Raises:
            ChannelError: If the message could not be delivered.
        """
