"""
Dialog Controller Interface Module

This module defines the interface for the Dialog Controller.
Any concrete implementation must implement the handle_message and get_state methods,
which take a conversation ID and return a response tuple (JSON payload and HTTP status code).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple


class IDialogController(ABC):
    """
    Interface for the Dialog Controller.

    This interface specifies the contract for the HTTP entry points of a conversation.
    """

    @abstractmethod
    def handle_message(self, conversation_id: str) -> Tuple[Dict[str, Any], int]:
        """
        Process the user message of the current request for the given conversation.

        Args:
            conversation_id (str): The unique identifier for the conversation.

        Returns:
            Tuple[Dict[str, Any], int]: A tuple containing the JSON response and HTTP status code.
        """

    @abstractmethod
    def get_state(self, conversation_id: str) -> Tuple[Dict[str, Any], int]:
        """
        Return the persisted state of the given conversation.

        Args:
            conversation_id (str): The unique identifier for the conversation.

        Returns:
            Tuple[Dict[str, Any], int]: A tuple containing the JSON response and HTTP status code.
        """
