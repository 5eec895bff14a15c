"""
Flow Controller Interface Module

This module defines the interface of the multi-step conversation flow controller.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Union

from core.domain.flow_model import Step, TurnInput, TurnReport, TurnResult


class IFlowController(ABC):
    """
    Interface for the flow controller.

    A flow controller owns registered flows and drives conversations through them,
    one incoming turn at a time.
    """

    @abstractmethod
    def register_flow(self, flow_id: str, steps: Sequence[Step]) -> None:
        """
        Register an ordered sequence of steps under a unique flow id.

        Args:
            flow_id (str): The unique identifier of the flow.
            steps (Sequence[Step]): The steps, in execution order.

        Raises:
            DuplicateFlowError: If ``flow_id`` is already registered.
            InvalidFlowError: If ``flow_id`` is empty or ``steps`` is empty.
        """

    @abstractmethod
    def handle_turn(
        self, conversation_id: str, turn_input: Union[str, TurnInput]
    ) -> TurnResult:
        """
        Execute exactly one step of the conversation's active flow.

        Args:
            conversation_id (str): The unique identifier of the conversation.
            turn_input (Union[str, TurnInput]): The user's latest utterance. Only the
                text of a TurnInput is used; whether it is a reply is decided by the
                persisted state.

        Returns:
            TurnResult: What the executed step did.
        """

    @abstractmethod
    def run_turn(
        self,
        conversation_id: str,
        turn_input: Union[str, TurnInput],
        on_complete: Optional[Callable[[str], object]] = None,
    ) -> TurnReport:
        """
        Execute steps until the conversation waits for input or its flow completes.

        Args:
            conversation_id (str): The unique identifier of the conversation.
            turn_input (Union[str, TurnInput]): The user's latest utterance.
            on_complete (Callable[[str], object], optional): Called with the
                conversation id once the turn is over, successful or not, while the
                conversation is still locked.

        Returns:
            TurnReport: Every executed step and every message sent during this turn.
        """
