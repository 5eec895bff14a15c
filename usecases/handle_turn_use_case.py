"""
Handle Turn Use Case Module

This module implements the use case that processes one user message of a conversation:
the flow controller runs the turn and reports the replies it sent, and the buffered
output channel is emptied for that conversation before the conversation lock is released.
"""

from typing import Optional

from adapters.channels.buffered_output_channel import BufferedOutputChannel
from adapters.loggers.logger_adapter import app_logger
from core.domain.flow_model import ConversationState, TurnReport
from core.interfaces.flow_controller_interface import IFlowController
from core.interfaces.state_store_interface import IStateStore
from core.interfaces.use_case_interfaces import IHandleTurnUseCase


class HandleTurnUseCase(IHandleTurnUseCase):
    """
    Use case for running a conversation turn and returning the bot's replies.
    """

    def __init__(
        self,
        flow_controller: IFlowController,
        output_channel: BufferedOutputChannel,
        state_store: IStateStore,
    ):
        """
        Initialize the HandleTurnUseCase.

        Args:
            flow_controller (IFlowController): Controller driving the registered flows.
            output_channel (BufferedOutputChannel): Channel the controller sends through.
            state_store (IStateStore): Store holding the conversation states.
        """
        self.flow_controller = flow_controller
        self.output_channel = output_channel
        self.state_store = state_store

    def execute(self, conversation_id: str, user_text: str) -> TurnReport:
        app_logger.debug("Handling turn for conversation %s", conversation_id)
        # Outbox is emptied under the conversation lock; the report keeps the replies.
        report = self.flow_controller.run_turn(
            conversation_id, user_text, on_complete=self.output_channel.drain
        )
        app_logger.info(
            "Conversation %s: %s after %d step(s), %d message(s)",
            conversation_id,
            report.result.value,
            len(report.steps),
            len(report.messages),
        )
        return report

    def get_state(self, conversation_id: str) -> Optional[ConversationState]:
        return self.state_store.load(conversation_id)
