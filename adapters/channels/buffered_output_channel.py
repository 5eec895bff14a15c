"""
Buffered Output Channel Module

Implementation of the IOutputChannel interface that keeps outgoing messages in a
per-conversation outbox. The HTTP layer drains the outbox after a turn and returns
the messages in its response body.
"""

import threading
from collections import defaultdict
from typing import Dict, List

from adapters.loggers.logger_adapter import app_logger
from core.domain.errors import ChannelError
from core.domain.flow_model import InputHint, OutgoingMessage
from core.interfaces.output_channel_interface import IOutputChannel


class BufferedOutputChannel(IOutputChannel):
    """
    Output channel collecting messages until they are drained.

    Attributes:
        max_pending (int): Maximum undelivered messages per conversation.
    """

    def __init__(self, max_pending: int = 100):
        self.max_pending = max_pending
        self._outboxes: Dict[str, List[OutgoingMessage]] = defaultdict(list)
        self._lock = threading.Lock()

    def send(
        self,
        conversation_id: str,
        text: str,
        input_hint: InputHint = InputHint.ACCEPTING_INPUT,
    ) -> None:
        with self._lock:
            outbox = self._outboxes[conversation_id]
            if len(outbox) >= self.max_pending:
                raise ChannelError(
                    f"Outbox of conversation {conversation_id} is full "
                    f"({self.max_pending} pending messages)"
                )
            outbox.append(OutgoingMessage(text, InputHint(input_hint)))
        app_logger.debug("Queued message for conversation %s: %s", conversation_id, text)

    def drain(self, conversation_id: str) -> List[OutgoingMessage]:
        """
        Remove and return every pending message of a conversation, oldest first.

        Args:
            conversation_id (str): The unique identifier of the conversation.

        Returns:
            List[OutgoingMessage]: The pending messages.
        """
        with self._lock:
            return self._outboxes.pop(conversation_id, [])

    def pending(self, conversation_id: str) -> int:
        with self._lock:
            return len(self._outboxes.get(conversation_id, ()))
