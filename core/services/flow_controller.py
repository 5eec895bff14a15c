"""
Flow Controller Module

This module implements the multi-step conversation flow controller. It owns the
registered flows and, for every incoming turn, resumes the conversation at the step
recorded in its persisted ConversationState, runs it, and applies the returned
StepOutcome:

  - Prompt:  emit the message and stay parked on the same step.
  - Next:    merge the payload into the scratch data and advance; advancing past
             the last step completes the flow.
  - Restart: jump to the first step of a flow with a fresh scratch payload.
  - End:     clear the active flow and its scratch data.

Turns of the same conversation are serialized with a per-conversation lock held from
loading the state until its replies are sent. The new state is always saved before
any message is sent, so a turn that failed to save can be retried from the last
durable state without the user having seen its output.
"""

import copy
import threading
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from adapters.loggers.logger_adapter import app_logger
from core.domain.errors import (
    DuplicateFlowError,
    StepLimitExceededError,
    StoreError,
    UnknownFlowError,
)
from core.domain.flow_model import (
    ConversationState,
    End,
    Flow,
    Next,
    OutgoingMessage,
    Prompt,
    Restart,
    Step,
    StepOutcome,
    StepRecord,
    TurnInput,
    TurnReport,
    TurnResult,
    step_name,
)
from core.interfaces.flow_controller_interface import IFlowController
from core.interfaces.output_channel_interface import IOutputChannel
from core.interfaces.state_store_interface import IStateStore
from core.services.keyed_lock import KeyedLock

SUSPENDING_RESULTS = (TurnResult.AWAITING_INPUT, TurnResult.COMPLETED)


class FlowController(IFlowController):
    """
    Drives conversations through registered flows.

    Attributes:
        default_flow_id (str): Flow started when a conversation has no active flow.
        max_steps_per_turn (int): Upper bound on chained steps in ``run_turn``.
    """

    def __init__(
        self,
        state_store: IStateStore,
        output_channel: IOutputChannel,
        default_flow_id: str,
        max_steps_per_turn: int = 16,
    ):
        self.state_store = state_store
        self.output_channel = output_channel
        self.default_flow_id = default_flow_id
        self.max_steps_per_turn = max_steps_per_turn
        self._flows: Dict[str, Flow] = {}
        self._flows_lock = threading.Lock()
        self._conversation_locks = KeyedLock()

    def register_flow(self, flow_id: str, steps: Sequence[Step]) -> None:
        flow = Flow.of(flow_id, steps)
        with self._flows_lock:
            if flow_id in self._flows:
                raise DuplicateFlowError(flow_id)
            self._flows[flow_id] = flow
        app_logger.info(
            "Registered flow '%s' with steps: %s",
            flow_id,
            ", ".join(step_name(step) for step in flow.steps),
        )

    def get_flow(self, flow_id: str) -> Flow:
        """
        Return a registered flow.

        Raises:
            UnknownFlowError: If ``flow_id`` was never registered.
        """
        flow = self._flows.get(flow_id)
        if flow is None:
            raise UnknownFlowError(flow_id)
        return flow

    def flow_ids(self) -> List[str]:
        with self._flows_lock:
            return sorted(self._flows)

    def handle_turn(
        self, conversation_id: str, turn_input: Union[str, TurnInput]
    ) -> TurnResult:
        with self._conversation_locks.hold(conversation_id):
            state = self._load_state(conversation_id)
            record, message = self._execute_step(conversation_id, state, turn_input)
            self._save_state(conversation_id, state)
            if message is not None:
                self._send(conversation_id, message)
        return record.result

    def run_turn(
        self,
        conversation_id: str,
        turn_input: Union[str, TurnInput],
        on_complete: Optional[Callable[[str], object]] = None,
    ) -> TurnReport:
        records: List[StepRecord] = []
        messages: List[OutgoingMessage] = []

        with self._conversation_locks.hold(conversation_id):
            try:
                state = self._load_state(conversation_id)
                while True:
                    if len(records) >= self.max_steps_per_turn:
                        app_logger.error(
                            "Conversation %s exceeded %d steps in one turn: %s",
                            conversation_id,
                            self.max_steps_per_turn,
                            [record.step for record in records],
                        )
                        raise StepLimitExceededError(
                            conversation_id, self.max_steps_per_turn
                        )
                    record, message = self._execute_step(
                        conversation_id, state, turn_input
                    )
                    records.append(record)
                    if message is not None:
                        messages.append(message)
                    if record.result in SUSPENDING_RESULTS:
                        break

                self._save_state(conversation_id, state)
                for message in messages:
                    self._send(conversation_id, message)
            finally:
                if on_complete is not None:
                    on_complete(conversation_id)

        return TurnReport(result=records[-1].result, steps=records, messages=messages)

    def _execute_step(
        self,
        conversation_id: str,
        state: ConversationState,
        turn_input: Union[str, TurnInput],
    ) -> Tuple[StepRecord, Optional[OutgoingMessage]]:
        if not state.active_flow_id:
            app_logger.debug(
                "No active flow for conversation %s, starting '%s'",
                conversation_id,
                self.default_flow_id,
            )
            state.active_flow_id = self.default_flow_id
            state.current_step_index = 0
            state.awaiting_input = False

        flow = self.get_flow(state.active_flow_id)
        index = state.current_step_index
        step = flow.step_at(index)
        # The reply flag always comes from the persisted state.
        text = turn_input.text if isinstance(turn_input, TurnInput) else turn_input
        turn = TurnInput(text=text, is_reply=state.awaiting_input)

        app_logger.debug(
            "Conversation %s: running step %d (%s) of flow '%s', reply=%s",
            conversation_id,
            index,
            step_name(step),
            flow.flow_id,
            turn.is_reply,
        )
        outcome = step(MappingProxyType(copy.deepcopy(state.scratch)), turn)
        result = self._apply_outcome(state, flow, outcome)
        app_logger.debug(
            "Conversation %s: step %s returned %s -> %s",
            conversation_id,
            step_name(step),
            type(outcome).__name__,
            result.value,
        )

        record = StepRecord(flow.flow_id, index, step_name(step), result)
        return record, outcome.outgoing()

    def _apply_outcome(
        self, state: ConversationState, flow: Flow, outcome: StepOutcome
    ) -> TurnResult:
        if isinstance(outcome, Prompt):
            state.awaiting_input = True
            return TurnResult.AWAITING_INPUT

        if isinstance(outcome, Next):
            state.scratch.update(copy.deepcopy(dict(outcome.payload)))
            state.current_step_index += 1
            state.awaiting_input = False
            if state.current_step_index >= len(flow):
                self._clear(state)
                return TurnResult.COMPLETED
            return TurnResult.ADVANCED

        if isinstance(outcome, Restart):
            self.get_flow(outcome.flow_id)
            state.active_flow_id = outcome.flow_id
            state.current_step_index = 0
            state.scratch = copy.deepcopy(dict(outcome.initial_payload))
            state.awaiting_input = False
            return TurnResult.RESTARTED

        if isinstance(outcome, End):
            self._clear(state)
            return TurnResult.COMPLETED

        raise TypeError(
            f"Step of flow '{flow.flow_id}' returned {outcome!r}, expected a StepOutcome"
        )

    @staticmethod
    def _clear(state: ConversationState) -> None:
        state.active_flow_id = ""
        state.current_step_index = 0
        state.scratch = {}
        state.awaiting_input = False

    def _load_state(self, conversation_id: str) -> ConversationState:
        try:
            state = self.state_store.load(conversation_id)
        except StoreError as e:
            app_logger.error(
                "Failed to load state for conversation %s: %s", conversation_id, e
            )
            raise
        if state is None:
            app_logger.debug("Creating state for new conversation %s", conversation_id)
            return ConversationState()
        return state.copy()

    def _save_state(self, conversation_id: str, state: ConversationState) -> None:
        try:
            self.state_store.save(conversation_id, state)
        except StoreError as e:
            app_logger.error(
                "Failed to save state for conversation %s: %s", conversation_id, e
            )
            raise

    def _send(self, conversation_id: str, message: OutgoingMessage) -> None:
        self.output_channel.send(conversation_id, message.text, message.input_hint)
