"""
Flow Model Module

This module defines the domain entities of the Dialog Flow Orchestrator:

  - ConversationState: the per-conversation record persisted between turns.
  - Flow: an immutable, ordered sequence of steps registered under an id.
  - StepOutcome variants (Prompt, Next, Restart, End): what a step asks the
    controller to do after it ran.
  - TurnInput, TurnResult and TurnReport: what goes in and comes out of a turn.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from core.domain.errors import InvalidFlowError, StepIndexOutOfRangeError


class InputHint(str, Enum):
    """How the client should treat its input box after displaying a message."""

    EXPECTING_INPUT = "expecting_input"
    ACCEPTING_INPUT = "accepting_input"
    IGNORING_INPUT = "ignoring_input"


@dataclass(frozen=True)
class OutgoingMessage:
    """A message emitted to a conversation through an output channel."""

    text: str
    input_hint: InputHint = InputHint.ACCEPTING_INPUT

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "input_hint": self.input_hint.value}


@dataclass(frozen=True)
class TurnInput:
    """
    The input handed to a step.

    Attributes:
        text (str): The latest user utterance.
        is_reply (bool): True when the conversation was parked on this very step,
            i.e. the text answers the step's own prompt.
    """

    text: str
    is_reply: bool = False


class StepOutcome:
    """Base class of the values a step returns."""

    message: Optional[str] = None
    input_hint: InputHint = InputHint.ACCEPTING_INPUT

    def outgoing(self) -> Optional[OutgoingMessage]:
        if not self.message:
            return None
        return OutgoingMessage(self.message, self.input_hint)


@dataclass(frozen=True)
class Prompt(StepOutcome):
    """Suspend the flow on the current step and wait for the user's reply."""

    message: str
    input_hint: InputHint = InputHint.EXPECTING_INPUT

    def __post_init__(self):
        if not self.message or not self.message.strip():
            raise ValueError("Prompt requires a non-empty message")


@dataclass(frozen=True)
class Next(StepOutcome):
    """Merge ``payload`` into the scratch data and advance to the next step."""

    payload: Mapping[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    input_hint: InputHint = InputHint.ACCEPTING_INPUT


@dataclass(frozen=True)
class Restart(StepOutcome):
    """Reset to the first step of ``flow_id`` with ``initial_payload`` as scratch data."""

    flow_id: str
    initial_payload: Mapping[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    input_hint: InputHint = InputHint.ACCEPTING_INPUT


@dataclass(frozen=True)
class End(StepOutcome):
    """Terminate the active flow."""

    message: Optional[str] = None
    input_hint: InputHint = InputHint.ACCEPTING_INPUT


Step = Callable[[Mapping[str, Any], TurnInput], StepOutcome]


def step_name(step: Step) -> str:
    return getattr(step, "__name__", None) or type(step).__name__


@dataclass(frozen=True)
class Flow:
    """
    An ordered, immutable sequence of steps.

    Step indices are 0-based and contiguous; a flow always has at least one step.
    """

    flow_id: str
    steps: Tuple[Step, ...]

    def __post_init__(self):
        if not self.flow_id:
            raise InvalidFlowError("A flow id must be a non-empty string")
        if not self.steps:
            raise InvalidFlowError(f"Flow '{self.flow_id}' must have at least one step")
        for step in self.steps:
            if not callable(step):
                raise InvalidFlowError(
                    f"Flow '{self.flow_id}' contains a non-callable step: {step!r}"
                )

    @classmethod
    def of(cls, flow_id: str, steps: Sequence[Step]) -> "Flow":
        return cls(flow_id, tuple(steps))

    def __len__(self) -> int:
        return len(self.steps)

    def step_at(self, index: int) -> Step:
        """
        Return the step at ``index``.

        Raises:
            StepIndexOutOfRangeError: If ``index`` does not address a step.
        """
        if not 0 <= index < len(self.steps):
            raise StepIndexOutOfRangeError(self.flow_id, index, len(self.steps))
        return self.steps[index]


@dataclass
class ConversationState:
    """
    Per-conversation record owned by the flow controller.

    Attributes:
        active_flow_id (str): Flow currently running, or "" when none is.
        current_step_index (int): Index of the step to resume at.
        scratch (Dict[str, Any]): Data passed between steps.
        awaiting_input (bool): True when the flow is parked on a prompt.
    """

    active_flow_id: str = ""
    current_step_index: int = 0
    scratch: Dict[str, Any] = field(default_factory=dict)
    awaiting_input: bool = False

    def copy(self) -> "ConversationState":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_flow_id": self.active_flow_id,
            "current_step_index": self.current_step_index,
            "scratch": copy.deepcopy(self.scratch),
            "awaiting_input": self.awaiting_input,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversationState":
        return cls(
            active_flow_id=data.get("active_flow_id", ""),
            current_step_index=int(data.get("current_step_index", 0)),
            scratch=copy.deepcopy(dict(data.get("scratch") or {})),
            awaiting_input=bool(data.get("awaiting_input", False)),
        )


class TurnResult(str, Enum):
    """What a single executed step did to the conversation."""

    AWAITING_INPUT = "awaiting_input"
    ADVANCED = "advanced"
    RESTARTED = "restarted"
    COMPLETED = "completed"


@dataclass(frozen=True)
class StepRecord:
    """One executed step within a turn."""

    flow_id: str
    step_index: int
    step: str
    result: TurnResult


@dataclass
class TurnReport:
    """
    Summary of a turn that may have chained several steps.

    Attributes:
        result (TurnResult): Result of the last executed step.
        steps (List[StepRecord]): Every step executed during the turn, in order.
        messages (List[OutgoingMessage]): Messages sent during the turn, in order.
    """

    result: TurnResult
    steps: List[StepRecord] = field(default_factory=list)
    messages: List[OutgoingMessage] = field(default_factory=list)
