"""
Main Dialog Module

This module defines the booking flow: a four step conversation that asks the user
what they need, echoes the request back for confirmation, interprets the answer with
the intent classifier, and then loops back to the beginning.

    intro -> confirm -> act -> final -> (restart) intro

Every step is a method of MainDialog taking the read-only scratch data and the turn
input and returning a StepOutcome. The classifier is queried at most once per step.
"""

from datetime import date
from typing import Any, Dict, Mapping, Optional

from adapters.loggers.logger_adapter import app_logger
from core.domain.classification_model import (
    ClassificationResult,
    Unconfigured,
    top_intent,
)
from core.domain.flow_model import (
    End,
    InputHint,
    Next,
    Prompt,
    Restart,
    StepOutcome,
    TurnInput,
)
from core.interfaces.classifier_interface import IClassifier
from core.interfaces.flow_controller_interface import IFlowController

BOOKING_FLOW_ID = "booking"

CONFIRM_INTENT = "Confirm"
WELCOME_MESSAGE = "What can I help you with today?"
RESTART_MESSAGE = "What else can I do for you?"
CONFIRMED_MESSAGE = "Got it!"
BOOKING_FIELDS = ("origin", "destination", "travel_date")


def format_travel_date(value: str, today: Optional[date] = None) -> str:
    """
    Render an ISO date (YYYY-MM-DD) in natural language relative to ``today``.

    Values that are not complete ISO dates are returned unchanged.
    """
    try:
        travel_date = date.fromisoformat(value)
    except (TypeError, ValueError):
        return value

    today = today or date.today()
    delta = (travel_date - today).days
    if delta == 0:
        return "today"
    if delta == 1:
        return "tomorrow"
    if delta == -1:
        return "yesterday"
    return f"{travel_date:%A}, {travel_date:%B} {travel_date.day}, {travel_date.year}"


class MainDialog:
    """
    The booking flow.

    Attributes:
        classifier (IClassifier): Intent classifier used by the intro and act steps.
        flow_id (str): Id under which the flow is registered and restarted.
        min_confidence (float): Minimum score for the classifier's top intent to count.
    """

    def __init__(
        self,
        classifier: IClassifier,
        flow_id: str = BOOKING_FLOW_ID,
        min_confidence: float = 0.0,
        today=date.today,
    ):
        if classifier is None:
            raise ValueError("[MainDialog]: Missing parameter 'classifier' is required")
        self.classifier = classifier
        self.flow_id = flow_id
        self.min_confidence = min_confidence
        self._today = today

    @property
    def steps(self):
        return [self.intro, self.confirm, self.act, self.final]

    def register(self, controller: IFlowController) -> None:
        controller.register_flow(self.flow_id, self.steps)

    def not_configured(self) -> End:
        return End(
            f"NOTE: {self.classifier.name} is not configured. This dialog is over",
            InputHint.IGNORING_INPUT,
        )

    def intro(self, scratch: Mapping[str, Any], turn: TurnInput) -> StepOutcome:
        """Ask the user what they need; on the reply, capture the request."""
        if not self.classifier.is_configured:
            return self.not_configured()

        if not turn.is_reply:
            return Prompt(scratch.get("restart_msg") or WELCOME_MESSAGE)

        result = self.classifier.classify(turn.text)
        if isinstance(result, Unconfigured):
            return self.not_configured()

        return Next({"utterance": turn.text, "booking": self._booking_details(result)})

    def confirm(self, scratch: Mapping[str, Any], turn: TurnInput) -> StepOutcome:
        """Echo the request back and ask the user to confirm it."""
        if not turn.is_reply:
            return Prompt(f"You said {scratch.get('utterance', '')}. Is this correct?")
        return Next({"confirmation": turn.text})

    def act(self, scratch: Mapping[str, Any], turn: TurnInput) -> StepOutcome:
        """Branch on the intent of the user's answer."""
        result = self.classifier.classify(turn.text)
        if isinstance(result, Unconfigured):
            return self.not_configured()

        intent = top_intent(result, min_score=self.min_confidence)
        if intent == CONFIRM_INTENT:
            return Next({"confirmed": True}, CONFIRMED_MESSAGE)

        app_logger.info("Unhandled intent '%s' for utterance: %s", intent, turn.text)
        return Prompt(
            "Sorry, I didn't get that. Please try replying in a different way? "
            f"(intent was {intent})",
            InputHint.ACCEPTING_INPUT,
        )

    def final(self, scratch: Mapping[str, Any], turn: TurnInput) -> StepOutcome:
        """Report the booking if there is one, then start over."""
        message = None
        booking = scratch.get("booking") or {}
        if scratch.get("confirmed") and all(booking.get(f) for f in BOOKING_FIELDS):
            travel_date = format_travel_date(booking["travel_date"], self._today())
            message = (
                f"I have you booked to {booking['destination']} "
                f"from {booking['origin']} on {travel_date}."
            )

        return Restart(
            self.flow_id,
            {"restart_msg": RESTART_MESSAGE},
            message,
            InputHint.IGNORING_INPUT,
        )

    @staticmethod
    def _booking_details(result: ClassificationResult) -> Dict[str, str]:
        return {
            name: result.entities[name]
            for name in BOOKING_FIELDS
            if result.entities.get(name)
        }
