"""Pytest configuration and fixtures."""
import os
from datetime import date

import pytest

# Set test environment before importing app
os.environ["FLASK_ENV"] = "testing"
os.environ["CLASSIFIER_BACKEND"] = "none"

from adapters.channels.buffered_output_channel import BufferedOutputChannel
from adapters.stores.memory_state_store import InMemoryStateStore
from core.domain.classification_model import (
    NONE_INTENT,
    UNCONFIGURED,
    ClassificationResult,
)
from core.domain.errors import StoreError
from core.interfaces.classifier_interface import IClassifier
from core.services.flow_controller import FlowController
from core.services.main_dialog import MainDialog

TODAY = date(2026, 10, 19)


class ScriptedClassifier(IClassifier):
    """Classifier answering from a fixed utterance -> intent table."""

    name = "LUIS"

    def __init__(self, answers=None, configured=True, answers_unconfigured=False):
        self.answers = dict(answers or {})
        self.configured = configured
        self.answers_unconfigured = answers_unconfigured
        self.calls = []

    @property
    def is_configured(self):
        return self.configured

    def classify(self, utterance):
        self.calls.append(utterance)
        if not self.configured or self.answers_unconfigured:
            return UNCONFIGURED
        answer = self.answers.get(utterance)
        if answer is None:
            return ClassificationResult(NONE_INTENT, 0.9, text=utterance)
        if isinstance(answer, ClassificationResult):
            return answer
        return ClassificationResult(answer, 0.95, {answer: 0.95}, text=utterance)


class FlakyStateStore(InMemoryStateStore):
    """In-memory store that can be told to fail its next load or save."""

    def __init__(self):
        super().__init__()
        self.fail_next_load = False
        self.fail_next_save = False
        self.saves = 0

    def load(self, conversation_id):
        if self.fail_next_load:
            self.fail_next_load = False
            raise StoreError("load failed")
        return super().load(conversation_id)

    def save(self, conversation_id, state):
        if self.fail_next_save:
            self.fail_next_save = False
            raise StoreError("save failed")
        self.saves += 1
        super().save(conversation_id, state)


@pytest.fixture
def store():
    """Create a state store that can simulate failures."""
    return FlakyStateStore()


@pytest.fixture
def channel():
    """Create a buffered output channel."""
    return BufferedOutputChannel()


@pytest.fixture
def controller(store, channel):
    """Create a flow controller with no flows registered."""
    return FlowController(store, channel, default_flow_id="booking", max_steps_per_turn=8)


@pytest.fixture
def classifier():
    """Create a configured classifier that understands the booking conversation."""
    return ScriptedClassifier(
        {
            "book a flight": "BookFlight",
            "book a flight from Paris to Berlin tomorrow": ClassificationResult(
                "BookFlight",
                0.97,
                {"BookFlight": 0.97},
                {"origin": "Paris", "destination": "Berlin", "travel_date": "2026-10-20"},
            ),
            "yes": "Confirm",
            "Foo": "Foo",
        }
    )


@pytest.fixture
def main_dialog(classifier):
    """Create the booking flow with a fixed calendar date."""
    return MainDialog(classifier, today=lambda: TODAY)


@pytest.fixture
def booking_controller(controller, main_dialog):
    """Create a flow controller with the booking flow registered."""
    main_dialog.register(controller)
    return controller


def texts(messages):
    return [message.text for message in messages]
