"""Tests for the HTTP API."""
import pytest

from app import create_app
from config import TestingConfig
from conftest import ScriptedClassifier
from core.domain.errors import ChannelError, StoreError, UnknownFlowError


@pytest.fixture
def app(classifier):
    """Create a testing app driven by the scripted classifier."""
    return create_app(TestingConfig, classifier=classifier)


@pytest.fixture
def client(app):
    return app.test_client()


def post(client, conversation_id, text):
    return client.post(f"/api/dialog/{conversation_id}", json={"text": text})


def test_conversation_round_trip(client):
    response = post(client, "c1", "hello")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "success"
    assert body["data"]["result"] == "awaiting_input"
    assert body["data"]["messages"] == [
        {"text": "What can I help you with today?", "input_hint": "expecting_input"}
    ]

    response = post(client, "c1", "book a flight")
    data = response.get_json()["data"]
    assert data["steps"] == ["intro", "confirm"]
    assert data["messages"][0]["text"] == "You said book a flight. Is this correct?"

    response = post(client, "c1", "yes")
    data = response.get_json()["data"]
    assert [m["text"] for m in data["messages"]] == [
        "Got it!",
        "What else can I do for you?",
    ]


def test_conversations_are_isolated(client):
    post(client, "alice", "hello")
    post(client, "alice", "book a flight")

    data = post(client, "bob", "hello").get_json()["data"]

    assert data["messages"][0]["text"] == "What can I help you with today?"


def test_state_endpoint(client):
    assert client.get("/api/dialog/c1/state").status_code == 404

    post(client, "c1", "hello")
    response = client.get("/api/dialog/c1/state")

    assert response.status_code == 200
    assert response.get_json()["data"] == {
        "active_flow_id": "booking",
        "current_step_index": 0,
        "scratch": {},
        "awaiting_input": True,
    }


def test_missing_text_is_rejected(client):
    response = client.post("/api/dialog/c1", json={"message": "hello"})

    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Validation error"
    assert "text" in body["details"]


def test_non_json_body_is_rejected(client):
    response = client.post("/api/dialog/c1", data="hello", content_type="text/plain")

    assert response.status_code == 400


def test_store_failure_returns_503(app, client, monkeypatch):
    def broken_save(conversation_id, state):
        raise StoreError("disk full")

    monkeypatch.setattr(app.state_store, "save", broken_save)

    response = post(client, "c1", "hello")

    assert response.status_code == 503
    assert response.get_json()["message"] == "Service temporarily unavailable"
    assert response.get_json()["details"] == "disk full"


def test_delivery_failure_returns_502_and_keeps_the_saved_turn(
    app, client, monkeypatch
):
    def broken_send(conversation_id, text, input_hint=None):
        raise ChannelError("channel closed")

    monkeypatch.setattr(app.flow_controller.output_channel, "send", broken_send)

    response = post(client, "c1", "hello")

    assert response.status_code == 502
    assert response.get_json()["message"] == "Reply delivery failed"
    assert app.state_store.load("c1").awaiting_input is True


def test_flow_configuration_error_returns_500(app, client, monkeypatch):
    def broken_run_turn(conversation_id, turn_input, on_complete=None):
        raise UnknownFlowError("missing")

    monkeypatch.setattr(app.flow_controller, "run_turn", broken_run_turn)

    response = post(client, "c1", "hello")

    assert response.status_code == 500
    body = response.get_json()
    assert body["status"] == "error"
    assert body["message"] == "Flow configuration error"
    assert "missing" in body["details"]


def test_without_classifier_the_dialog_ends_with_a_note():
    client = create_app(TestingConfig).test_client()

    data = post(client, "c1", "hello").get_json()["data"]

    assert data["result"] == "completed"
    assert data["messages"] == [
        {
            "text": "NOTE: Intent classifier is not configured. This dialog is over",
            "input_hint": "ignoring_input",
        }
    ]


def test_index_lists_flows(client):
    body = client.get("/").get_json()

    assert body["service"] == "dialog-flow-orchestrator"
    assert body["default_flow"] == "booking"
    assert body["flows"] == ["booking"]


def test_health_reports_classifier_status(client):
    body = client.get("/health").get_json()
    assert body["status"] == "healthy"
    assert body["classifier"] == {"name": "LUIS", "configured": True}

    degraded = create_app(
        TestingConfig, classifier=ScriptedClassifier(configured=False)
    ).test_client()
    assert degraded.get("/health").get_json()["status"] == "degraded"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


def test_unknown_route_returns_json_404(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.get_json()["error"] == "Resource not found"
