"""Tests for the Flow Controller."""
import threading
import time

import pytest

from core.domain.errors import (
    ChannelError,
    DuplicateFlowError,
    InvalidFlowError,
    StepIndexOutOfRangeError,
    StepLimitExceededError,
    StoreError,
    UnknownFlowError,
)
from core.domain.flow_model import (
    ConversationState,
    End,
    InputHint,
    Next,
    Prompt,
    Restart,
    TurnInput,
    TurnResult,
)
from core.services.flow_controller import FlowController
from core.services.keyed_lock import KeyedLock


def ask(message):
    """Step prompting with ``message`` until answered, then advancing."""

    def step(scratch, turn):
        if not turn.is_reply:
            return Prompt(message)
        return Next({"answer": turn.text})

    step.__name__ = f"ask_{message}"
    return step


def advance(payload=None, message=None):
    def step(scratch, turn):
        return Next(payload or {}, message)

    return step


def test_register_duplicate_flow_fails(controller):
    controller.register_flow("booking", [advance()])
    with pytest.raises(DuplicateFlowError):
        controller.register_flow("booking", [advance()])


def test_register_invalid_flows_fail(controller):
    with pytest.raises(InvalidFlowError):
        controller.register_flow("empty", [])
    with pytest.raises(InvalidFlowError):
        controller.register_flow("", [advance()])
    with pytest.raises(InvalidFlowError):
        controller.register_flow("broken", ["not a step"])
    assert controller.flow_ids() == []


def test_first_turn_starts_default_flow(controller, store, channel):
    controller.register_flow("booking", [ask("hi?"), advance()])

    result = controller.handle_turn("new-conversation", "hello")

    assert result == TurnResult.AWAITING_INPUT
    state = store.load("new-conversation")
    assert state.active_flow_id == "booking"
    assert state.current_step_index == 0
    assert state.awaiting_input is True
    assert [m.text for m in channel.drain("new-conversation")] == ["hi?"]


def test_first_turn_without_default_flow_fails(controller, store, channel):
    controller.register_flow("other", [advance()])

    with pytest.raises(UnknownFlowError):
        controller.handle_turn("c1", "hello")

    assert store.load("c1") is None
    assert channel.pending("c1") == 0


def test_out_of_range_index_fails(controller, store):
    controller.register_flow("booking", [advance()])
    store.save("c1", ConversationState("booking", 5, {}))

    with pytest.raises(StepIndexOutOfRangeError):
        controller.handle_turn("c1", "hello")


def test_unknown_active_flow_fails(controller, store):
    controller.register_flow("booking", [advance()])
    store.save("c1", ConversationState("vanished", 0, {}))

    with pytest.raises(UnknownFlowError):
        controller.handle_turn("c1", "hello")


def test_prompt_keeps_step_and_scratch(controller, store):
    controller.register_flow("booking", [ask("name?"), advance()])
    store.save("c1", ConversationState("booking", 0, {"kept": 1}))

    controller.handle_turn("c1", "hello")

    state = store.load("c1")
    assert state.current_step_index == 0
    assert state.scratch == {"kept": 1}


def test_reply_is_flagged_only_when_parked(controller):
    seen = []

    def record(scratch, turn):
        seen.append(turn.is_reply)
        return Prompt("again?")

    controller.register_flow("booking", [record])
    controller.handle_turn("c1", "one")
    controller.handle_turn("c1", "two")

    assert seen == [False, True]


def test_turn_input_is_accepted_and_reply_flag_comes_from_state(controller):
    seen = []

    def record(scratch, turn):
        seen.append((turn.text, turn.is_reply))
        return Prompt("again?")

    controller.register_flow("booking", [record])
    controller.handle_turn("c1", TurnInput("hello", is_reply=True))
    controller.run_turn("c1", TurnInput("there"))

    assert seen == [("hello", False), ("there", True)]


def test_prompt_requires_a_message():
    with pytest.raises(ValueError):
        Prompt("")
    with pytest.raises(ValueError):
        Prompt("   ")


def test_next_merges_payload_without_dropping_keys(controller, store):
    controller.register_flow("booking", [advance({"b": 2, "a": 10}), ask("more?")])
    store.save("c1", ConversationState("booking", 0, {"a": 1, "keep": "me"}))

    result = controller.handle_turn("c1", "go")

    assert result == TurnResult.ADVANCED
    state = store.load("c1")
    assert state.current_step_index == 1
    assert state.scratch == {"a": 10, "b": 2, "keep": "me"}


def test_next_past_last_step_completes(controller, store):
    controller.register_flow("booking", [advance({"x": 1})])

    result = controller.handle_turn("c1", "go")

    assert result == TurnResult.COMPLETED
    state = store.load("c1")
    assert state.active_flow_id == ""
    assert state.current_step_index == 0
    assert state.scratch == {}


def test_restart_switches_flow_and_replaces_scratch(controller, store):
    controller.register_flow("booking", [lambda s, t: Restart("other", {"fresh": True})])
    controller.register_flow("other", [advance()])
    store.save("c1", ConversationState("booking", 0, {"stale": True}))

    result = controller.handle_turn("c1", "go")

    assert result == TurnResult.RESTARTED
    state = store.load("c1")
    assert state.active_flow_id == "other"
    assert state.current_step_index == 0
    assert state.scratch == {"fresh": True}


def test_restart_to_unknown_flow_fails_without_saving(controller, store):
    controller.register_flow("booking", [lambda s, t: Restart("missing")])

    with pytest.raises(UnknownFlowError):
        controller.handle_turn("c1", "go")
    assert store.load("c1") is None


def test_end_clears_flow_and_sends_message(controller, store, channel):
    controller.register_flow("booking", [advance({"x": 1}), lambda s, t: End("bye")])
    controller.handle_turn("c1", "go")

    result = controller.handle_turn("c1", "go")

    assert result == TurnResult.COMPLETED
    assert store.load("c1").active_flow_id == ""
    assert store.load("c1").scratch == {}
    assert [m.text for m in channel.drain("c1")] == ["bye"]


def test_steps_get_read_only_scratch(controller, store):
    def mutate(scratch, turn):
        scratch["sneaky"] = True
        return End()

    controller.register_flow("booking", [mutate])
    store.save("c1", ConversationState("booking", 0, {"a": 1}))

    with pytest.raises(TypeError):
        controller.handle_turn("c1", "go")
    assert store.load("c1").scratch == {"a": 1}


def test_non_outcome_return_value_fails(controller):
    controller.register_flow("booking", [lambda s, t: "oops"])

    with pytest.raises(TypeError):
        controller.handle_turn("c1", "go")


def test_failed_save_sends_nothing_and_retry_does_not_double_advance(
    controller, store, channel
):
    controller.register_flow(
        "booking", [advance({"step": 0}, "moving on"), ask("second?"), advance()]
    )

    store.fail_next_save = True
    with pytest.raises(StoreError):
        controller.handle_turn("c1", "go")

    assert store.load("c1") is None
    assert channel.pending("c1") == 0

    assert controller.handle_turn("c1", "go") == TurnResult.ADVANCED
    assert store.load("c1").current_step_index == 1
    assert [m.text for m in channel.drain("c1")] == ["moving on"]


def test_failed_load_leaves_state_untouched(controller, store, channel):
    controller.register_flow("booking", [advance(), ask("second?")])
    controller.handle_turn("c1", "go")
    saves = store.saves

    store.fail_next_load = True
    with pytest.raises(StoreError):
        controller.handle_turn("c1", "go")

    assert store.saves == saves
    assert store.load("c1").current_step_index == 1
    assert channel.pending("c1") == 0


def test_channel_error_propagates_after_state_is_saved(store):
    class BrokenChannel:
        def send(self, conversation_id, text, input_hint=InputHint.ACCEPTING_INPUT):
            raise ChannelError("socket closed")

    controller = FlowController(store, BrokenChannel(), default_flow_id="booking")
    controller.register_flow("booking", [ask("name?")])

    with pytest.raises(ChannelError):
        controller.handle_turn("c1", "hello")
    assert store.load("c1").awaiting_input is True


def test_run_turn_chains_until_prompt(controller, store, channel):
    controller.register_flow(
        "booking", [advance({"a": 1}, "first"), advance({"b": 2}), ask("third?")]
    )

    report = controller.run_turn("c1", "go")

    assert report.result == TurnResult.AWAITING_INPUT
    assert [record.result for record in report.steps] == [
        TurnResult.ADVANCED,
        TurnResult.ADVANCED,
        TurnResult.AWAITING_INPUT,
    ]
    assert [m.text for m in report.messages] == ["first", "third?"]
    assert [m.text for m in channel.drain("c1")] == ["first", "third?"]
    state = store.load("c1")
    assert state.current_step_index == 2
    assert state.scratch == {"a": 1, "b": 2}
    assert store.saves == 1


def test_run_turn_stops_when_flow_completes(controller, store):
    controller.register_flow("booking", [advance(), advance()])

    report = controller.run_turn("c1", "go")

    assert report.result == TurnResult.COMPLETED
    assert len(report.steps) == 2
    assert store.load("c1").active_flow_id == ""


def test_run_turn_step_limit(controller, store, channel):
    controller.register_flow("booking", [lambda s, t: Restart("booking", {}, "loop")])

    with pytest.raises(StepLimitExceededError):
        controller.run_turn("c1", "go")

    assert store.load("c1") is None
    assert channel.pending("c1") == 0


def test_same_conversation_turns_are_serialized(controller, store):
    active = []
    overlaps = []
    guard = threading.Lock()

    def slow_step(scratch, turn):
        with guard:
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
        time.sleep(0.01)
        with guard:
            active.pop()
        return Next({f"turn-{turn.text}": True})

    controller.register_flow("booking", [slow_step] * 10 + [ask("done?")])

    threads = [
        threading.Thread(target=controller.handle_turn, args=("c1", str(i)))
        for i in range(10)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []
    state = store.load("c1")
    assert state.current_step_index == 10
    assert len(state.scratch) == 10


def test_different_conversations_run_concurrently(controller):
    barrier = threading.Barrier(2, timeout=5)
    errors = []

    def meet(scratch, turn):
        barrier.wait()
        return End()

    controller.register_flow("booking", [meet])

    def run(conversation_id):
        try:
            controller.handle_turn(conversation_id, "hello")
        except threading.BrokenBarrierError as e:
            errors.append(e)

    threads = [threading.Thread(target=run, args=(cid,)) for cid in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []


def test_keyed_lock_drops_released_keys():
    locks = KeyedLock()

    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2

    assert len(locks) == 0
