"""Tests for the in-memory state store."""

import logging

import pytest

from simple_mcp.state import ServerState, StateStore


def test_initial_state_is_empty():
    state = StateStore().read()
    assert state.counter == 0
    assert state.messages == ()


def test_mutate_replaces_state_whole(store):
    before = store.read()
    after = store.mutate(lambda s: s.with_message("hello", counter=3))

    assert store.read() is after
    assert after.counter == 3
    assert after.messages == ("hello",)
    # Snapshots taken earlier are untouched.
    assert before.counter == 0
    assert before.messages == ()


def test_with_message_appends_in_order():
    state = ServerState().with_message("a").with_message("b").with_message("c")
    assert state.messages == ("a", "b", "c")


def test_failed_mutation_leaves_state_unchanged(store):
    store.mutate(lambda s: s.with_message("kept", counter=1))

    def boom(state):
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        store.mutate(boom)
    assert store.read().counter == 1
    assert store.read().messages == ("kept",)


def test_mutation_must_return_state(store):
    with pytest.raises(TypeError):
        store.mutate(lambda s: None)
    assert store.read() == ServerState()


def test_mutation_is_logged(store, caplog):
    with caplog.at_level(logging.INFO, logger="simple_mcp.state"):
        store.mutate(lambda s: s.with_message("x", counter=7))
    assert "State updated: counter=7 messageCount=1" in caplog.text
