"""Tests for conversation state: ordering, rollback, and pair-safe trimming."""

import random

import pytest

from chainscout.conversation.state import ConversationState
from chainscout.conversation.turns import (
    ModelTurn,
    ToolCallRequest,
    ToolResult,
    ToolTurn,
    UserTurn,
)


def _tool_round(i):
    call = ToolCallRequest("echo", {"message": str(i)}, call_id=f"c{i}")
    model = ModelTurn(parts=(call,))
    tool = ToolTurn(results=(ToolResult("echo", payload=str(i), call_id=f"c{i}"),))
    return model, tool


def _build(rng, exchanges):
    """Build a conversation and return (state, pairs) where pairs are (model, tool) turns."""
    state = ConversationState()
    pairs = []
    for i in range(exchanges):
        state.append(UserTurn(f"q{i}"))
        for r in range(rng.randint(0, 3)):
            model, tool = _tool_round(i * 10 + r)
            state.append(model)
            state.append(tool)
            pairs.append((model, tool))
        state.append(ModelTurn.from_text(f"a{i}"))
    return state, pairs


def test_append_and_snapshot_keep_order():
    state = ConversationState()
    turns = [UserTurn("a"), ModelTurn.from_text("b"), UserTurn("c")]
    for t in turns:
        state.append(t)

    assert state.snapshot() == tuple(turns)
    assert list(state) == turns
    assert len(state) == 3


def test_snapshot_is_immutable_copy():
    state = ConversationState()
    state.append(UserTurn("a"))
    snap = state.snapshot()
    state.append(UserTurn("b"))
    assert snap == (UserTurn("a"),)


def test_trim_noop_under_ceiling():
    state = ConversationState()
    state.append(UserTurn("a"))
    assert state.trim(5) == 0
    assert len(state) == 1


def test_trim_keeps_newest_turns():
    state = ConversationState()
    for i in range(6):
        state.append(UserTurn(f"q{i}"))
        state.append(ModelTurn.from_text(f"a{i}"))

    removed = state.trim(4)

    assert removed == 8
    assert state.snapshot()[0] == UserTurn("q4")
    assert len(state) == 4


def test_trim_moves_cut_past_tool_pair():
    state = ConversationState()
    state.append(UserTurn("q0"))
    model, tool = _tool_round(0)
    state.append(model)
    state.append(tool)
    state.append(ModelTurn.from_text("a0"))
    state.append(UserTurn("q1"))
    state.append(ModelTurn.from_text("a1"))

    # A naive cut at index 2 would keep the tool turn without its model turn
    state.trim(4)

    remaining = state.snapshot()
    assert tool not in remaining
    assert model not in remaining
    assert remaining[0] == UserTurn("q1")


def test_trim_inside_one_long_exchange_clears():
    state = ConversationState()
    state.append(UserTurn("q"))
    for model, tool in [_tool_round(i) for i in range(2)]:
        state.append(model)
        state.append(tool)
    state.append(ModelTurn.from_text("done"))

    removed = state.trim(3)

    assert removed == 6
    assert len(state) == 0


def test_trim_never_opens_on_model_turn():
    state = ConversationState()
    state.append(UserTurn("q0"))
    state.append(ModelTurn.from_text("a0"))
    state.append(UserTurn("q1"))
    model, tool = _tool_round(1)
    state.append(model)
    state.append(tool)
    state.append(ModelTurn.from_text("a1"))

    state.trim(3)

    assert len(state) == 0 or isinstance(state.snapshot()[0], UserTurn)


def test_trim_to_zero_clears():
    state = ConversationState()
    state.append(UserTurn("q"))
    state.append(ModelTurn.from_text("a"))
    assert state.trim(0) == 2
    assert len(state) == 0


def test_trim_rejects_negative():
    with pytest.raises(ValueError):
        ConversationState().trim(-1)


@pytest.mark.parametrize("seed", range(20))
def test_trim_never_separates_pairs(seed):
    rng = random.Random(seed)
    original, pairs = _build(rng, exchanges=rng.randint(1, 6))

    for ceiling in range(len(original) + 1):
        state = ConversationState()
        for turn in original:
            state.append(turn)

        state.trim(ceiling)
        kept = {id(t) for t in state}

        assert len(state) <= ceiling
        for model, tool in pairs:
            assert (id(model) in kept) == (id(tool) in kept)
        if len(state):
            assert isinstance(state.snapshot()[0], UserTurn)


def test_checkpoint_and_rollback():
    state = ConversationState()
    state.append(UserTurn("keep"))
    mark = state.checkpoint()
    state.append(UserTurn("drop"))
    state.append(ModelTurn.from_text("drop too"))

    assert state.rollback(mark) == 2
    assert state.snapshot() == (UserTurn("keep"),)


def test_rollback_rejects_bad_mark():
    state = ConversationState()
    with pytest.raises(ValueError):
        state.rollback(3)
