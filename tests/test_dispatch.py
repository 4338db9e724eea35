import random

import pytest

from engine.dispatch import BotTurn, NewHand, StartSession, SubmitAction, dispatch
from engine.models import ActionType, TableConfig


def test_start_session_builds_fresh_table():
    state = dispatch(None, StartSession("Alice", TableConfig(seats=3)))
    assert [player.name for player in state.players] == ["Alice", "Tight Tim", "Aggro Andy"]
    assert state.hand_number == 0


def test_commands_need_a_session():
    with pytest.raises(ValueError, match="No session"):
        dispatch(None, NewHand())


def test_unknown_command_is_rejected():
    state = dispatch(None, StartSession())
    with pytest.raises(TypeError, match="Unknown command"):
        dispatch(state, object())  # type: ignore[arg-type]


def test_human_action_only_lands_on_human_turn():
    state = dispatch(None, StartSession())
    state = dispatch(state, NewHand(), random.Random(1))
    # Seat 4 is a bot and acts first on hand one.
    assert state.active_index == 4
    assert dispatch(state, SubmitAction(ActionType.CALL)) is state


def test_bot_turn_only_runs_for_bot_seat():
    state = dispatch(None, StartSession(config=TableConfig(seats=2)))
    state = dispatch(state, NewHand(), random.Random(1))
    assert state.active_index == 0
    assert dispatch(state, BotTurn(), random.Random(1)) is state

    state = dispatch(state, SubmitAction(ActionType.CALL))
    assert state.action_history[-1].player_id == "user"
    assert state.active_index == 1

    after_bot = dispatch(state, BotTurn(), random.Random(1))
    assert after_bot is not state
    assert after_bot.action_history[-1].player_id == "tight-tim"


def test_new_hand_increments_hand_number():
    state = dispatch(None, StartSession())
    state = dispatch(state, NewHand(), random.Random(1))
    assert state.hand_number == 1
    assert state.pot == 30
