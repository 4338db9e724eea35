import random

import pytest

from engine.dispatch import BotTurn, NewHand, StartSession, SubmitAction, dispatch
from engine.game import get_valid_actions, is_session_over, is_user_turn
from engine.models import ActionType, TableConfig

from .helpers import total_chips


def check_invariants(state, chips: int) -> None:
    assert total_chips(state) == chips
    assert all(player.stack >= 0 for player in state.players)
    if state.is_complete:
        assert state.pot == 0 or state.hand_number == 0
        assert state.active_index is None
        return
    assert state.pot == sum(player.total_bet for player in state.players)
    assert state.current_bet == max(player.current_bet for player in state.players)
    assert state.players[state.active_index].can_act
    dealt = list(state.deck) + list(state.community_cards)
    for player in state.players:
        dealt.extend(player.hole_cards)
    assert len(dealt) == len(set(dealt)) == 52


def random_human_command(state, rng: random.Random) -> SubmitAction:
    # Mostly legal choices, with the odd illegal one that must be ignored.
    if rng.random() < 0.1:
        return SubmitAction(rng.choice(list(ActionType)), rng.randint(0, 3_000))
    option = rng.choice(get_valid_actions(state))
    amount = None
    if option.min_amount is not None:
        amount = rng.randint(option.min_amount - 10, option.max_amount + 10)
    return SubmitAction(option.action, amount)


@pytest.mark.parametrize("seats", [2, 3, 5])
def test_bot_sessions_conserve_chips(seats):
    config = TableConfig(seats=seats, starting_stack=500, sb=5, bb=10)
    chips = seats * config.starting_stack

    for seed in range(40):
        rng = random.Random(seed)
        state = dispatch(None, StartSession("Stress", config))
        for _ in range(30):
            state = dispatch(state, NewHand(), rng)
            check_invariants(state, chips)
            if is_session_over(state):
                break
            steps = 0
            while not state.is_complete:
                if is_user_turn(state):
                    state = dispatch(state, random_human_command(state, rng), rng)
                else:
                    updated = dispatch(state, BotTurn(), rng)
                    assert updated is not state
                    state = updated
                check_invariants(state, chips)
                steps += 1
                assert steps < 500, "hand did not terminate"
            assert sum(winner.amount for winner in state.winners) > 0
