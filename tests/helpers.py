from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple

from engine.cards import Card, create_deck, parse_cards
from engine.game import create_initial_game_state, get_valid_actions, process_action
from engine.models import ActionType, TableConfig, TableState


class FixedRandom:
    """Stands in for random.Random with a pinned draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


def create_table(
    *,
    seats: int = 5,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    name: str = "Hero",
) -> TableState:
    """Fresh session state with the default bot roster."""
    return create_initial_game_state(name, TableConfig(seats=seats, starting_stack=starting_stack, sb=sb, bb=bb))


def stacked_deck(labels: Sequence[str]) -> Tuple[Card, ...]:
    """A full deck whose first cards are ``labels`` in order."""
    front = parse_cards(labels)
    rest = [card for card in create_deck() if card not in front]
    return tuple(front) + tuple(rest)


def rig_deck(monkeypatch, labels: Sequence[str]) -> None:
    """Make the next shuffles return a deck starting with ``labels``."""
    deck = stacked_deck(labels)
    monkeypatch.setattr("engine.game.shuffle_deck", lambda cards, rng=None: deck)


def with_stacks(state: TableState, stacks: Sequence[int]) -> TableState:
    players = tuple(replace(player, stack=stack) for player, stack in zip(state.players, stacks))
    return replace(state, players=players)


def total_chips(state: TableState) -> int:
    return state.pot + sum(player.stack for player in state.players)


def perform_actions(state: TableState, actions: Iterable[Tuple[ActionType, Optional[int]]]) -> TableState:
    """Apply a scripted sequence of (action, amount) for whoever is on act."""
    for action, amount in actions:
        state = process_action(state, action, amount)
    return state


def passive_action(state: TableState) -> ActionType:
    legal = {option.action for option in get_valid_actions(state)}
    if ActionType.CHECK in legal:
        return ActionType.CHECK
    if ActionType.CALL in legal:
        return ActionType.CALL
    if ActionType.ALL_IN in legal:
        return ActionType.ALL_IN
    return ActionType.FOLD


def auto_complete_hand(state: TableState) -> TableState:
    """Check or call every decision until the hand ends."""
    while not state.is_complete:
        state = process_action(state, passive_action(state))
    return state
