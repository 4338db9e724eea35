from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Union

from .game import (
    create_initial_game_state,
    execute_bot_turn,
    is_user_turn,
    process_action,
    start_new_hand,
)
from .models import ActionType, BotSeat, TableConfig, TableState

LOGGER = logging.getLogger("holdem_engine")


@dataclass(frozen=True)
class StartSession:
    name: str = "You"
    config: Optional[TableConfig] = None


@dataclass(frozen=True)
class NewHand:
    pass


@dataclass(frozen=True)
class SubmitAction:
    action: ActionType
    amount: Optional[int] = None


@dataclass(frozen=True)
class BotTurn:
    pass


Command = Union[StartSession, NewHand, SubmitAction, BotTurn]


def dispatch(state: Optional[TableState], command: Command, rng: Optional[random.Random] = None) -> TableState:
    """Route one command to the engine and return the next snapshot.

    Human actions only land when the human seat is on act, and bot turns only
    when a bot is; anything else returns ``state`` unchanged.
    """
    if isinstance(command, StartSession):
        return create_initial_game_state(command.name, command.config)
    if state is None:
        raise ValueError("No session: dispatch StartSession first")
    if isinstance(command, NewHand):
        return start_new_hand(state, rng)
    if isinstance(command, SubmitAction):
        if not is_user_turn(state):
            LOGGER.debug("Dropping %s: not the human seat's turn", command.action)
            return state
        return process_action(state, command.action, command.amount)
    if isinstance(command, BotTurn):
        if state.active_index is None or not isinstance(state.players[state.active_index].role, BotSeat):
            return state
        return execute_bot_turn(state, rng)
    raise TypeError(f"Unknown command: {command!r}")
