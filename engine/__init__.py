"""Texas Hold'em rules engine: cards, hand ranking, betting and bot turns."""

from .cards import Card, RANKS, SUITS, create_deck, deal_cards, get_rank_value, parse_cards, shuffle_deck
from .evaluator import HandRank, compare_hands, evaluate_hand, format_hand
from .models import (
    ActionType,
    BotPersonality,
    BotSeat,
    BotStyle,
    HumanSeat,
    Player,
    Street,
    TableConfig,
    TableState,
    ValidAction,
    Winner,
)
from .game import (
    create_initial_game_state,
    execute_bot_turn,
    get_valid_actions,
    is_hand_complete,
    process_action,
    run_showdown,
    start_new_hand,
)
from .dispatch import BotTurn, NewHand, StartSession, SubmitAction, dispatch

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "create_deck",
    "deal_cards",
    "get_rank_value",
    "parse_cards",
    "shuffle_deck",
    "HandRank",
    "compare_hands",
    "evaluate_hand",
    "format_hand",
    "ActionType",
    "BotPersonality",
    "BotSeat",
    "BotStyle",
    "HumanSeat",
    "Player",
    "Street",
    "TableConfig",
    "TableState",
    "ValidAction",
    "Winner",
    "create_initial_game_state",
    "execute_bot_turn",
    "get_valid_actions",
    "is_hand_complete",
    "process_action",
    "run_showdown",
    "start_new_hand",
    "BotTurn",
    "NewHand",
    "StartSession",
    "SubmitAction",
    "dispatch",
]
