from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from bots import personalities, policy

from .cards import create_deck, deal_cards, shuffle_deck
from .evaluator import HandRank, compare_hands, evaluate_hand, format_hand
from .models import (
    ActionRecord,
    ActionType,
    BotSeat,
    HumanSeat,
    Player,
    Street,
    TableConfig,
    TableState,
    ValidAction,
    Winner,
)

LOGGER = logging.getLogger("holdem_engine")

# Every entry point here maps a frozen TableState to a new one. Nothing is
# mutated in place, so old snapshots stay valid for history or undo.

DEFAULT_CONFIG = TableConfig()
HUMAN_ID = "user"
FOLD_OUT_HAND = "Others folded"

_NEXT_STREET = {
    Street.PREFLOP: (Street.FLOP, 3),
    Street.FLOP: (Street.TURN, 1),
    Street.TURN: (Street.RIVER, 1),
}
_RAISE_ACTIONS = (ActionType.BET, ActionType.RAISE, ActionType.ALL_IN)


# Session / hand lifecycle --------------------------------------------


def create_initial_game_state(name: str = "You", config: Optional[TableConfig] = None) -> TableState:
    config = config or DEFAULT_CONFIG
    if not 2 <= config.seats <= len(personalities.BOTS) + 1:
        raise ValueError(f"Table supports 2 to {len(personalities.BOTS) + 1} seats, got {config.seats}")

    players = [
        Player(
            id=HUMAN_ID,
            name=name,
            seat_index=0,
            stack=config.starting_stack,
            role=HumanSeat(),
            avatar="👤",
        )
    ]
    for seat_index, personality in enumerate(personalities.BOTS[: config.seats - 1], start=1):
        players.append(
            Player(
                id=personality.id,
                name=personality.name,
                seat_index=seat_index,
                stack=config.starting_stack,
                role=BotSeat(personality),
                avatar=personality.avatar,
            )
        )

    return TableState(
        players=tuple(players),
        small_blind=config.sb,
        big_blind=config.bb,
        min_raise=config.bb,
    )


def start_new_hand(state: TableState, rng: Optional[random.Random] = None) -> TableState:
    funded = [player for player in state.players if player.stack > 0]
    if len(funded) < 2:
        LOGGER.info("Session over: %d funded seat(s) left", len(funded))
        return replace(state, active_index=None, is_complete=True)

    dealer = _next_funded_seat(state.players, state.dealer_index)
    deck = shuffle_deck(create_deck(), rng)

    # Single pass: each funded seat takes its two cards in seat order.
    players: List[Player] = []
    for player in state.players:
        if player.stack <= 0:
            players.append(_reset_for_hand(player, hole_cards=(), folded=True))
            continue
        hole, deck = deal_cards(deck, 2)
        players.append(_reset_for_hand(player, hole_cards=hole, folded=False))

    seated = tuple(players)
    sb_index = _next_funded_seat(seated, dealer)
    bb_index = _next_funded_seat(seated, sb_index)
    seated, sb_amount = _post_blind(seated, sb_index, state.small_blind)
    seated, bb_amount = _post_blind(seated, bb_index, state.big_blind)

    state = replace(
        state,
        hand_number=state.hand_number + 1,
        street=Street.PREFLOP,
        deck=deck,
        community_cards=(),
        players=seated,
        dealer_index=dealer,
        active_index=None,
        pot=sb_amount + bb_amount,
        current_bet=max(sb_amount, bb_amount),
        min_raise=state.big_blind,
        action_history=(),
        winners=None,
        is_complete=False,
    )
    LOGGER.debug(
        "Hand %s: dealer=%s sb=%s(%s) bb=%s(%s)",
        state.hand_number,
        dealer,
        sb_index,
        sb_amount,
        bb_index,
        bb_amount,
    )
    # First to act preflop is the next seat after the big blind still able to act.
    return _continue_betting(state, bb_index)


def _reset_for_hand(player: Player, hole_cards: Tuple, folded: bool) -> Player:
    return replace(
        player,
        hole_cards=hole_cards,
        current_bet=0,
        total_bet=0,
        folded=folded,
        all_in=False,
        has_acted=False,
    )


def _post_blind(players: Tuple[Player, ...], index: int, blind: int) -> Tuple[Tuple[Player, ...], int]:
    player = players[index]
    amount = min(blind, player.stack)
    posted = replace(
        player,
        stack=player.stack - amount,
        current_bet=amount,
        total_bet=amount,
        all_in=player.stack - amount == 0,
    )
    return _with_player(players, index, posted), amount


# Queries ---------------------------------------------------------------


def active_player(state: TableState) -> Optional[Player]:
    if state.active_index is None:
        return None
    return state.players[state.active_index]


def get_user_player(state: TableState) -> Optional[Player]:
    for player in state.players:
        if isinstance(player.role, HumanSeat):
            return player
    return None


def is_user_turn(state: TableState) -> bool:
    player = active_player(state)
    return bool(player and not state.is_complete and isinstance(player.role, HumanSeat))


def is_hand_complete(state: TableState) -> bool:
    return state.is_complete


def is_session_over(state: TableState) -> bool:
    return len([player for player in state.players if player.stack > 0]) < 2


def hand_winners(state: TableState) -> Tuple[Winner, ...]:
    if not state.is_complete or state.winners is None:
        return ()
    return state.winners


def amount_to_call(state: TableState, seat_index: Optional[int] = None) -> int:
    if seat_index is None:
        seat_index = state.active_index
    if seat_index is None:
        return 0
    return max(state.current_bet - state.players[seat_index].current_bet, 0)


def get_valid_actions(state: TableState) -> List[ValidAction]:
    """Legal moves for the seat on act, with raise-to bounds where relevant."""
    player = active_player(state)
    if state.is_complete or player is None or not player.can_act:
        return []

    to_call = amount_to_call(state)
    actions = [ValidAction(ActionType.FOLD)]
    if to_call == 0:
        actions.append(ValidAction(ActionType.CHECK))
    if to_call > 0 and player.stack >= to_call:
        actions.append(ValidAction(ActionType.CALL))

    max_to = player.stack + player.current_bet
    if player.stack > to_call:
        min_to = min(state.current_bet + state.min_raise, max_to)
        kind = ActionType.BET if state.current_bet == 0 else ActionType.RAISE
        actions.append(ValidAction(kind, min_to, max_to))
    actions.append(ValidAction(ActionType.ALL_IN, max_to, max_to))
    return actions


# Betting round state machine ------------------------------------------


def process_action(state: TableState, action: ActionType, amount: Optional[int] = None) -> TableState:
    """Apply one action for the seat on act.

    Actions that cannot apply (no seat on act, folded seat, a check while
    owing chips) leave the snapshot untouched. Bet and raise amounts are
    raise-to totals for the street and get clamped into the legal range.
    """
    player = active_player(state)
    if state.is_complete or player is None or not player.can_act:
        LOGGER.debug("Ignoring %s: no seat able to act", action)
        return state

    action = ActionType(action)
    index = player.seat_index
    to_call = amount_to_call(state)
    if not _is_legal(player, action, to_call):
        LOGGER.debug("Ignoring illegal %s from seat %s (to_call=%s)", action.value, index, to_call)
        return state

    players = state.players
    pot = state.pot
    current_bet = state.current_bet
    min_raise = state.min_raise
    logged_amount: Optional[int] = None

    if action == ActionType.FOLD:
        players = _with_player(players, index, replace(player, folded=True, has_acted=True))
    elif action == ActionType.CHECK:
        players = _with_player(players, index, replace(player, has_acted=True))
    elif action == ActionType.CALL:
        paid = min(to_call, player.stack)
        players = _with_player(players, index, _commit(player, paid))
        pot += paid
        logged_amount = paid
    else:
        max_to = player.stack + player.current_bet
        if action == ActionType.ALL_IN:
            target = max_to
        else:
            min_to = min(current_bet + min_raise, max_to)
            target = min_to if amount is None else min(max(int(amount), min_to), max_to)
        paid = target - player.current_bet
        players = _with_player(players, index, _commit(player, paid))
        pot += paid
        logged_amount = target
        if target > current_bet:
            # A short all-in raise never shrinks the increment the next raiser must match.
            min_raise = max(min_raise, target - current_bet)
            current_bet = target
            players = tuple(
                replace(other, has_acted=False)
                if other.seat_index != index and not other.folded and not other.all_in
                else other
                for other in players
            )

    record = ActionRecord(
        player_id=player.id,
        player_name=player.name,
        action=action,
        amount=logged_amount,
        street=state.street,
    )
    state = replace(
        state,
        players=players,
        pot=pot,
        current_bet=current_bet,
        min_raise=min_raise,
        action_history=state.action_history + (record,),
    )

    remaining = [other.seat_index for other in players if not other.folded]
    if len(remaining) == 1:
        return _award_fold_out(state, remaining[0])
    return _continue_betting(state, index)


def _is_legal(player: Player, action: ActionType, to_call: int) -> bool:
    if action == ActionType.FOLD:
        return True
    if action == ActionType.CHECK:
        return to_call == 0
    if action == ActionType.CALL:
        return to_call > 0
    if action in _RAISE_ACTIONS:
        return player.stack > 0
    return False


def _commit(player: Player, paid: int) -> Player:
    stack = player.stack - paid
    return replace(
        player,
        stack=stack,
        current_bet=player.current_bet + paid,
        total_bet=player.total_bet + paid,
        all_in=stack == 0,
        has_acted=True,
    )


def _continue_betting(state: TableState, from_index: int) -> TableState:
    if not _betting_closed(state):
        next_index = _find_next_to_act(state.players, from_index, state.current_bet)
        if next_index is not None:
            return replace(state, active_index=next_index)
    return _advance_street(state)


def _find_next_to_act(players: Sequence[Player], from_index: int, current_bet: int) -> Optional[int]:
    # Clockwise from the seat after from_index, wrapping back to it last.
    for index in _clockwise_from(from_index, len(players)):
        player = players[index]
        if not player.can_act:
            continue
        if player.current_bet < current_bet or not player.has_acted:
            return index
    return None


def _betting_closed(state: TableState) -> bool:
    able = [player for player in state.players if player.can_act]
    if not able:
        return True
    # A lone seat that owes nothing has nobody left to bet against.
    return len(able) == 1 and able[0].current_bet >= state.current_bet


def _advance_street(state: TableState) -> TableState:
    players = tuple(replace(player, current_bet=0, has_acted=False) for player in state.players)
    state = replace(
        state,
        players=players,
        current_bet=0,
        min_raise=state.big_blind,
        active_index=None,
    )
    if state.street == Street.RIVER:
        return run_showdown(state)
    if state.street not in _NEXT_STREET:
        return state

    next_street, count = _NEXT_STREET[state.street]
    cards, deck = deal_cards(state.deck, count)
    state = replace(
        state,
        street=next_street,
        deck=deck,
        community_cards=state.community_cards + cards,
    )
    LOGGER.debug("Hand %s: %s %s", state.hand_number, next_street.value, [card.label for card in cards])
    return _continue_betting(state, state.dealer_index)


def _award_fold_out(state: TableState, winner_index: int) -> TableState:
    winner = state.players[winner_index]
    players = _with_player(state.players, winner_index, replace(winner, stack=winner.stack + state.pot))
    LOGGER.debug("Hand %s: %s wins %s uncontested", state.hand_number, winner.name, state.pot)
    return replace(
        state,
        players=players,
        pot=0,
        street=Street.COMPLETE,
        active_index=None,
        winners=(
            Winner(
                player_id=winner.id,
                player_name=winner.name,
                seat_index=winner_index,
                amount=state.pot,
                hand=FOLD_OUT_HAND,
            ),
        ),
        is_complete=True,
    )


def run_showdown(state: TableState) -> TableState:
    """Evaluate every live hand and split the pot among the best.

    Odd chips from an uneven split go one at a time to the tied winners in
    seat order, starting left of the dealer.
    """
    ranks: Dict[int, HandRank] = {
        player.seat_index: evaluate_hand(player.hole_cards + state.community_cards)
        for player in state.players
        if not player.folded
    }
    best = max(ranks.values())
    winner_seats = [
        index
        for index in _clockwise_from(state.dealer_index, len(state.players))
        if index in ranks and compare_hands(ranks[index], best) == 0
    ]

    share, remainder = divmod(state.pot, len(winner_seats))
    players = list(state.players)
    winners: List[Winner] = []
    for position, index in enumerate(winner_seats):
        payout = share + (1 if position < remainder else 0)
        player = players[index]
        players[index] = replace(player, stack=player.stack + payout)
        winners.append(
            Winner(
                player_id=player.id,
                player_name=player.name,
                seat_index=index,
                amount=payout,
                hand=f"{ranks[index].name} ({format_hand(player.hole_cards)})",
            )
        )
    LOGGER.debug(
        "Hand %s showdown: %s",
        state.hand_number,
        [(winner.player_name, winner.amount, winner.hand) for winner in winners],
    )

    return replace(
        state,
        street=Street.SHOWDOWN,
        players=tuple(players),
        pot=0,
        active_index=None,
        winners=tuple(winners),
        is_complete=True,
    )


# Bots ------------------------------------------------------------------


def execute_bot_turn(state: TableState, rng: Optional[random.Random] = None) -> TableState:
    player = active_player(state)
    if player is None or state.is_complete:
        return state
    if isinstance(player.role, HumanSeat):
        return state
    if isinstance(player.role, BotSeat):
        valid_actions = get_valid_actions(state)
        if not valid_actions:
            return state
        decision = policy.decide(player.role.personality, player, state, valid_actions, rng)
        LOGGER.debug("%s decides %s %s", player.name, decision.action.value, decision.amount)
        return process_action(state, decision.action, decision.amount)
    raise TypeError(f"Unknown seat role: {player.role!r}")


# Seat helpers ----------------------------------------------------------


def _with_player(players: Tuple[Player, ...], index: int, player: Player) -> Tuple[Player, ...]:
    updated = list(players)
    updated[index] = player
    return tuple(updated)


def _clockwise_from(start: int, count: int) -> List[int]:
    return [(start + step) % count for step in range(1, count + 1)]


def _next_funded_seat(players: Sequence[Player], start: int) -> int:
    for index in _clockwise_from(start, len(players)):
        if players[index].stack > 0:
            return index
    raise RuntimeError("No funded seat at the table")
