from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .cards import cards_to_labels
from .game import amount_to_call, get_valid_actions
from .models import ActionRecord, Player, Street, TableState, ValidAction, Winner

HIDDEN_CARD = "??"

# JSON-ready views of a snapshot. Reading a view never changes the snapshot.


def turn_token(state: TableState) -> str:
    """Identifies one decision point; stale client actions carry an old token."""
    return f"{state.hand_number}:{len(state.action_history)}"


def valid_actions_payload(actions: Iterable[ValidAction]) -> List[Dict[str, object]]:
    return [
        {"action": option.action.value, "min_amount": option.min_amount, "max_amount": option.max_amount}
        for option in actions
    ]


def action_record_payload(record: ActionRecord) -> Dict[str, object]:
    return {
        "player_id": record.player_id,
        "player_name": record.player_name,
        "action": record.action.value,
        "amount": record.amount,
        "street": record.street.value,
    }


def winners_payload(winners: Optional[Iterable[Winner]]) -> List[Dict[str, object]]:
    return [
        {
            "seat": winner.seat_index,
            "player_id": winner.player_id,
            "name": winner.player_name,
            "amount": winner.amount,
            "hand": winner.hand,
        }
        for winner in winners or ()
    ]


def player_payload(player: Player, state: TableState, reveal: bool) -> Dict[str, object]:
    personality = player.personality
    if reveal:
        hole: List[str] = cards_to_labels(player.hole_cards)
    else:
        hole = [HIDDEN_CARD] * len(player.hole_cards)
    return {
        "seat": player.seat_index,
        "id": player.id,
        "name": player.name,
        "avatar": player.avatar,
        "is_bot": player.is_bot,
        "style": personality.style.value if personality else None,
        "stack": player.stack,
        "current_bet": player.current_bet,
        "total_bet": player.total_bet,
        "folded": player.folded,
        "all_in": player.all_in,
        "has_acted": player.has_acted,
        "is_dealer": player.seat_index == state.dealer_index,
        "hole": hole,
    }


def table_payload(state: TableState, viewer_seat: Optional[int] = None) -> Dict[str, object]:
    """Snapshot as seen from ``viewer_seat``; ``None`` is the omniscient view.

    Opponents' hole cards stay hidden until they are shown down.
    """
    shown_down = state.street == Street.SHOWDOWN

    def reveal(player: Player) -> bool:
        if viewer_seat is None or player.seat_index == viewer_seat:
            return True
        return shown_down and not player.folded

    return {
        "hand_number": state.hand_number,
        "street": state.street.value,
        "pot": state.pot,
        "current_bet": state.current_bet,
        "min_raise": state.min_raise,
        "sb": state.small_blind,
        "bb": state.big_blind,
        "dealer": state.dealer_index,
        "active": state.active_index,
        "community": cards_to_labels(state.community_cards),
        "players": [player_payload(player, state, reveal(player)) for player in state.players],
        "actions": [action_record_payload(record) for record in state.action_history],
        "is_complete": state.is_complete,
        "winners": winners_payload(state.winners),
    }


def act_payload(state: TableState) -> Dict[str, object]:
    return {
        "seat": state.active_index,
        "turn": turn_token(state),
        "street": state.street.value,
        "pot": state.pot,
        "to_call": amount_to_call(state),
        "legal": valid_actions_payload(get_valid_actions(state)),
    }
