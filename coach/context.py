from __future__ import annotations

from typing import Iterable, List, Optional

from engine.cards import SUIT_SYMBOLS, Card
from engine.game import amount_to_call, get_user_player
from engine.models import Player, TableState

# Text handed to an LLM coach alongside the player's question. Everything
# here only reads the snapshot.

COACH_SYSTEM_PROMPT = """You are an expert Texas Hold'em poker coach teaching a complete beginner. \
Explain the situation and recommend the best action.

Guidelines:
1. Explain in simple terms and assume zero poker knowledge.
2. Always explain why you recommend an action.
3. Mention hand strength, position, pot odds and opponent tendencies when relevant.
4. Keep responses concise (2-4 paragraphs).
5. If the user asks a question, answer it directly first.

Always end with a clear RECOMMENDATION: [Fold/Check/Call/Raise] + brief reason."""

STREET_DESCRIPTIONS = {
    "preflop": "Pre-Flop (before any community cards)",
    "flop": "Flop (3 community cards)",
    "turn": "Turn (4 community cards)",
    "river": "River (5 community cards)",
    "showdown": "Showdown",
    "complete": "Hand complete",
}
RECENT_ACTIONS = 5


def format_cards(cards: Iterable[Card]) -> str:
    rendered = " ".join(f"{card.rank}{SUIT_SYMBOLS[card.suit]}" for card in cards)
    return rendered or "None"


def position_name(seat_index: int, dealer_index: int, num_players: int) -> str:
    relative = (seat_index - dealer_index + num_players) % num_players
    if relative == 0:
        return "Button (Dealer) - Best position"
    if relative == 1:
        return "Small Blind"
    if relative == 2:
        return "Big Blind"
    if relative <= num_players / 2:
        return "Early Position - Act first"
    return "Late Position - Good position"


def _opponent_line(player: Player) -> str:
    line = f"- {player.name}: ${player.stack} stack, betting ${player.current_bet}"
    if player.all_in:
        line += " (all-in)"
    personality = player.personality
    if personality is not None:
        line += f" - Style: {personality.style.value}"
    return line


def format_game_context(state: TableState, seat_index: Optional[int] = None) -> str:
    """Markdown summary of the table from one seat's point of view (default: the human)."""
    if seat_index is None:
        hero = get_user_player(state)
    else:
        hero = state.players[seat_index]

    lines: List[str] = [
        "## Current Game Situation",
        "",
        f"**Street**: {STREET_DESCRIPTIONS.get(state.street.value, state.street.value)}",
        f"**Your Hole Cards**: {format_cards(hero.hole_cards) if hero else 'Unknown'}",
        f"**Community Cards**: {format_cards(state.community_cards)}",
        f"**Pot**: ${state.pot}",
        f"**Blinds**: ${state.small_blind}/${state.big_blind}",
    ]
    if hero is not None:
        position = position_name(hero.seat_index, state.dealer_index, len(state.players))
        lines.extend(
            [
                f"**Current Bet to Call**: ${amount_to_call(state, hero.seat_index)}",
                f"**Your Stack**: ${hero.stack}",
                f"**Your Position**: Seat {hero.seat_index} ({position})",
            ]
        )

    lines.extend(["", "**Opponents Still In**:"])
    opponents = [
        player
        for player in state.players
        if not player.folded and (hero is None or player.seat_index != hero.seat_index)
    ]
    lines.extend(_opponent_line(player) for player in opponents)

    recent = state.action_history[-RECENT_ACTIONS:]
    if recent:
        lines.extend(["", "**Recent Actions**:"])
        for record in recent:
            entry = f"- {record.player_name}: {record.action.value}"
            if record.amount:
                entry += f" ${record.amount}"
            lines.append(entry)

    return "\n".join(lines) + "\n"


def coach_prompt(state: TableState, seat_index: Optional[int] = None) -> str:
    return (
        f"{COACH_SYSTEM_PROMPT}\n\nCURRENT GAME STATE:\n{format_game_context(state, seat_index)}\n"
        "Please analyze this situation based on the player's questions or current state. "
        "Always provide a clear recommendation."
    )
