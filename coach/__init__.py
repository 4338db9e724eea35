"""Read-only table summaries for an external coaching model."""

from .context import COACH_SYSTEM_PROMPT, coach_prompt, format_cards, format_game_context, position_name

__all__ = [
    "COACH_SYSTEM_PROMPT",
    "coach_prompt",
    "format_cards",
    "format_game_context",
    "position_name",
]
