"""Scripted opponents: the house roster and the heuristic decision policy."""

from .personalities import BOTS, BOTS_BY_ID
from .policy import BotDecision, chen_score, decide, postflop_strength

__all__ = [
    "BOTS",
    "BOTS_BY_ID",
    "BotDecision",
    "chen_score",
    "decide",
    "postflop_strength",
]
