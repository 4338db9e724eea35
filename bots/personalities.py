from __future__ import annotations

from typing import Dict, Tuple

from engine.models import BotPersonality, BotStyle

# The four house bots, in seat order 1-4.
BOTS: Tuple[BotPersonality, ...] = (
    BotPersonality(
        id="tight-tim",
        name="Tight Tim",
        avatar="🧔",
        style=BotStyle.TIGHT_PASSIVE,
        preflop_threshold=10,  # premium hands only
        aggression_factor=0.2,
    ),
    BotPersonality(
        id="aggro-andy",
        name="Aggro Andy",
        avatar="😤",
        style=BotStyle.TIGHT_AGGRESSIVE,
        preflop_threshold=8,
        aggression_factor=0.7,
    ),
    BotPersonality(
        id="loose-lucy",
        name="Loose Lucy",
        avatar="💃",
        style=BotStyle.LOOSE_PASSIVE,
        preflop_threshold=4,
        aggression_factor=0.25,
    ),
    BotPersonality(
        id="wild-wes",
        name="Wild Wes",
        avatar="🤠",
        style=BotStyle.LOOSE_AGGRESSIVE,
        preflop_threshold=3,
        aggression_factor=0.8,
    ),
)

BOTS_BY_ID: Dict[str, BotPersonality] = {bot.id: bot for bot in BOTS}
