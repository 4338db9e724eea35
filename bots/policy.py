from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from engine.cards import Card
from engine.evaluator import evaluate_hand
from engine.models import ActionType, BotPersonality, Player, Street, TableState, ValidAction

_RNG = random.Random()
_HIGH_CARD_POINTS = {14: 10.0, 13: 8.0, 12: 7.0, 11: 6.0}
_GAP_PENALTY = {1: 1, 2: 2, 3: 4}

STRONG_HAND = 0.6
MEDIUM_HAND = 0.3
POT_ODDS_LIMIT = 0.4
BLUFF_AGGRESSION = 0.5
BLUFF_FREQUENCY = 0.15


@dataclass(frozen=True)
class BotDecision:
    action: ActionType
    amount: Optional[int] = None


def chen_score(hole_cards: Sequence[Card]) -> int:
    """Chen-style preflop score from 0 (trash) to 20 (aces)."""
    if len(hole_cards) != 2:
        return 0

    first, second = hole_cards
    high = max(first.value, second.value)
    score = _HIGH_CARD_POINTS.get(high, high / 2)

    if first.rank == second.rank:
        score = max(score * 2, 5)
    if first.suit == second.suit:
        score += 2

    gap = abs(first.value - second.value) - 1
    score -= _GAP_PENALTY.get(gap, 5 if gap >= 4 else 0)
    if gap <= 1 and high <= 12:
        score += 1  # connected enough to make straights

    return max(0, math.floor(score + 0.5))


def postflop_strength(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
    """Hand category scaled into 0.1 (high card) .. 1.0 (royal flush)."""
    if not community_cards:
        return 0.0
    return evaluate_hand(tuple(hole_cards) + tuple(community_cards)).category / 10


def decide(
    personality: BotPersonality,
    player: Player,
    state: TableState,
    valid_actions: Sequence[ValidAction],
    rng: Optional[random.Random] = None,
) -> BotDecision:
    """Pick one legal action for a bot seat.

    ``rng`` only needs a ``random()`` method, so tests can pin the draw.
    """
    rng = rng or _RNG
    options = {option.action: option for option in valid_actions}
    if state.street == Street.PREFLOP:
        return _preflop_decision(personality, player, state, options, rng)
    return _postflop_decision(personality, player, state, options, rng)


def _preflop_decision(
    personality: BotPersonality,
    player: Player,
    state: TableState,
    options: Dict[ActionType, ValidAction],
    rng,
) -> BotDecision:
    score = chen_score(player.hole_cards)
    if score < personality.preflop_threshold:
        return _check_or_fold(options)

    raise_option = _raise_option(options)
    wants_raise = rng.random() < personality.aggression_factor
    if raise_option and wants_raise:
        # 2x big blind for marginal hands up to 4x for aces.
        multiplier = 2 + (score / 20) * 2
        amount = int(state.big_blind * multiplier + state.current_bet)
        return BotDecision(raise_option.action, _clamp(amount, raise_option))

    if ActionType.CALL in options:
        return BotDecision(ActionType.CALL)
    return _check_or_fold(options)


def _postflop_decision(
    personality: BotPersonality,
    player: Player,
    state: TableState,
    options: Dict[ActionType, ValidAction],
    rng,
) -> BotDecision:
    strength = postflop_strength(player.hole_cards, state.community_cards)
    to_call = max(state.current_bet - player.current_bet, 0)

    if strength > STRONG_HAND:
        raise_option = _raise_option(options)
        if raise_option and rng.random() < personality.aggression_factor:
            amount = int(state.pot * 0.5 + state.current_bet)
            return BotDecision(raise_option.action, _clamp(amount, raise_option))
        for action in (ActionType.CHECK, ActionType.CALL):
            if action in options:
                return BotDecision(action)
        return BotDecision(ActionType.FOLD)

    if strength > MEDIUM_HAND:
        if ActionType.CHECK in options:
            return BotDecision(ActionType.CHECK)
        pot_odds = to_call / (state.pot + to_call) if to_call else 0.0
        if ActionType.CALL in options and (pot_odds < POT_ODDS_LIMIT or personality.style.is_loose):
            return BotDecision(ActionType.CALL)
        return BotDecision(ActionType.FOLD)

    if ActionType.CHECK in options:
        return BotDecision(ActionType.CHECK)
    if personality.aggression_factor > BLUFF_AGGRESSION and rng.random() < BLUFF_FREQUENCY:
        raise_option = _raise_option(options)
        if raise_option:
            return BotDecision(raise_option.action, raise_option.min_amount)
    return BotDecision(ActionType.FOLD)


def _raise_option(options: Dict[ActionType, ValidAction]) -> Optional[ValidAction]:
    return options.get(ActionType.RAISE) or options.get(ActionType.BET)


def _clamp(amount: int, option: ValidAction) -> int:
    assert option.min_amount is not None and option.max_amount is not None
    return min(max(amount, option.min_amount), option.max_amount)


def _check_or_fold(options: Dict[ActionType, ValidAction]) -> BotDecision:
    if ActionType.CHECK in options:
        return BotDecision(ActionType.CHECK)
    return BotDecision(ActionType.FOLD)
