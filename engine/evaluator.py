from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .cards import SUIT_SYMBOLS, Card

HIGH_CARD = 1
ONE_PAIR = 2
TWO_PAIR = 3
THREE_OF_A_KIND = 4
STRAIGHT = 5
FLUSH = 6
FULL_HOUSE = 7
FOUR_OF_A_KIND = 8
STRAIGHT_FLUSH = 9
ROYAL_FLUSH = 10

CATEGORY_NAMES = {
    HIGH_CARD: "High Card",
    ONE_PAIR: "Pair",
    TWO_PAIR: "Two Pair",
    THREE_OF_A_KIND: "Three of a Kind",
    STRAIGHT: "Straight",
    FLUSH: "Flush",
    FULL_HOUSE: "Full House",
    FOUR_OF_A_KIND: "Four of a Kind",
    STRAIGHT_FLUSH: "Straight Flush",
    ROYAL_FLUSH: "Royal Flush",
}


@dataclass(frozen=True, order=True)
class HandRank:
    """Comparable strength of a best five-card hand. Higher is better."""

    category: int
    tiebreak: Tuple[int, ...]
    name: str = field(default="", compare=False)


def evaluate_hand(cards: Sequence[Card]) -> HandRank:
    """Return the best five-card rank out of 5 to 7 cards (Texas Hold'em)."""
    if not 5 <= len(cards) <= 7:
        raise ValueError(f"Expected 5 to 7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")
    best: Optional[HandRank] = None
    for combo in itertools.combinations(cards, 5):
        rank = _evaluate_five(combo)
        if best is None or rank > best:
            best = rank
    assert best is not None
    return best


def compare_hands(a: HandRank, b: HandRank) -> int:
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def format_hand(cards: Iterable[Card]) -> str:
    return " ".join(f"{card.rank}{SUIT_SYMBOLS[card.suit]}" for card in cards)


def describe_rank(rank: HandRank) -> str:
    return CATEGORY_NAMES[rank.category].lower().replace(" ", "_")


def _rank(category: int, tiebreak: Iterable[int]) -> HandRank:
    return HandRank(category, tuple(tiebreak), CATEGORY_NAMES[category])


def _evaluate_five(cards: Sequence[Card]) -> HandRank:
    values = sorted((card.value for card in cards), reverse=True)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(values)

    counts: Dict[int, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    # Groups ordered by size first, then by rank: quads/trips/pairs lead, kickers trail.
    grouped = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    shape = [count for _, count in grouped]
    ordered = [value for value, _ in grouped]

    if straight_high and is_flush:
        if straight_high == 14:
            return _rank(ROYAL_FLUSH, [14])
        return _rank(STRAIGHT_FLUSH, [straight_high])
    if shape[0] == 4:
        return _rank(FOUR_OF_A_KIND, ordered)
    if shape == [3, 2]:
        return _rank(FULL_HOUSE, ordered)
    if is_flush:
        return _rank(FLUSH, values)
    if straight_high:
        return _rank(STRAIGHT, [straight_high])
    if shape[0] == 3:
        return _rank(THREE_OF_A_KIND, ordered)
    if shape[:2] == [2, 2]:
        return _rank(TWO_PAIR, ordered)
    if shape[0] == 2:
        return _rank(ONE_PAIR, ordered)
    return _rank(HIGH_CARD, values)


def _straight_high(values: Sequence[int]) -> Optional[int]:
    distinct = sorted(set(values), reverse=True)
    if len(distinct) != 5:
        return None
    if distinct[0] - distinct[4] == 4:
        return distinct[0]
    if distinct == [14, 5, 4, 3, 2]:  # wheel, ace plays low
        return 5
    return None
