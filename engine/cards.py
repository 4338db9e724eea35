from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

RANKS = "23456789TJQKA"
SUITS = "shdc"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
SUIT_SYMBOLS = {"s": "♠", "h": "♥", "d": "♦", "c": "♣"}

Deck = Tuple["Card", ...]


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    def __str__(self) -> str:
        return self.label


def create_deck() -> Deck:
    """All 52 cards, ranks ascending and suits in ``SUITS`` order."""
    return tuple(Card(rank, suit) for rank in RANKS for suit in SUITS)


def shuffle_deck(deck: Sequence[Card], rng: Optional[random.Random] = None) -> Deck:
    # random.shuffle is Fisher-Yates; shuffle a copy so the caller's deck is untouched.
    rng = rng or random.Random()
    cards = list(deck)
    rng.shuffle(cards)
    return tuple(cards)


def deal_cards(deck: Sequence[Card], count: int) -> Tuple[Deck, Deck]:
    """Split ``deck`` into the first ``count`` cards and what remains."""
    if count < 0:
        raise ValueError("Cannot deal a negative number of cards")
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    return tuple(deck[:count]), tuple(deck[count:])


def get_rank_value(card: Card) -> int:
    return card.value


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_card(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(label[0].upper(), label[1].lower())


def parse_cards(labels: Sequence[str]) -> Deck:
    return tuple(parse_card(label) for label in labels)
