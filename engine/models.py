from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .cards import Card


class Street(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"
    COMPLETE = "complete"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    ALL_IN = "all-in"


class BotStyle(str, Enum):
    TIGHT_PASSIVE = "tight-passive"
    TIGHT_AGGRESSIVE = "tight-aggressive"
    LOOSE_PASSIVE = "loose-passive"
    LOOSE_AGGRESSIVE = "loose-aggressive"

    @property
    def is_loose(self) -> bool:
        return self.value.startswith("loose")


@dataclass(frozen=True)
class TableConfig:
    seats: int = 5
    starting_stack: int = 1_000
    sb: int = 10
    bb: int = 20
    bot_delay_ms: Tuple[int, int] = (1_500, 2_500)


@dataclass(frozen=True)
class BotPersonality:
    id: str
    name: str
    avatar: str
    style: BotStyle
    preflop_threshold: int
    aggression_factor: float


@dataclass(frozen=True)
class HumanSeat:
    pass


@dataclass(frozen=True)
class BotSeat:
    personality: BotPersonality


SeatRole = Union[HumanSeat, BotSeat]


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    seat_index: int
    stack: int
    role: SeatRole
    avatar: str = ""
    hole_cards: Tuple[Card, ...] = ()
    current_bet: int = 0
    total_bet: int = 0
    folded: bool = False
    all_in: bool = False
    has_acted: bool = False

    @property
    def is_bot(self) -> bool:
        return isinstance(self.role, BotSeat)

    @property
    def personality(self) -> Optional[BotPersonality]:
        if isinstance(self.role, BotSeat):
            return self.role.personality
        return None

    @property
    def can_act(self) -> bool:
        return not self.folded and not self.all_in and self.stack > 0


@dataclass(frozen=True)
class ActionRecord:
    player_id: str
    player_name: str
    action: ActionType
    amount: Optional[int]
    street: Street


@dataclass(frozen=True)
class Winner:
    player_id: str
    player_name: str
    seat_index: int
    amount: int
    hand: str


@dataclass(frozen=True)
class ValidAction:
    action: ActionType
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None


@dataclass(frozen=True)
class TableState:
    players: Tuple[Player, ...]
    small_blind: int
    big_blind: int
    hand_number: int = 0
    street: Street = Street.PREFLOP
    deck: Tuple[Card, ...] = ()
    community_cards: Tuple[Card, ...] = ()
    dealer_index: int = 0
    active_index: Optional[int] = None
    pot: int = 0
    current_bet: int = 0
    min_raise: int = 0
    action_history: Tuple[ActionRecord, ...] = field(default_factory=tuple)
    winners: Optional[Tuple[Winner, ...]] = None
    is_complete: bool = False
