import math
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from flipcard.services.timefmt import format_seconds

DEFAULT_PAIRS: Dict[str, str] = {
    'melbourne': 'australia',
    'beijing': 'china',
    'brasilia': 'brazil',
    'cairo': 'Egypt',
    'madrid': 'spain',
    'newyork': 'USA',
}


class GameState(str, Enum):
    INTRO = 'intro'
    PLAYING = 'playing'
    RESOLVING = 'resolving'
    COMPLETE = 'complete'


class FlipOutcome(str, Enum):
    IGNORED = 'ignored'
    FLIPPED = 'flipped'
    MATCH = 'match'
    MISMATCH = 'mismatch'
    COMPLETE = 'complete'


@dataclass
class Card:
    value: str
    partner_value: str
    flipped: bool = False
    matched: bool = False

    @property
    def image(self) -> str:
        return f'images/{self.value}.webp'

    def to_dict(self, index: int) -> dict:
        visible = self.flipped or self.matched
        return {
            'index': index,
            'value': self.value if visible else None,
            'image': self.image if visible else None,
            'flipped': self.flipped,
            'matched': self.matched,
        }


def is_match(pairs: Dict[str, str], a: str, b: str) -> bool:
    return pairs.get(a) == b or pairs.get(b) == a


def build_cards(pairs: Dict[str, str]) -> List[Card]:
    cards = []
    for city, country in pairs.items():
        cards.append(Card(value=city, partner_value=country))
        cards.append(Card(value=country, partner_value=city))
    return cards


def shuffle_cards(cards: List[Card], rng: random.Random = None) -> List[Card]:
    # random.shuffle is Fisher-Yates, so every order is equally likely
    (rng or random).shuffle(cards)
    return cards


def layout_columns(total_cards: int) -> int:
    return max(3, math.ceil(math.sqrt(total_cards)))


def validate_pairs(pairs) -> Dict[str, str]:
    if not isinstance(pairs, dict) or not pairs:
        raise ValueError('pairs must be a non-empty mapping of city to country')
    values = []
    for city, country in pairs.items():
        if not isinstance(city, str) or not isinstance(country, str) or not city or not country:
            raise ValueError('pair names must be non-empty strings')
        values.extend([city, country])
    if len(set(values)) != len(values):
        raise ValueError('every city and country must be distinct')
    return dict(pairs)


@dataclass
class GameSession:
    """State of one board, from the intro screen to the final match.

    Every delayed action is tagged with ``generation``; reset and dispose
    bump it so that callbacks scheduled for an earlier board are dropped.
    """
    pairs: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PAIRS))
    clock: Callable[[], float] = time.monotonic
    rng: Optional[random.Random] = None
    cards: List[Card] = field(default_factory=list)
    flipped_cards: List[int] = field(default_factory=list)
    matched_pair_count: int = 0
    start_timestamp: Optional[float] = None
    elapsed_at_completion: Optional[float] = None
    state: GameState = GameState.INTRO
    generation: int = 0
    summary: Optional[dict] = None
    disposed: bool = False

    def __post_init__(self):
        self.pairs = validate_pairs(self.pairs)
        if not self.cards:
            self.cards = shuffle_cards(build_cards(self.pairs), self.rng)

    @property
    def total_cards(self) -> int:
        return len(self.cards)

    @property
    def total_pairs(self) -> int:
        return self.total_cards // 2

    @property
    def columns(self) -> int:
        return layout_columns(self.total_cards)

    def start(self) -> bool:
        if self.disposed or self.state != GameState.INTRO:
            return False
        self.state = GameState.PLAYING
        self.start_timestamp = self.clock()
        return True

    def flip(self, index: int) -> FlipOutcome:
        if self.disposed or self.state != GameState.PLAYING:
            return FlipOutcome.IGNORED
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < self.total_cards:
            return FlipOutcome.IGNORED
        card = self.cards[index]
        if card.flipped or card.matched or len(self.flipped_cards) >= 2:
            return FlipOutcome.IGNORED
        card.flipped = True
        self.flipped_cards.append(index)
        if len(self.flipped_cards) == 2:
            return self.resolve()
        return FlipOutcome.FLIPPED

    def resolve(self) -> FlipOutcome:
        if len(self.flipped_cards) != 2:
            return FlipOutcome.IGNORED
        first, second = (self.cards[i] for i in self.flipped_cards)
        if not is_match(self.pairs, first.value, second.value):
            self.state = GameState.RESOLVING
            return FlipOutcome.MISMATCH
        first.matched = second.matched = True
        self.matched_pair_count += 1
        self.flipped_cards = []
        if self.matched_pair_count == self.total_pairs:
            self.state = GameState.COMPLETE
            self.elapsed_at_completion = self.clock() - self.start_timestamp
            return FlipOutcome.COMPLETE
        return FlipOutcome.MATCH

    def unflip_mismatch(self, generation: int) -> bool:
        """Turn a mismatched pair face down again. False if stale."""
        if generation != self.generation or self.state != GameState.RESOLVING:
            return False
        for i in self.flipped_cards:
            self.cards[i].flipped = False
        self.flipped_cards = []
        self.state = GameState.PLAYING
        return True

    def reveal_summary(self, generation: int, summary: dict) -> bool:
        if generation != self.generation or self.state != GameState.COMPLETE:
            return False
        self.summary = summary
        return True

    def reset(self) -> bool:
        if self.disposed:
            return False
        self.generation += 1
        self.cards = shuffle_cards(build_cards(self.pairs), self.rng)
        self.flipped_cards = []
        self.matched_pair_count = 0
        self.elapsed_at_completion = None
        self.summary = None
        self.state = GameState.PLAYING
        self.start_timestamp = self.clock()
        return True

    def dispose(self) -> None:
        self.generation += 1
        self.disposed = True

    def elapsed_seconds(self) -> float:
        if self.elapsed_at_completion is not None:
            return self.elapsed_at_completion
        if self.start_timestamp is None:
            return 0.0
        return self.clock() - self.start_timestamp

    def elapsed_display(self) -> str:
        return format_seconds(int(self.elapsed_seconds()))

    def to_dict(self) -> dict:
        return {
            'state': self.state.value,
            'generation': self.generation,
            'cards': [c.to_dict(i) for i, c in enumerate(self.cards)],
            'flipped_cards': list(self.flipped_cards),
            'matched_pairs': self.matched_pair_count,
            'total_cards': self.total_cards,
            'columns': self.columns,
            'elapsed': self.elapsed_display(),
            'summary': self.summary,
        }
