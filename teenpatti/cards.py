"""Card value type for Teen Patti."""

from dataclasses import dataclass
from typing import List

SUITS = ['hearts', 'diamonds', 'clubs', 'spades']
RANKS = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']
# Ace counts low; the evaluator handles Q-K-A separately.
RANK_VALUES = {rank: i for i, rank in enumerate(RANKS, start=1)}

SUIT_SYMBOLS = {
    'hearts': '♥',
    'diamonds': '♦',
    'clubs': '♣',
    'spades': '♠'
}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self):
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    def to_dict(self) -> dict:
        return {'rank': self.rank, 'suit': self.suit, 'value': self.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'Card':
        return cls(rank=str(data['rank']).upper(), suit=str(data['suit']).lower())

    @classmethod
    def parse(cls, text: str) -> 'Card':
        """Parse a short form such as 'AS', '10h' or 'qd'."""
        text = text.strip()
        if len(text) < 2:
            raise ValueError(f"Invalid card: {text!r}")
        rank, suit_letter = text[:-1].upper(), text[-1].lower()
        for suit in SUITS:
            if suit[0] == suit_letter:
                return cls(rank, suit)
        raise ValueError(f"Invalid suit: {suit_letter!r}")

    def __str__(self) -> str:
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def __repr__(self) -> str:
        return str(self)


def parse_cards(texts: List[str]) -> List[Card]:
    """Parse several short-form cards."""
    return [Card.parse(t) for t in texts]
