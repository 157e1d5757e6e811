"""Hand evaluation for 3-card Teen Patti hands."""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .cards import Card
from .exceptions import InvalidHandSize


class HandRank:
    HIGH_CARD = 1
    PAIR = 2
    COLOR = 3
    SEQUENCE = 4
    PURE_SEQUENCE = 5
    TRAIL = 6

    NAMES = {
        1: "High Card",
        2: "Pair",
        3: "Color",
        4: "Sequence",
        5: "Pure Sequence",
        6: "Trail"
    }

    @classmethod
    def name(cls, rank: int) -> str:
        return cls.NAMES.get(rank, "Unknown")


# Sequence scores for the two ace sequences. Any other sequence scores its
# top card (at most 13 for J-Q-K), so Q-K-A ranks first and A-2-3 second.
ACE_HIGH_SEQUENCE_SCORE = 200
ACE_LOW_SEQUENCE_SCORE = 199

_ACE_HIGH = (1, 12, 13)
_ACE_LOW = (1, 2, 3)


@dataclass(frozen=True)
class HandEvaluation:
    rank: int
    score: int
    description: str
    cards: Tuple[Card, ...] = field(default_factory=tuple)

    @property
    def rank_name(self) -> str:
        return HandRank.name(self.rank)

    def sort_key(self) -> Tuple[int, int]:
        return (self.rank, self.score)

    def to_dict(self) -> dict:
        return {
            'rank': self.rank,
            'rank_name': self.rank_name,
            'score': self.score,
            'description': self.description,
            'cards': [c.to_dict() for c in self.cards]
        }


class HandEvaluator:
    """Evaluates Teen Patti hands and determines winners."""

    @staticmethod
    def evaluate(cards: Sequence[Card]) -> HandEvaluation:
        """
        Evaluate a 3-card hand.
        Returns a HandEvaluation with category and tie-break score.
        """
        if len(cards) != 3:
            raise InvalidHandSize(f"Hand must contain exactly 3 cards, got {len(cards)}")

        cards = tuple(cards)
        ascending = tuple(sorted(c.value for c in cards))
        descending = ascending[::-1]
        is_color = len({c.suit for c in cards}) == 1
        is_sequence = HandEvaluator._is_sequence(ascending)

        # Trail
        if ascending[0] == ascending[2]:
            return HandEvaluation(
                HandRank.TRAIL,
                6000 + ascending[0] * 100,
                f"Trail of {HandEvaluator._value_name(ascending[0])}s",
                cards
            )

        if is_sequence:
            sequence_score = HandEvaluator._sequence_score(ascending)
            top = HandEvaluator._value_name(14 if ascending == _ACE_HIGH else ascending[2])
            if is_color:
                return HandEvaluation(
                    HandRank.PURE_SEQUENCE,
                    5000 + sequence_score,
                    f"Pure Sequence, {top} high",
                    cards
                )
            return HandEvaluation(
                HandRank.SEQUENCE,
                4000 + sequence_score,
                f"Sequence, {top} high",
                cards
            )

        if is_color:
            return HandEvaluation(
                HandRank.COLOR,
                3000 + HandEvaluator._descending_score(descending),
                f"Color, {HandEvaluator._value_name(descending[0])} high",
                cards
            )

        counts = Counter(ascending)
        if 2 in counts.values():
            pair = [v for v, c in counts.items() if c == 2][0]
            kicker = [v for v, c in counts.items() if c == 1][0]
            return HandEvaluation(
                HandRank.PAIR,
                2000 + pair * 100 + kicker,
                f"Pair of {HandEvaluator._value_name(pair)}s",
                cards
            )

        return HandEvaluation(
            HandRank.HIGH_CARD,
            1000 + HandEvaluator._descending_score(descending),
            f"High Card, {HandEvaluator._value_name(descending[0])}",
            cards
        )

    @staticmethod
    def _is_sequence(ascending: Tuple[int, ...]) -> bool:
        if ascending in (_ACE_LOW, _ACE_HIGH):
            return True
        return ascending[1] == ascending[0] + 1 and ascending[2] == ascending[1] + 1

    @staticmethod
    def _sequence_score(ascending: Tuple[int, ...]) -> int:
        if ascending == _ACE_HIGH:
            return ACE_HIGH_SEQUENCE_SCORE
        if ascending == _ACE_LOW:
            return ACE_LOW_SEQUENCE_SCORE
        return ascending[2]

    @staticmethod
    def _descending_score(descending: Tuple[int, ...]) -> int:
        return descending[0] * 10000 + descending[1] * 100 + descending[2]

    @staticmethod
    def _value_name(value: int) -> str:
        """Convert card value to name."""
        names = {1: 'Ace', 11: 'Jack', 12: 'Queen', 13: 'King', 14: 'Ace'}
        return names.get(value, str(value))

    @staticmethod
    def compare_hands(first: HandEvaluation, second: HandEvaluation) -> int:
        """
        Compare two evaluated hands.
        Returns a positive number if first wins, negative if second wins, 0 on a tie.
        """
        if first.rank != second.rank:
            return first.rank - second.rank
        return first.score - second.score

    @staticmethod
    def best_of(hands: List[Sequence[Card]]) -> List[int]:
        """
        Evaluate several hands and return the indices of the best (several on a tie).
        """
        if not hands:
            return []

        evaluations = [HandEvaluator.evaluate(h).sort_key() for h in hands]
        best = max(evaluations)
        return [i for i, e in enumerate(evaluations) if e == best]

    @staticmethod
    def find_winner(players) -> Optional[str]:
        """
        Suggest a winner among un-folded players who have 3 recorded cards.
        Returns the player id, or None if nobody qualifies. On an exact tie
        the earlier seat is suggested.
        """
        contenders = [p for p in players if not p.is_folded and len(p.cards) == 3]
        if not contenders:
            return None
        if len(contenders) == 1:
            return contenders[0].id

        winners = HandEvaluator.best_of([p.cards for p in contenders])
        return contenders[winners[0]].id
