"""Settled-game records and aggregate statistics.

Both types serialize to the camelCase JSON shape stored under the
``gameHistory`` and ``gameStats`` keys.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from .hand_evaluator import HandRank


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    # JavaScript's toISOString() uses a trailing Z
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class GameResult:
    id: str
    date: datetime
    players: Tuple[str, ...]
    winner: str
    pot_amount: float
    rounds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'players': list(self.players),
            'winner': self.winner,
            'potAmount': self.pot_amount,
            'rounds': self.rounds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameResult':
        return cls(
            id=str(data['id']),
            date=_parse_date(data['date']),
            players=tuple(str(name) for name in data['players']),
            winner=str(data['winner']),
            pot_amount=float(data['potAmount']),
            rounds=int(data['rounds'])
        )


@dataclass(frozen=True)
class GameStats:
    total_games: int = 0
    total_wins: int = 0
    total_amount_won: float = 0
    total_amount_lost: float = 0
    average_pot: float = 0
    favorite_hand: int = HandRank.HIGH_CARD
    # (winning category, times seen) pairs, used to derive favorite_hand
    hand_counts: Tuple[Tuple[int, int], ...] = ()

    @property
    def win_rate(self) -> float:
        if self.total_games == 0:
            return 0.0
        return self.total_wins / self.total_games * 100

    @property
    def net_amount(self) -> float:
        return self.total_amount_won - self.total_amount_lost

    def record(self, total_winning: float, pot: float, amount_lost: float,
               winning_hand: Optional[int] = None) -> 'GameStats':
        """Return new stats with one more settled game folded in."""
        hand_counts = dict(self.hand_counts)
        favorite = self.favorite_hand
        if winning_hand is not None:
            hand_counts[winning_hand] = hand_counts.get(winning_hand, 0) + 1
            # Most frequent first, higher category on a tie
            favorite = max(hand_counts.items(), key=lambda kv: (kv[1], kv[0]))[0]

        games = self.total_games + 1
        return replace(
            self,
            total_games=games,
            total_wins=self.total_wins + 1,
            total_amount_won=self.total_amount_won + total_winning,
            total_amount_lost=self.total_amount_lost + amount_lost,
            average_pot=(self.average_pot * self.total_games + pot) / games,
            favorite_hand=favorite,
            hand_counts=tuple(sorted(hand_counts.items()))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalGames': self.total_games,
            'totalWins': self.total_wins,
            'totalAmountWon': self.total_amount_won,
            'totalAmountLost': self.total_amount_lost,
            'averagePot': self.average_pot,
            'favoriteHand': self.favorite_hand,
            'handCounts': {str(k): v for k, v in self.hand_counts}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameStats':
        favorite = int(data.get('favoriteHand', HandRank.HIGH_CARD))
        if favorite not in HandRank.NAMES:
            raise ValueError(f"Unknown hand rank: {favorite}")
        return cls(
            total_games=int(data.get('totalGames', 0)),
            total_wins=int(data.get('totalWins', 0)),
            total_amount_won=float(data.get('totalAmountWon', 0)),
            total_amount_lost=float(data.get('totalAmountLost', 0)),
            average_pot=float(data.get('averagePot', 0)),
            favorite_hand=favorite,
            hand_counts=tuple(sorted(
                (int(k), int(v)) for k, v in dict(data.get('handCounts', {})).items()
            ))
        )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
