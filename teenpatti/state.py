"""Session state for a Teen Patti table.

All types here are immutable; transitions build new values with
``dataclasses.replace`` (see controller.py).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .cards import Card
from .records import GameResult, utcnow


class GamePhase(Enum):
    BOOT = "boot"
    BETTING = "betting"
    SHOWDOWN = "showdown"
    FINISHED = "finished"


class ActionType(Enum):
    BOOT = "boot"
    BLIND = "blind"
    CHAAL = "chaal"
    FOLD = "fold"
    SHOW = "show"
    SEE = "see"
    PACK = "pack"  # same as fold

    @property
    def is_fold(self) -> bool:
        return self in (ActionType.FOLD, ActionType.PACK)

    @property
    def is_stake_bet(self) -> bool:
        return self in (ActionType.BLIND, ActionType.CHAAL)


@dataclass(frozen=True)
class BetAction:
    type: ActionType
    player_id: str
    amount: float = 0
    timestamp: datetime = field(default_factory=utcnow)
    is_blind_action: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'player_id': self.player_id,
            'amount': self.amount,
            'timestamp': self.timestamp.isoformat(),
            'is_blind_action': self.is_blind_action
        }


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    total_bet: float = 0
    current_bet: float = 0
    is_active: bool = True
    is_folded: bool = False
    is_blind: bool = False
    has_seen: bool = False
    total_wins: int = 0
    total_points: float = 0
    initial_balance: float = 1000
    net_profit: float = 0
    cards: Tuple[Card, ...] = ()
    turn_order: int = 0

    @property
    def plays_blind(self) -> bool:
        """Blind-rate betting applies only until the player looks at their cards."""
        return self.is_blind and not self.has_seen

    def reset_for_game(self) -> 'Player':
        return replace(
            self,
            total_bet=0,
            current_bet=0,
            is_active=True,
            is_folded=False,
            has_seen=False,
            cards=()
        )

    def to_dict(self, show_cards: bool = True) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'total_bet': self.total_bet,
            'current_bet': self.current_bet,
            'is_active': self.is_active,
            'is_folded': self.is_folded,
            'is_blind': self.is_blind,
            'has_seen': self.has_seen,
            'total_wins': self.total_wins,
            'total_points': self.total_points,
            'initial_balance': self.initial_balance,
            'net_profit': self.net_profit,
            'turn_order': self.turn_order,
            'has_cards': len(self.cards) > 0
        }
        if show_cards and self.cards:
            data['cards'] = [c.to_dict() for c in self.cards]
        return data


@dataclass(frozen=True)
class GameState:
    players: Tuple[Player, ...] = ()
    current_round: int = 1
    boot_amount: float = 10
    current_bet: float = 10
    min_bet: float = 10
    current_player_index: int = 0
    dealer_index: int = 0
    betting_phase: GamePhase = GamePhase.BOOT
    is_game_active: bool = False
    winner_id: Optional[str] = None
    game_history: Tuple[GameResult, ...] = ()
    games_started: int = 0

    @property
    def pot(self) -> float:
        """Always derived from the players' total bets."""
        return sum(p.total_bet for p in self.players)

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def winner(self) -> Optional[Player]:
        if self.winner_id is None:
            return None
        return self.get_player(self.winner_id)

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def index_of(self, player_id: str) -> Optional[int]:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return None

    def players_in_hand(self) -> List[Player]:
        """Players who have not folded."""
        return [p for p in self.players if not p.is_folded]

    def with_player(self, index: int, player: Player) -> 'GameState':
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))
