"""Pydantic models for the Teen Patti ledger API."""

from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from teenpatti.cards import Card
from teenpatti.state import ActionType, BetAction


class CardModel(BaseModel):
    rank: str
    suit: str

    def to_card(self) -> Card:
        return Card.from_dict({'rank': self.rank, 'suit': self.suit})


class PlayerInfo(BaseModel):
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
    initial_balance: float = 0
    net_profit: float = 0
    turn_order: int = 0
    has_cards: bool = False
    cards: Optional[List[Dict[str, Any]]] = None


class AddPlayerRequest(BaseModel):
    name: str
    initial_balance: Optional[float] = Field(default=None, ge=0)
    is_blind: bool = False


class RenamePlayerRequest(BaseModel):
    name: str


class BlindRequest(BaseModel):
    is_blind: bool


class CardsRequest(BaseModel):
    cards: List[CardModel]


class StartGameRequest(BaseModel):
    boot_amount: Optional[float] = Field(default=None, gt=0)
    collect_boot: bool = True


class ActionRequest(BaseModel):
    type: ActionType  # boot, blind, chaal, fold, show, see, pack
    player_id: str
    amount: float = 0
    timestamp: Optional[datetime] = None
    is_blind_action: Optional[bool] = None

    def to_action(self) -> BetAction:
        extra = {'timestamp': self.timestamp} if self.timestamp is not None else {}
        return BetAction(
            type=self.type,
            player_id=self.player_id,
            amount=self.amount,
            is_blind_action=self.is_blind_action,
            **extra
        )


class WinnerRequest(BaseModel):
    player_id: str


class EvaluateRequest(BaseModel):
    cards: List[CardModel]


class CompareRequest(BaseModel):
    first: List[CardModel]
    second: List[CardModel]


class GameResultModel(BaseModel):
    id: str
    date: str
    players: List[str]
    winner: str
    potAmount: float
    rounds: int


class GameStatsModel(BaseModel):
    totalGames: int
    totalWins: int
    totalAmountWon: float
    totalAmountLost: float
    averagePot: float
    favoriteHand: int
    favoriteHandName: str
    winRate: float
    netAmount: float
    handCounts: Dict[str, int] = {}
