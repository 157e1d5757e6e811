"""Pot settlement once a winner has been declared."""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from .exceptions import UnknownWinner
from .records import GameResult, utcnow
from .state import Player

BLIND_WIN_BONUS = 0.5


def winnings_for(winner: Player, pot: float) -> float:
    """Pot plus the bonus paid to a winner who played blind."""
    blind_bonus = pot * BLIND_WIN_BONUS if winner.is_blind else 0
    return pot + blind_bonus


def settle(players: Sequence[Player], winner_id: str, pot: float, rounds: int,
           result_id: Optional[str] = None,
           date: Optional[datetime] = None) -> Tuple[Tuple[Player, ...], GameResult]:
    """
    Pay the pot to the winner and recompute everyone's net profit.

    Returns the updated players and a GameResult whose pot amount is the
    total paid out (including any blind bonus).
    """
    winner = next((p for p in players if p.id == winner_id), None)
    if winner is None:
        raise UnknownWinner(f"No player with id {winner_id!r}")

    total_winning = winnings_for(winner, pot)

    updated = []
    for player in players:
        if player.id == winner_id:
            total_points = player.total_points + total_winning
            player = replace(
                player,
                total_wins=player.total_wins + 1,
                total_points=total_points,
                net_profit=total_points - player.total_bet
            )
        else:
            player = replace(player, net_profit=player.total_points - player.total_bet)
        updated.append(player)

    result = GameResult(
        id=result_id or f"game-{uuid.uuid4().hex[:12]}",
        date=date or utcnow(),
        players=tuple(p.name for p in players),
        winner=winner.name,
        pot_amount=total_winning,
        rounds=rounds
    )
    return tuple(updated), result


def final_winnings(players: Sequence[Player]) -> Dict[str, Any]:
    """Summary of where everyone stands, best net profit first."""
    summaries = sorted(
        (
            {
                'id': p.id,
                'name': p.name,
                'total_bet': p.total_bet,
                'total_points': p.total_points,
                'total_wins': p.total_wins,
                'net_profit': p.total_points - p.total_bet
            }
            for p in players
        ),
        key=lambda s: s['net_profit'],
        reverse=True
    )
    return {
        'players': summaries,
        'total_winnings': sum(max(0, s['net_profit']) for s in summaries),
        'total_losses': abs(sum(min(0, s['net_profit']) for s in summaries))
    }
