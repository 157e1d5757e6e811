"""Turn order: who acts next, and when a betting round is settled."""

import logging
from typing import List, Optional, Sequence

from .state import Player

logger = logging.getLogger(__name__)


def next_player_index(players: Sequence[Player], current_index: int) -> Optional[int]:
    """
    Index of the next player to act, skipping folded players.

    Returns None when there is no next player: one or no players remain in
    the hand, so the caller must stop advancing turns.
    """
    in_hand = sum(1 for p in players if not p.is_folded)
    if in_hand <= 1:
        logger.debug("No next player: %d player(s) left in hand", in_hand)
        return None

    count = len(players)
    for step in range(1, count + 1):
        index = (current_index + step) % count
        if not players[index].is_folded:
            return index

    logger.warning("No un-folded player found scanning from index %d", current_index)
    return None


def should_end_betting_round(players: Sequence[Player]) -> bool:
    """True once a single player remains or every remaining bet is equal and non-zero."""
    in_hand = [p for p in players if not p.is_folded]
    if len(in_hand) <= 1:
        return True

    bets = {p.current_bet for p in in_hand}
    return len(bets) == 1 and in_hand[0].current_bet > 0


def play_sequence(players: Sequence[Player], dealer_index: int) -> List[Player]:
    """Un-folded players in acting order, starting left of the dealer."""
    count = len(players)
    sequence = []
    for step in range(1, count + 1):
        player = players[(dealer_index + step) % count]
        if not player.is_folded:
            sequence.append(player)
    return sequence
