"""Betting limits and action validation."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .exceptions import (
    AboveMaximum,
    AlreadySeen,
    BelowMinimum,
    InvalidAmount,
    InvalidBootAmount,
    PlayerFolded,
    ShowRequiresTwoPlayers,
)
from .state import ActionType, BetAction, Player


@dataclass(frozen=True)
class TeenPattiRules:
    max_players: int = 6
    boot_amount: float = 10
    blind_bet_multiplier: int = 1
    seen_bet_multiplier: int = 2
    # Max bet is this multiple of the (already multiplied) minimum
    max_bet_limit: int = 2
    show_cost: int = 2


DEFAULT_RULES = TeenPattiRules()


def bet_limits(current_stake: float, is_blind_player: bool,
               rules: TeenPattiRules = DEFAULT_RULES) -> Tuple[float, float]:
    """Return (min_bet, max_bet) for a player at the current stake."""
    multiplier = rules.blind_bet_multiplier if is_blind_player else rules.seen_bet_multiplier
    min_bet = current_stake * multiplier
    max_bet = current_stake * rules.max_bet_limit * multiplier
    return min_bet, max_bet


def show_cost(current_stake: float, rules: TeenPattiRules = DEFAULT_RULES) -> float:
    return current_stake * rules.show_cost


def validate_action(player: Player, action: BetAction, current_stake: float,
                    players: Sequence[Player], boot_amount: Optional[float] = None,
                    rules: TeenPattiRules = DEFAULT_RULES) -> None:
    """
    Check an action against the betting rules without touching any state.

    Raises an ActionRejected subclass describing the first rule broken;
    returns None when the action is legal. ``boot_amount`` defaults to the
    rules' configured boot.
    """
    if player.is_folded:
        raise PlayerFolded(f"{player.name} has folded and cannot act")

    if action.amount < 0:
        raise InvalidAmount("Amount cannot be negative")

    if boot_amount is None:
        boot_amount = rules.boot_amount

    if action.type == ActionType.BOOT:
        if action.amount != boot_amount:
            raise InvalidBootAmount(f"Boot amount must be {boot_amount:g}")

    elif action.type.is_stake_bet:
        min_bet, max_bet = bet_limits(current_stake, player.plays_blind, rules)
        if action.amount < min_bet:
            raise BelowMinimum(f"Minimum bet is {min_bet:g}")
        if action.amount > max_bet:
            raise AboveMaximum(f"Maximum bet is {max_bet:g}")

    elif action.type == ActionType.SHOW:
        cost = show_cost(current_stake, rules)
        if action.amount != cost:
            raise InvalidAmount(f"Show cost is {cost:g}")
        remaining = sum(1 for p in players if not p.is_folded)
        if remaining != 2:
            raise ShowRequiresTwoPlayers("Show is only allowed between the last 2 players")

    elif action.type == ActionType.SEE:
        if action.amount != 0:
            raise InvalidAmount("Seeing cards is free")
        if player.has_seen:
            raise AlreadySeen(f"{player.name} has already seen their cards")

    # fold/pack need no further checks
