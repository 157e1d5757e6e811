"""Game flow for a Teen Patti session.

The module-level functions are reducers: each takes a GameState (plus
arguments), validates everything first, and returns a new GameState. They
never mutate their input, so a rejected action leaves the state as it was.
GameController owns the current state, the aggregate stats and the
persistence store, and is the only place state is replaced.
"""

import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .cards import Card
from .exceptions import (
    ActionRejected,
    AlreadySeen,
    InvalidAmount,
    InvalidPhase,
    InvalidSetup,
    OutOfTurn,
    PlayerFolded,
    UnknownPlayer,
)
from .hand_evaluator import HandEvaluation, HandEvaluator
from .records import GameResult, GameStats
from .rules import DEFAULT_RULES, TeenPattiRules, bet_limits, show_cost, validate_action
from .settlement import final_winnings, settle
from .state import ActionType, BetAction, GamePhase, GameState, Player
from .turns import next_player_index, play_sequence, should_end_betting_round


def _require_player(state: GameState, player_id: str) -> Tuple[int, Player]:
    index = state.index_of(player_id)
    if index is None:
        raise UnknownPlayer(f"No player with id {player_id!r}")
    return index, state.players[index]


def _require_setup(state: GameState, what: str):
    if state.is_game_active:
        raise InvalidSetup(f"Cannot {what} while a game is in progress")


# --- roster -----------------------------------------------------------------

def add_player(state: GameState, name: str, rules: TeenPattiRules = DEFAULT_RULES,
               initial_balance: float = 1000, is_blind: bool = False,
               player_id: Optional[str] = None) -> Tuple[GameState, Player]:
    _require_setup(state, "add players")
    name = (name or '').strip()
    if not name:
        raise InvalidSetup("Player name is required")
    if len(state.players) >= rules.max_players:
        raise InvalidSetup(f"Table is full ({rules.max_players} players max)")
    if player_id is not None and state.get_player(player_id) is not None:
        raise InvalidSetup(f"Player id {player_id!r} is already taken")

    player = Player(
        id=player_id or f"player-{uuid.uuid4().hex[:8]}",
        name=name,
        is_blind=is_blind,
        initial_balance=initial_balance,
        turn_order=len(state.players) + 1
    )
    return replace(state, players=state.players + (player,)), player


def remove_player(state: GameState, player_id: str) -> GameState:
    _require_setup(state, "remove players")
    _require_player(state, player_id)
    return replace(state, players=tuple(p for p in state.players if p.id != player_id))


def rename_player(state: GameState, player_id: str, name: str) -> GameState:
    _require_setup(state, "rename players")
    index, player = _require_player(state, player_id)
    name = (name or '').strip()
    if not name:
        raise InvalidSetup("Player name is required")
    return state.with_player(index, replace(player, name=name))


def set_blind(state: GameState, player_id: str, is_blind: bool) -> GameState:
    index, player = _require_player(state, player_id)
    if is_blind and player.has_seen:
        raise AlreadySeen(f"{player.name} has already seen their cards")
    return state.with_player(index, replace(player, is_blind=is_blind))


def set_cards(state: GameState, player_id: str, cards: Sequence[Card]) -> GameState:
    """Record the physical cards a player holds, for evaluation only."""
    index, player = _require_player(state, player_id)
    evaluation = HandEvaluator.evaluate(cards)
    return state.with_player(index, replace(player, cards=evaluation.cards))


# --- game lifecycle ----------------------------------------------------------

def start_game(state: GameState, rules: TeenPattiRules = DEFAULT_RULES,
               boot_amount: Optional[float] = None, collect_boot: bool = True) -> GameState:
    """
    Reset every player and open a new game.

    With collect_boot the boot is taken from everyone at once and betting
    starts immediately; otherwise each player posts it with a boot action.
    """
    _require_setup(state, "start a new game")
    if len(state.players) < 2:
        raise InvalidSetup("At least 2 players are required to start the game")

    boot = rules.boot_amount if boot_amount is None else boot_amount
    if boot <= 0:
        raise InvalidAmount("Boot amount must be positive")

    count = len(state.players)
    dealer = (state.dealer_index + 1) % count if state.games_started else 0

    players = []
    for player in state.players:
        player = player.reset_for_game()
        if collect_boot:
            player = replace(player, total_bet=boot, current_bet=boot)
        players.append(player)

    return replace(
        state,
        players=tuple(players),
        current_round=1,
        boot_amount=boot,
        current_bet=boot,
        min_bet=boot,
        dealer_index=dealer,
        current_player_index=(dealer + 1) % count,
        betting_phase=GamePhase.BETTING if collect_boot else GamePhase.BOOT,
        is_game_active=True,
        winner_id=None,
        games_started=state.games_started + 1
    )


def new_round(state: GameState) -> GameState:
    if not state.is_game_active:
        raise InvalidPhase("No game in progress")
    return replace(state, current_round=state.current_round + 1, winner_id=None)


def end_game(state: GameState) -> GameState:
    return replace(
        state,
        is_game_active=False,
        winner_id=None,
        betting_phase=GamePhase.FINISHED
    )


# --- actions -----------------------------------------------------------------

def _place_bet(state: GameState, index: int, player: Player, amount: float) -> GameState:
    player = replace(
        player,
        total_bet=player.total_bet + amount,
        current_bet=amount,
        is_active=True
    )
    state = state.with_player(index, player)
    return replace(state, current_bet=max(state.current_bet, amount))


def _open_betting_once_booted(state: GameState) -> GameState:
    if state.betting_phase != GamePhase.BOOT:
        return state
    if all(p.total_bet >= state.boot_amount for p in state.players_in_hand()):
        state = replace(state, betting_phase=GamePhase.BETTING)
    return state


def _apply_boot(state, index, player, action):
    player = replace(
        player,
        total_bet=player.total_bet + action.amount,
        current_bet=action.amount
    )
    return _open_betting_once_booted(state.with_player(index, player))


def _apply_stake_bet(state, index, player, action):
    return _place_bet(state, index, player, action.amount)


def _apply_show(state, index, player, action):
    state = _place_bet(state, index, player, action.amount)
    return replace(state, betting_phase=GamePhase.SHOWDOWN)


def _apply_see(state, index, player, action):
    return state.with_player(index, replace(player, has_seen=True, is_blind=False))


def _apply_fold(state, index, player, action):
    state = state.with_player(index, replace(player, is_folded=True, is_active=False))
    if len(state.players_in_hand()) <= 1:
        return replace(state, betting_phase=GamePhase.SHOWDOWN)
    return _open_betting_once_booted(state)


_HANDLERS: Dict[ActionType, Callable[..., GameState]] = {
    ActionType.BOOT: _apply_boot,
    ActionType.BLIND: _apply_stake_bet,
    ActionType.CHAAL: _apply_stake_bet,
    ActionType.SHOW: _apply_show,
    ActionType.SEE: _apply_see,
    ActionType.FOLD: _apply_fold,
    ActionType.PACK: _apply_fold,
}

# Actions that do not hand the turn to the next player
_KEEPS_TURN = {ActionType.SEE}


def _check_phase(state: GameState, action: BetAction):
    if not state.is_game_active:
        raise InvalidPhase("No game in progress")
    phase = state.betting_phase
    if phase == GamePhase.BOOT:
        if action.type != ActionType.BOOT and not action.type.is_fold:
            raise InvalidPhase("Waiting for every player to post the boot")
    elif phase == GamePhase.BETTING:
        if action.type == ActionType.BOOT:
            raise InvalidPhase("Boot has already been collected")
    else:
        raise InvalidPhase(f"No actions are accepted during {phase.value}")


def apply_action(state: GameState, action: BetAction,
                 rules: TeenPattiRules = DEFAULT_RULES) -> GameState:
    """Validate an action and return the state after it; raises ActionRejected."""
    _check_phase(state, action)
    index, player = _require_player(state, action.player_id)
    if not player.is_folded and index != state.current_player_index:
        current = state.current_player
        raise OutOfTurn(f"It is {current.name if current else 'nobody'}'s turn")

    validate_action(player, action, state.current_bet, state.players,
                    boot_amount=state.boot_amount, rules=rules)

    state = _HANDLERS[action.type](state, index, player, action)

    if action.type not in _KEEPS_TURN:
        next_index = next_player_index(state.players, index)
        if next_index is not None:
            state = replace(state, current_player_index=next_index)
    return state


def declare_winner(state: GameState, winner_id: str,
                   stats: GameStats) -> Tuple[GameState, GameResult, GameStats]:
    """Settle the game in favour of winner_id and close it."""
    if not state.is_game_active or state.betting_phase == GamePhase.BOOT:
        raise InvalidPhase("A winner can only be declared once betting has started")
    _, winner = _require_player(state, winner_id)
    if winner.is_folded:
        raise PlayerFolded(f"{winner.name} has folded and cannot win")

    pot = state.pot
    players, result = settle(state.players, winner_id, pot, state.current_round)

    winning_hand = None
    if len(winner.cards) == 3:
        winning_hand = HandEvaluator.evaluate(winner.cards).rank
    amount_lost = sum(p.total_bet for p in state.players if p.id != winner_id)
    stats = stats.record(result.pot_amount, pot, amount_lost, winning_hand)

    state = replace(
        state,
        players=players,
        winner_id=winner_id,
        is_game_active=False,
        betting_phase=GamePhase.FINISHED,
        game_history=state.game_history + (result,)
    )
    return state, result, stats


class GameController:
    """Owns one session: the current state, aggregate stats and their store."""

    def __init__(self, rules: TeenPattiRules = DEFAULT_RULES, store=None,
                 history: Sequence[GameResult] = (), stats: Optional[GameStats] = None,
                 logger: Optional[logging.Logger] = None):
        self.rules = rules
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.state = GameState(
            boot_amount=rules.boot_amount,
            current_bet=rules.boot_amount,
            min_bet=rules.boot_amount,
            game_history=tuple(history)
        )
        self.stats = stats or GameStats()

    @classmethod
    def load(cls, store, rules: TeenPattiRules = DEFAULT_RULES,
             logger: Optional[logging.Logger] = None) -> 'GameController':
        """Create a controller seeded from the persisted history and stats."""
        history = store.load_history()
        stats = store.load_stats()
        controller = cls(rules=rules, store=store, history=history, stats=stats, logger=logger)
        controller.logger.info("Loaded %d past games", len(history))
        return controller

    def _persist(self):
        if self.store is None:
            return
        self.store.save_history(list(self.state.game_history))
        self.store.save_stats(self.stats)

    # roster

    def add_player(self, name: str, initial_balance: float = 1000,
                   is_blind: bool = False) -> Player:
        self.state, player = add_player(self.state, name, self.rules,
                                         initial_balance=initial_balance, is_blind=is_blind)
        self.logger.info("Added player %s (%s)", player.name, player.id)
        return player

    def remove_player(self, player_id: str):
        self.state = remove_player(self.state, player_id)
        self.logger.info("Removed player %s", player_id)

    def rename_player(self, player_id: str, name: str):
        self.state = rename_player(self.state, player_id, name)

    def set_blind(self, player_id: str, is_blind: bool) -> Player:
        self.state = set_blind(self.state, player_id, is_blind)
        return self.state.get_player(player_id)

    def set_cards(self, player_id: str, cards: Sequence[Card]) -> Player:
        self.state = set_cards(self.state, player_id, cards)
        return self.state.get_player(player_id)

    def evaluate_player(self, player_id: str) -> Optional[HandEvaluation]:
        _, player = _require_player(self.state, player_id)
        if not player.cards:
            return None
        return HandEvaluator.evaluate(player.cards)

    # lifecycle

    def start_game(self, boot_amount: Optional[float] = None, collect_boot: bool = True):
        self.state = start_game(self.state, self.rules, boot_amount, collect_boot)
        self.logger.info(
            "Game %d started with %d players, boot %g",
            self.state.games_started, len(self.state.players), self.state.boot_amount
        )

    def new_round(self):
        self.state = new_round(self.state)
        self.logger.info("Round %d", self.state.current_round)

    def end_game(self):
        self.state = end_game(self.state)
        self.logger.info("Game ended without a winner")

    def process_action(self, action: BetAction) -> dict:
        """Apply an action; a rejected action leaves the state untouched."""
        try:
            new_state = apply_action(self.state, action, self.rules)
        except ActionRejected as e:
            self.logger.info("Rejected %s by %s: %s", action.type.value, action.player_id, e)
            return {'success': False, 'error': e.message, 'reason': e.reason}

        previous = self.state.current_player_index
        self.state = new_state
        self.logger.info(
            "%s %s %g (pot %g)",
            action.player_id, action.type.value, action.amount, self.state.pot
        )
        if self.state.current_player_index != previous:
            self.logger.debug("Turn passes to index %d", self.state.current_player_index)
        return {'success': True, 'phase': self.state.betting_phase.value}

    def declare_winner(self, winner_id: str) -> GameResult:
        self.state, result, self.stats = declare_winner(self.state, winner_id, self.stats)
        self.logger.info("%s wins %g after %d round(s)", result.winner, result.pot_amount, result.rounds)
        self._persist()
        return result

    def reset_history(self):
        self.state = replace(self.state, game_history=())
        self.stats = GameStats()
        self._persist()

    # views

    def current_limits(self) -> Optional[Dict[str, float]]:
        player = self.state.current_player
        if player is None or not self.state.is_game_active:
            return None
        min_bet, max_bet = bet_limits(self.state.current_bet, player.plays_blind, self.rules)
        return {
            'min_bet': min_bet,
            'max_bet': max_bet,
            'show_cost': show_cost(self.state.current_bet, self.rules),
            'is_blind': player.plays_blind
        }

    def final_winnings(self) -> Dict[str, Any]:
        return final_winnings(self.state.players)

    def get_game_state(self) -> Dict[str, Any]:
        state = self.state
        current = state.current_player if state.is_game_active else None
        sequence: List[str] = []
        if state.players:
            sequence = [p.id for p in play_sequence(state.players, state.dealer_index)]
        return {
            'players': [p.to_dict() for p in state.players],
            'pot': state.pot,
            'current_round': state.current_round,
            'boot_amount': state.boot_amount,
            'current_bet': state.current_bet,
            'min_bet': state.min_bet,
            'current_player_index': state.current_player_index,
            'current_player_id': current.id if current else None,
            'dealer_index': state.dealer_index,
            'betting_phase': state.betting_phase.value,
            'is_game_active': state.is_game_active,
            'winner_id': state.winner_id,
            'bet_limits': self.current_limits(),
            'round_settled': should_end_betting_round(state.players) if state.is_game_active else False,
            'play_sequence': sequence,
            'suggested_winner': HandEvaluator.find_winner(state.players),
            'games_played': len(state.game_history)
        }
