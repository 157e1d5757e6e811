from .cards import Card
from .hand_evaluator import HandEvaluator, HandEvaluation, HandRank
from .rules import TeenPattiRules, bet_limits, validate_action
from .turns import next_player_index, should_end_betting_round
from .settlement import settle
from .records import GameResult, GameStats
from .state import ActionType, BetAction, GamePhase, GameState, Player
from .controller import GameController

__all__ = [
    'Card', 'HandEvaluator', 'HandEvaluation', 'HandRank',
    'TeenPattiRules', 'bet_limits', 'validate_action',
    'next_player_index', 'should_end_betting_round', 'settle',
    'GameResult', 'GameStats',
    'ActionType', 'BetAction', 'GamePhase', 'GameState', 'Player',
    'GameController'
]
