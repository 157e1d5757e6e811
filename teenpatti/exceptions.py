"""Teen Patti error taxonomy.

ActionRejected and its subclasses are user-recoverable: the action is refused
and the game state is left untouched. The remaining errors indicate a caller
bug.
"""


class TeenPattiError(Exception):
    """Base class for all engine errors."""


class InvalidHandSize(TeenPattiError, ValueError):
    """A hand was evaluated with other than exactly 3 cards."""


class UnknownWinner(TeenPattiError, LookupError):
    """The declared winner is not in the player list."""


class ActionRejected(TeenPattiError):
    """An action or request was refused; the state is unchanged."""

    reason = 'rejected'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'reason': self.reason, 'message': self.message}


class PlayerFolded(ActionRejected):
    reason = 'player_folded'


class InvalidBootAmount(ActionRejected):
    reason = 'invalid_boot_amount'


class BelowMinimum(ActionRejected):
    reason = 'below_minimum'


class AboveMaximum(ActionRejected):
    reason = 'above_maximum'


class ShowRequiresTwoPlayers(ActionRejected):
    reason = 'show_requires_two_players'


class AlreadySeen(ActionRejected):
    reason = 'already_seen'


class InvalidAmount(ActionRejected):
    """Amount is malformed for the action (negative, or non-zero for a free action)."""
    reason = 'invalid_amount'


class InvalidPhase(ActionRejected):
    reason = 'invalid_phase'


class OutOfTurn(ActionRejected):
    reason = 'out_of_turn'


class UnknownPlayer(ActionRejected):
    reason = 'unknown_player'


class InvalidSetup(ActionRejected):
    reason = 'invalid_setup'
