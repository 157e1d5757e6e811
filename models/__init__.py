from .schemas import (
    CardModel,
    PlayerInfo,
    AddPlayerRequest,
    StartGameRequest,
    ActionRequest,
    WinnerRequest,
    GameResultModel,
    GameStatsModel
)

__all__ = [
    'CardModel',
    'PlayerInfo',
    'AddPlayerRequest',
    'StartGameRequest',
    'ActionRequest',
    'WinnerRequest',
    'GameResultModel',
    'GameStatsModel'
]
