from .db import init_db, get_db
from .store import GameStore

__all__ = ['init_db', 'get_db', 'GameStore']
