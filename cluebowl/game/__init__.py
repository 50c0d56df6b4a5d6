"""Clue bowl game state: clues, the bowl, turn order, turns and the session."""

from .bowl import Bowl
from .clue import Clue
from .session import GameSession, Round
from .turn import Turn, TurnStatus
from .turn_order import TurnOrder
from .turn_timer import TurnTimer

__all__ = [
    "Bowl",
    "Clue",
    "GameSession",
    "Round",
    "Turn",
    "TurnStatus",
    "TurnOrder",
    "TurnTimer",
]
