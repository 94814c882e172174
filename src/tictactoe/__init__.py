"""Tic-tac-toe package exposing the board rules, the minimax AI, sessions, and the web API."""

from .ai import MinimaxAI
from .game import Board, GameResult, Mark
from .session import GameService, GameSession, Mode
from .api import app

__all__ = [
    "Board",
    "GameResult",
    "GameService",
    "GameSession",
    "Mark",
    "MinimaxAI",
    "Mode",
    "app",
]
