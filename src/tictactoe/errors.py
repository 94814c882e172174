"""Exception hierarchy shared by the game core, the session layer, and the API."""

from __future__ import annotations


class TicTacToeError(Exception):
    """Base class for every error raised by the tictactoe package."""


class InvalidArgumentError(TicTacToeError, ValueError):
    """A value was constructed or passed in a malformed way (caller bug)."""


class CellOutOfRangeError(InvalidArgumentError, IndexError):
    """A cell index outside 0..8 was requested."""


class IllegalMoveError(TicTacToeError, ValueError):
    """The requested cell cannot be played on this board."""


class IllegalStateError(TicTacToeError, RuntimeError):
    """The action does not fit the current state of the game."""


class InvalidOperationError(IllegalStateError):
    """A session rejected an action (game over, wrong mode, wrong turn)."""


class NotFoundError(TicTacToeError, LookupError):
    """No session exists for the given identifier."""
