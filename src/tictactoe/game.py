"""Immutable board model and terminal-state rules for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union

from .errors import (
    CellOutOfRangeError,
    IllegalMoveError,
    IllegalStateError,
    InvalidArgumentError,
)

BOARD_SIZE = 9
CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- Marks and moves ----------


class Mark(str, Enum):
    """Cell content; the value doubles as the glyph used in encoded boards."""

    X = "X"
    O = "O"
    EMPTY = "."

    def opponent(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        return Mark.EMPTY

    @property
    def glyph(self) -> str:
        return self.value


def _coerce_mark(value: Union[Mark, str]) -> Mark:
    try:
        return Mark(value)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown mark {value!r}") from exc


@dataclass(frozen=True)
class Move:
    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < BOARD_SIZE:
            raise InvalidArgumentError(
                f"Move index must be between 0 and 8, got {self.index}"
            )


class GameResult(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    X_WIN = "X_WIN"
    O_WIN = "O_WIN"
    DRAW = "DRAW"

    @property
    def winner(self) -> Mark:
        """Winning mark for a decided game, EMPTY otherwise."""
        if self is GameResult.X_WIN:
            return Mark.X
        if self is GameResult.O_WIN:
            return Mark.O
        return Mark.EMPTY


# ---------- Board ----------


@dataclass(frozen=True)
class Board:
    """A snapshot of the nine cells plus the mark whose turn it is.

    Boards never change after construction; ``apply`` returns a new board.
    Equality and hashing cover both the cells and ``to_move``.
    """

    cells: Tuple[Mark, ...]
    to_move: Mark = Mark.X

    def __post_init__(self) -> None:
        cells = tuple(_coerce_mark(c) for c in self.cells)
        if len(cells) != BOARD_SIZE:
            raise InvalidArgumentError(
                f"Board must have {BOARD_SIZE} cells, got {len(cells)}"
            )
        to_move = _coerce_mark(self.to_move)
        if to_move is Mark.EMPTY:
            raise InvalidArgumentError("to_move must be X or O")
        object.__setattr__(self, "cells", cells)
        object.__setattr__(self, "to_move", to_move)

    @classmethod
    def initial(cls, starting_mark: Mark = Mark.X) -> "Board":
        return cls(cells=(Mark.EMPTY,) * BOARD_SIZE, to_move=starting_mark)

    @classmethod
    def from_moves(
        cls, moves: Iterable[int], starting_mark: Mark = Mark.X
    ) -> "Board":
        """Replay a sequence of cell indices from the empty board."""
        board = cls.initial(starting_mark)
        for index in moves:
            board = board.apply(index)
        return board

    def cell(self, index: int) -> Mark:
        if not 0 <= index < BOARD_SIZE:
            raise CellOutOfRangeError(f"Cell index must be between 0 and 8, got {index}")
        return self.cells[index]

    def legal_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if c is Mark.EMPTY]

    def is_legal(self, index: int) -> bool:
        return 0 <= index < BOARD_SIZE and self.cells[index] is Mark.EMPTY

    def occupied_count(self) -> int:
        return sum(1 for c in self.cells if c is not Mark.EMPTY)

    def apply(self, move: Union[int, Move]) -> "Board":
        index = move.index if isinstance(move, Move) else move
        if not self.is_legal(index):
            raise IllegalMoveError(f"Illegal move at {index}")
        if is_terminal(self):
            raise IllegalStateError("Game is already terminal")
        cells = list(self.cells)
        cells[index] = self.to_move
        return Board(cells=tuple(cells), to_move=self.to_move.opponent())

    def encode(self) -> str:
        """Nine glyphs in row-major order, e.g. ``"XO..O.X.."``."""
        return "".join(c.glyph for c in self.cells)

    def __str__(self) -> str:
        rows = [self.encode()[r : r + 3] for r in range(0, BOARD_SIZE, 3)]
        return f"{'/'.join(rows)} turn={self.to_move.value}"


# ---------- Rules ----------


def winner(board: Board) -> Mark:
    """First mark found owning a full winning line, or EMPTY."""
    cells = board.cells
    for a, b, c in WINNING_LINES:
        first = cells[a]
        if first is not Mark.EMPTY and first is cells[b] is cells[c]:
            return first
    return Mark.EMPTY


def result(board: Board) -> GameResult:
    mark = winner(board)
    if mark is Mark.X:
        return GameResult.X_WIN
    if mark is Mark.O:
        return GameResult.O_WIN
    if Mark.EMPTY in board.cells:
        return GameResult.IN_PROGRESS
    return GameResult.DRAW


def is_terminal(board: Board) -> bool:
    return result(board) is not GameResult.IN_PROGRESS


@dataclass(frozen=True)
class GameState:
    """A board paired with its derived result."""

    board: Board
    result: GameResult

    @classmethod
    def of(cls, board: Board) -> "GameState":
        return cls(board=board, result=result(board))

    @property
    def is_terminal(self) -> bool:
        return self.result is not GameResult.IN_PROGRESS


def new_game_x_starts() -> GameState:
    return GameState.of(Board.initial(Mark.X))


def new_game_o_starts() -> GameState:
    return GameState.of(Board.initial(Mark.O))
