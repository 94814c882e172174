"""Depth-limited minimax AI with alpha-beta pruning and a memo table."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Protocol, Tuple

from .errors import IllegalStateError, InvalidArgumentError
from .game import (
    CENTER,
    CORNERS,
    WINNING_LINES,
    Board,
    GameResult,
    Mark,
    result,
)

logger = logging.getLogger(__name__)

# Terminal outcomes, from the AI's point of view
WIN_SCORE = 1000
LOSS_SCORE = -1000
DRAW_SCORE = 0

# Heuristic weights for depth-truncated positions
TWO_IN_ROW_OPEN = 10
CENTER_WEIGHT = 3
CORNER_WEIGHT = 2

EASY_DEPTH = 2
MEDIUM_DEPTH = 4
HARD_DEPTH = 9  # the whole game tree

MemoKey = Tuple[Tuple[Mark, ...], bool, int]


class Agent(Protocol):
    """Anything that can pick a cell index for the side to move."""

    def choose_move(self, board: Board) -> int:
        ...


AgentFactory = Callable[[Mark, int], Agent]


@dataclass
class MinimaxAI:
    """Minimax player scoring every position from ``ai_mark``'s perspective.

    The memo table lives on the instance and is never shared, so one
    instance should serve one search at a time:
      - MinimaxAI.hard(Mark.O).choose_move(board) -> cell index
      - MinimaxAI.hard(Mark.O).evaluate(board) -> score
    """

    ai_mark: Mark
    use_pruning: bool = True
    max_depth: int = HARD_DEPTH
    _memo: Dict[MemoKey, float] = field(default_factory=dict, init=False, repr=False)
    nodes_visited: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self.ai_mark = Mark(self.ai_mark)
        except ValueError as exc:
            raise InvalidArgumentError(f"Unknown mark {self.ai_mark!r}") from exc
        if self.ai_mark is Mark.EMPTY:
            raise InvalidArgumentError("ai_mark must be X or O")
        if self.max_depth < 1:
            raise InvalidArgumentError("max_depth >= 1 required")

    # ---- presets ----

    @classmethod
    def easy(cls, ai_mark: Mark) -> "MinimaxAI":
        return cls(ai_mark, use_pruning=True, max_depth=EASY_DEPTH)

    @classmethod
    def medium(cls, ai_mark: Mark) -> "MinimaxAI":
        return cls(ai_mark, use_pruning=True, max_depth=MEDIUM_DEPTH)

    @classmethod
    def hard(cls, ai_mark: Mark) -> "MinimaxAI":
        return cls(ai_mark, use_pruning=True, max_depth=HARD_DEPTH)

    @classmethod
    def for_depth(cls, ai_mark: Mark, depth: int) -> "MinimaxAI":
        return cls(ai_mark, use_pruning=True, max_depth=depth)

    # ---- public API ----

    def choose_move(self, board: Board) -> int:
        legal = board.legal_moves()
        if not legal:
            raise IllegalStateError("No legal moves")

        # Opening shortcut: a full search of the (near-)empty board always
        # ends up at the center anyway.
        if (
            self.max_depth >= HARD_DEPTH
            and board.is_legal(CENTER)
            and board.occupied_count() <= 1
        ):
            return CENTER

        best_move = legal[0]
        alpha, beta = -math.inf, math.inf

        if board.to_move is self.ai_mark:
            best_score = -math.inf
            for move in legal:
                score = self._min_value(board.apply(move), 1, alpha, beta)
                # Strict comparison keeps the lowest index among equal scores
                if score > best_score:
                    best_score, best_move = score, move
                if self.use_pruning:
                    alpha = max(alpha, best_score)
        else:
            # Opponent to move: pick its strongest reply as scored for ai_mark
            best_score = math.inf
            for move in legal:
                score = self._max_value(board.apply(move), 1, alpha, beta)
                if score < best_score:
                    best_score, best_move = score, move
                if self.use_pruning:
                    beta = min(beta, best_score)

        logger.debug(
            "%s (depth %d) picked %d for %s with score %s after %d nodes, %d cached",
            self.ai_mark.value,
            self.max_depth,
            best_move,
            board.to_move.value,
            best_score,
            self.nodes_visited,
            len(self._memo),
        )
        return best_move

    def evaluate(self, board: Board) -> float:
        """Score ``board`` for ``ai_mark`` with the side to move searching next."""
        outcome = result(board)
        if outcome is not GameResult.IN_PROGRESS:
            return self._terminal_score(outcome)
        if board.to_move is self.ai_mark:
            return self._max_value(board, 0, -math.inf, math.inf)
        return self._min_value(board, 0, -math.inf, math.inf)

    # ---- core search ----

    def _max_value(self, board: Board, depth: int, alpha: float, beta: float) -> float:
        self.nodes_visited += 1
        outcome = result(board)
        if outcome is not GameResult.IN_PROGRESS:
            return self._terminal_score(outcome)
        if depth >= self.max_depth:
            return self._heuristic(board)

        key = self._key(board, depth, True)
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        window = (alpha, beta)
        value = -math.inf
        for move in board.legal_moves():
            value = max(value, self._min_value(board.apply(move), depth + 1, alpha, beta))
            if self.use_pruning:
                if value >= beta:
                    break
                alpha = max(alpha, value)

        self._remember(key, value, window)
        return value

    def _min_value(self, board: Board, depth: int, alpha: float, beta: float) -> float:
        self.nodes_visited += 1
        outcome = result(board)
        if outcome is not GameResult.IN_PROGRESS:
            return self._terminal_score(outcome)
        if depth >= self.max_depth:
            return self._heuristic(board)

        key = self._key(board, depth, False)
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        window = (alpha, beta)
        value = math.inf
        for move in board.legal_moves():
            value = min(value, self._max_value(board.apply(move), depth + 1, alpha, beta))
            if self.use_pruning:
                if value <= alpha:
                    break
                beta = min(beta, value)

        self._remember(key, value, window)
        return value

    # ---- memo table ----

    @staticmethod
    def _key(board: Board, depth: int, max_node: bool) -> MemoKey:
        # Only depth parity is kept: the same cells in the same role are
        # treated as one state wherever they show up in the tree.
        return board.cells, max_node, depth & 1

    def _remember(
        self, key: MemoKey, value: float, window: Tuple[float, float]
    ) -> None:
        # A value that hit the alpha/beta window is only a bound
        low, high = window
        if low < value < high:
            self._memo[key] = value

    # ---- scoring ----

    def _terminal_score(self, outcome: GameResult) -> int:
        if outcome is GameResult.IN_PROGRESS:
            raise InvalidArgumentError("Not terminal")
        if outcome is GameResult.DRAW:
            return DRAW_SCORE
        return WIN_SCORE if outcome.winner is self.ai_mark else LOSS_SCORE

    def _heuristic(self, board: Board) -> int:
        me = self.ai_mark
        opp = me.opponent()
        cells = board.cells
        score = 0

        # Open two-in-a-row threats
        for a, b, c in WINNING_LINES:
            trio = (cells[a], cells[b], cells[c])
            if trio.count(Mark.EMPTY) != 1:
                continue
            if trio.count(me) == 2:
                score += TWO_IN_ROW_OPEN
            elif trio.count(opp) == 2:
                score -= TWO_IN_ROW_OPEN

        if cells[CENTER] is me:
            score += CENTER_WEIGHT
        elif cells[CENTER] is opp:
            score -= CENTER_WEIGHT

        for corner in CORNERS:
            if cells[corner] is me:
                score += CORNER_WEIGHT
            elif cells[corner] is opp:
                score -= CORNER_WEIGHT
        return score
