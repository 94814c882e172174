"""Game sessions: turn and mode rules on top of the board, plus the service facade."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .ai import HARD_DEPTH, AgentFactory, MinimaxAI
from .errors import InvalidArgumentError, InvalidOperationError, NotFoundError
from .game import Board, GameResult, Mark, is_terminal, result
from .store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

ALLOWED_DEPTHS: Tuple[int, ...] = (2, 4, 9)
AI_DEPTH_DEFAULT = HARD_DEPTH
STARTING_MARK = Mark.X


class Mode(str, Enum):
    HUMAN_VS_HUMAN = "PVP"
    HUMAN_VS_COMPUTER = "PVE"


@dataclass(frozen=True)
class GameSession:
    """One game in progress.

    Sessions are values: every move produces a new session holding the new
    board, and the store swaps it in. The result is always derived from the
    board, never stored.
    """

    id: str
    board: Board
    mode: Mode
    computer_side: Optional[Mark] = None
    depth: int = AI_DEPTH_DEFAULT
    created_at: float = field(default_factory=time.time)

    @property
    def result(self) -> GameResult:
        return result(self.board)

    @property
    def is_over(self) -> bool:
        return is_terminal(self.board)

    def with_board(self, board: Board) -> "GameSession":
        return replace(self, board=board)


# ---------- Transitions ----------


def create_session(
    mode: Union[Mode, str],
    computer_side: Union[Mark, str, None] = None,
    depth: int = AI_DEPTH_DEFAULT,
) -> GameSession:
    try:
        mode = Mode(mode)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown mode {mode!r}") from exc

    side: Optional[Mark] = None
    if mode is Mode.HUMAN_VS_COMPUTER:
        if computer_side not in (Mark.X, Mark.O):
            raise InvalidArgumentError("Computer side must be 'X' or 'O' for PVE")
        side = Mark(computer_side)
    elif computer_side not in (None, Mark.EMPTY):
        raise InvalidArgumentError("Computer side is only allowed for PVE")

    if depth not in ALLOWED_DEPTHS:
        raise InvalidArgumentError(
            f"Unsupported difficulty depth {depth}. "
            f"Choose one of {', '.join(map(str, ALLOWED_DEPTHS))}."
        )

    return GameSession(
        id=str(uuid.uuid4()),
        board=Board.initial(STARTING_MARK),
        mode=mode,
        computer_side=side,
        depth=depth,
    )


def apply_human_move(session: GameSession, index: int) -> GameSession:
    board = session.board
    if is_terminal(board):
        raise InvalidOperationError("Game is already terminal.")
    if not board.is_legal(index):
        raise InvalidOperationError(f"Illegal move: {index}")
    return session.with_board(board.apply(index))


def apply_computer_move(
    session: GameSession, agent_factory: AgentFactory = MinimaxAI.for_depth
) -> GameSession:
    board = session.board
    if session.mode is not Mode.HUMAN_VS_COMPUTER:
        raise InvalidOperationError("AI move only allowed in PVE mode.")
    if is_terminal(board):
        raise InvalidOperationError("Game is already terminal.")
    side = session.computer_side
    if side is None:
        raise InvalidOperationError("AI side not set.")
    if board.to_move is not side:
        raise InvalidOperationError("It's not AI's turn.")

    move = agent_factory(side, session.depth).choose_move(board)
    return session.with_board(board.apply(move))


def suggest_move(
    session: GameSession, agent_factory: AgentFactory = MinimaxAI.for_depth
) -> int:
    """Best move for whichever side holds the turn; the session is untouched."""
    board = session.board
    if is_terminal(board):
        raise InvalidOperationError("Game is terminal; no hint.")
    return agent_factory(board.to_move, HARD_DEPTH).choose_move(board)


def serialize_session(session: GameSession) -> Dict[str, object]:
    board = session.board
    outcome = result(board)
    return {
        "gameId": session.id,
        "board": board.encode(),
        "toMove": board.to_move.value,
        "status": outcome.value,
        "winner": outcome.winner.value if outcome.winner is not Mark.EMPTY else "",
        "mode": session.mode.value,
        "aiPlays": session.computer_side.value if session.computer_side else "",
    }


# ---------- Service ----------


def _normalize_id(session_id: str) -> str:
    try:
        return str(uuid.UUID(str(session_id)))
    except ValueError as exc:
        raise NotFoundError(f"Invalid game id: {session_id}") from exc


class GameService:
    """Entry points for the transport layer, backed by a session store."""

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        agent_factory: AgentFactory = MinimaxAI.for_depth,
    ) -> None:
        self.store: SessionStore = store if store is not None else InMemorySessionStore()
        self.agent_factory = agent_factory

    def create_session(
        self,
        mode: Union[Mode, str],
        computer_side: Union[Mark, str, None] = None,
        depth: int = AI_DEPTH_DEFAULT,
    ) -> GameSession:
        session = create_session(mode, computer_side, depth)
        self.store.put(session)
        logger.info(
            "Created %s game %s (computer: %s, depth %d)",
            session.mode.value,
            session.id,
            session.computer_side.value if session.computer_side else "-",
            session.depth,
        )
        return session

    def get_session(self, session_id: str) -> GameSession:
        session = self.store.get(_normalize_id(session_id))
        if session is None:
            raise NotFoundError(f"Game not found: {session_id}")
        return session

    def apply_human_move(self, session_id: str, index: int) -> GameSession:
        key = _normalize_id(session_id)
        try:
            session = self.store.update(key, lambda s: apply_human_move(s, index))
        except InvalidOperationError as exc:
            logger.warning("Rejected move %s in game %s: %s", index, key, exc)
            raise
        logger.debug("Game %s: human played %d -> %s", key, index, session.board)
        self._log_if_finished(session)
        return session

    def apply_computer_move(self, session_id: str) -> GameSession:
        key = _normalize_id(session_id)
        try:
            session = self.store.update(
                key, lambda s: apply_computer_move(s, self.agent_factory)
            )
        except InvalidOperationError as exc:
            logger.warning("Rejected AI move in game %s: %s", key, exc)
            raise
        logger.info("Game %s: AI moved -> %s", key, session.board)
        self._log_if_finished(session)
        return session

    def hint(self, session_id: str) -> int:
        session = self.get_session(session_id)
        return suggest_move(session, self.agent_factory)

    @staticmethod
    def _log_if_finished(session: GameSession) -> None:
        if session.is_over:
            logger.info("Game %s finished: %s", session.id, session.result.value)
