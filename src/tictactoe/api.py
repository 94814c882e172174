"""FastAPI transport exposing game sessions over HTTP."""

from __future__ import annotations

from typing import Dict, Literal, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import NotFoundError, TicTacToeError
from .session import (
    AI_DEPTH_DEFAULT,
    ALLOWED_DEPTHS,
    GameService,
    Mode,
    serialize_session,
)

app = FastAPI(title="Tic-Tac-Toe", description="3x3 tic-tac-toe against a friend or a minimax AI")
SERVICE = GameService()


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Mode
    ai_plays: Optional[Literal["X", "O"]] = Field(default=None, alias="aiPlays")
    depth: int = Field(
        default=AI_DEPTH_DEFAULT,
        ge=min(ALLOWED_DEPTHS),
        le=max(ALLOWED_DEPTHS),
        description="Minimax depth controlling AI strength",
    )

    @field_validator("depth")
    @classmethod
    def ensure_supported_depth(cls, value: int) -> int:
        if value not in ALLOWED_DEPTHS:
            raise ValueError(
                f"Unsupported difficulty depth {value}. "
                f"Choose one of {', '.join(map(str, ALLOWED_DEPTHS))}."
            )
        return value


class PlayRequest(BaseModel):
    """Request payload for a human move on an existing game."""

    index: int = Field(ge=0, le=8)


@app.exception_handler(NotFoundError)
async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(TicTacToeError)
async def bad_request(request: Request, exc: TicTacToeError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.post("/api/games")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    session = SERVICE.create_session(request.mode, request.ai_plays, request.depth)
    return serialize_session(session)


@app.get("/api/games/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    return serialize_session(SERVICE.get_session(game_id))


@app.post("/api/games/{game_id}/play")
def play(game_id: str, request: PlayRequest) -> Dict[str, object]:
    return serialize_session(SERVICE.apply_human_move(game_id, request.index))


@app.post("/api/games/{game_id}/ai-move")
def ai_move(game_id: str) -> Dict[str, object]:
    return serialize_session(SERVICE.apply_computer_move(game_id))


@app.get("/api/games/{game_id}/hint")
def hint(game_id: str) -> Dict[str, int]:
    return {"index": SERVICE.hint(game_id)}


@app.get("/hello", response_class=PlainTextResponse)
def hello() -> str:
    return "Backend is alive"


@app.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return "ok"
