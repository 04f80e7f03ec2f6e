"""HTTP routes."""

from fastapi import APIRouter, HTTPException

from gomoku_play.ai_client import AISettings
from gomoku_play.board import Board
from gomoku_play.errors import NoMovesAvailable
from gomoku_play.models import AIMoveRequest, AIMoveResponse, PositionModel
from gomoku_play.session import session_manager

API_VERSION = "1.0.0"

router = APIRouter(prefix="/api")


@router.get("")
async def info():
    return {"message": "Gomoku Play API", "version": API_VERSION}


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/ai-move", response_model=AIMoveResponse)
async def ai_move(req: AIMoveRequest) -> AIMoveResponse:
    """Ask the AI opponent for a move on an arbitrary board."""
    try:
        board = Board.from_rows(req.board)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if req.board_size is not None and req.board_size != board.size:
        raise HTTPException(status_code=400, detail="board_size does not match board")

    ai = AISettings(provider=req.provider, difficulty=req.difficulty)
    try:
        position = await session_manager.ai_client.choose_move(
            board, req.current_player, ai, req.win_condition
        )
    except NoMovesAvailable as exc:
        return AIMoveResponse(success=False, error=exc.message)
    return AIMoveResponse(success=True, position=PositionModel(row=position.row, col=position.col))
