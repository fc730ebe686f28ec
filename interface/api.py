"""FastAPI REST interface for the engine."""

import threading

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from minimax_chess.config import CONFIG
from minimax_chess.logging_config import setup_logging
from minimax_chess.main import GameSession

setup_logging(CONFIG.log_level)

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# Shared session (its engine keeps its transposition table across requests).
session = GameSession(reply_delay=0)
_board_lock = threading.Lock()


class FenRequest(BaseModel):
    fen: str


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"
    reply: bool = False  # also play the engine's answer


class SearchRequest(BaseModel):
    depth: Optional[int] = None


def _board_state():
    board = session.board.board
    return {
        "fen": board.fen(),
        "turn": "white" if board.turn == chess.WHITE else "black",
        "legal_moves": [m.uci() for m in board.legal_moves],
        "status": session.status(),
        "is_game_over": session.board.is_game_over(),
        "result": board.result(claim_draw=True) if session.board.is_game_over() else None,
    }


@app.get("/board")
def get_board():
    with _board_lock:
        return _board_state()


@app.post("/position")
def set_position(req: FenRequest):
    with _board_lock:
        try:
            session.set_fen(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
        return {"fen": session.fen()}


@app.post("/move")
def make_move(req: MoveRequest):
    with _board_lock:
        if session.board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        move = session.board.parse_move(req.move)
        if move is None:
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        session.board.push(move)
        reply = None
        if req.reply:
            engine_move = session.make_engine_move()
            reply = engine_move.uci() if engine_move else None
    return {"fen": session.fen(), "move": move.uci(), "reply": reply,
            "status": session.status()}


@app.post("/search")
def search_move(req: SearchRequest = SearchRequest()):
    depth = CONFIG.search.depth if req.depth is None else req.depth
    with _board_lock:
        if session.board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        try:
            result = session.analyse(depth)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        fen = session.fen()
    return {
        "best_move": result.best_move.uci() if result.best_move else None,
        "score": result.score,
        "depth": result.depth,
        "nodes": result.nodes,
        "fen": fen,
    }


@app.post("/reset")
def reset_board():
    with _board_lock:
        session.reset()
    return {"fen": session.fen()}
