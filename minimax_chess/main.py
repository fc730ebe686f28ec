import threading
from typing import Optional

import chess
import chess.pgn
from loguru import logger

from minimax_chess.config import CONFIG, engine_color as configured_engine_color
from minimax_chess.core.board import ChessBoard
from minimax_chess.core.search import SearchEngine, SearchResult


class Engine:
    def __init__(self, depth=3):
        self.board = ChessBoard()
        self.search = SearchEngine(depth=depth)

    def get_best_move(self):
        """(best move as UCI or None, score) for the side to move."""
        result = self.search.search(self.board.board)
        move = result.best_move.uci() if result.best_move else None
        return move, result.score

    def make_move(self, move_uci: str):
        return self.board.make_move(move_uci)

    def print_board(self):
        self.board.print_board()


class GameSession:
    """One human-versus-engine game.

    The engine answers each human move after `reply_delay` seconds on a timer
    thread, so a host can render the human move before the search starts.
    The session owns its SearchEngine and therefore its transposition table.
    """

    def __init__(self, engine_color: Optional[bool] = None, depth: Optional[int] = None,
                 reply_delay: Optional[float] = None, fen: Optional[str] = None):
        self.engine_color = configured_engine_color(CONFIG) if engine_color is None else engine_color
        self.depth = depth or CONFIG.search.depth
        self.reply_delay = (CONFIG.search.reply_delay_ms / 1000
                            if reply_delay is None else reply_delay)
        self.board = ChessBoard(fen)
        self.search = SearchEngine(depth=self.depth)
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.RLock()

    @property
    def human_color(self) -> bool:
        return not self.engine_color

    def is_human_turn(self) -> bool:
        return self.board.board.turn == self.human_color

    def play_human_move(self, move_uci: str, schedule_reply: bool = True) -> bool:
        """Play the human's move. Returns False if it cannot be played."""
        with self._lock:
            if self.board.is_game_over() or not self.is_human_turn():
                logger.info("Rejected {}: not the human's turn or game over", move_uci)
                return False
            if not self.board.make_move(move_uci):
                logger.info("Illegal move: {}", move_uci)
                return False
            logger.info("Human played {}", self.board.move_history[-1])
        if schedule_reply and self._engine_to_move():
            self.schedule_engine_move()
        return True

    def schedule_engine_move(self):
        """Run make_engine_move() after the reply delay on a timer thread."""
        self.cancel_pending()
        self._timer = threading.Timer(self.reply_delay, self.make_engine_move)
        self._timer.daemon = True
        self._timer.start()

    def wait_for_engine(self, timeout: Optional[float] = None):
        timer = self._timer
        if timer is not None:
            timer.join(timeout)

    def cancel_pending(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def make_engine_move(self) -> Optional[chess.Move]:
        """Search and play the engine's move now. Returns the move, or None."""
        with self._lock:
            if not self._engine_to_move():
                return None
            move = self.search.best_move(self.board.board, self.depth, self.engine_color)
            if move is None:
                return None
            self.board.push(move)
            logger.info("Engine played {} ({})", move.uci(), self.status())
            return move

    def analyse(self, depth: Optional[int] = None) -> SearchResult:
        """Search the current position without playing. Raises ValueError on a bad depth."""
        with self._lock:
            board = self.board.board.copy()
            return self.search.search(board, self.depth if depth is None else depth)

    def _engine_to_move(self) -> bool:
        return (self.board.board.turn == self.engine_color
                and not self.board.is_game_over())

    def status(self) -> str:
        board = self.board.board
        move_color = "White" if board.turn == chess.WHITE else "Black"
        if board.is_checkmate():
            return f"Game over, {move_color} is in checkmate."
        if self.search.rules.is_draw(board):
            return "Game over, drawn position"
        status = f"{move_color} to move"
        if board.is_check():
            status += f", {move_color} is in check"
        return status

    def fen(self) -> str:
        return self.board.get_fen()

    def pgn(self) -> str:
        game = chess.pgn.Game.from_board(self.board.board)
        return str(game.mainline_moves())

    def set_fen(self, fen: str):
        with self._lock:
            self.cancel_pending()
            self.board.set_fen(fen)

    def reset(self):
        with self._lock:
            self.cancel_pending()
            self.board.reset()
            self.search.tt.clear()
