"""Static evaluator: material, piece-square tables and king safety.

Scores are in centipawns from White's point of view (White maximizes, Black
minimizes), independent of the side to move, search depth or history.
"""

from typing import Optional, Tuple

import chess

from minimax_chess.config import CONFIG, EvalConfig
from minimax_chess.core.board import ChessRules, Grid, RulesEngine
from minimax_chess.core.constants import MATE_SCORE, PST, pst_index

CENTER = range(2, 6)


class Evaluator:
    def __init__(self, rules: Optional[RulesEngine] = None, cfg: Optional[EvalConfig] = None):
        self.rules = rules or ChessRules()
        self.cfg = cfg or CONFIG.eval

    def evaluate(self, board: chess.Board) -> int:
        """Return static eval in centipawns, positive favors White."""
        if self.rules.is_checkmate(board):
            # side to move is mated
            return -MATE_SCORE if self.rules.side_to_move(board) == chess.WHITE else MATE_SCORE
        if self.rules.is_game_over(board):
            return 0

        grid = self.rules.board_occupants(board)
        return self.material(grid) + self.positional(grid) + self.king_safety(grid)

    def material(self, grid: Grid) -> int:
        """Summed piece values, White minus Black. Kings count zero."""
        score = 0
        for row in grid:
            for piece in row:
                if piece is None:
                    continue
                value = self.cfg.piece_values.get(chess.piece_name(piece.piece_type).upper(), 0)
                score += value if piece.color == chess.WHITE else -value
        return score

    def positional(self, grid: Grid) -> int:
        """Piece-square bonuses, White minus Black."""
        score = 0
        for row, pieces in enumerate(grid):
            for file, piece in enumerate(pieces):
                if piece is None:
                    continue
                bonus = PST[piece.piece_type][pst_index(row, file, piece.color)]
                score += bonus if piece.color == chess.WHITE else -bonus
        return score

    def king_safety(self, grid: Grid) -> int:
        """White king safety minus Black king safety."""
        return (self._king_safety(grid, chess.WHITE)
                - self._king_safety(grid, chess.BLACK))

    def _king_safety(self, grid: Grid, color: chess.Color) -> int:
        pos = self._find_king(grid, color)
        if pos is None:
            return 0
        w = self.cfg.king_safety_weights
        king_row, king_file = pos

        score = 0
        for dr in (-1, 0, 1):
            for df in (-1, 0, 1):
                if dr == 0 and df == 0:
                    continue
                r, f = king_row + dr, king_file + df
                if not (0 <= r < 8 and 0 <= f < 8):
                    continue
                piece = grid[r][f]
                if piece is None:
                    score -= w["exposure_penalty"]
                elif piece.color == color:
                    score += w["shield_bonus"]

        back_rank = 7 if color == chess.WHITE else 0
        if king_row == back_rank:
            score += w["back_rank_bonus"]
        if king_row in CENTER and king_file in CENTER:
            score -= w["center_penalty"]
        return score

    @staticmethod
    def _find_king(grid: Grid, color: chess.Color) -> Optional[Tuple[int, int]]:
        for row, pieces in enumerate(grid):
            for file, piece in enumerate(pieces):
                if piece is not None and piece.piece_type == chess.KING and piece.color == color:
                    return row, file
        return None
