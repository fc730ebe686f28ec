"""Move ordering strategies used to sort candidates before alpha-beta recursion.

Searching likely-best moves first tightens the window sooner and prunes more.
Ordering never changes the value a search returns, only how many nodes it visits.
"""

from typing import List, Optional, Protocol, Sequence

import chess

from minimax_chess.config import CONFIG, EvalConfig
from minimax_chess.core.board import ChessRules, RulesEngine


class MoveOrderer(Protocol):
    def score(self, move, position) -> int: ...


class HeuristicMoveOrderer:
    """Scores a move by trying it: capture trade, mate, check and promotion bonuses.

    Pure: it only asks the rules engine about a copy of the position and never
    touches the transposition table.
    """

    def __init__(self, rules: Optional[RulesEngine] = None, cfg: Optional[EvalConfig] = None):
        self.rules = rules or ChessRules()
        self.cfg = cfg or CONFIG.eval

    def score(self, move: chess.Move, position: chess.Board) -> int:
        bonuses = self.cfg.ordering_bonuses
        values = self.cfg.piece_values

        score = 0
        moved, captured = self.rules.captured_and_moved(position, move)
        if captured is not None:
            score += (values.get(chess.piece_name(captured).upper(), 0)
                      - values.get(chess.piece_name(moved).upper(), 0))

        child = self.rules.apply(position, move)
        if self.rules.is_checkmate(child):
            score += bonuses["checkmate"]
        elif self.rules.is_check(child):
            score += bonuses["check"]
        if move.promotion:
            score += bonuses["promotion"]
        return score


def order_moves(orderer: MoveOrderer, position, moves: Sequence) -> List:
    """Sort moves by descending orderer score; ties keep enumeration order."""
    return sorted(moves, key=lambda m: orderer.score(m, position), reverse=True)
