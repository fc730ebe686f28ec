import time
from dataclasses import dataclass
from typing import Any, Optional

import chess
from loguru import logger

from minimax_chess.config import CONFIG, SearchConfig
from minimax_chess.core.board import ChessRules, RulesEngine
from minimax_chess.core.constants import INF, MATE_SCORE
from minimax_chess.core.evaluator import Evaluator
from minimax_chess.core.move_ordering import HeuristicMoveOrderer, MoveOrderer, order_moves
from minimax_chess.core.transposition import TranspositionTable, bound_flag, score_to_tt
from minimax_chess.core.utils import log_search_info


@dataclass(frozen=True)
class SearchResult:
    best_move: Optional[Any]
    score: int
    depth: int
    nodes: int


class SearchEngine:
    """Depth-bounded minimax with alpha-beta pruning and a transposition table.

    White is the maximizing side, Black the minimizing side. The evaluator,
    rules, move orderer and table are injected; each engine owns its table,
    so separate games should use separate engines.
    """

    def __init__(self, evaluator=None, rules: Optional[RulesEngine] = None,
                 orderer: Optional[MoveOrderer] = None,
                 table: Optional[TranspositionTable] = None,
                 depth: Optional[int] = None, config: Optional[SearchConfig] = None):
        self.cfg = config or CONFIG.search
        self.rules = rules or ChessRules()
        self.evaluator = evaluator or Evaluator(self.rules)
        self.orderer = orderer or HeuristicMoveOrderer(self.rules)
        self.tt = table if table is not None else TranspositionTable(self.cfg.cache_capacity)
        self.max_depth = depth or self.cfg.depth
        self.nodes = 0

    def best_move(self, position, depth: Optional[int] = None, side: Optional[bool] = None):
        """Best move searched `depth` plies deep, or None when there is none.

        `side` only picks the direction at the root: White maximizes, Black
        minimizes. It defaults to the side to move.
        """
        return self.search(position, depth, side).best_move

    def search(self, position, depth: Optional[int] = None,
               side: Optional[bool] = None) -> SearchResult:
        depth = self.max_depth if depth is None else depth
        if not 1 <= depth <= self.cfg.max_depth:
            raise ValueError(f"depth must be between 1 and {self.cfg.max_depth}, got {depth}")
        to_move = self.rules.side_to_move(position)
        if side is None:
            side = to_move

        if side != to_move:
            # roles are inverted below the root; keep those values out of the shared table
            shared, self.tt = self.tt, TranspositionTable(self.cfg.cache_capacity)
            try:
                return self._search_root(position, depth, side)
            finally:
                self.tt = shared
        return self._search_root(position, depth, side)

    def _search_root(self, position, depth: int, side: bool) -> SearchResult:
        self.nodes = 0
        start = time.perf_counter()
        moves = self._candidates(position)
        if not moves:
            return SearchResult(None, self.evaluator.evaluate(position), depth, 0)

        maximizing = side == chess.WHITE
        best_move = None
        best_value = -INF if maximizing else INF
        for move in moves:
            child = self.rules.apply(position, move)
            # full window per root move, so every root score is exact
            value = self.minimax(child, depth - 1, -INF, INF, not maximizing, 1)
            if best_move is None or (value > best_value if maximizing else value < best_value):
                best_move, best_value = move, value

        log_search_info(depth, best_value, self.nodes, time.perf_counter() - start,
                        best_move, self.tt)
        return SearchResult(best_move, best_value, depth, self.nodes)

    def minimax(self, position, depth: int, alpha: int, beta: int, maximizing: bool,
                ply: int = 0) -> int:
        """Fail-soft alpha-beta value of position, White-positive.

        `ply` is the distance from the search root. A mate found `ply` plies
        down scores `ply` less than `MATE_SCORE`, so shorter mates win.
        """
        self.nodes += 1
        if depth == 0 or self.rules.is_game_over(position):
            return self._leaf_score(position, ply)

        moves = self._candidates(position)
        if not moves:
            logger.warning("Rules engine reports no legal moves in a live position: {}",
                           self.rules.canonical_key(position))
            return self._leaf_score(position, ply)

        best = -INF if maximizing else INF
        for move in moves:
            child = self.rules.apply(position, move)
            key = self.rules.canonical_key(child)

            value = None
            entry = self.tt.lookup(key, depth)
            if entry is not None:
                value = entry.usable(alpha, beta, ply + 1)
            if value is None:
                value = self.minimax(child, depth - 1, alpha, beta, not maximizing, ply + 1)
                self.tt.store(key, score_to_tt(value, ply + 1), depth,
                              bound_flag(value, alpha, beta))

            if maximizing:
                best = max(best, value)
                alpha = max(alpha, value)
            else:
                best = min(best, value)
                beta = min(beta, value)
            if beta <= alpha:
                break
        return best

    def _leaf_score(self, position, ply: int) -> int:
        score = self.evaluator.evaluate(position)
        if score >= MATE_SCORE:
            return score - ply
        if score <= -MATE_SCORE:
            return score + ply
        return score

    def _candidates(self, position):
        moves = self.rules.legal_moves(position)
        if self.cfg.order_moves and len(moves) > 1:
            return order_moves(self.orderer, position, moves)
        return list(moves)
