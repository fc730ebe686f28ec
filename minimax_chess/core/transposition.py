"""Transposition table keyed by canonical position keys.

A TTEntry records the score of a position, the remaining depth of the node
that searched it and whether the score is exact or a bound left by an
alpha-beta cutoff. A lookup only returns entries searched at least as deep as
the query asks for.

The table belongs to whoever creates it (normally one SearchEngine, i.e. one
game session). It is unbounded by default; give it a capacity to evict the
least recently used entry once full.

Usage (example):

    tt = TranspositionTable(capacity=100_000)
    tt.store(key, score=35, depth=2)
    entry = tt.lookup(key, min_depth=2)
    if entry is not None:
        print(entry.score, entry.depth, entry.flag)
"""
from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from minimax_chess.core.constants import MATE_BOUND

TT_EXACT = 0
TT_LOWER = 1  # true score >= stored score (cutoff at a maximizing node)
TT_UPPER = 2  # true score <= stored score (cutoff at a minimizing node, or fail-low)


@dataclass(frozen=True)
class TTEntry:
    score: int
    depth: int
    flag: int = TT_EXACT

    def usable(self, alpha: int, beta: int, ply: int = 0) -> Optional[int]:
        """Score to use in place of a search with window (alpha, beta), or None.

        `ply` is the distance of the stored node from the current search root.
        """
        score = score_from_tt(self.score, ply)
        if self.flag == TT_EXACT:
            return score
        if self.flag == TT_LOWER and score >= beta:
            return score
        if self.flag == TT_UPPER and score <= alpha:
            return score
        return None


def score_to_tt(score: int, ply: int) -> int:
    """Mate scores are stored relative to the node, not to the search root."""
    if score > MATE_BOUND:
        return score + ply
    if score < -MATE_BOUND:
        return score - ply
    return score


def score_from_tt(score: int, ply: int) -> int:
    if score > MATE_BOUND:
        return score - ply
    if score < -MATE_BOUND:
        return score + ply
    return score


def bound_flag(score: int, alpha: int, beta: int) -> int:
    """Classify a fail-soft alpha-beta result searched with window (alpha, beta)."""
    if score <= alpha:
        return TT_UPPER
    if score >= beta:
        return TT_LOWER
    return TT_EXACT


class TranspositionTable:
    """Thread-safe mapping canonical key -> TTEntry.

    Methods:
      - lookup(key, min_depth) -> Optional[TTEntry]
      - store(key, score, depth, flag=TT_EXACT)   last write wins
      - clear()
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._table: OrderedDict[str, TTEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.stores = 0

    def lookup(self, key: str, min_depth: int) -> Optional[TTEntry]:
        with self._lock:
            entry = self._table.get(key)
            if entry is None or entry.depth < min_depth:
                self.misses += 1
                return None
            if self.capacity is not None:
                self._table.move_to_end(key)
            self.hits += 1
            return entry

    def store(self, key: str, score: int, depth: int, flag: int = TT_EXACT):
        entry = TTEntry(score, depth, flag)
        with self._lock:
            self._table[key] = entry
            self.stores += 1
            if self.capacity is not None:
                self._table.move_to_end(key)
                while len(self._table) > self.capacity:
                    self._table.popitem(last=False)

    def clear(self):
        with self._lock:
            self._table.clear()
            self.hits = self.misses = self.stores = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._table
