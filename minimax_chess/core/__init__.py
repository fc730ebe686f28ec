"""Core engine components: rules adapter, evaluator, move ordering, search and transposition table."""

from .board import ChessBoard, ChessRules, IllegalMoveError, RulesEngine
from .evaluator import Evaluator
from .move_ordering import HeuristicMoveOrderer, MoveOrderer
from .search import SearchEngine, SearchResult
from .transposition import TranspositionTable
