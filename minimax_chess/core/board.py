"""Rules engine over python-chess, plus the host-side board wrapper with move history."""

from typing import List, Optional, Protocol, Sequence, Tuple

import chess

Grid = List[List[Optional[chess.Piece]]]


class IllegalMoveError(ValueError):
    """A move was applied to a position in which it is not legal."""

    def __init__(self, move: chess.Move, fen: str):
        super().__init__(f"Illegal move {move.uci()} in position {fen}")
        self.move = move
        self.fen = fen


class RulesEngine(Protocol):
    """Everything the search core needs to know about the game's rules."""

    def side_to_move(self, position) -> bool: ...

    def legal_moves(self, position) -> Sequence: ...

    def apply(self, position, move): ...

    def is_checkmate(self, position) -> bool: ...

    def is_check(self, position) -> bool: ...

    def is_draw(self, position) -> bool: ...

    def is_game_over(self, position) -> bool: ...

    def board_occupants(self, position) -> Grid: ...

    def canonical_key(self, position) -> str: ...

    def captured_and_moved(self, position, move) -> Tuple[Optional[int], Optional[int]]: ...


class ChessRules:
    """RulesEngine for standard chess, backed by chess.Board.

    Positions are treated as immutable: apply() returns a new board and never
    pushes onto the one it was given.
    """

    def side_to_move(self, position: chess.Board) -> chess.Color:
        return position.turn

    def legal_moves(self, position: chess.Board) -> List[chess.Move]:
        return list(position.legal_moves)

    def apply(self, position: chess.Board, move: chess.Move) -> chess.Board:
        if not position.is_legal(move):
            raise IllegalMoveError(move, position.fen())
        child = position.copy(stack=False)
        child.push(move)
        return child

    def is_checkmate(self, position: chess.Board) -> bool:
        return position.is_checkmate()

    def is_check(self, position: chess.Board) -> bool:
        return position.is_check()

    def is_draw(self, position: chess.Board) -> bool:
        if (position.is_stalemate() or position.is_insufficient_material()
                or position.is_seventyfive_moves()):
            return True
        # Repetition needs the move stack; copies made by apply() do not carry one.
        if position.move_stack:
            return position.is_fivefold_repetition() or position.can_claim_draw()
        return False

    def is_game_over(self, position: chess.Board) -> bool:
        # Only outcomes decided by what canonical_key() encodes, so cached
        # scores never depend on history the key does not capture.
        return (position.is_checkmate() or position.is_stalemate()
                or position.is_insufficient_material()
                or position.is_seventyfive_moves())

    def board_occupants(self, position: chess.Board) -> Grid:
        """8x8 grid, row 0 = rank 8, column 0 = file a."""
        grid: Grid = [[None] * 8 for _ in range(8)]
        for sq, piece in position.piece_map().items():
            grid[7 - chess.square_rank(sq)][chess.square_file(sq)] = piece
        return grid

    def canonical_key(self, position: chess.Board) -> str:
        return position.fen()

    def captured_and_moved(self, position: chess.Board,
                           move: chess.Move) -> Tuple[Optional[int], Optional[int]]:
        """(moving piece type, captured piece type or None) for a move in position."""
        mover = position.piece_at(move.from_square)
        if position.is_en_passant(move):
            return mover.piece_type if mover else None, chess.PAWN
        victim = position.piece_at(move.to_square)
        # castling is encoded king-takes-own-rook in chess960 notation
        if victim is not None and victim.color == position.turn:
            victim = None
        return (mover.piece_type if mover else None,
                victim.piece_type if victim else None)


class ChessBoard:
    def __init__(self, fen: str = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history = []

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()
        self.move_history.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError on a bad FEN."""
        self.board.set_fen(fen)
        self.move_history.clear()

    def get_fen(self) -> str:
        """Return the current FEN."""
        return self.board.fen()

    def parse_move(self, move_str: str) -> Optional[chess.Move]:
        """Parse a UCI string into a legal move, or None.

        A pawn reaching the last rank without a promotion suffix is promoted
        to a queen.
        """
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return None
        if move.promotion is None:
            piece = self.board.piece_at(move.from_square)
            if (piece is not None and piece.piece_type == chess.PAWN
                    and chess.square_rank(move.to_square) in (0, 7)):
                move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        if move in self.board.legal_moves:
            return move
        return None

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        move = self.parse_move(move_str)
        if move is None:
            return False
        self.push(move)
        return True

    def push(self, move: chess.Move):
        """Push an already validated move."""
        self.board.push(move)
        self.move_history.append(move.uci())

    def undo_move(self):
        """Pop the last move."""
        if self.move_history:
            self.board.pop()
            self.move_history.pop()

    def get_legal_moves(self):
        """Return legal moves as UCI strings."""
        return [m.uci() for m in self.board.legal_moves]

    def is_game_over(self):
        """Check if the game has ended, counting repetition draws."""
        return self.board.is_game_over(claim_draw=True)

    def print_board(self):
        """Print ASCII representation."""
        print(self.board)
