"""minimax-chess: a small alpha-beta chess engine for interactive play."""
