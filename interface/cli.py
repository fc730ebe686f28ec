"""Console game: play against the engine by typing UCI moves."""

import chess
from loguru import logger

from minimax_chess.config import CONFIG
from minimax_chess.logging_config import setup_logging
from minimax_chess.main import GameSession


def play(session: GameSession, read=input, write=print):
    """Run the game loop until it ends or the human types 'quit'."""
    write(session.board.board)
    write(session.status())
    while not session.board.is_game_over():
        if session.is_human_turn():
            user_move = read("Enter your move (uci format, e2e4): ").strip()
            if user_move in ("quit", "exit"):
                break
            if not session.play_human_move(user_move, schedule_reply=False):
                write("Illegal move, try again.")
                continue
        else:
            move = session.make_engine_move()
            if move is None:
                break
            write(f"Engine plays: {move.uci()}")
        write("----------------------------")
        write(session.board.board)
        write(session.status())

    write(f"Result: {session.board.board.result(claim_draw=True)}")
    write(f"PGN: {session.pgn()}")


def main():
    setup_logging(CONFIG.log_level)
    session = GameSession()
    logger.info("Engine plays {} at depth {}",
                chess.COLOR_NAMES[session.engine_color], session.depth)
    try:
        play(session)
    except (EOFError, KeyboardInterrupt):
        print()


if __name__ == "__main__":
    main()
