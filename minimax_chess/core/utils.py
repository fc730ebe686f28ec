from loguru import logger

from minimax_chess.core.constants import MATE_BOUND, MATE_SCORE


def format_score(score: int) -> str:
    if abs(score) > MATE_BOUND:
        mate_in = (MATE_SCORE - abs(score) + 1) // 2
        return f"mate {mate_in if score > 0 else -mate_in}"
    return f"cp {score}"


def log_search_info(depth, score, nodes, elapsed, best_move, table):
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    best_str = best_move.uci() if hasattr(best_move, "uci") else str(best_move)
    logger.debug(
        "search depth {} score {} nodes {} nps {} time {}ms tt {}/{} hits, {} entries bestmove {}",
        depth, format_score(score), nodes, nps, int(elapsed * 1000),
        table.hits, table.hits + table.misses, len(table), best_str,
    )
