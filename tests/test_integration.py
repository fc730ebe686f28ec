"""
Integration test suite for the minimax-chess engine.

Tests components working together end-to-end:
- Engine vs engine games through the search core
- Engine wrapper and GameSession (timed engine replies, status text, PGN)
- Console game loop with scripted input
- FastAPI REST API
"""

import chess
import pytest
from fastapi.testclient import TestClient

from minimax_chess.config import CONFIG, SearchConfig
from minimax_chess.core.search import SearchEngine
from minimax_chess.main import Engine, GameSession
from interface import api
from interface.cli import play

FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"
STALEMATE_FEN = "5k2/5P2/5K2/8/8/8/8/8 b - - 0 1"
MATE_IN_ONE_FEN = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE VS ENGINE
# ════════════════════════════════════════════════════════════════════════════

class TestFullGame:
    """The engine keeps producing legal moves over a long sequence."""

    def test_engine_vs_engine_plays_legal_moves(self):
        white = SearchEngine(depth=1)
        black = SearchEngine(depth=1)
        board = chess.Board()
        plies = 0
        while not board.is_game_over() and plies < 40:
            engine = white if board.turn == chess.WHITE else black
            move = engine.best_move(board)
            assert move in board.legal_moves, f"Illegal move {move} at ply {plies}"
            board.push(move)
            plies += 1
        assert plies > 10

    def test_shared_engine_both_sides(self):
        engine = SearchEngine(depth=2)
        board = chess.Board()
        for _ in range(6):
            move = engine.best_move(board)
            assert move in board.legal_moves
            board.push(move)
        assert len(engine.tt) > 0

    def test_unordered_engine_plays_same_game(self):
        ordered = SearchEngine(depth=2, config=SearchConfig(order_moves=True))
        plain = SearchEngine(depth=2, config=SearchConfig(order_moves=False))
        board = chess.Board()
        for _ in range(4):
            a = ordered.search(board)
            b = plain.search(board)
            assert a.score == b.score
            board.push(a.best_move)


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE WRAPPER
# ════════════════════════════════════════════════════════════════════════════

class TestEngineWrapper:
    def test_best_move_is_uci(self):
        engine = Engine(depth=1)
        move, score = engine.get_best_move()
        assert move in engine.board.get_legal_moves()
        assert isinstance(score, int)

    def test_make_move_then_search(self):
        engine = Engine(depth=2)
        assert engine.make_move("e2e4")
        move, _ = engine.get_best_move()
        assert chess.Move.from_uci(move) in engine.board.board.legal_moves
        assert engine.board.board.turn == chess.BLACK

    def test_no_move_when_mated(self):
        engine = Engine(depth=1)
        engine.board.set_fen(FOOLS_MATE_FEN)
        assert engine.get_best_move()[0] is None


# ════════════════════════════════════════════════════════════════════════════
#  GAME SESSION
# ════════════════════════════════════════════════════════════════════════════

class TestGameSession:
    def test_initial_status(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        assert session.status() == "White to move"
        assert session.is_human_turn()

    def test_check_status(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0,
                              fen="4k3/8/8/8/8/8/4r3/4K3 w - - 0 1")
        assert session.status() == "White to move, White is in check"

    def test_checkmate_status(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0, fen=FOOLS_MATE_FEN)
        assert session.status() == "Game over, White is in checkmate."

    def test_draw_status(self):
        session = GameSession(engine_color=chess.WHITE, depth=1, reply_delay=0, fen=STALEMATE_FEN)
        assert session.status() == "Game over, drawn position"

    def test_engine_replies_after_delay(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0.01)
        assert session.play_human_move("e2e4") is True
        session.wait_for_engine(timeout=30)
        assert len(session.board.move_history) == 2
        assert session.board.move_history[0] == "e2e4"
        assert session.is_human_turn()

    def test_pending_reply_can_be_cancelled(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=30)
        assert session.play_human_move("e2e4") is True
        session.cancel_pending()
        assert session.board.move_history == ["e2e4"]
        assert not session.is_human_turn()

    def test_illegal_move_rejected(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        assert session.play_human_move("e2e5", schedule_reply=False) is False
        assert session.play_human_move("nonsense", schedule_reply=False) is False
        assert session.fen() == chess.STARTING_FEN

    def test_move_out_of_turn_rejected(self):
        session = GameSession(engine_color=chess.WHITE, depth=1, reply_delay=0)
        assert session.play_human_move("e7e5", schedule_reply=False) is False

    def test_engine_does_not_move_on_human_turn(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        assert session.make_engine_move() is None
        assert session.fen() == chess.STARTING_FEN

    def test_engine_as_white(self):
        session = GameSession(engine_color=chess.WHITE, depth=1, reply_delay=0)
        move = session.make_engine_move()
        assert move in chess.Board().legal_moves
        assert session.is_human_turn()

    def test_engine_takes_mate(self):
        session = GameSession(engine_color=chess.WHITE, depth=2, reply_delay=0, fen=MATE_IN_ONE_FEN)
        assert session.make_engine_move() == chess.Move.from_uci("a1a8")
        assert session.status() == "Game over, Black is in checkmate."

    def test_no_moves_after_game_over(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0, fen=FOOLS_MATE_FEN)
        assert session.play_human_move("a2a3", schedule_reply=False) is False

    def test_pgn(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        session.play_human_move("e2e4", schedule_reply=False)
        session.make_engine_move()
        assert session.pgn().startswith("1. e4 ")

    def test_reset_clears_board_and_table(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        session.play_human_move("e2e4", schedule_reply=False)
        session.make_engine_move()
        session.reset()
        assert session.fen() == chess.STARTING_FEN
        assert session.board.move_history == []
        assert len(session.search.tt) == 0

    def test_analyse_does_not_play(self):
        session = GameSession(engine_color=chess.WHITE, depth=2, reply_delay=0, fen=MATE_IN_ONE_FEN)
        result = session.analyse()
        assert result.best_move == chess.Move.from_uci("a1a8")
        assert result.depth == 2
        assert session.fen() == MATE_IN_ONE_FEN

    def test_analyse_rejects_bad_depth(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        with pytest.raises(ValueError):
            session.analyse(0)

    def test_set_fen(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        session.set_fen(MATE_IN_ONE_FEN)
        assert session.fen() == MATE_IN_ONE_FEN
        with pytest.raises(ValueError):
            session.set_fen("garbage")


# ════════════════════════════════════════════════════════════════════════════
#  CONSOLE GAME
# ════════════════════════════════════════════════════════════════════════════

class TestConsoleGame:
    def run(self, session, inputs):
        lines = iter(inputs)
        out = []
        play(session, read=lambda prompt: next(lines), write=lambda x: out.append(str(x)))
        return out

    def test_human_then_engine_then_quit(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        out = self.run(session, ["e2e4", "quit"])
        assert any(line.startswith("Engine plays: ") for line in out)
        assert "Result: *" in out
        assert len(session.board.move_history) == 2

    def test_illegal_input_reprompts(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0)
        out = self.run(session, ["e2e5", "exit"])
        assert "Illegal move, try again." in out
        assert session.board.move_history == []

    def test_game_ends_on_mate(self):
        session = GameSession(engine_color=chess.BLACK, depth=1, reply_delay=0, fen=MATE_IN_ONE_FEN)
        out = self.run(session, ["a1a8"])
        assert "Game over, Black is in checkmate." in out
        assert "Result: 1-0" in out
        assert out[-1].startswith("PGN: ")


# ════════════════════════════════════════════════════════════════════════════
#  REST API
# ════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client():
    api.session.reset()
    api.session.depth = 1
    return TestClient(api.app)


class TestRestApi:
    def test_get_board(self, client):
        res = client.get("/board")
        assert res.status_code == 200
        data = res.json()
        assert data["fen"] == chess.STARTING_FEN
        assert data["turn"] == "white"
        assert len(data["legal_moves"]) == 20
        assert data["status"] == "White to move"
        assert data["is_game_over"] is False
        assert data["result"] is None

    def test_set_position(self, client):
        res = client.post("/position", json={"fen": MATE_IN_ONE_FEN})
        assert res.status_code == 200
        assert res.json()["fen"] == MATE_IN_ONE_FEN

    def test_set_invalid_position(self, client):
        res = client.post("/position", json={"fen": "not a fen"})
        assert res.status_code == 400

    def test_make_move(self, client):
        res = client.post("/move", json={"move": "e2e4"})
        assert res.status_code == 200
        data = res.json()
        assert data["move"] == "e2e4"
        assert data["reply"] is None
        assert data["status"] == "Black to move"

    def test_make_move_with_reply(self, client):
        res = client.post("/move", json={"move": "e2e4", "reply": True})
        assert res.status_code == 200
        data = res.json()
        board = chess.Board()
        board.push_uci("e2e4")
        assert chess.Move.from_uci(data["reply"]) in board.legal_moves
        assert data["status"] == "White to move"

    def test_illegal_move(self, client):
        res = client.post("/move", json={"move": "e2e5"})
        assert res.status_code == 400

    def test_move_after_game_over(self, client):
        client.post("/position", json={"fen": FOOLS_MATE_FEN})
        res = client.post("/move", json={"move": "a2a3"})
        assert res.status_code == 400
        board = client.get("/board").json()
        assert board["is_game_over"] is True
        assert board["result"] == "0-1"

    def test_search(self, client):
        client.post("/position", json={"fen": MATE_IN_ONE_FEN})
        res = client.post("/search", json={"depth": 1})
        assert res.status_code == 200
        data = res.json()
        assert data["best_move"] == "a1a8"
        assert data["depth"] == 1
        assert data["nodes"] > 0
        assert data["fen"] == MATE_IN_ONE_FEN

    def test_search_leaves_board_alone(self, client):
        client.post("/search", json={"depth": 1})
        assert client.get("/board").json()["fen"] == chess.STARTING_FEN

    @pytest.mark.parametrize("depth", [0, -1, CONFIG.search.max_depth + 1])
    def test_search_depth_out_of_range(self, client, depth):
        res = client.post("/search", json={"depth": depth})
        assert res.status_code == 400
        assert client.get("/board").json()["fen"] == chess.STARTING_FEN

    def test_search_default_depth(self, client):
        client.post("/position", json={"fen": MATE_IN_ONE_FEN})
        res = client.post("/search", json={})
        assert res.status_code == 200
        assert res.json()["depth"] == CONFIG.search.depth

    def test_search_when_game_over(self, client):
        client.post("/position", json={"fen": STALEMATE_FEN})
        res = client.post("/search", json={"depth": 1})
        assert res.status_code == 400

    def test_reset(self, client):
        client.post("/move", json={"move": "e2e4"})
        res = client.post("/reset")
        assert res.status_code == 200
        assert res.json()["fen"] == chess.STARTING_FEN
