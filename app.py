# app.py
import logging
import threading
import time
from typing import Dict, Optional
from uuid import uuid4

from flask import Flask, jsonify, request

import config
from game_logic import MARKS, Difficulty, GameMode, TicTacToeGame
from logging_setup import setup_logging

logger = logging.getLogger(__name__)

app = Flask(__name__)

# In-memory games store (simple). Format:
# games[g_id] = {"game": TicTacToeGame, "lock": Lock, "touched": monotonic seconds}
games: Dict[str, dict] = {}
_store_lock = threading.Lock()


def _error(message: str, status: int, game: Optional[TicTacToeGame] = None):
    payload = {"error": message}
    if game is not None:
        payload["state"] = game.to_dict()
    return jsonify(payload), status


def _get_entry(game_id: str) -> Optional[dict]:
    with _store_lock:
        entry = games.get(game_id)
        if entry is not None:
            entry["touched"] = time.monotonic()
        return entry


def _evict_games() -> None:
    """Drop idle games, then the least recently used ones above MAX_GAMES. Caller holds _store_lock."""
    now = time.monotonic()
    for g_id in [g for g, e in games.items() if now - e["touched"] > config.GAME_IDLE_SECONDS]:
        del games[g_id]
        logger.info("evicted idle game %s", g_id)
    overflow = len(games) - max(config.MAX_GAMES - 1, 0)
    if overflow > 0:
        for g_id in sorted(games, key=lambda g: games[g]["touched"])[:overflow]:
            del games[g_id]
            logger.warning("evicted game %s: store full (%d)", g_id, config.MAX_GAMES)


@app.route("/api/new", methods=["POST"])
def api_new():
    """
    Create a new game. Optional JSON body:
    {"mode": "pvp|pvai", "difficulty": "easy|medium|hard", "side": "X|O"}
    Returns: {"game_id": "...", "state": {...}}
    """
    body = request.get_json(silent=True) or {}
    side = body.get("side", "X")
    if side not in MARKS:
        return _error("side must be 'X' or 'O'", 400)
    try:
        mode = GameMode.parse(body.get("mode", config.DEFAULT_MODE))
        difficulty = Difficulty.parse(body.get("difficulty", config.DEFAULT_DIFFICULTY))
    except ValueError as e:
        return _error(str(e), 400)

    g = TicTacToeGame(mode=mode, difficulty=difficulty, player_mark=side)
    g_id = str(uuid4())
    with _store_lock:
        _evict_games()
        games[g_id] = {"game": g, "lock": threading.Lock(), "touched": time.monotonic()}
    logger.info("new game %s: mode=%s difficulty=%s side=%s", g_id, mode.value, difficulty.value, g.player_mark)

    return jsonify({"game_id": g_id, "state": g.to_dict()})


@app.route("/api/state/<game_id>", methods=["GET"])
def api_state(game_id):
    entry = _get_entry(game_id)
    if entry is None:
        return _error("game not found", 404)
    with entry["lock"]:
        return jsonify({"state": entry["game"].to_dict()})


@app.route("/api/move/<game_id>", methods=["POST"])
def api_move(game_id):
    """
    Human makes a move.
    Body: {"index": 0-8}
    Returns: {"state": {...}, "ok": true/false}
    """
    entry = _get_entry(game_id)
    if entry is None:
        return _error("game not found", 404)

    body = request.get_json(silent=True) or {}
    idx = body.get("index")
    if idx is None or isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx <= 8:
        return _error("invalid index", 400)

    with entry["lock"]:
        game: TicTacToeGame = entry["game"]
        # Against the AI only the human's turn is accepted here
        if game.is_ai_turn():
            logger.warning("game %s: human move while AI to play", game_id)
            return _error("not human's turn", 400, game)

        ok = game.make_move(idx)
        return jsonify({"ok": bool(ok), "state": game.to_dict()})


@app.route("/api/ai_move/<game_id>", methods=["POST"])
def api_ai_move(game_id):
    """
    Ask the server to make an AI move for the current game (if it's AI's turn).
    Returns updated state and the move the AI made.
    """
    entry = _get_entry(game_id)
    if entry is None:
        return _error("game not found", 404)

    with entry["lock"]:
        game: TicTacToeGame = entry["game"]
        if game.is_over():
            return _error("game already finished", 400, game)
        if game.ai is None:
            return _error("no AI in a pvp game", 400, game)
        if not game.is_ai_turn():
            return _error("not AI's turn", 400, game)

        move = game.ai_move()
        return jsonify({"move": move, "state": game.to_dict()})


@app.route("/api/undo/<game_id>", methods=["POST"])
def api_undo(game_id):
    entry = _get_entry(game_id)
    if entry is None:
        return _error("game not found", 404)
    with entry["lock"]:
        game: TicTacToeGame = entry["game"]
        undone = game.undo()
        return jsonify({"undone": list(undone) if undone else None, "state": game.to_dict()})


@app.route("/api/reset/<game_id>", methods=["POST"])
def api_reset(game_id):
    """Start a new round. Body: {"reset_scores": true} also zeroes the scoreboard."""
    entry = _get_entry(game_id)
    if entry is None:
        return _error("game not found", 404)
    body = request.get_json(silent=True) or {}
    with entry["lock"]:
        game: TicTacToeGame = entry["game"]
        if body.get("reset_scores"):
            game.reset_scores()
        game.new_round()
        return jsonify({"state": game.to_dict()})


@app.route("/api/games/<game_id>", methods=["DELETE"])
def api_delete(game_id):
    with _store_lock:
        entry = games.pop(game_id, None)
    if entry is None:
        return _error("game not found", 404)
    return jsonify({"ok": True})


if __name__ == "__main__":
    setup_logging()
    # Use debug only during development
    app.run(host=config.HOST, port=config.PORT, debug=config.FLASK_DEBUG, threaded=True)
