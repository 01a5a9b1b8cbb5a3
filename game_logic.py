#!/usr/bin/env python3
"""
game_logic.py

Tic-Tac-Toe decision engine and game bookkeeping.

Engine (stateless functions over a 9-cell list):
- get_winner / get_empty_cells / find_winning_move / check_result: board analysis.
- minimax: full-depth search with alpha-beta pruning.
- choose_move: easy (random), medium (win, block, random), hard (minimax).

Classes:
- Board: the live 9-cell board a game plays on.
- MinimaxAI: holds the AI/human marks and asks the engine for moves.
- TicTacToeGame: rounds, turns, undo, scores and serialization.

Run this file to try a simple command-line demo where you play vs AI.
"""

from __future__ import annotations
import json
import logging
import math
import random
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

X = "X"
O = "O"
EMPTY = ""
MARKS = (X, O)

# Layout:  0 | 1 | 2
#          3 | 4 | 5
#          6 | 7 | 8
WIN_PATTERNS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),   # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),   # columns
    (0, 4, 8), (2, 4, 6),              # diagonals
)


def other_mark(mark: str) -> str:
    if mark not in MARKS:
        raise ValueError(f"mark must be 'X' or 'O', got {mark!r}")
    return O if mark == X else X


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        """Accept a member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"difficulty must be one of easy/medium/hard, got {value!r}") from None


class GameMode(str, Enum):
    PVP = "pvp"
    PVAI = "pvai"

    @classmethod
    def parse(cls, value: Union["GameMode", str]) -> "GameMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"mode must be 'pvp' or 'pvai', got {value!r}") from None


@dataclass(frozen=True)
class WinResult:
    winner: str
    pattern: Tuple[int, int, int]

    def to_dict(self) -> Dict:
        return {"type": "win", "winner": self.winner, "pattern": list(self.pattern)}


@dataclass(frozen=True)
class DrawResult:
    def to_dict(self) -> Dict:
        return {"type": "draw"}


GameResult = Optional[Union[WinResult, DrawResult]]


# -------------------------
# Board analysis
# -------------------------
def get_winner(board: Sequence[str]) -> Optional[str]:
    """Return the mark owning a completed line, or None."""
    for a, b, c in WIN_PATTERNS:
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return board[a]
    return None


def get_empty_cells(board: Sequence[str]) -> List[int]:
    return [i for i, v in enumerate(board) if v == EMPTY]


def find_winning_move(board: Sequence[str], pattern: Sequence[int], mark: str) -> Optional[int]:
    """
    Return the empty index of `pattern` if `mark` already holds the other two
    cells, else None. Called with the opponent's mark it finds a block.
    """
    values = [board[i] for i in pattern]
    if values.count(mark) == 2 and values.count(EMPTY) == 1:
        return pattern[values.index(EMPTY)]
    return None


def check_result(board: Sequence[str]) -> GameResult:
    """WinResult for the first completed pattern, DrawResult on a full board, else None."""
    assert len(board) == 9, f"board must have 9 cells, got {len(board)}"
    for pattern in WIN_PATTERNS:
        a, b, c = pattern
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return WinResult(winner=board[a], pattern=pattern)
    if EMPTY not in board:
        return DrawResult()
    return None


# -------------------------
# Search
# -------------------------
def minimax(board: List[str], depth: int, maximizing: bool, alpha: float, beta: float,
            ai_mark: str, human_mark: str) -> int:
    """
    Score `board` from the AI's point of view.

    AI win -> 10 - depth (faster wins score higher), human win -> depth - 10
    (later losses hurt less), draw -> 0. The board is mutated during the
    search and restored before returning.
    """
    winner = get_winner(board)
    if winner == ai_mark:
        return 10 - depth
    if winner == human_mark:
        return depth - 10
    if EMPTY not in board:
        return 0

    if maximizing:
        best = -math.inf
        for i in range(9):
            if board[i] != EMPTY:
                continue
            board[i] = ai_mark
            try:
                score = minimax(board, depth + 1, False, alpha, beta, ai_mark, human_mark)
            finally:
                board[i] = EMPTY
            best = max(best, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
        return best
    else:
        best = math.inf
        for i in range(9):
            if board[i] != EMPTY:
                continue
            board[i] = human_mark
            try:
                score = minimax(board, depth + 1, True, alpha, beta, ai_mark, human_mark)
            finally:
                board[i] = EMPTY
            best = min(best, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return best


# -------------------------
# Strategy selection
# -------------------------
def _easy_move(board: List[str], ai_mark: str, human_mark: str,
               rng: Optional[random.Random] = None) -> Optional[int]:
    empty = get_empty_cells(board)
    if not empty:
        return None
    return (rng or random).choice(empty)


def _medium_move(board: List[str], ai_mark: str, human_mark: str,
                 rng: Optional[random.Random] = None) -> Optional[int]:
    for pattern in WIN_PATTERNS:
        move = find_winning_move(board, pattern, ai_mark)
        if move is not None:
            return move
    for pattern in WIN_PATTERNS:
        move = find_winning_move(board, pattern, human_mark)
        if move is not None:
            return move
    return _easy_move(board, ai_mark, human_mark, rng)


def _hard_move(board: List[str], ai_mark: str, human_mark: str,
               rng: Optional[random.Random] = None) -> Optional[int]:
    best_score = -math.inf
    best_move: Optional[int] = None
    for idx in get_empty_cells(board):
        board[idx] = ai_mark
        try:
            score = minimax(board, 0, False, -math.inf, math.inf, ai_mark, human_mark)
        finally:
            board[idx] = EMPTY
        # strict improvement: first-seen index wins ties
        if score > best_score:
            best_score = score
            best_move = idx
    logger.debug("hard move for %s: %s (score %s)", ai_mark, best_move, best_score)
    return best_move


_STRATEGIES = {
    Difficulty.EASY: _easy_move,
    Difficulty.MEDIUM: _medium_move,
    Difficulty.HARD: _hard_move,
}


def choose_move(board: List[str], difficulty: Union[Difficulty, str], ai_mark: str, human_mark: str,
                rng: Optional[random.Random] = None) -> Optional[int]:
    """
    Pick a cell index for `ai_mark`, or None when the board is full.

    easy   -> random empty cell
    medium -> complete own line, else block opponent, else random
    hard   -> best minimax score, lowest index on ties
    """
    assert len(board) == 9, f"board must have 9 cells, got {len(board)}"
    strategy = _STRATEGIES[Difficulty.parse(difficulty)]
    return strategy(board, ai_mark, human_mark, rng)


# -------------------------
# Board: the game's live cells
# -------------------------
class Board:
    """Nine cells in row-major order; '' marks an empty cell."""

    def __init__(self, cells: Optional[Sequence[str]] = None):
        self.cells: List[str] = list(cells) if cells is not None else [EMPTY] * 9
        if len(self.cells) != 9:
            raise ValueError("board must have exactly 9 cells")

    def available_moves(self) -> List[int]:
        return get_empty_cells(self.cells)

    def place(self, index: int, mark: str) -> bool:
        """Put `mark` on an empty cell 0-8. Returns False if the cell is taken or out of range."""
        if not 0 <= index < 9 or self.cells[index] != EMPTY:
            return False
        self.cells[index] = mark
        return True

    def clear(self, index: int) -> None:
        self.cells[index] = EMPTY

    def winner(self) -> Optional[str]:
        """'X' or 'O' for a completed line, 'Tie' for a full board, else None."""
        result = check_result(self.cells)
        if isinstance(result, WinResult):
            return result.winner
        if isinstance(result, DrawResult):
            return "Tie"
        return None

    def __str__(self) -> str:
        # empty cells show their 1-9 key for the CLI
        labels = [c or str(i + 1) for i, c in enumerate(self.cells)]
        rows = [" " + " | ".join(labels[r:r + 3]) + " " for r in (0, 3, 6)]
        return "\n---+---+---\n".join(rows)


# -------------------------
# Minimax AI facade
# -------------------------
class MinimaxAI:
    def __init__(self, ai_player: str = O, human_player: Optional[str] = None):
        if ai_player not in MARKS:
            raise ValueError("ai_player must be 'X' or 'O'")
        if human_player is None:
            human_player = other_mark(ai_player)
        if human_player not in MARKS or human_player == ai_player:
            raise ValueError("human_player must be the other mark")
        self.ai_player = ai_player
        self.human_player = human_player

    def choose_move(self, board: Union[Board, List[str]], mode: Union[Difficulty, str] = Difficulty.HARD,
                    rng: Optional[random.Random] = None) -> Optional[int]:
        """
        mode: 'easy'   -> random legal move
              'medium' -> win if possible, else block, else random
              'hard'   -> full minimax with alpha-beta (optimal)

        The search runs on a copy, so the caller's board is never touched.
        """
        cells = list(board.cells if isinstance(board, Board) else board)
        move = choose_move(cells, mode, self.ai_player, self.human_player, rng)
        logger.debug("AI %s (%s) chose %s", self.ai_player, Difficulty.parse(mode).value, move)
        return move


# -------------------------
# TicTacToeGame: game state
# -------------------------
class TicTacToeGame:
    def __init__(self, mode: Union[GameMode, str] = GameMode.PVAI,
                 difficulty: Union[Difficulty, str] = Difficulty.HARD,
                 player_mark: str = X):
        self.mode = GameMode.parse(mode)
        self.difficulty = Difficulty.parse(difficulty)
        if player_mark not in MARKS:
            raise ValueError("player_mark must be 'X' or 'O'")

        if self.mode is GameMode.PVP:
            self.player_mark = X
            self.ai_mark: Optional[str] = None
            self.ai: Optional[MinimaxAI] = None
        else:
            self.player_mark = player_mark
            self.ai_mark = other_mark(player_mark)
            self.ai = MinimaxAI(ai_player=self.ai_mark, human_player=player_mark)

        self.scores: Dict[str, int] = {"p1": 0, "draws": 0, "p2": 0}
        self.new_round()

    def new_round(self) -> None:
        """Clear the board and start a new round. X always moves first; scores are kept."""
        self.board = Board()
        self.current_player = X
        self.history: List[Tuple[int, str]] = []  # list of (index, player) for undo
        self.result: GameResult = None

    def reset_scores(self) -> None:
        self.scores = {"p1": 0, "draws": 0, "p2": 0}

    def make_move(self, index: int) -> bool:
        """Attempt to make a move for current player at index. Returns True if successful."""
        if self.result is not None:
            return False  # round already finished
        mark = self.current_player
        if not self.board.place(index, mark):
            return False
        self.history.append((index, mark))
        self.result = check_result(self.board.cells)
        if self.result is None:
            self.current_player = other_mark(mark)
        else:
            self._end_round(self.result)
        return True

    def is_ai_turn(self) -> bool:
        return self.ai is not None and self.result is None and self.current_player == self.ai_mark

    def ai_move(self, rng: Optional[random.Random] = None) -> Optional[int]:
        """Let the AI play its move. Returns the index, or None if it is not the AI's turn."""
        if not self.is_ai_turn():
            return None
        move = self.ai.choose_move(self.board, self.difficulty, rng)
        if move is None or not self.make_move(move):
            return None
        return move

    def undo(self) -> Optional[Tuple[int, str]]:
        """
        Undo the last move of an unfinished round. Against the AI this keeps
        undoing until it is the human's turn again, so the AI reply and the
        human move go together. Returns the last undone (index, player) or None.
        Nothing is undone while the human has not moved yet.
        """
        if self.result is not None or not self.history:
            return None
        if self.ai is not None and all(p != self.player_mark for _, p in self.history):
            return None
        undone = None
        while self.history:
            index, player = self.history.pop()
            self.board.clear(index)
            # Set current player to the player who just moved (so they can move again)
            self.current_player = player
            undone = (index, player)
            if self.ai is None or player == self.player_mark:
                break
        return undone

    def _end_round(self, result: Union[WinResult, DrawResult]) -> None:
        if isinstance(result, DrawResult):
            self.scores["draws"] += 1
            logger.info("round ended in a draw (%s)", self.mode.value)
            return
        if self.mode is GameMode.PVAI:
            key = "p1" if result.winner == self.player_mark else "p2"
        else:
            # In PvP, X is always p1, O is always p2
            key = "p1" if result.winner == X else "p2"
        self.scores[key] += 1
        logger.info("round won by %s on %s (%s)", result.winner, list(result.pattern), self.mode.value)

    def game_result(self) -> Optional[str]:
        """Return 'X' or 'O' if winner, 'Tie' if draw, else None."""
        if isinstance(self.result, WinResult):
            return self.result.winner
        if isinstance(self.result, DrawResult):
            return "Tie"
        return None

    def is_over(self) -> bool:
        return self.result is not None

    def available_moves(self) -> List[int]:
        if self.result is not None:
            return []
        return self.board.available_moves()

    def to_dict(self) -> Dict:
        return {
            "board": list(self.board.cells),
            "current_player": self.current_player,
            "mode": self.mode.value,
            "difficulty": self.difficulty.value,
            "player_mark": self.player_mark,
            "ai_mark": self.ai_mark,
            "result": self.result.to_dict() if self.result is not None else None,
            "winner": self.game_result(),
            "available_moves": self.available_moves(),
            "history": [list(h) for h in self.history],
            "scores": dict(self.scores),
            "ai_turn": self.is_ai_turn(),
        }

    def serialize(self) -> str:
        """Return JSON string capturing the board, turn, settings and scores."""
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, s: str) -> "TicTacToeGame":
        data = json.loads(s)
        game = cls(mode=data.get("mode", GameMode.PVAI),
                   difficulty=data.get("difficulty", Difficulty.HARD),
                   player_mark=data.get("player_mark", X))
        game.board = Board(data.get("board", [EMPTY] * 9))
        game.current_player = data.get("current_player", X)
        game.history = [(int(i), p) for i, p in data.get("history", [])]
        game.scores.update(data.get("scores", {}))
        game.result = check_result(game.board.cells)
        return game


# -------------------------
# Simple CLI demo / usage
# -------------------------
def human_vs_ai_cli(ai_mode: Union[Difficulty, str] = Difficulty.HARD) -> Optional[str]:
    print("Tic-Tac-Toe CLI — You are X (enter 1-9).")
    game = TicTacToeGame(mode=GameMode.PVAI, difficulty=ai_mode, player_mark=X)

    while not game.is_over():
        print(game.board)
        if game.current_player == game.player_mark:
            # Human
            try:
                raw = input("Your move (1-9) or 'u' to undo: ").strip().lower()
                if raw == "u":
                    undone = game.undo()
                    if undone:
                        print(f"Undid move {undone}")
                    else:
                        print("Nothing to undo.")
                    continue
                idx = int(raw) - 1
                if idx not in range(9):
                    print("Choose 1-9")
                    continue
                if not game.make_move(idx):
                    print("Invalid move (occupied or game over).")
            except ValueError:
                print("Invalid input.")
        else:
            # AI turn
            move = game.ai_move()
            print(f"AI ({game.ai_mark}) plays at {move+1}")

    # final board and result
    print(game.board)
    res = game.game_result()
    if res == "Tie":
        print("Result: Tie")
    else:
        print(f"Result: {res} wins")
    return res


if __name__ == "__main__":
    # Run an interactive demo: human (X) vs AI (O), difficulty from argv or config.
    from config import DEFAULT_DIFFICULTY
    from logging_setup import setup_logging

    setup_logging()
    mode = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DIFFICULTY
    print("Running CLI demo. Press Ctrl+C to quit.")
    try:
        human_vs_ai_cli(ai_mode=mode)
    except KeyboardInterrupt:
        print("\nExiting demo.")
