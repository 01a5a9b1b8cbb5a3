# config.py
import os

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    if v is not None and str(v).strip() != "":
        return str(v).strip()
    return default


def _env_bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if not v:
        return default
    return v.lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except ValueError:
        return default


# ================== GAME ==================
# 'easy', 'medium' or 'hard'; validated when a game is created
DEFAULT_DIFFICULTY = _env("TTT_DEFAULT_DIFFICULTY", "hard").lower()
# 'pvp' or 'pvai'
DEFAULT_MODE = _env("TTT_DEFAULT_MODE", "pvai").lower()

# ================== LOGGING ==================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
LOG_FILE = _env("LOG_FILE", "") or None

# ================== SERVER ==================
FLASK_DEBUG = _env_bool("FLASK_DEBUG", False)
HOST = _env("HOST", "127.0.0.1")
PORT = _env_int("PORT", 5000)

# ================== GAME STORE ==================
# Oldest games are dropped beyond this many
MAX_GAMES = _env_int("TTT_MAX_GAMES", 1000)
# Games untouched for this long are dropped when a new one is created
GAME_IDLE_SECONDS = _env_int("TTT_GAME_IDLE_SECONDS", 3600)
