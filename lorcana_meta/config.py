import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    # Corpus location
    TOURNAMENT_META_PATH = os.getenv("TOURNAMENT_META_PATH")
    DATA_DIR = Path(os.getenv("LORCANA_DATA_DIR", PROJECT_ROOT / "data"))
    DB_DIR = PROJECT_ROOT / "db"
    META_FILENAME = "tournamentMeta.json"

    # Comparator defaults
    DEFAULT_TOP = _int_env("META_DEFAULT_TOP", 32)
    DEFAULT_TOP_K = _int_env("META_DEFAULT_TOP_K", 10)
    DEFAULT_MIN_SIM = _float_env("META_DEFAULT_MIN_SIM", 0.08)
    DEFAULT_FORMAT = "Core"

    # Adds/cuts pool
    POOL_MIN_SIM = _float_env("META_POOL_MIN_SIM", 0.20)
    POOL_MAX_SIZE = _int_env("META_POOL_MAX_SIZE", 30)

    # Meta state report
    MIN_META_DECKS = _int_env("META_MIN_DECKS", 10)

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Web Interface
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = _int_env("PORT", 5000)
    DEBUG = os.getenv("FLASK_DEBUG", "0") in ("1", "true", "True")

    @classmethod
    def meta_path_candidates(cls, explicit=None) -> list[Path]:
        """Ordered corpus file locations; the first one that exists wins."""
        candidates = [
            explicit,
            os.getenv("TOURNAMENT_META_PATH") or cls.TOURNAMENT_META_PATH,
            cls.DB_DIR / cls.META_FILENAME,
            cls.DATA_DIR / cls.META_FILENAME,
            Path.cwd() / "db" / cls.META_FILENAME,
            Path.cwd() / cls.META_FILENAME,
        ]
        return [Path(c).expanduser() for c in candidates if c]
