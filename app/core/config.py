"""
Configuration constants for the application.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# Highest level a user can unlock through the normal gate.
MAX_LEVEL = _env_int("MAX_LEVEL", 10)

# Questions drawn per quiz session (random subset when a level has more).
QUIZ_QUESTION_COUNT = _env_int("QUIZ_QUESTION_COUNT", 5)

# Completed words needed before a level's quiz opens, capped by level size.
QUIZ_WORD_THRESHOLD = _env_int("QUIZ_WORD_THRESHOLD", 10)

# When off, startQuiz only requires the level to be open.
ENFORCE_QUIZ_WORD_THRESHOLD = _env_flag("ENFORCE_QUIZ_WORD_THRESHOLD", True)

DEFAULT_WORD_POINTS = 10
DEFAULT_QUESTION_POINTS = 20
DEFAULT_REQUIRED_SCORE = 70
DEFAULT_TIME_LIMIT = 30

# Upper bound for leaderboard page size, whatever the caller asks for.
LEADERBOARD_MAX = 50

IMAGE_QUIZ_OPTION_COUNT = 3
