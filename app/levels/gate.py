"""
Level gate.
Core rules:
  - Level 1 is always playable
  - Level N+1 opens only after level N's quiz is passed
  - unlock_next_level unlocks highest passed level + 1, up to MAX_LEVEL
  - unlock_specific_level is the administrative bypass (no prerequisite check)
"""
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import MAX_LEVEL
from app.core.errors import (
    AlreadyUnlocked,
    InvalidInput,
    LevelLocked,
    MaxLevelReached,
    NoCompletedLevel,
)
from app.auth.service import require_user
from app.db.locks import progress_lock
from app.progress import store
from app.progress.models import UserProgress
from app.rewards import engine as rewards


def _check_level_number(level_number: int):
    if level_number < 1:
        raise InvalidInput(f"Invalid level number: {level_number}")
    if level_number > MAX_LEVEL:
        raise MaxLevelReached(f"Level {level_number} exceeds the maximum level ({MAX_LEVEL})")


def is_prerequisite_met(db: Session, user_id: int, level_number: int) -> bool:
    if level_number == 1:
        return True
    previous = store.find_progress(db, user_id, level_number - 1)
    return bool(previous and previous.quiz_passed)


def highest_passed_level(db: Session, user_id: int) -> Optional[int]:
    passed = [p.level_number for p in store.list_progress(db, user_id) if p.quiz_passed]
    return max(passed) if passed else None


def can_unlock_next_level(db: Session, user_id: int, current_level: int) -> bool:
    if current_level >= MAX_LEVEL:
        return False
    return store.find_progress(db, user_id, current_level + 1) is None


def open_level(db: Session, user_id: int, level_number: int) -> tuple[UserProgress, Optional[dict]]:
    """
    Return the user's record for a level they are allowed to play, creating
    it on first interaction. Returns (progress, unlock_reward) where the
    reward is set only when a level above 1 was opened by this call.
    """
    require_user(db, user_id)
    existing = store.find_progress(db, user_id, level_number)
    if existing is not None:
        return existing, None

    _check_level_number(level_number)
    if level_number == 1:
        return store.get_or_create_progress(db, user_id, 1), None

    if not is_prerequisite_met(db, user_id, level_number):
        raise LevelLocked(f"Pass the level {level_number - 1} quiz to open level {level_number}")

    with progress_lock(user_id, level_number):
        try:
            progress = store.create_progress(db, user_id, level_number)
        except AlreadyUnlocked:
            return store.require_progress(db, user_id, level_number), None
        reward = rewards.award_level_unlock(db, user_id, level_number)
    return progress, reward


def unlock_next_level(db: Session, user_id: int) -> dict:
    require_user(db, user_id)
    current = highest_passed_level(db, user_id)
    if current is None:
        raise NoCompletedLevel("No completed level found")

    next_level = current + 1

    with progress_lock(user_id, next_level):
        if store.find_progress(db, user_id, next_level) is not None:
            raise AlreadyUnlocked("The next level is already unlocked")
        if next_level > MAX_LEVEL:
            raise MaxLevelReached("You have reached the maximum level")

        store.create_progress(db, user_id, next_level)
        reward = rewards.award_level_unlock(db, user_id, next_level)

    print(f"[UNLOCK] user={user_id} {current} -> {next_level}", flush=True)
    return {
        "message": f"Congratulations! Level {next_level} unlocked",
        "unlockedLevel": next_level,
        "reward": reward,
    }


def unlock_specific_level(db: Session, user_id: int, level_number: int) -> dict:
    """
    ADMIN ESCAPE HATCH: open any level directly, skipping the sequential
    prerequisite and granting no reward. Normal play goes through
    open_level / unlock_next_level.
    """
    require_user(db, user_id)
    _check_level_number(level_number)

    with progress_lock(user_id, level_number):
        if store.find_progress(db, user_id, level_number) is not None:
            raise AlreadyUnlocked(f"Level {level_number} is already unlocked")
        progress = store.create_progress(db, user_id, level_number)

    print(f"[UNLOCK] admin bypass user={user_id} level={level_number}", flush=True)
    return {
        "message": f"Level {level_number} unlocked",
        "levelNumber": level_number,
        "unlockedAt": progress.unlocked_at,
    }
