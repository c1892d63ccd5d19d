"""
Progress store: lookup/creation of per-(user, level) progress records and
the derived quiz-eligibility / status rules shared by tracker, quiz and gate.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.service import require_user
from app.core.clock import utcnow
from app.core.config import QUIZ_WORD_THRESHOLD
from app.core.errors import AlreadyUnlocked, InvalidInput, LevelNotOpen
from app.progress.models import UserProgress


# ---------------------------------------------------------------------------
# GET / CREATE
# ---------------------------------------------------------------------------

def find_progress(
    db: Session, user_id: int, level_number: int, for_update: bool = False
) -> Optional[UserProgress]:
    q = db.query(UserProgress).filter(
        UserProgress.user_id == user_id,
        UserProgress.level_number == level_number,
    )
    if for_update:
        q = q.populate_existing().with_for_update()
    return q.first()


def require_progress(
    db: Session, user_id: int, level_number: int, for_update: bool = False
) -> UserProgress:
    progress = find_progress(db, user_id, level_number, for_update)
    if progress is None:
        raise LevelNotOpen(f"Level {level_number} is not open")
    return progress


def list_progress(db: Session, user_id: int) -> list[UserProgress]:
    return (
        db.query(UserProgress)
        .filter(UserProgress.user_id == user_id)
        .order_by(UserProgress.level_number.asc())
        .all()
    )


def create_progress(db: Session, user_id: int, level_number: int) -> UserProgress:
    """Insert a fresh record. Raises AlreadyUnlocked if one exists."""
    require_user(db, user_id)
    if level_number < 1:
        raise InvalidInput(f"Invalid level number: {level_number}")

    progress = UserProgress(
        user_id=user_id,
        level_number=level_number,
        total_points=0,
        quiz_passed=None,
        quiz_score=None,
        attempts=0,
        unlocked_at=utcnow(),
    )
    db.add(progress)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyUnlocked(f"Level {level_number} is already unlocked")
    db.refresh(progress)
    print(f"[PROGRESS] opened user={user_id} level={level_number}", flush=True)
    return progress


def get_or_create_progress(db: Session, user_id: int, level_number: int) -> UserProgress:
    """Get existing progress record or create one with empty word sets."""
    require_user(db, user_id)
    progress = find_progress(db, user_id, level_number)
    if progress is not None:
        return progress
    try:
        return create_progress(db, user_id, level_number)
    except AlreadyUnlocked:
        # Lost a creation race; the other writer's record is the one we want
        return require_progress(db, user_id, level_number)


# ---------------------------------------------------------------------------
# DERIVED RULES
# ---------------------------------------------------------------------------

def word_threshold(total_words_in_level: int) -> int:
    """Completed words needed for the quiz; never more than QUIZ_WORD_THRESHOLD."""
    return min(total_words_in_level, QUIZ_WORD_THRESHOLD)


def all_words_completed(progress: UserProgress, total_words_in_level: int) -> bool:
    threshold = word_threshold(total_words_in_level)
    return threshold > 0 and progress.completed_count() >= threshold


def is_quiz_available(progress: Optional[UserProgress], total_words_in_level: int) -> bool:
    if progress is None:
        return False
    return all_words_completed(progress, total_words_in_level) and not progress.quiz_passed


def level_status(progress: Optional[UserProgress], total_words_in_level: int) -> str:
    if progress is None:
        return "locked"
    if progress.quiz_passed:
        return "completed"
    if is_quiz_available(progress, total_words_in_level):
        return "ready_for_quiz"
    if progress.completed_count() > 0:
        return "in_progress"
    return "unlocked"


def progress_percentage(progress: Optional[UserProgress], total_words_in_level: int) -> int:
    if progress is None:
        return 0
    threshold = word_threshold(total_words_in_level)
    if threshold <= 0:
        return 0
    return min(progress.completed_count() * 100 // threshold, 100)
