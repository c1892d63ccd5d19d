"""
Progress tracker: word completion / mastery and the read-only projections
(level view, stats, per-level status) built over a user's progress records.
"""
from datetime import timedelta

from sqlalchemy.orm import Session

from app.auth.service import require_user
from app.catalog import service as catalog
from app.core.clock import utcnow
from app.core.config import MAX_LEVEL
from app.core.errors import LevelNotFound, PrerequisiteNotMet, WordNotInLevel
from app.db.locks import progress_lock
from app.levels import gate
from app.progress import store
from app.progress.models import CompletedWord, MasteredWord, UserProgress
from app.progress.store import get_or_create_progress  # noqa: F401  (public entry point)
from app.rewards import engine as rewards


# ---------------------------------------------------------------------------
# WORD COMPLETION / MASTERY
# ---------------------------------------------------------------------------

def complete_word(db: Session, user_id: int, level_number: int, word_key: str) -> dict:
    """
    Mark a word as learned. Idempotent: a repeat earns nothing.
    Fires the level-completion reward once, when the quiz threshold is first reached.
    """
    require_user(db, user_id)
    word = catalog.find_word(db, level_number, word_key)
    if word is None:
        raise WordNotInLevel(f"Word '{word_key}' is not part of level {level_number}")

    total_words = catalog.count_words(db, level_number)

    with progress_lock(user_id, level_number):
        _, unlock_reward = gate.open_level(db, user_id, level_number)
        progress = store.require_progress(db, user_id, level_number, for_update=True)

        was_complete = store.all_words_completed(progress, total_words)
        newly_completed = word_key not in progress.completed_words
        if newly_completed:
            now = utcnow()
            progress.completed_words[word_key] = CompletedWord(word_key=word_key, completed_at=now)
            progress.total_points += word.point_value
            progress.last_attempt = now
        db.commit()
        db.refresh(progress)

        all_completed = store.all_words_completed(progress, total_words)
        reward = None
        if all_completed and not was_complete:
            reward = rewards.award_level_completion(db, user_id, level_number)

    print(f"[PROGRESS] complete user={user_id} level={level_number} word='{word_key}' "
          f"new={newly_completed} count={progress.completed_count()}/{store.word_threshold(total_words)}",
          flush=True)

    result = {
        "message": f"Congratulations! Word learned: {word_key}" if newly_completed else "Word already learned",
        "wordKey": word_key,
        "pointsEarned": word.point_value if newly_completed else 0,
        "totalPoints": progress.total_points,
        "totalCompleted": progress.completed_count(),
        "allWordsCompleted": all_completed,
        "quizAvailable": all_completed and not progress.quiz_passed,
    }
    if reward:
        result["reward"] = reward
    if unlock_reward:
        result["levelUnlockReward"] = unlock_reward
    return result


def master_word(db: Session, user_id: int, level_number: int, word_key: str) -> dict:
    require_user(db, user_id)
    with progress_lock(user_id, level_number):
        progress = store.require_progress(db, user_id, level_number, for_update=True)

        if word_key not in progress.completed_words:
            raise PrerequisiteNotMet("You must learn the word before mastering it")

        if word_key in progress.mastered_words:
            db.rollback()
            return {
                "message": "Word already mastered",
                "wordKey": word_key,
                "masteredWords": progress.mastered_count(),
            }

        now = utcnow()
        progress.mastered_words[word_key] = MasteredWord(word_key=word_key, mastered_at=now)
        progress.last_attempt = now
        db.commit()
        db.refresh(progress)

        reward = rewards.award_word_mastery(db, user_id, word_key)

    print(f"[PROGRESS] master user={user_id} level={level_number} word='{word_key}' "
          f"mastered={progress.mastered_count()}", flush=True)
    return {
        "message": f"Excellent! Word mastered: {word_key}",
        "wordKey": word_key,
        "masteredWords": progress.mastered_count(),
        "reward": reward,
    }


def reset_level_progress(db: Session, user_id: int, level_number: int) -> dict:
    """Clear words, points and quiz state; the level stays unlocked."""
    with progress_lock(user_id, level_number):
        progress = store.require_progress(db, user_id, level_number, for_update=True)
        progress.mastered_words.clear()
        progress.completed_words.clear()
        progress.total_points = 0
        progress.quiz_passed = None
        progress.quiz_score = None
        progress.attempts = 0
        progress.best_score = None
        progress.last_attempt = None
        progress.completed_at = None
        db.commit()

    print(f"[PROGRESS] reset user={user_id} level={level_number}", flush=True)
    return {
        "message": f"Level {level_number} progress reset",
        "levelNumber": level_number,
    }


# ---------------------------------------------------------------------------
# LEVEL VIEWS
# ---------------------------------------------------------------------------

def _word_entry(word, t) -> dict:
    data = {
        "id": word.id,
        "wordKey": word.word_key,
        "category": word.category,
        "points": word.point_value,
        "displayOrder": word.display_order or 0,
    }
    if t is not None:
        data.update({"text": t.text, "gifUrl": t.gif_url, "audioUrl": t.audio_url})
    return data


def get_level_with_progress(db: Session, user_id: int, level_number: int, language: str) -> dict:
    """Level words with translations and learned/mastered flags. Never creates a record."""
    require_user(db, user_id)
    words = catalog.words_for_level(db, level_number)
    if not words:
        raise LevelNotFound(f"Level not found: {level_number}")

    progress = store.find_progress(db, user_id, level_number)
    translations = catalog.translations_for_words(db, [w.word_key for w in words], language)
    completed = progress.completed_words if progress else {}
    mastered = progress.mastered_words if progress else {}

    word_list = []
    for word in words:
        entry = _word_entry(word, translations.get(word.word_key))
        entry["learned"] = word.word_key in completed
        entry["mastered"] = word.word_key in mastered
        word_list.append(entry)

    total = len(words)
    learned = sum(1 for w in word_list if w["learned"])
    result = {
        "levelNumber": level_number,
        "unlocked": progress is not None,
        "status": store.level_status(progress, total),
        "totalWords": total,
        "learnedWords": learned,
        "masteredWords": sum(1 for w in word_list if w["mastered"]),
        "progressPercentage": learned * 100 // total,
        "totalPoints": progress.total_points if progress else 0,
        "quizAvailable": store.is_quiz_available(progress, total),
        "quizPassed": bool(progress and progress.quiz_passed),
        "quizScore": progress.quiz_score if progress else None,
        "words": word_list,
    }
    if progress is not None and progress.quiz_passed:
        can_unlock = gate.can_unlock_next_level(db, user_id, level_number)
        result["nextLevelUnlockable"] = can_unlock
        if can_unlock:
            result["nextLevelNumber"] = level_number + 1
    return result


def get_remaining_words(db: Session, user_id: int, level_number: int, language: str) -> dict:
    require_user(db, user_id)
    words = catalog.words_for_level(db, level_number)
    if not words:
        raise LevelNotFound(f"Level not found: {level_number}")

    progress = store.find_progress(db, user_id, level_number)
    translations = catalog.translations_for_words(db, [w.word_key for w in words], language)
    completed = progress.completed_words if progress else {}
    mastered = progress.mastered_words if progress else {}

    done, remaining = [], []
    for word in words:
        entry = _word_entry(word, translations.get(word.word_key))
        if word.word_key in completed:
            entry["mastered"] = word.word_key in mastered
            done.append(entry)
        else:
            remaining.append(entry)

    return {
        "levelNumber": level_number,
        "totalWords": len(words),
        "completedCount": len(done),
        "remainingCount": len(remaining),
        "completedWords": done,
        "remainingWords": remaining,
        "progressPercentage": len(done) * 100 // len(words),
    }


def get_level_status(db: Session, user_id: int, level_number: int) -> dict:
    progress = store.find_progress(db, user_id, level_number)
    total = catalog.count_words(db, level_number)
    return {
        "levelNumber": level_number,
        "userId": user_id,
        "unlocked": progress is not None,
        "status": store.level_status(progress, total),
        "unlockedAt": progress.unlocked_at if progress else None,
        "completedWords": progress.completed_count() if progress else 0,
        "masteredWords": progress.mastered_count() if progress else 0,
        "quizPassed": bool(progress and progress.quiz_passed),
        "quizScore": progress.quiz_score if progress else None,
        "totalPoints": progress.total_points if progress else 0,
        "isQuizAvailable": store.is_quiz_available(progress, total),
    }


def get_level_progress(db: Session, user_id: int, level_number: int) -> dict:
    progress = store.require_progress(db, user_id, level_number)
    total = catalog.count_words(db, level_number)
    return {
        "levelNumber": level_number,
        "completedWords": progress.completed_keys(),
        "masteredWords": progress.mastered_keys(),
        "totalPoints": progress.total_points,
        "quizPassed": progress.quiz_passed,
        "quizScore": progress.quiz_score,
        "attempts": progress.attempts,
        "bestScore": progress.best_score,
        "unlockedAt": progress.unlocked_at,
        "completedAt": progress.completed_at,
        "lastAttempt": progress.last_attempt,
        "status": store.level_status(progress, total),
        "progressPercentage": store.progress_percentage(progress, total),
    }


# ---------------------------------------------------------------------------
# AGGREGATE helpers (for dashboard / profile)
# ---------------------------------------------------------------------------

def _average_score(records: list[UserProgress]) -> float:
    scores = [p.quiz_score for p in records if p.quiz_score is not None]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 2)


def get_user_stats(db: Session, user_id: int) -> dict:
    require_user(db, user_id)
    records = store.list_progress(db, user_id)
    return {
        "userId": user_id,
        "totalWordsLearned": sum(p.completed_count() for p in records),
        "totalWordsMastered": sum(p.mastered_count() for p in records),
        "totalPoints": sum(p.total_points or 0 for p in records),
        "levelsCompleted": sum(1 for p in records if p.quiz_passed),
        "averageQuizScore": _average_score(records),
        "totalLevelsUnlocked": len(records),
    }


def _level_info(level_number: int, progress, total_words: int) -> dict:
    return {
        "levelNumber": level_number,
        "status": store.level_status(progress, total_words),
        "completedWords": progress.completed_count() if progress else 0,
        "masteredWords": progress.mastered_count() if progress else 0,
        "totalPoints": progress.total_points if progress else 0,
        "quizPassed": bool(progress and progress.quiz_passed),
        "quizScore": progress.quiz_score if progress else None,
        "unlockedAt": progress.unlocked_at if progress else None,
        "completedAt": progress.completed_at if progress else None,
        "lastAttempt": progress.last_attempt if progress else None,
        "progressPercentage": store.progress_percentage(progress, total_words),
    }


def get_user_levels(db: Session, user_id: int) -> list[dict]:
    """Every level 1..MAX_LEVEL (plus any opened beyond it) with its derived status."""
    require_user(db, user_id)
    by_level = {p.level_number: p for p in store.list_progress(db, user_id)}
    counts = catalog.word_counts_by_level(db)
    levels = sorted(set(range(1, MAX_LEVEL + 1)) | set(by_level))
    return [_level_info(n, by_level.get(n), counts.get(n, 0)) for n in levels]


def get_weekly_stats(db: Session, user_id: int) -> dict:
    require_user(db, user_id)
    now = utcnow()
    week_ago = now - timedelta(days=7)
    records = store.list_progress(db, user_id)

    learned_at = [
        w.completed_at
        for p in records
        for w in p.completed_words.values()
        if w.completed_at and w.completed_at >= week_ago
    ]
    recent = [p for p in records if p.last_attempt and p.last_attempt >= week_ago]

    daily_activity = {}
    for i in range(6, -1, -1):
        day = (now - timedelta(days=i)).date()
        daily_activity[day.isoformat()] = sum(1 for ts in learned_at if ts.date() == day)

    return {
        "wordsLearnedThisWeek": len(learned_at),
        "quizzesTakenThisWeek": sum(1 for p in recent if p.quiz_passed is not None),
        "pointsEarnedThisWeek": sum(p.total_points or 0 for p in recent),
        "dailyActivity": daily_activity,
        "averageDailyWords": len(learned_at) // 7,
    }
