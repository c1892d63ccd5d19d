import pytest

from app.catalog import service as catalog
from app.core.errors import (
    AlreadyUnlocked,
    InvalidInput,
    LevelLocked,
    MaxLevelReached,
    NoCompletedLevel,
)
from app.core.config import MAX_LEVEL
from app.levels import gate
from app.progress import store
from app.quiz import engine as quiz
from app.rewards import engine as rewards


def _pass_level(db, user_id, level_number):
    """Open the level directly and pass its quiz (or just flag it when it has none)."""
    if store.find_progress(db, user_id, level_number) is None:
        gate.unlock_specific_level(db, user_id, level_number)
    questions = catalog.questions_for_level(db, level_number)
    if questions:
        quiz.submit_quiz(db, user_id, level_number, {str(q.id): q.correct_answer for q in questions})
    else:
        progress = store.require_progress(db, user_id, level_number)
        progress.quiz_passed = True
        db.commit()


def test_unlock_next_without_passed_level(db, user):
    gate.open_level(db, user.id, 1)
    with pytest.raises(NoCompletedLevel):
        gate.unlock_next_level(db, user.id)


def test_unlock_next_creates_record_and_rewards(db, user):
    _pass_level(db, user.id, 1)
    before = rewards.get_or_create_ledger(db, user.id)
    xp_before, coins_before = before.total_xp, before.coins

    result = gate.unlock_next_level(db, user.id)

    assert result["unlockedLevel"] == 2
    assert result["reward"]["type"] == "level_unlock"
    assert result["reward"]["xp"] == 50
    assert result["reward"]["coins"] == 50
    assert result["reward"]["currentLevel"] == 2

    ledger = rewards.get_or_create_ledger(db, user.id)
    assert ledger.total_xp == xp_before + 50
    assert ledger.coins == coins_before + 50
    assert store.find_progress(db, user.id, 2) is not None


def test_unlock_next_twice_fails(db, user):
    _pass_level(db, user.id, 1)
    gate.unlock_next_level(db, user.id)

    with pytest.raises(AlreadyUnlocked):
        gate.unlock_next_level(db, user.id)


def test_unlock_next_past_max_level(db, user):
    _pass_level(db, user.id, MAX_LEVEL)

    with pytest.raises(MaxLevelReached):
        gate.unlock_next_level(db, user.id)


def test_open_level_one_always_allowed(db, user):
    progress, reward = gate.open_level(db, user.id, 1)
    assert progress.level_number == 1
    assert reward is None


def test_open_level_requires_previous_quiz(db, user):
    gate.open_level(db, user.id, 1)
    with pytest.raises(LevelLocked):
        gate.open_level(db, user.id, 2)

    _pass_level(db, user.id, 1)
    progress, reward = gate.open_level(db, user.id, 2)
    assert progress.level_number == 2
    assert reward["badge"] == "level_2_unlocked"

    # Already open: no second reward
    _, again = gate.open_level(db, user.id, 2)
    assert again is None


def test_open_level_rejects_bad_numbers(db, user):
    with pytest.raises(InvalidInput):
        gate.open_level(db, user.id, 0)
    with pytest.raises(MaxLevelReached):
        gate.open_level(db, user.id, MAX_LEVEL + 1)


def test_failed_quiz_keeps_next_level_locked(db, user):
    gate.unlock_specific_level(db, user.id, 3)
    questions = catalog.questions_for_level(db, 3)
    quiz.submit_quiz(db, user.id, 3, {str(q.id): "wrong" for q in questions})

    assert gate.is_prerequisite_met(db, user.id, 4) is False
    with pytest.raises(LevelLocked):
        gate.open_level(db, user.id, 4)


def test_admin_bypass_skips_prerequisite_without_reward(db, user):
    result = gate.unlock_specific_level(db, user.id, 5)

    assert result["levelNumber"] == 5
    assert store.find_progress(db, user.id, 5) is not None
    assert store.find_progress(db, user.id, 4) is None
    assert rewards.get_or_create_ledger(db, user.id).total_xp == 0

    with pytest.raises(AlreadyUnlocked):
        gate.unlock_specific_level(db, user.id, 5)


def test_highest_passed_level(db, user):
    assert gate.highest_passed_level(db, user.id) is None
    _pass_level(db, user.id, 1)
    _pass_level(db, user.id, 3)
    assert gate.highest_passed_level(db, user.id) == 3
