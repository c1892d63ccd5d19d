import pytest

from app.core.errors import (
    LevelLocked,
    LevelNotFound,
    LevelNotOpen,
    PrerequisiteNotMet,
    UserNotFound,
    WordNotInLevel,
)
from app.progress import store, tracker
from app.rewards import engine as rewards

from conftest import LEVEL_1_WORDS, learn_words


def test_get_or_create_progress_creates_empty_record(db, user):
    progress = tracker.get_or_create_progress(db, user.id, 1)

    assert progress.level_number == 1
    assert progress.total_points == 0
    assert progress.completed_count() == 0
    assert progress.quiz_passed is None
    assert progress.quiz_score is None
    assert progress.unlocked_at is not None

    again = tracker.get_or_create_progress(db, user.id, 1)
    assert again.id == progress.id


def test_get_or_create_progress_unknown_user(db):
    with pytest.raises(UserNotFound):
        tracker.get_or_create_progress(db, 999, 1)


def test_complete_word_awards_points_once(db, user):
    first = tracker.complete_word(db, user.id, 1, "apple")
    assert first["pointsEarned"] == 10
    assert first["totalPoints"] == 10
    assert first["totalCompleted"] == 1
    assert first["allWordsCompleted"] is False

    second = tracker.complete_word(db, user.id, 1, "apple")
    assert second["pointsEarned"] == 0
    assert second["totalPoints"] == 10
    assert second["totalCompleted"] == 1


def test_complete_word_rejects_word_from_other_level(db, user):
    with pytest.raises(WordNotInLevel):
        tracker.complete_word(db, user.id, 1, "house")


def test_complete_word_in_locked_level(db, user):
    with pytest.raises(LevelLocked):
        tracker.complete_word(db, user.id, 2, "house")
    assert store.find_progress(db, user.id, 2) is None


def test_quiz_threshold_caps_at_ten_words(db, user):
    result = learn_words(db, user.id, 1, LEVEL_1_WORDS[:9])
    assert result["allWordsCompleted"] is False
    assert result["quizAvailable"] is False

    result = tracker.complete_word(db, user.id, 1, LEVEL_1_WORDS[9])
    assert result["allWordsCompleted"] is True
    assert result["quizAvailable"] is True
    assert result["totalPoints"] == 100
    assert result["reward"]["type"] == "level_completion"
    assert result["reward"]["xp"] == 50
    assert result["reward"]["coins"] == 20


def test_level_completion_reward_fires_once(db, user):
    learn_words(db, user.id, 1, LEVEL_1_WORDS[:10])
    ledger = rewards.get_or_create_ledger(db, user.id)
    assert (ledger.total_xp, ledger.coins) == (50, 20)

    # Words past the threshold, and repeats, don't re-trigger it
    eleventh = tracker.complete_word(db, user.id, 1, LEVEL_1_WORDS[10])
    repeat = tracker.complete_word(db, user.id, 1, LEVEL_1_WORDS[0])
    assert "reward" not in eleventh
    assert "reward" not in repeat

    db.expire_all()
    ledger = rewards.get_or_create_ledger(db, user.id)
    assert (ledger.total_xp, ledger.coins) == (50, 20)


def test_small_level_threshold_is_its_size(db, user):
    # Level 3 only has three words; open it with the admin bypass
    from app.levels import gate
    gate.unlock_specific_level(db, user.id, 3)

    result = learn_words(db, user.id, 3, ["train", "airport", "ticket"])
    assert result["allWordsCompleted"] is True


def test_master_word_requires_completion(db, user):
    tracker.complete_word(db, user.id, 1, "apple")

    with pytest.raises(PrerequisiteNotMet):
        tracker.master_word(db, user.id, 1, "bread")


def test_master_word_without_record(db, user):
    with pytest.raises(LevelNotOpen):
        tracker.master_word(db, user.id, 1, "apple")


def test_master_word_rewards_first_mastery_only(db, user):
    tracker.complete_word(db, user.id, 1, "apple")

    first = tracker.master_word(db, user.id, 1, "apple")
    assert first["masteredWords"] == 1
    assert first["reward"]["xp"] == 25
    assert first["reward"]["coins"] == 15

    second = tracker.master_word(db, user.id, 1, "apple")
    assert second["masteredWords"] == 1
    assert "reward" not in second

    ledger = rewards.get_or_create_ledger(db, user.id)
    assert (ledger.total_xp, ledger.coins) == (25, 15)


def test_mastered_words_stay_subset_of_completed(db, user):
    learn_words(db, user.id, 1, ["apple", "bread", "water"])
    tracker.master_word(db, user.id, 1, "bread")
    with pytest.raises(PrerequisiteNotMet):
        tracker.master_word(db, user.id, 1, "milk")

    progress = store.require_progress(db, user.id, 1)
    assert set(progress.mastered_words) <= set(progress.completed_words)


def test_level_status_progression(db, user):
    assert tracker.get_level_status(db, user.id, 1)["status"] == "locked"

    tracker.get_or_create_progress(db, user.id, 1)
    assert tracker.get_level_status(db, user.id, 1)["status"] == "unlocked"

    tracker.complete_word(db, user.id, 1, "apple")
    assert tracker.get_level_status(db, user.id, 1)["status"] == "in_progress"

    learn_words(db, user.id, 1, LEVEL_1_WORDS[1:10])
    status = tracker.get_level_status(db, user.id, 1)
    assert status["status"] == "ready_for_quiz"
    assert status["isQuizAvailable"] is True


def test_level_with_progress_is_read_only(db, user):
    view = tracker.get_level_with_progress(db, user.id, 1, "fr")

    assert view["unlocked"] is False
    assert view["status"] == "locked"
    assert view["totalWords"] == 12
    assert view["words"][0]["wordKey"] == "apple"
    assert view["words"][0]["text"] == "pomme"
    assert store.find_progress(db, user.id, 1) is None


def test_level_with_progress_flags(db, user):
    learn_words(db, user.id, 1, ["apple", "bread"])
    tracker.master_word(db, user.id, 1, "apple")

    view = tracker.get_level_with_progress(db, user.id, 1, "ar")
    by_key = {w["wordKey"]: w for w in view["words"]}

    assert by_key["apple"]["learned"] and by_key["apple"]["mastered"]
    assert by_key["bread"]["learned"] and not by_key["bread"]["mastered"]
    assert not by_key["milk"]["learned"]
    assert view["learnedWords"] == 2
    assert view["masteredWords"] == 1


def test_level_with_progress_unknown_level(db, user):
    with pytest.raises(LevelNotFound):
        tracker.get_level_with_progress(db, user.id, 9, "en")


def test_remaining_words_partition(db, user):
    learn_words(db, user.id, 1, ["apple", "cat"])

    data = tracker.get_remaining_words(db, user.id, 1, "en")
    assert data["completedCount"] == 2
    assert data["remainingCount"] == 10
    assert {w["wordKey"] for w in data["completedWords"]} == {"apple", "cat"}
    assert "apple" not in {w["wordKey"] for w in data["remainingWords"]}


def test_user_stats_and_levels(db, user):
    learn_words(db, user.id, 1, ["apple", "bread", "water"])
    tracker.master_word(db, user.id, 1, "water")

    stats = tracker.get_user_stats(db, user.id)
    assert stats["totalWordsLearned"] == 3
    assert stats["totalWordsMastered"] == 1
    assert stats["totalPoints"] == 30
    assert stats["levelsCompleted"] == 0
    assert stats["averageQuizScore"] == 0.0
    assert stats["totalLevelsUnlocked"] == 1

    levels = tracker.get_user_levels(db, user.id)
    assert [lvl["levelNumber"] for lvl in levels] == list(range(1, 11))
    assert levels[0]["status"] == "in_progress"
    assert levels[0]["progressPercentage"] == 30
    assert all(lvl["status"] == "locked" for lvl in levels[1:])


def test_level_progress_requires_record(db, user):
    with pytest.raises(LevelNotOpen):
        tracker.get_level_progress(db, user.id, 1)

    learn_words(db, user.id, 1, ["sun", "apple"])
    data = tracker.get_level_progress(db, user.id, 1)
    assert data["completedWords"] == ["sun", "apple"]
    assert data["attempts"] == 0


def test_reset_level_progress_keeps_level_open(db, user):
    learn_words(db, user.id, 1, ["apple", "bread"])
    tracker.master_word(db, user.id, 1, "apple")

    tracker.reset_level_progress(db, user.id, 1)

    progress = store.require_progress(db, user.id, 1)
    assert progress.completed_count() == 0
    assert progress.mastered_count() == 0
    assert progress.total_points == 0
    assert progress.quiz_passed is None
    assert progress.unlocked_at is not None


def test_weekly_stats_counts_recent_words(db, user):
    learn_words(db, user.id, 1, ["apple", "bread", "water"])

    stats = tracker.get_weekly_stats(db, user.id)
    assert stats["wordsLearnedThisWeek"] == 3
    assert stats["pointsEarnedThisWeek"] == 30
    assert len(stats["dailyActivity"]) == 7
    assert sum(stats["dailyActivity"].values()) == 3
