from datetime import timedelta

import pytest

from app.core.clock import utcnow
from app.core.errors import InvalidInput, UserNotFound
from app.rewards import engine as rewards


# ---------------------------------------------------------------------------
# GRANT RULES
# ---------------------------------------------------------------------------

def test_level_completion_grant():
    grant = rewards.level_completion_grant(3)
    assert (grant.xp, grant.coins) == (150, 60)
    assert grant.badge == "level_3_complete"


@pytest.mark.parametrize("score, bonus", [(100, 50), (90, 50), (85, 30), (80, 30), (75, 10), (70, 10), (65, 0)])
def test_quiz_bonus_xp(score, bonus):
    assert rewards.quiz_bonus_xp(score) == bonus


@pytest.mark.parametrize("score, badge", [
    (96, "quiz_master_lvl_2"),
    (90, "quiz_expert_lvl_2"),
    (80, "quiz_pro_lvl_2"),
    (70, "quiz_pass_lvl_2"),
])
def test_quiz_badge_tiers(score, badge):
    assert rewards.quiz_badge(score, 2) == badge


def test_quiz_success_grant():
    grant = rewards.quiz_success_grant(2, 92)
    assert grant.xp == 150
    assert grant.coins == 70


def test_daily_streak_grant_caps_coin_bonus():
    assert (rewards.daily_streak_grant(1).xp, rewards.daily_streak_grant(1).coins) == (22, 15)
    assert rewards.daily_streak_grant(20).coins == 60


# ---------------------------------------------------------------------------
# LEDGER
# ---------------------------------------------------------------------------

def test_ledger_requires_known_user(db):
    with pytest.raises(UserNotFound):
        rewards.get_or_create_ledger(db, 4242)


def test_badges_are_not_duplicated(db, user):
    first = rewards.award_level_completion(db, user.id, 1)
    second = rewards.award_level_completion(db, user.id, 1)

    assert first["newBadge"] is True
    assert second["newBadge"] is False
    assert [b["key"] for b in rewards.get_user_badges(db, user.id)] == ["level_1_complete"]
    # xp/coins are still additive
    assert second["totalXP"] == 100


def test_level_unlock_never_lowers_current_level(db, user):
    rewards.award_level_unlock(db, user.id, 4)
    summary = rewards.award_level_unlock(db, user.id, 2)

    assert summary["currentLevel"] == 4
    assert rewards.get_or_create_ledger(db, user.id).current_level == 4


def test_deduct_coins_refuses_overdraft(db, user):
    rewards.add_coins(db, user.id, 30)

    assert rewards.deduct_coins(db, user.id, 31) is False
    assert rewards.get_or_create_ledger(db, user.id).coins == 30

    assert rewards.deduct_coins(db, user.id, 30) is True
    assert rewards.get_or_create_ledger(db, user.id).coins == 0


def test_adjustments_reject_non_positive_amounts(db, user):
    with pytest.raises(InvalidInput):
        rewards.deduct_coins(db, user.id, 0)
    with pytest.raises(InvalidInput):
        rewards.add_xp(db, user.id, -5)


def test_add_xp(db, user):
    assert rewards.add_xp(db, user.id, 40) == 40
    assert rewards.add_xp(db, user.id, 2) == 42


# ---------------------------------------------------------------------------
# DAILY STREAK
# ---------------------------------------------------------------------------

def _set_last_login(db, user_id, when, streak):
    ledger = rewards.get_or_create_ledger(db, user_id)
    ledger.last_login = when
    ledger.streak_days = streak
    db.commit()


def test_first_login_starts_streak(db, user):
    result = rewards.update_daily_streak(db, user.id)

    assert result["streakUpdated"] is True
    assert result["streakDays"] == 1
    assert result["reward"]["coins"] == 15


def test_same_day_login_changes_nothing(db, user):
    rewards.update_daily_streak(db, user.id)
    coins = rewards.get_or_create_ledger(db, user.id).coins

    again = rewards.update_daily_streak(db, user.id)
    assert again["streakUpdated"] is False
    assert again["streakDays"] == 1
    assert rewards.get_or_create_ledger(db, user.id).coins == coins


def test_consecutive_day_extends_streak(db, user):
    _set_last_login(db, user.id, utcnow() - timedelta(days=1), streak=4)

    result = rewards.update_daily_streak(db, user.id)
    assert result["streakDays"] == 5
    assert rewards.get_or_create_ledger(db, user.id).streak_days == 5


def test_gap_resets_streak(db, user):
    _set_last_login(db, user.id, utcnow() - timedelta(days=3), streak=9)

    assert rewards.update_daily_streak(db, user.id)["streakDays"] == 1


def test_reset_streak(db, user):
    rewards.update_daily_streak(db, user.id)
    ledger = rewards.reset_streak(db, user.id)
    assert ledger.streak_days == 0


# ---------------------------------------------------------------------------
# READS
# ---------------------------------------------------------------------------

def test_leaderboard_orders_by_type(db, user, other_user):
    rewards.add_xp(db, user.id, 10)
    rewards.add_xp(db, other_user.id, 99)
    rewards.add_coins(db, user.id, 500)

    by_xp = rewards.get_leaderboard(db, "xp", 10)
    assert [r["username"] for r in by_xp] == ["bob", "alice"]
    assert by_xp[0]["rank"] == 1

    by_coins = rewards.get_leaderboard(db, "coins", 1)
    assert [r["username"] for r in by_coins] == ["alice"]


def test_leaderboard_rejects_unknown_type(db):
    with pytest.raises(InvalidInput):
        rewards.get_leaderboard(db, "karma")


def test_reward_summary(db, user):
    rewards.award_word_mastery(db, user.id, "apple")
    summary = rewards.get_reward_summary(db, user.id)

    assert summary["totalXP"] == 25
    assert summary["coins"] == 15
    assert summary["currentLevel"] == 1
    assert summary["badges"] == []
