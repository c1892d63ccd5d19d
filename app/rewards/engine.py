"""
Reward engine.

Each grant rule is a pure function of the event (level, score, streak...)
returning a RewardGrant. `_apply` then writes the grant to the user's
ledger under the ledger lock and persists any badge at most once
(UNIQUE user_id+key).
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.models import User
from app.auth.service import require_user
from app.core.clock import utcnow
from app.core.config import LEADERBOARD_MAX
from app.core.errors import InvalidInput
from app.db.locks import ledger_lock
from app.rewards.models import RewardLedger, UserBadge


@dataclass(frozen=True)
class RewardGrant:
    type: str
    xp: int
    coins: int
    message: str
    badge: Optional[str] = None
    extra: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# GRANT RULES (pure)
# ---------------------------------------------------------------------------

def level_completion_grant(level_number: int) -> RewardGrant:
    return RewardGrant(
        type="level_completion",
        xp=level_number * 50,
        coins=level_number * 20,
        badge=f"level_{level_number}_complete",
        message=f"Congratulations! Level {level_number} words completed",
        extra={"levelNumber": level_number},
    )


def quiz_bonus_xp(score: int) -> int:
    if score >= 90:
        return 50
    if score >= 80:
        return 30
    if score >= 70:
        return 10
    return 0


def quiz_badge(score: int, level_number: int) -> str:
    if score >= 95:
        tier = "quiz_master"
    elif score >= 85:
        tier = "quiz_expert"
    elif score >= 75:
        tier = "quiz_pro"
    else:
        tier = "quiz_pass"
    return f"{tier}_lvl_{level_number}"


def _quiz_success_message(score: int) -> str:
    if score >= 95:
        return f"Legendary score! {score}%"
    if score >= 85:
        return f"Amazing performance! {score}%"
    if score >= 75:
        return f"Good job! {score}%"
    return f"Quiz passed! {score}%"


def quiz_success_grant(level_number: int, score: int) -> RewardGrant:
    bonus = quiz_bonus_xp(score)
    return RewardGrant(
        type="quiz_success",
        xp=100 + bonus,
        coins=50 + level_number * 10,
        badge=quiz_badge(score, level_number),
        message=_quiz_success_message(score),
        extra={"levelNumber": level_number, "score": score, "bonusXP": bonus},
    )


def level_unlock_grant(level_number: int) -> RewardGrant:
    return RewardGrant(
        type="level_unlock",
        xp=50,
        coins=level_number * 25,
        badge=f"level_{level_number}_unlocked",
        message=f"Congratulations! Level {level_number} unlocked",
        extra={"levelNumber": level_number},
    )


def word_mastery_grant(word_key: str) -> RewardGrant:
    return RewardGrant(
        type="word_mastery",
        xp=25,
        coins=15,
        message=f"Excellent! Word mastered: {word_key}",
        extra={"wordKey": word_key},
    )


def daily_streak_grant(streak_days: int) -> RewardGrant:
    bonus = min(streak_days * 5, 50)
    return RewardGrant(
        type="daily_streak",
        xp=20 + streak_days * 2,
        coins=10 + bonus,
        message=f"Day {streak_days} in a row! Keep it up!",
        extra={"streakDays": streak_days, "streakBonus": bonus},
    )


# ---------------------------------------------------------------------------
# LEDGER ACCESS
# ---------------------------------------------------------------------------

def _find_ledger(db: Session, user_id: int, for_update: bool = False) -> Optional[RewardLedger]:
    q = db.query(RewardLedger).filter(RewardLedger.user_id == user_id)
    if for_update:
        q = q.populate_existing().with_for_update()
    return q.first()


def get_or_create_ledger(db: Session, user_id: int, for_update: bool = False) -> RewardLedger:
    """Get the user's ledger, creating an empty one on first use."""
    require_user(db, user_id)
    ledger = _find_ledger(db, user_id, for_update)
    if ledger is not None:
        return ledger

    ledger = RewardLedger(user_id=user_id, total_xp=0, coins=0, current_level=1, streak_days=0)
    db.add(ledger)
    try:
        db.commit()
    except IntegrityError:
        # Another worker created it first
        db.rollback()
        return _find_ledger(db, user_id, for_update)
    db.refresh(ledger)
    print(f"[REWARD] ledger created user={user_id}", flush=True)
    return ledger


def _award_badge(db: Session, user_id: int, key: str) -> bool:
    """Stage a badge. Returns True if newly awarded, False if already had."""
    existing = db.query(UserBadge).filter_by(user_id=user_id, key=key).first()
    if existing:
        return False
    db.add(UserBadge(user_id=user_id, key=key))
    print(f"[BADGE] user={user_id} earned '{key}'", flush=True)
    return True


def _apply(
    db: Session,
    user_id: int,
    grant: RewardGrant,
    mutate: Optional[Callable[[RewardLedger], None]] = None,
) -> dict:
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        ledger.total_xp += grant.xp
        ledger.coins += grant.coins
        if mutate is not None:
            mutate(ledger)
        new_badge = _award_badge(db, user_id, grant.badge) if grant.badge else False
        db.commit()
        db.refresh(ledger)

    print(f"[REWARD] user={user_id} type={grant.type} xp=+{grant.xp} coins=+{grant.coins} "
          f"total_xp={ledger.total_xp} coins={ledger.coins}", flush=True)

    summary = {
        "type": grant.type,
        "xp": grant.xp,
        "coins": grant.coins,
        "message": grant.message,
        "totalXP": ledger.total_xp,
        "totalCoins": ledger.coins,
        **grant.extra,
    }
    if grant.badge:
        summary["badge"] = grant.badge
        summary["newBadge"] = new_badge
    return summary


# ---------------------------------------------------------------------------
# AWARDS
# ---------------------------------------------------------------------------

def award_level_completion(db: Session, user_id: int, level_number: int) -> dict:
    return _apply(db, user_id, level_completion_grant(level_number))


def award_quiz_success(db: Session, user_id: int, level_number: int, score: int) -> dict:
    return _apply(db, user_id, quiz_success_grant(level_number, score))


def award_level_unlock(db: Session, user_id: int, level_number: int) -> dict:
    def raise_level(ledger: RewardLedger):
        if level_number > (ledger.current_level or 1):
            ledger.current_level = level_number

    summary = _apply(db, user_id, level_unlock_grant(level_number), raise_level)
    summary["currentLevel"] = get_or_create_ledger(db, user_id).current_level
    return summary


def award_word_mastery(db: Session, user_id: int, word_key: str) -> dict:
    return _apply(db, user_id, word_mastery_grant(word_key))


def award_daily_streak(db: Session, user_id: int, streak_days: int) -> dict:
    def stamp(ledger: RewardLedger):
        now = utcnow()
        ledger.streak_days = streak_days
        ledger.last_login = now
        ledger.last_daily_reward = now

    return _apply(db, user_id, daily_streak_grant(streak_days), stamp)


def update_daily_streak(db: Session, user_id: int) -> dict:
    """
    Count a login towards the daily streak.

    First login or a gap of more than a day starts at 1, a login the day
    after the previous one extends the streak, a second login on the same
    day changes nothing and earns nothing.
    """
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        today = utcnow().date()
        last = ledger.last_login.date() if ledger.last_login else None

        if last == today:
            db.rollback()
            return {"streakUpdated": False, "streakDays": ledger.streak_days, "reward": {}}

        if last is not None and last == today - timedelta(days=1):
            streak = (ledger.streak_days or 0) + 1
        else:
            streak = 1

        reward = award_daily_streak(db, user_id, streak)
    return {"streakUpdated": True, "streakDays": streak, "reward": reward}


# ---------------------------------------------------------------------------
# DIRECT LEDGER ADJUSTMENTS
# ---------------------------------------------------------------------------

def _require_positive(amount: int, what: str):
    if not isinstance(amount, int) or amount <= 0:
        raise InvalidInput(f"{what} amount must be a positive integer")


def deduct_coins(db: Session, user_id: int, amount: int) -> bool:
    """Spend coins. Returns False, leaving the balance untouched, if the user can't afford it."""
    _require_positive(amount, "Coin")
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        if ledger.coins < amount:
            db.rollback()
            print(f"[REWARD] user={user_id} deduct refused amount={amount} coins={ledger.coins}", flush=True)
            return False
        ledger.coins -= amount
        db.commit()
    print(f"[REWARD] user={user_id} deducted coins={amount}", flush=True)
    return True


def add_coins(db: Session, user_id: int, amount: int) -> int:
    _require_positive(amount, "Coin")
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        ledger.coins += amount
        db.commit()
        return ledger.coins


def add_xp(db: Session, user_id: int, amount: int) -> int:
    _require_positive(amount, "XP")
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        ledger.total_xp += amount
        db.commit()
        return ledger.total_xp


def reset_streak(db: Session, user_id: int) -> RewardLedger:
    with ledger_lock(user_id):
        ledger = get_or_create_ledger(db, user_id, for_update=True)
        ledger.streak_days = 0
        db.commit()
        db.refresh(ledger)
    print(f"[REWARD] user={user_id} streak reset", flush=True)
    return ledger


# ---------------------------------------------------------------------------
# READS
# ---------------------------------------------------------------------------

def get_user_badges(db: Session, user_id: int) -> list[dict]:
    rows = (
        db.query(UserBadge)
        .filter(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.asc(), UserBadge.id.asc())
        .all()
    )
    return [{"key": r.key, "earnedAt": r.earned_at} for r in rows]


def get_reward_summary(db: Session, user_id: int) -> dict:
    ledger = get_or_create_ledger(db, user_id)
    return {
        "userId": user_id,
        "totalXP": ledger.total_xp,
        "coins": ledger.coins,
        "currentLevel": ledger.current_level,
        "streakDays": ledger.streak_days,
        "lastLogin": ledger.last_login,
        "lastDailyReward": ledger.last_daily_reward,
        "badges": get_user_badges(db, user_id),
    }


_LEADERBOARD_COLUMNS = {
    "xp": RewardLedger.total_xp,
    "levels": RewardLedger.current_level,
    "streak": RewardLedger.streak_days,
    "coins": RewardLedger.coins,
}


def get_leaderboard(db: Session, board_type: str = "xp", limit: int = 10) -> list[dict]:
    column = _LEADERBOARD_COLUMNS.get((board_type or "").lower())
    if column is None:
        raise InvalidInput(f"Unknown leaderboard type '{board_type}', expected one of {'/'.join(_LEADERBOARD_COLUMNS)}")
    if limit < 1:
        raise InvalidInput("limit must be at least 1")

    rows = (
        db.query(RewardLedger, User.username)
        .join(User, User.id == RewardLedger.user_id)
        .order_by(column.desc(), RewardLedger.user_id.asc())
        .limit(min(limit, LEADERBOARD_MAX))
        .all()
    )
    return [
        {
            "rank": rank,
            "userId": ledger.user_id,
            "username": username,
            "totalXP": ledger.total_xp,
            "currentLevel": ledger.current_level,
            "streakDays": ledger.streak_days,
            "coins": ledger.coins,
        }
        for rank, (ledger, username) in enumerate(rows, start=1)
    ]
