from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from app.db.base import Base
from app.core.clock import utcnow


class RewardLedger(Base):
    """Running XP/coin totals plus streak metadata, one row per user."""
    __tablename__ = "reward_ledgers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)

    total_xp = Column(Integer, nullable=False, default=0)
    coins = Column(Integer, nullable=False, default=0)

    # Highest unlocked level; only ever raised
    current_level = Column(Integer, nullable=False, default=1)

    streak_days = Column(Integer, nullable=False, default=0)
    last_login = Column(DateTime, nullable=True)
    last_daily_reward = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


# ======================================================
# USER BADGES
# ======================================================
class UserBadge(Base):
    __tablename__ = "user_badges"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    key = Column(String(64), nullable=False)  # e.g. "level_1_complete", "quiz_master_lvl_2"
    earned_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_user_badge"),
    )
