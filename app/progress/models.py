"""
User Progress Model + owned word-set tables.
One progress record per (user, level); completed/mastered words live in
child tables keyed by word_key so membership checks are dictionary lookups.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.orm.collections import attribute_keyed_dict

from app.db.base import Base
from app.core.clock import utcnow


class UserProgress(Base):
    """
    Tracks a user's state inside one level.
    Created when the level opens, never deleted, only reset.
    """
    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    level_number = Column(Integer, nullable=False)

    total_points = Column(Integer, nullable=False, default=0)

    # None = never submitted (or reset by retake), False = last attempt failed
    quiz_passed = Column(Boolean, nullable=True, default=None)
    quiz_score = Column(Integer, nullable=True)
    attempts = Column(Integer, nullable=False, default=0)
    best_score = Column(Integer, nullable=True)

    unlocked_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime, nullable=True)
    last_attempt = Column(DateTime, nullable=True)

    completed_words = relationship(
        "CompletedWord",
        collection_class=attribute_keyed_dict("word_key"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    mastered_words = relationship(
        "MasteredWord",
        collection_class=attribute_keyed_dict("word_key"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # Unique constraint: one progress record per user per level
    __table_args__ = (
        UniqueConstraint("user_id", "level_number", name="uq_user_level_progress"),
    )

    def completed_count(self) -> int:
        return len(self.completed_words)

    def mastered_count(self) -> int:
        return len(self.mastered_words)

    def completed_keys(self) -> list[str]:
        """Completed word keys in the order they were learned."""
        rows = sorted(self.completed_words.values(), key=lambda w: (w.completed_at or utcnow(), w.id or 0))
        return [w.word_key for w in rows]

    def mastered_keys(self) -> list[str]:
        rows = sorted(self.mastered_words.values(), key=lambda w: (w.mastered_at or utcnow(), w.id or 0))
        return [w.word_key for w in rows]


class CompletedWord(Base):
    __tablename__ = "progress_completed_words"

    id = Column(Integer, primary_key=True)
    progress_id = Column(Integer, ForeignKey("user_progress.id", ondelete="CASCADE"), nullable=False, index=True)
    word_key = Column(String(100), nullable=False)
    completed_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("progress_id", "word_key", name="uq_completed_word"),
    )


class MasteredWord(Base):
    __tablename__ = "progress_mastered_words"

    id = Column(Integer, primary_key=True)
    progress_id = Column(Integer, ForeignKey("user_progress.id", ondelete="CASCADE"), nullable=False, index=True)
    word_key = Column(String(100), nullable=False)
    mastered_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("progress_id", "word_key", name="uq_mastered_word"),
    )
