import json

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from app.db.base import Base
from app.core.config import (
    DEFAULT_WORD_POINTS,
    DEFAULT_QUESTION_POINTS,
    DEFAULT_REQUIRED_SCORE,
    DEFAULT_TIME_LIMIT,
)


class LevelWord(Base):
    __tablename__ = "level_words"

    id = Column(Integer, primary_key=True, index=True)

    level_number = Column(Integer, nullable=False, index=True)
    word_key = Column(String(100), nullable=False, index=True)
    category = Column(String(100), nullable=True)
    points = Column(Integer, nullable=False, default=DEFAULT_WORD_POINTS)
    display_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("level_number", "word_key", name="uq_level_word"),
    )

    @property
    def point_value(self) -> int:
        return self.points if self.points is not None else DEFAULT_WORD_POINTS


class Translation(Base):
    __tablename__ = "translations"

    id = Column(Integer, primary_key=True, index=True)

    word_key = Column(String(100), nullable=False, index=True)
    language_code = Column(String(2), nullable=False)
    text = Column(String(255), nullable=False)
    gif_url = Column(String(500), nullable=True)
    audio_url = Column(String(500), nullable=True)
    description = Column(String(500), nullable=True)

    # One translation per word per language
    __table_args__ = (
        UniqueConstraint("word_key", "language_code", name="uq_translation_word_language"),
    )


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)

    level_number = Column(Integer, nullable=False, index=True)
    question_type = Column(String(30), nullable=False, default="multiple_choice")
    question_text = Column(Text, nullable=False)
    correct_answer = Column(String(255), nullable=False)

    # Ordered answer options, JSON-encoded list of strings
    options_json = Column(Text, nullable=False, default="[]")

    gif_url = Column(String(500), nullable=True)
    points = Column(Integer, nullable=False, default=DEFAULT_QUESTION_POINTS)
    required_score = Column(Integer, nullable=False, default=DEFAULT_REQUIRED_SCORE)
    time_limit = Column(Integer, nullable=True, default=DEFAULT_TIME_LIMIT)
    explanation = Column(Text, nullable=True)

    @property
    def options(self) -> list[str]:
        if not self.options_json:
            return []
        return json.loads(self.options_json)

    @options.setter
    def options(self, values: list[str]):
        self.options_json = json.dumps(list(values or []), ensure_ascii=False)
