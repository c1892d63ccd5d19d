"""
Read-only queries over the content catalog.

Nothing here writes; every function is safe to call from any request.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.catalog.models import LevelWord, Translation, QuizQuestion


def words_for_level(db: Session, level_number: int) -> list[LevelWord]:
    return (
        db.query(LevelWord)
        .filter(LevelWord.level_number == level_number)
        .order_by(LevelWord.display_order.asc(), LevelWord.id.asc())
        .all()
    )


def find_word(db: Session, level_number: int, word_key: str) -> Optional[LevelWord]:
    return (
        db.query(LevelWord)
        .filter(
            LevelWord.level_number == level_number,
            LevelWord.word_key == word_key,
        )
        .first()
    )


def count_words(db: Session, level_number: int) -> int:
    return (
        db.query(func.count(LevelWord.id))
        .filter(LevelWord.level_number == level_number)
        .scalar()
    ) or 0


def word_counts_by_level(db: Session) -> dict[int, int]:
    rows = (
        db.query(LevelWord.level_number, func.count(LevelWord.id))
        .group_by(LevelWord.level_number)
        .all()
    )
    return {level: count for level, count in rows}


def translation(db: Session, word_key: str, language_code: str) -> Optional[Translation]:
    return (
        db.query(Translation)
        .filter(
            Translation.word_key == word_key,
            Translation.language_code == language_code,
        )
        .first()
    )


def translations_for_word(db: Session, word_key: str) -> list[Translation]:
    return (
        db.query(Translation)
        .filter(Translation.word_key == word_key)
        .order_by(Translation.language_code.asc())
        .all()
    )


def translations_for_words(db: Session, word_keys: list[str], language_code: str) -> dict[str, Translation]:
    """Bulk lookup keyed by word_key, so level listings avoid one query per word."""
    if not word_keys:
        return {}
    rows = (
        db.query(Translation)
        .filter(
            Translation.word_key.in_(word_keys),
            Translation.language_code == language_code,
        )
        .all()
    )
    return {t.word_key: t for t in rows}


def questions_for_level(db: Session, level_number: int) -> list[QuizQuestion]:
    return (
        db.query(QuizQuestion)
        .filter(QuizQuestion.level_number == level_number)
        .order_by(QuizQuestion.id.asc())
        .all()
    )


def questions_by_ids(db: Session, question_ids: list[int]) -> list[QuizQuestion]:
    if not question_ids:
        return []
    return (
        db.query(QuizQuestion)
        .filter(QuizQuestion.id.in_(question_ids))
        .order_by(QuizQuestion.id.asc())
        .all()
    )


def translation_to_dict(t: Translation) -> dict:
    return {
        "wordKey": t.word_key,
        "language": t.language_code,
        "text": t.text,
        "gifUrl": t.gif_url,
        "audioUrl": t.audio_url,
        "description": t.description,
    }
