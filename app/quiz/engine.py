"""
Quiz engine.

A quiz attempt moves NOT_STARTED -> STARTED -> SUBMITTED -> PASSED/FAILED.
The session id handed out by start_quiz is opaque: submit_quiz re-scores
from the question ids the caller sends back, no session is stored.
"""
import logging
import random
import uuid

from sqlalchemy.orm import Session

from app.auth.service import require_user
from app.catalog import service as catalog
from app.catalog.models import QuizQuestion
from app.core.clock import utcnow
from app.core.config import (
    DEFAULT_QUESTION_POINTS,
    DEFAULT_REQUIRED_SCORE,
    DEFAULT_TIME_LIMIT,
    ENFORCE_QUIZ_WORD_THRESHOLD,
    IMAGE_QUIZ_OPTION_COUNT,
    QUIZ_QUESTION_COUNT,
)
from app.core.errors import (
    InsufficientWords,
    InvalidInput,
    NoQuestions,
    NotFound,
    QuizNotAvailable,
)
from app.db.locks import progress_lock
from app.levels import gate
from app.progress import store
from app.rewards import engine as rewards

logger = logging.getLogger(__name__)

IMAGE_QUIZ_TIME_LIMIT = 60

_IMAGE_PROMPTS = {
    "en": "Choose the correct word for the image",
    "fr": "Choisissez le mot correct pour l'image",
    "ar": "اختر الكلمة الصحيحة للصورة",
}


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------

def _question_points(q: QuizQuestion) -> int:
    return q.points if q.points is not None else DEFAULT_QUESTION_POINTS


def _question_time_limit(q: QuizQuestion) -> int:
    return q.time_limit if q.time_limit is not None else DEFAULT_TIME_LIMIT


def _question_required_score(q: QuizQuestion) -> int:
    return q.required_score if q.required_score is not None else DEFAULT_REQUIRED_SCORE


def question_to_dict(q: QuizQuestion) -> dict:
    """Public view of a question. The answer key is never included."""
    return {
        "id": q.id,
        "questionType": q.question_type,
        "questionText": q.question_text,
        "options": q.options,
        "gifUrl": q.gif_url,
        "timeLimit": _question_time_limit(q),
        "points": _question_points(q),
        "requiredScore": _question_required_score(q),
    }


def pick_questions(questions: list[QuizQuestion], count: int = QUIZ_QUESTION_COUNT) -> list[QuizQuestion]:
    if len(questions) <= count:
        return list(questions)
    return random.sample(questions, count)


def answers_match(correct_answer, user_answer) -> bool:
    if correct_answer is None or user_answer is None:
        return False
    return str(correct_answer).casefold() == str(user_answer).casefold()


def score_percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return correct * 100 // total


def result_message(score: int, passed: bool) -> str:
    if not passed:
        return f"Quiz not passed. Score: {score}%. Try again!"
    if score >= 90:
        return f"Incredible! Excellent score: {score}%"
    if score >= 80:
        return f"Excellent! Very good score: {score}%"
    if score >= 70:
        return f"Well done! You passed the quiz: {score}%"
    return f"You passed the quiz: {score}%"


def _parse_answers(answers) -> dict[int, str]:
    if not answers:
        raise InvalidInput("answers must not be empty")
    if not isinstance(answers, dict):
        raise InvalidInput("answers must map question ids to answer text")

    parsed = {}
    for raw_id, answer in answers.items():
        try:
            question_id = int(raw_id)
        except (TypeError, ValueError):
            raise InvalidInput(f"Invalid question id: {raw_id!r}")
        parsed[question_id] = answer
    return parsed


# ---------------------------------------------------------------------------
# QUIZ FLOW
# ---------------------------------------------------------------------------

def start_quiz(db: Session, user_id: int, level_number: int) -> dict:
    require_user(db, user_id)
    progress = store.require_progress(db, user_id, level_number)

    questions = pick_questions(catalog.questions_for_level(db, level_number))
    if not questions:
        raise NoQuestions(f"No questions available for level {level_number}")

    if ENFORCE_QUIZ_WORD_THRESHOLD:
        total_words = catalog.count_words(db, level_number)
        if not store.all_words_completed(progress, total_words):
            raise QuizNotAvailable(
                f"Quiz not available yet. Learn {store.word_threshold(total_words)} words first"
            )

    session_id = str(uuid.uuid4())
    print(f"[QUIZ] start user={user_id} level={level_number} session={session_id} "
          f"questions={len(questions)}", flush=True)

    return {
        "sessionId": session_id,
        "levelNumber": level_number,
        "totalQuestions": len(questions),
        "totalPoints": sum(_question_points(q) for q in questions),
        "requiredScore": _question_required_score(questions[0]),
        "timeLimit": sum(_question_time_limit(q) for q in questions),
        "startTime": utcnow(),
        "questions": [question_to_dict(q) for q in questions],
    }


def submit_quiz(db: Session, user_id: int, level_number: int, answers: dict, session_id=None) -> dict:
    """
    Score a submission and record the attempt.

    Unknown question ids are ignored. If nothing scorable was submitted the
    attempt still counts, as a failed one with score 0.
    """
    require_user(db, user_id)
    parsed = _parse_answers(answers)

    with progress_lock(user_id, level_number):
        progress = store.require_progress(db, user_id, level_number, for_update=True)
        questions = catalog.questions_by_ids(db, list(parsed))

        correct_count = 0
        earned_points = 0
        results = {}
        correct_answers = {}
        for q in questions:
            is_correct = answers_match(q.correct_answer, parsed.get(q.id))
            results[q.id] = is_correct
            correct_answers[q.id] = q.correct_answer
            if is_correct:
                correct_count += 1
                earned_points += _question_points(q)

        total = len(questions)
        score = score_percentage(correct_count, total)
        passed = total > 0 and score >= _question_required_score(questions[0])

        now = utcnow()
        progress.attempts = (progress.attempts or 0) + 1
        progress.last_attempt = now
        progress.quiz_score = score
        progress.quiz_passed = passed
        if progress.best_score is None or score > progress.best_score:
            progress.best_score = score
        if passed:
            progress.completed_at = now
            progress.total_points = (progress.total_points or 0) + earned_points
        db.commit()
        db.refresh(progress)

        reward = rewards.award_quiz_success(db, user_id, level_number, score) if passed else None

    print(f"[QUIZ] submit user={user_id} level={level_number} session={session_id} "
          f"score={score} passed={passed} attempt={progress.attempts}", flush=True)

    result = {
        "levelNumber": level_number,
        "passed": passed,
        "score": score,
        "correctAnswers": correct_count,
        "totalQuestions": total,
        "totalPoints": earned_points,
        "bestScore": progress.best_score,
        "attempts": progress.attempts,
        "results": results,
        "correctAnswersMap": correct_answers,
        "message": result_message(score, passed),
    }
    if passed:
        can_unlock = gate.can_unlock_next_level(db, user_id, level_number)
        result["nextLevelAvailable"] = can_unlock
        if can_unlock:
            result["nextLevelNumber"] = level_number + 1
        result["reward"] = reward
    return result


def retake_quiz(db: Session, user_id: int, level_number: int) -> dict:
    """Clear the quiz outcome only. Words, points, attempts and best score stay."""
    with progress_lock(user_id, level_number):
        progress = store.require_progress(db, user_id, level_number, for_update=True)
        progress.quiz_passed = None
        progress.quiz_score = None
        progress.last_attempt = None
        db.commit()

    print(f"[QUIZ] retake user={user_id} level={level_number}", flush=True)
    return {
        "message": "Quiz reset. You can start again",
        "levelNumber": level_number,
    }


# ---------------------------------------------------------------------------
# HISTORY
# ---------------------------------------------------------------------------

def _history_entry(progress) -> dict:
    return {
        "levelNumber": progress.level_number,
        "score": progress.quiz_score,
        "passed": bool(progress.quiz_passed),
        "attempts": progress.attempts or 0,
        "bestScore": progress.best_score,
        "lastAttempt": progress.last_attempt,
        "completedAt": progress.completed_at,
    }


def get_quiz_history(db: Session, user_id: int) -> list[dict]:
    scored = [p for p in store.list_progress(db, user_id) if p.quiz_score is not None]
    # Newest attempt first, records without a timestamp last
    scored.sort(key=lambda p: (p.last_attempt is not None, p.last_attempt), reverse=True)
    return [_history_entry(p) for p in scored]


def get_quiz_result(db: Session, user_id: int, level_number: int) -> dict:
    progress = store.find_progress(db, user_id, level_number)
    if progress is None or progress.quiz_score is None:
        raise NotFound(f"No quiz taken for level {level_number}")
    entry = _history_entry(progress)
    entry["bestScore"] = progress.best_score or 0
    return entry


# ---------------------------------------------------------------------------
# GENERATED QUESTIONS
# ---------------------------------------------------------------------------

def create_image_quiz(db: Session, level_number: int, language: str) -> dict:
    """
    Build one picture question from three random words of the level.
    Nothing is persisted; the caller gets the answer with the question.
    """
    words = catalog.words_for_level(db, level_number)
    if len(words) < IMAGE_QUIZ_OPTION_COUNT:
        raise InsufficientWords(
            f"Level {level_number} needs at least {IMAGE_QUIZ_OPTION_COUNT} words to build a quiz"
        )

    language = (language or "").lower()
    selected = random.sample(words, IMAGE_QUIZ_OPTION_COUNT)
    correct_word = random.choice(selected)
    translations = catalog.translations_for_words(db, [w.word_key for w in selected], language)

    options = []
    correct_text = None
    image_url = None
    for word in selected:
        t = translations.get(word.word_key)
        if t is not None:
            text = t.text
        else:
            text = word.word_key
            logger.warning("No translation found for word '%s' in language '%s'", word.word_key, language)
        options.append(text)
        if word is correct_word:
            correct_text = text
            image_url = t.gif_url if t is not None else None

    random.shuffle(options)

    return {
        "levelNumber": level_number,
        "questionType": "image",
        "questionText": _IMAGE_PROMPTS.get(language, _IMAGE_PROMPTS["ar"]),
        "options": options,
        "correctAnswer": correct_text,
        "wordKey": correct_word.word_key,
        "gifUrl": image_url,
        "points": DEFAULT_QUESTION_POINTS,
        "timeLimit": IMAGE_QUIZ_TIME_LIMIT,
        "requiredScore": DEFAULT_REQUIRED_SCORE,
    }
