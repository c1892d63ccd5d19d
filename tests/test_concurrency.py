"""
Concurrent writers against one file-backed SQLite database, one session per thread.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker

from app.auth.service import create_user
from app.catalog import service as catalog
from app.catalog.seed import seed_demo_catalog
from app.core.errors import AlreadyUnlocked
from app.db.base import Base, build_engine
from app.levels import gate
from app.progress import store, tracker
from app.quiz import engine as quiz
from app.rewards import engine as rewards


@pytest.fixture
def file_sessions(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=eng)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=eng)
    yield factory
    eng.dispose()


@pytest.fixture
def player_id(file_sessions):
    with file_sessions() as db:
        seed_demo_catalog(db)
        return create_user(db, "racer", "racer@example.com", "pw").id


def _run_parallel(factory, fn, count):
    def call(_):
        with factory() as db:
            try:
                return fn(db)
            except AlreadyUnlocked as exc:
                return exc

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(call, range(count)))


def test_parallel_complete_word_awards_points_once(file_sessions, player_id):
    results = _run_parallel(
        file_sessions,
        lambda db: tracker.complete_word(db, player_id, 1, "apple"),
        8,
    )

    assert sum(r["pointsEarned"] for r in results) == 10
    with file_sessions() as db:
        progress = store.require_progress(db, player_id, 1)
        assert progress.total_points == 10
        assert progress.completed_count() == 1


def test_parallel_unlock_next_creates_one_level(file_sessions, player_id):
    with file_sessions() as db:
        gate.open_level(db, player_id, 1)
        questions = catalog.questions_for_level(db, 1)
        quiz.submit_quiz(db, player_id, 1, {str(q.id): q.correct_answer for q in questions})

    results = _run_parallel(file_sessions, lambda db: gate.unlock_next_level(db, player_id), 4)

    successes = [r for r in results if isinstance(r, dict)]
    assert len(successes) == 1
    assert all(isinstance(r, AlreadyUnlocked) for r in results if not isinstance(r, dict))

    with file_sessions() as db:
        ledger = rewards.get_or_create_ledger(db, player_id)
        assert ledger.current_level == 2
        assert [b["key"] for b in rewards.get_user_badges(db, player_id)].count("level_2_unlocked") == 1
