import os

# Must be set before the app (and security / db modules) are imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.main import app  # noqa: E402
from app.auth.service import create_user  # noqa: E402
from app.catalog.seed import seed_demo_catalog  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base, build_engine  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.progress import tracker  # noqa: E402


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_demo_catalog(session)
    yield session
    session.close()


@pytest.fixture
def user(db):
    return create_user(db, "alice", "alice@example.com", "password123")


@pytest.fixture
def other_user(db):
    return create_user(db, "bob", "bob@example.com", "password123")


@pytest.fixture
def admin(db):
    return create_user(db, "root", "root@example.com", "password123", role="ADMIN")


@pytest.fixture
def client(session_factory, db):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(u) -> dict:
    token = create_access_token(u.username, u.id, u.role, u.level)
    return {"Authorization": f"Bearer {token}"}


LEVEL_1_WORDS = [
    "apple", "bread", "water", "milk", "cat", "dog",
    "bird", "fish", "red", "blue", "green", "sun",
]


def learn_words(db, user_id, level_number, word_keys):
    """Complete each word in turn and return the last result."""
    result = None
    for key in word_keys:
        result = tracker.complete_word(db, user_id, level_number, key)
    return result
