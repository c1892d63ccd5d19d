import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

# Absolute path to project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _build_database_url() -> str:
    """
    Determine the database URL.

    - Prefer DATABASE_URL from the environment (production).
    - Fallback to a local SQLite file for development.
    - Normalize legacy postgres:// URLs to SQLAlchemy's postgresql+psycopg2://.
    """
    url = os.getenv("DATABASE_URL", "sqlite:///./lingolevels.db").strip()

    if url.startswith("postgres://"):
        # SQLAlchemy 2.x expects a driver-qualified URL
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    return url


def build_engine(url: str, **kwargs):
    connect_args = {}
    if url.startswith("sqlite"):
        # Needed for SQLite when used with FastAPI's threadpool
        connect_args = {"check_same_thread": False}
    return create_engine(url, connect_args=connect_args, future=True, **kwargs)


DATABASE_URL = _build_database_url()

engine = build_engine(DATABASE_URL)

Base = declarative_base()


# Helpful DB diagnostics printed once at startup
try:
    url_safe = engine.url.render_as_string(hide_password=True)
    backend = engine.url.get_backend_name()
    print(f"[DB] Using database backend={backend} url={url_safe}", flush=True)

    if backend == "sqlite" and engine.url.database:
        db_path = Path(engine.url.database).resolve()
        exists = db_path.exists()
        size = db_path.stat().st_size if exists else 0
        print(f"[DB] SQLite path={db_path} exists={exists} size_bytes={size}", flush=True)
except OSError as exc:
    print("[DB] Failed to log DB diagnostics:", repr(exc), flush=True)
