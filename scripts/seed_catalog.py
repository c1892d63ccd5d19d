"""
Script to load the demo vocabulary catalog (words, translations, quiz questions).

Safe to re-run: nothing is inserted when level words already exist.
Tables are created first so it also works on a fresh SQLite file.
"""
import sys
import os

# Add the parent directory to the path so we can import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy.exc import SQLAlchemyError

from app.db.base import Base, engine
from app.db.session import SessionLocal
from app.catalog.seed import seed_demo_catalog

# Register every table with the metadata before create_all
import app.main  # noqa: F401,E402


def seed_catalog():
    """Create tables and seed the demo catalog."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        counts = seed_demo_catalog(db)
        if not any(counts.values()):
            print("Catalog already populated, nothing to do.")
        else:
            print(f"SUCCESS: inserted {counts['words']} words, "
                  f"{counts['translations']} translations, "
                  f"{counts['questions']} quiz questions.")
        return True

    except SQLAlchemyError as e:
        db.rollback()
        print(f"ERROR: Failed to seed catalog: {str(e)}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    print("Seeding demo catalog...")
    print("-" * 50)

    if seed_catalog():
        print("-" * 50)
        print("Catalog seeding complete!")
    else:
        print("-" * 50)
        print("Catalog seeding failed!")
        sys.exit(1)
