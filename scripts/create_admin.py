"""
Script to create an ADMIN account (or promote an existing one).

Public signup only ever creates STUDENT accounts, so this is the way to
get an account that may use the admin level unlock.

Usage: python scripts/create_admin.py <username> <email> <password>
"""
import sys
import os

# Add the parent directory to the path so we can import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy.exc import SQLAlchemyError

from app.db.base import Base, engine
from app.db.session import SessionLocal
from app.auth.models import User, Role
from app.auth.service import create_user
from app.core.errors import ProgressionError

# Register every table with the metadata before create_all
import app.main  # noqa: F401,E402


def create_admin(username: str, email: str, password: str):
    """Create the admin, or promote the user that already holds this username."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            existing.role = Role.ADMIN.value
            db.commit()
            print(f"SUCCESS: User '{existing.username}' (ID: {existing.id}) promoted to ADMIN.")
            return True

        user = create_user(db, username, email, password, role=Role.ADMIN.value)
        print(f"SUCCESS: Admin '{user.username}' (ID: {user.id}) created.")
        return True

    except (ProgressionError, SQLAlchemyError) as e:
        db.rollback()
        print(f"ERROR: Failed to create admin: {str(e)}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(2)

    print("Creating admin account...")
    print("-" * 50)

    if create_admin(*sys.argv[1:]):
        print("-" * 50)
        print("Admin setup complete!")
    else:
        print("-" * 50)
        print("Admin setup failed!")
        sys.exit(1)
