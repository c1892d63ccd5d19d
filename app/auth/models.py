import enum

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.db.base import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    PROF = "PROF"
    STUDENT = "STUDENT"


class Level(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(100), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)

    password_hash = Column(String(255), nullable=False)

    # ADMIN / PROF / STUDENT
    role = Column(String(20), default=Role.STUDENT.value, nullable=False)

    # Self-declared proficiency, unrelated to unlocked levels
    level = Column(String(20), default=Level.BEGINNER.value, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
