from sqlalchemy.orm import Session

from app.auth.models import User, Role, Level
from app.core.errors import UserNotFound, DuplicateAccount, InvalidInput
from app.core.security import hash_password


def require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound(f"User {user_id} not found")
    return user


def _parse_enum(enum_cls, raw, field: str):
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(str(raw).strip().upper())
    except ValueError:
        allowed = "/".join(m.value for m in enum_cls)
        raise InvalidInput(f"Invalid {field} '{raw}', expected one of {allowed}")


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str | None = None,
    level: str | None = None,
) -> User:
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise InvalidInput("username, email and password are required")

    parsed_role = _parse_enum(Role, role, "role") or Role.STUDENT
    parsed_level = _parse_enum(Level, level, "level") or Level.BEGINNER

    if db.query(User).filter(User.email == email).first():
        raise DuplicateAccount("Email already registered")
    if db.query(User).filter(User.username == username).first():
        raise DuplicateAccount("Username already taken")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=parsed_role.value,
        level=parsed_level.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"[AUTH] user created id={user.id} username={user.username} role={user.role}", flush=True)
    return user
