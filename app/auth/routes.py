from fastapi import APIRouter, Depends, HTTPException, Form
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.auth.models import User, Role
from app.auth.service import create_user
from app.core.security import verify_password, create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


# =========================
# SIGNUP
# =========================
@router.post("/signup")
def signup(
    email: str = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    level: str = Form(None),
    db: Session = Depends(get_db),
):
    # Public accounts are always STUDENT; elevated roles come from scripts/create_admin.py
    user = create_user(db, username, email, password, role=Role.STUDENT.value, level=level)
    return {"success": True, "user": {"id": user.id, "username": user.username, "role": user.role, "level": user.level}}


# =========================
# LOGIN
# =========================
@router.post("/login")
def login(
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.username == username).first()

    if not user or not verify_password(password, user.password_hash):
        print("[AUTH] Invalid credentials for:", username, flush=True)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.username, user.id, user.role, user.level)
    print("[AUTH] Login successful for:", user.username, flush=True)
    return {
        "success": True,
        "token": token,
        "userId": user.id,
        "role": user.role,
        "level": user.level,
    }
