from fastapi import APIRouter, Depends, Form, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.deps import Identity, get_identity, require_admin
from app.levels import gate
from app.progress import tracker

router = APIRouter(prefix="/api/levels", tags=["levels"])


# =========================
# LEVEL GATE
# =========================
# Declared before the /{level_number} routes so the static paths win.
@router.post("/unlock-next")
def unlock_next(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "unlock": gate.unlock_next_level(db, identity.user_id)}


@router.post("/admin/unlock/{level_number}")
def admin_unlock(
    level_number: int,
    user_id: int = Form(..., alias="userId"),
    admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    print(f"[UNLOCK] admin={admin.username} target_user={user_id} level={level_number}", flush=True)
    return {"success": True, "unlock": gate.unlock_specific_level(db, user_id, level_number)}


# =========================
# LEVEL VIEWS
# =========================
@router.get("/{level_number}")
def get_level(
    level_number: int,
    language: str = Query("ar"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    data = tracker.get_level_with_progress(db, identity.user_id, level_number, language)
    return {"success": True, "level": data}


@router.get("/{level_number}/remaining")
def get_remaining(
    level_number: int,
    language: str = Query("ar"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    data = tracker.get_remaining_words(db, identity.user_id, level_number, language)
    return {"success": True, "words": data}


@router.get("/{level_number}/status")
def get_status(
    level_number: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "status": tracker.get_level_status(db, identity.user_id, level_number)}


# =========================
# WORD PROGRESS
# =========================
@router.post("/{level_number}/complete-word")
def complete_word(
    level_number: int,
    word_key: str = Form(..., alias="wordKey"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    result = tracker.complete_word(db, identity.user_id, level_number, word_key)
    return {"success": True, "result": result}


@router.post("/{level_number}/master-word")
def master_word(
    level_number: int,
    word_key: str = Form(..., alias="wordKey"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    result = tracker.master_word(db, identity.user_id, level_number, word_key)
    return {"success": True, "result": result}


@router.post("/{level_number}/reset")
def reset_level(
    level_number: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "result": tracker.reset_level_progress(db, identity.user_id, level_number)}
