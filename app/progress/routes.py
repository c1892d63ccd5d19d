from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.deps import Identity, get_identity
from app.progress import tracker

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("/stats")
def get_stats(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "stats": tracker.get_user_stats(db, identity.user_id)}


@router.get("/levels")
def get_levels(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "levels": tracker.get_user_levels(db, identity.user_id)}


@router.get("/level/{level_number}")
def get_level_progress(
    level_number: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "progress": tracker.get_level_progress(db, identity.user_id, level_number)}


@router.get("/weekly-stats")
def get_weekly_stats(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "stats": tracker.get_weekly_stats(db, identity.user_id)}
