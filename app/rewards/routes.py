from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.deps import Identity, get_identity
from app.rewards import engine

router = APIRouter(prefix="/api/rewards", tags=["rewards"])


@router.get("/me")
def my_rewards(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "rewards": engine.get_reward_summary(db, identity.user_id)}


@router.post("/daily-streak")
def daily_streak(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "streak": engine.update_daily_streak(db, identity.user_id)}


@router.post("/spend")
def spend_coins(
    amount: int = Form(...),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    if not engine.deduct_coins(db, identity.user_id, amount):
        return JSONResponse(status_code=409, content={"success": False, "message": "Not enough coins"})
    ledger = engine.get_or_create_ledger(db, identity.user_id)
    return {"success": True, "coins": ledger.coins}


@router.post("/reset-streak")
def reset_streak(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    ledger = engine.reset_streak(db, identity.user_id)
    return {"success": True, "streakDays": ledger.streak_days}


@router.get("/leaderboard")
def leaderboard(
    board_type: str = Query("xp", alias="type"),
    limit: int = Query(10),
    db: Session = Depends(get_db),
):
    return {"success": True, "leaderboard": engine.get_leaderboard(db, board_type, limit)}
