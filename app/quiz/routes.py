from fastapi import APIRouter, Body, Depends, Form, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.deps import Identity, get_identity
from app.core.errors import InvalidInput
from app.quiz import engine

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


@router.post("/start")
def start_quiz(
    level_number: int = Form(..., alias="levelNumber"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "quiz": engine.start_quiz(db, identity.user_id, level_number)}


@router.post("/submit")
def submit_quiz(
    payload: dict = Body(...),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Body: {"levelNumber": 1, "sessionId": "...", "answers": {"<questionId>": "<answer>"}}
    """
    level_number = payload.get("levelNumber")
    if isinstance(level_number, bool) or not isinstance(level_number, int):
        raise InvalidInput("levelNumber is required")

    result = engine.submit_quiz(
        db,
        identity.user_id,
        level_number,
        payload.get("answers"),
        session_id=payload.get("sessionId"),
    )
    return {"success": True, "result": result}


@router.post("/retake")
def retake_quiz(
    level_number: int = Form(..., alias="levelNumber"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "result": engine.retake_quiz(db, identity.user_id, level_number)}


@router.get("/history")
def quiz_history(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    return {"success": True, "history": engine.get_quiz_history(db, identity.user_id)}


@router.get("/result")
def quiz_result(
    level_number: int = Query(..., alias="levelNumber"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "result": engine.get_quiz_result(db, identity.user_id, level_number)}


@router.post("/create-image-quiz")
def create_image_quiz(
    level_number: int = Form(..., alias="levelNumber"),
    language: str = Form("ar"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return {"success": True, "quiz": engine.create_image_quiz(db, level_number, language)}
