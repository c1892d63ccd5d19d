from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.catalog import service as catalog
from app.core.errors import NotFound

router = APIRouter(prefix="/api/translations", tags=["catalog"])


@router.get("/{word_key}")
def get_word_translation(
    word_key: str,
    language: str = Query("ar"),
    db: Session = Depends(get_db),
):
    t = catalog.translation(db, word_key, language)
    if t is None:
        raise NotFound(f"No '{language}' translation for word: {word_key}")
    return {"success": True, "translation": catalog.translation_to_dict(t)}


@router.get("/{word_key}/all")
def get_all_translations(word_key: str, db: Session = Depends(get_db)):
    rows = catalog.translations_for_word(db, word_key)
    if not rows:
        raise NotFound(f"No translations found for word: {word_key}")
    by_language = {
        t.language_code: {"text": t.text, "gifUrl": t.gif_url, "audioUrl": t.audio_url}
        for t in rows
    }
    return {"success": True, "translations": {"wordKey": word_key, "translations": by_language}}
