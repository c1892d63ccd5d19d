from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.db.base import Base, engine
from app.core.errors import ProgressionError

# Imported so create_all picks the tables up
from app.auth.models import User  # noqa: F401
from app.catalog.models import LevelWord, Translation, QuizQuestion  # noqa: F401
from app.progress.models import UserProgress, CompletedWord, MasteredWord  # noqa: F401
from app.rewards.models import RewardLedger, UserBadge  # noqa: F401

from app.auth.routes import router as auth_router
from app.catalog.routes import router as catalog_router
from app.levels.routes import router as levels_router
from app.progress.routes import router as progress_router
from app.quiz.routes import router as quiz_router
from app.rewards.routes import router as rewards_router


app = FastAPI(title="LingoLevels", version="0.1.0")

# Create database tables (still useful in dev; in production prefer Alembic)
Base.metadata.create_all(bind=engine)


# =========================
# ERROR ENVELOPE
# =========================
def _failure(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(ProgressionError)
def handle_progression_error(request: Request, exc: ProgressionError):
    print(f"[API] {request.method} {request.url.path} -> {exc.status_code} "
          f"{type(exc).__name__}: {exc.message}", flush=True)
    return _failure(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
def handle_http_error(request: Request, exc: StarletteHTTPException):
    return _failure(exc.status_code, exc.detail)


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg', 'invalid request')}" if field else "Invalid request"
    return _failure(422, message)


# Include routers
app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(levels_router)
app.include_router(progress_router)
app.include_router(quiz_router)
app.include_router(rewards_router)


# Redirect root to the interactive API docs
@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")
