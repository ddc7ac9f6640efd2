import json
import logging
from typing import Callable, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from access import check_chapter_access
from cache_manager import get_cache_stats
from config import config
from database import Quiz, get_db, init_db
from errors import (
    AccessDenied,
    ChapterNotFound,
    GenerationValidationFailed,
    ModelCallFailed,
    PersistenceFailed,
    QuizNotFound,
)
from llm_quiz_generator import GeminiQuizClient, ModelClient
from logging_config import configure_logging
from models import GenerateQuizBody, SubmitQuizBody
from quiz_service import get_or_generate_quiz, submit_attempt

logger = logging.getLogger(__name__)

app = FastAPI(title="Chapter Quiz Generator API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_model_client: Optional[GeminiQuizClient] = None


def get_model_client() -> ModelClient:
    global _model_client
    if _model_client is None:
        _model_client = GeminiQuizClient()
    return _model_client


def model_client_provider() -> Callable[[], ModelClient]:
    """Dependency handing out the client factory; the client itself is built on first generation."""
    return get_model_client


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


@app.on_event("startup")
def on_startup():
    configure_logging()
    config.log_config(logger)
    init_db()


@app.get("/")
def root():
    """API root endpoint with basic information."""
    return {
        "name": "Chapter Quiz Generator API",
        "version": "1.0.0",
        "endpoints": [
            "/chapters/{chapter_id}/quiz",
            "/quiz/{quiz_id}",
            "/quiz/{quiz_id}/submit",
            "/history",
            "/cache/stats",
        ],
    }


@app.post("/chapters/{chapter_id}/quiz")
async def generate_quiz_endpoint(
    chapter_id: int,
    body: Optional[GenerateQuizBody] = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    get_client: Callable[[], ModelClient] = Depends(model_client_provider),
):
    """
    Return the chapter's quiz, generating it on a cache miss or when
    regenerate is set.
    """
    body = body or GenerateQuizBody()
    try:
        return await get_or_generate_quiz(
            db,
            chapter_id,
            get_client=get_client,
            may_generate=lambda cid: check_chapter_access(db, user_id, cid),
            user_id=user_id,
            regenerate=body.regenerate,
        )
    except ChapterNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied:
        raise HTTPException(status_code=403, detail="Access denied. Please purchase this course to access quizzes.")
    except ModelCallFailed as e:
        logger.error(f"Model call failed for chapter {chapter_id}: {e}")
        raise HTTPException(status_code=502, detail="Quiz generation failed. Please try again.")
    except GenerationValidationFailed as e:
        logger.error(f"Generation rejected for chapter {chapter_id}: {e}")
        raise HTTPException(status_code=502, detail="Quiz generation failed. Please try again.")
    except PersistenceFailed as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to save quiz", "questions": e.questions},
        )


@app.get("/history")
def history(db: Session = Depends(get_db)):
    """Get list of all generated quizzes."""
    rows = db.query(Quiz).order_by(Quiz.date_generated.desc()).all()
    return [
        {
            "id": r.id,
            "chapter_id": r.chapter_id,
            "title": r.title,
            "date_generated": r.date_generated.isoformat(),
        }
        for r in rows
    ]


@app.get("/quiz/{quiz_id}")
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    """Get full quiz details by ID."""
    r = db.get(Quiz, quiz_id)
    if not r:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return {
        "id": r.id,
        "chapter_id": r.chapter_id,
        "title": r.title,
        "language": r.language,
        "questions": json.loads(r.questions),
        "date_generated": r.date_generated.isoformat(),
    }


@app.post("/quiz/{quiz_id}/submit")
def submit_quiz(
    quiz_id: int,
    body: SubmitQuizBody,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Score a quiz attempt and store it."""
    try:
        return submit_attempt(
            db,
            quiz_id,
            user_id=user_id,
            answers=body.answers,
            may_access=lambda cid: check_chapter_access(db, user_id, cid),
            started_at=body.started_at,
        )
    except QuizNotFound:
        raise HTTPException(status_code=404, detail="Quiz not found")
    except AccessDenied:
        raise HTTPException(status_code=403, detail="Access denied. Please purchase this course to submit quizzes.")
    except PersistenceFailed as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Failed to save quiz attempt")


@app.get("/cache/stats")
def cache_stats(db: Session = Depends(get_db)):
    """Get cache statistics."""
    return get_cache_stats(db)
