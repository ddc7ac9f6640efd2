"""
Cache manager for chapter quizzes.
Serves the stored quiz for a chapter and replaces it on regeneration.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import Quiz
from errors import PersistenceFailed

logger = logging.getLogger(__name__)

REPLACE_ATTEMPTS = 2


def quiz_to_dict(quiz: Quiz, cached: bool) -> Dict[str, Any]:
    return {
        "id": quiz.id,
        "chapter_id": quiz.chapter_id,
        "title": quiz.title,
        "language": quiz.language,
        "questions": json.loads(quiz.questions),
        "created_by": quiz.created_by,
        "date_generated": quiz.date_generated.isoformat(),
        "cached": cached,
    }


def check_cache(db: Session, chapter_id: int) -> Optional[dict]:
    """
    Check if a quiz already exists for the given chapter.

    Args:
        db: Database session
        chapter_id: Chapter id

    Returns:
        Quiz data dict with cached=True if found, None otherwise
    """
    quiz = db.query(Quiz).filter(Quiz.chapter_id == chapter_id).order_by(Quiz.id.desc()).first()
    if quiz:
        logger.info(f"Cache hit for chapter {chapter_id}: quiz {quiz.id}")
        return quiz_to_dict(quiz, cached=True)

    logger.info(f"Cache miss for chapter {chapter_id}")
    return None


def replace_quiz(
    db: Session,
    chapter_id: int,
    title: str,
    language: str,
    questions: List[Dict[str, Any]],
    created_by: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Delete any quiz stored for the chapter and insert the new one, in a
    single transaction.

    A concurrent replace for the same chapter surfaces as an IntegrityError
    on the unique chapter_id; the replace is then run once more so the later
    writer wins.

    Raises:
        PersistenceFailed: The quiz could not be written
    """
    data = json.dumps(questions, ensure_ascii=False)

    for attempt in range(1, REPLACE_ATTEMPTS + 1):
        try:
            deleted = db.query(Quiz).filter(Quiz.chapter_id == chapter_id).delete(synchronize_session=False)
            record = Quiz(
                chapter_id=chapter_id,
                title=title,
                language=language,
                questions=data,
                created_by=created_by,
                date_generated=datetime.utcnow(),
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            logger.info(f"Stored quiz {record.id} for chapter {chapter_id} (replaced {deleted})")
            return quiz_to_dict(record, cached=False)
        except IntegrityError as e:
            db.rollback()
            if attempt < REPLACE_ATTEMPTS:
                logger.warning(f"Concurrent write for chapter {chapter_id}, replacing again")
                continue
            raise PersistenceFailed(chapter_id, questions, e) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store quiz for chapter {chapter_id}: {e}")
            raise PersistenceFailed(chapter_id, questions, e) from e


def get_cache_stats(db: Session) -> dict:
    """
    Get cache statistics.

    Args:
        db: Database session

    Returns:
        Dictionary with cache statistics
    """
    total_quizzes = db.query(Quiz).count()
    recent_quizzes = db.query(Quiz).filter(
        Quiz.date_generated >= datetime.utcnow() - timedelta(days=7)
    ).count()

    return {
        "total_cached": total_quizzes,
        "recent_week": recent_quizzes
    }
