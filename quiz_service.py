"""
Chapter quiz orchestration: cache lookup, language and strategy selection,
bounded generation and persistence. Also scores submitted attempts.
"""
import asyncio
import json
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cache_manager import check_cache, replace_quiz
from content_quality import GenerationSource, is_content_corrupted, select_strategy
from database import Chapter, Quiz, QuizAttempt
from errors import AccessDenied, ChapterNotFound, PersistenceFailed, QuizNotFound
from language import Language, is_math_science_subject, resolve_language
from llm_quiz_generator import ModelClient, generate_questions

logger = logging.getLogger(__name__)

AccessCheck = Callable[[int], bool]


def chapter_display_name(chapter: Chapter, language: Language) -> str:
    if language is not Language.ENGLISH and chapter.name_native:
        return chapter.name_native
    return chapter.name


def quiz_title(chapter: Chapter) -> str:
    return f"{chapter.name_native or chapter.name} Quiz"


@dataclass
class GenerationPlan:
    """Everything the model step needs, read from the chapter up front."""
    language: Language
    source: GenerationSource
    subject_name: str
    chapter_name: str
    title: str
    math_science: bool


def prepare_generation(
    db: Session,
    chapter_id: int,
    *,
    may_generate: AccessCheck,
    user_id: Optional[str] = None,
    regenerate: bool = False,
) -> Union[Dict[str, Any], GenerationPlan]:
    """
    Database half of the request: chapter lookup, access check and cache.

    Returns the cached quiz dict on a hit, otherwise a GenerationPlan.
    """
    chapter = db.get(Chapter, chapter_id)
    if chapter is None:
        raise ChapterNotFound(chapter_id)
    if not may_generate(chapter_id):
        logger.warning(f"User {user_id} denied access to chapter {chapter_id}")
        raise AccessDenied(chapter_id, user_id)

    if not regenerate:
        cached = check_cache(db, chapter_id)
        if cached:
            return cached

    subject = chapter.subject
    language = resolve_language(subject.name, subject.medium, subject.name_native)
    corrupted = is_content_corrupted(chapter.content_extracted, language)
    return GenerationPlan(
        language=language,
        source=select_strategy(chapter.content_extracted, corrupted),
        subject_name=subject.name_native or subject.name,
        chapter_name=chapter_display_name(chapter, language),
        title=quiz_title(chapter),
        math_science=is_math_science_subject(subject.name, subject.name_native),
    )


async def get_or_generate_quiz(
    db: Session,
    chapter_id: int,
    *,
    get_client: Callable[[], ModelClient],
    may_generate: AccessCheck,
    user_id: Optional[str] = None,
    regenerate: bool = False,
    timeout: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Return the chapter's quiz, generating it when missing or asked to.

    Session work runs in worker threads; only the model call is awaited on
    the event loop. The model client is obtained from ``get_client`` after a
    cache miss, so a cache hit never needs one.

    Nothing is written unless a generated quiz passed validation; a failed
    regeneration leaves the previous quiz in place.

    Raises:
        ChapterNotFound, AccessDenied, ModelCallFailed,
        GenerationValidationFailed, PersistenceFailed
    """
    plan = await asyncio.to_thread(
        prepare_generation,
        db,
        chapter_id,
        may_generate=may_generate,
        user_id=user_id,
        regenerate=regenerate,
    )
    if not isinstance(plan, GenerationPlan):
        return plan

    questions, attempts = await generate_questions(
        get_client(),
        language=plan.language,
        source=plan.source,
        subject_name=plan.subject_name,
        chapter_name=plan.chapter_name,
        math_science=plan.math_science,
        timeout=timeout,
        rng=rng,
    )
    logger.info(f"Generated {len(questions)} questions for chapter {chapter_id} in {attempts} attempts")

    return await asyncio.to_thread(
        replace_quiz,
        db,
        chapter_id=chapter_id,
        title=plan.title,
        language=plan.language.value,
        questions=[q.model_dump(by_alias=True) for q in questions],
        created_by=user_id,
    )


def score_answers(questions: List[Dict[str, Any]], answers: List[Optional[int]]) -> int:
    """One point per question whose submitted index matches correctAnswer."""
    score = 0
    for index, question in enumerate(questions):
        if index < len(answers) and answers[index] is not None and answers[index] == question.get("correctAnswer"):
            score += 1
    return score


def submit_attempt(
    db: Session,
    quiz_id: int,
    *,
    user_id: str,
    answers: List[Optional[int]],
    may_access: AccessCheck,
    started_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Score and record a student's answers to a stored quiz.

    Raises:
        QuizNotFound, AccessDenied, PersistenceFailed
    """
    quiz = db.get(Quiz, quiz_id)
    if quiz is None:
        raise QuizNotFound(quiz_id)
    if not may_access(quiz.chapter_id):
        raise AccessDenied(quiz.chapter_id, user_id)

    questions = json.loads(quiz.questions)
    score = score_answers(questions, answers)
    attempt = QuizAttempt(
        quiz_id=quiz.id,
        student_id=user_id,
        score=score,
        total_questions=len(questions),
        answers=json.dumps(answers),
        started_at=started_at,
    )
    try:
        db.add(attempt)
        db.commit()
        db.refresh(attempt)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailed(quiz.chapter_id, questions, e) from e

    logger.info(f"User {user_id} scored {score}/{len(questions)} on quiz {quiz_id}")
    return {
        "attempt_id": attempt.id,
        "score": score,
        "total_questions": len(questions),
        "percentage": round(score / len(questions) * 100) if questions else 0,
    }
