"""
Structural and language-purity validation of a parsed quiz payload.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config import config
from errors import QuizValidationError
from language import (
    Language,
    count_ascii_letters,
    count_in_block,
    count_non_ascii,
    script_block,
    significant_chars,
)
from models import QuizQuestion

logger = logging.getLogger(__name__)

KANNADA_MAX_ASCII_RATIO = 0.05
KANNADA_MATH_SCIENCE_MAX_ASCII_RATIO = 0.30
ENGLISH_MAX_NON_ASCII_RATIO = 0.30


def filter_questions(raw_questions: List[Any]) -> List[QuizQuestion]:
    """Keep the questions that pass structural checks, in order."""
    kept = []
    for index, raw in enumerate(raw_questions):
        try:
            kept.append(QuizQuestion.model_validate(raw))
        except ValidationError as e:
            logger.info(f"Dropping question {index}: {e.error_count()} structural errors")
    return kept


def check_language_purity(questions: List[QuizQuestion], language: Language, math_science: bool = False) -> None:
    """
    Raise QuizValidationError when the quiz text strays from its script.

    Kannada must contain Kannada script, with ASCII letters under 5% of the
    text (30% for mathematics and science). Hindi must contain Devanagari and
    no ASCII letters at all. English must keep non-ASCII characters under 30%.
    """
    text = significant_chars(" ".join(q.text() for q in questions))
    total = max(len(text), 1)

    if language is Language.KANNADA:
        if count_in_block(text, script_block(language)) == 0:
            raise QuizValidationError("No Kannada text found")
        limit = KANNADA_MATH_SCIENCE_MAX_ASCII_RATIO if math_science else KANNADA_MAX_ASCII_RATIO
        ratio = count_ascii_letters(text) / total
        if ratio >= limit:
            raise QuizValidationError(f"Too many English letters in Kannada quiz ({ratio:.2f} >= {limit:.2f})")
    elif language is Language.HINDI:
        if count_in_block(text, script_block(language)) == 0:
            raise QuizValidationError("No Hindi text found")
        letters = count_ascii_letters(text)
        if letters:
            raise QuizValidationError(f"Hindi quiz contains {letters} English letters")
    elif language is Language.ENGLISH:
        ratio = count_non_ascii(text) / total
        if ratio >= ENGLISH_MAX_NON_ASCII_RATIO:
            raise QuizValidationError(f"Too much non-English text in English quiz ({ratio:.2f})")
    else:
        raise ValueError(f"Unknown language: {language}")


def validate_quiz(
    payload: Dict[str, Any],
    language: Language,
    math_science: bool = False,
    min_questions: Optional[int] = None,
    max_questions: Optional[int] = None,
) -> List[QuizQuestion]:
    """
    Validate a decoded payload and return the accepted questions.

    Questions failing structural checks are dropped; fewer than
    ``min_questions`` survivors fails the quiz. Survivors beyond
    ``max_questions`` are cut.

    Raises:
        QuizValidationError: Structural or language-purity failure
    """
    min_questions = min_questions or config.MIN_QUESTION_COUNT
    max_questions = max_questions or config.TARGET_QUESTION_COUNT

    raw_questions = payload.get("questions") if isinstance(payload, dict) else None
    if not isinstance(raw_questions, list) or not raw_questions:
        raise QuizValidationError("No questions in response")

    questions = filter_questions(raw_questions)
    if len(questions) < min_questions:
        raise QuizValidationError(
            f"Only {len(questions)} valid questions of {len(raw_questions)} (need {min_questions})"
        )
    questions = questions[:max_questions]

    check_language_purity(questions, language, math_science)
    return questions
