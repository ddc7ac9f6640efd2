"""
Error taxonomy for chapter quiz generation.
"""
from typing import Any, Dict, List, Optional


class QuizGenerationError(Exception):
    """Base class for every failure surfaced by the quiz pipeline."""


class AccessDenied(QuizGenerationError):
    def __init__(self, chapter_id: int, user_id: Optional[str] = None):
        self.chapter_id = chapter_id
        self.user_id = user_id
        super().__init__(f"Access denied to chapter {chapter_id}")


class ChapterNotFound(QuizGenerationError):
    def __init__(self, chapter_id: int):
        self.chapter_id = chapter_id
        super().__init__(f"Chapter {chapter_id} not found")


class ModelCallFailed(QuizGenerationError):
    """Transport error, non-2xx or timeout from the model service. Never retried."""


class GenerationValidationFailed(QuizGenerationError):
    """Every attempt produced an unparseable or rejected response."""

    def __init__(self, attempts: int, reasons: List[str]):
        self.attempts = attempts
        self.reasons = reasons
        last = reasons[-1] if reasons else "unknown"
        super().__init__(f"Quiz generation failed after {attempts} attempts. Last error: {last}")


class PersistenceFailed(QuizGenerationError):
    """A valid quiz was produced but could not be stored."""

    def __init__(self, chapter_id: int, questions: List[Dict[str, Any]], cause: Exception):
        self.chapter_id = chapter_id
        self.questions = questions
        self.cause = cause
        super().__init__(f"Failed to save quiz for chapter {chapter_id}: {type(cause).__name__}: {cause}")


class RetryableGenerationError(Exception):
    """Raised inside an attempt; consumed by the retry loop."""


class QuizParseError(RetryableGenerationError):
    pass


class QuizValidationError(RetryableGenerationError):
    pass


class QuizNotFound(QuizGenerationError):
    def __init__(self, quiz_id: int):
        self.quiz_id = quiz_id
        super().__init__(f"Quiz {quiz_id} not found")
