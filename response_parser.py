"""
Decoding of model responses into a ``{"questions": [...]}`` payload.

``strict_decode`` handles the normal case. ``recover_partial`` salvages
responses cut off mid-stream by pulling out every complete question object.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

from errors import QuizParseError

logger = logging.getLogger(__name__)

MIN_RECOVERED_QUESTIONS = 10

_JSON_STRING = r'"(?:[^"\\]|\\.)*"'
QUESTION_PATTERN = re.compile(
    r'\{\s*"question"\s*:\s*' + _JSON_STRING
    + r'\s*,\s*"options"\s*:\s*\[\s*'
    + r"\s*,\s*".join([_JSON_STRING] * 4)
    + r'\s*\]\s*,\s*"correctAnswer"\s*:\s*-?\d+(?:\.\d+)?\s*\}',
    re.DOTALL,
)


def strip_code_fences(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r"```(?:json)?\s*", "", text, flags=re.IGNORECASE)
    return text.strip()


def strict_decode(text: str) -> Optional[Dict[str, Any]]:
    """Parse the whole response as JSON. None if it is not a JSON object."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return data


def recover_partial(text: str, min_questions: int = MIN_RECOVERED_QUESTIONS) -> Optional[Dict[str, Any]]:
    """
    Collect every well-formed question object in ``text``.

    Returns a payload only when at least ``min_questions`` were recovered.
    """
    questions = []
    for match in QUESTION_PATTERN.finditer(text or ""):
        try:
            questions.append(json.loads(match.group(0)))
        except json.JSONDecodeError:
            continue

    if len(questions) < min_questions:
        logger.warning(f"Partial recovery found only {len(questions)} questions (need {min_questions})")
        return None

    logger.info(f"Recovered {len(questions)} complete questions from malformed response")
    return {"questions": questions}


def parse_quiz_response(text: str) -> Dict[str, Any]:
    """
    Decode a model response, falling back to partial recovery.

    Raises:
        QuizParseError: Neither path produced a usable payload
    """
    data = strict_decode(text)
    if data is not None:
        return data

    logger.info("Strict JSON parse failed, attempting recovery")
    data = recover_partial(strip_code_fences(text))
    if data is not None:
        return data

    preview = (text or "")[:200].replace("\n", " ")
    raise QuizParseError(f"Could not parse quiz JSON (length={len(text or '')}): {preview!r}")
