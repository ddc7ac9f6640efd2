import asyncio
import logging
import random
from typing import List, Optional, Protocol, Tuple

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from config import config
from content_quality import GenerationSource
from errors import GenerationValidationFailed, ModelCallFailed, RetryableGenerationError
from language import Language
from models import QuizQuestion
from prompt_builder import build_prompt
from response_parser import parse_quiz_response
from validator import validate_quiz

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    async def complete(self, system: str, user: str, timeout: Optional[float] = None) -> str:
        ...


class GeminiQuizClient:
    """
    Single-shot JSON completion against a Gemini model.

    A missing API key, transport errors and timeouts surface as
    ModelCallFailed; this class never retries.
    """

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None,
                 timeout: Optional[float] = None, temperature: Optional[float] = None):
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise ModelCallFailed("No model API key configured. Set GEMINI_API_KEY or GOOGLE_API_KEY in .env")
        self.model_name = model_name or config.GEMINI_MODEL
        self.timeout = timeout or config.MODEL_TIMEOUT
        self.temperature = config.MODEL_TEMPERATURE if temperature is None else temperature
        genai.configure(api_key=self.api_key)

    async def complete(self, system: str, user: str, timeout: Optional[float] = None) -> str:
        timeout = timeout or self.timeout
        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system,
            generation_config={
                "response_mime_type": "application/json",
                "temperature": self.temperature,
            },
        )
        try:
            resp = await asyncio.wait_for(
                model.generate_content_async(user, request_options={"timeout": timeout}),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelCallFailed(f"Model {self.model_name} timed out after {timeout}s") from e
        except (google_exceptions.GoogleAPIError, OSError) as e:
            raise ModelCallFailed(f"Model {self.model_name} call failed: {type(e).__name__}: {e}") from e

        try:
            text = resp.text or ""
        except ValueError:
            # No text parts, e.g. a blocked candidate
            logger.warning(f"Model {self.model_name} returned no text parts")
            text = ""
        logger.info(f"Model response length: {len(text)}")
        return text


async def generate_questions(
    client: ModelClient,
    *,
    language: Language,
    source: GenerationSource,
    subject_name: str,
    chapter_name: str,
    math_science: bool = False,
    max_retries: Optional[int] = None,
    timeout: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[List[QuizQuestion], int]:
    """
    Build, call, parse and validate until a quiz is accepted.

    Parse and validation failures are retried up to ``max_retries`` times with
    a freshly randomized prompt. ModelCallFailed propagates immediately.

    Returns:
        (accepted questions, number of attempts used)

    Raises:
        ModelCallFailed: The model service could not be reached
        GenerationValidationFailed: Every attempt was rejected
    """
    max_retries = config.MAX_GENERATION_RETRIES if max_retries is None else max_retries
    rng = rng or random.Random()
    attempts = max_retries + 1
    reasons: List[str] = []

    for attempt in range(1, attempts + 1):
        prompt = build_prompt(
            language=language,
            source=source,
            subject_name=subject_name,
            chapter_name=chapter_name,
            math_science=math_science,
            rng=rng,
        )
        logger.info(
            f"Attempt {attempt}/{attempts}: language={language.value} strategy={source.strategy.value} "
            f"seed={prompt.seed} types={prompt.question_types}"
        )
        text = await client.complete(prompt.system, prompt.user, timeout=timeout)

        try:
            payload = parse_quiz_response(text)
            questions = validate_quiz(payload, language, math_science)
        except RetryableGenerationError as e:
            reasons.append(f"{type(e).__name__}: {e}")
            logger.warning(f"Attempt {attempt}/{attempts} rejected: {e}")
            continue

        logger.info(f"Attempt {attempt}/{attempts} accepted with {len(questions)} questions")
        return questions, attempt

    logger.error(f"All {attempts} attempts failed. Error summary: {'; '.join(reasons)}")
    raise GenerationValidationFailed(attempts, reasons)
