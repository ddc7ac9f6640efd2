"""
Extracted-text quality checks and generation strategy selection.

PDF extraction of Indic textbooks sometimes maps glyphs through the wrong
font table and produces Latin-looking garbage. The classifier below is a
best-effort heuristic over a sample of the text: it flags the obvious cases
and accepts occasional false positives or negatives.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from config import config
from language import (
    MOJIBAKE_BLOCK,
    Language,
    count_ascii_letters,
    count_in_block,
    script_block,
    significant_chars,
)

logger = logging.getLogger(__name__)

MOJIBAKE_RATIO_THRESHOLD = 0.10
MIN_SCRIPT_RATIO = 0.05
ASCII_LETTER_FLOOR = 50


class GenerationStrategy(str, enum.Enum):
    TOPIC = "topic"
    CONTENT = "content"


@dataclass(frozen=True)
class GenerationSource:
    strategy: GenerationStrategy
    excerpt: Optional[str] = None


def is_content_corrupted(text: Optional[str], language: Language, sample_size: int = None) -> bool:
    """
    Decide whether extracted chapter text looks garbled.

    English text is never classified. For Kannada and Hindi the first
    ``sample_size`` characters are inspected: corrupted if more than 10% of
    them fall in the mojibake Latin range, or if under 5% are in the target
    script while there are more than 50 plain ASCII letters.
    """
    if language is Language.ENGLISH:
        return False
    if not text:
        return False

    sample_size = sample_size or config.QUALITY_SAMPLE_SIZE
    sample = significant_chars(text[:sample_size])
    if not sample:
        return False

    total = len(sample)
    script_ratio = count_in_block(sample, script_block(language)) / total
    mojibake_ratio = count_in_block(sample, MOJIBAKE_BLOCK) / total
    ascii_letters = count_ascii_letters(sample)

    corrupted = mojibake_ratio > MOJIBAKE_RATIO_THRESHOLD or (
        script_ratio < MIN_SCRIPT_RATIO and ascii_letters > ASCII_LETTER_FLOOR
    )
    logger.info(
        f"Content quality for {language.value}: script={script_ratio:.3f} "
        f"mojibake={mojibake_ratio:.3f} ascii_letters={ascii_letters} corrupted={corrupted}"
    )
    return corrupted


def select_strategy(text: Optional[str], corrupted: bool) -> GenerationSource:
    """
    Pick topic-based generation when the text is missing, too short or
    corrupted; otherwise content-based with the text cut to the budget.
    """
    content = (text or "").strip()
    if corrupted or len(content) < config.MIN_CONTENT_LENGTH:
        reason = "corrupted" if corrupted else f"{len(content)} chars of content"
        logger.info(f"Using topic-based generation ({reason})")
        return GenerationSource(GenerationStrategy.TOPIC)

    excerpt = content[:config.CONTENT_CHAR_BUDGET]
    logger.info(f"Using content-based generation with {len(excerpt)} of {len(content)} chars")
    return GenerationSource(GenerationStrategy.CONTENT, excerpt)
