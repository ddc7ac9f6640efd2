"""
Prompt assembly for chapter quiz generation.

Each build draws a fresh seed, a shuffled subset of question archetypes and a
shuffled answer key so that repeated generations (and retries) differ and the
model does not park every correct answer at index 0.
"""
import random
from dataclasses import dataclass, field
from typing import List, Optional

from config import config
from content_quality import GenerationSource, GenerationStrategy
from language import Language

QUESTION_TYPES = ["conceptual", "factual", "application-based", "analytical", "comparative"]
QUESTION_TYPES_PER_QUIZ = 3

OUTPUT_CONTRACT = """OUTPUT FORMAT (mandatory):
- Exactly {count} questions.
- Each question has exactly 4 non-empty options.
- "correctAnswer" is the zero-based index (0, 1, 2 or 3) of the correct option.
- Spread correct answers across 0-3; do NOT put most answers at the same index.
  Use this answer key, in order: {answer_key}
- Return ONE JSON object and nothing else: no markdown fences, no commentary.

{{"questions":[{{"question":"{sample_question}","options":["{o1}","{o2}","{o3}","{o4}"],"correctAnswer":2}}]}}"""

KANNADA_RULES = """LANGUAGE: STRICTLY KANNADA (ಕನ್ನಡ) ONLY
- Questions and options MUST be written in Kannada script (U+0C80-U+0CFF).
- Do NOT use English words or Latin letters.{exception}
- If the source material is in English, translate the content into Kannada."""

HINDI_RULES = """LANGUAGE: STRICTLY HINDI (हिन्दी) ONLY
- Questions and options MUST be written in Devanagari script (U+0900-U+097F).
- Do NOT use ANY English letters, not even for symbols, units or variable names.
- Write numbers and formulas in words or Devanagari digits.
- If the source material is in English, translate the content into Hindi."""

ENGLISH_RULES = """LANGUAGE: STRICTLY ENGLISH
- Questions and options MUST be in English.
- Do NOT include Kannada or Hindi text."""

MATH_SCIENCE_EXCEPTION = """
- Exception for this mathematics/science subject: short Latin variable names,
  units and formulas (e.g. x, y, H2O, m/s) are allowed inside Kannada sentences.
  Everything else stays in Kannada."""

SAMPLE_QUESTIONS = {
    Language.KANNADA: ("ಕನ್ನಡ ಪ್ರಶ್ನೆ?", "ಆಯ್ಕೆ ೧", "ಆಯ್ಕೆ ೨", "ಆಯ್ಕೆ ೩", "ಆಯ್ಕೆ ೪"),
    Language.HINDI: ("हिंदी प्रश्न?", "विकल्प १", "विकल्प २", "विकल्प ३", "विकल्प ४"),
    Language.ENGLISH: ("Question?", "Option A", "Option B", "Option C", "Option D"),
}

TOPIC_INSTRUCTIONS = """The chapter text is not available. Use your knowledge of the school
curriculum to write questions about the chapter "{chapter}" of the subject "{subject}".
Stay within what a school textbook chapter with this title would teach."""

CONTENT_INSTRUCTIONS = """Base every question only on the facts in the chapter content below.
Chapter: "{chapter}" (subject: "{subject}")

CHAPTER CONTENT:
{excerpt}"""

TOPIC_SOURCE_RULE = "SOURCE: no chapter text is supplied. Rely on your curriculum knowledge of the named chapter."
CONTENT_SOURCE_RULE = "SOURCE: use ONLY the supplied chapter excerpt. Do not add facts that are not in it."


@dataclass
class QuizPrompt:
    system: str
    user: str
    seed: int
    question_types: List[str] = field(default_factory=list)
    answer_key: List[int] = field(default_factory=list)


def language_rules(language: Language, math_science: bool) -> str:
    if language is Language.KANNADA:
        return KANNADA_RULES.format(exception=MATH_SCIENCE_EXCEPTION if math_science else "")
    if language is Language.HINDI:
        return HINDI_RULES
    if language is Language.ENGLISH:
        return ENGLISH_RULES
    raise ValueError(f"Unknown language: {language}")


def shuffled_answer_key(rng: random.Random, count: int) -> List[int]:
    """A balanced sequence of answer indices in random order."""
    key = [i % 4 for i in range(count)]
    rng.shuffle(key)
    return key


def build_prompt(
    *,
    language: Language,
    source: GenerationSource,
    subject_name: str,
    chapter_name: str,
    math_science: bool = False,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> QuizPrompt:
    """
    Build the system and user messages for one generation attempt.

    Args:
        language: Target language of the quiz
        source: Chosen strategy and, for content-based, the excerpt
        subject_name: Subject display name
        chapter_name: Chapter display name
        math_science: Whether embedded formulas are tolerated
        count: Number of questions to ask for
        rng: Random source; a fresh one is used when omitted

    Returns:
        QuizPrompt with messages and the randomization that went into them
    """
    rng = rng or random.Random()
    count = count or config.TARGET_QUESTION_COUNT

    seed = rng.randint(0, 999_999)
    question_types = rng.sample(QUESTION_TYPES, QUESTION_TYPES_PER_QUIZ)
    answer_key = shuffled_answer_key(rng, count)

    sample = SAMPLE_QUESTIONS[language]
    contract = OUTPUT_CONTRACT.format(
        count=count,
        answer_key=", ".join(str(i) for i in answer_key),
        sample_question=sample[0],
        o1=sample[1],
        o2=sample[2],
        o3=sample[3],
        o4=sample[4],
    )

    if source.strategy is GenerationStrategy.TOPIC:
        source_rule = TOPIC_SOURCE_RULE
        body = TOPIC_INSTRUCTIONS.format(chapter=chapter_name, subject=subject_name)
    elif source.strategy is GenerationStrategy.CONTENT:
        source_rule = CONTENT_SOURCE_RULE
        body = CONTENT_INSTRUCTIONS.format(chapter=chapter_name, subject=subject_name, excerpt=source.excerpt or "")
    else:
        raise ValueError(f"Unknown strategy: {source.strategy}")

    system = "\n\n".join([
        f"You are a quiz generator for school students. Generate exactly {count} UNIQUE "
        f"multiple-choice questions for a textbook chapter.",
        language_rules(language, math_science),
        source_rule,
        f"VARIETY: random seed {seed}. Focus on these question types: {', '.join(question_types)}. "
        f"Cover different parts of the chapter and avoid repeating earlier quizzes.",
        contract,
    ])

    user = f"Random variation: {seed}\nGenerate a fresh quiz of {count} questions.\n\n{body}"
    return QuizPrompt(system=system, user=user, seed=seed, question_types=question_types, answer_key=answer_key)
