import random
from collections import Counter

import pytest

from content_quality import GenerationSource, GenerationStrategy
from language import Language
from prompt_builder import QUESTION_TYPES, build_prompt, shuffled_answer_key

CONTENT = GenerationSource(GenerationStrategy.CONTENT, "Plants make food by photosynthesis.")
TOPIC = GenerationSource(GenerationStrategy.TOPIC)


def _build(language=Language.ENGLISH, source=CONTENT, math_science=False, seed=7):
    return build_prompt(
        language=language,
        source=source,
        subject_name="Science",
        chapter_name="Life Processes",
        math_science=math_science,
        rng=random.Random(seed),
    )


def test_output_contract_is_stated():
    prompt = _build()
    assert "Exactly 15 questions" in prompt.system
    assert "exactly 4 non-empty options" in prompt.system
    assert '"questions"' in prompt.system
    assert "no markdown" in prompt.system


def test_answer_key_is_balanced_and_embedded():
    prompt = _build()
    assert len(prompt.answer_key) == 15
    counts = Counter(prompt.answer_key)
    assert set(counts) == {0, 1, 2, 3}
    assert max(counts.values()) - min(counts.values()) <= 1
    assert ", ".join(str(i) for i in prompt.answer_key) in prompt.system


def test_seed_and_question_types_are_in_prompt():
    prompt = _build()
    assert str(prompt.seed) in prompt.system
    assert str(prompt.seed) in prompt.user
    assert len(prompt.question_types) == 3
    assert set(prompt.question_types) <= set(QUESTION_TYPES)
    for question_type in prompt.question_types:
        assert question_type in prompt.system


def test_successive_builds_are_randomized():
    rng = random.Random(1)
    prompts = [
        build_prompt(language=Language.ENGLISH, source=CONTENT, subject_name="s", chapter_name="c", rng=rng)
        for _ in range(3)
    ]
    assert len({p.seed for p in prompts}) == 3
    assert len({p.system for p in prompts}) == 3


def test_content_strategy_embeds_excerpt():
    prompt = _build(source=CONTENT)
    assert "Plants make food by photosynthesis." in prompt.user
    assert "CHAPTER CONTENT" in prompt.user


def test_topic_strategy_names_chapter_without_excerpt():
    prompt = _build(source=TOPIC)
    assert "Life Processes" in prompt.user
    assert "Science" in prompt.user
    assert "CHAPTER CONTENT" not in prompt.user


def test_system_message_states_the_source():
    topic = _build(source=TOPIC)
    content = _build(source=CONTENT)
    assert "curriculum knowledge" in topic.system
    assert "ONLY the supplied chapter excerpt" not in topic.system
    assert "ONLY the supplied chapter excerpt" in content.system
    assert "curriculum knowledge" not in content.system


def test_kannada_rules_and_math_exception():
    plain = _build(language=Language.KANNADA)
    assert "KANNADA" in plain.system
    assert "Exception" not in plain.system
    math = _build(language=Language.KANNADA, math_science=True)
    assert "Exception for this mathematics/science subject" in math.system


def test_hindi_rules_have_no_latin_exception():
    prompt = _build(language=Language.HINDI, math_science=True)
    assert "Devanagari" in prompt.system
    assert "Do NOT use ANY English letters" in prompt.system
    assert "Exception" not in prompt.system


def test_english_rules():
    prompt = _build(language=Language.ENGLISH)
    assert "STRICTLY ENGLISH" in prompt.system


def test_braces_in_excerpt_are_kept_verbatim():
    source = GenerationSource(GenerationStrategy.CONTENT, "Set notation {1, 2, 3} and {x}")
    prompt = _build(source=source)
    assert "{1, 2, 3} and {x}" in prompt.user


@pytest.mark.parametrize("count", [4, 10, 15])
def test_shuffled_answer_key_covers_indices(count):
    key = shuffled_answer_key(random.Random(0), count)
    assert len(key) == count
    assert set(key) == {0, 1, 2, 3}
