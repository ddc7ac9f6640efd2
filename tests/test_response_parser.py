import json

import pytest

from errors import QuizParseError
from response_parser import parse_quiz_response, recover_partial, strict_decode, strip_code_fences
from validator import validate_quiz
from language import Language

from conftest import make_questions, quiz_json


def _truncated_response(complete: int) -> str:
    body = ",".join(json.dumps(q) for q in make_questions(complete))
    return '{"questions":[' + body + ',{"question":"Which part of the pla'


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'
    assert strip_code_fences("  {}  ") == "{}"


def test_strict_decode_plain_and_fenced():
    assert strict_decode(quiz_json(15))["questions"][0]["question"]
    assert len(strict_decode("```json\n" + quiz_json(12) + "\n```")["questions"]) == 12


def test_strict_decode_rejects_malformed_and_non_objects():
    assert strict_decode(_truncated_response(12)) is None
    assert strict_decode("[1, 2, 3]") is None
    assert strict_decode("") is None


def test_recover_partial_from_truncated_response():
    data = recover_partial(_truncated_response(12))
    assert data is not None
    assert len(data["questions"]) == 12
    assert data["questions"][0] == make_questions(1)[0]


def test_recover_partial_needs_ten_questions():
    assert recover_partial(_truncated_response(9)) is None


def test_recover_partial_handles_escaped_quotes_and_unicode():
    questions = [
        {"question": f'ಪ್ರಶ್ನೆ "{i}"?', "options": ["ಅ", "ಆ", "ಇ", "ಈ"], "correctAnswer": i % 4}
        for i in range(10)
    ]
    text = '{"questions":[' + ",".join(json.dumps(q, ensure_ascii=False) for q in questions) + ',{"quest'
    data = recover_partial(text)
    assert data["questions"] == questions


def test_recover_partial_skips_objects_with_wrong_option_count():
    bad = {"question": "Q?", "options": ["a", "b", "c"], "correctAnswer": 1}
    text = json.dumps(bad) + "," + _truncated_response(10)
    data = recover_partial(text)
    assert len(data["questions"]) == 10


def test_parse_quiz_response_prefers_strict_path():
    data = parse_quiz_response(quiz_json(15))
    assert len(data["questions"]) == 15


def test_parse_quiz_response_falls_back_and_validator_accepts():
    data = parse_quiz_response("```json\n" + _truncated_response(12))
    questions = validate_quiz(data, Language.ENGLISH)
    assert len(questions) == 12


def test_parse_quiz_response_raises_when_unrecoverable():
    with pytest.raises(QuizParseError):
        parse_quiz_response(_truncated_response(5))
    with pytest.raises(QuizParseError):
        parse_quiz_response("Sorry, I cannot help with that.")
