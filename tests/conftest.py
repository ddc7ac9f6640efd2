import asyncio
import json
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="chapter-quiz-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test_quiz.db')}"
os.environ["MODEL_TIMEOUT"] = "5"

import pytest  # noqa: E402

from database import Base, Chapter, SessionLocal, Subject, SubjectAccess, UserRole, engine  # noqa: E402

KANNADA_WORDS = ["ಸಸ್ಯ", "ಬೆಳಕು", "ನೀರು", "ಎಲೆ", "ಬೇರು", "ಹೂವು", "ಹಣ್ಣು", "ಬೀಜ"]
HINDI_WORDS = ["पौधा", "प्रकाश", "पानी", "पत्ती", "जड़", "फूल", "फल", "बीज"]
ENGLISH_WORDS = ["plant", "light", "water", "leaf", "root", "flower", "fruit", "seed"]

MOJIBAKE_TEXT = "ÃÂ²Ã¤Â¸ Ã¦Â±Ã°Â² ¢Ã¥Ã¸Â¹ " * 60

WORDS = {"kannada": KANNADA_WORDS, "hindi": HINDI_WORDS, "english": ENGLISH_WORDS}


def make_question(index: int, language: str = "english", correct: int = None) -> dict:
    words = WORDS[language]
    stem = " ".join(words[(index + k) % len(words)] for k in range(3))
    return {
        "question": f"{stem} {index}?",
        "options": [f"{words[(index + k) % len(words)]} {k}" for k in range(4)],
        "correctAnswer": index % 4 if correct is None else correct,
    }


def make_questions(count: int, language: str = "english") -> list:
    return [make_question(i, language) for i in range(count)]


def quiz_json(count: int = 15, language: str = "english") -> str:
    return json.dumps({"questions": make_questions(count, language)}, ensure_ascii=False)


class FakeModelClient:
    """Returns scripted responses in order; an Exception entry is raised."""

    def __init__(self, responses, delay: float = 0):
        self.responses = list(responses)
        self.delay = delay
        self.calls = []

    async def complete(self, system, user, timeout=None):
        self.calls.append({"system": system, "user": user, "timeout": timeout})
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_chapter(db):
    def _make_chapter(
        subject_name="Mathematics",
        medium="English medium",
        content="",
        chapter_name="Real Numbers",
        chapter_name_native=None,
        subject_name_native=None,
    ):
        subject = Subject(name=subject_name, name_native=subject_name_native, medium=medium)
        db.add(subject)
        db.flush()
        chapter = Chapter(
            subject_id=subject.id,
            name=chapter_name,
            name_native=chapter_name_native,
            content_extracted=content,
        )
        db.add(chapter)
        db.commit()
        return chapter

    return _make_chapter


@pytest.fixture
def grant(db):
    def _grant(user_id, subject_id=None, role=None):
        if role:
            db.add(UserRole(user_id=user_id, role=role))
        if subject_id is not None:
            db.add(SubjectAccess(student_id=user_id, subject_id=subject_id))
        db.commit()

    return _grant


def allow_all(chapter_id):
    return True
