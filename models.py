from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(alias="correctAnswer", ge=0, le=3, strict=True)

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question is blank")
        return value

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, value: List[str]) -> List[str]:
        if any(not option.strip() for option in value):
            raise ValueError("blank option")
        return value

    def text(self) -> str:
        return " ".join([self.question, *self.options])


class QuizPayload(BaseModel):
    questions: List[QuizQuestion]


class GenerateQuizBody(BaseModel):
    regenerate: bool = False


class SubmitQuizBody(BaseModel):
    answers: List[Optional[int]]
    started_at: Optional[datetime] = None
