from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import CamelModel


class OptionCreate(CamelModel):
    text: str = Field(min_length=1)


class QuestionCreate(CamelModel):
    text: str = Field(min_length=1)
    correct_answer: str = Field(min_length=1)
    options: List[OptionCreate] = Field(default_factory=list)


class QuizCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: float = Field(default=0.0, ge=0)
    questions: List[QuestionCreate] = Field(min_length=1)


class QuestionOperation(str, Enum):
    REPLACE = "replace"
    ADD = "add"


class QuizUpdate(CamelModel):
    """Partial update; omitted fields are left untouched."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    questions: Optional[List[QuestionCreate]] = None
    operation: Optional[QuestionOperation] = None


class AnswerSubmit(CamelModel):
    question_id: int
    answer_id: Optional[str] = None
    answer: Optional[str] = None

    @field_validator("answer_id", "answer", mode="before")
    @classmethod
    def stringify(cls, v):
        # option ids arrive as numbers, free-text answers as strings
        if v is None or isinstance(v, str):
            return v
        return str(v)


class QuizSubmit(CamelModel):
    answers: List[AnswerSubmit]
