"""Quiz schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from smartquiz.schemas.common import Pagination


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionIn(BaseModel):
    """One question as submitted by an author.

    Option count and answer index are range-checked by the route so that the
    error can name the offending question.
    """

    question_text: str = ""
    options: list[str] = []
    correct_answer: int
    explanation: str | None = None
    points: int = Field(default=1, ge=1)
    time_limit: int | None = Field(default=None, ge=10)  # seconds


class QuestionPublic(BaseModel):
    """Question as shown to a player, without the correct answer."""

    question_text: str
    options: list[str]
    explanation: str | None = None
    points: int = 1
    time_limit: int | None = None


class QuestionRead(QuestionPublic):
    """Question as shown to its author."""

    correct_answer: int


class QuizCreate(BaseModel):
    """POST /api/quiz"""

    title: str
    description: str
    category: str
    difficulty: Difficulty
    time_limit: int = Field(ge=1, le=180)  # minutes
    questions: list[QuestionIn]
    tags: list[str] = []


class QuizUpdate(BaseModel):
    """PUT /api/quiz/{id}: any subset of the authoring fields."""

    title: str | None = None
    description: str | None = None
    category: str | None = None
    difficulty: Difficulty | None = None
    time_limit: int | None = Field(default=None, ge=1, le=180)
    questions: list[QuestionIn] | None = None
    tags: list[str] | None = None
    is_public: bool | None = None


class PublishRequest(BaseModel):
    """POST /api/quiz/{id}/publish"""

    is_published: bool


class _QuizBase(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    category: str
    difficulty: Difficulty
    time_limit: int
    author_id: uuid.UUID
    is_published: bool
    is_public: bool
    tags: list[str] = []
    total_questions: int
    total_time: int
    average_score: float
    total_attempts: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuizPublic(_QuizBase):
    """Quiz as served to players."""

    questions: list[QuestionPublic]


class QuizRead(_QuizBase):
    """Quiz as served to its author, answers included."""

    questions: list[QuestionRead]


class QuizList(BaseModel):
    """GET /api/quiz"""

    quizzes: list[QuizPublic]
    pagination: Pagination
