"""Attempt schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from smartquiz.schemas.common import Pagination
from smartquiz.schemas.quiz import QuizPublic


class Feedback(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class AttemptStart(BaseModel):
    """POST /api/attempt/start"""

    quiz_id: str


class AnswerSubmit(BaseModel):
    """POST /api/attempt/{id}/answer. ``selected_option=-1`` means skipped / timed out."""

    question_index: int
    selected_option: int
    time_spent: int = Field(ge=0)  # seconds


class AnswerRead(BaseModel):
    question_index: int
    selected_option: int
    is_correct: bool
    points_earned: int
    time_spent: int
    explanation: str | None = None


class SnapshotQuestionRead(BaseModel):
    question_text: str
    options: list[str]
    correct_answer: int
    explanation: str | None = None
    points: int
    time_limit: int | None = None


class AttemptRead(BaseModel):
    """Stored attempt as returned to its owner."""

    id: uuid.UUID
    user_id: uuid.UUID
    quiz_id: uuid.UUID
    answers: list[AnswerRead] = []
    score: int
    total_possible_score: int
    percentage: int
    time_taken: int
    started_at: datetime
    completed_at: datetime | None = None
    is_completed: bool
    feedback: Feedback
    rank: int | None = None

    model_config = {"from_attributes": True}


class AttemptDetailRead(AttemptRead):
    """Attempt plus the questions it was scored against.

    The snapshot carries correct answers, so it is only included once the
    attempt is completed.
    """

    questions_snapshot: list[SnapshotQuestionRead] | None = None


class AttemptStarted(BaseModel):
    """POST /api/attempt/start: the attempt and the quiz without answers."""

    message: str
    attempt: AttemptRead
    quiz: QuizPublic


class AnswerResult(BaseModel):
    """POST /api/attempt/{id}/answer"""

    is_correct: bool
    points_earned: int
    correct_answer: int
    explanation: str | None = None


class BreakdownRow(BaseModel):
    question_index: int
    question_text: str | None = None
    options: list[str] = []
    selected_option: int
    correct_answer: int | None = None
    is_correct: bool
    points_earned: int
    points_available: int
    explanation: str = ""
    time_spent: int = 0


class AttemptResult(BaseModel):
    """POST /api/attempt/{id}/complete"""

    score: int
    total_possible_score: int
    percentage: int
    time_taken: int
    feedback: Feedback
    breakdown: list[BreakdownRow]


class AttemptList(BaseModel):
    """GET /api/attempt/my-attempts"""

    attempts: list[AttemptRead]
    pagination: Pagination
