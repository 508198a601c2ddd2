"""Leaderboard schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """One ranked completed attempt."""

    rank: int
    attempt_id: uuid.UUID
    user_id: uuid.UUID
    username: str
    quiz_id: uuid.UUID
    score: int
    percentage: int
    time_taken: int
    completed_at: datetime | None = None


class QuizRef(BaseModel):
    id: uuid.UUID
    title: str

    model_config = {"from_attributes": True}


class QuizLeaderboard(BaseModel):
    """GET /api/leaderboard/quiz/{id}"""

    quiz: QuizRef
    entries: list[LeaderboardEntry]
