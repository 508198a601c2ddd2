"""Leaderboard aggregation over completed attempts.

Ranking order, best first: higher score, then higher percentage, then less
time taken, then the most recently completed.  Only the columns that make up
a leaderboard row are selected; the JSON answer payloads never leave the
database.
"""

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from smartquiz.db.models import QuizAttempt, User

_ROW_COLUMNS = (
    QuizAttempt.id.label("attempt_id"),
    QuizAttempt.user_id,
    QuizAttempt.quiz_id,
    QuizAttempt.score,
    QuizAttempt.percentage,
    QuizAttempt.time_taken,
    QuizAttempt.completed_at,
)


def _ranking(cols) -> list:
    """ORDER BY terms for the leaderboard, over any source exposing the row columns."""
    return [
        cols.score.desc(),
        cols.percentage.desc(),
        cols.time_taken.asc(),
        cols.completed_at.desc(),
    ]


def _entry(rank: int, row) -> dict[str, Any]:
    return {
        "rank": rank,
        "attempt_id": row.attempt_id,
        "user_id": row.user_id,
        "username": row.username,
        "quiz_id": row.quiz_id,
        "score": row.score,
        "percentage": row.percentage,
        "time_taken": row.time_taken,
        "completed_at": row.completed_at,
    }


def global_leaderboard(db: Session, limit: int) -> list[dict[str, Any]]:
    """Best completed attempt per user, top *limit* users."""
    best_per_user = (
        select(
            *_ROW_COLUMNS,
            func.row_number()
            .over(partition_by=QuizAttempt.user_id, order_by=_ranking(QuizAttempt))
            .label("user_position"),
        )
        .where(QuizAttempt.is_completed.is_(True))
        .subquery()
    )
    stmt = (
        select(best_per_user, User.username)
        .join(User, User.id == best_per_user.c.user_id)
        .where(best_per_user.c.user_position == 1)
        .order_by(*_ranking(best_per_user.c))
        .limit(limit)
    )
    rows = db.execute(stmt).all()
    return [_entry(i, row) for i, row in enumerate(rows, start=1)]


def quiz_leaderboard(db: Session, quiz_id: uuid.UUID, limit: int) -> list[dict[str, Any]]:
    """Top *limit* completed attempts on one quiz; a user may appear more than once."""
    stmt = (
        select(*_ROW_COLUMNS, User.username)
        .join(User, User.id == QuizAttempt.user_id)
        .where(QuizAttempt.is_completed.is_(True), QuizAttempt.quiz_id == quiz_id)
        .order_by(*_ranking(QuizAttempt))
        .limit(limit)
    )
    rows = db.execute(stmt).all()
    return [_entry(i, row) for i, row in enumerate(rows, start=1)]
