"""SQLAlchemy ORM models for the quiz platform.

Tables
------
- users          – player / admin profiles, running stats and badges
- quizzes        – authored quizzes; questions are embedded as a JSON array
- quiz_attempts  – a user's run through a quiz, with answers and a frozen
                   copy of the questions taken when the attempt started
- refresh_tokens – issued refresh tokens, revocable

Embedded arrays (questions, answers, snapshot, badges) are replaced wholesale
on every write; never mutate them in place or the change will not be flushed.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from smartquiz.db.session import Base
from smartquiz.services.scoring import summarise_answers


# ── helpers ───────────────────────────────────────────────────────────────────


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# ── Enums (stored as VARCHAR via SQLAlchemy Enum) ─────────────────────────────


class RoleEnum(str, enum.Enum):
    ADMIN = "admin"
    PLAYER = "player"


class DifficultyEnum(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class FeedbackEnum(str, enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


# ── Validation limits ─────────────────────────────────────────────────────────

USERNAME_MIN, USERNAME_MAX = 3, 30
TITLE_MAX = 100
DESCRIPTION_MAX = 500
QUIZ_TIME_LIMIT_MIN, QUIZ_TIME_LIMIT_MAX = 1, 180  # minutes
QUESTIONS_MIN, QUESTIONS_MAX = 1, 100
OPTIONS_MIN, OPTIONS_MAX = 2, 6
QUESTION_TIME_LIMIT_MIN = 10  # seconds


# ── Users ─────────────────────────────────────────────────────────────────────


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    username: Mapped[str] = mapped_column(String(USERNAME_MAX), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[RoleEnum] = mapped_column(
        Enum(RoleEnum, name="role_enum", values_callable=_enum_values),
        default=RoleEnum.PLAYER,
        index=True,
    )
    avatar: Mapped[str] = mapped_column(String(1000), default="")
    join_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    total_quizzes_attempted: Mapped[int] = mapped_column(Integer, default=0)
    average_score: Mapped[float] = mapped_column(Float, default=0.0)
    highest_score: Mapped[float] = mapped_column(Float, default=0.0)
    badges: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    level: Mapped[int] = mapped_column(Integer, default=1)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    # relationships
    quizzes: Mapped[list["Quiz"]] = relationship(back_populates="author")
    attempts: Mapped[list["QuizAttempt"]] = relationship(back_populates="user")
    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @validates("username")
    def _validate_username(self, _key: str, value: str) -> str:
        value = (value or "").strip()
        if not USERNAME_MIN <= len(value) <= USERNAME_MAX:
            raise ValueError(
                f"Username must be between {USERNAME_MIN} and {USERNAME_MAX} characters long"
            )
        return value

    @validates("email")
    def _validate_email(self, _key: str, value: str) -> str:
        return (value or "").strip().lower()

    def has_badge(self, badge_id: str) -> bool:
        return any(b.get("id") == badge_id for b in self.badges or [])


# ── Quizzes ───────────────────────────────────────────────────────────────────


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX))
    description: Mapped[str] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100))
    difficulty: Mapped[DifficultyEnum] = mapped_column(
        Enum(DifficultyEnum, name="difficulty_enum", values_callable=_enum_values)
    )
    time_limit: Mapped[int] = mapped_column(Integer)  # minutes
    # [{question_text, options, correct_answer, explanation, points, time_limit}]
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id")
    )
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    total_questions: Mapped[int] = mapped_column(Integer, default=0)
    total_time: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    average_score: Mapped[float] = mapped_column(Float, default=0.0)
    total_attempts: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    author: Mapped["User"] = relationship(back_populates="quizzes")
    attempts: Mapped[list["QuizAttempt"]] = relationship(
        back_populates="quiz", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_quizzes_author_published", "author_id", "is_published"),
        Index("ix_quizzes_category_difficulty_public", "category", "difficulty", "is_public"),
    )

    @validates("title", "description", "category")
    def _validate_text(self, key: str, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError(f"Quiz {key} is required")
        limit = {"title": TITLE_MAX, "description": DESCRIPTION_MAX}.get(key)
        if limit and len(value) > limit:
            raise ValueError(f"Quiz {key} cannot exceed {limit} characters")
        return value

    @validates("time_limit")
    def _validate_time_limit(self, _key: str, value: int) -> int:
        if not QUIZ_TIME_LIMIT_MIN <= value <= QUIZ_TIME_LIMIT_MAX:
            raise ValueError(
                f"Time limit must be between {QUIZ_TIME_LIMIT_MIN} and "
                f"{QUIZ_TIME_LIMIT_MAX} minutes"
            )
        return value

    @validates("questions")
    def _validate_questions(self, _key: str, value: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not QUESTIONS_MIN <= len(value) <= QUESTIONS_MAX:
            raise ValueError(
                f"Quiz must have between {QUESTIONS_MIN} and {QUESTIONS_MAX} questions"
            )
        for i, q in enumerate(value, start=1):
            options = q.get("options") or []
            if not (q.get("question_text") or "").strip():
                raise ValueError(f"Question {i} is invalid")
            if not OPTIONS_MIN <= len(options) <= OPTIONS_MAX:
                raise ValueError(
                    f"Questions must have between {OPTIONS_MIN} and {OPTIONS_MAX} options"
                )
            if not 0 <= q.get("correct_answer", -1) < len(options):
                raise ValueError(f"Question {i} has invalid correct answer index")
            if q.get("points", 1) < 1:
                raise ValueError(f"Question {i} must be worth at least 1 point")
            limit = q.get("time_limit")
            if limit is not None and limit < QUESTION_TIME_LIMIT_MIN:
                raise ValueError(
                    f"Question {i} time limit must be at least {QUESTION_TIME_LIMIT_MIN} seconds"
                )
        return value


@event.listens_for(Quiz, "before_insert")
@event.listens_for(Quiz, "before_update")
def _quiz_totals(_mapper, _connection, quiz: Quiz) -> None:
    """Keep question count and total per-question time in step with the questions."""
    if quiz.questions is not None:
        quiz.total_questions = len(quiz.questions)
        quiz.total_time = sum(q.get("time_limit") or 0 for q in quiz.questions)


# ── Attempts ──────────────────────────────────────────────────────────────────


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id")
    )
    quiz_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quizzes.id")
    )
    # [{question_index, selected_option, is_correct, points_earned, time_spent, explanation}]
    answers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    questions_snapshot: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSON, nullable=True
    )
    score: Mapped[int] = mapped_column(Integer, default=0)
    total_possible_score: Mapped[int] = mapped_column(Integer, default=0)
    percentage: Mapped[int] = mapped_column(Integer, default=0)
    time_taken: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    feedback: Mapped[FeedbackEnum] = mapped_column(
        Enum(FeedbackEnum, name="feedback_enum", values_callable=_enum_values),
        default=FeedbackEnum.AVERAGE,
    )
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    user: Mapped["User"] = relationship(back_populates="attempts")
    quiz: Mapped["Quiz"] = relationship(back_populates="attempts")

    __table_args__ = (
        Index("ix_attempts_user_quiz", "user_id", "quiz_id"),
        Index("ix_attempts_quiz_score", "quiz_id", "score"),
        Index("ix_attempts_user_completed_at", "user_id", "completed_at"),
        Index("ix_attempts_completed", "is_completed", "completed_at"),
    )

    @validates("rank")
    def _validate_rank(self, _key: str, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("Rank must be at least 1")
        return value


@event.listens_for(QuizAttempt, "before_insert")
@event.listens_for(QuizAttempt, "before_update")
def _attempt_derived_fields(_mapper, _connection, attempt: QuizAttempt) -> None:
    """Recompute score, percentage, time taken and feedback from the answers."""
    if not attempt.answers and not attempt.is_completed:
        return
    summary = summarise_answers(attempt.answers or [], attempt.total_possible_score or 0)
    attempt.score = summary.score
    attempt.percentage = summary.percentage
    attempt.time_taken = summary.time_taken
    attempt.feedback = FeedbackEnum(summary.feedback)


# ── Refresh tokens ────────────────────────────────────────────────────────────


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), index=True
    )
    token: Mapped[str] = mapped_column(String(1024), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(100), nullable=True)

    user: Mapped["User"] = relationship(back_populates="refresh_tokens")
