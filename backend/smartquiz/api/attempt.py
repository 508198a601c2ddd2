"""Attempt lifecycle routes: start, answer question by question, complete.

Answers are judged against the snapshot of questions stored on the attempt
when it started, never against the live quiz.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from smartquiz.api.deps import get_current_user, parse_id
from smartquiz.db.models import Quiz, QuizAttempt, User
from smartquiz.db.session import get_db
from smartquiz.schemas.attempt import (
    AnswerResult,
    AnswerSubmit,
    AttemptDetailRead,
    AttemptList,
    AttemptRead,
    AttemptResult,
    AttemptStart,
    AttemptStarted,
)
from smartquiz.schemas.common import Pagination
from smartquiz.schemas.quiz import QuizPublic
from smartquiz.services.achievements import record_completion
from smartquiz.services.scoring import (
    SKIPPED,
    build_breakdown,
    grade_answer,
    snapshot_questions,
    total_points,
    upsert_answer,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _public_quiz(quiz: Quiz) -> QuizPublic:
    """Quiz payload for a player mid-attempt."""
    return QuizPublic.model_validate(quiz)


def _get_own_attempt(db: Session, attempt_id: str, user: User, action: str) -> QuizAttempt:
    attempt = db.get(QuizAttempt, parse_id(attempt_id, "attempt"))
    if attempt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attempt not found")
    if attempt.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own attempts",
        )
    return attempt


@router.post("/start", response_model=AttemptStarted, status_code=status.HTTP_201_CREATED)
def start_attempt(
    body: AttemptStart,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start an attempt on a published quiz, or resume the caller's open one."""
    if not body.quiz_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Quiz ID is required"
        )
    quiz = db.get(Quiz, parse_id(body.quiz_id, "quiz"))
    if quiz is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    if not quiz.is_published:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Quiz is not published"
        )

    existing = (
        db.query(QuizAttempt)
        .filter(
            QuizAttempt.user_id == current_user.id,
            QuizAttempt.quiz_id == quiz.id,
            QuizAttempt.is_completed.is_(False),
        )
        .first()
    )
    if existing is not None:
        response.status_code = status.HTTP_200_OK
        return AttemptStarted(
            message="Resuming existing attempt",
            attempt=AttemptRead.model_validate(existing),
            quiz=_public_quiz(quiz),
        )

    snapshot = snapshot_questions(quiz.questions or [])
    attempt = QuizAttempt(
        user_id=current_user.id,
        quiz_id=quiz.id,
        answers=[],
        questions_snapshot=snapshot,
        score=0,
        total_possible_score=total_points(snapshot),
        percentage=0,
        time_taken=0,
        started_at=datetime.now(timezone.utc),
        is_completed=False,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    logger.info("User %s started attempt %s on quiz %s", current_user.id, attempt.id, quiz.id)

    return AttemptStarted(
        message="Quiz attempt started",
        attempt=AttemptRead.model_validate(attempt),
        quiz=_public_quiz(quiz),
    )


@router.post("/{attempt_id}/answer", response_model=AnswerResult)
def submit_answer(
    attempt_id: str,
    body: AnswerSubmit,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record (or replace) the answer to one question and grade it."""
    attempt = _get_own_attempt(db, attempt_id, current_user, "answer questions for")
    if attempt.is_completed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot answer questions for completed attempts",
        )

    snapshot = attempt.questions_snapshot or []
    q_index = body.question_index
    if not 0 <= q_index < len(snapshot):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid question index"
        )
    question = snapshot[q_index]
    options = question.get("options")
    if not isinstance(options, list) or len(options) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Question options not available",
        )
    selected = body.selected_option
    if selected != SKIPPED and not 0 <= selected < len(options):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid selected option index",
        )

    answer = grade_answer(question, q_index, selected, body.time_spent)
    attempt.answers = upsert_answer(attempt.answers or [], answer)
    db.commit()

    return AnswerResult(
        is_correct=answer["is_correct"],
        points_earned=answer["points_earned"],
        correct_answer=question["correct_answer"],
        explanation=question.get("explanation"),
    )


@router.post("/{attempt_id}/complete", response_model=AttemptResult)
def complete_attempt(
    attempt_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Close an attempt, fix its score and fold it into the running statistics."""
    attempt = _get_own_attempt(db, attempt_id, current_user, "complete")
    if attempt.is_completed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Attempt is already completed",
        )

    attempt.is_completed = True
    attempt.completed_at = datetime.now(timezone.utc)
    # Flushing runs the attempt hooks, which settle score / percentage / feedback.
    db.flush()

    quiz = db.get(Quiz, attempt.quiz_id)
    record_completion(current_user, quiz, attempt)
    db.commit()
    db.refresh(attempt)
    logger.info(
        "User %s completed attempt %s: %s/%s (%s%%)",
        current_user.id,
        attempt.id,
        attempt.score,
        attempt.total_possible_score,
        attempt.percentage,
    )

    return AttemptResult(
        score=attempt.score,
        total_possible_score=attempt.total_possible_score,
        percentage=attempt.percentage,
        time_taken=attempt.time_taken,
        feedback=attempt.feedback.value,
        breakdown=build_breakdown(attempt.answers or [], attempt.questions_snapshot or []),
    )


@router.get("/my-attempts", response_model=AttemptList)
def my_attempts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's attempts, newest first."""
    rows = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == current_user.id)
        .order_by(QuizAttempt.created_at.desc())
        .all()
    )
    return AttemptList(
        attempts=[AttemptRead.model_validate(a) for a in rows],
        pagination=Pagination(
            current_page=1,
            total_pages=1,
            total_items=len(rows),
            has_next=False,
            has_prev=False,
        ),
    )


@router.get("/{attempt_id}", response_model=AttemptDetailRead)
def get_attempt(
    attempt_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One of the caller's attempts; the question snapshot is shown once completed."""
    attempt = _get_own_attempt(db, attempt_id, current_user, "view")
    detail = AttemptDetailRead.model_validate(attempt)
    if not attempt.is_completed:
        detail.questions_snapshot = None
    return detail
