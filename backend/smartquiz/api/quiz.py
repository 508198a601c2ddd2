"""Quiz browsing and authoring routes.

Players only ever see published, public quizzes and never the correct
answers; authors manage their own quizzes through the private endpoints.
"""

import logging
import math

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import String, column, exists, func, or_
from sqlalchemy.orm import Session

from smartquiz.api.deps import clamp_limit, get_current_user, parse_id
from smartquiz.db.models import DifficultyEnum, Quiz, User
from smartquiz.db.session import get_db
from smartquiz.schemas.common import MessageResponse, Pagination
from smartquiz.schemas.quiz import (
    Difficulty,
    PublishRequest,
    QuestionIn,
    QuizCreate,
    QuizList,
    QuizPublic,
    QuizRead,
    QuizUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


# ── helpers ───────────────────────────────────────────────────────────────────


def _check_questions(questions: list[QuestionIn]) -> list[dict]:
    """Validate authored questions and return them as plain dicts."""
    if not questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Quiz must have at least one question",
        )
    for i, q in enumerate(questions, start=1):
        if not q.question_text.strip() or len(q.options) < 2:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Question {i} is invalid",
            )
        if not 0 <= q.correct_answer < len(q.options):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Question {i} has invalid correct answer index",
            )
    return [q.model_dump() for q in questions]


def _tag_contains(db: Session, search: str):
    """EXISTS clause matching *search* against each tag on its own.

    Tags are unpacked with the dialect's JSON set-returning function so the
    match sees the decoded strings, not the serialised array.
    """
    if db.get_bind().dialect.name == "postgresql":
        elements = func.json_array_elements_text(Quiz.tags)
    else:
        elements = func.json_each(Quiz.tags)
    tag = elements.table_valued(column("value", String))
    return exists().where(tag.c.value.icontains(search, autoescape=True))


def _get_owned_quiz(db: Session, quiz_id: str, user: User, action: str) -> Quiz:
    quiz = db.get(Quiz, parse_id(quiz_id, "quiz"))
    if quiz is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    if quiz.author_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own quizzes",
        )
    return quiz


# ── Public ────────────────────────────────────────────────────────────────────


@router.get("/", response_model=QuizList)
def list_quizzes(
    category: str | None = None,
    difficulty: Difficulty | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
):
    """List published public quizzes with optional filters and pagination."""
    page = max(1, page)
    limit = clamp_limit(limit)

    query = db.query(Quiz).filter(Quiz.is_published.is_(True), Quiz.is_public.is_(True))
    if category:
        query = query.filter(Quiz.category == category)
    if difficulty:
        query = query.filter(Quiz.difficulty == DifficultyEnum(difficulty.value))
    if search:
        query = query.filter(
            or_(
                Quiz.title.icontains(search, autoescape=True),
                Quiz.description.icontains(search, autoescape=True),
                _tag_contains(db, search),
            )
        )

    total = query.count()
    skip = (page - 1) * limit
    quizzes = (
        query.order_by(Quiz.created_at.desc()).offset(skip).limit(limit).all()
    )

    return QuizList(
        quizzes=[QuizPublic.model_validate(q) for q in quizzes],
        pagination=Pagination(
            current_page=page,
            total_pages=max(1, math.ceil(total / limit)),
            total_items=total,
            has_next=skip + len(quizzes) < total,
            has_prev=page > 1,
        ),
    )


@router.get("/my-quizzes", response_model=list[QuizRead])
def my_quizzes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Every quiz the caller has authored, answers included."""
    return (
        db.query(Quiz)
        .filter(Quiz.author_id == current_user.id)
        .order_by(Quiz.created_at.desc())
        .all()
    )


@router.get("/{quiz_id}", response_model=QuizPublic)
def get_quiz(quiz_id: str, db: Session = Depends(get_db)):
    """Public view of one quiz."""
    quiz = db.get(Quiz, parse_id(quiz_id, "quiz"))
    if quiz is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    if not quiz.is_published or not quiz.is_public:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Quiz is not available"
        )
    return quiz


# ── Authoring ─────────────────────────────────────────────────────────────────


@router.post("/", response_model=QuizRead, status_code=status.HTTP_201_CREATED)
def create_quiz(
    body: QuizCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new, unpublished quiz owned by the caller."""
    if not (body.title.strip() and body.description.strip() and body.category.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All required fields must be provided",
        )
    questions = _check_questions(body.questions)

    quiz = Quiz(
        title=body.title,
        description=body.description,
        category=body.category,
        difficulty=DifficultyEnum(body.difficulty.value),
        time_limit=body.time_limit,
        questions=questions,
        author_id=current_user.id,
        tags=body.tags,
        is_published=False,
        is_public=True,
    )
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info("User %s created quiz %s", current_user.id, quiz.id)
    return quiz


@router.put("/{quiz_id}", response_model=QuizRead)
def update_quiz(
    quiz_id: str,
    body: QuizUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit an owned quiz. Published quizzes with attempts are frozen."""
    quiz = _get_owned_quiz(db, quiz_id, current_user, "edit")
    if quiz.is_published and quiz.total_attempts > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot edit published quiz that has attempts",
        )

    changes = body.model_dump(exclude_unset=True)
    if changes.get("questions") is not None:
        changes["questions"] = _check_questions(body.questions or [])
    if changes.get("difficulty") is not None:
        changes["difficulty"] = DifficultyEnum(body.difficulty.value)
    for field, value in changes.items():
        if value is None:
            continue
        setattr(quiz, field, value)

    db.commit()
    db.refresh(quiz)
    return quiz


@router.delete("/{quiz_id}", response_model=MessageResponse)
def delete_quiz(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete an owned quiz that nobody has completed yet."""
    quiz = _get_owned_quiz(db, quiz_id, current_user, "delete")
    if quiz.total_attempts > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete quiz that has attempts",
        )
    db.delete(quiz)
    db.commit()
    logger.info("User %s deleted quiz %s", current_user.id, quiz_id)
    return MessageResponse(message="Quiz deleted successfully")


@router.post("/{quiz_id}/publish", response_model=QuizRead)
def publish_quiz(
    quiz_id: str,
    body: PublishRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Publish or unpublish an owned quiz."""
    quiz = _get_owned_quiz(db, quiz_id, current_user, "publish")
    quiz.is_published = body.is_published
    db.commit()
    db.refresh(quiz)
    logger.info(
        "Quiz %s %s", quiz.id, "published" if body.is_published else "unpublished"
    )
    return quiz
