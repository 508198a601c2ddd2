"""Profile, badge and statistics routes for the signed-in user."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from smartquiz.api.deps import get_current_user
from smartquiz.db.models import QuizAttempt, User
from smartquiz.db.session import get_db
from smartquiz.schemas.user import BadgeCreate, ProfileUpdate, UserRead, UserStats
from smartquiz.services.achievements import award_badge, make_badge
from smartquiz.services.scoring import round_half_up

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/profile", response_model=UserRead)
def get_profile(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.put("/profile", response_model=UserRead)
def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change username and/or avatar. Blank usernames are ignored."""
    if body.username is not None and body.username.strip():
        username = body.username.strip()
        taken = (
            db.query(User)
            .filter(User.username == username, User.id != current_user.id)
            .first()
        )
        if taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already taken",
            )
        current_user.username = username
    if body.avatar is not None:
        current_user.avatar = body.avatar
    db.commit()
    db.refresh(current_user)
    return current_user


@router.post("/badges", response_model=UserRead)
def add_badge(
    body: BadgeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Grant the caller a badge; granting one they already hold is a no-op."""
    if not body.id or not body.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Badge id and name are required",
        )
    badge = make_badge(body.id, body.name, body.description or "", body.icon or "🏅")
    if award_badge(current_user, badge):
        db.commit()
        db.refresh(current_user)
    return current_user


@router.get("/stats", response_model=UserStats)
def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dashboard figures computed from the caller's completed attempts."""
    percentages = [
        p
        for (p,) in db.query(QuizAttempt.percentage).filter(
            QuizAttempt.user_id == current_user.id,
            QuizAttempt.is_completed.is_(True),
        )
    ]
    average = round_half_up(sum(percentages) / len(percentages)) if percentages else 0
    return UserStats(
        attempts=len(percentages),
        average=average,
        highest=max(percentages, default=0),
        badges=len(current_user.badges or []),
        level=current_user.level,
        experience=current_user.experience,
    )
