"""Public leaderboard routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from smartquiz.api.deps import clamp_limit, parse_id
from smartquiz.db.models import Quiz
from smartquiz.db.session import get_db
from smartquiz.schemas.leaderboard import LeaderboardEntry, QuizLeaderboard, QuizRef
from smartquiz.services.leaderboard import global_leaderboard, quiz_leaderboard

router = APIRouter()


@router.get("/global", response_model=list[LeaderboardEntry])
def get_global_leaderboard(limit: int | None = None, db: Session = Depends(get_db)):
    """Each player's best completed attempt, best players first."""
    return global_leaderboard(db, clamp_limit(limit))


@router.get("/quiz/{quiz_id}", response_model=QuizLeaderboard)
def get_quiz_leaderboard(
    quiz_id: str,
    limit: int | None = None,
    db: Session = Depends(get_db),
):
    """Top completed attempts on a single quiz."""
    qid = parse_id(quiz_id, "quiz id", missing_status=status.HTTP_400_BAD_REQUEST)
    quiz = db.get(Quiz, qid)
    if quiz is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return QuizLeaderboard(
        quiz=QuizRef.model_validate(quiz),
        entries=quiz_leaderboard(db, qid, clamp_limit(limit)),
    )
