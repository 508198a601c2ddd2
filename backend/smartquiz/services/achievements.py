"""Running player / quiz statistics and badge awards.

Called once per attempt, at the moment it is completed.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from smartquiz.config import settings
from smartquiz.db.models import Quiz, QuizAttempt, User
from smartquiz.services.scoring import running_mean

logger = logging.getLogger(__name__)


def make_badge(badge_id: str, name: str, description: str = "", icon: str = "🏅") -> dict[str, Any]:
    return {
        "id": badge_id,
        "name": name,
        "description": description,
        "icon": icon,
        "earned_at": datetime.now(timezone.utc).isoformat(),
    }


def award_badge(user: User, badge: dict[str, Any]) -> bool:
    """Give *badge* to *user* unless they already hold its id. Returns True if added."""
    if user.has_badge(badge["id"]):
        return False
    user.badges = [*(user.badges or []), badge]
    logger.info("Awarded badge %s to user %s", badge["id"], user.id)
    return True


def level_for(experience: int) -> int:
    return experience // settings.XP_PER_LEVEL + 1


def record_completion(user: User, quiz: Quiz | None, attempt: QuizAttempt) -> None:
    """Fold a freshly completed attempt into quiz and user statistics."""
    percentage = attempt.percentage

    if quiz is not None:
        quiz.average_score = running_mean(
            quiz.average_score or 0.0, quiz.total_attempts or 0, percentage
        )
        quiz.total_attempts = (quiz.total_attempts or 0) + 1

    completed_before = user.total_quizzes_attempted or 0
    user.average_score = running_mean(user.average_score or 0.0, completed_before, percentage)
    user.total_quizzes_attempted = completed_before + 1
    user.highest_score = max(user.highest_score or 0.0, float(percentage))
    user.experience = (user.experience or 0) + attempt.score * settings.XP_PER_POINT
    user.level = level_for(user.experience)

    if completed_before == 0:
        award_badge(
            user,
            make_badge("first_attempt", "First Attempt", "Completed your first quiz", "🥇"),
        )
    if percentage >= settings.HIGH_SCORE_BADGE_THRESHOLD:
        award_badge(
            user,
            make_badge("high_scorer", "High Scorer", "Scored 90% or above", "🎯"),
        )
