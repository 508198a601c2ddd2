"""Pydantic schemas — re‑exported for convenience."""

from smartquiz.schemas.common import MessageResponse, Pagination  # noqa: F401
from smartquiz.schemas.user import (  # noqa: F401
    AccessToken,
    AuthResponse,
    BadgeCreate,
    ProfileUpdate,
    RefreshRequest,
    UserCreate,
    UserLogin,
    UserRead,
    UserStats,
)
from smartquiz.schemas.quiz import (  # noqa: F401
    Difficulty,
    PublishRequest,
    QuestionIn,
    QuizCreate,
    QuizList,
    QuizPublic,
    QuizRead,
    QuizUpdate,
)
from smartquiz.schemas.attempt import (  # noqa: F401
    AnswerResult,
    AnswerSubmit,
    AttemptDetailRead,
    AttemptList,
    AttemptRead,
    AttemptResult,
    AttemptStart,
    AttemptStarted,
)
from smartquiz.schemas.leaderboard import (  # noqa: F401
    LeaderboardEntry,
    QuizLeaderboard,
)
