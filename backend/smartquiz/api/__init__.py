"""API route package — imports all routers for main.py."""

from smartquiz.api.health import router as health_router  # noqa: F401
from smartquiz.api.auth import router as auth_router  # noqa: F401
from smartquiz.api.quiz import router as quiz_router  # noqa: F401
from smartquiz.api.attempt import router as attempt_router  # noqa: F401
from smartquiz.api.leaderboard import router as leaderboard_router  # noqa: F401
from smartquiz.api.user import router as user_router  # noqa: F401
