"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from smartquiz.config import settings
from smartquiz.api import (
    health_router,
    auth_router,
    quiz_router,
    attempt_router,
    leaderboard_router,
    user_router,
)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s  %(name)-25s  %(levelname)-8s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 SmartQuiz backend starting (env=%s)…", settings.ENV)
    logger.info("🌐 CORS origins: %s", ", ".join(settings.CORS_ORIGINS))
    yield
    logger.info("✅ SmartQuiz backend shut down")


app = FastAPI(
    title="SmartQuiz API",
    description="Author quizzes, take them against the clock, climb the leaderboard",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware ─────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# ── Error handlers ─────────────────────────────────────────────────────────────


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Model-level validation failures are the client's fault."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": detail}
    )


# ── Routers ───────────────────────────────────────────────────────────────────

api = settings.API_PREFIX
app.include_router(health_router, prefix=api, tags=["Health"])
app.include_router(auth_router, prefix=f"{api}/auth", tags=["Auth"])
app.include_router(quiz_router, prefix=f"{api}/quiz", tags=["Quiz"])
app.include_router(attempt_router, prefix=f"{api}/attempt", tags=["Attempt"])
app.include_router(leaderboard_router, prefix=f"{api}/leaderboard", tags=["Leaderboard"])
app.include_router(user_router, prefix=f"{api}/user", tags=["User"])


@app.get("/")
async def root():
    return {
        "name": "SmartQuiz API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": f"{api}/health",
    }
