"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from smartquiz.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "message": "SmartQuiz API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENV,
        "version": settings.API_VERSION,
    }
