"""FastAPI dependencies and small helpers shared across routes."""

import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from smartquiz.config import settings
from smartquiz.core.security import decode_access_token
from smartquiz.db.models import User
from smartquiz.db.session import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def parse_id(raw: str, what: str = "id", missing_status: int = status.HTTP_404_NOT_FOUND) -> uuid.UUID:
    """Turn a path/body id into a UUID.

    A malformed id cannot match any record, so by default it is reported the
    same way as a missing one.
    """
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        if missing_status == status.HTTP_400_BAD_REQUEST:
            detail = f"Invalid {what}"
        else:
            detail = f"{what.capitalize()} not found"
        raise HTTPException(status_code=missing_status, detail=detail)


def clamp_limit(limit: int | None) -> int:
    """Page size bounded to ``1..MAX_PAGE_SIZE``."""
    if limit is None:
        return settings.DEFAULT_PAGE_SIZE
    return min(settings.MAX_PAGE_SIZE, max(1, limit))


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Decode JWT and return the authenticated user, or 401."""
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.get(User, uid)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
