"""Registration, login and token lifecycle routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from smartquiz.api.deps import client_ip, get_current_user
from smartquiz.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    token_claims,
    verify_password,
)
from smartquiz.db.models import USERNAME_MIN, RefreshToken, RoleEnum, User
from smartquiz.db.session import get_db
from smartquiz.schemas.common import MessageResponse
from smartquiz.schemas.user import (
    AccessToken,
    AuthResponse,
    RefreshRequest,
    UserCreate,
    UserLogin,
    UserRead,
)

logger = logging.getLogger(__name__)
router = APIRouter()

PASSWORD_MIN = 6


def _issue_tokens(db: Session, user: User, request: Request) -> AuthResponse:
    """Sign an access/refresh pair and persist the refresh token."""
    claims = token_claims(user)
    access_token = create_access_token(claims)
    refresh_token = create_refresh_token(claims)
    db.add(
        RefreshToken(
            user_id=user.id,
            token=refresh_token,
            user_agent=request.headers.get("user-agent"),
            ip_address=client_ip(request),
        )
    )
    db.commit()
    db.refresh(user)
    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, request: Request, db: Session = Depends(get_db)):
    """Create a new player account and sign them in."""
    username = body.username.strip()
    if not username or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username, email, and password are required",
        )
    if len(body.password) < PASSWORD_MIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {PASSWORD_MIN} characters long",
        )
    if len(username) < USERNAME_MIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Username must be at least {USERNAME_MIN} characters long",
        )

    email = body.email.strip().lower()
    existing = (
        db.query(User)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username or email is already taken",
        )

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(body.password),
        role=RoleEnum.PLAYER,
        badges=[],
    )
    db.add(user)
    db.flush()
    logger.info("Registered user %s (%s)", user.username, user.id)
    return _issue_tokens(db, user, request)


@router.post("/login", response_model=AuthResponse)
def login(body: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Authenticate and return a token pair + user profile."""
    user = db.query(User).filter(User.email == body.email.strip().lower()).first()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account deactivated",
        )
    return _issue_tokens(db, user, request)


@router.post("/refresh", response_model=AccessToken)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a stored, unrevoked refresh token for a new access token."""
    if not body.refresh_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Refresh token is required",
        )
    stored = db.query(RefreshToken).filter(RefreshToken.token == body.refresh_token).first()
    payload = decode_refresh_token(body.refresh_token)
    if stored is None or stored.revoked_at is not None or payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    user = db.get(User, stored.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if payload.get("sub") != str(user.id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    return AccessToken(access_token=create_access_token(token_claims(user)))


@router.post("/logout", response_model=MessageResponse)
def logout(body: RefreshRequest, db: Session = Depends(get_db)):
    """Revoke a refresh token. Unknown or already revoked tokens are ignored."""
    stored = db.query(RefreshToken).filter(RefreshToken.token == body.refresh_token).first()
    if stored is not None and stored.revoked_at is None:
        stored.revoked_at = datetime.now(timezone.utc)
        db.commit()
        logger.info("Revoked refresh token %s for user %s", stored.id, stored.user_id)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user
