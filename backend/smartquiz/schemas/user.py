"""User & authentication schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr


class Role(str, Enum):
    ADMIN = "admin"
    PLAYER = "player"


class UserCreate(BaseModel):
    """POST /api/auth/register"""

    username: str
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    """POST /api/auth/login"""

    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    """POST /api/auth/refresh and /api/auth/logout"""

    refresh_token: str


class ProfileUpdate(BaseModel):
    """PUT /api/user/profile: update own profile."""

    username: str | None = None
    avatar: str | None = None


class BadgeCreate(BaseModel):
    """POST /api/user/badges"""

    id: str | None = None
    name: str | None = None
    description: str | None = None
    icon: str | None = None


class BadgeRead(BaseModel):
    id: str
    name: str
    description: str = ""
    icon: str = "🏅"
    earned_at: datetime | None = None


class UserRead(BaseModel):
    """User returned from API — never exposes password."""

    id: uuid.UUID
    username: str
    email: str
    role: Role
    avatar: str = ""
    join_date: datetime
    total_quizzes_attempted: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    badges: list[BadgeRead] = []
    level: int = 1
    experience: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


class UserStats(BaseModel):
    """GET /api/user/stats: dashboard figures from completed attempts."""

    attempts: int
    average: int
    highest: int
    badges: int
    level: int
    experience: int


class AccessToken(BaseModel):
    """JWT access token response."""

    access_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    """Combined auth response: tokens + user profile."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserRead
