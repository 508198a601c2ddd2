"""SQLAlchemy engine & session factory.

Postgres (psycopg) in deployment; a ``sqlite:///`` DATABASE_URL also works for
local runs of ``seed_db.py`` and the API.
"""

from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from smartquiz.config import settings

# Created on first use so importing the models never opens a connection
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None  # type: ignore[type-arg]


def _connect_args(url: str) -> dict:
    # FastAPI runs sync routes on a threadpool; SQLite refuses cross-thread use by default.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def get_engine() -> Engine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        url = settings.DATABASE_URL
        _engine = create_engine(
            url,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
            connect_args=_connect_args(url),
        )
    return _engine


def get_session_factory() -> sessionmaker:  # type: ignore[type-arg]
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autocommit=False, autoflush=False)
    return _SessionLocal


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def get_db() -> Iterator[Session]:
    """One session per request, closed when the response is done."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
