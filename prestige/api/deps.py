"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Iterator
from datetime import date

from sqlalchemy.orm import Session

from prestige.db.session import SessionLocal
from prestige.services.selector import today_utc


def get_db_session() -> Iterator[Session]:
    """Yield a database session for FastAPI dependencies."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_voting_day() -> date:
    """The current UTC voting day; overridden in tests to pin the clock."""

    return today_utc()


__all__ = ["get_db_session", "get_voting_day"]
