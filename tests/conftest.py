from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

DATABASE_URL = "sqlite+pysqlite:///./test_suite.db"

os.environ.setdefault("DATABASE_URL", DATABASE_URL)
os.environ.setdefault("ENABLE_TRACING", "false")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from prestige.api.deps import get_db_session, get_voting_day
from prestige.api.routes.auth import issue_access_token
from prestige.main import app
from prestige.models import Base, Company

VOTING_DAY = date(2024, 3, 18)


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def make_company(db_session: Session) -> Callable[..., Company]:
    def _make(name: str, *, rating: int = 1500, votes: int = 0, win_percentage: int = 0) -> Company:
        company = Company(name=name, logo=f"/{name.lower()}-logo.png", rating=rating, votes=votes, win_percentage=win_percentage)
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _make


@pytest.fixture()
def voting_day() -> date:
    return VOTING_DAY


@pytest.fixture()
def client(db_session: Session, voting_day: date) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_voting_day] = lambda: voting_day

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db_session, None)
    app.dependency_overrides.pop(get_voting_day, None)


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": "changeme"},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def voter_headers() -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        token = issue_access_token(user_id, "VOTER").access_token
        return {"Authorization": f"Bearer {token}"}

    return _headers
