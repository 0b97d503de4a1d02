from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from prestige.models import Base, Company, Vote
from prestige.services.votes import DuplicateVoteError, VoterIdentity, record_vote

DAY = date(2024, 3, 18)


@pytest.fixture()
def file_session_factory(tmp_path: Path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'concurrent_votes.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()


def _seed(factory) -> tuple[int, int]:
    with factory() as session:
        alpha = Company(name="Alpha", rating=1500, votes=0, win_percentage=0)
        beta = Company(name="Beta", rating=1500, votes=0, win_percentage=0)
        session.add_all([alpha, beta])
        session.commit()
        return alpha.id, beta.id


def test_simultaneous_votes_from_one_identity_apply_once(file_session_factory) -> None:
    alpha_id, beta_id = _seed(file_session_factory)
    barrier = threading.Barrier(2)

    def submit(winner_id: int) -> str:
        with file_session_factory() as session:
            barrier.wait(timeout=10)
            try:
                record_vote(
                    session,
                    identity=VoterIdentity(anonymous_id="anon-1"),
                    company_id=winner_id,
                    comparison_date=DAY,
                    company_ids=[alpha_id, beta_id],
                )
            except DuplicateVoteError:
                return "duplicate"
            return "recorded"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = sorted(pool.map(submit, [alpha_id, beta_id]))

    assert outcomes == ["duplicate", "recorded"]
    with file_session_factory() as session:
        assert session.scalar(select(func.count(Vote.id))) == 1
        vote = session.scalars(select(Vote)).one()
        winner = session.get(Company, vote.company_id)
        loser_id = beta_id if vote.company_id == alpha_id else alpha_id
        loser = session.get(Company, loser_id)
        assert (winner.rating, winner.votes) == (1516, 1)
        assert (loser.rating, loser.votes) == (1484, 0)


def test_second_insert_waits_for_first_commit_then_fails(file_session_factory) -> None:
    alpha_id, beta_id = _seed(file_session_factory)
    first: Session = file_session_factory()
    first.add(Vote(company_id=alpha_id, anonymous_id="anon-1", comparison_date=DAY))
    first.flush()

    def late_vote() -> str:
        with file_session_factory() as session:
            try:
                record_vote(
                    session,
                    identity=VoterIdentity(anonymous_id="anon-1"),
                    company_id=beta_id,
                    comparison_date=DAY,
                    company_ids=[alpha_id, beta_id],
                )
            except DuplicateVoteError:
                return "duplicate"
            return "recorded"

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(late_vote)
        first.commit()
        first.close()
        assert pending.result(timeout=30) == "duplicate"

    with file_session_factory() as session:
        assert session.scalar(select(func.count(Vote.id))) == 1
        assert session.get(Company, beta_id).rating == 1500
