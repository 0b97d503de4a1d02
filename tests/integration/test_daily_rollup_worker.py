from __future__ import annotations

from datetime import UTC, date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from prestige.models import RatingHistory
from prestige.services.votes import VoterIdentity, record_vote
from workers.daily_rollup.main import run_once


def test_run_once_snapshots_previous_utc_day(db_session: Session, make_company) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")
    record_vote(
        db_session,
        identity=VoterIdentity(anonymous_id="anon-1"),
        company_id=b.id,
        comparison_date=date(2024, 3, 18),
        company_ids=[a.id, b.id],
    )
    factory = sessionmaker(bind=db_session.get_bind(), autoflush=False)

    processed = run_once(now=datetime(2024, 3, 19, 0, 5, tzinfo=UTC), session_factory=factory)

    assert processed == date(2024, 3, 18)
    db_session.expire_all()
    rows = db_session.scalars(select(RatingHistory).order_by(RatingHistory.company_id)).all()
    assert [(row.company_id, row.daily_change) for row in rows] == [(a.id, -16), (b.id, 16)]
