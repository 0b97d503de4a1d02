from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from prestige.models import AuditLog, Company, RatingHistory
from prestige.services.aggregation import get_rating_history, process_daily_updates
from prestige.services.votes import VoterIdentity, record_vote

DAY = date(2024, 3, 18)
NEXT_DAY = DAY + timedelta(days=1)


@pytest.fixture()
def ledger(db_session: Session, make_company):
    a = make_company("Alpha")
    b = make_company("Beta")
    c = make_company("Gamma")
    pair = [a.id, b.id]

    record_vote(db_session, identity=VoterIdentity(anonymous_id="anon-1"), company_id=a.id, comparison_date=DAY, company_ids=pair)
    record_vote(db_session, identity=VoterIdentity(anonymous_id="anon-2"), company_id=b.id, comparison_date=DAY, company_ids=pair)
    record_vote(db_session, identity=VoterIdentity(anonymous_id="anon-1"), company_id=a.id, comparison_date=NEXT_DAY, company_ids=pair)
    return a, b, c


def _rows(session: Session, day: date) -> dict[int, tuple[int, int, int, int]]:
    rows = session.scalars(select(RatingHistory).where(RatingHistory.date == day))
    return {row.company_id: (row.rating, row.daily_change, row.votes, row.win_percentage) for row in rows}


def test_snapshot_reflects_end_of_day_state_when_run_late(db_session: Session, ledger) -> None:
    a, b, c = ledger

    updates = {update.company_id: update for update in process_daily_updates(db_session, DAY)}

    assert (updates[a.id].previous_rating, updates[a.id].current_rating, updates[a.id].daily_change) == (1500, 1499, -1)
    assert (updates[b.id].previous_rating, updates[b.id].current_rating, updates[b.id].daily_change) == (1500, 1501, 1)
    assert (updates[c.id].previous_rating, updates[c.id].current_rating, updates[c.id].daily_change) == (1500, 1500, 0)
    assert _rows(db_session, DAY) == {
        a.id: (1499, -1, 1, 100),
        b.id: (1501, 1, 1, 100),
        c.id: (1500, 0, 0, 0),
    }


def test_rerun_overwrites_instead_of_duplicating(db_session: Session, ledger) -> None:
    process_daily_updates(db_session, DAY)
    first = _rows(db_session, DAY)

    process_daily_updates(db_session, DAY)

    assert _rows(db_session, DAY) == first
    assert len(db_session.scalars(select(RatingHistory)).all()) == 3


def test_latest_day_matches_current_aggregates(db_session: Session, ledger) -> None:
    a, b, _ = ledger

    updates = {update.company_id: update for update in process_daily_updates(db_session, NEXT_DAY)}

    assert (updates[a.id].current_rating, updates[a.id].daily_change, updates[a.id].votes) == (1515, 16, 2)
    assert (updates[b.id].current_rating, updates[b.id].daily_change, updates[b.id].votes) == (1485, -16, 1)


def test_run_is_audited(db_session: Session, ledger) -> None:
    process_daily_updates(db_session, DAY, actor="tester")

    entry = db_session.scalars(
        select(AuditLog).where(AuditLog.action == "rating_history.process_daily_updates")
    ).one()
    assert entry.actor == "tester"
    assert entry.resource_id == DAY.isoformat()
    assert entry.payload == {"companies": 3, "changed": 2}


def test_history_is_returned_in_date_order(db_session: Session, ledger) -> None:
    a, _, _ = ledger
    process_daily_updates(db_session, NEXT_DAY)
    process_daily_updates(db_session, DAY)

    history = get_rating_history(db_session, a.id)
    assert [row.date for row in history] == [DAY, NEXT_DAY]
    assert [row.rating for row in history] == [1499, 1515]
    assert [row.date for row in get_rating_history(db_session, a.id, start=NEXT_DAY)] == [NEXT_DAY]


def test_late_run_ignores_win_percentage_earned_after_the_day(db_session: Session, make_company) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")
    record_vote(
        db_session,
        identity=VoterIdentity(anonymous_id="anon-1"),
        company_id=a.id,
        comparison_date=NEXT_DAY,
        company_ids=[a.id, b.id],
    )

    updates = {update.company_id: update for update in process_daily_updates(db_session, DAY)}

    assert (updates[a.id].current_rating, updates[a.id].daily_change, updates[a.id].votes) == (1500, 0, 0)
    assert updates[a.id].win_percentage == 0
    assert _rows(db_session, DAY)[a.id] == (1500, 0, 0, 0)


def test_late_run_takes_win_percentage_from_earlier_ledger(db_session: Session, make_company) -> None:
    a = make_company("Alpha")
    c = make_company("Gamma", votes=1, win_percentage=50)
    pair = [a.id, c.id]
    record_vote(db_session, identity=VoterIdentity(anonymous_id="anon-1"), company_id=c.id, comparison_date=DAY - timedelta(days=1), company_ids=pair)
    record_vote(db_session, identity=VoterIdentity(anonymous_id="anon-1"), company_id=c.id, comparison_date=NEXT_DAY, company_ids=pair)
    db_session.expire_all()
    assert db_session.get(Company, c.id).win_percentage == 83

    updates = {update.company_id: update for update in process_daily_updates(db_session, DAY)}

    assert (updates[c.id].votes, updates[c.id].win_percentage, updates[c.id].daily_change) == (2, 75, 0)
